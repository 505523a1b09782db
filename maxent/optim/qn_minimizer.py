#!filepath: maxent/optim/qn_minimizer.py
from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Deque, List, Optional, Tuple

import numpy as np

from maxent.optim.function import Function, pseudo_gradient
from maxent.optim.line_search import LineSearchResult, constrained_line_search, line_search
from maxent.utils.errors import ConfigurationError
from maxent.utils.logger import logs

Evaluator = Callable[[int, np.ndarray], None]

EVALUATE_EVERY = 10


class Termination(str, Enum):
    CONVERGED = "CONVERGED"
    MAX_ITERATIONS = "MAX_ITERATIONS"
    MAX_FCT_EVAL = "MAX_FCT_EVAL"
    LINE_SEARCH_FAILED = "LINE_SEARCH_FAILED"


@dataclass(frozen=True)
class IterationRecord:
    iteration: int
    value: float
    grad_norm: float
    step_size: float
    fct_evals: int


@dataclass
class MinimizerResult:
    """
    Outcome of one minimize() call. ``point`` is the best point found,
    also when the run did not converge.
    """

    point: np.ndarray
    value: float
    iterations: int
    termination: Termination
    fct_evals: int = 0
    history: List[IterationRecord] = field(default_factory=list)

    @property
    def converged(self) -> bool:
        return self.termination is Termination.CONVERGED


class QNMinimizer:
    """
    QNMinimizer (FINAL / FROZEN)

    Limited-memory BFGS; orthant-wise (OWL-QN) when the function reports
    ``l1_cost > 0``.

    Iteration:
        direction = -H * g            (two-loop recursion over the last m (s, y))
        step      = line search       (1 / ||d|| on the first iteration, else 1.0)
        history  <- (s, y)            (skipped when y . s <= 0)

    Termination:
    - CONVERGED          |f_prev - f| / |f_prev| < converge_tolerance
                         or ||g|| / max(1, ||x||) < rel_grad_norm_tol
    - MAX_ITERATIONS     iteration budget spent
    - MAX_FCT_EVAL       function evaluation budget spent
    - LINE_SEARCH_FAILED no step on a fresh steepest-descent direction

    A failed line search with a non-empty history drops the history and
    retries once along the steepest-descent direction. Non-convergence is
    logged, never raised.
    """

    def __init__(
        self,
        m: int = 15,
        max_iterations: int = 100,
        max_fct_eval: int = 30000,
        converge_tolerance: float = 1e-4,
        rel_grad_norm_tol: float = 1e-8,
        evaluator: Optional[Evaluator] = None,
    ):
        if m <= 0:
            raise ConfigurationError(f"m must be > 0, got {m}")
        if max_iterations <= 0:
            raise ConfigurationError(f"max_iterations must be > 0, got {max_iterations}")
        if max_fct_eval <= 0:
            raise ConfigurationError(f"max_fct_eval must be > 0, got {max_fct_eval}")

        self.m = m
        self.max_iterations = max_iterations
        self.max_fct_eval = max_fct_eval
        self.converge_tolerance = converge_tolerance
        self.rel_grad_norm_tol = rel_grad_norm_tol
        self.evaluator = evaluator

        self.last_result: Optional[MinimizerResult] = None

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------
    def minimize(self, function: Function) -> np.ndarray:
        l1_cost = float(getattr(function, "l1_cost", 0.0) or 0.0)
        l1 = l1_cost > 0

        x = np.asarray(function.initial_point(), dtype=np.float64).copy()
        if x.shape != (function.dimension,):
            raise ConfigurationError(
                f"initial point has shape {x.shape}, expected ({function.dimension},)"
            )

        value = function.value_at(x)
        grad = function.gradient_at(x)

        if l1:
            lsr = LineSearchResult.initial_for_l1(value, grad, pseudo_gradient(x, grad, l1_cost), x)
        else:
            lsr = LineSearchResult.initial(value, grad, x)
        lsr.fct_eval_count = 1

        logs.info(
            f"[QNMinimizer] start | dimension={function.dimension} m={self.m} "
            f"max_iterations={self.max_iterations} l1={l1_cost}"
        )
        logs.debug(f"[QNMinimizer] initial value={value:.6f}")

        history: Deque[Tuple[np.ndarray, np.ndarray, float]] = deque(maxlen=self.m)
        records: List[IterationRecord] = []
        termination = Termination.MAX_ITERATIONS

        for iteration in range(1, self.max_iterations + 1):
            if not np.any(self._grad(lsr, l1)):
                # stationary point, nothing left to descend
                termination = Termination.CONVERGED
                break

            initial_step = 1.0 if iteration > 1 else None
            stepped = self._step(function, lsr, history, l1_cost, initial_step)

            if not stepped and history:
                logs.debug(f"[QNMinimizer] iteration {iteration}: line search failed, dropping history")
                history.clear()
                stepped = self._step(function, lsr, history, l1_cost, None)

            if not stepped:
                termination = Termination.LINE_SEARCH_FAILED
                break

            s = lsr.next_point - lsr.curr_point
            y = lsr.grad_at_next - lsr.grad_at_curr
            sy = float(np.dot(s, y))
            if sy > 0:
                history.append((s, y, 1.0 / sy))
            else:
                logs.debug(f"[QNMinimizer] iteration {iteration}: skipped pair with y.s={sy:.3e}")

            grad_norm = float(np.linalg.norm(self._grad(lsr, l1)))
            records.append(
                IterationRecord(
                    iteration=iteration,
                    value=lsr.value_at_next,
                    grad_norm=grad_norm,
                    step_size=lsr.step_size,
                    fct_evals=lsr.fct_eval_count,
                )
            )
            logs.debug(
                f"[QNMinimizer] {iteration:>4}: value={lsr.value_at_next:.6f} "
                f"grad_norm={grad_norm:.3e} step={lsr.step_size:.3e}"
            )

            if self.evaluator is not None and iteration % EVALUATE_EVERY == 0:
                self.evaluator(iteration, lsr.next_point)

            if self._converged(lsr, grad_norm):
                termination = Termination.CONVERGED
                break

            if lsr.fct_eval_count > self.max_fct_eval:
                termination = Termination.MAX_FCT_EVAL
                break

        result = MinimizerResult(
            point=lsr.next_point.copy(),
            value=lsr.value_at_next,
            iterations=len(records),
            termination=termination,
            fct_evals=lsr.fct_eval_count,
            history=records,
        )
        self.last_result = result

        if termination is Termination.CONVERGED:
            logs.info(
                f"[QNMinimizer] converged | iterations={result.iterations} value={result.value:.6f}"
            )
        else:
            logs.warning(
                f"[QNMinimizer] stopped without convergence | reason={termination.value} "
                f"iterations={result.iterations} value={result.value:.6f}"
            )

        return result.point

    # ------------------------------------------------------------------
    # internals
    # ------------------------------------------------------------------
    @staticmethod
    def _grad(lsr: LineSearchResult, l1: bool) -> np.ndarray:
        return lsr.pseudo_grad_at_next if l1 else lsr.grad_at_next

    def _step(
        self,
        function: Function,
        lsr: LineSearchResult,
        history: Deque[Tuple[np.ndarray, np.ndarray, float]],
        l1_cost: float,
        initial_step: Optional[float],
    ) -> bool:
        """One direction + line search. False when no step was taken."""
        l1 = l1_cost > 0
        grad = self._grad(lsr, l1)

        direction = self._direction(grad, history)
        if l1:
            # keep only coordinates that descend along the pseudo-gradient
            direction[direction * grad >= 0] = 0.0

        norm = float(np.linalg.norm(direction))
        if norm == 0.0:
            return False

        step = initial_step if initial_step is not None else 1.0 / norm

        if l1:
            constrained_line_search(function, direction, lsr, l1_cost, step)
        else:
            line_search(function, direction, lsr, step)

        return not lsr.failed

    @staticmethod
    def _direction(
        grad: np.ndarray,
        history: Deque[Tuple[np.ndarray, np.ndarray, float]],
    ) -> np.ndarray:
        """Two-loop recursion; returns -H * grad."""
        q = grad.copy()
        if not history:
            return -q

        alphas = []
        for s, y, rho in reversed(history):
            alpha = rho * float(np.dot(s, q))
            q -= alpha * y
            alphas.append(alpha)

        # initial Hessian scaling from the newest pair
        s, y, _ = history[-1]
        q *= float(np.dot(s, y)) / float(np.dot(y, y))

        for (s, y, rho), alpha in zip(history, reversed(alphas)):
            beta = rho * float(np.dot(y, q))
            q += (alpha - beta) * s

        return -q

    def _converged(self, lsr: LineSearchResult, grad_norm: float) -> bool:
        prev, curr = lsr.value_at_curr, lsr.value_at_next
        change = abs(prev - curr)
        rate = change / abs(prev) if prev != 0 else change
        if rate < self.converge_tolerance:
            logs.debug(f"[QNMinimizer] function change rate {rate:.3e} below {self.converge_tolerance}")
            return True

        x_norm = max(1.0, float(np.linalg.norm(lsr.next_point)))
        if grad_norm / x_norm < self.rel_grad_norm_tol:
            logs.debug(f"[QNMinimizer] relative gradient norm below {self.rel_grad_norm_tol}")
            return True

        return False
