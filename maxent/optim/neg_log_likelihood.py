#!filepath: maxent/optim/neg_log_likelihood.py
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Tuple

import numpy as np
from scipy import sparse
from scipy.special import logsumexp

from maxent.model.data_indexer import IndexedMatrix
from maxent.optim.function import Function
from maxent.utils.errors import ConfigurationError
from maxent.utils.logger import logs


def _evaluate_rows(
    design: sparse.csr_matrix,
    outcomes: np.ndarray,
    counts: np.ndarray,
    params: np.ndarray,
) -> Tuple[float, np.ndarray]:
    """
    Negative log-likelihood and gradient over a block of rows.

    params : (num_outcomes x num_preds)
    returns (value, gradient as (num_outcomes x num_preds))
    """
    rows = np.arange(design.shape[0])

    scores = np.asarray(design @ params.T)          # (rows x outcomes)
    lse = logsumexp(scores, axis=1)

    value = -float(np.dot(counts, scores[rows, outcomes] - lse))

    # expected - empirical, weighted by the row count
    resid = np.exp(scores - lse[:, None])
    resid[rows, outcomes] -= 1.0
    resid *= counts[:, None]

    grad = np.asarray(design.T @ resid).T           # (outcomes x preds)
    return value, grad


class NegLogLikelihood(Function):
    """
    NegLogLikelihood (FINAL / FROZEN)

        f(w) = - sum_i count_i * log p(outcome_i | context_i; w)

    w is the flat vector indexed as outcome * num_preds + pred.
    The last (value, gradient) pair is cached per point, so calling
    value_at() then gradient_at() on the same x evaluates once.
    """

    def __init__(self, matrix: IndexedMatrix):
        self.matrix = matrix
        self.num_preds = matrix.num_preds
        self.num_outcomes = matrix.num_outcomes

        self._design = matrix.design_matrix
        self._outcomes = np.asarray(matrix.outcomes, dtype=np.int64)
        self._counts = np.asarray(matrix.counts, dtype=np.float64)

        self._last_x: Optional[np.ndarray] = None
        self._last_value = 0.0
        self._last_grad: Optional[np.ndarray] = None

    @property
    def dimension(self) -> int:
        return self.num_preds * self.num_outcomes

    # ------------------------------------------------------------------
    def _check(self, x: np.ndarray) -> np.ndarray:
        x = np.asarray(x, dtype=np.float64)
        if x.shape != (self.dimension,):
            raise ValueError(f"point has shape {x.shape}, expected ({self.dimension},)")
        return x

    def _compute(self, params: np.ndarray) -> Tuple[float, np.ndarray]:
        return _evaluate_rows(self._design, self._outcomes, self._counts, params)

    def _evaluate(self, x: np.ndarray) -> None:
        x = self._check(x)
        if self._last_x is not None and np.array_equal(x, self._last_x):
            return

        value, grad = self._compute(x.reshape(self.num_outcomes, self.num_preds))

        self._last_x = x.copy()
        self._last_value = value
        self._last_grad = grad.ravel()

    # ------------------------------------------------------------------
    def value_at(self, x: np.ndarray) -> float:
        self._evaluate(x)
        return self._last_value

    def gradient_at(self, x: np.ndarray) -> np.ndarray:
        self._evaluate(x)
        return self._last_grad.copy()

    # ------------------------------------------------------------------
    def close(self) -> None:
        pass

    def __enter__(self) -> "NegLogLikelihood":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class ParallelNegLogLikelihood(NegLogLikelihood):
    """
    Same objective, rows split into ``threads`` contiguous slices.

    Each slice is evaluated on a worker thread into its own partial
    (value, gradient); partials are summed in slice order, so the result
    does not depend on thread scheduling.

    The worker pool lives as long as the objective; release it with
    close() or by using the objective as a context manager.
    """

    def __init__(self, matrix: IndexedMatrix, threads: int):
        if threads < 1:
            raise ConfigurationError(f"threads must be >= 1, got {threads}")
        super().__init__(matrix)

        self.threads = min(threads, max(1, matrix.num_events))
        self._slices = self._partition(matrix.num_events, self.threads)
        self._pool = ThreadPoolExecutor(max_workers=self.threads, thread_name_prefix="maxent-nll")

        logs.info(
            f"[NegLogLikelihood] parallel | threads={self.threads} rows={matrix.num_events}"
        )

    def close(self) -> None:
        self._pool.shutdown(wait=True)

    @staticmethod
    def _partition(num_rows: int, parts: int) -> List[Tuple[int, int]]:
        bounds = np.linspace(0, num_rows, parts + 1).astype(int)
        return [(int(a), int(b)) for a, b in zip(bounds[:-1], bounds[1:]) if b > a]

    def _compute(self, params: np.ndarray) -> Tuple[float, np.ndarray]:
        def _slice(bounds: Tuple[int, int]) -> Tuple[float, np.ndarray]:
            start, end = bounds
            return _evaluate_rows(
                self._design[start:end],
                self._outcomes[start:end],
                self._counts[start:end],
                params,
            )

        # map() yields in submission order
        partials = list(self._pool.map(_slice, self._slices))

        value = 0.0
        grad = np.zeros_like(params)
        for part_value, part_grad in partials:
            value += part_value
            grad += part_grad
        return value, grad
