#!filepath: maxent/optim/line_search.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from maxent.optim.function import Function, pseudo_gradient

# sufficient decrease constant (Armijo)
C = 1e-4
# backtracking shrink factor
RHO = 0.5
# below this the search gives up
MIN_STEP_SIZE = 1e-10


@dataclass
class LineSearchResult:
    """
    LineSearchResult

    Mutable search state carried between minimizer iterations.
    ``*_curr`` describes the point the search started from, ``*_next``
    the accepted point. A failed search reports ``step_size == 0.0``
    with next == curr.

    pseudo_grad_at_next / sign_vector are only set in orthant-wise (L1)
    mode.
    """

    step_size: float
    value_at_curr: float
    value_at_next: float
    grad_at_curr: np.ndarray
    grad_at_next: np.ndarray
    curr_point: np.ndarray
    next_point: np.ndarray
    fct_eval_count: int = 0
    pseudo_grad_at_next: Optional[np.ndarray] = None
    sign_vector: Optional[np.ndarray] = None

    @classmethod
    def initial(cls, value: float, grad: np.ndarray, x: np.ndarray) -> "LineSearchResult":
        return cls(
            step_size=0.0,
            value_at_curr=value,
            value_at_next=value,
            grad_at_curr=grad,
            grad_at_next=grad,
            curr_point=x,
            next_point=x,
            fct_eval_count=0,
        )

    @classmethod
    def initial_for_l1(
        cls,
        value: float,
        grad: np.ndarray,
        pseudo_grad: np.ndarray,
        x: np.ndarray,
    ) -> "LineSearchResult":
        lsr = cls.initial(value, grad, x)
        lsr.pseudo_grad_at_next = pseudo_grad
        lsr.sign_vector = np.zeros_like(x)
        return lsr

    @property
    def failed(self) -> bool:
        return self.step_size == 0.0

    def _advance(
        self,
        step_size: float,
        next_point: np.ndarray,
        value_at_next: float,
        grad_at_next: np.ndarray,
        fct_eval_count: int,
    ) -> None:
        self.step_size = step_size
        self.value_at_curr = self.value_at_next
        self.grad_at_curr = self.grad_at_next
        self.curr_point = self.next_point
        self.value_at_next = value_at_next
        self.grad_at_next = grad_at_next
        self.next_point = next_point
        self.fct_eval_count = fct_eval_count

    def _stay(self, fct_eval_count: int) -> None:
        self.step_size = 0.0
        self.value_at_curr = self.value_at_next
        self.grad_at_curr = self.grad_at_next
        self.curr_point = self.next_point
        self.fct_eval_count = fct_eval_count


def line_search(
    function: Function,
    direction: np.ndarray,
    lsr: LineSearchResult,
    initial_step: float,
) -> None:
    """
    Backtracking Armijo search from ``lsr.next_point`` along ``direction``.

    Accepts the first a = initial_step * RHO^k with

        f(x + a d) <= f(x) + C * a * (d . g)

    Updates ``lsr`` in place. When a falls below MIN_STEP_SIZE the step
    is 0.0 and the state stays at x.
    """
    x = lsr.next_point
    value_at_x = lsr.value_at_next
    dir_grad = float(np.dot(direction, lsr.grad_at_next))

    step = float(initial_step)
    evals = lsr.fct_eval_count

    while True:
        next_point = x + step * direction
        value_at_next = function.value_at(next_point)
        evals += 1

        if value_at_next <= value_at_x + C * step * dir_grad:
            break

        step *= RHO
        if step < MIN_STEP_SIZE:
            lsr._stay(evals)
            return

    grad_at_next = function.gradient_at(next_point)
    lsr._advance(step, next_point, value_at_next, grad_at_next, evals)


def constrained_line_search(
    function: Function,
    direction: np.ndarray,
    lsr: LineSearchResult,
    l1_cost: float,
    initial_step: float,
) -> None:
    """
    Orthant-wise variant used with L1 regularization.

    The orthant is fixed by sign(x), or by -pseudo_grad where x is 0.
    Trial points leaving that orthant are projected onto it (coordinate
    set to 0). Sufficient decrease is measured against the
    pseudo-gradient:

        f(p) <= f(x) + C * sum((p - x) * pg)
    """
    x = lsr.next_point
    value_at_x = lsr.value_at_next
    pg_at_x = lsr.pseudo_grad_at_next

    sign_x = np.where(x == 0, -pg_at_x, x)

    step = float(initial_step)
    evals = lsr.fct_eval_count

    while True:
        next_point = x + step * direction
        next_point[next_point * sign_x <= 0] = 0.0

        value_at_next = function.value_at(next_point)
        evals += 1

        if value_at_next <= value_at_x + C * float(np.dot(next_point - x, pg_at_x)):
            break

        step *= RHO
        if step < MIN_STEP_SIZE:
            lsr._stay(evals)
            lsr.sign_vector = sign_x
            return

    grad_at_next = function.gradient_at(next_point)
    lsr._advance(step, next_point, value_at_next, grad_at_next, evals)
    lsr.pseudo_grad_at_next = pseudo_gradient(next_point, grad_at_next, l1_cost)
    lsr.sign_vector = sign_x
