#!filepath: maxent/optim/function.py
from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np


class Function(ABC):
    """
    Differentiable objective (FINAL / FROZEN)

    Contract:
    - dimension is fixed for the lifetime of the function
    - value_at(x) -> float
    - gradient_at(x) -> ndarray of length ``dimension``
    - l1_cost > 0 switches the minimizer to orthant-wise mode; the L1 term
      is then part of value_at() but NOT of gradient_at()
    """

    l1_cost: float = 0.0

    @property
    @abstractmethod
    def dimension(self) -> int:
        ...

    @abstractmethod
    def value_at(self, x: np.ndarray) -> float:
        ...

    @abstractmethod
    def gradient_at(self, x: np.ndarray) -> np.ndarray:
        ...

    def initial_point(self) -> np.ndarray:
        return np.zeros(self.dimension, dtype=np.float64)


class Regularized(Function):
    """
    f(x) + l2 * sum(x^2) + l1 * sum(|x|)

    The gradient only carries the smooth L2 part (2 * l2 * x).
    """

    def __init__(self, function: Function, l1_cost: float = 0.0, l2_cost: float = 0.0):
        if l1_cost < 0 or l2_cost < 0:
            raise ValueError(f"regularization costs must be >= 0, got l1={l1_cost} l2={l2_cost}")
        self.function = function
        self.l1_cost = float(l1_cost)
        self.l2_cost = float(l2_cost)

    @property
    def dimension(self) -> int:
        return self.function.dimension

    def initial_point(self) -> np.ndarray:
        return self.function.initial_point()

    def value_at(self, x: np.ndarray) -> float:
        value = self.function.value_at(x)
        if self.l2_cost > 0:
            value += self.l2_cost * float(np.dot(x, x))
        if self.l1_cost > 0:
            value += self.l1_cost * float(np.abs(x).sum())
        return value

    def gradient_at(self, x: np.ndarray) -> np.ndarray:
        grad = self.function.gradient_at(x)
        if self.l2_cost > 0:
            grad = grad + 2.0 * self.l2_cost * x
        return grad


def pseudo_gradient(x: np.ndarray, grad: np.ndarray, l1_cost: float) -> np.ndarray:
    """
    OWL-QN pseudo-gradient of f(x) + l1 * |x|_1.

        x_i != 0 : g_i + l1 * sign(x_i)
        x_i == 0 : g_i + l1  if g_i + l1 < 0
                   g_i - l1  if g_i - l1 > 0
                   0         otherwise
    """
    pg = grad + l1_cost * np.sign(x)

    at_zero = x == 0
    if at_zero.any():
        g = grad[at_zero]
        pg[at_zero] = np.where(
            g + l1_cost < 0, g + l1_cost, np.where(g - l1_cost > 0, g - l1_cost, 0.0)
        )
    return pg
