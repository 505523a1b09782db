#!filepath: tests/optim/conftest.py
import numpy as np
import pytest

from maxent.optim.function import Function


class QuadraticFunction(Function):
    """f(x, y) = (x - 1)^2 + (y - 5)^2 + 10"""

    @property
    def dimension(self) -> int:
        return 2

    def value_at(self, x):
        return (x[0] - 1) ** 2 + (x[1] - 5) ** 2 + 10

    def gradient_at(self, x):
        return np.array([2 * (x[0] - 1), 2 * (x[1] - 5)])


class RosenbrockFunction(Function):
    """f(x, y) = (1 - x)^2 + 100 (y - x^2)^2"""

    @property
    def dimension(self) -> int:
        return 2

    def value_at(self, x):
        return (1 - x[0]) ** 2 + 100 * (x[1] - x[0] ** 2) ** 2

    def gradient_at(self, x):
        return np.array(
            [
                -2 * (1 - x[0]) - 400 * x[0] * (x[1] - x[0] ** 2),
                200 * (x[1] - x[0] ** 2),
            ]
        )


class SquareFunction(Function):
    """f(x) = x^2"""

    @property
    def dimension(self) -> int:
        return 1

    def value_at(self, x):
        return float(x[0] ** 2)

    def gradient_at(self, x):
        return np.array([2 * x[0]])


class ShiftedSquareFunction(Function):
    """f(x) = (x - 2)^2 + 4"""

    @property
    def dimension(self) -> int:
        return 1

    def value_at(self, x):
        return float((x[0] - 2) ** 2 + 4)

    def gradient_at(self, x):
        return np.array([2 * (x[0] - 2)])


@pytest.fixture
def quadratic() -> QuadraticFunction:
    return QuadraticFunction()


@pytest.fixture
def rosenbrock() -> RosenbrockFunction:
    return RosenbrockFunction()


@pytest.fixture
def square() -> SquareFunction:
    return SquareFunction()


@pytest.fixture
def shifted_square() -> ShiftedSquareFunction:
    return ShiftedSquareFunction()
