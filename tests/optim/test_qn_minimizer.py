#!filepath: tests/optim/test_qn_minimizer.py
import numpy as np
import pytest

from maxent.optim.function import Function, Regularized
from maxent.optim.qn_minimizer import QNMinimizer, Termination
from maxent.utils.errors import ConfigurationError


class WrongGradientFunction(Function):
    """(x - 2)^2 with the gradient sign flipped: every direction climbs."""

    @property
    def dimension(self) -> int:
        return 1

    def value_at(self, x):
        return float((x[0] - 2) ** 2)

    def gradient_at(self, x):
        return np.array([-2 * (x[0] - 2)])


def test_quadratic_function(quadratic):
    minimizer = QNMinimizer()
    x = minimizer.minimize(quadratic)

    assert x[0] == pytest.approx(1.0, abs=1e-6)
    assert x[1] == pytest.approx(5.0, abs=1e-6)
    assert quadratic.value_at(x) == pytest.approx(10.0, abs=1e-6)
    assert minimizer.last_result.termination is Termination.CONVERGED


def test_rosenbrock_function(rosenbrock):
    minimizer = QNMinimizer()
    x = minimizer.minimize(rosenbrock)

    assert x[0] == pytest.approx(1.0, abs=1e-5)
    assert x[1] == pytest.approx(1.0, abs=1e-5)
    assert rosenbrock.value_at(x) == pytest.approx(0.0, abs=1e-10)


def test_result_history(rosenbrock):
    minimizer = QNMinimizer()
    x = minimizer.minimize(rosenbrock)
    result = minimizer.last_result

    assert result.converged
    assert result.iterations == len(result.history)
    np.testing.assert_array_equal(result.point, x)
    assert result.value == pytest.approx(rosenbrock.value_at(x))

    values = [record.value for record in result.history]
    # Armijo steps only ever decrease the objective
    assert all(b <= a for a, b in zip(values, values[1:]))
    assert [record.iteration for record in result.history] == list(range(1, result.iterations + 1))


def test_iteration_budget(rosenbrock):
    minimizer = QNMinimizer(max_iterations=2)
    x = minimizer.minimize(rosenbrock)

    assert minimizer.last_result.termination is Termination.MAX_ITERATIONS
    assert minimizer.last_result.iterations == 2
    assert rosenbrock.value_at(x) < rosenbrock.value_at(np.zeros(2))


def test_function_evaluation_budget(rosenbrock):
    minimizer = QNMinimizer(max_fct_eval=3)
    minimizer.minimize(rosenbrock)

    assert minimizer.last_result.termination is Termination.MAX_FCT_EVAL


def test_line_search_failure_returns_start():
    minimizer = QNMinimizer()
    x = minimizer.minimize(WrongGradientFunction())

    assert minimizer.last_result.termination is Termination.LINE_SEARCH_FAILED
    np.testing.assert_array_equal(x, [0.0])


def test_stationary_start_converges_immediately(quadratic):
    class AtMinimum(type(quadratic)):
        def initial_point(self):
            return np.array([1.0, 5.0])

    minimizer = QNMinimizer()
    x = minimizer.minimize(AtMinimum())

    np.testing.assert_array_equal(x, [1.0, 5.0])
    assert minimizer.last_result.termination is Termination.CONVERGED
    assert minimizer.last_result.iterations == 0


def test_evaluator_called_every_ten_iterations(rosenbrock):
    calls = []
    minimizer = QNMinimizer(evaluator=lambda i, x: calls.append(i))
    minimizer.minimize(rosenbrock)

    iterations = minimizer.last_result.iterations
    assert calls == list(range(10, iterations + 1, 10))


def test_deterministic(rosenbrock):
    a = QNMinimizer().minimize(rosenbrock)
    b = QNMinimizer().minimize(rosenbrock)

    np.testing.assert_array_equal(a, b)


def test_l1_soft_thresholds(quadratic):
    # minimum of (x-1)^2 + (y-5)^2 + 10 + 4(|x| + |y|) is (0, 3)
    f = Regularized(quadratic, l1_cost=4.0)
    minimizer = QNMinimizer()
    x = minimizer.minimize(f)

    assert x[0] == 0.0
    assert x[1] == pytest.approx(3.0, abs=1e-4)
    assert minimizer.last_result.converged


def test_l2_shrinks_solution(quadratic):
    # (x-1)^2 + x^2 -> x = 0.5 ; (y-5)^2 + y^2 -> y = 2.5
    f = Regularized(quadratic, l2_cost=1.0)
    x = QNMinimizer().minimize(f)

    np.testing.assert_allclose(x, [0.5, 2.5], atol=1e-6)


@pytest.mark.parametrize(
    "kwargs",
    [{"m": 0}, {"max_iterations": 0}, {"max_fct_eval": 0}],
)
def test_invalid_settings(kwargs):
    with pytest.raises(ConfigurationError):
        QNMinimizer(**kwargs)
