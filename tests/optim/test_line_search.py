#!filepath: tests/optim/test_line_search.py
import numpy as np
import pytest

from maxent.optim.function import Regularized, pseudo_gradient
from maxent.optim.line_search import (
    LineSearchResult,
    constrained_line_search,
    line_search,
)

TOLERANCE = 0.01


def _initial(function, x0):
    x = np.array([x0], dtype=float)
    return LineSearchResult.initial(function.value_at(x), function.gradient_at(x), x)


def _initial_l1(function, x0):
    x = np.array([x0], dtype=float)
    grad = function.gradient_at(x)
    pg = pseudo_gradient(x, grad, function.l1_cost)
    return LineSearchResult.initial_for_l1(function.value_at(x), grad, pg, x)


def test_optimal_point_gives_zero_step(square):
    lsr = _initial(square, 0.0)
    line_search(square, np.array([1.0]), lsr, 1.0)

    assert lsr.step_size == 0.0
    assert lsr.failed
    np.testing.assert_array_equal(lsr.next_point, [0.0])
    assert lsr.value_at_next == 0.0


def test_optimal_point_wrong_direction_gives_zero_step(square):
    lsr = _initial(square, 0.0)
    line_search(square, np.array([-1.0]), lsr, 1.0)

    assert lsr.step_size == 0.0


def test_descent_direction_gives_positive_step(shifted_square):
    lsr = _initial(shifted_square, 0.0)
    line_search(shifted_square, np.array([1.0]), lsr, 1.0)

    assert TOLERANCE < lsr.step_size <= 1.0
    np.testing.assert_allclose(lsr.next_point, [1.0])
    assert lsr.value_at_next == pytest.approx(5.0)
    np.testing.assert_allclose(lsr.grad_at_next, [-2.0])
    np.testing.assert_allclose(lsr.curr_point, [0.0])
    assert lsr.value_at_curr == pytest.approx(8.0)


def test_ascent_direction_gives_zero_step(shifted_square):
    lsr = _initial(shifted_square, 0.0)
    line_search(shifted_square, np.array([-1.0]), lsr, 1.0)

    assert lsr.step_size == 0.0
    np.testing.assert_array_equal(lsr.next_point, [0.0])
    assert lsr.value_at_next == pytest.approx(8.0)


def test_backtracks_from_overshooting_step(shifted_square):
    lsr = _initial(shifted_square, 0.0)
    line_search(shifted_square, np.array([1.0]), lsr, 8.0)

    # 8 and 4 overshoot, 2 lands on the minimum
    assert lsr.step_size == 2.0
    np.testing.assert_allclose(lsr.next_point, [2.0])
    assert lsr.fct_eval_count == 3


def test_search_state_chains(shifted_square):
    lsr = _initial(shifted_square, 0.0)
    line_search(shifted_square, np.array([1.0]), lsr, 1.0)
    line_search(shifted_square, np.array([1.0]), lsr, 1.0)

    np.testing.assert_allclose(lsr.curr_point, [1.0])
    np.testing.assert_allclose(lsr.next_point, [2.0])
    assert lsr.value_at_next == pytest.approx(4.0)


def test_constrained_search_accepts_step_inside_orthant(shifted_square):
    f = Regularized(shifted_square, l1_cost=1.0)
    lsr = _initial_l1(f, 0.0)

    # pseudo-gradient at 0: g + l1 = -4 + 1
    np.testing.assert_allclose(lsr.pseudo_grad_at_next, [-3.0])

    constrained_line_search(f, np.array([3.0]), lsr, f.l1_cost, 1.0 / 3.0)

    assert lsr.step_size == pytest.approx(1.0 / 3.0)
    np.testing.assert_allclose(lsr.next_point, [1.0])
    assert lsr.value_at_next == pytest.approx(6.0)
    np.testing.assert_allclose(lsr.pseudo_grad_at_next, [-1.0])


def test_constrained_search_projects_to_zero(square):
    f = Regularized(square, l1_cost=1.0)
    lsr = _initial_l1(f, 1.0)

    constrained_line_search(f, np.array([-5.0]), lsr, f.l1_cost, 1.0)

    assert lsr.step_size == 1.0
    np.testing.assert_array_equal(lsr.next_point, [0.0])
    assert lsr.value_at_next == 0.0
    np.testing.assert_array_equal(lsr.sign_vector, [1.0])


def test_constrained_search_failure_keeps_point(square):
    f = Regularized(square, l1_cost=1.0)
    lsr = _initial_l1(f, 1.0)

    constrained_line_search(f, np.array([1.0]), lsr, f.l1_cost, 1.0)

    assert lsr.step_size == 0.0
    np.testing.assert_array_equal(lsr.next_point, [1.0])
    assert lsr.value_at_next == 2.0
