import numpy as np
import pytest

from graphmaker_layout.solver.linalg import (
    feasible_adjust_leq,
    kernel_projection,
    meet_equality_constraints,
    numerical_rank,
    svd,
)
from graphmaker_layout.solver.model import InfeasibleConstraintsError, UnsupportedConstraintsError


def _reconstruct(result):
    k = len(result.lam)
    return result.uT.T @ np.diag(result.lam) @ result.vT[:k]


@pytest.mark.parametrize(
    "matrix",
    [
        [[1.0, 2.0], [3.0, 4.0], [5.0, 6.0]],
        [[1.0, 0.0, -1.0, 0.0], [0.0, 1.0, 0.0, -1.0]],
        [[2.0, 0.0, 0.0]],
    ],
)
def test_svd_reconstructs_any_shape(matrix):
    result = svd(np.array(matrix))

    np.testing.assert_allclose(_reconstruct(result), matrix, atol=1e-12)


def test_full_svd_gives_null_space_basis():
    matrix = np.array([[1.0, 0.0, -1.0, 0.0]])
    result = svd(matrix, full=True)

    assert result.vT.shape == (4, 4)
    null = result.vT[1:]
    np.testing.assert_allclose(matrix @ null.T, 0.0, atol=1e-12)


def test_numerical_rank_ignores_tiny_singular_values():
    assert numerical_rank(np.array([1.0, 1e-9, 0.5])) == 2
    assert numerical_rank(np.array([1e-3, 1e-4]), eps=1e-2) == 0


def test_kernel_projection_is_idempotent_and_annihilates_rows():
    matrix = np.array([[1.0, 1.0, 0.0, 0.0], [0.0, 0.0, 1.0, -1.0]])
    uT, vT, lam = svd(matrix, full=True)
    project = kernel_projection(numerical_rank(lam), vT)
    x = np.array([0.3, -1.2, 2.0, 0.7])

    px = project(x)

    np.testing.assert_allclose(matrix @ px, 0.0, atol=1e-12)
    np.testing.assert_allclose(project(px), px, atol=1e-12)


def test_kernel_projection_with_rank_zero_is_identity():
    project = kernel_projection(0, np.eye(3))
    x = np.array([1.0, 2.0, 3.0])

    np.testing.assert_allclose(project(x), x)


def test_meet_equality_constraints_is_minimal_norm_solution():
    matrix = np.array([[1.0, 0.0, -1.0, 0.0], [0.0, 1.0, 1.0, 0.0]])
    b = np.array([1.0, 2.0])
    uT, vT, lam = svd(matrix, full=True)

    x0 = meet_equality_constraints(uT, vT, lam, b)

    np.testing.assert_allclose(matrix @ x0, b, atol=1e-12)
    np.testing.assert_allclose(x0, np.linalg.pinv(matrix) @ b, atol=1e-12)


def test_feasible_adjust_without_equalities():
    x = feasible_adjust_leq(np.array([2.0, 0.0]), None, np.array([[1.0, 0.0]]), np.array([0.0]))

    np.testing.assert_allclose(x, [-1.0, 0.0], atol=1e-12)


def test_feasible_adjust_stays_in_equality_null_space():
    equality = np.array([[1.0, 0.0, -1.0, 0.0]])
    uT, vT, lam = svd(equality, full=True)
    rank = numerical_rank(lam)
    leq = np.array([[1.0, 0.0, 0.0, 0.0]])
    rhs = np.array([-1.0])

    x = feasible_adjust_leq(np.array([1.0, 0.0, 1.0, 0.0]), vT[rank:], leq, rhs)

    np.testing.assert_allclose(equality @ x, 0.0, atol=1e-12)
    np.testing.assert_allclose(leq @ x, [-2.0], atol=1e-12)


def test_feasible_adjust_rejects_more_inequalities_than_free_dimensions():
    null = np.array([[0.0, 1.0]])
    leq = np.array([[0.0, 1.0], [0.0, -1.0]])

    with pytest.raises(UnsupportedConstraintsError) as exc:
        feasible_adjust_leq(np.zeros(2), null, leq, np.array([-1.0, -3.0]))

    assert "not yet supported" in str(exc.value)


def test_feasible_adjust_rejects_degenerate_inequalities():
    with pytest.raises(InfeasibleConstraintsError):
        feasible_adjust_leq(np.zeros(2), None, np.array([[0.0, 0.0]]), np.array([-1.0]))
