"""Null-space projections and feasible points for linear constraint systems.

The equality constraints ``A x = b`` are handled through the SVD of ``A``:
the right singular vectors with non-zero singular values span the row space,
the remaining ones (``V0``) span the null space, and every move of the form
``x + V0^T alpha`` keeps the equalities satisfied.

Inequalities ``L x <= c`` are made feasible by moving inside that null space.
"""

from __future__ import annotations

import logging
from typing import Callable

import numpy as np
import scipy.linalg

from ..constants import ZERO_TOLERANCE
from ..logging_utils import apply_debug_logging
from .model import InfeasibleConstraintsError, SvdResult, UnsupportedConstraintsError

logger = logging.getLogger(__name__)

Projection = Callable[[np.ndarray], np.ndarray]


def svd(matrix: np.ndarray, full: bool = False) -> SvdResult:
    """Return the SVD of a non-empty matrix of any shape.

    The decomposition is always taken of the orientation with at least as
    many rows as columns; for wide matrices the transpose is decomposed and
    the roles of ``u`` and ``v`` are swapped on the way out. With ``full``
    the right singular vectors cover the whole column space, which is needed
    to read off a null-space basis.
    """

    matrix = np.atleast_2d(np.asarray(matrix, dtype=float))
    rows, cols = matrix.shape
    if rows >= cols:
        u, lam, vh = scipy.linalg.svd(matrix, full_matrices=False)
        return SvdResult(uT=u.T, vT=vh, lam=lam)
    u, lam, vh = scipy.linalg.svd(matrix.T, full_matrices=full)
    return SvdResult(uT=vh, vT=u.T, lam=lam)


def numerical_rank(lam: np.ndarray, eps: float = ZERO_TOLERANCE) -> int:
    return int(np.count_nonzero(np.abs(lam) > eps))


def kernel_projection(rank: int, vT: np.ndarray) -> Projection:
    """Return ``P(x) = x - sum_{k < rank} (v_k . x) v_k``, the projection onto the null space."""

    basis = np.array(vT[:rank], dtype=float)

    def project(x: np.ndarray) -> np.ndarray:
        x = np.asarray(x, dtype=float)
        if basis.size == 0:
            return x.copy()
        return x - basis.T @ (basis @ x)

    return project


def _scaled(coefs: np.ndarray, lam: np.ndarray, eps: float) -> np.ndarray:
    safe = np.where(np.abs(lam) > eps, lam, 1.0)
    return np.where(np.abs(lam) > eps, coefs / safe, 0.0)


def meet_equality_constraints(
    uT: np.ndarray, vT: np.ndarray, lam: np.ndarray, b: np.ndarray, eps: float = ZERO_TOLERANCE
) -> np.ndarray:
    """Return the minimal-norm solution ``x0 = sum_k (u_k . b / lam_k) v_k`` of ``A x = b``.

    Singular values at or below ``eps`` contribute nothing.
    """

    k = len(lam)
    coefs = _scaled(np.asarray(uT[:k]) @ np.asarray(b, dtype=float), np.asarray(lam), eps)
    return np.asarray(vT[:k]).T @ coefs


def feasible_adjust_leq(
    initial: np.ndarray,
    nullspace: np.ndarray,
    constraints: np.ndarray,
    rhs: np.ndarray,
    *,
    shift: float = 1.0,
    eps: float = ZERO_TOLERANCE,
) -> np.ndarray:
    """Move ``initial`` inside the null space until ``constraints @ x <= rhs``.

    ``nullspace`` holds the null-space basis of the equality constraints as
    rows; ``None`` means there are no equality constraints. The
    displacement is the minimal-norm null-space move that puts every
    inequality at distance ``shift`` inside its boundary.
    """

    initial = np.asarray(initial, dtype=float)
    L = np.atleast_2d(np.asarray(constraints, dtype=float))
    c = np.asarray(rhs, dtype=float)
    n = initial.size
    s = L.shape[0]
    V0 = None if nullspace is None else np.asarray(nullspace, dtype=float).reshape(-1, n)
    free = n if V0 is None else V0.shape[0]

    if free < s:
        raise UnsupportedConstraintsError(
            f"Over-constrained inequality constraints are not yet supported: "
            f"{s} inequalities for {free} free dimension(s)."
        )

    ell_v0 = L @ V0.T if V0 is not None else L
    uT, vT, lam = svd(ell_v0)
    while np.all(np.abs(lam) < eps) and shift > eps:
        shift /= 2.0

    redundancy = int(np.count_nonzero(np.abs(lam) < eps))
    if redundancy == len(lam):
        raise InfeasibleConstraintsError("Inequality constraints are inconsistent")
    if redundancy > 0:
        logger.warning(
            "Inequality constraints are rank deficient within the equality null space "
            "(%d of %d singular values near zero)",
            redundancy,
            len(lam),
        )

    y = c - L @ initial - shift
    alpha = vT.T @ _scaled(uT @ y, lam, eps)
    if V0 is not None:
        alpha = V0.T @ alpha
    return initial + alpha


apply_debug_logging(globals(), logger=logger)


__all__ = [
    "Projection",
    "feasible_adjust_leq",
    "kernel_projection",
    "meet_equality_constraints",
    "numerical_rank",
    "svd",
]
