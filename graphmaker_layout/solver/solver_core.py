from __future__ import annotations

import logging
import math
from typing import Any, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from ..constants import MACHINE_EPSILON, ZERO_TOLERANCE
from ..constraints import ConstraintSet
from ..logging_utils import apply_debug_logging
from ..validate import ValidationError
from .config import resolve_options
from .linalg import feasible_adjust_leq, kernel_projection, meet_equality_constraints, numerical_rank, svd
from .model import (
    ConstraintDimensionError,
    EquilibriumResult,
    InfeasibleConstraintsError,
    LayoutOptions,
    Point,
    Termination,
)

logger = logging.getLogger(__name__)

ConstraintLike = Union[ConstraintSet, Mapping[str, Any], None]


def safe_coulomb(dx: float, dy: float, eps: float = ZERO_TOLERANCE) -> Tuple[float, float]:
    """Repulsive force of one unit charge on another separated by ``(dx, dy)``.

    Ordinary inverse-square law when the squared distance exceeds ``eps``;
    capped at unit magnitude when the charges are closer than that, and the
    sign of each delta when they coincide numerically.
    """

    rsq = dx * dx + dy * dy
    if rsq > eps:
        return dx / rsq, dy / rsq
    if rsq > MACHINE_EPSILON:
        r = math.sqrt(rsq)
        return dx / r, dy / r
    return float(np.sign(dx)), float(np.sign(dy))


def _pair_forces(diff: np.ndarray, eps: float) -> np.ndarray:
    rsq = np.einsum("...k,...k->...", diff, diff)
    far = rsq > eps
    near = (rsq > MACHINE_EPSILON) & ~far
    scale = np.zeros_like(rsq)
    scale[far] = 1.0 / rsq[far]
    scale[near] = 1.0 / np.sqrt(rsq[near])
    forces = diff * scale[..., None]
    coincident = ~(far | near)
    forces[coincident] = np.sign(diff[coincident])
    return forces


def coulomb_forces(points: np.ndarray, eps: float = ZERO_TOLERANCE, fixed: Optional[np.ndarray] = None) -> np.ndarray:
    """Total repulsion on each of ``points`` (shape ``(N, 2)``) from all others and from ``fixed``."""

    diff = points[:, None, :] - points[None, :, :]
    pair = _pair_forces(diff, eps)
    idx = np.arange(points.shape[0])
    pair[idx, idx] = 0.0
    total = pair.sum(axis=1)
    if fixed is not None and len(fixed):
        total += _pair_forces(points[:, None, :] - fixed[None, :, :], eps).sum(axis=1)
    return total


def _as_constraint_set(value: ConstraintLike) -> ConstraintSet:
    if value is None:
        return ConstraintSet.empty()
    if isinstance(value, ConstraintSet):
        return value
    if isinstance(value, Mapping):
        return ConstraintSet(value.get("matrix", []), value.get("rhs", []))
    raise TypeError(f"expected a ConstraintSet or a {{matrix, rhs}} mapping, got {type(value).__name__}")


def _check_dimensions(constraints: ConstraintSet, n: int, label: str) -> None:
    if constraints.is_empty:
        return
    rows, cols = constraints.matrix.shape
    if cols != n or rows != constraints.rhs.size:
        raise ConstraintDimensionError(
            f"{label} constraints have incorrect dimensions: {rows} by {cols} and "
            f"{constraints.rhs.size} by 1 for {n} coordinates."
        )
    if not (np.all(np.isfinite(constraints.matrix)) and np.all(np.isfinite(constraints.rhs))):
        raise ValidationError(f"{label} constraints must have finite coefficients")


def _pairs(x: np.ndarray) -> List[Point]:
    return [(float(px), float(py)) for px, py in np.asarray(x, dtype=float).reshape(-1, 2)]


def constrained_equilibrate(
    positions: Sequence[Sequence[float]],
    equality: ConstraintLike = None,
    leq: ConstraintLike = None,
    options: Optional[Union[LayoutOptions, Mapping[str, Any]]] = None,
    *,
    fixed: Optional[Sequence[Sequence[float]]] = None,
) -> EquilibriumResult:
    """Relax ``positions`` to an electrostatic equilibrium that respects the constraints.

    Every node is pushed towards the origin by an ambient field and away
    from every other node (and from the ``fixed`` charges) by a Coulomb
    force. Moves are projected onto the null space of the equality
    constraints and shortened so that no ``<=`` constraint is crossed.
    Columns ``2i`` and ``2i + 1`` of both constraint matrices refer to node
    ``i`` of ``positions``.

    Raises ``ConstraintDimensionError`` for mismatched inputs and
    ``InfeasibleConstraintsError`` / ``UnsupportedConstraintsError`` when no
    starting point can be found. Running out of iterations is reported
    through ``converged=False``.
    """

    opts = resolve_options(options)
    eps = opts.eps
    pos = np.asarray(positions, dtype=float)
    if pos.size == 0:
        pos = pos.reshape(0, 2)
    if pos.ndim != 2 or pos.shape[1] != 2:
        raise ConstraintDimensionError(f"positions must be a sequence of (x, y) pairs, got shape {pos.shape}")
    if not np.all(np.isfinite(pos)):
        raise ValidationError("initial positions must be finite")

    equality = _as_constraint_set(equality)
    leq = _as_constraint_set(leq)
    nodes = pos.shape[0]
    n = 2 * nodes
    _check_dimensions(equality, n, "Equality")
    _check_dimensions(leq, n, "Inequality")
    if len(equality) > n:
        raise ConstraintDimensionError(f"Too many constraints: rank {len(equality)} > {n}.")

    fixed_pts = None if fixed is None else np.asarray(fixed, dtype=float).reshape(-1, 2)
    have_leq = not leq.is_empty
    warnings: List[str] = []
    logger.debug(
        "constrained_equilibrate: %d node(s), %d equality constraint(s), %d <= constraint(s)",
        nodes,
        len(equality),
        len(leq),
    )

    if nodes == 0:
        return EquilibriumResult([], True, 0.0, Termination.DETERMINED)
    if nodes == 1 and equality.is_empty and not have_leq and fixed_pts is None:
        return EquilibriumResult([(0.0, 0.0)], True, 0.0, Termination.DETERMINED)

    x = pos.reshape(-1).copy()
    project = kernel_projection(0, np.zeros((0, n)))

    if not equality.is_empty:
        uT, vT, lam = svd(equality.matrix, full=True)
        if np.all(np.abs(lam) < eps):
            raise InfeasibleConstraintsError("Ill-conditioned constraint matrix with singular value near zero")
        rank = numerical_rank(lam, eps)
        if rank < len(equality):
            message = f"equality constraints are redundant or inconsistent: rank {rank} for {len(equality)} rows"
            logger.warning(message)
            warnings.append(message)

        project = kernel_projection(rank, vT)
        base = meet_equality_constraints(uT, vT, lam, equality.rhs, eps)
        mismatch = float(np.max(np.abs(equality.residuals(base))))
        if mismatch > math.sqrt(eps):
            message = f"equality constraints cannot all hold; closest point misses by {mismatch:.3e}"
            logger.warning(message)
            warnings.append(message)

        if rank == n:
            if have_leq and not leq.satisfied_leq(base, tol=eps):
                raise InfeasibleConstraintsError("Given constraints have no feasible solution.")
            logger.debug("constrained_equilibrate: unique solution determined by equality constraints")
            return EquilibriumResult(_pairs(base), True, 0.0, Termination.DETERMINED, warnings=warnings)

        x = base + project(x - base)
        if have_leq and not leq.satisfied_leq(x):
            x = feasible_adjust_leq(x, vT[rank:], leq.matrix, leq.rhs, shift=1.0, eps=eps)
    elif have_leq and not leq.satisfied_leq(x):
        x = feasible_adjust_leq(x, None, leq.matrix, leq.rhs, shift=1.0, eps=eps)

    max_force = math.inf
    iterations = 0
    step = opts.dt

    while max_force > opts.tol and iterations < opts.max_iter:
        points = x.reshape(-1, 2)
        force = -opts.ambient * points + coulomb_forces(points, eps, fixed_pts)
        effective = project(force.reshape(-1))
        max_force = float(np.max(np.hypot(effective[0::2], effective[1::2])))
        if not math.isfinite(max_force):
            message = f"force became non-finite after {iterations} iteration(s); stopping"
            logger.warning(message)
            return EquilibriumResult(
                _pairs(x),
                False,
                max_force,
                Termination.DIVERGED,
                iterations=iterations,
                warnings=warnings + [message],
            )

        delta = 1.0
        if have_leq:
            # Shorten the step so that no inequality is crossed; a full step
            # only matters for rows whose slack it would exhaust.
            slack = leq.rhs - leq.matrix @ x
            rate = leq.matrix @ effective
            blocking = (slack < step * rate) & (rate > 0)
            if np.any(blocking):
                delta = min(delta, float(np.min(slack[blocking] / rate[blocking])))
            delta = max(delta, 0.0)
            if delta < eps:
                logger.debug(
                    "constrained_equilibrate: blocked by an inequality after %d iteration(s)", iterations
                )
                return EquilibriumResult(
                    _pairs(x),
                    True,
                    max_force,
                    Termination.BOUNDARY,
                    iterations=iterations,
                    stopped=delta,
                    warnings=warnings,
                )

        x = x + delta * step * effective
        step *= opts.anneal
        iterations += 1

    converged = iterations < opts.max_iter
    logger.debug(
        "constrained_equilibrate: converged=%s max_force=%.3e iterations=%d", converged, max_force, iterations
    )
    return EquilibriumResult(
        _pairs(x),
        converged,
        max_force,
        Termination.FORCE if converged else Termination.BUDGET,
        iterations=iterations,
        warnings=warnings,
    )


apply_debug_logging(globals(), logger=logger, skip={"safe_coulomb", "coulomb_forces"})


__all__ = [
    "coulomb_forces",
    "constrained_equilibrate",
    "safe_coulomb",
]
