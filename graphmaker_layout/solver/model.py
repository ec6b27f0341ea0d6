"""Core data structures for the layout solver."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

import numpy as np

from ..constants import ORIENTATIONS, ZERO_TOLERANCE

Point = Tuple[float, float]


class LayoutError(RuntimeError):
    """Base class for fatal layout failures; the caller must change its inputs."""


class ConstraintDimensionError(LayoutError, ValueError):
    """Raised when constraint matrices do not match the number of coordinates."""


class InfeasibleConstraintsError(LayoutError):
    """Raised when the constraints are degenerate, inconsistent or have no feasible point."""


class UnsupportedConstraintsError(LayoutError, NotImplementedError):
    """Raised for constraint configurations the solver does not handle yet."""


class Termination(str, Enum):
    FORCE = "force"
    BOUNDARY = "boundary"
    BUDGET = "budget"
    DETERMINED = "determined"
    DIVERGED = "diverged"


class SvdResult(NamedTuple):
    """Singular value decomposition ``A = U diag(lam) V^T`` with singular vectors as rows."""

    uT: np.ndarray
    vT: np.ndarray
    lam: np.ndarray


@dataclass
class LayoutOptions:
    """Solver options.

    ``ambient`` scales the centripetal field that keeps the layout bounded,
    ``dt`` is the initial step size and ``anneal`` its per-iteration decay.
    ``sigma`` and ``orientation`` drive the initial placement of hierarchical
    graphs. ``eps`` is the zero tolerance used by every numeric routine.
    """

    ambient: float = 1.0
    max_iter: int = 20000
    tol: float = 2.0 ** -20
    anneal: float = 0.99
    dt: float = 1.0
    sigma: float = 2.0
    orientation: str = "auto"
    eps: float = ZERO_TOLERANCE
    random_seed: Optional[int] = None


@dataclass
class EquilibriumResult:
    positions: List[Point]
    converged: bool
    max_force: float
    termination: Termination
    iterations: int = 0
    stopped: Optional[float] = None
    warnings: List[str] = field(default_factory=list)

    def as_array(self) -> np.ndarray:
        return np.asarray(self.positions, dtype=float).reshape(-1, 2)

    def to_dict(self) -> Dict[str, Any]:
        """Return the response shape handed to renderers."""

        out: Dict[str, Any] = {
            "positions": [[x, y] for x, y in self.positions],
            "converged": self.converged,
            "maxForce": self.max_force,
        }
        if self.termination is Termination.BOUNDARY:
            out["stopped"] = self.stopped
        return out


__all__ = [
    "ConstraintDimensionError",
    "EquilibriumResult",
    "InfeasibleConstraintsError",
    "LayoutError",
    "LayoutOptions",
    "ORIENTATIONS",
    "Point",
    "SvdResult",
    "Termination",
    "UnsupportedConstraintsError",
]
