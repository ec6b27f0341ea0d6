"""Conversion of constraint strings into dense coefficient matrices."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .ast import ParsedConstraint
from .parser import try_parse_constraint

logger = logging.getLogger(__name__)


@dataclass
class ConstraintSet:
    """Rows of linear constraints ``matrix @ x (=|<=) rhs`` over the flat position vector."""

    matrix: np.ndarray = field(default_factory=lambda: np.zeros((0, 0), dtype=float))
    rhs: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=float))

    def __post_init__(self) -> None:
        matrix = np.asarray(self.matrix, dtype=float)
        if matrix.size == 0 and matrix.ndim != 2:
            matrix = matrix.reshape(0, 0)
        self.matrix = np.atleast_2d(matrix)
        self.rhs = np.asarray(self.rhs, dtype=float).reshape(-1)

    def __len__(self) -> int:
        return int(self.matrix.shape[0])

    @property
    def is_empty(self) -> bool:
        return len(self) == 0

    @property
    def width(self) -> int:
        return int(self.matrix.shape[1])

    @classmethod
    def empty(cls, width: int = 0) -> "ConstraintSet":
        return cls(np.zeros((0, width), dtype=float), np.zeros(0, dtype=float))

    def concat(self, other: "ConstraintSet") -> "ConstraintSet":
        if other.is_empty:
            return ConstraintSet(self.matrix.copy(), self.rhs.copy())
        if self.is_empty:
            return ConstraintSet(other.matrix.copy(), other.rhs.copy())
        if self.width != other.width:
            raise ValueError(
                f"cannot concatenate constraint sets of width {self.width} and {other.width}"
            )
        return ConstraintSet(np.vstack([self.matrix, other.matrix]), np.concatenate([self.rhs, other.rhs]))

    def residuals(self, x: np.ndarray) -> np.ndarray:
        """Return ``matrix @ x - rhs`` for a flat position vector ``x``."""

        if self.is_empty:
            return np.zeros(0, dtype=float)
        return self.matrix @ np.asarray(x, dtype=float).reshape(-1) - self.rhs

    def satisfied_leq(self, x: np.ndarray, tol: float = 0.0) -> bool:
        return bool(np.all(self.residuals(x) <= tol))


UNCONSTRAINED = ConstraintSet.empty()


@dataclass
class ConstraintSets:
    equality: ConstraintSet = field(default_factory=ConstraintSet.empty)
    leq: ConstraintSet = field(default_factory=ConstraintSet.empty)
    skipped: List[str] = field(default_factory=list)


def _constraint_row(parsed: ParsedConstraint, nodes_in_order: Sequence[str]) -> np.ndarray:
    """Dense row with columns ``2i``/``2i+1`` for the x/y coefficients of node ``i``."""

    row = np.zeros(2 * len(nodes_in_order), dtype=float)
    for idx, name in enumerate(nodes_in_order):
        coefs = parsed.coefs.get(name)
        if coefs is not None:
            row[2 * idx] = coefs[0]
            row[2 * idx + 1] = coefs[1]
    return row


def _build(items: Iterable[Tuple[str, Optional[ParsedConstraint]]], nodes_in_order: Sequence[str]) -> ConstraintSets:
    width = 2 * len(nodes_in_order)
    known = set(nodes_in_order)
    eq_rows: List[np.ndarray] = []
    eq_rhs: List[float] = []
    leq_rows: List[np.ndarray] = []
    leq_rhs: List[float] = []
    skipped: List[str] = []

    for text, parsed in items:
        if parsed is None:
            logger.warning("Invalid constraint skipped: %s", text)
            skipped.append(text)
            continue
        unknown = [name for name in parsed.coefs if name not in known]
        if unknown:
            logger.warning("Constraint %r references unknown node(s) %s; skipped", text, unknown)
            skipped.append(text)
            continue

        parsed = parsed.normalized()
        if parsed.is_equality:
            eq_rows.append(_constraint_row(parsed, nodes_in_order))
            eq_rhs.append(parsed.rhs)
        else:
            leq_rows.append(_constraint_row(parsed, nodes_in_order))
            leq_rhs.append(parsed.rhs)

    logger.debug(
        "Converted %d equality and %d inequality constraint(s); %d skipped",
        len(eq_rows),
        len(leq_rows),
        len(skipped),
    )
    return ConstraintSets(
        equality=_stack(eq_rows, eq_rhs, width),
        leq=_stack(leq_rows, leq_rhs, width),
        skipped=skipped,
    )


def convert_constraints(constraints: Iterable[str], nodes_in_order: Sequence[str]) -> ConstraintSets:
    """Convert constraint strings into equality and ``<=`` constraint sets.

    Strings that do not parse, or that mention a node outside
    ``nodes_in_order``, are skipped with a warning and reported in
    ``ConstraintSets.skipped``; the rest of the batch is still converted.
    """

    return _build(((text, try_parse_constraint(text)) for text in constraints), nodes_in_order)


def convert_parsed(constraints: Iterable[ParsedConstraint], nodes_in_order: Sequence[str]) -> ConstraintSets:
    """Like :func:`convert_constraints` for constraints that are already in linear form."""

    return _build(((parsed.text, parsed) for parsed in constraints), nodes_in_order)


def _stack(rows: List[np.ndarray], rhs: List[float], width: int) -> ConstraintSet:
    if not rows:
        return ConstraintSet.empty(width)
    return ConstraintSet(np.vstack(rows), np.asarray(rhs, dtype=float))


def merge_constraint_sets(first: ConstraintSets, second: Optional[ConstraintSets]) -> ConstraintSets:
    if second is None:
        return first
    return ConstraintSets(
        equality=first.equality.concat(second.equality),
        leq=first.leq.concat(second.leq),
        skipped=list(first.skipped) + list(second.skipped),
    )


__all__ = [
    "ConstraintSet",
    "ConstraintSets",
    "UNCONSTRAINED",
    "convert_constraints",
    "convert_parsed",
    "merge_constraint_sets",
]
