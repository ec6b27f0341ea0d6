from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple

Coefficients = Dict[str, Tuple[float, float]]


class Relation(str, Enum):
    EQ = "="
    LEQ = "<="
    LT = "<"
    GEQ = ">="
    GT = ">"

    @classmethod
    def from_token(cls, value: str) -> "Relation":
        for member in cls:
            if member.value == value:
                return member
        raise ValueError(f"Invalid constraint relation {value!r}")


class ConstraintSyntaxError(SyntaxError):
    """Raised when a constraint string does not match the constraint grammar."""

    def __init__(self, message: str, col: Optional[int] = None):
        if col is not None:
            message = f"[col {col}] {message}"
        super().__init__(message)
        self.col = col


@dataclass(frozen=True)
class ParsedConstraint:
    coefs: Coefficients = field(default_factory=dict)
    rhs: float = 0.0
    relation: Relation = Relation.EQ
    text: str = ""

    @property
    def nodes(self) -> Tuple[str, ...]:
        return tuple(self.coefs)

    @property
    def is_equality(self) -> bool:
        return self.relation is Relation.EQ

    def normalized(self) -> "ParsedConstraint":
        """Return the constraint in ``=`` or ``<=`` form.

        Strict relations are treated as their closed counterparts; ``>=`` and
        ``>`` are turned around by negating every coefficient and the rhs.
        """

        if self.relation in (Relation.EQ, Relation.LEQ):
            return self
        if self.relation is Relation.LT:
            return ParsedConstraint(dict(self.coefs), self.rhs, Relation.LEQ, self.text)
        if self.relation in (Relation.GEQ, Relation.GT):
            flipped = {name: (-cx, -cy) for name, (cx, cy) in self.coefs.items()}
            return ParsedConstraint(flipped, -self.rhs, Relation.LEQ, self.text)
        raise ValueError(f"Invalid constraint relation {self.relation!r}")
