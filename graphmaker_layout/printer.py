import re
from typing import Iterable, List

from .ast import ParsedConstraint

_BARE_NODE_RE = re.compile(r"[A-Za-z][-A-Za-z0-9_:<>,;]*")


def node_ref(name: str) -> str:
    if _BARE_NODE_RE.fullmatch(name):
        return name
    if not name or "'" in name or "\n" in name:
        raise ValueError(f"node name {name!r} cannot be written in a constraint")
    return f"'{name}'"


def coordinate(name: str, axis: str) -> str:
    """Render ``name.axis``, quoting the node name when it is not a bare identifier."""
    if axis not in ("x", "y"):
        raise ValueError(f"unknown axis {axis!r}")
    return f"{node_ref(name)}.{axis}"


def format_number(value: float) -> str:
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _join_terms(terms: Iterable[tuple]) -> str:
    parts: List[str] = []
    for coef, ref in terms:
        negative = coef < 0
        mag = abs(coef)
        body = ref if mag == 1 else f"{format_number(mag)}*{ref}"
        if not parts:
            parts.append(f"-{body}" if negative else body)
        else:
            parts.append(f"- {body}" if negative else f"+ {body}")
    return " ".join(parts) if parts else "0"


def format_constraint(parsed: ParsedConstraint) -> str:
    terms = []
    for name, (cx, cy) in parsed.coefs.items():
        if cx != 0:
            terms.append((cx, coordinate(name, "x")))
        if cy != 0:
            terms.append((cy, coordinate(name, "y")))
    return f"{_join_terms(terms)} {parsed.relation.value} {format_number(parsed.rhs)}"
