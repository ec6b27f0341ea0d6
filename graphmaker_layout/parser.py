import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .ast import ConstraintSyntaxError, ParsedConstraint, Relation
from .lexer import Token, tokenize

logger = logging.getLogger(__name__)

CoordTerm = Tuple[str, str, float]  # (node, axis, coefficient)


class Cursor:
    def __init__(self, tokens: List[Token]):
        self.toks = tokens
        self.i = 0

    def peek(self):
        return self.toks[self.i] if self.i < len(self.toks) else None

    def match(self, *types: str):
        if self.i < len(self.toks) and self.toks[self.i][0] in types:
            t = self.toks[self.i]
            self.i += 1
            return t
        return None

    def expect(self, *types: str):
        t = self.peek()
        if t and t[0] in types:
            self.i += 1
            return t
        want = '|'.join(types)
        if t:
            raise ConstraintSyntaxError(f'expected {want}, got {t[0]} {t[1]!r}', t[2])
        raise ConstraintSyntaxError(f'Unexpected end of constraint: expected {want}')


@dataclass
class _Side:
    constant: float = 0.0
    coords: List[CoordTerm] = field(default_factory=list)


def _parse_number(tok: Token) -> float:
    value = float(tok[1])
    if not math.isfinite(value):
        raise ConstraintSyntaxError(f'number {tok[1]!r} is out of range', tok[2])
    return value


def parse_coordinate(cur: Cursor) -> CoordTerm:
    node = cur.expect('NODE')
    dim = cur.expect('DIM')
    return node[1], dim[1], 1.0


def parse_group(cur: Cursor) -> List[CoordTerm]:
    """A single coordinate or one parenthesised sum of coordinates."""
    if not cur.match('LPAREN'):
        return [parse_coordinate(cur)]
    coords = [parse_coordinate(cur)]
    while True:
        op = cur.match('PLUS', 'MINUS')
        if not op:
            break
        node, axis, coef = parse_coordinate(cur)
        coords.append((node, axis, -coef if op[0] == 'MINUS' else coef))
    cur.expect('RPAREN')
    return coords


def _add_scaled(side: _Side, coords: List[CoordTerm], factor: float) -> None:
    for node, axis, coef in coords:
        side.coords.append((node, axis, coef * factor))


def parse_term(cur: Cursor, sign: float, side: _Side) -> None:
    t = cur.peek()
    if t is None:
        raise ConstraintSyntaxError('Unexpected end of constraint: expected a term')
    if t[0] == 'NUMBER':
        cur.i += 1
        value = _parse_number(t)
        nxt = cur.peek()
        if cur.match('STAR'):
            _add_scaled(side, parse_group(cur), sign * value)
        elif nxt and nxt[0] in ('NODE', 'LPAREN'):
            _add_scaled(side, parse_group(cur), sign * value)
        else:
            side.constant += sign * value
        return
    if t[0] in ('NODE', 'LPAREN'):
        coords = parse_group(cur)
        factor = sign
        if cur.match('SLASH'):
            num_tok = cur.expect('NUMBER')
            divisor = _parse_number(num_tok)
            if divisor == 0:
                raise ConstraintSyntaxError('division by zero', num_tok[2])
            factor /= divisor
        _add_scaled(side, coords, factor)
        return
    raise ConstraintSyntaxError(f'expected a number or coordinate, got {t[0]} {t[1]!r}', t[2])


def parse_signed_term(cur: Cursor, sign: float, side: _Side) -> None:
    op = cur.match('PLUS', 'MINUS')
    if op and op[0] == 'MINUS':
        sign = -sign
    parse_term(cur, sign, side)


def parse_expr(cur: Cursor) -> _Side:
    side = _Side()
    parse_signed_term(cur, 1.0, side)
    while True:
        op = cur.match('PLUS', 'MINUS')
        if not op:
            break
        parse_signed_term(cur, -1.0 if op[0] == 'MINUS' else 1.0, side)
    return side


def _merge(lhs: _Side, rhs: _Side) -> Dict[str, Tuple[float, float]]:
    merged: Dict[str, List[float]] = {}
    terms = list(lhs.coords) + [(node, axis, -coef) for node, axis, coef in rhs.coords]
    for node, axis, coef in terms:
        pair = merged.setdefault(node, [0.0, 0.0])
        pair[0 if axis == 'x' else 1] += coef
    return {node: (pair[0], pair[1]) for node, pair in merged.items()}


def parse_constraint(text: str) -> ParsedConstraint:
    """Parse one constraint string into its linear form.

    Constant terms are collected on the right-hand side and coordinate terms
    on the left, so ``A.x = (B.x + C.x) / 2`` becomes
    ``A.x - 0.5 B.x - 0.5 C.x = 0``.
    """
    cur = Cursor(tokenize(text))
    lhs = parse_expr(cur)
    rel = cur.expect('REL')
    rhs = parse_expr(cur)
    extra = cur.peek()
    if extra is not None:
        raise ConstraintSyntaxError(f'unexpected trailing {extra[0]} {extra[1]!r}', extra[2])
    coefs = _merge(lhs, rhs)
    constant = rhs.constant - lhs.constant
    values = [constant] + [c for pair in coefs.values() for c in pair]
    if not all(math.isfinite(v) for v in values):
        raise ConstraintSyntaxError('coefficients overflow to a non-finite value')
    return ParsedConstraint(
        coefs=coefs,
        rhs=constant,
        relation=Relation.from_token(rel[1]),
        text=text,
    )


def try_parse_constraint(text: str) -> Optional[ParsedConstraint]:
    """Return the parsed constraint, or ``None`` when ``text`` does not parse."""
    try:
        return parse_constraint(text)
    except ConstraintSyntaxError as exc:
        logger.debug("No parse for constraint %r: %s", text, exc)
        return None
