"""Reference text for the positional constraint language."""

from textwrap import dedent

CONSTRAINT_BNF = dedent(
"""
```
Constraint := Expr Relation Expr
Relation   := '=' | '<=' | '<' | '>=' | '>'
Expr       := SignedTerm { ('+' | '-') SignedTerm }
SignedTerm := [ '+' | '-' ] Term
Term       := NUMBER [ '*' ] Group
            | Group [ '/' NUMBER ]
            | NUMBER
Group      := Coord | '(' Coord { ('+' | '-') Coord } ')'
Coord      := NODE '.' ('x' | 'y')

NODE       := [A-Za-z][-A-Za-z0-9_:<>,;]*  |  "'" any text without quotes or newlines "'"
NUMBER     := digits [ '.' digits ] | '.' digits, optionally followed by an exponent
```
"""
).strip()

EXAMPLES = [
    "A.x = B.x",
    "A.y = B.y + 2",
    "A.x <= B.x - 1",
    "2 * A.x + 3 >= B.y",
    "C.x = (A.x + B.x) / 2",
    "C.y = (A.y + B.y) / 2",
    "'node one'.x < 'node two'.x",
    "0.5 (A.x - B.x) = -1.5",
    "-A.y > .25",
]

_PROMPT_CORE = dedent(
"""
Node positions can be constrained with linear equations and inequalities
over node coordinates. Write ``name.x`` or ``name.y`` for a coordinate; quote
names that contain spaces or punctuation, e.g. ``'my node'.x``. Each side of a
constraint is a sum of numbers and coordinates; a number may multiply one
coordinate or a parenthesised sum of coordinates, and such a group may be
divided by a number. Groups do not nest. ``<`` and ``>`` mean the same as
``<=`` and ``>=``.

Larger x is further right. Larger y is further up.
"""
).strip()


def get_constraint_prompt(*, include_bnf: bool = True, include_examples: bool = True) -> str:
    """Return the constraint-language primer handed to prompt authors."""
    sections = [_PROMPT_CORE]
    if include_examples:
        sections.append("EXAMPLES\n" + "\n".join(f"  {example}" for example in EXAMPLES))
    if include_bnf:
        sections.append("SYNTAX REFERENCE (BNF)\n" + CONSTRAINT_BNF)
    return "\n\n".join(sections)


CONSTRAINT_PROMPT = get_constraint_prompt()

__all__ = ["CONSTRAINT_BNF", "CONSTRAINT_PROMPT", "EXAMPLES", "get_constraint_prompt"]
