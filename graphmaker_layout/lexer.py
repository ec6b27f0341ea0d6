import re
from typing import List, Tuple

from .ast import ConstraintSyntaxError

Token = Tuple[str, str, int]  # (type, value, col)

SYMBOLS = {
    '(': 'LPAREN',
    ')': 'RPAREN',
    '+': 'PLUS',
    '-': 'MINUS',
    '*': 'STAR',
    '/': 'SLASH',
}

RELATIONS = ('<=', '>=', '=', '<', '>')

WS = ' \t\r\n'

_node_re = re.compile(r"[A-Za-z][-A-Za-z0-9_:<>,;]*")
_quoted_re = re.compile(r"'([^'\n]+)'")
_dim_re = re.compile(r"\.\s*([xy])(?![A-Za-z0-9_])")
_num_re = re.compile(r'(?:\d+(?:\.\d+)?|\.\d+)(?:[eE][+-]?\d+)?')


def tokenize(s: str) -> List[Token]:
    tokens: List[Token] = []
    i = 0
    n = len(s)
    while i < n:
        ch = s[i]
        col = i + 1
        if ch in WS:
            i += 1
            continue
        if ch == "'":
            m = _quoted_re.match(s, i)
            if not m:
                raise ConstraintSyntaxError('unterminated or empty quoted node name', col)
            tokens.append(('NODE', m.group(1), col))
            i = m.end()
            continue
        m = _dim_re.match(s, i)
        if m:
            tokens.append(('DIM', m.group(1), col))
            i = m.end()
            continue
        m = _num_re.match(s, i)
        if m:
            tokens.append(('NUMBER', m.group(0), col))
            i = m.end()
            continue
        m = _node_re.match(s, i)
        if m:
            tokens.append(('NODE', m.group(0), col))
            i = m.end()
            continue
        rel = next((r for r in RELATIONS if s.startswith(r, i)), None)
        if rel is not None:
            tokens.append(('REL', rel, col))
            i += len(rel)
            continue
        if ch in SYMBOLS:
            tokens.append((SYMBOLS[ch], ch, col))
            i += 1
            continue
        raise ConstraintSyntaxError(f'unexpected character: {ch!r}', col)
    return tokens
