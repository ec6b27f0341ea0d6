import math
from typing import TYPE_CHECKING, Sequence

from .constants import ORIENTATIONS
from .graph import LayoutGraph

if TYPE_CHECKING:
    from .solver.model import LayoutOptions


class ValidationError(ValueError):
    pass


def _require_positive(name: str, value: float) -> None:
    if not isinstance(value, (int, float)) or isinstance(value, bool) or not math.isfinite(value) or value <= 0:
        raise ValidationError(f'option {name} must be a positive number (got {value!r})')


def validate_options(opts: "LayoutOptions") -> None:
    if not isinstance(opts.ambient, (int, float)) or not math.isfinite(opts.ambient) or opts.ambient < 0:
        raise ValidationError(f'option ambient must be a non-negative number (got {opts.ambient!r})')
    if not isinstance(opts.max_iter, int) or isinstance(opts.max_iter, bool) or opts.max_iter < 0:
        raise ValidationError(f'option max_iter must be a non-negative integer (got {opts.max_iter!r})')
    for name in ('tol', 'dt', 'sigma', 'eps'):
        _require_positive(name, getattr(opts, name))
    _require_positive('anneal', opts.anneal)
    if opts.anneal > 1:
        raise ValidationError(f'option anneal must lie in (0, 1] (got {opts.anneal!r})')
    if opts.orientation not in ORIENTATIONS:
        raise ValidationError(
            f'option orientation must be one of {"|".join(ORIENTATIONS)} (got {opts.orientation!r})'
        )
    if opts.random_seed is not None and (not isinstance(opts.random_seed, int) or isinstance(opts.random_seed, bool)):
        raise ValidationError(f'option random_seed must be an integer or None (got {opts.random_seed!r})')


def validate_node_order(nodes: Sequence[str]) -> None:
    seen = set()
    for name in nodes:
        if not isinstance(name, str) or not name:
            raise ValidationError(f'node names must be non-empty strings (got {name!r})')
        if name in seen:
            raise ValidationError(f'duplicate node name {name!r}')
        seen.add(name)


def validate_graph(graph: LayoutGraph) -> None:
    validate_node_order(graph.nodes)
    known = set(graph.nodes)
    for name, edge in graph.edges.items():
        for end in (edge.source, edge.target):
            if end not in known:
                raise ValidationError(f'edge {name!r} references unknown node {end!r}')
    for name, point in graph.positions.items():
        if name not in known:
            raise ValidationError(f'position given for unknown node {name!r}')
        if not all(math.isfinite(v) for v in point):
            raise ValidationError(f'position of node {name!r} must be finite (got {point!r})')
