"""Structural seeding for hierarchical graphs.

Trees and DAGs get extra positional constraints (parents ahead of their
children along the depth axis, tree siblings level with each other, tree
parents centred over their children) and an initial placement that already
respects that order, so the equilibrium solver starts close to a readable
layout.
"""

from __future__ import annotations

import heapq
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from ..ast import ParsedConstraint, Relation
from ..constants import axis_index
from ..constraints import ConstraintSet, ConstraintSets, convert_parsed
from ..graph import LayoutGraph, NodeName
from ..logging_utils import apply_debug_logging

logger = logging.getLogger(__name__)

TREE = "tree"
DAG = "dag"


@dataclass
class StructureConstraints:
    extra: ConstraintSets
    kind: Optional[str] = None
    order: List[NodeName] = field(default_factory=list)
    depth_axis: str = "x"
    direction: int = 1

    @property
    def has_extra(self) -> bool:
        return self.kind is not None


def orientation_axes(orientation: str, kind: Optional[str]) -> Tuple[str, int]:
    """Return ``(depth_axis, direction)`` for an orientation.

    ``direction`` is ``+1`` when children sit at larger coordinates than
    their parent along ``depth_axis``.
    """

    if orientation == "auto":
        return ("y", -1) if kind == TREE else ("x", 1)
    if orientation == "left":
        return "x", 1
    if orientation == "right":
        return "x", -1
    if orientation == "top":
        return "y", -1
    if orientation == "bottom":
        return "y", 1
    raise ValueError(f"unknown orientation {orientation!r}")


def _spread_axis(depth_axis: str) -> str:
    return "y" if depth_axis == "x" else "x"


def topological_order(
    nodes: Sequence[NodeName], children: Mapping[NodeName, Sequence[NodeName]]
) -> Tuple[List[NodeName], bool]:
    """Kahn's algorithm, breaking ties by position in ``nodes``.

    Returns the order and whether a cycle was found; on a cycle the order
    only holds the nodes that could be placed.
    """

    index = {name: idx for idx, name in enumerate(nodes)}
    indegree = {name: 0 for name in nodes}
    for parent in nodes:
        for child in children.get(parent, ()):
            indegree[child] += 1

    ready = [index[name] for name in nodes if indegree[name] == 0]
    heapq.heapify(ready)
    order: List[NodeName] = []
    while ready:
        node = nodes[heapq.heappop(ready)]
        order.append(node)
        for child in children.get(node, ()):
            indegree[child] -= 1
            if indegree[child] == 0:
                heapq.heappush(ready, index[child])

    return order, len(order) < len(nodes)


def _no_structure(graph: LayoutGraph, orientation: str) -> StructureConstraints:
    width = 2 * len(graph.nodes)
    depth_axis, direction = orientation_axes(orientation, None)
    return StructureConstraints(
        extra=ConstraintSets(ConstraintSet.empty(width), ConstraintSet.empty(width)),
        kind=None,
        order=list(graph.nodes),
        depth_axis=depth_axis,
        direction=direction,
    )


def _linear(terms: Sequence[Tuple[NodeName, str, float]], relation: Relation, text: str) -> ParsedConstraint:
    """``sum(coef * node.axis) <relation> 0`` keyed by node name, so any name is accepted."""

    coefs: Dict[NodeName, Tuple[float, float]] = {}
    for name, axis, coef in terms:
        pair = list(coefs.get(name, (0.0, 0.0)))
        pair[axis_index(axis)] += coef
        coefs[name] = (pair[0], pair[1])
    return ParsedConstraint(coefs, 0.0, relation, text)


def parent_position_constraints(graph: LayoutGraph, orientation: str = "auto") -> StructureConstraints:
    children = graph.children_map()
    order, has_cycle = topological_order(graph.nodes, children)
    if has_cycle:
        logger.info("Graph has a cycle; laying it out without parent constraints")
        return _no_structure(graph, orientation)

    edge_count = sum(len(kids) for kids in children.values())
    parents: Dict[NodeName, int] = {}
    for kids in children.values():
        for child in kids:
            parents[child] = parents.get(child, 0) + 1
    is_tree = edge_count == len(graph.nodes) - 1 and all(count == 1 for count in parents.values())
    kind = TREE if is_tree else DAG

    depth_axis, direction = orientation_axes(orientation, kind)
    spread_axis = _spread_axis(depth_axis)
    relation = Relation.LEQ if direction > 0 else Relation.GEQ

    extra: List[ParsedConstraint] = []
    for node in order:
        kids = children[node]
        if not kids:
            continue
        ahead = kids[:1] if is_tree else kids
        for child in ahead:
            extra.append(
                _linear(
                    [(node, depth_axis, 1.0), (child, depth_axis, -1.0)],
                    relation,
                    f"{node!r} ahead of child {child!r}",
                )
            )
        if is_tree:
            for left, right in zip(kids, kids[1:]):
                extra.append(
                    _linear(
                        [(left, depth_axis, 1.0), (right, depth_axis, -1.0)],
                        Relation.EQ,
                        f"siblings {left!r} and {right!r} level",
                    )
                )
            share = -1.0 / len(kids)
            extra.append(
                _linear(
                    [(node, spread_axis, 1.0)] + [(child, spread_axis, share) for child in kids],
                    Relation.EQ,
                    f"{node!r} centred over its children",
                )
            )

    if not extra:
        return _no_structure(graph, orientation)

    sets = convert_parsed(extra, graph.nodes)
    logger.info(
        "Hierarchical layout as %s: %d equality and %d inequality constraint(s) added",
        kind,
        len(sets.equality),
        len(sets.leq),
    )
    return StructureConstraints(extra=sets, kind=kind, order=order, depth_axis=depth_axis, direction=direction)


def _sorted_draws(rng: np.random.Generator, sigma: float, count: int, direction: int) -> np.ndarray:
    draws = np.sort(rng.normal(0.0, sigma, size=count))
    return draws if direction > 0 else draws[::-1]


def _tree_traversal(graph: LayoutGraph) -> Tuple[List[NodeName], List[int]]:
    """In-order walk of the forest: the first half of each node's children, the node, then the rest."""

    children = graph.children_map()
    has_parent = {child for kids in children.values() for child in kids}
    roots = [name for name in graph.nodes if name not in has_parent]

    visited = set()
    order: List[NodeName] = []
    levels: List[int] = []
    for root in list(roots) + list(graph.nodes):
        stack: List[Tuple[bool, NodeName, int]] = [(False, root, 1)]
        while stack:
            emit, node, level = stack.pop()
            if emit:
                order.append(node)
                levels.append(level)
                continue
            if node in visited:
                continue
            visited.add(node)
            kids = children[node]
            median = len(kids) // 2
            tasks = [(False, kid, level + 1) for kid in kids[:median]]
            tasks.append((True, node, level))
            tasks.extend((False, kid, level + 1) for kid in kids[median:])
            stack.extend(reversed(tasks))
    return order, levels


def initialize_tree_positions(
    graph: LayoutGraph,
    depth_axis: str,
    direction: int,
    sigma: float,
    rng: np.random.Generator,
) -> np.ndarray:
    """Initial positions for a tree (or forest), in ``graph.nodes`` order.

    Every level shares one depth coordinate, deeper levels further along
    ``direction``; the spread coordinate increases along the in-order walk.
    Nodes with a previously solved position keep it.
    """

    order, levels = _tree_traversal(graph)
    depth = axis_index(depth_axis)
    spread = 1 - depth

    fresh = [name for name in order if name not in graph.positions]
    spread_draws = iter(np.sort(rng.normal(0.0, sigma, size=len(fresh))))
    level_draws = _sorted_draws(rng, sigma, max(levels, default=0), direction)

    placed: Dict[NodeName, Tuple[float, float]] = {}
    for name, level in zip(order, levels):
        if name in graph.positions:
            placed[name] = graph.positions[name]
            continue
        point = [0.0, 0.0]
        point[depth] = float(level_draws[level - 1])
        point[spread] = float(next(spread_draws))
        placed[name] = (point[0], point[1])
    return np.array([placed[name] for name in graph.nodes], dtype=float).reshape(-1, 2)


def initialize_graph_positions(
    graph: LayoutGraph,
    order: Sequence[NodeName],
    depth_axis: str,
    direction: int,
    sigma: float,
    rng: np.random.Generator,
) -> np.ndarray:
    """Initial positions for a general graph; depth coordinates increase along ``order``."""

    walk = list(order) + [name for name in graph.nodes if name not in set(order)]
    fresh = [name for name in walk if name not in graph.positions]
    depth = axis_index(depth_axis)
    spread = 1 - depth

    depth_draws = _sorted_draws(rng, sigma, len(fresh), direction)
    spread_draws = rng.normal(0.0, sigma, size=len(fresh))

    placed: Dict[NodeName, Tuple[float, float]] = dict(graph.positions)
    for idx, name in enumerate(fresh):
        point = [0.0, 0.0]
        point[depth] = float(depth_draws[idx])
        point[spread] = float(spread_draws[idx])
        placed[name] = (point[0], point[1])
    return np.array([placed[name] for name in graph.nodes], dtype=float).reshape(-1, 2)


apply_debug_logging(globals(), logger=logger)


__all__ = [
    "DAG",
    "StructureConstraints",
    "TREE",
    "initialize_graph_positions",
    "initialize_tree_positions",
    "orientation_axes",
    "parent_position_constraints",
    "topological_order",
]
