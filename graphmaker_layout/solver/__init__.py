"""Constrained force-directed node placement."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Sequence, Union

import numpy as np

from ..constraints import UNCONSTRAINED, ConstraintSet, convert_constraints, merge_constraint_sets
from ..graph import LayoutGraph, NodeName, Point, positions_from_list
from ..validate import validate_graph
from .config import get_layout_options, resolve_options, set_layout_options
from .linalg import feasible_adjust_leq, kernel_projection, meet_equality_constraints, numerical_rank, svd
from .model import (
    ConstraintDimensionError,
    EquilibriumResult,
    InfeasibleConstraintsError,
    LayoutError,
    LayoutOptions,
    SvdResult,
    Termination,
    UnsupportedConstraintsError,
)
from .seed import (
    TREE,
    StructureConstraints,
    initialize_graph_positions,
    initialize_tree_positions,
    orientation_axes,
    parent_position_constraints,
    topological_order,
)
from .solver_core import ConstraintLike, coulomb_forces, constrained_equilibrate, safe_coulomb

logger = logging.getLogger(__name__)

OptionsLike = Optional[Union[LayoutOptions, Mapping[str, Any]]]


def node_positions(graph: Union[LayoutGraph, Mapping[str, Any]], options: OptionsLike = None) -> EquilibriumResult:
    """Lay out every node of ``graph``.

    The graph's constraint strings are converted (unparseable ones are
    skipped and reported in ``result.warnings``), hierarchical graphs get
    their structural constraints and seeded initial positions, and the
    whole system is relaxed by :func:`constrained_equilibrate`. Positions
    come back in ``graph.nodes`` order.
    """

    if not isinstance(graph, LayoutGraph):
        graph = LayoutGraph.from_dict(graph)
    opts = resolve_options(options)
    validate_graph(graph)
    rng = np.random.default_rng(opts.random_seed)

    sets = convert_constraints(graph.constraints, graph.nodes)
    structure: Optional[StructureConstraints] = None
    if graph.has_parents:
        structure = parent_position_constraints(graph, opts.orientation)
        if structure.has_extra:
            sets = merge_constraint_sets(sets, structure.extra)

    if structure is not None and structure.kind == TREE:
        initial = initialize_tree_positions(graph, structure.depth_axis, structure.direction, opts.sigma, rng)
    else:
        if structure is not None:
            depth_axis, direction, order = structure.depth_axis, structure.direction, structure.order
        else:
            depth_axis, direction = orientation_axes(opts.orientation, None)
            order = list(graph.nodes)
        initial = initialize_graph_positions(graph, order, depth_axis, direction, opts.sigma, rng)

    logger.info(
        "Solving layout: %d node(s), %d equality and %d inequality constraint(s)",
        len(graph.nodes),
        len(sets.equality),
        len(sets.leq),
    )
    result = constrained_equilibrate(initial, sets.equality, sets.leq, opts)
    result.warnings[:0] = [f"constraint skipped: {text}" for text in sets.skipped]
    logger.info(
        "Layout finished: converged=%s termination=%s max_force=%.3e iterations=%d",
        result.converged,
        result.termination.value,
        result.max_force,
        result.iterations,
    )
    return result


def random_positions(
    n: int,
    equality: ConstraintLike = None,
    leq: ConstraintLike = None,
    options: OptionsLike = None,
) -> EquilibriumResult:
    """Solve from ``n`` positions drawn uniformly from ``[-2, 2]^2``."""

    opts = resolve_options(options)
    rng = np.random.default_rng(opts.random_seed)
    positions = rng.uniform(-2.0, 2.0, size=(n, 2))
    return constrained_equilibrate(positions, equality, leq, opts)


def positions_by_name(nodes: Sequence[NodeName], result: EquilibriumResult) -> Dict[NodeName, Point]:
    return positions_from_list(nodes, result.positions)


__all__ = [
    "ConstraintDimensionError",
    "ConstraintSet",
    "EquilibriumResult",
    "InfeasibleConstraintsError",
    "LayoutError",
    "LayoutOptions",
    "StructureConstraints",
    "SvdResult",
    "Termination",
    "UNCONSTRAINED",
    "UnsupportedConstraintsError",
    "constrained_equilibrate",
    "coulomb_forces",
    "feasible_adjust_leq",
    "get_layout_options",
    "initialize_graph_positions",
    "initialize_tree_positions",
    "kernel_projection",
    "meet_equality_constraints",
    "node_positions",
    "numerical_rank",
    "parent_position_constraints",
    "positions_by_name",
    "random_positions",
    "resolve_options",
    "safe_coulomb",
    "set_layout_options",
    "svd",
    "topological_order",
]
