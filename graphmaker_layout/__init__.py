from .ast import ConstraintSyntaxError, ParsedConstraint, Relation
from .lexer import tokenize
from .parser import parse_constraint, try_parse_constraint
from .printer import coordinate, format_constraint
from .constraints import (
    UNCONSTRAINED,
    ConstraintSet,
    ConstraintSets,
    convert_constraints,
    convert_parsed,
    merge_constraint_sets,
)
from .graph import Edge, LayoutGraph
from .validate import ValidationError, validate_graph, validate_options
from .reference import CONSTRAINT_BNF, CONSTRAINT_PROMPT, get_constraint_prompt
from .loops import directional_histogram, self_loop_angles, self_loop_directions
from .solver import (
    ConstraintDimensionError,
    EquilibriumResult,
    InfeasibleConstraintsError,
    LayoutError,
    LayoutOptions,
    Termination,
    UnsupportedConstraintsError,
    constrained_equilibrate,
    get_layout_options,
    node_positions,
    positions_by_name,
    random_positions,
    set_layout_options,
)

__all__ = [
    'CONSTRAINT_BNF',
    'CONSTRAINT_PROMPT',
    'ConstraintDimensionError',
    'ConstraintSet',
    'ConstraintSets',
    'ConstraintSyntaxError',
    'Edge',
    'EquilibriumResult',
    'InfeasibleConstraintsError',
    'LayoutError',
    'LayoutGraph',
    'LayoutOptions',
    'ParsedConstraint',
    'Relation',
    'Termination',
    'UNCONSTRAINED',
    'UnsupportedConstraintsError',
    'ValidationError',
    'constrained_equilibrate',
    'convert_constraints',
    'convert_parsed',
    'coordinate',
    'directional_histogram',
    'format_constraint',
    'get_constraint_prompt',
    'get_layout_options',
    'merge_constraint_sets',
    'node_positions',
    'parse_constraint',
    'positions_by_name',
    'random_positions',
    'self_loop_angles',
    'self_loop_directions',
    'set_layout_options',
    'tokenize',
    'try_parse_constraint',
    'validate_graph',
    'validate_options',
]
