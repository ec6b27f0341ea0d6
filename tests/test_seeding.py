import numpy as np
import pytest

from graphmaker_layout.graph import LayoutGraph
from graphmaker_layout.solver import node_positions, positions_by_name
from graphmaker_layout.solver.seed import (
    DAG,
    TREE,
    initialize_graph_positions,
    initialize_tree_positions,
    orientation_axes,
    parent_position_constraints,
    topological_order,
)

TOL = 1e-6


def tree_graph(**kwargs):
    return LayoutGraph(
        nodes=["R", "A", "B", "C"],
        edges={"e1": ("R", "A"), "e2": ("R", "B"), "e3": ("A", "C")},
        has_parents=True,
        **kwargs,
    )


def test_topological_order_is_stable():
    order, has_cycle = topological_order(
        ["A", "B", "C", "D"], {"A": ["C"], "B": ["C"], "C": ["D"], "D": []}
    )

    assert order == ["A", "B", "C", "D"]
    assert not has_cycle


def test_topological_order_detects_cycle():
    order, has_cycle = topological_order(["A", "B", "C"], {"A": ["B"], "B": ["A"], "C": []})

    assert has_cycle
    assert order == ["C"]


@pytest.mark.parametrize(
    "orientation, kind, expected",
    [
        ("auto", TREE, ("y", -1)),
        ("auto", DAG, ("x", 1)),
        ("left", TREE, ("x", 1)),
        ("right", DAG, ("x", -1)),
        ("top", DAG, ("y", -1)),
        ("bottom", TREE, ("y", 1)),
    ],
)
def test_orientation_axes(orientation, kind, expected):
    assert orientation_axes(orientation, kind) == expected


def test_tree_constraints():
    structure = parent_position_constraints(tree_graph())

    assert structure.kind == TREE
    assert (structure.depth_axis, structure.direction) == ("y", -1)
    # R.x = mean(A.x, B.x), A.y = B.y, A.x = C.x
    assert len(structure.extra.equality) == 3
    # R.y >= A.y, A.y >= C.y
    assert len(structure.extra.leq) == 2
    assert structure.extra.skipped == []


def test_dag_constrains_every_child():
    graph = LayoutGraph(
        nodes=["A", "B", "C"],
        edges={"ab": ("A", "B"), "ac": ("A", "C"), "bc": ("B", "C")},
        has_parents=True,
    )

    structure = parent_position_constraints(graph)

    assert structure.kind == DAG
    assert structure.extra.equality.is_empty
    np.testing.assert_allclose(
        structure.extra.leq.matrix,
        [
            [1, 0, -1, 0, 0, 0],
            [1, 0, 0, 0, -1, 0],
            [0, 0, 1, 0, -1, 0],
        ],
    )


def test_shared_child_is_not_a_tree():
    graph = LayoutGraph(nodes=["A", "B", "C"], edges={"ac": ("A", "C"), "bc": ("B", "C")}, has_parents=True)

    assert parent_position_constraints(graph).kind == DAG


def test_cycle_falls_back_silently():
    graph = LayoutGraph(nodes=["A", "B"], edges={"ab": ("A", "B"), "ba": ("B", "A")}, has_parents=True)

    structure = parent_position_constraints(graph)

    assert structure.kind is None
    assert not structure.has_extra
    assert structure.extra.equality.is_empty and structure.extra.leq.is_empty


def test_self_loops_do_not_count_as_children():
    graph = LayoutGraph(
        nodes=["R", "A"],
        edges={"ra": ("R", "A"), "loop": ("A", "A")},
        has_parents=True,
    )

    structure = parent_position_constraints(graph, "left")

    assert structure.kind == TREE
    # R.x <= A.x and R.y = A.y
    assert len(structure.extra.leq) == 1
    assert len(structure.extra.equality) == 1


def test_tree_seed_levels_and_in_order_spread():
    graph = tree_graph()

    pos = initialize_tree_positions(graph, "y", -1, 2.0, np.random.default_rng(0))
    named = dict(zip(graph.nodes, map(tuple, pos)))

    assert named["R"][1] > named["A"][1]
    assert named["A"][1] == named["B"][1]
    assert named["A"][1] > named["C"][1]
    # in-order walk: A, C, R, B
    assert named["A"][0] < named["C"][0] < named["R"][0] < named["B"][0]


def test_tree_seed_keeps_previous_positions():
    graph = tree_graph(positions={"R": (10.0, 10.0)})

    pos = initialize_tree_positions(graph, "y", -1, 2.0, np.random.default_rng(1))

    assert tuple(pos[0]) == (10.0, 10.0)


def test_graph_seed_orders_depth_axis():
    graph = LayoutGraph(nodes=["C", "A", "B"])

    pos = initialize_graph_positions(graph, ["A", "B", "C"], "x", 1, 2.0, np.random.default_rng(2))
    named = dict(zip(graph.nodes, map(tuple, pos)))

    assert named["A"][0] < named["B"][0] < named["C"][0]


def test_solved_tree_respects_structure():
    graph = tree_graph()

    result = node_positions(graph, {"random_seed": 5})
    pos = positions_by_name(graph.nodes, result)

    assert result.converged
    assert pos["A"][1] == pytest.approx(pos["B"][1], abs=TOL)
    assert pos["R"][0] == pytest.approx((pos["A"][0] + pos["B"][0]) / 2, abs=TOL)
    assert pos["A"][0] == pytest.approx(pos["C"][0], abs=TOL)
    assert pos["R"][1] >= pos["A"][1] - TOL
    assert pos["A"][1] >= pos["C"][1] - TOL


def test_solved_dag_keeps_parents_left_of_children():
    graph = LayoutGraph(
        nodes=["A", "B", "C"],
        edges={"ab": ("A", "B"), "ac": ("A", "C"), "bc": ("B", "C")},
        has_parents=True,
    )

    result = node_positions(graph, {"random_seed": 3})
    pos = positions_by_name(graph.nodes, result)

    assert result.converged
    assert pos["A"][0] <= pos["B"][0] + TOL
    assert pos["A"][0] <= pos["C"][0] + TOL
    assert pos["B"][0] <= pos["C"][0] + TOL


def test_cyclic_hierarchy_still_solves():
    graph = LayoutGraph(nodes=["A", "B"], edges={"ab": ("A", "B"), "ba": ("B", "A")}, has_parents=True)

    result = node_positions(graph, {"random_seed": 4})

    assert result.converged
    assert len(result.positions) == 2


def test_structural_constraints_accept_any_node_name():
    parent, first, second = "Bob's", "line\nbreak", "C"
    graph = LayoutGraph(
        nodes=[parent, first, second],
        edges={"a": (parent, first), "b": (parent, second)},
        has_parents=True,
    )

    structure = parent_position_constraints(graph)

    assert structure.kind == TREE
    assert structure.extra.skipped == []
    # siblings level, parent centred over them
    np.testing.assert_allclose(structure.extra.equality.matrix, [[0, 0, 0, 1, 0, -1], [1, 0, -0.5, 0, -0.5, 0]])
    # parent above its first child
    np.testing.assert_allclose(structure.extra.leq.matrix, [[0, -1, 0, 1, 0, 0]])

    result = node_positions(graph, {"random_seed": 5})
    pos = positions_by_name(graph.nodes, result)

    assert pos[first][1] == pytest.approx(pos[second][1], abs=TOL)
    assert pos[parent][0] == pytest.approx((pos[first][0] + pos[second][0]) / 2, abs=TOL)
    assert pos[parent][1] >= pos[first][1] - TOL
