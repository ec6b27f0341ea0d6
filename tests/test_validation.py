import math

import pytest

from graphmaker_layout.graph import Edge, LayoutGraph
from graphmaker_layout.solver.model import LayoutOptions
from graphmaker_layout.validate import ValidationError, validate_graph, validate_node_order, validate_options


def test_default_options_are_valid():
    validate_options(LayoutOptions())


@pytest.mark.parametrize(
    "overrides, message_part",
    [
        ({"ambient": -1.0}, "ambient"),
        ({"max_iter": -5}, "max_iter"),
        ({"max_iter": 2.5}, "max_iter"),
        ({"tol": 0.0}, "tol"),
        ({"dt": math.inf}, "dt"),
        ({"anneal": 0.0}, "anneal"),
        ({"anneal": 1.01}, "anneal"),
        ({"sigma": -2.0}, "sigma"),
        ({"orientation": "diagonal"}, "orientation"),
        ({"random_seed": "seven"}, "random_seed"),
    ],
)
def test_invalid_options(overrides, message_part):
    with pytest.raises(ValidationError) as exc:
        validate_options(LayoutOptions(**overrides))

    assert message_part in str(exc.value)


def test_node_order_must_be_unique():
    with pytest.raises(ValidationError) as exc:
        validate_node_order(["A", "B", "A"])

    assert "duplicate" in str(exc.value)


def test_edges_must_reference_known_nodes():
    graph = LayoutGraph(nodes=["A"], edges={"e": ("A", "B")})

    with pytest.raises(ValidationError) as exc:
        validate_graph(graph)

    assert "unknown node 'B'" in str(exc.value)


def test_positions_must_be_finite_and_known():
    with pytest.raises(ValidationError):
        validate_graph(LayoutGraph(nodes=["A"], positions={"A": (math.nan, 0.0)}))
    with pytest.raises(ValidationError):
        validate_graph(LayoutGraph(nodes=["A"], positions={"B": (0.0, 0.0)}))


def test_graph_from_dict_accepts_both_shapes():
    graph = LayoutGraph.from_dict(
        {
            "nodes": ["A", "B"],
            "edges": [["A", "B"], {"sourceNode": "B", "targetNode": "B"}],
            "constraints": ["A.x = 0", {"constraints": ["B.y <= 1"]}],
            "hasParents": True,
            "_positions": {"A": [1, 2]},
        }
    )

    assert graph.nodes == ["A", "B"]
    assert list(graph.edges.values()) == [Edge("A", "B"), Edge("B", "B")]
    assert graph.constraints == ["A.x = 0", "B.y <= 1"]
    assert graph.has_parents
    assert graph.positions == {"A": (1.0, 2.0)}
    assert graph.children_of("B") == []
    assert graph.self_loop_counts() == {"B": 1}
    validate_graph(graph)


@pytest.mark.parametrize("edge", [{"source": "A"}, ["A"], 42])
def test_graph_from_dict_rejects_bad_edges(edge):
    with pytest.raises(ValueError):
        LayoutGraph.from_dict({"nodes": ["A"], "edges": [edge]})
