"""Minimal graph description consumed by the layout solver."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, NamedTuple, Sequence, Tuple

NodeName = str
Point = Tuple[float, float]


class Edge(NamedTuple):
    source: NodeName
    target: NodeName

    @property
    def is_self_loop(self) -> bool:
        return self.source == self.target


@dataclass
class LayoutGraph:
    """Nodes, directed edges and positional constraints of one layout request.

    ``nodes`` fixes the node ordering used for every matrix column. ``edges``
    maps an edge name to its endpoints; the insertion order of edges defines
    the order of each node's children. ``positions`` optionally carries the
    result of a previous solve so that re-layouts start where the last one
    ended.
    """

    nodes: List[NodeName]
    edges: Dict[str, Edge] = field(default_factory=dict)
    constraints: List[str] = field(default_factory=list)
    has_parents: bool = False
    positions: Dict[NodeName, Point] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.nodes = list(self.nodes)
        self.edges = {name: Edge(*edge) for name, edge in self.edges.items()}
        self.positions = {name: (float(p[0]), float(p[1])) for name, p in self.positions.items()}

    @property
    def index(self) -> Dict[NodeName, int]:
        return {name: idx for idx, name in enumerate(self.nodes)}

    def out_edges(self, node: NodeName) -> List[Edge]:
        return [edge for edge in self.edges.values() if edge.source == node]

    def children_of(self, node: NodeName) -> List[NodeName]:
        """Distinct targets of ``node``'s outgoing edges, self-loops excluded."""

        children: List[NodeName] = []
        for edge in self.out_edges(node):
            if not edge.is_self_loop and edge.target not in children:
                children.append(edge.target)
        return children

    def children_map(self) -> Dict[NodeName, List[NodeName]]:
        return {node: self.children_of(node) for node in self.nodes}

    def self_loop_counts(self) -> Dict[NodeName, int]:
        counts: Dict[NodeName, int] = {}
        for edge in self.edges.values():
            if edge.is_self_loop:
                counts[edge.source] = counts.get(edge.source, 0) + 1
        return counts

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LayoutGraph":
        """Build a graph from the JSON shape used by the orchestration layer.

        ``nodes`` may be a mapping (keys are node names) or a list of names.
        ``edges`` may be a mapping of edge name to ``{"source", "target"}``
        (``sourceNode``/``targetNode`` are accepted too) or a list of
        ``[source, target]`` pairs. ``constraints`` may mix plain strings with
        ``{"constraints": [...]}`` groups.
        """

        raw_nodes = data.get("nodes") or []
        nodes = list(raw_nodes.keys()) if isinstance(raw_nodes, Mapping) else list(raw_nodes)

        edges: Dict[str, Edge] = {}
        raw_edges = data.get("edges") or {}
        if isinstance(raw_edges, Mapping):
            for name, spec in raw_edges.items():
                edges[str(name)] = _edge_from_spec(spec)
        else:
            for idx, spec in enumerate(raw_edges):
                edges[f"e{idx}"] = _edge_from_spec(spec)

        constraints: List[str] = []
        for entry in data.get("constraints") or []:
            if isinstance(entry, str):
                constraints.append(entry)
            elif isinstance(entry, Mapping):
                constraints.extend(str(c) for c in entry.get("constraints", []))
            else:
                raise ValueError(f"invalid constraint entry {entry!r}")

        raw_positions = data.get("positions", data.get("_positions")) or {}
        return cls(
            nodes=nodes,
            edges=edges,
            constraints=constraints,
            has_parents=bool(data.get("hasParents", data.get("has_parents", False))),
            positions=dict(raw_positions),
        )


def _edge_from_spec(spec: Any) -> Edge:
    if isinstance(spec, Mapping):
        source = spec.get("source", spec.get("sourceNode"))
        target = spec.get("target", spec.get("targetNode"))
        if source is None or target is None:
            raise ValueError(f"edge {spec!r} needs a source and a target")
        return Edge(str(source), str(target))
    if isinstance(spec, Sequence) and not isinstance(spec, str) and len(spec) == 2:
        return Edge(str(spec[0]), str(spec[1]))
    raise ValueError(f"invalid edge specification {spec!r}")


def positions_from_list(nodes: Sequence[NodeName], positions: Sequence[Sequence[float]]) -> Dict[NodeName, Point]:
    return {name: (float(p[0]), float(p[1])) for name, p in zip(nodes, positions)}


__all__ = ["Edge", "LayoutGraph", "NodeName", "Point", "positions_from_list"]
