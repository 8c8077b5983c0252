from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

import networkx as nx  # type: ignore[import-not-found]

from flowrank.graph.address import EdgeAddress, NodeAddress

__all__ = ["Edge", "Graph", "IncidentEdges"]


@dataclass(frozen=True, slots=True)
class Edge:
    address: EdgeAddress
    src: NodeAddress
    dst: NodeAddress
    timestamp_ms: int = 0


@dataclass(frozen=True, slots=True)
class IncidentEdges:
    """Edges touching one node, split by direction.

    A loop edge (``src == dst``) is listed in both tuples.
    """

    in_edges: tuple[Edge, ...]
    out_edges: tuple[Edge, ...]


class Graph:
    """Directed multigraph of addressed nodes and edges.

    Backed by a :class:`networkx.MultiDiGraph` whose nodes are
    :class:`NodeAddress` values and whose edge keys are the edges'
    :class:`EdgeAddress`.  Iteration order is always address order, never
    insertion order.
    """

    def __init__(self) -> None:
        self._graph = nx.MultiDiGraph()
        self._edges: dict[EdgeAddress, Edge] = {}

    def add_node(self, node: NodeAddress) -> Graph:
        if not isinstance(node, NodeAddress):
            raise ValueError(f"expected NodeAddress, got: {node!r}")
        self._graph.add_node(node)
        return self

    def add_edge(self, edge: Edge) -> Graph:
        existing = self._edges.get(edge.address)
        if existing is not None:
            if existing == edge:
                return self
            raise ValueError(
                f"conflict between new edge {edge!r} and existing edge {existing!r}"
            )
        for endpoint in (edge.src, edge.dst):
            if not self._graph.has_node(endpoint):
                raise ValueError(f"missing endpoint {endpoint} for edge {edge.address}")
        self._graph.add_edge(edge.src, edge.dst, key=edge.address, edge=edge)
        self._edges[edge.address] = edge
        return self

    def has_node(self, node: NodeAddress) -> bool:
        return self._graph.has_node(node)

    def has_edge(self, address: EdgeAddress) -> bool:
        return address in self._edges

    def edge(self, address: EdgeAddress) -> Edge | None:
        return self._edges.get(address)

    @property
    def node_count(self) -> int:
        return self._graph.number_of_nodes()

    @property
    def edge_count(self) -> int:
        return len(self._edges)

    def nodes(self, prefix: NodeAddress | None = None) -> Iterator[NodeAddress]:
        for node in sorted(self._graph.nodes):
            if prefix is None or node.has_prefix(prefix):
                yield node

    def edges(self) -> Iterator[Edge]:
        for address in sorted(self._edges):
            yield self._edges[address]

    def in_edges(self, node: NodeAddress) -> list[Edge]:
        self._require_node(node)
        found = [edge for _, _, edge in self._graph.in_edges(node, data="edge")]
        return sorted(found, key=lambda edge: edge.address)

    def out_edges(self, node: NodeAddress) -> list[Edge]:
        self._require_node(node)
        found = [edge for _, _, edge in self._graph.out_edges(node, data="edge")]
        return sorted(found, key=lambda edge: edge.address)

    def incident_edges(self, node: NodeAddress) -> IncidentEdges:
        return IncidentEdges(
            in_edges=tuple(self.in_edges(node)),
            out_edges=tuple(self.out_edges(node)),
        )

    def _require_node(self, node: NodeAddress) -> None:
        if not self._graph.has_node(node):
            raise KeyError(f"Node not found: {node}")
