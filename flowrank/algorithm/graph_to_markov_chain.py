"""Graph → Markov chain construction.

Every node receives flow through its *connections*:

* a synthetic self loop, so that every node keeps some of its own mass
  and no node is a sink;
* each in-edge, carrying the edge's ``forwards`` weight from the edge's
  source;
* each out-edge, carrying the edge's ``backwards`` weight from the
  edge's destination (flow against the edge direction).

The node a connection draws from is its *source* (the counterparty).
Normalising every source's outgoing weight across the whole graph gives
a column-stochastic chain over the nodes in address order.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import assert_never

from flowrank.algorithm.errors import InvalidWeightsError
from flowrank.algorithm.markov_chain import SparseMarkovChain
from flowrank.graph.address import NodeAddress
from flowrank.graph.model import Edge, Graph
from flowrank.utils.numerics import finite_nonnegative
from flowrank.weights.evaluator import EdgeEvaluator
from flowrank.weights.model import EdgeWeight

__all__ = [
    "Adjacency",
    "Connection",
    "Connections",
    "InEdge",
    "OrderedSparseMarkovChain",
    "OutEdge",
    "SyntheticLoop",
    "adjacency_source",
    "create_connections",
    "create_ordered_sparse_markov_chain",
    "distribution_to_node_distribution",
    "total_out_weights",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SyntheticLoop:
    pass


@dataclass(frozen=True, slots=True)
class InEdge:
    edge: Edge


@dataclass(frozen=True, slots=True)
class OutEdge:
    edge: Edge


Adjacency = SyntheticLoop | InEdge | OutEdge


@dataclass(frozen=True, slots=True)
class Connection:
    adjacency: Adjacency
    # Raw, unnormalised weight.
    weight: float


Connections = dict[NodeAddress, list[Connection]]


@dataclass(frozen=True, slots=True)
class OrderedSparseMarkovChain:
    node_order: tuple[NodeAddress, ...]
    chain: SparseMarkovChain


def adjacency_source(target: NodeAddress, adjacency: Adjacency) -> NodeAddress:
    """Return the node whose mass flows into *target* along *adjacency*."""
    match adjacency:
        case SyntheticLoop():
            return target
        case InEdge(edge=edge):
            return edge.src
        case OutEdge(edge=edge):
            return edge.dst
        case _:
            assert_never(adjacency)


def create_connections(
    graph: Graph,
    edge_evaluator: EdgeEvaluator,
    self_loop_weight: float,
) -> Connections:
    self_loop_weight = finite_nonnegative(self_loop_weight)
    edge_weights: dict[Edge, EdgeWeight] = {}

    def weight_of(edge: Edge) -> EdgeWeight:
        weight = edge_weights.get(edge)
        if weight is None:
            weight = edge_evaluator(edge)
            edge_weights[edge] = weight
        return weight

    result: Connections = {}
    for node in graph.nodes():
        incident = graph.incident_edges(node)
        connections = [Connection(SyntheticLoop(), self_loop_weight)]
        for edge in incident.in_edges:
            connections.append(Connection(InEdge(edge), weight_of(edge).forwards))
        for edge in incident.out_edges:
            connections.append(Connection(OutEdge(edge), weight_of(edge).backwards))
        result[node] = connections
    logger.debug(
        "Built connections for %d nodes over %d edges",
        len(result),
        len(edge_weights),
    )
    return result


def total_out_weights(connections: Mapping[NodeAddress, Sequence[Connection]]) -> dict[NodeAddress, float]:
    """Sum every source's raw outgoing weight across all connections.

    Raises
    ------
    InvalidWeightsError
        If any connection weight is negative or not finite.
    ValueError
        If a connection draws from a node that has no connections entry.
    """
    contributions: dict[NodeAddress, list[float]] = {node: [] for node in connections}
    for target, target_connections in connections.items():
        for connection in target_connections:
            weight = connection.weight
            if not math.isfinite(weight) or weight < 0:
                raise InvalidWeightsError(target, f"connection weight is {weight}")
            source = adjacency_source(target, connection.adjacency)
            bucket = contributions.get(source)
            if bucket is None:
                raise ValueError(f"connection into {target} draws from unknown node {source}")
            bucket.append(weight)
    return {node: math.fsum(weights) for node, weights in contributions.items()}


def create_ordered_sparse_markov_chain(connections: Connections) -> OrderedSparseMarkovChain:
    node_order = tuple(sorted(connections))
    node_index = {node: index for index, node in enumerate(node_order)}
    totals = total_out_weights(connections)
    for node in node_order:
        if totals[node] == 0:
            raise InvalidWeightsError(node, "total outgoing weight is zero")

    chain: SparseMarkovChain = []
    for target in node_order:
        in_weights: dict[int, float] = {}
        for connection in connections[target]:
            source_index = node_index[adjacency_source(target, connection.adjacency)]
            in_weights[source_index] = in_weights.get(source_index, 0.0) + connection.weight
        chain.append(
            [
                (source_index, weight / totals[node_order[source_index]])
                for source_index, weight in sorted(in_weights.items())
            ]
        )
    return OrderedSparseMarkovChain(node_order=node_order, chain=chain)


def distribution_to_node_distribution(
    node_order: Sequence[NodeAddress],
    pi: Sequence[float],
) -> dict[NodeAddress, float]:
    if len(node_order) != len(pi):
        raise ValueError(f"length mismatch: {len(node_order)} nodes vs {len(pi)} scores")
    return dict(zip(node_order, pi))
