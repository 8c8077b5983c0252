"""Explain each node's score as a sum over its connections.

At a fixed point of the chain built by
:func:`~flowrank.algorithm.graph_to_markov_chain.create_ordered_sparse_markov_chain`
(with no seed mixing) a node's score is exactly the sum, over its
connections, of ``score(source) * weight / total_out_weight(source)``.
:func:`decompose` lists those terms, largest first.  The identity only
holds once the distribution has converged; on a rough distribution the
terms still add up to *something*, just not to the node's score.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, assert_never

from flowrank.algorithm.errors import MissingScoreError
from flowrank.algorithm.graph_to_markov_chain import (
    Adjacency,
    Connection,
    Connections,
    InEdge,
    OutEdge,
    SyntheticLoop,
    adjacency_source,
    total_out_weights,
)
from flowrank.graph.address import NodeAddress
from flowrank.graph.model import Edge

__all__ = [
    "NodeDecomposition",
    "PagerankNodeDecomposition",
    "ScoredConnection",
    "decompose",
    "format_decomposition",
]


@dataclass(frozen=True, slots=True)
class ScoredConnection:
    connection: Connection
    source: NodeAddress
    connection_score: float


@dataclass(frozen=True, slots=True)
class NodeDecomposition:
    score: float
    # Sorted by connection_score, non-increasing.
    scored_connections: tuple[ScoredConnection, ...]


PagerankNodeDecomposition = dict[NodeAddress, NodeDecomposition]


def decompose(
    node_distribution: Mapping[NodeAddress, float],
    connections: Connections,
) -> PagerankNodeDecomposition:
    """Break every node's score down into per-connection contributions.

    Raises
    ------
    MissingScoreError
        If a node in *connections*, or a source one of them draws from,
        has no entry in *node_distribution*.
    """
    totals = total_out_weights(connections)
    result: PagerankNodeDecomposition = {}
    for target in sorted(connections):
        score = _score_of(node_distribution, target)
        scored: list[ScoredConnection] = []
        for connection in connections[target]:
            source = adjacency_source(target, connection.adjacency)
            source_score = _score_of(node_distribution, source)
            total = totals[source]
            share = connection.weight / total if total > 0 else 0.0
            connection_score = source_score * share
            scored.append(ScoredConnection(connection, source, connection_score))
        # list.sort is stable, so ties keep connection order.
        scored.sort(key=lambda item: item.connection_score, reverse=True)
        result[target] = NodeDecomposition(score=score, scored_connections=tuple(scored))
    return result


def _score_of(node_distribution: Mapping[NodeAddress, float], node: NodeAddress) -> float:
    try:
        return node_distribution[node]
    except KeyError:
        raise MissingScoreError(node) from None


def format_decomposition(decomposition: PagerankNodeDecomposition) -> dict[str, Any]:
    """Render a decomposition as plain, string-keyed data.

    Useful for golden comparisons and JSON dumps; node order follows
    address order.
    """
    return {
        str(node): {
            "score": entry.score,
            "scored_connections": [
                {
                    "connection": {
                        "adjacency": _format_adjacency(item.connection.adjacency),
                        "weight": item.connection.weight,
                    },
                    "source": str(item.source),
                    "connection_score": item.connection_score,
                }
                for item in entry.scored_connections
            ],
        }
        for node, entry in sorted(decomposition.items())
    }


def _format_adjacency(adjacency: Adjacency) -> dict[str, Any]:
    match adjacency:
        case SyntheticLoop():
            return {"type": "SYNTHETIC_LOOP"}
        case InEdge(edge=edge):
            return {"type": "IN_EDGE", "edge": _format_edge(edge)}
        case OutEdge(edge=edge):
            return {"type": "OUT_EDGE", "edge": _format_edge(edge)}
        case _:
            assert_never(adjacency)


def _format_edge(edge: Edge) -> dict[str, Any]:
    return {
        "address": str(edge.address),
        "src": str(edge.src),
        "dst": str(edge.dst),
        "timestamp_ms": edge.timestamp_ms,
    }
