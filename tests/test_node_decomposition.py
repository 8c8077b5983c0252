"""Tests for flowrank/analysis/node_decomposition.py."""

import asyncio
import json
import math

import pytest

from flowrank.algorithm.distribution import uniform_distribution
from flowrank.algorithm.errors import MissingScoreError
from flowrank.algorithm.graph_to_markov_chain import (
    Connection,
    InEdge,
    OutEdge,
    SyntheticLoop,
    create_connections,
    create_ordered_sparse_markov_chain,
    distribution_to_node_distribution,
)
from flowrank.algorithm.markov_chain import (
    PagerankParams,
    StationaryDistributionOptions,
    find_stationary_distribution,
)
from flowrank.analysis.node_decomposition import decompose, format_decomposition
from flowrank.graph.address import EdgeAddress, NodeAddress
from flowrank.graph.model import Edge, Graph
from flowrank.weights.model import EdgeWeight


def _node(*parts: str) -> NodeAddress:
    return NodeAddress.from_parts(parts)


def _edge(name: str, src: NodeAddress, dst: NodeAddress) -> Edge:
    return Edge(address=EdgeAddress.from_parts([name]), src=src, dst=dst, timestamp_ms=0)


def _constant(edge: Edge) -> EdgeWeight:
    return EdgeWeight(forwards=6.0, backwards=3.0)


N1, N2, SINK = _node("n1"), _node("n2"), _node("sink")
E1 = _edge("e1", N1, N2)
E2 = _edge("e2", N2, SINK)
E3 = _edge("e3", N1, SINK)
E4 = _edge("e4", SINK, SINK)


def _asymmetric_chain() -> Graph:
    graph = Graph()
    for node in (N1, N2, SINK):
        graph.add_node(node)
    for edge in (E1, E2, E3, E4):
        graph.add_edge(edge)
    return graph


def _advanced_graph() -> Graph:
    """Mixed graph: isolated node, loops, parallel and hierarchical nodes."""
    src = _node("src")
    dst = _node("dst")
    hom1 = _node("hom", "1")
    hom2 = _node("hom", "2")
    loop = _node("loop")
    halfisolated = _node("halfisolated")
    isolated = _node("isolated")
    graph = Graph()
    for node in (src, dst, hom1, hom2, loop, halfisolated, isolated):
        graph.add_node(node)
    for edge in (
        _edge("hom1", src, dst),
        _edge("hom2", src, dst),
        _edge("halfdangling", halfisolated, src),
        _edge("loop_a", loop, loop),
        _edge("loop_b", loop, loop),
        _edge("hom_pair", hom1, hom2),
        _edge("back", dst, src),
    ):
        graph.add_edge(edge)
    return graph


async def _solve(graph: Graph):
    connections = create_connections(graph, _constant, 1.0)
    osmc = create_ordered_sparse_markov_chain(connections)
    params = PagerankParams(
        chain=osmc.chain,
        alpha=0.0,
        seed=uniform_distribution(len(osmc.chain)),
        pi0=uniform_distribution(len(osmc.chain)),
    )
    result = await find_stationary_distribution(
        params,
        StationaryDistributionOptions(
            verbose=False,
            convergence_threshold=1e-6,
            max_iterations=255,
            yield_after_ms=1.0,
        ),
    )
    return connections, distribution_to_node_distribution(osmc.node_order, result.pi)


def _validate(decomposition, epsilon: float = 1e-6) -> None:
    for node, entry in decomposition.items():
        subtotal = math.fsum(sc.connection_score for sc in entry.scored_connections)
        assert abs(subtotal - entry.score) <= epsilon, f"{node}: {subtotal} != {entry.score}"

    total = math.fsum(entry.score for entry in decomposition.values())
    assert abs(total - 1.0) <= epsilon

    for entry in decomposition.values():
        scores = [sc.connection_score for sc in entry.scored_connections]
        assert scores == sorted(scores, reverse=True)


# ---------------------------------------------------------------------------
# decompose
# ---------------------------------------------------------------------------


def test_asymmetric_chain_expected_output():
    connections, pr = asyncio.run(_solve(_asymmetric_chain()))
    decomposition = decompose(pr, connections)
    _validate(decomposition)

    sink = decomposition[SINK]
    assert sink.score == pytest.approx(40 / 68, abs=1e-5)
    assert [sc.connection for sc in sink.scored_connections] == [
        Connection(InEdge(E4), 6.0),
        Connection(InEdge(E2), 6.0),
        Connection(OutEdge(E4), 3.0),
        Connection(InEdge(E3), 6.0),
        Connection(SyntheticLoop(), 1.0),
    ]
    assert [sc.source for sc in sink.scored_connections] == [SINK, N2, SINK, N1, SINK]
    assert [sc.connection_score for sc in sink.scored_connections] == pytest.approx(
        [15 / 68, 9 / 68, 7.5 / 68, 6 / 68, 2.5 / 68], abs=1e-5
    )


def test_valid_on_advanced_graph():
    connections, pr = asyncio.run(_solve(_advanced_graph()))
    _validate(decompose(pr, connections))


def test_decomposition_is_pure():
    connections, pr = asyncio.run(_solve(_advanced_graph()))
    assert decompose(pr, connections) == decompose(pr, connections)


def test_output_is_reproducible_across_runs():
    dumps = []
    for _ in range(2):
        connections, pr = asyncio.run(_solve(_asymmetric_chain()))
        dumps.append(json.dumps(format_decomposition(decompose(pr, connections))))
    assert dumps[0] == dumps[1]


def test_ties_keep_connection_order():
    a, b = _node("a"), _node("b")
    edge = _edge("ba", b, a)
    connections = {
        a: [Connection(SyntheticLoop(), 1.0), Connection(InEdge(edge), 1.0)],
        b: [Connection(SyntheticLoop(), 1.0), Connection(OutEdge(edge), 1.0)],
    }
    decomposition = decompose({a: 0.5, b: 0.5}, connections)
    assert [sc.connection.adjacency for sc in decomposition[a].scored_connections] == [
        SyntheticLoop(),
        InEdge(edge),
    ]
    assert [sc.connection_score for sc in decomposition[a].scored_connections] == [0.25, 0.25]
    _validate(decomposition)


def test_missing_score_raises():
    connections, pr = asyncio.run(_solve(_asymmetric_chain()))
    del pr[N1]
    with pytest.raises(MissingScoreError) as excinfo:
        decompose(pr, connections)
    assert excinfo.value.node == N1


def test_format_decomposition_renders_strings():
    connections, pr = asyncio.run(_solve(_asymmetric_chain()))
    formatted = format_decomposition(decompose(pr, connections))
    assert list(formatted) == ['NodeAddress["n1"]', 'NodeAddress["n2"]', 'NodeAddress["sink"]']
    first = formatted['NodeAddress["sink"]']["scored_connections"][0]
    assert first["connection"] == {
        "adjacency": {
            "type": "IN_EDGE",
            "edge": {
                "address": 'EdgeAddress["e4"]',
                "src": 'NodeAddress["sink"]',
                "dst": 'NodeAddress["sink"]',
                "timestamp_ms": 0,
            },
        },
        "weight": 6.0,
    }
    assert first["source"] == 'NodeAddress["sink"]'
