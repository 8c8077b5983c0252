"""Tests for flowrank/analysis/pagerank.py and flowrank/analysis/scores.py."""

import asyncio
import math

import pytest

from flowrank.algorithm.errors import InvalidWeightsError
from flowrank.analysis.pagerank import PagerankOptions, pagerank
from flowrank.analysis.scores import scale_scores
from flowrank.graph.address import EdgeAddress, NodeAddress
from flowrank.graph.model import Edge, Graph
from flowrank.utils.task_reporter import SilentTaskReporter
from flowrank.weights.evaluator import weights_to_edge_evaluator
from flowrank.weights.model import EdgeWeight, Weights


def _node(*parts: str) -> NodeAddress:
    return NodeAddress.from_parts(parts)


def _edge(name: str, src: NodeAddress, dst: NodeAddress) -> Edge:
    return Edge(address=EdgeAddress.from_parts([name]), src=src, dst=dst, timestamp_ms=0)


def _constant(edge: Edge) -> EdgeWeight:
    return EdgeWeight(forwards=6.0, backwards=3.0)


N1, N2, SINK = _node("n1"), _node("n2"), _node("sink")

SCENARIO_OPTIONS = PagerankOptions(
    self_loop_weight=1.0,
    convergence_threshold=1e-6,
    max_iterations=255,
    yield_after_ms=1.0,
    verbose=False,
)


def _asymmetric_chain() -> Graph:
    graph = Graph()
    for node in (N1, N2, SINK):
        graph.add_node(node)
    graph.add_edge(_edge("e1", N1, N2))
    graph.add_edge(_edge("e2", N2, SINK))
    graph.add_edge(_edge("e3", N1, SINK))
    graph.add_edge(_edge("e4", SINK, SINK))
    return graph


def _mixed_graph() -> Graph:
    a, b, c, d = _node("a"), _node("b"), _node("c"), _node("d")
    graph = Graph()
    for node in (a, b, c, d):
        graph.add_node(node)
    graph.add_edge(_edge("ab", a, b))
    graph.add_edge(_edge("bc1", b, c))
    graph.add_edge(_edge("bc2", b, c))
    graph.add_edge(_edge("ca", c, a))
    graph.add_edge(_edge("aa", a, a))
    return graph


def _assert_decomposition_consistent(result) -> None:
    assert math.fsum(result.node_distribution.values()) == pytest.approx(1.0, abs=1e-6)
    for node, entry in result.decomposition.items():
        scores = [sc.connection_score for sc in entry.scored_connections]
        assert math.fsum(scores) == pytest.approx(entry.score, abs=1e-6)
        assert scores == sorted(scores, reverse=True)


def test_pagerank_on_asymmetric_chain():
    result = asyncio.run(pagerank(_asymmetric_chain(), _constant, SCENARIO_OPTIONS))
    assert result.converged
    assert result.node_order == (N1, N2, SINK)
    assert [result.node_distribution[n] for n in result.node_order] == pytest.approx(
        [13 / 68, 15 / 68, 40 / 68], abs=1e-5
    )
    assert set(result.decomposition) == {N1, N2, SINK}
    for node, entry in result.decomposition.items():
        assert entry.score == result.node_distribution[node]
    _assert_decomposition_consistent(result)


def test_pagerank_decomposition_explains_scores_on_weighted_graph():
    weights = Weights.empty()
    weights.set_node_weight(_node("a"), 3)
    weights.set_node_weight(_node("c"), 0.5)
    weights.set_edge_weight(EdgeAddress.from_parts(["bc2"]), forwards=4, backwards=0.25)
    options = PagerankOptions(self_loop_weight=0.5, convergence_threshold=1e-10)
    result = asyncio.run(pagerank(_mixed_graph(), weights_to_edge_evaluator(weights), options))
    assert result.converged
    assert len(result.decomposition) == 4
    _assert_decomposition_consistent(result)


def test_pagerank_empty_graph():
    result = asyncio.run(pagerank(Graph(), _constant, SCENARIO_OPTIONS))
    assert result.node_order == ()
    assert result.node_distribution == {}
    assert result.decomposition == {}


def test_pagerank_single_node():
    graph = Graph().add_node(_node("only"))
    options = PagerankOptions(self_loop_weight=1.0, convergence_threshold=1e-6)
    result = asyncio.run(pagerank(graph, _constant, options))
    assert result.converged
    assert result.iterations == 1
    assert result.node_distribution[_node("only")] == pytest.approx(1.0)


def test_pagerank_options_have_no_seed_mixing():
    with pytest.raises(TypeError):
        PagerankOptions(alpha=0.5)


def test_pagerank_zero_weights_raise():
    graph = Graph().add_node(_node("lonely"))
    options = PagerankOptions(self_loop_weight=0.0)
    with pytest.raises(InvalidWeightsError):
        asyncio.run(pagerank(graph, _constant, options))


def test_pagerank_reports_stages():
    reporter = SilentTaskReporter()
    asyncio.run(pagerank(_asymmetric_chain(), _constant, SCENARIO_OPTIONS, reporter=reporter))
    started = [task for kind, task in reporter.entries() if kind == "START"]
    assert started == [
        "pagerank",
        "pagerank/connections",
        "pagerank/chain",
        "pagerank/solve",
        "stationary distribution",
        "pagerank/decompose",
    ]
    assert reporter.active_tasks() == []


def test_pagerank_failure_finishes_reporter_tasks():
    reporter = SilentTaskReporter()
    graph = Graph().add_node(_node("lonely"))
    with pytest.raises(InvalidWeightsError):
        asyncio.run(pagerank(graph, _constant, PagerankOptions(self_loop_weight=0.0), reporter=reporter))
    assert reporter.active_tasks() == []
    assert reporter.entries()[-2:] == [("FINISH", "pagerank/chain"), ("FINISH", "pagerank")]
    # Same reporter, next run.
    asyncio.run(pagerank(_asymmetric_chain(), _constant, SCENARIO_OPTIONS, reporter=reporter))
    assert reporter.active_tasks() == []


def test_pagerank_options_validated():
    with pytest.raises(ValueError):
        PagerankOptions(self_loop_weight=-0.5)
    with pytest.raises(ValueError):
        PagerankOptions(max_iterations=-3)


# ---------------------------------------------------------------------------
# scale_scores
# ---------------------------------------------------------------------------


def test_scale_scores_total():
    scaled = scale_scores({N1: 0.25, N2: 0.75}, total_score=1000)
    assert scaled == {N1: 250.0, N2: 750.0}


def test_scale_scores_by_prefix():
    alice = _node("user", "alice")
    bob = _node("user", "bob")
    commit = _node("commit", "abc")
    scaled = scale_scores({alice: 0.2, bob: 0.2, commit: 0.6}, total_score=100, node_prefix=_node("user"))
    assert scaled[alice] == pytest.approx(50.0)
    assert scaled[bob] == pytest.approx(50.0)
    assert scaled[commit] == pytest.approx(150.0)


def test_scale_scores_without_mass_raises():
    with pytest.raises(ValueError):
        scale_scores({N1: 1.0}, node_prefix=_node("user"))
