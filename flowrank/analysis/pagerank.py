"""End-to-end influence ranking over a weighted graph.

:func:`pagerank` wires the pieces together:

1. :func:`~flowrank.algorithm.graph_to_markov_chain.create_connections`
   turns the graph and edge evaluator into per-node connections.
2. :func:`~flowrank.algorithm.graph_to_markov_chain.create_ordered_sparse_markov_chain`
   normalises them into a column-stochastic chain in address order.
3. :func:`~flowrank.algorithm.markov_chain.find_stationary_distribution`
   iterates to the stationary distribution, yielding to the event loop
   between sweeps.
4. :func:`~flowrank.analysis.node_decomposition.decompose` explains every
   node's score by its connections.

The pipeline solves the pure chain (``alpha = 0``) from the uniform
distribution: every unit of a node's score then arrives through one of
its connections, so the decomposition sums back to the score.  Seed
mixing stays available through
:class:`~flowrank.algorithm.markov_chain.PagerankParams` for callers that
drive the solver directly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from flowrank.algorithm.distribution import uniform_distribution
from flowrank.algorithm.graph_to_markov_chain import (
    create_connections,
    create_ordered_sparse_markov_chain,
    distribution_to_node_distribution,
)
from flowrank.algorithm.markov_chain import (
    PagerankParams,
    StationaryDistributionOptions,
    find_stationary_distribution,
)
from flowrank.analysis.node_decomposition import PagerankNodeDecomposition, decompose
from flowrank.defaults import (
    DEFAULT_CONVERGENCE_THRESHOLD,
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_SELF_LOOP_WEIGHT,
    DEFAULT_VERBOSE,
    DEFAULT_YIELD_AFTER_MS,
)
from flowrank.graph.address import NodeAddress
from flowrank.graph.model import Graph
from flowrank.utils.numerics import finite_nonnegative
from flowrank.utils.task_reporter import LoggingTaskReporter, TaskReporter, reporting
from flowrank.weights.evaluator import EdgeEvaluator

__all__ = ["PagerankOptions", "PagerankResult", "pagerank"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PagerankOptions:
    self_loop_weight: float = DEFAULT_SELF_LOOP_WEIGHT
    convergence_threshold: float = DEFAULT_CONVERGENCE_THRESHOLD
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    yield_after_ms: float = DEFAULT_YIELD_AFTER_MS
    verbose: bool = DEFAULT_VERBOSE

    def __post_init__(self) -> None:
        finite_nonnegative(self.self_loop_weight)
        self.solver_options()

    def solver_options(self) -> StationaryDistributionOptions:
        return StationaryDistributionOptions(
            verbose=self.verbose,
            convergence_threshold=self.convergence_threshold,
            max_iterations=self.max_iterations,
            yield_after_ms=self.yield_after_ms,
        )


@dataclass(slots=True)
class PagerankResult:
    node_order: tuple[NodeAddress, ...] = ()
    node_distribution: dict[NodeAddress, float] = field(default_factory=dict)
    decomposition: PagerankNodeDecomposition = field(default_factory=dict)
    convergence_delta: float = 0.0
    iterations: int = 0
    converged: bool = True


async def pagerank(
    graph: Graph,
    edge_evaluator: EdgeEvaluator,
    options: PagerankOptions | None = None,
    *,
    reporter: TaskReporter | None = None,
) -> PagerankResult:
    """Score every node of *graph* and explain each score.

    Returns an empty :class:`PagerankResult` for a graph with no nodes.
    Errors from chain construction and the solver propagate unchanged;
    every reporter task opened before the error is finished.
    """
    if options is None:
        options = PagerankOptions()
    if graph.node_count == 0:
        return PagerankResult()
    if reporter is None and options.verbose:
        reporter = LoggingTaskReporter()

    with reporting(reporter, "pagerank"):
        with reporting(reporter, "pagerank/connections"):
            connections = create_connections(graph, edge_evaluator, options.self_loop_weight)
        with reporting(reporter, "pagerank/chain"):
            osmc = create_ordered_sparse_markov_chain(connections)

        n = len(osmc.node_order)
        with reporting(reporter, "pagerank/solve"):
            params = PagerankParams(
                chain=osmc.chain,
                alpha=0.0,
                seed=uniform_distribution(n),
                pi0=uniform_distribution(n),
            )
            solved = await find_stationary_distribution(
                params,
                options.solver_options(),
                reporter=reporter,
            )

        with reporting(reporter, "pagerank/decompose"):
            node_distribution = distribution_to_node_distribution(osmc.node_order, solved.pi)
            decomposition = decompose(node_distribution, connections)

    logger.info(
        "Ranked %d nodes in %d iterations (converged=%s, delta=%.3g)",
        n,
        solved.iterations,
        solved.converged,
        solved.convergence_delta,
    )
    return PagerankResult(
        node_order=osmc.node_order,
        node_distribution=node_distribution,
        decomposition=decomposition,
        convergence_delta=solved.convergence_delta,
        iterations=solved.iterations,
        converged=solved.converged,
    )
