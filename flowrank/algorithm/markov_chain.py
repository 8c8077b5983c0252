"""Stationary distributions of sparse Markov chains.

:func:`find_stationary_distribution` runs power iteration with seed
mixing (teleportation) on a column-stochastic chain stored as in-neighbor
lists::

    pi'[v] = alpha * seed[v] + (1 - alpha) * sum(p * pi[u] for u, p in chain[v])

The loop is pure Python over plain lists, like the rest of the analytics
code, and is CPU-bound.  To keep the host event loop responsive it awaits
a yield point after any sweep that ran longer than ``yield_after_ms``
since the previous suspension.  Suspension only ever happens between two
full sweeps, so no caller can observe a half-updated iterate.
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass

from flowrank.algorithm.distribution import (
    Distribution,
    compute_delta,
    validate_distribution,
)
from flowrank.defaults import (
    DEFAULT_CONVERGENCE_THRESHOLD,
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_VERBOSE,
    DEFAULT_YIELD_AFTER_MS,
)
from flowrank.utils.numerics import finite_nonnegative, nonnegative_integer, proportion
from flowrank.utils.task_reporter import LoggingTaskReporter, TaskReporter, reporting

__all__ = [
    "PagerankParams",
    "SparseMarkovChain",
    "StationaryDistributionOptions",
    "StationaryDistributionResult",
    "find_stationary_distribution",
    "sparse_markov_chain_action",
    "sparse_markov_chain_from_transition_matrix",
]

logger = logging.getLogger(__name__)

# chain[dst] = [(src, probability), ...]
SparseMarkovChain = list[list[tuple[int, float]]]

SOLVE_TASK = "stationary distribution"
_ROW_TOLERANCE = 1e-9


@dataclass(slots=True)
class PagerankParams:
    chain: SparseMarkovChain
    alpha: float
    seed: Distribution
    pi0: Distribution


@dataclass(frozen=True, slots=True)
class StationaryDistributionOptions:
    verbose: bool = DEFAULT_VERBOSE
    convergence_threshold: float = DEFAULT_CONVERGENCE_THRESHOLD
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    yield_after_ms: float = DEFAULT_YIELD_AFTER_MS

    def __post_init__(self) -> None:
        finite_nonnegative(self.convergence_threshold)
        nonnegative_integer(self.max_iterations)
        finite_nonnegative(self.yield_after_ms)


@dataclass(slots=True)
class StationaryDistributionResult:
    pi: Distribution
    # L1 distance between the last two iterates.
    convergence_delta: float
    iterations: int
    converged: bool


def sparse_markov_chain_from_transition_matrix(
    matrix: Sequence[Sequence[float]],
) -> SparseMarkovChain:
    """Build a sparse chain from a dense row-major ``matrix[src][dst]``.

    Every row must be a probability distribution over destinations.
    """
    n = len(matrix)
    for src, row in enumerate(matrix):
        if len(row) != n:
            raise ValueError(f"expected {n} columns in row {src}, got {len(row)}")
        for value in row:
            if not math.isfinite(value) or value < 0:
                raise ValueError(f"invalid transition probability in row {src}: {value}")
        total = math.fsum(row)
        if abs(total - 1.0) > _ROW_TOLERANCE:
            raise ValueError(f"row {src} sums to {total}, expected 1")
    return [
        [(src, matrix[src][dst]) for src in range(n) if matrix[src][dst] != 0]
        for dst in range(n)
    ]


def sparse_markov_chain_action(chain: SparseMarkovChain, pi: Sequence[float]) -> Distribution:
    """One step of the chain without seed mixing."""
    return [
        sum(probability * pi[src] for src, probability in in_neighbors)
        for in_neighbors in chain
    ]


def _mixed_step(
    chain: SparseMarkovChain,
    alpha: float,
    seed: Sequence[float],
    pi: Sequence[float],
) -> Distribution:
    flow = 1.0 - alpha
    return [
        alpha * seed[dst]
        + flow * sum(probability * pi[src] for src, probability in in_neighbors)
        for dst, in_neighbors in enumerate(chain)
    ]


async def _next_tick() -> None:
    await asyncio.sleep(0)


async def find_stationary_distribution(
    params: PagerankParams,
    options: StationaryDistributionOptions | None = None,
    *,
    reporter: TaskReporter | None = None,
    clock: Callable[[], float] = time.monotonic,
    yield_point: Callable[[], Awaitable[None]] | None = None,
) -> StationaryDistributionResult:
    """Iterate ``params.pi0`` towards the chain's stationary distribution.

    Parameters
    ----------
    params:
        Chain, seed mixing weight ``alpha`` in ``[0, 1]``, the ``seed``
        distribution and the starting iterate ``pi0``.  Neither
        distribution is renormalised.
    options:
        Convergence threshold on the L1 delta, sweep budget, wall-clock
        budget between suspensions and the ``verbose`` switch.
    reporter:
        Progress side channel.  When ``options.verbose`` is set and no
        reporter is given a :class:`LoggingTaskReporter` is used.
    clock:
        Monotonic clock in seconds, used only for yield scheduling.
    yield_point:
        Awaited to hand control back to the scheduler; defaults to
        ``asyncio.sleep(0)``.

    Returns
    -------
    StationaryDistributionResult
        ``converged`` is ``False`` when the sweep budget ran out first.
        That is a normal outcome, not an error.

    Raises
    ------
    MalformedDistributionError
        If ``seed`` or ``pi0`` is not a probability vector of the
        chain's size.
    ValueError
        If ``alpha`` is not a proportion.
    """
    if options is None:
        options = StationaryDistributionOptions()
    chain = params.chain
    n = len(chain)
    alpha = proportion(params.alpha)
    validate_distribution("seed", params.seed, n)
    validate_distribution("pi0", params.pi0, n)
    seed = list(params.seed)
    if reporter is None and options.verbose:
        reporter = LoggingTaskReporter()
    if yield_point is None:
        yield_point = _next_tick

    pi = list(params.pi0)
    delta = math.inf
    iterations = 0
    converged = False
    with reporting(reporter, SOLVE_TASK):
        last_yield = clock()
        while iterations < options.max_iterations:
            next_pi = _mixed_step(chain, alpha, seed, pi)
            delta = compute_delta(pi, next_pi)
            pi = next_pi
            iterations += 1
            logger.debug("[%d] delta=%.3g", iterations, delta)
            if delta < options.convergence_threshold:
                converged = True
                break
            if iterations >= options.max_iterations:
                break
            if (clock() - last_yield) * 1000.0 > options.yield_after_ms:
                await yield_point()
                last_yield = clock()

        if iterations == 0:
            # No sweep ran; report how far pi0 is from a fixed point.
            delta = compute_delta(pi, _mixed_step(chain, alpha, seed, pi))

    if not converged:
        logger.info(
            "Stopped after %d iterations without convergence (delta=%.3g, threshold=%.3g)",
            iterations,
            delta,
            options.convergence_threshold,
        )

    return StationaryDistributionResult(
        pi=pi,
        convergence_delta=delta,
        iterations=iterations,
        converged=converged,
    )
