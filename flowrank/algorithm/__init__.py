from __future__ import annotations

from flowrank.algorithm.errors import (
    FlowRankError,
    InvalidWeightsError,
    MalformedDistributionError,
    MissingScoreError,
)
from flowrank.algorithm.graph_to_markov_chain import (
    Connection,
    InEdge,
    OrderedSparseMarkovChain,
    OutEdge,
    SyntheticLoop,
    create_connections,
    create_ordered_sparse_markov_chain,
)
from flowrank.algorithm.markov_chain import (
    PagerankParams,
    StationaryDistributionOptions,
    StationaryDistributionResult,
    find_stationary_distribution,
)

__all__ = [
    "Connection",
    "FlowRankError",
    "InEdge",
    "InvalidWeightsError",
    "MalformedDistributionError",
    "MissingScoreError",
    "OrderedSparseMarkovChain",
    "OutEdge",
    "PagerankParams",
    "StationaryDistributionOptions",
    "StationaryDistributionResult",
    "SyntheticLoop",
    "create_connections",
    "create_ordered_sparse_markov_chain",
    "find_stationary_distribution",
]
