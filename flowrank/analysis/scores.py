from __future__ import annotations

import math
from collections.abc import Mapping

from flowrank.defaults import DEFAULT_TOTAL_SCORE
from flowrank.graph.address import NodeAddress
from flowrank.utils.numerics import finite_nonnegative

__all__ = ["scale_scores"]


def scale_scores(
    node_distribution: Mapping[NodeAddress, float],
    total_score: float = DEFAULT_TOTAL_SCORE,
    node_prefix: NodeAddress | None = None,
) -> dict[NodeAddress, float]:
    """Rescale a distribution so nodes under *node_prefix* sum to *total_score*.

    Every node is rescaled by the same factor, so nodes outside the prefix
    keep their proportion to the ones inside it.  With no prefix all nodes
    count.
    """
    total_score = finite_nonnegative(total_score)
    if node_prefix is None:
        node_prefix = NodeAddress.empty()
    mass = math.fsum(
        score for node, score in node_distribution.items() if node.has_prefix(node_prefix)
    )
    if mass <= 0:
        raise ValueError(f"no probability mass under prefix {node_prefix}")
    factor = total_score / mass
    return {node: score * factor for node, score in node_distribution.items()}
