"""Turn prefix-keyed :class:`Weights` into evaluator callables.

A node's weight is the product of the weights of every one of its
prefixes that appears in ``weights.node_weights``; a node matching no
prefix weighs :data:`~flowrank.defaults.DEFAULT_NODE_WEIGHT`.  Edge type
weights compose the same way over edge-address prefixes.

The edge evaluator scales each direction by the weight of the node the
flow lands on: ``forwards`` by the destination's weight and
``backwards`` by the source's weight.
"""

from __future__ import annotations

from collections.abc import Callable

from flowrank.defaults import (
    DEFAULT_EDGE_BACKWARDS,
    DEFAULT_EDGE_FORWARDS,
    DEFAULT_NODE_WEIGHT,
)
from flowrank.graph.address import NodeAddress
from flowrank.graph.model import Edge
from flowrank.weights.model import EdgeWeight, Weights

__all__ = [
    "EdgeEvaluator",
    "NodeEvaluator",
    "node_weight_evaluator",
    "weights_to_edge_evaluator",
]

EdgeEvaluator = Callable[[Edge], EdgeWeight]
NodeEvaluator = Callable[[NodeAddress], float]


def node_weight_evaluator(weights: Weights) -> NodeEvaluator:
    node_weights = dict(weights.node_weights)

    def evaluate(node: NodeAddress) -> float:
        weight = DEFAULT_NODE_WEIGHT
        for prefix in node.prefixes():
            prefix_weight = node_weights.get(prefix)
            if prefix_weight is not None:
                weight *= prefix_weight
        return weight

    return evaluate


def weights_to_edge_evaluator(weights: Weights) -> EdgeEvaluator:
    node_weight = node_weight_evaluator(weights)
    edge_weights = dict(weights.edge_weights)

    def evaluate(edge: Edge) -> EdgeWeight:
        forwards = DEFAULT_EDGE_FORWARDS
        backwards = DEFAULT_EDGE_BACKWARDS
        for prefix in edge.address.prefixes():
            type_weight = edge_weights.get(prefix)
            if type_weight is not None:
                forwards *= type_weight.forwards
                backwards *= type_weight.backwards
        return EdgeWeight(
            forwards=node_weight(edge.dst) * forwards,
            backwards=node_weight(edge.src) * backwards,
        )

    return evaluate
