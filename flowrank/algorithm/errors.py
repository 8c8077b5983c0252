"""Custom exceptions for ranking computations."""

from __future__ import annotations

from flowrank.graph.address import NodeAddress


class FlowRankError(Exception):
    """Base exception for ranking computations."""
    pass


class InvalidWeightsError(FlowRankError, ValueError):
    """Raised when connection weights cannot be normalised into a chain."""
    def __init__(self, node: NodeAddress, reason: str):
        self.node = node
        self.reason = reason
        super().__init__(f"invalid weights for {node}: {reason}")


class MalformedDistributionError(FlowRankError, ValueError):
    """Raised when a seed or initial distribution is not a probability vector."""
    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f"malformed distribution '{name}': {reason}")


class MissingScoreError(FlowRankError, KeyError):
    """Raised when a decomposed node has no entry in the score mapping."""
    def __init__(self, node: NodeAddress):
        self.node = node
        super().__init__(f"no score for node {node}")

    def __str__(self) -> str:
        return str(self.args[0])
