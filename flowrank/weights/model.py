from __future__ import annotations

from dataclasses import dataclass, field

from flowrank.graph.address import EdgeAddress, NodeAddress
from flowrank.utils.numerics import finite_nonnegative

__all__ = ["EdgeWeight", "Weights"]


@dataclass(frozen=True, slots=True)
class EdgeWeight:
    forwards: float
    backwards: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "forwards", finite_nonnegative(self.forwards))
        object.__setattr__(self, "backwards", finite_nonnegative(self.backwards))


@dataclass(slots=True)
class Weights:
    """Prefix-keyed weight overrides.

    ``node_weights`` and ``edge_weights`` map an address *prefix* to a
    weight; an entry applies to every address that starts with it.
    """

    node_weights: dict[NodeAddress, float] = field(default_factory=dict)
    edge_weights: dict[EdgeAddress, EdgeWeight] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> Weights:
        return cls()

    def copy(self) -> Weights:
        return Weights(
            node_weights=dict(self.node_weights),
            edge_weights=dict(self.edge_weights),
        )

    def set_node_weight(self, prefix: NodeAddress, weight: float) -> None:
        self.node_weights[prefix] = finite_nonnegative(weight)

    def set_edge_weight(self, prefix: EdgeAddress, forwards: float, backwards: float) -> None:
        self.edge_weights[prefix] = EdgeWeight(forwards=forwards, backwards=backwards)
