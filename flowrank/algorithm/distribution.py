"""Dense probability vectors indexed by node position."""

from __future__ import annotations

import math
from collections.abc import Sequence

from flowrank.algorithm.errors import MalformedDistributionError
from flowrank.defaults import DISTRIBUTION_TOLERANCE

__all__ = [
    "Distribution",
    "compute_delta",
    "uniform_distribution",
    "validate_distribution",
]

Distribution = list[float]


def uniform_distribution(n: int) -> Distribution:
    if n <= 0:
        raise ValueError(f"expected positive size, got: {n}")
    return [1.0 / n] * n


def compute_delta(pi0: Sequence[float], pi1: Sequence[float]) -> float:
    """L1 distance between two equal-length distributions."""
    if len(pi0) != len(pi1):
        raise ValueError(f"length mismatch: {len(pi0)} vs {len(pi1)}")
    return math.fsum(abs(a - b) for a, b in zip(pi0, pi1))


def validate_distribution(
    name: str,
    pi: Sequence[float],
    size: int,
    tolerance: float = DISTRIBUTION_TOLERANCE,
) -> None:
    if len(pi) != size:
        raise MalformedDistributionError(name, f"expected {size} entries, got {len(pi)}")
    for index, value in enumerate(pi):
        if not math.isfinite(value) or value < 0:
            raise MalformedDistributionError(name, f"entry {index} is {value}")
    total = math.fsum(pi)
    if abs(total - 1.0) > tolerance:
        raise MalformedDistributionError(name, f"sums to {total}, expected 1")
