"""Centralised algorithm defaults for FlowRank.

Values that can be tuned from the environment come from :mod:`config`;
the remaining numeric tolerances are fixed here so that every module
checks its invariants against the same constants.
"""

from __future__ import annotations

from config import (
    CONVERGENCE_THRESHOLD,
    MAX_ITERATIONS,
    SELF_LOOP_WEIGHT,
    VERBOSE,
    YIELD_AFTER_MS,
)

# ── PageRank pipeline (flowrank/analysis/pagerank.py) ────────────
DEFAULT_SELF_LOOP_WEIGHT: float = SELF_LOOP_WEIGHT
DEFAULT_CONVERGENCE_THRESHOLD: float = CONVERGENCE_THRESHOLD
DEFAULT_MAX_ITERATIONS: int = MAX_ITERATIONS
DEFAULT_YIELD_AFTER_MS: float = YIELD_AFTER_MS
DEFAULT_VERBOSE: bool = VERBOSE

# ── Distributions (flowrank/algorithm/distribution.py) ───────────
DISTRIBUTION_TOLERANCE: float = 1e-6

# ── Weights (flowrank/weights/evaluator.py) ──────────────────────
DEFAULT_NODE_WEIGHT: float = 1.0
DEFAULT_EDGE_FORWARDS: float = 1.0
DEFAULT_EDGE_BACKWARDS: float = 1.0

# ── Scores (flowrank/analysis/scores.py) ─────────────────────────
DEFAULT_TOTAL_SCORE: float = 1000.0
