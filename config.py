from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()


# ── PageRank (flowrank/analysis/pagerank.py) ─────────────────────
SELF_LOOP_WEIGHT = float(os.getenv("FLOWRANK_SELF_LOOP_WEIGHT", "0.001"))
CONVERGENCE_THRESHOLD = float(os.getenv("FLOWRANK_CONVERGENCE_THRESHOLD", "1e-7"))
MAX_ITERATIONS = int(os.getenv("FLOWRANK_MAX_ITERATIONS", "255"))
YIELD_AFTER_MS = float(os.getenv("FLOWRANK_YIELD_AFTER_MS", "30"))
VERBOSE = bool(int(os.getenv("FLOWRANK_VERBOSE", "0")))
