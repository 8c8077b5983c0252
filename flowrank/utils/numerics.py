"""Validated numeric constructors shared across FlowRank.

Each helper returns its argument unchanged (as ``float`` or ``int``) when
it satisfies the constraint and raises :class:`ValueError` otherwise, so
call sites can wrap configuration values inline. **No third-party
dependencies.**
"""

from __future__ import annotations

import math

__all__ = ["finite_nonnegative", "nonnegative_integer", "proportion"]


def finite_nonnegative(value: float) -> float:
    """Return *value* as a float if it is finite and ``>= 0``."""
    x = float(value)
    if not math.isfinite(x) or x < 0:
        raise ValueError(f"expected finite nonnegative number, got: {value!r}")
    return x


def proportion(value: float) -> float:
    """Return *value* as a float if it lies in ``[0, 1]``."""
    x = float(value)
    if not math.isfinite(x) or x < 0 or x > 1:
        raise ValueError(f"expected proportion in [0, 1], got: {value!r}")
    return x


def nonnegative_integer(value: int) -> int:
    # bool is an int subclass; reject it explicitly.
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"expected nonnegative integer, got: {value!r}")
    return value
