"""Hierarchical node and edge addresses.

An address is an immutable sequence of string parts, e.g.
``NodeAddress.from_parts(["github", "user", "alice"])``.  Addresses are
hashable map keys and are totally ordered lexicographically by their
parts, which is what makes node ordering (and therefore every score the
algorithm produces) reproducible across runs.

Node and edge addresses are distinct types: they never compare equal and
ordering comparisons between the two kinds raise :class:`TypeError`.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import TypeVar

__all__ = ["EdgeAddress", "NodeAddress"]

_A = TypeVar("_A", bound="_Address")


def _checked_parts(parts: Iterable[str]) -> tuple[str, ...]:
    # A bare string is iterable too; it would split into characters.
    if isinstance(parts, str):
        raise ValueError(f"address parts must be a sequence of strings, not a string: {parts!r}")
    return tuple(parts)


@dataclass(frozen=True, order=True, slots=True)
class _Address:
    parts: tuple[str, ...]

    def __post_init__(self) -> None:
        parts = _checked_parts(self.parts)
        for part in parts:
            if not isinstance(part, str):
                raise ValueError(f"address part must be a string, got: {part!r}")
            if "\0" in part:
                raise ValueError(f"address part must not contain NUL: {part!r}")
        object.__setattr__(self, "parts", parts)

    @classmethod
    def from_parts(cls: type[_A], parts: Iterable[str]) -> _A:
        return cls(_checked_parts(parts))

    @classmethod
    def empty(cls: type[_A]) -> _A:
        return cls(())

    def to_parts(self) -> list[str]:
        return list(self.parts)

    def append(self: _A, *parts: str) -> _A:
        return type(self)(self.parts + tuple(parts))

    def has_prefix(self: _A, prefix: _A) -> bool:
        if type(prefix) is not type(self):
            raise TypeError(
                f"cannot compare {type(self).__name__} with {type(prefix).__name__}"
            )
        return self.parts[: len(prefix.parts)] == prefix.parts

    def prefixes(self: _A) -> Iterator[_A]:
        """Yield every prefix, from the empty address up to ``self``."""
        for i in range(len(self.parts) + 1):
            yield type(self)(self.parts[:i])

    def __str__(self) -> str:
        inner = ", ".join(json.dumps(part) for part in self.parts)
        return f"{type(self).__name__}[{inner}]"


@dataclass(frozen=True, order=True, slots=True)
class NodeAddress(_Address):
    pass


@dataclass(frozen=True, order=True, slots=True)
class EdgeAddress(_Address):
    pass
