#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Inputs of a sieve run: the files to rewrite and the substrings to remove.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Tuple


@dataclass(frozen=True)
class FileTask:
    """A discovered file and its size in bytes at discovery time."""
    path: Path
    size: int


class PatternSet:
    """Ordered, read-only collection of literal substrings.

    Empty strings are rejected since they would match every line.
    Duplicates are dropped, keeping first-seen order.
    """

    __slots__ = ('_patterns',)

    def __init__(self, patterns: Iterable[str] = ()):
        seen = []
        for pattern in patterns:
            if not isinstance(pattern, str):
                raise TypeError(f"Pattern must be str, got {type(pattern).__name__}")
            if not pattern:
                raise ValueError("Empty pattern would remove every line")
            if pattern not in seen:
                seen.append(pattern)
        self._patterns: Tuple[str, ...] = tuple(seen)

    @property
    def patterns(self) -> Tuple[str, ...]:
        return self._patterns

    def __iter__(self) -> Iterator[str]:
        return iter(self._patterns)

    def __len__(self) -> int:
        return len(self._patterns)

    def __bool__(self) -> bool:
        return bool(self._patterns)

    def __eq__(self, other) -> bool:
        if isinstance(other, PatternSet):
            return self._patterns == other._patterns
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._patterns)

    def __repr__(self) -> str:
        return f"PatternSet({list(self._patterns)!r})"
