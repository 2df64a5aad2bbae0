"""Literal substring line filter."""

from typing import Iterable

from ..models.file_task import PatternSet


def should_drop(line: str, patterns: Iterable[str]) -> bool:
    """Return True if line contains any pattern as a literal, case-sensitive substring."""
    return any(pattern in line for pattern in patterns)


class LineFilter:
    """Binds a PatternSet for repeated use by a rewriter."""

    def __init__(self, patterns: PatternSet):
        self._patterns = patterns.patterns

    def should_drop(self, line: str) -> bool:
        if not self._patterns:
            return False
        return should_drop(line, self._patterns)
