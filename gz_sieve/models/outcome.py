#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Per-file results and run-wide totals for gz-sieve.
"""

from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Dict, List

from ..exceptions import ErrorKind


@dataclass(frozen=True)
class FileOutcome:
    """Line counts for a successfully rewritten file."""
    path: Path
    lines_read: int
    lines_removed: int

    @property
    def lines_kept(self) -> int:
        return self.lines_read - self.lines_removed


@dataclass(frozen=True)
class FailureRecord:
    """A file that could not be rewritten; its original is left untouched."""
    path: Path
    kind: ErrorKind
    message: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {'path': str(self.path), 'kind': self.kind.value, 'message': self.message}


@dataclass
class RunTotals:
    """Aggregate counters for one run.

    Only successful files contribute lines. ``total_bytes`` sums the
    discovered sizes of every task that was run, failed or not.
    """
    total_bytes: int = 0
    lines_read: int = 0
    lines_removed: int = 0
    files_processed: int = 0
    files_failed: int = 0
    failures: List[FailureRecord] = field(default_factory=list)
    cancelled: bool = False

    def add_outcome(self, outcome: FileOutcome, size: int) -> None:
        self.total_bytes += size
        self.lines_read += outcome.lines_read
        self.lines_removed += outcome.lines_removed
        self.files_processed += 1

    def add_failure(self, failure: FailureRecord, size: int) -> None:
        self.total_bytes += size
        self.files_failed += 1
        self.failures.append(failure)

    def to_dict(self) -> Dict[str, Any]:
        """Convert totals to a dictionary for JSON output."""
        data = asdict(self)
        data['failures'] = [f.to_dict() for f in self.failures]
        return data
