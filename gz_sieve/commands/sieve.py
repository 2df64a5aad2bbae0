#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Sieve command: discover gzip files under a root and strip matching lines.
"""

import logging
import threading
from pathlib import Path
from typing import Optional, Sequence, Union

from babel import Locale

from ..config import DEFAULT_COMPRESSION_LEVEL, DEFAULT_LOCALE
from ..exceptions import PathError
from ..models.file_task import PatternSet
from ..models.outcome import RunTotals
from ..processing.discovery import FileDiscovery
from ..processing.scheduler import SieveRunner, resolve_concurrency
from ..progress import TqdmProgress
from ..utils.numbers import format_count, get_locale
from ..utils.time import utc_now_str

logger = logging.getLogger(__name__)


class SieveCommand:
    """Runs discovery, the parallel rewrite and the final report."""

    def __init__(self, compression_level: int = DEFAULT_COMPRESSION_LEVEL,
                 scratch_dir: Optional[Path] = None, quiet: bool = False,
                 locale: str = DEFAULT_LOCALE):
        if scratch_dir is not None and not Path(scratch_dir).is_dir():
            raise PathError(f"Scratch directory does not exist: {scratch_dir}",
                            path=str(scratch_dir))
        self.quiet = quiet
        self.locale = get_locale(locale)
        self.discovery = FileDiscovery()
        self.runner = SieveRunner(compression_level=compression_level, scratch_dir=scratch_dir)

    def execute(self, root: Path, patterns: Sequence[str], threads: Optional[int] = None,
                cancel_event: Optional[threading.Event] = None) -> RunTotals:
        """
        Sieve every gzip file under root.

        Args:
            root: Directory to scan
            patterns: Substrings whose lines are removed
            threads: Worker count (default: number of CPUs)
            cancel_event: Stops dispatching new files when set

        Returns:
            RunTotals for the run
        """
        pattern_set = patterns if isinstance(patterns, PatternSet) else PatternSet(patterns)
        workers = resolve_concurrency(threads)

        self._print_header(root, pattern_set, workers)
        logger.debug("Sieving %s with patterns %r and %d workers", root, list(pattern_set), workers)

        result = self.discovery.discover_files(root)
        self._print(f"[{utc_now_str()}] Discovered {len(result):,} files "
                    f"({result.total_bytes:,} bytes)")
        if not result.tasks:
            self._print("No gzip files found.")

        progress = TqdmProgress(result.total_bytes, disable=self.quiet)
        totals = self.runner.run(result.tasks, pattern_set, concurrency=workers,
                                 progress=progress, cancel_event=cancel_event)

        self._print_summary(totals)
        return totals

    def _print(self, message: str):
        if not self.quiet:
            print(message)

    def _print_header(self, root: Path, patterns: PatternSet, workers: int):
        """Print run configuration header."""
        self._print("=" * 80)
        self._print(f"GZ SIEVE - {utc_now_str()}")
        self._print("=" * 80)
        self._print(f"Root: {root}")
        self._print(f"Patterns: {len(patterns)}")
        self._print(f"Workers: {workers}")
        self._print("")

    def _print_summary(self, totals: RunTotals):
        """Print the final line counts and any failures."""
        if totals.cancelled:
            self._print("Run cancelled before all files were dispatched.")
        self._print(format_summary(totals, self.locale))
        if totals.files_failed:
            self._print(f"  - {totals.files_failed:,} files could not be processed "
                        f"and were left unchanged:")
            for failure in totals.failures:
                self._print(f"    {failure.path} [{failure.kind.value}] {failure.message}")


def format_summary(totals: RunTotals, locale: Union[str, Locale] = DEFAULT_LOCALE) -> str:
    """Final summary sentence, with counts grouped for locale."""
    return (f"Removed {format_count(totals.lines_removed, locale)} lines from a total of "
            f"{format_count(totals.lines_read, locale)} lines read.")
