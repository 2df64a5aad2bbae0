#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Parallel scheduling and aggregation for gz-sieve.
Fans discovered files out to a bounded thread pool and folds the per-file
results into run totals.
"""

import logging
import threading
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from pathlib import Path
from typing import Dict, Iterable, Iterator, Optional

from ..config import DEFAULT_COMPRESSION_LEVEL, DEFAULT_WORKERS
from ..exceptions import ErrorKind, PoolConfigError
from ..models.file_task import FileTask, PatternSet
from ..models.outcome import FailureRecord, FileOutcome, RunTotals
from ..progress import ProgressReporter
from .rewriter import FileRewriter

logger = logging.getLogger(__name__)


def resolve_concurrency(concurrency: Optional[int]) -> int:
    """Return the worker count to use, defaulting to the number of CPUs."""
    if concurrency is None:
        return DEFAULT_WORKERS
    if isinstance(concurrency, bool) or not isinstance(concurrency, int):
        raise PoolConfigError(f"Worker count must be an integer, got {concurrency!r}")
    if concurrency < 1:
        raise PoolConfigError(f"Worker count must be at least 1, got {concurrency}")
    return concurrency


class SieveRunner:
    """
    Runs the file rewriter over many files with a fixed-size worker pool.

    At most ``concurrency`` files are in flight; the next file is submitted
    only when one finishes. Results are aggregated on the calling thread,
    so totals do not depend on completion order and need no locking.
    Files are dispatched largest first so big files do not start last.
    """

    def __init__(self, compression_level: int = DEFAULT_COMPRESSION_LEVEL,
                 scratch_dir: Optional[Path] = None):
        self.compression_level = compression_level
        self.scratch_dir = scratch_dir

    def run(self, tasks: Iterable[FileTask], patterns: PatternSet,
            concurrency: Optional[int] = None,
            progress: Optional[ProgressReporter] = None,
            cancel_event: Optional[threading.Event] = None) -> RunTotals:
        """
        Rewrite every task and return the aggregated totals.

        Args:
            tasks: Files to rewrite
            patterns: Substrings whose lines are removed
            concurrency: Worker count (default: number of CPUs)
            progress: Receives each file's discovered size as it finishes
            cancel_event: When set, no further files are dispatched; running
                files still complete

        Raises:
            PoolConfigError: invalid worker count, raised before any file is touched
        """
        workers = resolve_concurrency(concurrency)
        rewriter = FileRewriter(patterns, compression_level=self.compression_level,
                                scratch_dir=self.scratch_dir)
        progress = progress or ProgressReporter()
        totals = RunTotals()

        queue = iter(sorted(tasks, key=lambda task: task.size, reverse=True))
        pending: Dict[Future, FileTask] = {}

        logger.info("Processing files with %d worker threads", workers)
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="sieve") as executor:
            cancelled = not self._dispatch(executor, rewriter, queue, pending, workers, cancel_event)
            while pending:
                done, _ = wait(pending, return_when=FIRST_COMPLETED)
                for future in done:
                    task = pending.pop(future)
                    self._collect(future, task, totals)
                    progress.advance(task.size)
                if not cancelled:
                    cancelled = not self._dispatch(executor, rewriter, queue, pending,
                                                   workers, cancel_event)
        totals.cancelled = cancelled

        progress.finish("Cancelled" if totals.cancelled else "Done!")
        logger.info("Removed %d lines from a total of %d lines read (%d files, %d failed)",
                    totals.lines_removed, totals.lines_read,
                    totals.files_processed, totals.files_failed)
        return totals

    def _dispatch(self, executor: ThreadPoolExecutor, rewriter: FileRewriter,
                  queue: Iterator[FileTask], pending: Dict[Future, FileTask],
                  workers: int, cancel_event: Optional[threading.Event]) -> bool:
        """Top up the in-flight set. Returns False if cancelled with work left."""
        while len(pending) < workers:
            task = next(queue, None)
            if task is None:
                return True
            if cancel_event is not None and cancel_event.is_set():
                logger.info("Cancellation requested, not dispatching remaining files")
                return False
            pending[executor.submit(rewriter.process, task)] = task
        return True

    def _collect(self, future: Future, task: FileTask, totals: RunTotals):
        """Fold one finished task into the totals."""
        try:
            result = future.result()
        except Exception as e:
            logger.error("Unexpected error processing %s", task.path, exc_info=True)
            result = FailureRecord(path=task.path, kind=ErrorKind.IO, message=str(e))

        if isinstance(result, FileOutcome):
            totals.add_outcome(result, task.size)
        else:
            logger.warning("Error processing %s: [%s] %s",
                           result.path, result.kind.value, result.message)
            totals.add_failure(result, task.size)


def run_sieve(tasks: Iterable[FileTask], patterns: PatternSet,
              concurrency: Optional[int] = None,
              progress: Optional[ProgressReporter] = None,
              cancel_event: Optional[threading.Event] = None,
              **kwargs) -> RunTotals:
    """Convenience function for a single run."""
    return SieveRunner(**kwargs).run(tasks, patterns, concurrency, progress, cancel_event)
