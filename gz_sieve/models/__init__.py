"""Data models for gz-sieve."""

from .file_task import FileTask, PatternSet
from .outcome import FileOutcome, FailureRecord, RunTotals

__all__ = ['FileTask', 'PatternSet', 'FileOutcome', 'FailureRecord', 'RunTotals']
