"""Discovery, filtering and parallel rewriting for gz-sieve."""

from .discovery import FileDiscovery, DiscoveryResult, DiscoveryStats, discover_gz_files
from .line_filter import LineFilter, should_drop
from .rewriter import FileRewriter
from .scheduler import SieveRunner, resolve_concurrency, run_sieve

__all__ = [
    'FileDiscovery',
    'DiscoveryResult',
    'DiscoveryStats',
    'discover_gz_files',
    'LineFilter',
    'should_drop',
    'FileRewriter',
    'SieveRunner',
    'resolve_concurrency',
    'run_sieve',
]
