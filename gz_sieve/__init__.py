"""gz-sieve - remove matching lines from gzip-compressed logs, in place and in parallel."""

__version__ = "1.0.0"
__author__ = "gz-sieve developers"

# Import key classes for convenient top-level access
from .commands import SieveCommand
from .exceptions import ErrorKind, SieveError, PathError, CodecError, IoError, PoolConfigError
from .models import FileTask, PatternSet, FileOutcome, FailureRecord, RunTotals
from .processing import (
    FileDiscovery, DiscoveryResult, discover_gz_files,
    LineFilter, should_drop, FileRewriter, SieveRunner, run_sieve
)

__all__ = [
    # Core classes
    'SieveCommand',
    'FileDiscovery',
    'FileRewriter',
    'SieveRunner',
    'LineFilter',

    # Functions
    'discover_gz_files',
    'should_drop',
    'run_sieve',

    # Data models
    'FileTask',
    'PatternSet',
    'FileOutcome',
    'FailureRecord',
    'RunTotals',
    'DiscoveryResult',

    # Errors
    'ErrorKind',
    'SieveError',
    'PathError',
    'CodecError',
    'IoError',
    'PoolConfigError',

    # Package metadata
    '__version__',
    '__author__'
]
