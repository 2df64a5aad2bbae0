"""Error taxonomy for gz-sieve.

Every error carries an ``ErrorKind`` so callers can branch on the kind
without matching on message text.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    PATH = "path"
    CODEC = "codec"
    IO = "io"
    POOL_CONFIG = "pool_config"


class SieveError(Exception):
    """Base exception for all gz-sieve errors."""

    kind: ErrorKind = ErrorKind.IO

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path


class PathError(SieveError):
    """Raised when the root or a target file is missing or inaccessible."""

    kind = ErrorKind.PATH


class CodecError(SieveError):
    """Raised when a file is not valid gzip or not line-structured text."""

    kind = ErrorKind.CODEC


class IoError(SieveError):
    """Raised on read, write, flush or rename failures while rewriting."""

    kind = ErrorKind.IO


class PoolConfigError(SieveError):
    """Raised when the worker pool cannot be configured."""

    kind = ErrorKind.POOL_CONFIG
