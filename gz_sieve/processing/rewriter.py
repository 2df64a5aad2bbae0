#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Single-file rewriting for gz-sieve.

A file is decompressed line by line, filtered, recompressed into a scratch
file and only then swapped over the original, so the original is seen
either untouched or fully rewritten.
"""

import errno
import gzip
import logging
import os
import shutil
import stat
import tempfile
import zlib
from pathlib import Path
from typing import BinaryIO, Optional, Tuple, Union

from ..config import (
    DEFAULT_COMPRESSION_LEVEL, MIN_COMPRESSION_LEVEL, MAX_COMPRESSION_LEVEL, SCRATCH_SUFFIX
)
from ..exceptions import CodecError, IoError, PathError, SieveError
from ..models.file_task import FileTask, PatternSet
from ..models.outcome import FailureRecord, FileOutcome
from .line_filter import LineFilter

logger = logging.getLogger(__name__)

# Raised by gzip/zlib on malformed or truncated input
_CODEC_ERRORS = (gzip.BadGzipFile, EOFError, zlib.error)


class FileRewriter:
    """Removes matching lines from gzip files in place."""

    def __init__(self, patterns: PatternSet,
                 compression_level: int = DEFAULT_COMPRESSION_LEVEL,
                 scratch_dir: Optional[Path] = None):
        if not MIN_COMPRESSION_LEVEL <= compression_level <= MAX_COMPRESSION_LEVEL:
            raise ValueError(
                f"compression_level must be between {MIN_COMPRESSION_LEVEL} "
                f"and {MAX_COMPRESSION_LEVEL}, got {compression_level}"
            )
        self.patterns = patterns
        self.line_filter = LineFilter(patterns)
        self.compression_level = compression_level
        self.scratch_dir = Path(scratch_dir) if scratch_dir is not None else None

    def process(self, task: FileTask) -> Union[FileOutcome, FailureRecord]:
        """Rewrite one task, converting any SieveError into a FailureRecord."""
        try:
            return self.rewrite(task.path)
        except SieveError as e:
            return FailureRecord(path=task.path, kind=e.kind, message=e.message)

    def rewrite(self, path: Union[str, Path]) -> FileOutcome:
        """
        Remove matching lines from a single gzip file.

        Args:
            path: File to rewrite in place

        Returns:
            FileOutcome with lines read and removed

        Raises:
            PathError: file missing, not a regular file, read-only or unopenable
            CodecError: not valid gzip, or content is not UTF-8 text
            IoError: read, write, flush or rename failure
        """
        path = Path(path)
        self._check_target(path)

        try:
            source = open(path, 'rb')
        except OSError as e:
            raise PathError(f"Failed to open {path}: {e}", path=str(path)) from e

        with source:
            fd, scratch_path = self._create_scratch(path)
            try:
                lines_read, lines_removed = self._write_scratch(source, fd, path)
                self._promote(scratch_path, path)
            finally:
                self._discard(scratch_path)

        logger.debug("Processed %s: removed %d lines of %d total lines.",
                     path, lines_removed, lines_read)
        return FileOutcome(path=path, lines_read=lines_read, lines_removed=lines_removed)

    def _check_target(self, path: Path):
        """Refuse anything that is not a writable regular file."""
        try:
            st = os.stat(path)
        except OSError as e:
            raise PathError(f"Cannot stat {path}: {e}", path=str(path)) from e
        if not stat.S_ISREG(st.st_mode):
            raise PathError(f"Not a regular file: {path}", path=str(path))
        if not st.st_mode & stat.S_IWUSR:
            raise PathError(f"File is read-only: {path}", path=str(path))

    def _create_scratch(self, path: Path) -> Tuple[int, Path]:
        """Create a uniquely named scratch file, by default beside the target."""
        directory = self.scratch_dir or path.parent
        try:
            fd, name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=SCRATCH_SUFFIX,
                                        dir=str(directory))
        except OSError as e:
            raise IoError(f"Failed to create scratch file in {directory}: {e}",
                          path=str(path)) from e
        return fd, Path(name)

    def _write_scratch(self, source: BinaryIO, fd: int, path: Path) -> Tuple[int, int]:
        """Filter source into the scratch file and commit it to disk."""
        try:
            raw_out = os.fdopen(fd, 'wb')
        except OSError as e:
            os.close(fd)
            raise IoError(f"Failed to open scratch file for {path}: {e}", path=str(path)) from e

        try:
            with raw_out:
                # Closing the gzip writer emits the trailer; it must hit disk before promotion.
                with gzip.GzipFile(filename=path.name, mode='wb', fileobj=raw_out,
                                   compresslevel=self.compression_level) as gz_out:
                    counts = self._filter_lines(source, gz_out, path)
                raw_out.flush()
                os.fsync(raw_out.fileno())
        except OSError as e:
            raise IoError(f"Failed to write scratch file for {path}: {e}", path=str(path)) from e
        return counts

    def _filter_lines(self, source: BinaryIO, gz_out: gzip.GzipFile, path: Path) -> Tuple[int, int]:
        """Copy lines that survive the filter, preserving order."""
        lines_read = 0
        lines_removed = 0

        with gzip.GzipFile(fileobj=source, mode='rb') as gz_in:
            lines = iter(gz_in)
            while True:
                try:
                    raw = next(lines)
                except StopIteration:
                    break
                except _CODEC_ERRORS as e:
                    raise CodecError(f"Failed to decompress {path}: {e}", path=str(path)) from e
                except OSError as e:
                    raise IoError(f"Failed to read {path}: {e}", path=str(path)) from e

                lines_read += 1
                try:
                    text = raw.decode('utf-8')
                except UnicodeDecodeError as e:
                    raise CodecError(f"Failed to read line {lines_read} in {path}: {e}",
                                     path=str(path)) from e

                if self.line_filter.should_drop(text.rstrip('\n')):
                    lines_removed += 1
                    continue

                gz_out.write(raw if raw.endswith(b'\n') else raw + b'\n')

        return lines_read, lines_removed

    def _promote(self, scratch_path: Path, path: Path):
        """Replace the original with the finished scratch file."""
        try:
            shutil.copymode(path, scratch_path)
            os.replace(scratch_path, path)
            _sync_directory(path.parent)
            return
        except OSError as e:
            if e.errno != errno.EXDEV:
                raise IoError(f"Failed to replace original file {path}: {e}", path=str(path)) from e

        # Scratch dir is on another volume. Copying over the original is not
        # crash-atomic: an interruption here can leave it truncated.
        logger.debug("Cross-device scratch file for %s, falling back to copy", path)
        try:
            shutil.copyfile(scratch_path, path)
        except OSError as e:
            raise IoError(f"Failed to replace original file {path}: {e}", path=str(path)) from e

    def _discard(self, scratch_path: Path):
        try:
            os.unlink(scratch_path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Could not remove scratch file %s: %s", scratch_path, e)


def _sync_directory(directory: Path):
    """Flush a completed rename in directory to disk where the platform allows it."""
    try:
        fd = os.open(directory, os.O_RDONLY)
    except OSError:
        # Directories cannot be opened for fsync on some platforms (Windows)
        return
    try:
        os.fsync(fd)
    except OSError as e:
        logger.debug("Could not sync directory %s: %s", directory, e)
    finally:
        os.close(fd)
