#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
File discovery for gz-sieve.
Recursively scans a directory tree for gzip-compressed log files.
"""

import logging
import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Union

from ..config import TARGET_EXT
from ..exceptions import PathError
from ..models.file_task import FileTask

logger = logging.getLogger(__name__)


@dataclass
class DiscoveryStats:
    entries_scanned: int = 0
    files_found: int = 0
    walk_errors: int = 0


@dataclass
class DiscoveryResult:
    """Files found under a root, with the sum of their sizes."""
    tasks: List[FileTask] = field(default_factory=list)
    total_bytes: int = 0
    stats: DiscoveryStats = field(default_factory=DiscoveryStats)

    def __len__(self) -> int:
        return len(self.tasks)


class FileDiscovery:
    """Walks a directory tree and collects target files with their sizes.

    Symlinks are never followed. Subdirectories that cannot be listed and
    files whose metadata cannot be read are skipped and counted in
    ``stats.walk_errors``; files appearing or vanishing during the walk
    may or may not be reported.
    """

    def __init__(self, extension: str = TARGET_EXT):
        self.extension = extension

    def discover_files(self, root: Union[str, Path]) -> DiscoveryResult:
        """
        Discover target files beneath root.

        Args:
            root: Directory to scan

        Returns:
            DiscoveryResult with tasks sorted by path

        Raises:
            PathError: if root does not exist, is not a directory or cannot be listed
        """
        root = Path(root)
        if not root.exists():
            raise PathError(f"Root directory does not exist: {root}", path=str(root))
        if not root.is_dir():
            raise PathError(f"Root is not a directory: {root}", path=str(root))
        root = root.resolve()

        result = DiscoveryResult()
        start_time = time.perf_counter()

        try:
            entries = os.scandir(root)
        except OSError as e:
            raise PathError(f"Cannot read root directory {root}: {e}", path=str(root)) from e

        with entries:
            self._scan_entries(entries, result)

        result.tasks.sort(key=lambda task: str(task.path))
        elapsed = time.perf_counter() - start_time

        logger.info("Discovered %d %s files (%d bytes) under %s in %.1fs",
                    result.stats.files_found, self.extension, result.total_bytes, root, elapsed)
        if result.stats.walk_errors:
            logger.info("Skipped %d unreadable entries during discovery", result.stats.walk_errors)
        return result

    def _scan_recursive(self, path: Path, result: DiscoveryResult):
        """Recursively scan a subdirectory, skipping it if it cannot be listed."""
        try:
            with os.scandir(path) as entries:
                self._scan_entries(entries, result)
        except OSError as e:
            result.stats.walk_errors += 1
            logger.debug("Skipping unreadable directory %s: %s", path, e)

    def _scan_entries(self, entries, result: DiscoveryResult):
        for entry in entries:
            result.stats.entries_scanned += 1
            try:
                is_file = entry.is_file(follow_symlinks=False)
                is_dir = not is_file and entry.is_dir(follow_symlinks=False)
            except OSError as e:
                result.stats.walk_errors += 1
                logger.debug("Skipping %s: %s", entry.path, e)
                continue

            if is_file:
                if not self._is_target(entry.name):
                    continue
                try:
                    size = entry.stat(follow_symlinks=False).st_size
                except OSError as e:
                    result.stats.walk_errors += 1
                    logger.debug("Skipping %s: %s", entry.path, e)
                    continue
                result.tasks.append(FileTask(Path(entry.path), size))
                result.total_bytes += size
                result.stats.files_found += 1

            elif is_dir:
                self._scan_recursive(Path(entry.path), result)

    def _is_target(self, filename: str) -> bool:
        """Check if file has the target extension (case-sensitive)."""
        return Path(filename).suffix == self.extension


def discover_gz_files(root: Union[str, Path]) -> DiscoveryResult:
    """Convenience function for gzip file discovery."""
    return FileDiscovery().discover_files(root)
