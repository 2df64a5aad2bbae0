#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Shared fixtures for gz-sieve tests: building gzip files and small corpora.
"""

import gzip
import logging
from pathlib import Path
from typing import Iterable, List

import pytest


def _write_gz(path: Path, lines: Iterable[str], compresslevel: int = 6) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with gzip.open(path, "wb", compresslevel=compresslevel) as f:
        for line in lines:
            f.write(line.encode("utf-8") + b"\n")
    return path


def _write_gz_bytes(path: Path, data: bytes) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(gzip.compress(data))
    return path


def _read_gz_lines(path: Path) -> List[str]:
    with gzip.open(path, "rb") as f:
        return f.read().decode("utf-8").splitlines()


@pytest.fixture
def make_gz():
    """Write lines (newline-terminated) into a gzip file."""
    return _write_gz


@pytest.fixture
def make_gz_bytes():
    """Write raw bytes into a gzip file."""
    return _write_gz_bytes


@pytest.fixture
def gz_lines():
    """Read a gzip file back as a list of lines."""
    return _read_gz_lines


@pytest.fixture
def build_corpus():
    """
    Build a nested corpus under root and return the expected totals.

    Layout:
        root/a.gz                  3 lines, 1 match
        root/sub/b.gz           1000 lines, every 10th matches
        root/sub/deeper/c.gz       2 lines, both match
        root/sub/notes.txt         ignored
    """
    def _build(root: Path) -> dict:
        _write_gz(root / "a.gz", ["line 1", "line 2 pattern", "line 3"])
        _write_gz(root / "sub" / "b.gz",
                  [f"line {i} pattern" if i % 10 == 0 else f"line {i}" for i in range(1000)])
        _write_gz(root / "sub" / "deeper" / "c.gz", ["pattern", "pattern"])
        (root / "sub" / "notes.txt").write_text("pattern\n")
        return {"files": 3, "lines_read": 1005, "lines_removed": 103}
    return _build


@pytest.fixture(autouse=True)
def drop_cli_log_handlers():
    """Remove root handlers installed by main() so later tests do not log to closed streams."""
    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        if type(handler) in (logging.StreamHandler, logging.FileHandler):
            root.removeHandler(handler)
            handler.close()
