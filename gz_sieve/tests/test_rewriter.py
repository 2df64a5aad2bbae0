#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Unit tests for single-file rewriting.
"""

import errno
import gzip
import os
import stat
from unittest.mock import patch

import pytest

from gz_sieve.exceptions import CodecError, ErrorKind, IoError, PathError
from gz_sieve.models.file_task import FileTask, PatternSet
from gz_sieve.models.outcome import FailureRecord, FileOutcome
from gz_sieve.processing.line_filter import LineFilter
from gz_sieve.processing.rewriter import FileRewriter


def rewrite(path, patterns):
    return FileRewriter(PatternSet(patterns)).rewrite(path)


class TestRewriteScenarios:
    """Line counts and output content for typical inputs."""

    def test_removes_matching_line(self, tmp_path, make_gz, gz_lines):
        path = make_gz(tmp_path / "test.gz", ["line 1", "line 2 pattern", "line 3"])

        outcome = rewrite(path, ["pattern"])

        assert (outcome.lines_read, outcome.lines_removed) == (3, 1)
        assert gz_lines(path) == ["line 1", "line 3"]

    def test_no_patterns_keeps_everything(self, tmp_path, make_gz, gz_lines):
        path = make_gz(tmp_path / "test.gz", ["line 1", "line 2 pattern", "line 3"])

        outcome = rewrite(path, [])

        assert (outcome.lines_read, outcome.lines_removed) == (3, 0)
        assert gz_lines(path) == ["line 1", "line 2 pattern", "line 3"]

    def test_non_existent_pattern(self, tmp_path, make_gz, gz_lines):
        path = make_gz(tmp_path / "test.gz", ["line 1", "line 2", "line 3"])

        outcome = rewrite(path, ["nonexistent"])

        assert (outcome.lines_read, outcome.lines_removed) == (3, 0)
        assert gz_lines(path) == ["line 1", "line 2", "line 3"]

    def test_only_matching_lines_leaves_valid_empty_gzip(self, tmp_path, make_gz):
        path = make_gz(tmp_path / "test.gz", ["pattern", "pattern"])

        outcome = rewrite(path, ["pattern"])

        assert (outcome.lines_read, outcome.lines_removed) == (2, 2)
        assert outcome.lines_kept == 0
        assert gzip.decompress(path.read_bytes()) == b""

    def test_zero_byte_file(self, tmp_path):
        path = tmp_path / "empty.gz"
        path.write_bytes(b"")

        outcome = rewrite(path, ["pattern"])

        assert (outcome.lines_read, outcome.lines_removed) == (0, 0)
        assert gzip.decompress(path.read_bytes()) == b""

    def test_empty_gzip_stream(self, tmp_path, make_gz_bytes):
        path = make_gz_bytes(tmp_path / "empty.gz", b"")

        outcome = rewrite(path, ["pattern"])

        assert (outcome.lines_read, outcome.lines_removed) == (0, 0)

    def test_every_tenth_line_removed(self, tmp_path, make_gz, gz_lines):
        lines = [f"line {i} pattern" if i % 10 == 0 else f"line {i}" for i in range(1000)]
        path = make_gz(tmp_path / "large.gz", lines)

        outcome = rewrite(path, ["pattern"])

        assert (outcome.lines_read, outcome.lines_removed) == (1000, 100)
        output = gz_lines(path)
        assert output == [line for line in lines if "pattern" not in line]
        assert outcome.lines_read == outcome.lines_removed + len(output)

    def test_multiple_patterns(self, tmp_path, make_gz, gz_lines):
        path = make_gz(tmp_path / "multi.gz",
                       ["keep this line", "remove this line", "keep this too", "drop this one"])

        outcome = rewrite(path, ["remove", "drop"])

        assert (outcome.lines_read, outcome.lines_removed) == (4, 2)
        assert gz_lines(path) == ["keep this line", "keep this too"]

    def test_large_pattern_list(self, tmp_path, make_gz, gz_lines):
        path = make_gz(tmp_path / "test.gz", ["line 1", "line 2 pattern", "line 3"])
        patterns = [f"pattern{i}" for i in range(1000)]

        outcome = rewrite(path, patterns)

        assert (outcome.lines_read, outcome.lines_removed) == (3, 0)
        assert gz_lines(path) == ["line 1", "line 2 pattern", "line 3"]

    @pytest.mark.parametrize("level", [1, 6, 9])
    def test_input_compression_levels(self, tmp_path, make_gz, gz_lines, level):
        path = make_gz(tmp_path / "test.gz", ["line 1", "line 2 pattern", "line 3"],
                       compresslevel=level)

        outcome = rewrite(path, ["pattern"])

        assert (outcome.lines_read, outcome.lines_removed) == (3, 1)
        assert gz_lines(path) == ["line 1", "line 3"]

    def test_output_compression_level_is_configurable(self, tmp_path, make_gz, gz_lines):
        path = make_gz(tmp_path / "test.gz", ["line 1", "line 2 pattern"])

        FileRewriter(PatternSet(["pattern"]), compression_level=0).rewrite(path)

        assert gz_lines(path) == ["line 1"]

    def test_final_line_without_newline(self, tmp_path, make_gz_bytes):
        path = make_gz_bytes(tmp_path / "partial.gz", b"first\nsecond pattern\nlast")

        outcome = rewrite(path, ["pattern"])

        assert (outcome.lines_read, outcome.lines_removed) == (3, 1)
        assert gzip.decompress(path.read_bytes()) == b"first\nlast\n"

    def test_single_line_without_separator(self, tmp_path, make_gz_bytes):
        path = make_gz_bytes(tmp_path / "one.gz", b"just one line")

        outcome = rewrite(path, ["pattern"])

        assert (outcome.lines_read, outcome.lines_removed) == (1, 0)
        assert gzip.decompress(path.read_bytes()) == b"just one line\n"

    def test_blank_lines_are_counted(self, tmp_path, make_gz_bytes):
        path = make_gz_bytes(tmp_path / "blank.gz", b"a\n\n\nb\n")

        outcome = rewrite(path, ["b"])

        assert (outcome.lines_read, outcome.lines_removed) == (4, 1)
        assert gzip.decompress(path.read_bytes()) == b"a\n\n\n"

    def test_kept_lines_are_written_verbatim(self, tmp_path, make_gz_bytes):
        path = make_gz_bytes(tmp_path / "crlf.gz", "héllo\r\nremove me\r\nwörld\r\n".encode("utf-8"))

        rewrite(path, ["remove"])

        assert gzip.decompress(path.read_bytes()) == "héllo\r\nwörld\r\n".encode("utf-8")

    def test_concatenated_members_are_read_as_one_stream(self, tmp_path):
        path = tmp_path / "multi_member.gz"
        path.write_bytes(gzip.compress(b"a\nb pattern\n") + gzip.compress(b"c\n"))

        outcome = rewrite(path, ["pattern"])

        assert (outcome.lines_read, outcome.lines_removed) == (3, 1)
        assert gzip.decompress(path.read_bytes()) == b"a\nc\n"


class TestRewriteProperties:
    """Idempotence and permission handling."""

    def test_second_run_removes_nothing(self, tmp_path, make_gz, gz_lines):
        path = make_gz(tmp_path / "test.gz", ["a", "b pattern", "c", "d other"])

        first = rewrite(path, ["pattern", "other"])
        after_first = gz_lines(path)
        second = rewrite(path, ["pattern", "other"])

        assert first.lines_removed == 2
        assert second.lines_removed == 0
        assert second.lines_read == first.lines_kept
        assert gz_lines(path) == after_first

    def test_permissions_preserved(self, tmp_path, make_gz):
        path = make_gz(tmp_path / "test.gz", ["line 1", "line 2 pattern"])
        os.chmod(path, 0o640)

        rewrite(path, ["pattern"])

        assert stat.S_IMODE(os.stat(path).st_mode) == 0o640

    def test_no_scratch_files_left_behind(self, tmp_path, make_gz):
        path = make_gz(tmp_path / "test.gz", ["line 1", "line 2 pattern"])

        rewrite(path, ["pattern"])

        assert sorted(p.name for p in tmp_path.iterdir()) == ["test.gz"]

    def test_parent_directory_synced_after_replace(self, tmp_path, make_gz):
        path = make_gz(tmp_path / "test.gz", ["line 1", "line 2 pattern"])
        synced = []
        real_fsync = os.fsync

        def recording_fsync(fd):
            synced.append(stat.S_ISDIR(os.fstat(fd).st_mode))
            real_fsync(fd)

        with patch("gz_sieve.processing.rewriter.os.fsync", side_effect=recording_fsync):
            rewrite(path, ["pattern"])

        # scratch file first, then the directory holding the renamed file
        assert synced == [False, True]

    def test_separate_scratch_dir(self, tmp_path, make_gz, gz_lines):
        scratch = tmp_path / "scratch"
        scratch.mkdir()
        path = make_gz(tmp_path / "logs" / "test.gz", ["line 1", "line 2 pattern"])

        FileRewriter(PatternSet(["pattern"]), scratch_dir=scratch).rewrite(path)

        assert gz_lines(path) == ["line 1"]
        assert list(scratch.iterdir()) == []

    def test_invalid_compression_level(self):
        with pytest.raises(ValueError):
            FileRewriter(PatternSet(["x"]), compression_level=10)


class TestRewriteFailures:
    """Failures leave the original byte-for-byte unchanged."""

    def test_invalid_gzip(self, tmp_path):
        path = tmp_path / "invalid.gz"
        path.write_bytes(b"This is not a valid gzip file")

        with pytest.raises(CodecError):
            rewrite(path, ["pattern"])

        assert path.read_bytes() == b"This is not a valid gzip file"
        assert sorted(p.name for p in tmp_path.iterdir()) == ["invalid.gz"]

    def test_truncated_gzip(self, tmp_path):
        path = tmp_path / "truncated.gz"
        original = gzip.compress(b"line\n" * 1000)[:-12]
        path.write_bytes(original)

        with pytest.raises(CodecError):
            rewrite(path, ["line"])

        assert path.read_bytes() == original

    def test_binary_content(self, tmp_path, make_gz_bytes):
        path = make_gz_bytes(tmp_path / "binary.gz", bytes([0, 159, 146, 150]))
        original = path.read_bytes()

        with pytest.raises(CodecError):
            rewrite(path, ["pattern"])

        assert path.read_bytes() == original
        assert sorted(p.name for p in tmp_path.iterdir()) == ["binary.gz"]

    def test_decode_error_mid_file(self, tmp_path, make_gz_bytes):
        path = make_gz_bytes(tmp_path / "mixed.gz", b"good line\n\xff\xfe bad\nmore\n")
        original = path.read_bytes()

        with pytest.raises(CodecError):
            rewrite(path, ["good"])

        assert path.read_bytes() == original

    def test_missing_file(self, tmp_path):
        with pytest.raises(PathError):
            rewrite(tmp_path / "missing.gz", ["pattern"])

    def test_read_only_file(self, tmp_path, make_gz):
        path = make_gz(tmp_path / "readonly.gz", ["line 1", "line 2 pattern", "line 3"])
        original = path.read_bytes()
        os.chmod(path, 0o444)

        with pytest.raises(PathError):
            rewrite(path, ["pattern"])

        assert path.read_bytes() == original

    def test_directory_is_not_a_target(self, tmp_path):
        target = tmp_path / "dir.gz"
        target.mkdir()

        with pytest.raises(PathError):
            rewrite(target, ["pattern"])

    def test_failed_replace_leaves_original(self, tmp_path, make_gz):
        path = make_gz(tmp_path / "test.gz", ["line 1", "line 2 pattern", "line 3"])
        original = path.read_bytes()

        with patch("gz_sieve.processing.rewriter.os.replace",
                   side_effect=OSError(errno.EIO, "Input/output error")):
            with pytest.raises(IoError):
                rewrite(path, ["pattern"])

        assert path.read_bytes() == original
        assert sorted(p.name for p in tmp_path.iterdir()) == ["test.gz"]

    def test_unexpected_error_mid_file_cleans_up(self, tmp_path, make_gz):
        path = make_gz(tmp_path / "test.gz", ["line 1", "line 2", "line 3"])
        original = path.read_bytes()

        with patch.object(LineFilter, "should_drop",
                          side_effect=[False, RuntimeError("injected")]):
            with pytest.raises(RuntimeError):
                rewrite(path, ["pattern"])

        assert path.read_bytes() == original
        assert sorted(p.name for p in tmp_path.iterdir()) == ["test.gz"]

    def test_scratch_creation_failure(self, tmp_path, make_gz):
        path = make_gz(tmp_path / "test.gz", ["line 1"])
        original = path.read_bytes()

        with patch("gz_sieve.processing.rewriter.tempfile.mkstemp",
                   side_effect=OSError(errno.ENOSPC, "No space left on device")):
            with pytest.raises(IoError):
                rewrite(path, ["line"])

        assert path.read_bytes() == original

    def test_cross_device_falls_back_to_copy(self, tmp_path, make_gz, gz_lines):
        path = make_gz(tmp_path / "test.gz", ["line 1", "line 2 pattern", "line 3"])

        with patch("gz_sieve.processing.rewriter.os.replace",
                   side_effect=OSError(errno.EXDEV, "Invalid cross-device link")):
            outcome = rewrite(path, ["pattern"])

        assert outcome.lines_removed == 1
        assert gz_lines(path) == ["line 1", "line 3"]
        assert sorted(p.name for p in tmp_path.iterdir()) == ["test.gz"]


class TestProcess:
    """process() turns errors into FailureRecords."""

    def test_success_returns_outcome(self, tmp_path, make_gz):
        path = make_gz(tmp_path / "test.gz", ["a", "b pattern"])
        task = FileTask(path, path.stat().st_size)

        result = FileRewriter(PatternSet(["pattern"])).process(task)

        assert result == FileOutcome(path=path, lines_read=2, lines_removed=1)

    def test_failure_returns_record(self, tmp_path):
        path = tmp_path / "invalid.gz"
        path.write_bytes(b"not gzip")

        result = FileRewriter(PatternSet(["pattern"])).process(FileTask(path, 8))

        assert isinstance(result, FailureRecord)
        assert result.path == path
        assert result.kind is ErrorKind.CODEC
        assert str(path) in result.message
