#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Main CLI entry point for gz-sieve.
"""

import argparse
import logging
import os
import signal
import sys
import threading
from pathlib import Path
from typing import List, Optional

from .config import (
    DEFAULT_COMPRESSION_LEVEL, DEFAULT_LOCALE, LOG_FILE_SUFFIX, LOG_FILE_TIME_FORMAT, LOG_FORMAT,
    MAX_COMPRESSION_LEVEL, MIN_COMPRESSION_LEVEL
)
from .commands.sieve import SieveCommand
from .exceptions import SieveError
from .jsonio import enable_json_logging, error, report_totals
from .utils.time import local_timestamp

LOG_OUTPUTS = ("file", "stdout")


def setup_logging(log_output: str = "file", verbose: bool = False) -> Optional[Path]:
    """
    Configure logging for the CLI tool.

    With ``file`` output, warnings and errors (everything with --verbose) go to a
    timestamped log file in the working directory. With ``stdout`` output,
    INFO and above go to stdout.

    Returns:
        Path of the log file, or None when logging to stdout
    """
    if log_output == "stdout":
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.INFO,
            format=LOG_FORMAT,
            handlers=[logging.StreamHandler(sys.stdout)],
            force=True,
        )
        logging.debug("Verbose logging enabled (DEBUG level).")
        return None

    log_file = Path(f"{local_timestamp(LOG_FILE_TIME_FORMAT)}{LOG_FILE_SUFFIX}")
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        handlers=[logging.FileHandler(log_file)],
        force=True,
    )
    return log_file


def close_log_file(log_file: Path) -> None:
    """Detach and close the root handler writing to log_file."""
    root = logging.getLogger()
    target = os.path.abspath(log_file)
    for handler in root.handlers[:]:
        if isinstance(handler, logging.FileHandler) and handler.baseFilename == target:
            root.removeHandler(handler)
            handler.close()


def cleanup_empty_log_file(log_file: Path) -> bool:
    """Remove log_file if nothing was logged to it. Returns True if removed."""
    try:
        if log_file.stat().st_size == 0:
            log_file.unlink()
            return True
    except FileNotFoundError:
        pass
    return False


def create_parser():
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        prog="gz-sieve",
        description="Remove lines containing any of the given substrings from every "
                    ".gz file under a directory, in place.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""Examples:
  # Drop health-check noise from all archived logs
  %(prog)s /var/log/archive "GET /healthz" "GET /readyz"

  # Limit to 4 worker threads and log to stdout
  %(prog)s /var/log/archive "DEBUG" --threads 4 --log-output stdout

  # Machine-readable summary
  %(prog)s /var/log/archive "secret=" --json
        """
    )
    parser.add_argument("root_dir", help="Root directory to scan for .gz files")
    parser.add_argument("patterns", nargs="*",
                        help="Literal substrings; lines containing any of them are removed")
    parser.add_argument("--threads", type=int, default=None,
                        help="Number of worker threads (default: number of logical CPUs)")
    parser.add_argument("--log-output", choices=LOG_OUTPUTS, default="file",
                        help="Log destination (default: file)")
    parser.add_argument("--compression-level", type=int, default=DEFAULT_COMPRESSION_LEVEL,
                        choices=range(MIN_COMPRESSION_LEVEL, MAX_COMPRESSION_LEVEL + 1),
                        metavar=f"{{{MIN_COMPRESSION_LEVEL}-{MAX_COMPRESSION_LEVEL}}}",
                        help=f"gzip level for rewritten files (default: {DEFAULT_COMPRESSION_LEVEL})")
    parser.add_argument("--scratch-dir", type=Path, default=None,
                        help="Directory for scratch files (default: beside each file). "
                             "A directory on another filesystem disables atomic replacement.")
    parser.add_argument("--locale", default=DEFAULT_LOCALE,
                        help=f"Locale for number formatting in the summary, e.g. en, de, fr "
                             f"(default: {DEFAULT_LOCALE})")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Enable verbose (DEBUG) output")
    parser.add_argument("--json", action="store_true",
                        help="Output results as JSON instead of human-readable text")
    return parser


def _install_sigterm_handler(cancel_event: threading.Event):
    """Stop dispatching new files on SIGTERM; running files still finish.

    Returns the previously installed handler.
    """
    def _handler(signum, frame):
        logging.warning("Received signal %d, finishing in-flight files", signum)
        cancel_event.set()

    return signal.signal(signal.SIGTERM, _handler)


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    log_file = None
    if args.json:
        enable_json_logging()
    else:
        log_file = setup_logging(args.log_output, args.verbose)

    logging.debug("Parsed arguments: %s", args)

    cancel_event = threading.Event()
    previous_handler = None
    if threading.current_thread() is threading.main_thread():
        previous_handler = _install_sigterm_handler(cancel_event)

    try:
        command = SieveCommand(
            compression_level=args.compression_level,
            scratch_dir=args.scratch_dir,
            quiet=args.json,
            locale=args.locale,
        )
        totals = command.execute(
            root=Path(args.root_dir),
            patterns=args.patterns,
            threads=args.threads,
            cancel_event=cancel_event,
        )
        if args.json:
            return report_totals(totals, meta={"root": args.root_dir,
                                               "patterns": list(args.patterns)})
        return 0

    except KeyboardInterrupt:
        if args.json:
            return error("Operation interrupted by user", code=130)
        logging.warning("Operation interrupted by user.")
        print("Operation interrupted by user", file=sys.stderr)
        return 130
    except (SieveError, ValueError) as e:
        if args.json:
            kind = e.kind.value if isinstance(e, SieveError) else None
            debug_info = {"exception_type": type(e).__name__} if args.verbose else None
            return error(str(e), kind=kind, debug=debug_info, code=1)
        logging.error("Error occurred: %s", e, exc_info=args.verbose)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        if previous_handler is not None:
            signal.signal(signal.SIGTERM, previous_handler)
        if log_file is not None:
            close_log_file(log_file)
            cleanup_empty_log_file(log_file)


if __name__ == "__main__":
    sys.exit(main())
