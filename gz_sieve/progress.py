#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Byte-weighted progress reporting for gz-sieve.
"""

import sys

from tqdm import tqdm


class ProgressReporter:
    """Receives "advance by N bytes" events and a final done signal. Does nothing."""

    def advance(self, nbytes: int) -> None:
        pass

    def finish(self, message: str = "Done!") -> None:
        pass


class TqdmProgress(ProgressReporter):
    """Progress bar over the total discovered size, drawn on stderr."""

    def __init__(self, total_bytes: int, disable: bool = False, desc: str = "Sieving"):
        self._bar = tqdm(
            total=total_bytes,
            desc=desc,
            unit="B",
            unit_scale=True,
            unit_divisor=1024,
            dynamic_ncols=True,
            file=sys.stderr,
            disable=disable,
        )

    def advance(self, nbytes: int) -> None:
        self._bar.update(nbytes)

    def finish(self, message: str = "Done!") -> None:
        self._bar.set_postfix_str(message)
        self._bar.close()
