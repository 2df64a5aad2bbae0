#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Global configuration and constants for gz-sieve.
"""

import os

# Files eligible for rewriting
TARGET_EXT = ".gz"

# Compression
DEFAULT_COMPRESSION_LEVEL = 6
MIN_COMPRESSION_LEVEL = 0
MAX_COMPRESSION_LEVEL = 9

# Processing defaults (can be overridden by CLI)
DEFAULT_WORKERS = os.cpu_count() or 1

# Scratch files live next to their target unless a scratch dir is given
SCRATCH_SUFFIX = ".sieve.tmp"

# Log file naming: <timestamp>-sieve.log in the working directory
LOG_FILE_SUFFIX = "-sieve.log"
LOG_FILE_TIME_FORMAT = "%Y-%m-%d-%H-%M-%S"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"

# Number formatting in the final summary
DEFAULT_LOCALE = "en"
