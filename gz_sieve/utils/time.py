#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Time utility functions for gz-sieve.
"""

from datetime import datetime, timezone


def utc_now_str() -> str:
    """Return current UTC time in ISO-8601 format with 'Z'."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def local_timestamp(fmt: str) -> str:
    """Return current local time formatted with fmt."""
    return datetime.now().strftime(fmt)
