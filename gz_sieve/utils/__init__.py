"""Utility functions for gz-sieve."""

from .numbers import format_count, get_locale
from .time import utc_now_str, local_timestamp

__all__ = ['format_count', 'get_locale', 'utc_now_str', 'local_timestamp']
