"""Command implementations for gz-sieve."""

from .sieve import SieveCommand

__all__ = ['SieveCommand']
