#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Locale-aware number formatting for gz-sieve.
"""

import logging
from typing import Union

from babel import Locale, UnknownLocaleError
from babel.numbers import format_decimal

from ..config import DEFAULT_LOCALE

logger = logging.getLogger(__name__)


def get_locale(name: str) -> Locale:
    """Return the babel Locale for name, or the default locale if name is not valid."""
    try:
        return Locale.parse(name)
    except (UnknownLocaleError, ValueError, TypeError):
        logger.warning("Invalid locale string '%s' provided. Defaulting to '%s'.",
                       name, DEFAULT_LOCALE)
        return Locale.parse(DEFAULT_LOCALE)


def format_count(value: int, locale: Union[str, Locale] = DEFAULT_LOCALE) -> str:
    """Format an integer count with the locale's digit grouping."""
    if not isinstance(locale, Locale):
        locale = get_locale(locale)
    return format_decimal(value, locale=locale)
