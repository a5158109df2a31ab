# ============================================================================
# src/medicine_scan/utils/dates.py
# ============================================================================
"""
Date utilities for packaging expiry dates.

normalize_date() turns a free-form date substring into canonical
YYYY-MM-DD (or None when unrecognized). is_expired() compares a
normalized date against a reference "now" at day granularity.

Both are total: they never raise for any input.
"""

import logging
import re
from datetime import date, datetime
from typing import Optional, Union

from dateutil import parser as date_parser

logger = logging.getLogger(__name__)

# Strict formats, tried in order before the free-text parser
_YEAR_MONTH = re.compile(r'^(\d{4})-(\d{2})$')
_ISO_DATE = re.compile(r'^(\d{4})-(\d{2})-(\d{2})$')
_MONTH_YEAR = re.compile(r'^(\d{1,2})/(\d{4})$')
_MONTH_DAY_YEAR = re.compile(r'^(\d{1,2})/(\d{1,2})/(\d{4})$')

# Free-text parser fills missing fields from this; year 1 marks "no year given"
_PARSER_DEFAULT = datetime(1, 1, 1)
# Applies to strict and free-text results alike
MIN_PLAUSIBLE_YEAR = 1900
MAX_FALLBACK_LENGTH = 64

DateLike = Union[date, datetime]


def _to_iso(year: int, month: int, day: int) -> Optional[str]:
    if year < MIN_PLAUSIBLE_YEAR:
        return None
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def _parse_free_text(value: str) -> Optional[str]:
    """Last-resort parse with dateutil; date portion only."""
    if len(value) > MAX_FALLBACK_LENGTH:
        return None

    try:
        parsed = date_parser.parse(value, default=_PARSER_DEFAULT)
    except (ValueError, OverflowError) as e:
        logger.debug(f"Free-text date parse failed for {value!r}: {e}")
        return None

    return _to_iso(parsed.year, parsed.month, parsed.day)


def normalize_date(raw: Optional[str]) -> Optional[str]:
    """
    Normalize a date-like substring to YYYY-MM-DD.

    Handles, in priority order:
    - "2025-03"     -> "2025-03-01"
    - "2025-03-16"  -> "2025-03-16"
    - "3/2025"      -> "2025-03-01"
    - "3/16/2025"   -> "2025-03-16"
    - anything dateutil understands and that carries a year

    Returns:
        Canonical date string, or None when the input is empty or
        not recognized as a valid calendar date
    """
    if not isinstance(raw, str):
        return None

    value = raw.strip()
    if not value:
        return None

    match = _YEAR_MONTH.match(value)
    if match:
        return _to_iso(int(match.group(1)), int(match.group(2)), 1)

    match = _ISO_DATE.match(value)
    if match:
        return _to_iso(int(match.group(1)), int(match.group(2)), int(match.group(3)))

    match = _MONTH_YEAR.match(value)
    if match:
        return _to_iso(int(match.group(2)), int(match.group(1)), 1)

    match = _MONTH_DAY_YEAR.match(value)
    if match:
        return _to_iso(int(match.group(3)), int(match.group(1)), int(match.group(2)))

    return _parse_free_text(value)


def parse_normalized_date(value: Optional[str]) -> Optional[date]:
    """Parse a YYYY-MM-DD string back into a date, or None."""
    if not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        return None


def is_expired(normalized: Optional[str], reference_now: Optional[DateLike] = None) -> bool:
    """
    Check whether a normalized expiry date has passed.

    Unknown or malformed dates are never treated as expired.

    Args:
        normalized: YYYY-MM-DD string (or None when unrecognized)
        reference_now: Date to compare against (defaults to today)

    Returns:
        True iff reference_now is strictly later than the expiry day
    """
    expiry = parse_normalized_date(normalized)
    if expiry is None:
        return False

    if reference_now is None:
        today = date.today()
    elif isinstance(reference_now, datetime):
        today = reference_now.date()
    else:
        today = reference_now

    return today > expiry
