"""
Shared utilities: dates, logging, exceptions.
"""

from .dates import normalize_date, is_expired, parse_normalized_date
