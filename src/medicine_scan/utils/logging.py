# ============================================================================
# src/medicine_scan/utils/logging.py
# ============================================================================
"""
Logging setup and helpers for the medicine scan service.

Every record carries a scan_id ("-" outside a scan) so the lines of one
scan can be followed through vision, summary and record assembly.
"""

import functools
import inspect
import json
import logging
import sys
import time
from datetime import datetime, timezone
from typing import Optional

from ..config.logging_config import LoggingSettings, logging_settings

TEXT_FORMAT = '%(asctime)s %(levelname)-8s [%(scan_id)s] %(name)s: %(message)s'
NO_SCAN_ID = '-'


class ScanIdFilter(logging.Filter):
    """Gives records logged outside a scan a placeholder scan_id."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, 'scan_id'):
            record.scan_id = NO_SCAN_ID
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'function': record.funcName,
            'line': record.lineno,
        }

        scan_id = getattr(record, 'scan_id', NO_SCAN_ID)
        if scan_id != NO_SCAN_ID:
            log_data['scan_id'] = scan_id

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def setup_logging(settings: Optional[LoggingSettings] = None) -> None:
    """
    Configure the root logger from LoggingSettings.

    Logs go to stdout, and also to LOG_FILE when set. LOG_JSON switches
    both handlers to JsonFormatter.
    """
    settings = settings or logging_settings
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    if settings.LOG_JSON:
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(TEXT_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')

    handlers = [logging.StreamHandler(sys.stdout)]
    if settings.LOG_FILE:
        settings.LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(settings.LOG_FILE))

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(ScanIdFilter())

    logging.basicConfig(level=level, handlers=handlers, force=True)


class ScanLogAdapter(logging.LoggerAdapter):
    """Stamps every record with the scan it belongs to."""

    def process(self, msg, kwargs):
        kwargs['extra'] = {**kwargs.get('extra', {}), **self.extra}
        return msg, kwargs


def scan_logger(logger: logging.Logger, scan_id: str) -> ScanLogAdapter:
    return ScanLogAdapter(logger, {'scan_id': scan_id})


def log_performance(logger: logging.Logger, operation: str):
    """
    Decorator logging how long a call took, or how long until it failed.

    Works on plain functions (logged at DEBUG) and coroutine functions
    (logged at INFO; these are the slow model-bound calls).
    """
    def decorator(func):
        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                start = time.perf_counter()
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    logger.error(f"{operation} failed after {time.perf_counter() - start:.3f}s: {e}")
                    raise
                logger.info(f"{operation} completed in {time.perf_counter() - start:.3f}s")
                return result

            return async_wrapper

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                logger.error(f"{operation} failed after {time.perf_counter() - start:.3f}s: {e}")
                raise
            logger.debug(f"{operation} completed in {time.perf_counter() - start:.3f}s")
            return result

        return wrapper
    return decorator
