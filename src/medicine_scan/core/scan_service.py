# ============================================================================
# src/medicine_scan/core/scan_service.py
# ============================================================================
"""
Scan Service

Runs one packaging photo through the external models and the record builder:

1. Validate and normalize the image payload
2. Vision transcription (failure -> treated as "no text")
3. Optional summary (failure or timeout -> record built without it)
4. Build the MedicineRecord exactly once

The whole scan runs inside PROCESS_TIMEOUT; each model call is further
bounded by the client's MODEL_CALL_TIMEOUT. The summary only gets whatever
is left of the overall budget. No retries.
"""

import asyncio
import base64
import binascii
import logging
import re
import uuid
from datetime import date, datetime
from typing import Optional, Union

from ..config.vision_config import VisionSettings, vision_settings
from ..records import MedicineRecord, SupplementaryInfo
from ..sources.base import SummaryTextSource, VisionTextSource
from ..utils.exceptions import (
    InvalidImageError,
    ScanTimeoutError,
    SummarySourceError,
    VisionSourceError,
)
from ..utils.logging import log_performance, scan_logger
from .record_builder import MedicineRecordBuilder, is_no_text

logger = logging.getLogger(__name__)

_DATA_URL_PREFIX = re.compile(r'^data:image/(?:png|jpeg|jpg);base64,', re.IGNORECASE)

# Time kept back from the summary call for record assembly
SUMMARY_MARGIN_SECONDS = 0.5

TIMEOUT_MESSAGE = "Processing timeout - please try with a smaller image or try again"


def decode_image_payload(image_data: Optional[str], max_size: int) -> str:
    """
    Validate a base64 image payload.

    Args:
        image_data: Raw base64 or a data:image/...;base64 URL
        max_size: Largest accepted decoded size in bytes

    Returns:
        data:image/jpeg;base64 URL for the vision model
    """
    if not isinstance(image_data, str) or not image_data.strip():
        raise InvalidImageError("No image data provided")

    encoded = "".join(_DATA_URL_PREFIX.sub('', image_data.strip()).split())

    try:
        decoded = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidImageError("Image data is not valid base64") from e

    if not decoded:
        raise InvalidImageError("No image data provided")

    if len(decoded) > max_size:
        raise InvalidImageError(
            f"Image size exceeds maximum allowed size of {max_size / 1024 / 1024:g}MB",
            too_large=True,
        )

    return f"data:image/jpeg;base64,{encoded}"


class ScanService:
    """
    Orchestrates the external text sources around the record builder.

    Usage:
        source = OpenAICompatibleSource()
        service = ScanService(vision_source=source, summary_source=source)
        record = await service.scan(image_data)
    """

    def __init__(
        self,
        vision_source: VisionTextSource,
        summary_source: Optional[SummaryTextSource] = None,
        builder: Optional[MedicineRecordBuilder] = None,
        settings: Optional[VisionSettings] = None,
    ):
        self.vision_source = vision_source
        self.summary_source = summary_source
        self.builder = builder or MedicineRecordBuilder()
        self.settings = settings or vision_settings

    @log_performance(logger, "Scan")
    async def scan(
        self,
        image_data: str,
        reference_now: Optional[Union[date, datetime]] = None,
    ) -> MedicineRecord:
        image_url = decode_image_payload(image_data, self.settings.MAX_IMAGE_SIZE)
        log = scan_logger(logger, uuid.uuid4().hex[:8])
        log.info("Scan started")

        try:
            return await asyncio.wait_for(
                self._process(image_url, reference_now, log),
                timeout=self.settings.PROCESS_TIMEOUT,
            )
        except asyncio.TimeoutError as e:
            log.error(f"Scan exceeded {self.settings.PROCESS_TIMEOUT}s")
            raise ScanTimeoutError(TIMEOUT_MESSAGE, self.settings.PROCESS_TIMEOUT) from e

    async def _process(
        self,
        image_url: str,
        reference_now: Optional[Union[date, datetime]],
        log: logging.LoggerAdapter,
    ) -> MedicineRecord:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.settings.PROCESS_TIMEOUT

        try:
            raw_text = await self.vision_source.extract_text(image_url)
        except VisionSourceError as e:
            log.warning(f"Vision source failed, treating scan as no text: {e}")
            raw_text = ""

        if is_no_text(raw_text):
            return self.builder.build(raw_text, reference_now)

        remaining = deadline - loop.time() - SUMMARY_MARGIN_SECONDS
        supplementary = await self._summarize(raw_text, remaining, log)

        return self.builder.build(raw_text, reference_now, supplementary)

    async def _summarize(
        self,
        raw_text: str,
        remaining: float,
        log: logging.LoggerAdapter,
    ) -> Optional[SupplementaryInfo]:
        if self.summary_source is None or not self.settings.ENABLE_SUMMARY:
            return None

        if remaining <= 0:
            log.warning("No time left for summary, skipping")
            return None

        try:
            return await asyncio.wait_for(self.summary_source.summarize(raw_text), timeout=remaining)
        except asyncio.TimeoutError:
            log.warning(f"Summary timed out after {remaining:.1f}s, continuing without it")
        except SummarySourceError as e:
            log.warning(f"Summary failed, continuing without it: {e}")

        return None
