# ============================================================================
# src/medicine_scan/sources/openai_source.py
# ============================================================================
"""
OpenAI-compatible Text Source

Talks to a hosted OpenAI-compatible endpoint (Nebius Studio by default) for
both the vision transcription and the benefits summary.

Usage:
    from medicine_scan.sources.openai_source import OpenAICompatibleSource

    source = OpenAICompatibleSource(vision_settings)
    raw_text = await source.extract_text(image_data_url)
    extra = await source.summarize(raw_text)
"""

import logging
from typing import Optional

from openai import APIError, AsyncOpenAI

from ..config.vision_config import VisionSettings, vision_settings
from ..records import SupplementaryInfo
from ..utils.exceptions import ConfigurationError, SummarySourceError, VisionSourceError
from .base import SummaryTextSource, VisionTextSource, extract_json
from .prompts import VISION_PROMPT, build_summary_prompt

logger = logging.getLogger(__name__)


class OpenAICompatibleSource(VisionTextSource, SummaryTextSource):
    """
    Vision and summary source backed by openai.AsyncOpenAI.

    The client is created lazily so the service can start without
    credentials; the first call fails with ConfigurationError instead.
    """

    def __init__(self, settings: Optional[VisionSettings] = None, client: Optional[AsyncOpenAI] = None):
        self.settings = settings or vision_settings
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        """Lazy load the OpenAI client."""
        if self._client is None:
            if not self.settings.is_configured:
                raise ConfigurationError("API configuration is missing")
            self._client = AsyncOpenAI(
                base_url=self.settings.NEBIUS_API_ENDPOINT,
                api_key=self.settings.NEBIUS_API_KEY,
                timeout=self.settings.MODEL_CALL_TIMEOUT,
            )
            logger.info(f"OpenAI-compatible client initialized: endpoint={self.settings.NEBIUS_API_ENDPOINT}")
        return self._client

    async def extract_text(self, image_data_url: str) -> str:
        logger.info(f"Starting scan with vision model {self.settings.VISION_MODEL}")

        try:
            response = await self.client.chat.completions.create(
                model=self.settings.VISION_MODEL,
                temperature=self.settings.MODEL_TEMPERATURE,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": VISION_PROMPT},
                            {"type": "image_url", "image_url": {"url": image_data_url}},
                        ],
                    }
                ],
            )
        except APIError as e:
            raise VisionSourceError(f"Vision model call failed: {e}") from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise VisionSourceError("No text extracted from image")

        text = content.strip()
        logger.info(f"Vision response received: {text[:200]}...")
        return text

    async def summarize(self, raw_text: str) -> Optional[SupplementaryInfo]:
        logger.info(f"Starting summary with {self.settings.SUMMARY_MODEL}")

        try:
            response = await self.client.chat.completions.create(
                model=self.settings.SUMMARY_MODEL,
                temperature=self.settings.MODEL_TEMPERATURE,
                messages=[{"role": "user", "content": build_summary_prompt(raw_text)}],
            )
        except APIError as e:
            raise SummarySourceError(f"Summary model call failed: {e}") from e

        content = response.choices[0].message.content if response.choices else None
        logger.debug(f"Summary response: {content}")

        data = extract_json(content)
        if data is None:
            return None
        return SupplementaryInfo.from_dict(data)
