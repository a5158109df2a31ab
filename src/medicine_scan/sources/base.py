# ============================================================================
# src/medicine_scan/sources/base.py
# ============================================================================
"""
External Text Source Interfaces

The extraction pipeline only ever sees strings. These interfaces describe
where those strings come from:
- VisionTextSource: image -> free-text transcription of the packaging
- SummaryTextSource: transcription -> optional benefits/precautions summary

Implementations raise VisionSourceError / SummarySourceError on failure;
retrying is left to the caller.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
import json
import logging

from json_repair import repair_json

from ..records import SupplementaryInfo

logger = logging.getLogger(__name__)


class VisionTextSource(ABC):
    """Transcribes a packaging photo into free text."""

    @abstractmethod
    async def extract_text(self, image_data_url: str) -> str:
        """
        Args:
            image_data_url: data:image/...;base64 URL of the photo

        Returns:
            The model's transcription (may be empty)
        """
        pass


class SummaryTextSource(ABC):
    """Produces supplementary usage information from a transcription."""

    @abstractmethod
    async def summarize(self, raw_text: str) -> Optional[SupplementaryInfo]:
        pass


def extract_json(response_text: Optional[str]) -> Optional[Dict[str, Any]]:
    """
    Extract a JSON object from model output.

    Models often wrap the object in prose or markdown fences, and sometimes
    emit slightly malformed JSON (single quotes, trailing commas). Tries a
    direct parse, then the outermost brace block, repairing with json_repair
    when needed.
    """
    if not response_text or not response_text.strip():
        logger.warning("Empty response text, no JSON to extract")
        return None

    text = response_text.strip()

    try:
        parsed = json.loads(text)
        if isinstance(parsed, dict):
            return parsed
    except json.JSONDecodeError:
        pass

    start_idx = text.find('{')
    end_idx = text.rfind('}')
    if start_idx == -1 or end_idx <= start_idx:
        logger.warning("No JSON found in response")
        return None

    json_str = text[start_idx:end_idx + 1]

    try:
        parsed = json.loads(json_str)
        if isinstance(parsed, dict):
            return parsed
    except json.JSONDecodeError:
        pass

    try:
        repaired = repair_json(json_str, return_objects=True)
        if isinstance(repaired, dict) and repaired:
            logger.debug("json_repair fixed extracted JSON block")
            return repaired
    except Exception as e:
        logger.debug(f"json_repair failed on extracted block: {e}")

    logger.warning(f"Could not parse JSON from response: {text[:200]}...")
    return None
