# ============================================================================
# FILE: tests/conftest.py
# ============================================================================
"""
Pytest configuration and shared fixtures for testing.
"""

import asyncio
import base64
from datetime import date
from typing import Optional

import pytest

from medicine_scan.config.vision_config import VisionSettings
from medicine_scan.records import SupplementaryInfo
from medicine_scan.sources.base import SummaryTextSource, VisionTextSource
from medicine_scan.utils.exceptions import SummarySourceError, VisionSourceError


# ============================================================================
# SAMPLE SCAN TEXT
# ============================================================================

@pytest.fixture
def sample_packaging_text():
    """Vision transcription of a typical strip of tablets"""
    return (
        "Official Name: Paracetamol Tablets IP\n"
        "Brand Name: Calpol 500\n"
        "Manufacturer: GlaxoSmithKline Pharmaceuticals Ltd\n"
        "Batch No: AB123\n"
        "Expiry Date: 03/2026\n"
        "Composition: Each uncoated tablet contains:\n"
        "Paracetamol IP 500 mg\n"
        "Excipients q.s.\n"
        "Colour: Titanium Dioxide IP\n"
        "\n"
        "Dosage: As directed by the physician\n"
        "Storage: Store below 30°C, protected from light\n"
        "Warnings: Do not exceed the stated dose\n"
        "Keep out of reach of children\n"
        "\n"
        "Schedule H drug - To be sold by retail on the prescription of a "
        "Registered Medical Practitioner only"
    )


@pytest.fixture
def markdown_packaging_text():
    """Vision transcription using markdown emphasis on labels"""
    return (
        "**Medicine Name:** Amoxicillin Capsules IP 500 mg\n"
        "**Manufacturer:** Cipla Ltd.\n"
        "**Batch No.:** CPL2301\n"
        "**Exp. Date:** 11/2024\n"
        "**Storage:** Store in a cool, dry place"
    )


@pytest.fixture
def numbered_packaging_text():
    """Vision transcription following the numbered prompt structure"""
    return (
        "1. Medicine name: Crocin Advance\n"
        "2. Expiry date: 12/2026\n"
        "3. Manufacturer: GSK\n"
        "4. Batch/lot number: BX0042\n"
        "5. Composition: Each tablet contains: Paracetamol 500 mg\n"
        "6. Dosage: 1 tablet every 6 hours"
    )


@pytest.fixture
def simple_text():
    return "Official Name: Paracetamol\nExpiry Date: 2025-03\nBatch No: AB123"


@pytest.fixture
def reference_date():
    return date(2025, 3, 16)


# ============================================================================
# IMAGE PAYLOADS
# ============================================================================

@pytest.fixture
def image_bytes():
    return b"\x89PNG\r\n\x1a\n" + b"\x00" * 256


@pytest.fixture
def image_payload(image_bytes):
    """Base64 image as sent by the browser"""
    return "data:image/png;base64," + base64.b64encode(image_bytes).decode("ascii")


# ============================================================================
# FAKE TEXT SOURCES
# ============================================================================

class FakeVisionSource(VisionTextSource):
    """Returns canned text, optionally after a delay or with an error."""

    def __init__(self, text: str = "", delay: float = 0.0, error: Optional[Exception] = None):
        self.text = text
        self.delay = delay
        self.error = error
        self.calls = []

    async def extract_text(self, image_data_url: str) -> str:
        self.calls.append(image_data_url)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return self.text


class FakeSummarySource(SummaryTextSource):
    def __init__(
        self,
        info: Optional[SupplementaryInfo] = None,
        delay: float = 0.0,
        error: Optional[Exception] = None,
    ):
        self.info = info
        self.delay = delay
        self.error = error
        self.calls = []

    async def summarize(self, raw_text: str) -> Optional[SupplementaryInfo]:
        self.calls.append(raw_text)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return self.info


@pytest.fixture
def vision_source_factory():
    return FakeVisionSource


@pytest.fixture
def summary_source_factory():
    return FakeSummarySource


@pytest.fixture
def fake_vision(sample_packaging_text):
    return FakeVisionSource(text=sample_packaging_text)


@pytest.fixture
def failing_vision():
    return FakeVisionSource(error=VisionSourceError("No text extracted from image"))


@pytest.fixture
def fake_summary():
    return FakeSummarySource(
        info=SupplementaryInfo(
            benefits_summary="Relieves mild to moderate pain and reduces fever",
            additional_information="Paracetamol is an analgesic and antipyretic",
            precautions="Avoid alcohol while taking this medicine",
        )
    )


@pytest.fixture
def failing_summary():
    return FakeSummarySource(error=SummarySourceError("Summary model call failed"))


@pytest.fixture
def fast_settings():
    """Settings with short timeouts for async tests"""
    return VisionSettings(
        NEBIUS_API_KEY="test-key",
        MODEL_CALL_TIMEOUT=0.5,
        PROCESS_TIMEOUT=1.0,
    )
