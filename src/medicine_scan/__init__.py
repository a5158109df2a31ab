"""
Medicine packaging scan: turns a vision model's transcription of medicine
packaging into a structured, expiry-checked record.
"""

from .records import (
    MedicineRecord,
    ExtractedFields,
    FieldMatch,
    FieldName,
    CompositionBreakdown,
    SupplementaryInfo,
)
from .utils.dates import normalize_date, is_expired
from .extractors import FieldExtractor, split_composition, extract_fields
from .core import MedicineRecordBuilder, build

__version__ = "0.1.0"
