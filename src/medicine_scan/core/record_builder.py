# ============================================================================
# src/medicine_scan/core/record_builder.py
# ============================================================================
"""
Medicine Record Builder

Turns one raw scan transcription into a MedicineRecord:

    NoText      empty text, or the model said it found no readable text
    Extracting  field extraction, date normalization, composition split
    Evaluating  expiry verdict against the reference date
    Assembled   optional fields populated where found, None otherwise

The builder holds no state between calls; the same text and reference
date always produce an equal record. It never raises for any string.
"""

import logging
from datetime import date, datetime
from typing import Optional, Sequence, Union

from ..extractors.composition_splitter import split_composition
from ..extractors.field_extractor import FieldExtractor
from ..records import (
    BasicInformation,
    ClinicalInformation,
    FieldName,
    MedicineRecord,
    OtherDetails,
    SupplementaryInfo,
    UsageInformation,
)
from ..utils.dates import is_expired, normalize_date

logger = logging.getLogger(__name__)

NO_TEXT_MARKERS = ("no text", "no readable text")


def is_no_text(text: Optional[str], markers: Sequence[str] = NO_TEXT_MARKERS) -> bool:
    """True when the transcription carries no usable packaging text."""
    if not isinstance(text, str) or not text.strip():
        return True
    lowered = text.lower()
    return any(marker in lowered for marker in markers)


class MedicineRecordBuilder:
    """
    Orchestrates extraction for a single scan.

    Usage:
        builder = MedicineRecordBuilder()
        record = builder.build(raw_text, reference_now=date.today())
    """

    def __init__(self, extractor: Optional[FieldExtractor] = None):
        self.extractor = extractor or FieldExtractor()

    def build(
        self,
        raw_text: Optional[str],
        reference_now: Optional[Union[date, datetime]] = None,
        supplementary: Optional[SupplementaryInfo] = None,
    ) -> MedicineRecord:
        text = raw_text.strip() if isinstance(raw_text, str) else ""

        if is_no_text(text):
            logger.info("No readable text in scan, returning no-text record")
            return MedicineRecord(raw_text=text, no_text=True)

        # Extracting
        fields = self.extractor.extract(text)
        expiry_date = normalize_date(fields.value(FieldName.EXPIRY_DATE_RAW))
        composition = split_composition(fields.value(FieldName.COMPOSITION_RAW))

        # Evaluating
        if reference_now is None:
            reference_now = date.today()
        expired = is_expired(expiry_date, reference_now)

        # Assembled
        extra = supplementary or SupplementaryInfo()
        record = MedicineRecord(
            raw_text=text,
            expired=expired,
            expiry_reported_missing=fields.expiry_reported_missing,
            basic_information=BasicInformation(
                medicine_name=fields.medicine_name,
                expiry_date=expiry_date,
                manufacturer=fields.value(FieldName.MANUFACTURER),
                batch_lot_number=fields.value(FieldName.BATCH_LOT_NUMBER),
            ),
            composition=composition,
            usage_information=UsageInformation(
                indications=extra.benefits_summary,
                benefits_summary=extra.benefits_summary,
                dosage_instructions=fields.value(FieldName.DOSAGE_INSTRUCTIONS),
                storage_instructions=fields.value(FieldName.STORAGE_INSTRUCTIONS),
                additional_information=extra.additional_information,
            ),
            clinical_information=ClinicalInformation(
                warnings_and_precautions=fields.value(FieldName.WARNINGS_RAW),
                precautions=extra.precautions,
            ),
            other_details=OtherDetails(
                regulatory_information=fields.value(FieldName.REGULATORY_RAW),
                additional_information=extra.additional_information,
            ),
            extracted_fields=fields,
        )

        logger.info(
            f"Built record for '{record.product_name}' "
            f"(expiry={expiry_date or 'unrecognized'}, expired={expired})"
        )
        return record


_default_builder = MedicineRecordBuilder()


def build(
    raw_text: Optional[str],
    reference_now: Optional[Union[date, datetime]] = None,
    supplementary: Optional[SupplementaryInfo] = None,
) -> MedicineRecord:
    """Build a MedicineRecord with the default rule set."""
    return _default_builder.build(raw_text, reference_now, supplementary)
