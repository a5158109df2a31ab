# ============================================================================
# src/medicine_scan/records.py
# ============================================================================
"""
Record types for one medicine packaging scan
- Extracted field matches (with provenance offsets)
- Composition breakdown
- Supplementary summary info from the text-completion model
- The final MedicineRecord and its presentation shape
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional

UNKNOWN_MEDICINE = "Unknown Medicine"

# Display placeholders, applied only when rendering a response
EXPIRY_NOT_DETECTED = "Not detected"
NO_INFORMATION = "No information available"
NO_ADDITIONAL_INFORMATION = "No additional information available"
NO_TEXT_MESSAGE = "No information could be extracted from this image"


class FieldName(str, Enum):
    MEDICINE_NAME = "medicine_name"
    EXPIRY_DATE_RAW = "expiry_date_raw"
    MANUFACTURER = "manufacturer"
    BATCH_LOT_NUMBER = "batch_lot_number"
    STORAGE_INSTRUCTIONS = "storage_instructions"
    COMPOSITION_RAW = "composition_raw"
    DOSAGE_INSTRUCTIONS = "dosage_instructions"
    WARNINGS_RAW = "warnings_raw"
    REGULATORY_RAW = "regulatory_raw"


@dataclass(frozen=True)
class FieldMatch:
    value: str
    offset: int  # character offset of the captured text in the raw string
    rule: str


@dataclass(frozen=True)
class ExtractedFields:
    matches: Mapping[FieldName, Optional[FieldMatch]]

    # Text said the expiry date was not visible (vs. simply no pattern match)
    expiry_reported_missing: bool = False

    def get(self, name: FieldName) -> Optional[FieldMatch]:
        return self.matches.get(name)

    def value(self, name: FieldName) -> Optional[str]:
        match = self.matches.get(name)
        return match.value if match else None

    @property
    def medicine_name(self) -> str:
        return self.value(FieldName.MEDICINE_NAME) or UNKNOWN_MEDICINE

    def to_dict(self) -> Dict[str, Optional[Dict[str, Any]]]:
        return {
            name.value: (
                {"value": m.value, "offset": m.offset, "rule": m.rule} if m else None
            )
            for name, m in self.matches.items()
        }


@dataclass(frozen=True)
class CompositionBreakdown:
    active_ingredients: Optional[str] = None
    inactive_ingredients_excipients: Optional[str] = None


@dataclass(frozen=True)
class SupplementaryInfo:
    benefits_summary: Optional[str] = None
    additional_information: Optional[str] = None
    precautions: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SupplementaryInfo":
        """Build from a model's JSON object, keeping only non-blank strings."""
        def _text(key: str) -> Optional[str]:
            value = data.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
            return None

        return cls(
            benefits_summary=_text("benefits_summary"),
            additional_information=_text("additional_information"),
            precautions=_text("precautions"),
        )


@dataclass(frozen=True)
class BasicInformation:
    medicine_name: str = UNKNOWN_MEDICINE
    expiry_date: Optional[str] = None
    manufacturer: Optional[str] = None
    batch_lot_number: Optional[str] = None


@dataclass(frozen=True)
class UsageInformation:
    indications: Optional[str] = None
    benefits_summary: Optional[str] = None
    dosage_instructions: Optional[str] = None
    storage_instructions: Optional[str] = None
    additional_information: Optional[str] = None


@dataclass(frozen=True)
class ClinicalInformation:
    warnings_and_precautions: Optional[str] = None
    precautions: Optional[str] = None


@dataclass(frozen=True)
class OtherDetails:
    regulatory_information: Optional[str] = None
    additional_information: Optional[str] = None


def _compact(values: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in values.items() if v is not None}


@dataclass(frozen=True)
class MedicineRecord:
    raw_text: str
    no_text: bool = False
    expired: bool = False
    expiry_reported_missing: bool = False

    # Sections are None on a no-text record
    basic_information: Optional[BasicInformation] = None
    composition: Optional[CompositionBreakdown] = None
    usage_information: Optional[UsageInformation] = None
    clinical_information: Optional[ClinicalInformation] = None
    other_details: Optional[OtherDetails] = None

    extracted_fields: Optional[ExtractedFields] = field(default=None, compare=False, repr=False)

    @property
    def product_name(self) -> Optional[str]:
        return self.basic_information.medicine_name if self.basic_information else None

    @property
    def expiry_date(self) -> Optional[str]:
        return self.basic_information.expiry_date if self.basic_information else None

    @property
    def display_expiry_date(self) -> str:
        return self.expiry_date or EXPIRY_NOT_DETECTED

    def detailed_info(self) -> Optional[Dict[str, Dict[str, Any]]]:
        """
        Sectioned detail dict for display and persistence.

        Absent leaf fields are omitted; placeholders fill the few fields
        the display always shows.
        """
        if self.no_text:
            return None

        basic = self.basic_information
        composition = self.composition
        usage = self.usage_information
        clinical = self.clinical_information
        other = self.other_details

        return {
            "basic_information": _compact({
                "medicine_name": basic.medicine_name,
                "expiry_date": self.display_expiry_date,
                "manufacturer": basic.manufacturer,
                "batch_lot_number": basic.batch_lot_number,
            }),
            "composition": _compact({
                "active_ingredients": composition.active_ingredients,
                "inactive_ingredients_excipients": composition.inactive_ingredients_excipients,
            }),
            "usage_information": _compact({
                "indications": usage.indications or NO_INFORMATION,
                "benefits_summary": usage.benefits_summary,
                "storage_instructions": usage.storage_instructions,
                "dosage_instructions": usage.dosage_instructions,
                "additional_information": usage.additional_information,
            }),
            "clinical_information": _compact({
                "warnings_and_precautions": clinical.warnings_and_precautions,
                "precautions": clinical.precautions,
            }),
            "other_details": _compact({
                "additional_information": other.additional_information or NO_ADDITIONAL_INFORMATION,
                "regulatory_information": other.regulatory_information,
            }),
        }

    def to_response(self) -> Dict[str, Any]:
        """Render the JSON body returned to the scanning UI."""
        if self.no_text:
            return {
                "success": True,
                "noText": True,
                "message": NO_TEXT_MESSAGE,
                "rawText": self.raw_text,
            }

        return {
            "success": True,
            "productName": self.product_name,
            "expiryDate": self.display_expiry_date,
            "expired": self.expired,
            "detailedInfo": self.detailed_info(),
            "rawText": self.raw_text,
        }
