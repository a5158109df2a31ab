# ============================================================================
# src/medicine_scan/extractors/field_extractor.py
# ============================================================================
"""
Field Extractor

Pulls labeled fields out of the vision model's free-text transcription of
medicine packaging:
- medicine name (official/brand/generic label, first line fallback)
- expiry date (raw substring, normalized later)
- manufacturer, batch/lot number, storage, dosage
- composition and warnings blocks (multi-line spans)
- regulatory text

Rules are an ordered list of (field, pattern, priority). Each field is
evaluated independently: its rules run in priority order and the first rule
that yields a non-blank value wins.

Extraction is pure and deterministic, and never raises for missing fields.
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Pattern, Sequence

from ..records import ExtractedFields, FieldMatch, FieldName

logger = logging.getLogger(__name__)

_FLAGS = re.IGNORECASE

# Label separators tolerate markdown emphasis ("**Dosage:** ...")
_SEP_OPTIONAL = r'[ \t*_]*:?[ \t*_]*'
_SEP = r'[ \t*_]*:[ \t*_]*'

# Single-line value: rest of the line, not starting with label punctuation
_VALUE = r'([^\s:*_.][^\n]*)'

# Block value: up to the next numbered list item, a blank line, or end of text
_SPAN = r'([\s\S]*?)(?=\n[ \t]*\d+\.\s|\n[ \t]*\n|\Z)'

# Lazily skip at most _PARAGRAPH_REACH chars without crossing a blank line
_PARAGRAPH_REACH = 200
_SAME_PARAGRAPH = r'(?:(?!\n[ \t]*\n)[\s\S]){0,' + str(_PARAGRAPH_REACH) + r'}?'

_VALUE_EDGE_CHARS = ' \t\r\n*_'

# Phrasing that says the expiry date could not be read
_EXPIRY_NOT_VISIBLE = re.compile(
    r'expiry\s+date.{0,120}?not\s+(?:\w+\s+)?visible'
    r'|not\s+able\s+to\s+detect.{0,120}?expiry',
    _FLAGS,
)
_NOT_VISIBLE_VALUE = re.compile(
    r'\bnot\s+(?:\w+\s+)?(?:visible|detect\w*|found|available|legible|mentioned|provided|shown)\b',
    _FLAGS,
)


_LEADING_BULLET = re.compile(r'^(?:[-•]|\d+\.)\s+')


def _clean(value: str, block: bool = False) -> str:
    if block:
        lines = [line.rstrip() for line in value.strip().split('\n')]
        return '\n'.join(lines).strip()
    value = value.strip(_VALUE_EDGE_CHARS)
    return _LEADING_BULLET.sub('', value).strip(_VALUE_EDGE_CHARS)


def _build_match(match: "re.Match[str]", group: int, rule: str, block: bool) -> Optional[FieldMatch]:
    raw = match.group(group)
    if raw is None:
        return None

    value = _clean(raw, block=block)
    if not value:
        return None

    offset = match.start(group) + max(raw.find(value.split('\n', 1)[0]), 0)
    return FieldMatch(value=value, offset=offset, rule=rule)


@dataclass(frozen=True)
class FieldRule:
    field: FieldName
    name: str
    pattern: Pattern[str]
    priority: int
    group: int = 1
    block: bool = False

    def apply(self, text: str) -> Optional[FieldMatch]:
        match = self.pattern.search(text)
        if not match:
            return None
        return _build_match(match, self.group, self.name, self.block)


@dataclass(frozen=True)
class CombinedNameRule(FieldRule):
    """Primary name combined with a companion name: "X (Y)"."""
    companion: Optional[Pattern[str]] = None

    def apply(self, text: str) -> Optional[FieldMatch]:
        primary = super().apply(text)
        if primary is None or self.companion is None:
            return primary

        companion_match = self.companion.search(text)
        if not companion_match:
            return primary

        companion = _build_match(companion_match, 1, self.name, block=False)
        if companion is None:
            return primary

        return FieldMatch(
            value=f"{primary.value} ({companion.value})",
            offset=primary.offset,
            rule=self.name,
        )


_OFFICIAL_NAME = re.compile(r'\bofficial\s+name' + _SEP + _VALUE, _FLAGS)
_BRAND_NAME = re.compile(r'\bbrand\s+name' + _SEP + _VALUE, _FLAGS)

# Numeric or month-name date right after a bare "mfg" label
_DATE_SHAPED = (
    r'(?:\d{1,4}\s*[/\-.]\s*\d'
    r'|(?:jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]*\.?[\s/\-]*\d)'
)
_MANUFACTURER_LABEL = (
    r'\b(?:manufacturer|manufactured\s+by|mf[gd]\.?\s+by'
    r'|mfg(?!\.?\s*(?:date|dt)\b)(?![\s.:*_]*' + _DATE_SHAPED + r')\.?'
    r'|made\s+by)'
)
# Bare "batch"/"lot" must not swallow a following "No", "Number" or "/Lot"
_NUMBER_WORD = r'\s*(?:number|no)\b'
_BATCH_LABEL = (
    r'\b(?:batch\s*/\s*lot(?:' + _NUMBER_WORD + r'|(?!' + _NUMBER_WORD + r'))'
    r'|batch' + _NUMBER_WORD + r'|lot' + _NUMBER_WORD +
    r'|b\.\s*no|l\.\s*no'
    r'|(?:batch|lot)(?!\s*/|' + _NUMBER_WORD + r'))\b'
)


DEFAULT_RULES: List[FieldRule] = [
    # Medicine name
    CombinedNameRule(
        FieldName.MEDICINE_NAME, "official_name", _OFFICIAL_NAME, 1,
        companion=_BRAND_NAME,
    ),
    FieldRule(FieldName.MEDICINE_NAME, "brand_name", _BRAND_NAME, 2),
    FieldRule(
        FieldName.MEDICINE_NAME, "labeled_name",
        re.compile(
            r'\b(?:medicine|product|drug|medication|brand|trade)\s+name'
            + _SEP_OPTIONAL + _VALUE,
            _FLAGS,
        ),
        3,
    ),
    FieldRule(
        FieldName.MEDICINE_NAME, "name",
        re.compile(r'\bname' + _SEP + _VALUE, _FLAGS),
        4,
    ),
    FieldRule(
        FieldName.MEDICINE_NAME, "first_line",
        re.compile(r'\A\s*([A-Za-z0-9](?:[A-Za-z0-9 ]*[A-Za-z0-9])?)[ \t]*(?:\n|\Z)'),
        5,
    ),

    # Expiry date (raw)
    FieldRule(
        FieldName.EXPIRY_DATE_RAW, "expiry_label",
        re.compile(
            r'\b(?:expiry|expiration|exp(?![a-z])\.?|use\s+before|best\s+before)'
            r'(?:\s+date)?' + _SEP_OPTIONAL + r'(?!(?:date|dt)\b)' + _VALUE,
            _FLAGS,
        ),
        1,
    ),
    FieldRule(
        FieldName.EXPIRY_DATE_RAW, "expiry_abbreviated",
        re.compile(
            r'\b(?:expiry|exp)\.?\s*(?:date|dt)\b\.?' + _SEP_OPTIONAL + _VALUE,
            _FLAGS,
        ),
        2,
    ),

    # Manufacturer
    FieldRule(
        FieldName.MANUFACTURER, "manufacturer_label",
        re.compile(
            _MANUFACTURER_LABEL + r'(?:\s+name|(?!\s+name\b))' + _SEP_OPTIONAL + _VALUE,
            _FLAGS,
        ),
        1,
    ),
    FieldRule(
        FieldName.MANUFACTURER, "manufacturer_next_line",
        re.compile(_MANUFACTURER_LABEL + r'[^\n]{0,80}\n\s*([^\n]+)', _FLAGS),
        2,
    ),

    # Batch / lot number
    FieldRule(
        FieldName.BATCH_LOT_NUMBER, "batch_label",
        re.compile(_BATCH_LABEL + r'\.?' + _SEP_OPTIONAL + _VALUE, _FLAGS),
        1,
    ),
    FieldRule(
        FieldName.BATCH_LOT_NUMBER, "batch_next_line",
        re.compile(_BATCH_LABEL + r'\.?' + _SEP_OPTIONAL + r'\n\s*([^\n]+)', _FLAGS),
        2,
    ),

    # Storage
    FieldRule(
        FieldName.STORAGE_INSTRUCTIONS, "storage_label",
        re.compile(
            r'\b(?:storage(?:\s+(?:instructions|conditions)|(?!\s+(?:instructions|conditions)\b))'
            r'|store|preserve)\b'
            r'(?:\s+at)?(?:\s+in)?' + _SEP_OPTIONAL + _VALUE,
            _FLAGS,
        ),
        1,
    ),
    FieldRule(
        FieldName.STORAGE_INSTRUCTIONS, "keep_label",
        re.compile(r'\bkeep\b(?:\s+at)?(?:\s+in)?' + _SEP_OPTIONAL + _VALUE, _FLAGS),
        2,
    ),

    # Dosage
    FieldRule(
        FieldName.DOSAGE_INSTRUCTIONS, "dosage_label",
        re.compile(r'\bdosage(?:\s+instructions)?' + _SEP + _VALUE, _FLAGS),
        1,
    ),
    FieldRule(
        FieldName.DOSAGE_INSTRUCTIONS, "directions_label",
        re.compile(r'\b(?:directions(?:\s+for\s+use)?|dose)' + _SEP + _VALUE, _FLAGS),
        2,
    ),

    # Composition block
    FieldRule(
        FieldName.COMPOSITION_RAW, "composition_contains",
        re.compile(
            r'\bcomposition\b' + _SAME_PARAGRAPH + r'\bcontains?' + _SEP + _SPAN,
            _FLAGS,
        ),
        1,
        block=True,
    ),
    FieldRule(
        FieldName.COMPOSITION_RAW, "composition_label",
        re.compile(r'\bcomposition' + _SEP + _SPAN, _FLAGS),
        2,
        block=True,
    ),

    # Warnings block
    FieldRule(
        FieldName.WARNINGS_RAW, "warnings_and_precautions",
        re.compile(r'\bwarnings?\s+(?:and|&)\s+precautions' + _SEP + _SPAN, _FLAGS),
        1,
        block=True,
    ),
    FieldRule(
        FieldName.WARNINGS_RAW, "warnings_label",
        re.compile(r'\bwarnings?' + _SEP + _SPAN, _FLAGS),
        2,
        block=True,
    ),

    # Regulatory text
    FieldRule(
        FieldName.REGULATORY_RAW, "schedule_practitioner",
        re.compile(r'\bschedule\b' + _SAME_PARAGRAPH + r'practitioner', _FLAGS),
        1,
        group=0,
    ),
    FieldRule(
        FieldName.REGULATORY_RAW, "regulatory_label",
        re.compile(
            r'\b(?:regulatory\s+information|prescription\s+status)' + _SEP + _VALUE,
            _FLAGS,
        ),
        2,
    ),
]


class FieldExtractor:
    """
    Applies ordered field rules to raw scan text.

    Usage:
        extractor = FieldExtractor()
        fields = extractor.extract(raw_text)
        fields.value(FieldName.BATCH_LOT_NUMBER)
    """

    def __init__(self, rules: Optional[Sequence[FieldRule]] = None):
        self.rules = list(rules if rules is not None else DEFAULT_RULES)
        self._rules_by_field: Dict[FieldName, List[FieldRule]] = {name: [] for name in FieldName}
        for rule in sorted(self.rules, key=lambda r: r.priority):
            self._rules_by_field[rule.field].append(rule)

    def rules_for(self, field: FieldName) -> List[FieldRule]:
        return list(self._rules_by_field[field])

    def extract_field(self, text: str, field: FieldName) -> Optional[FieldMatch]:
        """First non-blank match among the field's rules, or None."""
        for rule in self._rules_by_field[field]:
            match = rule.apply(text)
            if match is not None:
                return match
        return None

    def extract(self, text: Optional[str]) -> ExtractedFields:
        if not isinstance(text, str):
            text = ""

        matches: Dict[FieldName, Optional[FieldMatch]] = {
            field: self.extract_field(text, field) for field in FieldName
        }

        expiry = matches[FieldName.EXPIRY_DATE_RAW]
        reported_missing = False
        if expiry is not None and _NOT_VISIBLE_VALUE.search(expiry.value):
            matches[FieldName.EXPIRY_DATE_RAW] = None
            reported_missing = True
        elif expiry is None and _EXPIRY_NOT_VISIBLE.search(text):
            reported_missing = True

        found = [name.value for name, m in matches.items() if m is not None]
        logger.debug(f"Extracted {len(found)} fields: {found}")

        return ExtractedFields(matches=matches, expiry_reported_missing=reported_missing)


_default_extractor = FieldExtractor()


def extract_fields(text: Optional[str]) -> ExtractedFields:
    """Extract fields with the default rule set."""
    return _default_extractor.extract(text)
