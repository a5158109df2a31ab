"""
Deterministic extractors over raw scan text.
"""

from .field_extractor import FieldExtractor, FieldRule, CombinedNameRule, DEFAULT_RULES, extract_fields
from .composition_splitter import split_composition, is_inactive_line
