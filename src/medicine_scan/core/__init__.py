# ============================================================================
# src/medicine_scan/core/__init__.py
# ============================================================================
"""
Core components: record assembly, scan orchestration, history.
"""

from .record_builder import MedicineRecordBuilder, build, is_no_text
from .scan_service import ScanService, decode_image_payload
from .history_store import HistoryStore, HistoryEntry
