# ============================================================================
# src/medicine_scan/core/history_store.py
# ============================================================================
"""
History Store

Persists saved scans as a JSON array, newest first. Each entry carries a
generated id, the product name, the display expiry date, the scan
timestamp, the record's detail dict and the raw text.

Expiry is not stored as a verdict: callers re-evaluate it against the
current date when displaying history.
"""

import json
import logging
import uuid
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..config.base_config import base_settings
from ..records import MedicineRecord
from ..utils.dates import is_expired, parse_normalized_date
from ..utils.exceptions import HistoryStoreError

logger = logging.getLogger(__name__)

SortField = Literal["dateScanned", "expiryDate"]
SortOrder = Literal["asc", "desc"]


class HistoryEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    product_name: str = Field(alias="productName")
    expiry_date: str = Field(alias="expiryDate")
    date_scanned: datetime = Field(alias="dateScanned")
    detailed_info: Dict[str, Any] = Field(default_factory=dict, alias="detailedInfo")
    raw_text: str = Field(default="", alias="rawText")

    def is_expired(self, reference_now: Optional[Union[date, datetime]] = None) -> bool:
        return is_expired(self.expiry_date, reference_now)

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class HistoryStore:
    """
    JSON-file backed scan history.

    The whole array is read and rewritten on each change; history is small
    and written once per saved scan.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else base_settings.HISTORY_PATH

    # ------------------------------------------------------------------
    # File access
    # ------------------------------------------------------------------
    def _load(self) -> List[HistoryEntry]:
        if not self.path.exists():
            return []

        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "[]")
        except json.JSONDecodeError as e:
            raise HistoryStoreError(f"History file {self.path} is not valid JSON: {e}") from e

        if not isinstance(data, list):
            raise HistoryStoreError(f"History file {self.path} must hold a JSON array")

        try:
            return [HistoryEntry.model_validate(item) for item in data]
        except ValidationError as e:
            raise HistoryStoreError(f"History file {self.path} has an invalid entry: {e}") from e

    def _save(self, entries: List[HistoryEntry]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(
            json.dumps([entry.to_json() for entry in entries], indent=2),
            encoding="utf-8",
        )
        tmp_path.replace(self.path)

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------
    def add(self, record: MedicineRecord, scanned_at: Optional[datetime] = None) -> HistoryEntry:
        """Save a scan at the front of the history."""
        if record.no_text:
            raise HistoryStoreError("Cannot save a scan with no extracted information")

        scanned_at = scanned_at or datetime.now(timezone.utc)
        if scanned_at.tzinfo is None:
            scanned_at = scanned_at.replace(tzinfo=timezone.utc)

        entry = HistoryEntry(
            id=uuid.uuid4().hex,
            product_name=record.product_name,
            expiry_date=record.display_expiry_date,
            date_scanned=scanned_at,
            detailed_info=record.detailed_info() or {},
            raw_text=record.raw_text,
        )

        entries = self._load()
        entries.insert(0, entry)
        self._save(entries)

        logger.info(f"Saved scan {entry.id} ('{entry.product_name}') to history")
        return entry

    def delete(self, entry_id: str) -> bool:
        """Delete an entry. Returns True if one was removed."""
        entries = self._load()
        kept = [e for e in entries if e.id != entry_id]
        if len(kept) == len(entries):
            return False
        self._save(kept)
        logger.info(f"Deleted scan {entry_id} from history")
        return True

    def clear(self) -> None:
        self._save([])

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------
    def get(self, entry_id: str) -> Optional[HistoryEntry]:
        for entry in self._load():
            if entry.id == entry_id:
                return entry
        return None

    def list_entries(
        self,
        search: Optional[str] = None,
        sort_by: SortField = "dateScanned",
        order: SortOrder = "desc",
    ) -> List[HistoryEntry]:
        """
        List entries filtered by product name.

        Args:
            search: Case-insensitive substring of the product name
            sort_by: "dateScanned" or "expiryDate"
            order: "desc" (default) or "asc"

        Entries without a recognizable expiry date sort last when sorting
        by expiry.
        """
        if sort_by not in ("dateScanned", "expiryDate"):
            raise ValueError(f"Unknown sort field: {sort_by}")
        if order not in ("asc", "desc"):
            raise ValueError(f"Unknown sort order: {order}")

        entries = self._load()
        if search:
            needle = search.lower()
            entries = [e for e in entries if needle in e.product_name.lower()]

        reverse = order == "desc"

        if sort_by == "dateScanned":
            return sorted(entries, key=lambda e: e.date_scanned, reverse=reverse)

        dated = [e for e in entries if parse_normalized_date(e.expiry_date) is not None]
        undated = [e for e in entries if parse_normalized_date(e.expiry_date) is None]
        dated.sort(key=lambda e: parse_normalized_date(e.expiry_date), reverse=reverse)
        return dated + undated
