# ============================================================================
# FILE: tests/unit/test_history_store.py
# ============================================================================
"""
Unit tests for the JSON-file scan history
"""

import json
import pytest
from datetime import date, datetime, timezone

from medicine_scan.core.history_store import HistoryEntry, HistoryStore
from medicine_scan.core.record_builder import build
from medicine_scan.records import EXPIRY_NOT_DETECTED
from medicine_scan.utils.exceptions import HistoryStoreError


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def store(tmp_path):
    return HistoryStore(tmp_path / "history" / "history.json")


def _record(name: str, expiry: str = ""):
    text = f"Official Name: {name}"
    if expiry:
        text += f"\nExpiry Date: {expiry}"
    return build(text, reference_now=date(2025, 3, 16))


def _at(month: int, day: int = 1) -> datetime:
    return datetime(2025, month, day, 12, 0, tzinfo=timezone.utc)


# ============================================================================
# WRITE TESTS
# ============================================================================

def test_add_creates_file(store):
    entry = store.add(_record("Paracetamol", "2026-01"), scanned_at=_at(1))

    assert store.path.exists()
    assert entry.id
    assert entry.product_name == "Paracetamol"
    assert entry.expiry_date == "2026-01-01"
    assert entry.date_scanned == _at(1)
    assert entry.detailed_info["basic_information"]["medicine_name"] == "Paracetamol"
    assert entry.raw_text == "Official Name: Paracetamol\nExpiry Date: 2026-01"


def test_add_uses_display_expiry_when_missing(store):
    entry = store.add(_record("Cetirizine"))
    assert entry.expiry_date == EXPIRY_NOT_DETECTED


def test_add_rejects_no_text_record(store):
    with pytest.raises(HistoryStoreError):
        store.add(build("No readable text found"))

    assert store.list_entries() == []


def test_add_treats_naive_timestamp_as_utc(store):
    entry = store.add(_record("Ibuprofen"), scanned_at=datetime(2025, 1, 1, 9, 30))
    assert entry.date_scanned == datetime(2025, 1, 1, 9, 30, tzinfo=timezone.utc)


def test_entries_persist_with_camel_case_keys(store):
    store.add(_record("Paracetamol", "2026-01"), scanned_at=_at(1))

    data = json.loads(store.path.read_text(encoding="utf-8"))
    assert len(data) == 1
    assert set(data[0]) == {"id", "productName", "expiryDate", "dateScanned", "detailedInfo", "rawText"}

    reopened = HistoryStore(store.path)
    assert reopened.list_entries()[0].product_name == "Paracetamol"


def test_delete(store):
    entry = store.add(_record("Paracetamol"))

    assert store.delete(entry.id) is True
    assert store.get(entry.id) is None
    assert store.delete(entry.id) is False


def test_clear(store):
    store.add(_record("A"))
    store.add(_record("B"))
    store.clear()

    assert store.list_entries() == []


# ============================================================================
# READ TESTS
# ============================================================================

def test_empty_store_lists_nothing(store):
    assert store.list_entries() == []
    assert store.get("missing") is None


def test_get_by_id(store):
    entry = store.add(_record("Amoxicillin"))
    assert store.get(entry.id) == entry


def test_newest_first_by_default(store):
    store.add(_record("Older"), scanned_at=_at(1))
    store.add(_record("Newer"), scanned_at=_at(2))

    names = [e.product_name for e in store.list_entries()]
    assert names == ["Newer", "Older"]

    names = [e.product_name for e in store.list_entries(order="asc")]
    assert names == ["Older", "Newer"]


def test_search_is_case_insensitive_substring(store):
    store.add(_record("Paracetamol Tablets"))
    store.add(_record("Ibuprofen"))

    results = store.list_entries(search="PARA")
    assert [e.product_name for e in results] == ["Paracetamol Tablets"]
    assert store.list_entries(search="aspirin") == []


def test_sort_by_expiry_puts_undated_last(store):
    store.add(_record("Late", "2026-01"), scanned_at=_at(1))
    store.add(_record("Undated"), scanned_at=_at(2))
    store.add(_record("Early", "2025-06"), scanned_at=_at(3))

    desc = [e.product_name for e in store.list_entries(sort_by="expiryDate")]
    asc = [e.product_name for e in store.list_entries(sort_by="expiryDate", order="asc")]

    assert desc == ["Late", "Early", "Undated"]
    assert asc == ["Early", "Late", "Undated"]


def test_invalid_sort_arguments(store):
    with pytest.raises(ValueError):
        store.list_entries(sort_by="productName")
    with pytest.raises(ValueError):
        store.list_entries(order="sideways")


def test_entry_expiry_is_reevaluated(store):
    entry = store.add(_record("Paracetamol", "2025-06"))

    assert entry.is_expired(date(2025, 3, 16)) is False
    assert entry.is_expired(date(2025, 7, 1)) is True


def test_undated_entry_is_never_expired(store):
    entry = store.add(_record("Cetirizine"))
    assert entry.is_expired(date(2999, 1, 1)) is False


# ============================================================================
# CORRUPT FILE TESTS
# ============================================================================

def test_invalid_json_raises(store):
    store.path.parent.mkdir(parents=True)
    store.path.write_text("{not json", encoding="utf-8")

    with pytest.raises(HistoryStoreError):
        store.list_entries()


def test_non_array_raises(store):
    store.path.parent.mkdir(parents=True)
    store.path.write_text('{"id": "x"}', encoding="utf-8")

    with pytest.raises(HistoryStoreError):
        store.list_entries()


def test_invalid_entry_raises(store):
    store.path.parent.mkdir(parents=True)
    store.path.write_text('[{"id": "x"}]', encoding="utf-8")

    with pytest.raises(HistoryStoreError):
        store.get("x")


def test_entry_round_trips_through_json():
    entry = HistoryEntry(
        id="abc",
        productName="Paracetamol",
        expiryDate="2026-01-01",
        dateScanned="2025-01-01T12:00:00Z",
    )

    assert HistoryEntry.model_validate(entry.to_json()) == entry
