"""Ledger store tests against the in-memory Supabase fake."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from fakes import FakeSupabaseClient

from kongklang.schemas.entry import EntryKind
from kongklang.services.aggregation import aggregate
from kongklang.services.ledger_service import LedgerService
from kongklang.utils.errors import StoreError, ValidationError


def test_insert_assigns_increasing_ids(ledger: LedgerService) -> None:
    """Each insert gets a fresh id and keeps its fields."""
    first = ledger.insert("G1", "U1", EntryKind.CENTER, 100, "water")
    second = ledger.insert("G1", "U1", "advance", 40)
    assert second.id > first.id
    assert (first.kind, first.amount, first.note) == (EntryKind.CENTER, 100, "water")
    assert second.kind is EntryKind.ADVANCE
    assert second.note == ""


@pytest.mark.parametrize(
    ("kind", "amount"),
    [("center", 0), ("center", -5), ("advance", 1.5), ("center", True), ("loan", 10)],
)
def test_insert_rejects_invalid_values(ledger: LedgerService, kind: str, amount: object) -> None:
    """Non-positive amounts and unknown kinds never reach the table."""
    with pytest.raises(ValidationError):
        ledger.insert("G1", "U1", kind, amount)  # type: ignore[arg-type]


def test_delete_is_scoped_and_idempotent(ledger: LedgerService) -> None:
    """Deletes only touch the conversation and return False the second time."""
    entry = ledger.insert("G1", "U1", EntryKind.CENTER, 100)
    assert ledger.delete_by_id("G2", entry.id) is False
    assert ledger.delete_by_id("G1", entry.id) is True
    assert ledger.delete_by_id("G1", entry.id) is False
    assert ledger.get_entry("G1", entry.id) is None


def test_query_by_range_is_inclusive_and_ordered(
    ledger: LedgerService, fake_db: FakeSupabaseClient
) -> None:
    """Entries on both bounds are included, oldest first."""
    table = fake_db.table("entries")
    start = datetime(2025, 3, 1, tzinfo=UTC)
    end = datetime(2025, 3, 2, tzinfo=UTC)
    base = {"conversation_id": "G1", "author_id": "U1", "kind": "center", "note": ""}
    table.add({**base, "amount": 3}, recorded_at=end)
    table.add({**base, "amount": 1}, recorded_at=start)
    table.add({**base, "amount": 2}, recorded_at=start + timedelta(hours=1))
    table.add({**base, "amount": 9}, recorded_at=end + timedelta(seconds=1))
    table.add({**base, "amount": 8, "conversation_id": "G2"}, recorded_at=start)

    entries = ledger.query_by_range("G1", start, end)
    assert [entry.amount for entry in entries] == [1, 2, 3]


def test_query_recent_returns_newest_first(ledger: LedgerService, clock) -> None:
    """Recent listing is newest first and capped."""
    for amount in (10, 20, 30):
        ledger.insert("G1", "U1", EntryKind.CENTER, amount)
        clock.now += timedelta(minutes=1)
    recent = ledger.query_recent("G1", 2)
    assert [entry.amount for entry in recent] == [30, 20]


def test_delete_by_month_uses_local_calendar(
    ledger: LedgerService, fake_db: FakeSupabaseClient
) -> None:
    """Month reset removes only that local month of the conversation."""
    table = fake_db.table("entries")
    base = {"conversation_id": "G1", "author_id": "U1", "kind": "center", "note": "", "amount": 5}
    # 2025-02-28 18:00 UTC is already March 1st in Bangkok.
    table.add(base, recorded_at=datetime(2025, 2, 28, 18, 0, tzinfo=UTC))
    table.add(base, recorded_at=datetime(2025, 3, 20, tzinfo=UTC))
    table.add(base, recorded_at=datetime(2025, 2, 28, 16, 0, tzinfo=UTC))
    table.add({**base, "conversation_id": "G2"}, recorded_at=datetime(2025, 3, 20, tzinfo=UTC))

    assert ledger.delete_by_month("G1", 2025, 3) == 2
    assert len(table.rows) == 2


def test_export_all_orders_by_id(ledger: LedgerService) -> None:
    """Export returns every entry of the conversation in id order."""
    ids = [ledger.insert("G1", "U1", EntryKind.CENTER, n).id for n in (1, 2, 3)]
    ledger.insert("G2", "U1", EntryKind.CENTER, 4)
    assert [entry.id for entry in ledger.export_all("G1")] == ids


def test_time_bounds(ledger: LedgerService, clock) -> None:
    """Bounds are the earliest and latest timestamps present."""
    assert ledger.time_bounds("G1") is None
    first = ledger.insert("G1", "U1", EntryKind.CENTER, 1)
    clock.now += timedelta(days=3)
    last = ledger.insert("G1", "U1", EntryKind.CENTER, 2)
    assert ledger.time_bounds("G1") == (first.recorded_at, last.recorded_at)


def test_store_failures_become_store_error(
    ledger: LedgerService, fake_db: FakeSupabaseClient
) -> None:
    """PostgREST errors surface as StoreError."""
    fake_db.fail_with("connection refused")
    with pytest.raises(StoreError):
        ledger.query_recent("G1", 5)


def test_init_schema_reports_missing_table(fake_db: FakeSupabaseClient) -> None:
    """A failing probe names the SQL file to apply."""
    ledger = LedgerService(fake_db, table="entries")
    ledger.init_schema()
    fake_db.fail_with('relation "public.entries" does not exist')
    with pytest.raises(StoreError, match="001_entries.sql"):
        ledger.init_schema()


def _fill(fake_db: FakeSupabaseClient, count: int, conversation_id: str = "G1") -> None:
    table = fake_db.table("entries")
    base = {"conversation_id": conversation_id, "author_id": "U1", "kind": "center", "note": ""}
    stamp = datetime(2025, 3, 10, tzinfo=UTC)
    for n in range(count):
        table.add({**base, "amount": 1}, recorded_at=stamp + timedelta(seconds=n))


def test_reads_page_past_server_row_cap(
    ledger: LedgerService, fake_db: FakeSupabaseClient
) -> None:
    """Range queries and exports return every row even above the 1000-row cap."""
    _fill(fake_db, 1001)
    start = datetime(2025, 3, 1, tzinfo=UTC)
    end = datetime(2025, 3, 31, tzinfo=UTC)

    entries = ledger.query_by_range("G1", start, end)
    assert aggregate(entries).center_total == 1001
    assert [entry.id for entry in entries] == list(range(1, 1002))

    exported = ledger.export_all("G1")
    assert len(exported) == 1001
    assert exported[-1].id == 1001


def test_paging_with_small_pages(fake_db: FakeSupabaseClient) -> None:
    """Page boundaries neither skip nor repeat rows."""
    fake_db.max_rows = 10
    ledger = LedgerService(fake_db, table="entries", page_size=10)
    _fill(fake_db, 20)
    _fill(fake_db, 5, conversation_id="G2")

    assert [entry.id for entry in ledger.export_all("G1")] == list(range(1, 21))
    assert len(ledger.export_all("G2")) == 5
    select_calls = [call for call in fake_db.executed if call == ("entries", "select")]
    # 20 rows: two full pages, then an empty one. 5 rows: one short page.
    assert len(select_calls) == 4


def test_month_reset_counts_past_server_row_cap(
    ledger: LedgerService, fake_db: FakeSupabaseClient
) -> None:
    _fill(fake_db, 1001)
    assert ledger.delete_by_month("G1", 2025, 3) == 1001
    assert ledger.export_all("G1") == []
