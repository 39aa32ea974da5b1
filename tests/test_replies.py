"""Reply formatting, CSV and chunking tests."""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal

from kongklang.schemas.entry import Entry, EntryKind, LedgerSummary, PairSettlement
from kongklang.services.replies import (
    CSV_HEADER,
    TRUNCATED_NOTICE,
    chunk_lines,
    csv_quote,
    entries_to_csv,
    format_amount,
    format_summary,
    settlement_line,
)
from kongklang.utils.time import get_zone

BANGKOK = get_zone("Asia/Bangkok")


def test_format_amount() -> None:
    assert format_amount(30) == "30"
    assert format_amount(Decimal("30.00")) == "30"
    assert format_amount(Decimal("2.50")) == "2.5"
    assert format_amount(Decimal("33.33")) == "33.33"


def test_settlement_line_direction() -> None:
    def pair(amount: str) -> PairSettlement:
        return PairSettlement(
            author_a="a", author_b="b", advance_a=0, advance_b=0, amount=Decimal(amount)
        )

    assert settlement_line(pair("30"), "Alice", "Bob") == "Bob ต้องคืน Alice = 30"
    assert settlement_line(pair("-2.5"), "Alice", "Bob") == "Alice ต้องคืน Bob = 2.5"
    assert settlement_line(pair("0"), "Alice", "Bob") == "ไม่ต้องคืนกัน"


def test_summary_uses_placeholders_without_payers() -> None:
    summary = LedgerSummary(
        center_total=100, advance_by_author={}, advance_total=0, total=100, entry_count=1
    )
    pair = PairSettlement(
        author_a=None, author_b=None, advance_a=0, advance_b=0, amount=Decimal(0)
    )
    lines = format_summary("วันนี้", summary, pair, {})
    assert lines[0] == "สรุปวันนี้:"
    assert "- กลางรวม: 100" in lines
    assert "- ออกก่อนของ A: 0" in lines
    assert "- ออกก่อนของ B: 0" in lines
    assert "- รวมทั้งหมด: 100 (1 รายการ)" in lines


def test_csv_quotes_notes() -> None:
    assert csv_quote('say "hi", ok') == '"say ""hi"", ok"'
    entry = Entry(
        id=3,
        conversation_id="G1",
        author_id="U1",
        kind=EntryKind.ADVANCE,
        amount=45,
        note='ข้าว "มันไก่"',
        recorded_at=datetime(2025, 3, 15, 5, 30, tzinfo=UTC),
    )
    assert entries_to_csv([entry], BANGKOK).splitlines() == [
        CSV_HEADER,
        '3,advance,45,"ข้าว ""มันไก่""",2025-03-15 12:30',
    ]


def test_chunk_lines_fits_in_one_message() -> None:
    assert chunk_lines(["a", "b"], max_chars=100, max_chunks=5) == ["a\nb"]


def test_chunk_lines_splits_on_line_boundaries() -> None:
    lines = [f"line-{n:02d}" for n in range(10)]
    chunks = chunk_lines(lines, max_chars=50, max_chunks=5)
    assert all(len(chunk) <= 50 for chunk in chunks)
    assert "\n".join(chunks).split("\n") == lines


def test_chunk_lines_truncates_with_notice() -> None:
    """Overflow keeps the first messages and ends with the notice."""
    lines = [f"entry number {n:03d}" for n in range(200)]
    chunks = chunk_lines(lines, max_chars=100, max_chunks=5)
    assert len(chunks) == 5
    assert all(len(chunk) <= 100 for chunk in chunks)
    assert chunks[-1].endswith(TRUNCATED_NOTICE)
    assert chunks[0].startswith("entry number 000")


def test_chunk_lines_cuts_overlong_line() -> None:
    chunks = chunk_lines(["x" * 500], max_chars=100, max_chunks=5)
    assert chunks == ["x" * 99 + "…"]
