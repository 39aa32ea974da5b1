"""Reply text formatting, CSV export and message chunking."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import tzinfo
from decimal import Decimal

from kongklang.schemas.entry import Entry, EntryKind, LedgerSummary, PairSettlement, Transfer
from kongklang.utils.time import format_local

KIND_LABELS = {EntryKind.CENTER: "บัญชีกลาง", EntryKind.ADVANCE: "ส่วนตัวออกก่อน"}
SHORT_KIND_LABELS = {EntryKind.CENTER: "กลาง", EntryKind.ADVANCE: "ส่วนตัว"}
PLACEHOLDER_A = "A"
PLACEHOLDER_B = "B"
CSV_HEADER = "id,type,amount,note,time"
TRUNCATED_NOTICE = "...(ข้อความยาวเกินไป ตัดเหลือเท่านี้)"
STORE_FAILURE_TEXT = "ระบบขัดข้องชั่วคราว ลองใหม่อีกครั้งภายหลัง"

HELP_TEXT = (
    "วิธีใช้:\n"
    "• กลาง100 ค่าน้ำ → บันทึกบัญชีกลาง\n"
    "• ส่วนตัว120 กาแฟ → บันทึกเงินส่วนตัวที่ออกก่อน\n"
    "• สรุปวันนี้ / สรุป 2025-01-31 / สรุปเดือน 2025-01 / สรุปเดือนนี้\n"
    "• สรุปย้อนหลัง 3 วัน / สรุปทั้งหมด\n"
    "• ดูรายการวันนี้ / ดูรายการ 2025-01-31 / ดูรายการเดือน 2025-01\n"
    "• ดูรายการล่าสุด / ดูรายการล่าสุด 20\n"
    "• ลบ #123 แล้วพิมพ์ ยืนยัน123 เพื่อลบจริง\n"
    "• รีเซ็ตเดือนนี้ → ล้างข้อมูลเดือนนี้ทั้งหมด\n"
    "• สำรองข้อมูล → ส่งออก CSV\n"
    "• English: center 100 water / personal 120 coffee / summary today / summary month / "
    "summary all / summary past 3 days / list today / list recent 20 / delete #123 / "
    "confirm 123 / reset month / backup"
)


def format_amount(value: int | Decimal) -> str:
    """Render an amount without a trailing ``.0``/``.00``."""
    if isinstance(value, int):
        return str(value)
    if value == value.to_integral_value():
        return str(int(value))
    return format(value.normalize(), "f")


def format_recorded(entry: Entry, author_name: str) -> str:
    label = KIND_LABELS[entry.kind]
    return (
        f"บันทึกแล้ว #{entry.id} · {label} · {entry.amount} · "
        f"{entry.note or '-'} (โดย {author_name})"
    )


def format_entry_line(entry: Entry, tz: tzinfo) -> str:
    parts = [f"#{entry.id}", SHORT_KIND_LABELS[entry.kind], str(entry.amount)]
    if entry.note:
        parts.append(entry.note)
    parts.append(f"({format_local(entry.recorded_at, tz)})")
    return " ".join(parts)


def settlement_line(pair: PairSettlement, name_a: str, name_b: str) -> str:
    """Describe who owes whom; positive means B owes A."""
    amount = format_amount(abs(pair.amount))
    if pair.amount > 0:
        return f"{name_b} ต้องคืน {name_a} = {amount}"
    if pair.amount < 0:
        return f"{name_a} ต้องคืน {name_b} = {amount}"
    return "ไม่ต้องคืนกัน"


def format_summary(
    label: str,
    summary: LedgerSummary,
    pair: PairSettlement,
    names: Mapping[str, str],
    transfers: Iterable[Transfer] = (),
) -> list[str]:
    """Build the summary reply as a list of lines."""
    name_a = names.get(pair.author_a, PLACEHOLDER_A) if pair.author_a else PLACEHOLDER_A
    name_b = names.get(pair.author_b, PLACEHOLDER_B) if pair.author_b else PLACEHOLDER_B
    lines = [
        f"สรุป{label}:",
        f"- กลางรวม: {summary.center_total}",
        f"- ออกก่อนของ {name_a}: {pair.advance_a}",
        f"- ออกก่อนของ {name_b}: {pair.advance_b}",
        f"- เคลียร์กัน: {settlement_line(pair, name_a, name_b)}",
        f"- รวมทั้งหมด: {summary.total} ({summary.entry_count} รายการ)",
    ]
    if summary.advance_by_author:
        lines.append("รายการออกก่อนรวม:")
        for author_id, amount in summary.advance_by_author.items():
            lines.append(f"• {names.get(author_id, author_id)}: {amount}")

    transfers = list(transfers)
    if transfers:
        lines.append(f"แบ่งเท่ากัน {len(summary.advance_by_author)} คน:")
        for transfer in transfers:
            debtor = names.get(transfer.debtor_id, transfer.debtor_id)
            creditor = names.get(transfer.creditor_id, transfer.creditor_id)
            lines.append(f"• {debtor} โอนให้ {creditor} = {format_amount(transfer.amount)}")
    return lines


def csv_quote(value: str) -> str:
    """Wrap a field in double quotes, doubling any quote inside it."""
    return '"' + value.replace('"', '""') + '"'


def entries_to_csv_lines(entries: Iterable[Entry], tz: tzinfo) -> list[str]:
    """Render the backup format: header, then one row per entry."""
    lines = [CSV_HEADER]
    for entry in entries:
        lines.append(
            ",".join(
                [
                    str(entry.id),
                    entry.kind.value,
                    str(entry.amount),
                    csv_quote(entry.note),
                    format_local(entry.recorded_at, tz),
                ]
            )
        )
    return lines


def entries_to_csv(entries: Iterable[Entry], tz: tzinfo) -> str:
    return "\n".join(entries_to_csv_lines(entries, tz))


def chunk_lines(
    lines: Iterable[str],
    max_chars: int,
    max_chunks: int,
    notice: str = TRUNCATED_NOTICE,
) -> list[str]:
    """Pack lines into messages of at most ``max_chars`` characters.

    At most ``max_chunks`` messages are returned; when the text does not fit,
    the last message ends with ``notice``.
    """
    max_chars = max(len(notice) + 1, max_chars)
    max_chunks = max(1, max_chunks)

    chunks: list[list[str]] = []
    current: list[str] = []
    size = 0
    for line in lines:
        if len(line) > max_chars:
            line = line[: max_chars - 1] + "…"
        added = len(line) + (1 if current else 0)
        if current and size + added > max_chars:
            chunks.append(current)
            current, size = [line], len(line)
        else:
            current.append(line)
            size += added
    if current:
        chunks.append(current)

    if len(chunks) <= max_chunks:
        return ["\n".join(chunk) for chunk in chunks]

    kept = chunks[:max_chunks]
    last = list(kept[-1])
    while last and len("\n".join([*last, notice])) > max_chars:
        last.pop()
    kept[-1] = [*last, notice]
    return ["\n".join(chunk) for chunk in kept]
