"""Route parsed commands to the ledger and build reply messages."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, tzinfo

from kongklang.commands.models import (
    AllTime,
    Backup,
    Command,
    ConfirmDelete,
    Help,
    ListEntries,
    ListRecent,
    RecordEntry,
    RequestDelete,
    ResetMonth,
    Summarize,
    Unrecognized,
)
from kongklang.commands.parser import CommandParser
from kongklang.config import settings
from kongklang.schemas.event import InboundMessage
from kongklang.services.aggregation import aggregate, settle_group, settle_pair
from kongklang.services.ledger_service import LedgerService
from kongklang.services.name_service import DisplayNameResolver
from kongklang.services.pending_deletions import ConfirmOutcome, PendingDeletionStore
from kongklang.services.ranges import describe_scope, resolve_range
from kongklang.services.replies import (
    HELP_TEXT,
    SHORT_KIND_LABELS,
    chunk_lines,
    entries_to_csv_lines,
    format_entry_line,
    format_recorded,
    format_summary,
)
from kongklang.utils.time import get_zone, now_utc

logger = logging.getLogger(__name__)

EMPTY_LEDGER_TEXT = "ยังไม่มีรายการ"


class CommandDispatcher:
    """Handle one chat message end to end and return the reply texts."""

    def __init__(
        self,
        ledger: LedgerService,
        names: DisplayNameResolver,
        pending: PendingDeletionStore,
        parser: CommandParser | None = None,
        tz: tzinfo | None = None,
        clock: Callable[[], datetime] = now_utc,
        chunk_chars: int | None = None,
        max_chunks: int | None = None,
    ) -> None:
        self.ledger = ledger
        self.names = names
        self.pending = pending
        self.parser = parser or CommandParser(
            recent_default=settings.recent_list_default,
            recent_max=settings.recent_list_max,
            past_days_max=settings.past_days_max,
        )
        self.tz = tz or get_zone(settings.timezone)
        self._clock = clock
        self.chunk_chars = chunk_chars or settings.reply_chunk_chars
        self.max_chunks = max_chunks or settings.reply_max_chunks

    def handle(self, message: InboundMessage) -> list[str]:
        """Parse ``message.text`` and run the resulting command."""
        return self.dispatch(self.parser.parse(message.text), message)

    def dispatch(self, command: Command, message: InboundMessage) -> list[str]:
        match command:
            case RecordEntry():
                return self._record(command, message)
            case RequestDelete():
                return self._request_delete(command, message)
            case ConfirmDelete():
                return self._confirm_delete(command, message)
            case Summarize():
                return self._summarize(command, message)
            case ListEntries():
                return self._list_entries(command, message)
            case ListRecent():
                return self._list_recent(command, message)
            case ResetMonth():
                return self._reset_month(message)
            case Backup():
                return self._backup(message)
            case Help() | Unrecognized():
                return [HELP_TEXT]
        raise TypeError(f"Unsupported command: {command!r}")

    def _record(self, command: RecordEntry, message: InboundMessage) -> list[str]:
        entry = self.ledger.insert(
            message.conversation_id,
            message.author_id,
            command.kind,
            command.amount,
            command.note,
        )
        name = self.names.resolve(message.context, message.author_id)
        return [format_recorded(entry, name)]

    def _request_delete(self, command: RequestDelete, message: InboundMessage) -> list[str]:
        entry = self.ledger.get_entry(message.conversation_id, command.entry_id)
        if entry is None:
            return [f"ไม่พบรายการ #{command.entry_id}"]

        self.pending.request(message.conversation_id, message.author_id, entry.id)
        minutes = max(1, round(self.pending.ttl.total_seconds() / 60))
        detail = " ".join(
            part for part in (SHORT_KIND_LABELS[entry.kind], str(entry.amount), entry.note) if part
        )
        return [
            f"ต้องการลบรายการ #{entry.id} ({detail}) ใช่ไหม? "
            f"(พิมพ์ ยืนยัน{entry.id} ภายใน {minutes} นาที เพื่อลบ)"
        ]

    def _confirm_delete(self, command: ConfirmDelete, message: InboundMessage) -> list[str]:
        result = self.pending.confirm(
            message.conversation_id, message.author_id, command.entry_id
        )
        if result.outcome is ConfirmOutcome.NO_REQUEST:
            return [f"ยังไม่มีคำขอลบรายการ #{command.entry_id} (พิมพ์ ลบ #{command.entry_id} ก่อน)"]
        if result.outcome is ConfirmOutcome.EXPIRED:
            return [
                f"คำขอลบรายการ #{result.pending_id} หมดเวลาแล้ว "
                f"พิมพ์ ลบ #{result.pending_id} ใหม่อีกครั้ง"
            ]
        if result.outcome is ConfirmOutcome.MISMATCH:
            return [
                f"หมายเลขไม่ตรงกับคำขอลบ (รอยืนยันรายการ #{result.pending_id}) "
                f"รายการ #{command.entry_id} ยังไม่ถูกลบ"
            ]

        if self.ledger.delete_by_id(message.conversation_id, command.entry_id):
            return [f"ลบรายการ #{command.entry_id} แล้ว"]
        return [f"ไม่พบรายการ #{command.entry_id}"]

    def _summarize(self, command: Summarize, message: InboundMessage) -> list[str]:
        bounds = None
        if isinstance(command.scope, AllTime):
            bounds = self.ledger.time_bounds(message.conversation_id)
        time_range = resolve_range(command.scope, self._clock(), self.tz, bounds)
        entries = (
            self.ledger.query_by_range(message.conversation_id, *time_range)
            if time_range
            else []
        )

        summary = aggregate(entries)
        pair = settle_pair(summary)
        transfers = settle_group(summary) if len(summary.advance_by_author) > 2 else []
        names = self.names.resolve_many(message.context, list(summary.advance_by_author))
        lines = format_summary(describe_scope(command.scope), summary, pair, names, transfers)
        return self._chunk(lines)

    def _list_entries(self, command: ListEntries, message: InboundMessage) -> list[str]:
        label = describe_scope(command.scope)
        start, end = resolve_range(command.scope, self._clock(), self.tz)
        entries = self.ledger.query_by_range(message.conversation_id, start, end)
        if not entries:
            return [f"{EMPTY_LEDGER_TEXT}ของ{label}"]
        lines = [f"รายการ{label} ({len(entries)} รายการ):"]
        lines.extend(format_entry_line(entry, self.tz) for entry in entries)
        return self._chunk(lines)

    def _list_recent(self, command: ListRecent, message: InboundMessage) -> list[str]:
        entries = self.ledger.query_recent(message.conversation_id, command.limit)
        if not entries:
            return [EMPTY_LEDGER_TEXT]
        return self._chunk(format_entry_line(entry, self.tz) for entry in entries)

    def _reset_month(self, message: InboundMessage) -> list[str]:
        local_now = self._clock().astimezone(self.tz)
        count = self.ledger.delete_by_month(
            message.conversation_id, local_now.year, local_now.month
        )
        return [f"ล้างข้อมูลเดือนนี้ {count} รายการแล้ว"]

    def _backup(self, message: InboundMessage) -> list[str]:
        entries = self.ledger.export_all(message.conversation_id)
        if not entries:
            return [EMPTY_LEDGER_TEXT]
        lines = entries_to_csv_lines(entries, self.tz)
        notice = (
            f"...(ทั้งหมด {len(entries)} รายการ ดาวน์โหลดไฟล์เต็มได้ที่ "
            f"/conversations/{message.conversation_id}/backup.csv)"
        )
        return chunk_lines(lines, self.chunk_chars, self.max_chunks, notice=notice)

    def _chunk(self, lines) -> list[str]:
        return chunk_lines(lines, self.chunk_chars, self.max_chunks)
