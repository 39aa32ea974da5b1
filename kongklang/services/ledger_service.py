"""Ledger entry store backed by a single Supabase table."""

from __future__ import annotations

import logging
from datetime import datetime, tzinfo
from typing import Any

from postgrest import CountMethod, ReturnMethod

from kongklang.config import settings
from kongklang.schemas.entry import Entry, EntryKind
from kongklang.services.common import SupabaseService
from kongklang.utils.errors import StoreError, ValidationError
from kongklang.utils.time import get_zone, month_bounds, parse_timestamp
from supabase import Client

logger = logging.getLogger(__name__)

SCHEMA_FILE = "sql/001_entries.sql"


class LedgerService:
    """Create, query and delete ledger entries scoped by conversation."""

    def __init__(
        self,
        client: Client,
        table: str | None = None,
        tz: tzinfo | None = None,
        page_size: int | None = None,
    ) -> None:
        self.db = SupabaseService(client, page_size=page_size)
        self.table = table or settings.entries_table
        self.tz = tz or get_zone(settings.timezone)

    def init_schema(self) -> None:
        """Check that the entries table is reachable.

        DDL cannot run through PostgREST, so the table itself is created by
        applying ``sql/001_entries.sql``; this only fails fast when it is missing.
        """
        try:
            self.db.execute(self.db.client.table(self.table).select("id").limit(1), default=[])
        except StoreError as exc:
            raise StoreError(
                f"Table {self.table!r} is not available ({exc.message}); apply {SCHEMA_FILE}"
            ) from exc
        logger.info("Ledger table %s is reachable", self.table)

    def insert(
        self,
        conversation_id: str,
        author_id: str,
        kind: EntryKind | str,
        amount: int,
        note: str = "",
    ) -> Entry:
        """Create an entry and return it with its store-assigned id."""
        try:
            entry_kind = EntryKind(kind)
        except ValueError as exc:
            raise ValidationError(f"Unknown entry kind: {kind!r}") from exc
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise ValidationError("Amount must be a positive whole number")

        row = self.db.insert_one(
            self.table,
            {
                "conversation_id": conversation_id,
                "author_id": author_id,
                "kind": entry_kind.value,
                "amount": amount,
                "note": note or "",
            },
        )
        entry = self._to_entry(row)
        logger.info(
            "Recorded entry #%s (%s %s) in %s", entry.id, entry.kind, entry.amount, conversation_id
        )
        return entry

    def get_entry(self, conversation_id: str, entry_id: int) -> Entry | None:
        """Return one entry when it exists in the conversation."""
        rows = self.db.select_many(
            self.table,
            filters={"conversation_id": conversation_id, "id": entry_id},
            limit=1,
        )
        return self._to_entry(rows[0]) if rows else None

    def delete_by_id(self, conversation_id: str, entry_id: int) -> bool:
        """Delete at most one entry; return whether a row was removed."""
        removed = self.db.delete(self.table, {"conversation_id": conversation_id, "id": entry_id})
        if removed:
            logger.info("Deleted entry #%s in %s", entry_id, conversation_id)
        return bool(removed)

    def query_by_range(
        self, conversation_id: str, start: datetime, end: datetime
    ) -> list[Entry]:
        """Return entries with ``start <= recorded_at <= end``, oldest first."""

        def build():
            return (
                self.db.client.table(self.table)
                .select("*")
                .eq("conversation_id", conversation_id)
                .gte("recorded_at", start.isoformat())
                .lte("recorded_at", end.isoformat())
                .order("recorded_at")
                .order("id")
            )

        return [self._to_entry(row) for row in self.db.fetch_all(build)]

    def query_recent(self, conversation_id: str, limit: int) -> list[Entry]:
        """Return the newest ``limit`` entries, newest first."""
        query = (
            self.db.client.table(self.table)
            .select("*")
            .eq("conversation_id", conversation_id)
            .order("recorded_at", desc=True)
            .order("id", desc=True)
            .limit(limit)
        )
        return [self._to_entry(row) for row in self.db.execute(query, default=[])]

    def delete_by_month(self, conversation_id: str, year: int, month: int) -> int:
        """Delete every entry recorded in one local calendar month; return the count."""
        start, end = month_bounds(year, month, self.tz)
        query = (
            self.db.client.table(self.table)
            .delete(count=CountMethod.exact, returning=ReturnMethod.minimal)
            .eq("conversation_id", conversation_id)
            .gte("recorded_at", start.isoformat())
            .lte("recorded_at", end.isoformat())
        )
        removed = self.db.execute_response(query).count or 0
        logger.info(
            "Reset %04d-%02d in %s: %s entries removed", year, month, conversation_id, removed
        )
        return removed

    def export_all(self, conversation_id: str) -> list[Entry]:
        """Return every entry of a conversation ordered by id."""
        rows = self.db.select_many(
            self.table,
            filters={"conversation_id": conversation_id},
            order_by="id",
        )
        return [self._to_entry(row) for row in rows]

    def time_bounds(self, conversation_id: str) -> tuple[datetime, datetime] | None:
        """Return the earliest and latest ``recorded_at`` present, or None when empty."""
        earliest = self.db.select_many(
            self.table,
            filters={"conversation_id": conversation_id},
            columns="recorded_at",
            order_by="recorded_at",
            limit=1,
        )
        if not earliest:
            return None
        latest = self.db.select_many(
            self.table,
            filters={"conversation_id": conversation_id},
            columns="recorded_at",
            order_by="recorded_at",
            descending=True,
            limit=1,
        )
        # A concurrent delete can empty the table between the two reads.
        latest_row = (latest or earliest)[0]
        return (
            parse_timestamp(earliest[0]["recorded_at"]),
            parse_timestamp(latest_row["recorded_at"]),
        )

    @staticmethod
    def _to_entry(row: dict[str, Any]) -> Entry:
        payload = dict(row)
        payload["note"] = payload.get("note") or ""
        payload["recorded_at"] = parse_timestamp(payload["recorded_at"])
        return Entry.model_validate(payload)
