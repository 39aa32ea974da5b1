"""Shared Supabase data access helpers."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

import httpx
from postgrest import APIError

from kongklang.config import settings
from kongklang.utils.errors import StoreError
from supabase import Client

logger = logging.getLogger(__name__)


class SupabaseService:
    """Thin helper wrapper around a Supabase client.

    PostgREST caps every response at the server's ``max_rows``; reads without
    a row limit go through ``fetch_all`` so nothing past the cap is lost.
    """

    def __init__(self, client: Client, page_size: int | None = None) -> None:
        self.client = client
        self.page_size = max(1, page_size or settings.postgrest_page_size)

    def execute_response(self, query) -> Any:
        """Execute a Supabase query and return the raw response."""
        started = time.perf_counter()
        try:
            response = query.execute()
        except APIError as exc:
            message = getattr(exc, "message", None) or "Database request failed"
            raise StoreError(str(message)) from exc
        except httpx.HTTPError as exc:
            raise StoreError(f"Database unreachable: {exc.__class__.__name__}") from exc

        elapsed_ms = (time.perf_counter() - started) * 1000
        threshold_ms = settings.slow_query_log_threshold_ms
        if threshold_ms > 0 and elapsed_ms >= threshold_ms:
            logger.warning("Slow Supabase query %.1fms", elapsed_ms)
        return response

    def execute(self, query, default: Any = None) -> Any:
        """Execute a Supabase query and normalize transport and API errors."""
        data = self.execute_response(query).data
        return default if data is None and default is not None else data

    def fetch_all(self, build_query: Callable[[], Any]) -> list[dict[str, Any]]:
        """Read every row of a select, one page per request.

        ``build_query`` must return a fresh, stably ordered select each call;
        paging stops at the first page shorter than ``page_size``.
        """
        rows: list[dict[str, Any]] = []
        offset = 0
        while True:
            page = self.execute(
                build_query().range(offset, offset + self.page_size - 1), default=[]
            )
            rows.extend(page)
            if len(page) < self.page_size:
                return rows
            offset += self.page_size

    def select_many(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        columns: str = "*",
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[dict[str, Any]]:
        """Select rows with optional filters; without ``limit`` every page is read."""

        def build():
            query = self.client.table(table).select(columns)
            if filters:
                for key, value in filters.items():
                    query = query.eq(key, value)
            if order_by:
                query = query.order(order_by, desc=descending)
            return query

        if not limit:
            return self.fetch_all(build)
        query = build()
        if offset:
            query = query.offset(offset)
        return self.execute(query.limit(limit), default=[])

    def insert_one(self, table: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Insert one row and return the created object."""
        rows = self.execute(self.client.table(table).insert(payload), default=[])
        if not rows:
            raise StoreError(f"Failed to insert into {table}")
        return rows[0]

    def delete(self, table: str, filters: dict[str, Any]) -> list[dict[str, Any]]:
        """Delete rows by equality filters and return removed rows."""
        query = self.client.table(table).delete()
        for key, value in filters.items():
            query = query.eq(key, value)
        return self.execute(query, default=[])
