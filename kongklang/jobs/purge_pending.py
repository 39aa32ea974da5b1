"""Expired delete confirmation cleanup job."""

from __future__ import annotations

from kongklang.dependencies import get_pending_deletions


async def purge_pending_deletions() -> None:
    """Drop delete requests nobody confirmed in time."""
    get_pending_deletions().purge_expired()
