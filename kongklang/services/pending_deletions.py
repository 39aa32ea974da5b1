"""Two-step delete confirmation state."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import StrEnum

from kongklang.utils.time import now_utc

logger = logging.getLogger(__name__)


class ConfirmOutcome(StrEnum):
    """Result of checking a delete confirmation."""

    ACCEPTED = "accepted"
    NO_REQUEST = "no_request"
    EXPIRED = "expired"
    MISMATCH = "mismatch"


@dataclass(frozen=True)
class PendingDeletion:
    entry_id: int
    expires_at: datetime


@dataclass(frozen=True)
class ConfirmResult:
    outcome: ConfirmOutcome
    pending_id: int | None = None


class PendingDeletionStore:
    """Per-process map of ``(conversation, author)`` to the entry awaiting confirmation.

    A new request for the same key replaces the previous one.
    """

    def __init__(
        self,
        ttl_seconds: int,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        self.ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock
        self._pending: dict[tuple[str, str], PendingDeletion] = {}
        self._lock = threading.Lock()

    def request(self, conversation_id: str, author_id: str, entry_id: int) -> PendingDeletion:
        """Remember that ``author_id`` wants to delete ``entry_id``."""
        pending = PendingDeletion(entry_id=entry_id, expires_at=self._clock() + self.ttl)
        with self._lock:
            self._pending[(conversation_id, author_id)] = pending
        return pending

    def confirm(self, conversation_id: str, author_id: str, entry_id: int) -> ConfirmResult:
        """Check a confirmation against the pending request.

        Only an accepted or expired confirmation clears the request; a
        mismatched id leaves it in place.
        """
        key = (conversation_id, author_id)
        with self._lock:
            pending = self._pending.get(key)
            if pending is None:
                return ConfirmResult(ConfirmOutcome.NO_REQUEST)
            if pending.expires_at <= self._clock():
                del self._pending[key]
                return ConfirmResult(ConfirmOutcome.EXPIRED, pending.entry_id)
            if pending.entry_id != entry_id:
                return ConfirmResult(ConfirmOutcome.MISMATCH, pending.entry_id)
            del self._pending[key]
            return ConfirmResult(ConfirmOutcome.ACCEPTED, pending.entry_id)

    def purge_expired(self) -> int:
        """Drop every expired request and return how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [key for key, value in self._pending.items() if value.expires_at <= now]
            for key in expired:
                del self._pending[key]
        if expired:
            logger.info("Purged %s expired delete requests", len(expired))
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)
