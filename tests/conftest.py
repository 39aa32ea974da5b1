"""Pytest fixtures for bot tests."""

from __future__ import annotations

import os
from datetime import UTC, datetime

import pytest


def _set_default_env() -> None:
    os.environ.setdefault("SUPABASE_URL", "https://example.supabase.co")
    os.environ.setdefault("SUPABASE_SERVICE_KEY", "service-key")
    os.environ.setdefault("LINE_CHANNEL_ACCESS_TOKEN", "line-token")
    os.environ.setdefault("LINE_CHANNEL_SECRET", "line-secret")
    os.environ.setdefault("TIMEZONE", "Asia/Bangkok")
    os.environ.setdefault("ENABLE_SCHEDULER", "false")
    os.environ.setdefault("VERIFY_SCHEMA_ON_STARTUP", "false")


# Settings are read when kongklang.config is first imported.
_set_default_env()

from fakes import FakeMessagingApi, FakeSupabaseClient  # noqa: E402

from kongklang.schemas.event import ConversationContext, InboundMessage, SourceType  # noqa: E402
from kongklang.services.dispatcher import CommandDispatcher  # noqa: E402
from kongklang.services.ledger_service import LedgerService  # noqa: E402
from kongklang.services.line_service import LineService  # noqa: E402
from kongklang.services.name_service import DisplayNameResolver  # noqa: E402
from kongklang.services.pending_deletions import PendingDeletionStore  # noqa: E402
from kongklang.utils.cache import TTLCache  # noqa: E402
from kongklang.utils.time import get_zone  # noqa: E402

# 2025-03-15 12:00 in Bangkok.
FIXED_NOW = datetime(2025, 3, 15, 5, 0, tzinfo=UTC)
BANGKOK = get_zone("Asia/Bangkok")


class Clock:
    """Mutable clock shared by the fake store and the services under test."""

    def __init__(self, now: datetime = FIXED_NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock() -> Clock:
    return Clock()


@pytest.fixture
def fake_db(clock: Clock) -> FakeSupabaseClient:
    return FakeSupabaseClient(now=clock)


@pytest.fixture
def ledger(fake_db: FakeSupabaseClient) -> LedgerService:
    return LedgerService(fake_db, table="entries", tz=BANGKOK)


@pytest.fixture
def messaging_api() -> FakeMessagingApi:
    return FakeMessagingApi(profiles={"U-alice-0001": "Alice", "U-bob-0002": "Bob"})


@pytest.fixture
def line_service(messaging_api: FakeMessagingApi) -> LineService:
    return LineService(messaging_api, timeout_seconds=5)


@pytest.fixture
def names(line_service: LineService) -> DisplayNameResolver:
    return DisplayNameResolver(line_service, TTLCache(max_entries=16), 3600, 60)


@pytest.fixture
def pending(clock: Clock) -> PendingDeletionStore:
    return PendingDeletionStore(ttl_seconds=120, clock=clock)


@pytest.fixture
def dispatcher(
    ledger: LedgerService,
    names: DisplayNameResolver,
    pending: PendingDeletionStore,
    clock: Clock,
) -> CommandDispatcher:
    return CommandDispatcher(
        ledger=ledger,
        names=names,
        pending=pending,
        tz=BANGKOK,
        clock=clock,
        chunk_chars=4800,
        max_chunks=5,
    )


@pytest.fixture
def group_message():
    """Build an inbound group message from ``author_id`` with ``text``."""

    def build(text: str, author_id: str = "U-alice-0001", group_id: str = "G1") -> InboundMessage:
        return InboundMessage(
            context=ConversationContext(source_type=SourceType.GROUP, conversation_id=group_id),
            author_id=author_id,
            text=text,
            reply_token="reply-token",
        )

    return build


@pytest.fixture
def client():
    """Create a FastAPI test client; dependency overrides are reset afterwards."""
    from fastapi.testclient import TestClient

    from kongklang.main import app

    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
