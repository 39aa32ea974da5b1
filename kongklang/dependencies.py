"""FastAPI dependency injection helpers.

The ledger store, display name cache and pending-deletion map live for the
whole process; each is built once and handed to the routes from here.
"""

from __future__ import annotations

import hmac
from functools import lru_cache

from fastapi import Depends, Header
from linebot.v3 import WebhookParser

from kongklang.config import settings
from kongklang.services.dispatcher import CommandDispatcher
from kongklang.services.ledger_service import LedgerService
from kongklang.services.line_service import LineService
from kongklang.services.name_service import DisplayNameResolver
from kongklang.services.pending_deletions import PendingDeletionStore
from kongklang.utils.cache import TTLCache
from kongklang.utils.errors import NotFoundError, UnauthorizedError
from kongklang.utils.line_client import get_messaging_api, get_webhook_parser
from kongklang.utils.supabase_client import get_service_client


@lru_cache(maxsize=1)
def get_ledger_service() -> LedgerService:
    """Return the process-wide ledger store."""
    return LedgerService(get_service_client())


@lru_cache(maxsize=1)
def get_line_service() -> LineService:
    """Return the outbound LINE wrapper."""
    return LineService(get_messaging_api())


@lru_cache(maxsize=1)
def get_name_resolver() -> DisplayNameResolver:
    """Return the display name resolver and its cache."""
    cache = TTLCache(max_entries=settings.display_name_cache_max_entries)
    return DisplayNameResolver(get_line_service(), cache)


@lru_cache(maxsize=1)
def get_pending_deletions() -> PendingDeletionStore:
    """Return the in-memory delete confirmation map."""
    return PendingDeletionStore(ttl_seconds=settings.delete_confirm_ttl_seconds)


@lru_cache(maxsize=1)
def get_dispatcher() -> CommandDispatcher:
    """Return the command dispatcher wired to the shared collaborators."""
    return CommandDispatcher(
        ledger=get_ledger_service(),
        names=get_name_resolver(),
        pending=get_pending_deletions(),
    )


def get_parser() -> WebhookParser:
    """Return the LINE webhook signature parser."""
    return get_webhook_parser()


def require_backup_token(authorization: str = Header(None)) -> None:
    """Guard the CSV download route with a static bearer token.

    Raises:
        NotFoundError: 404 when no token is configured (route disabled).
        UnauthorizedError: 401 if the header is missing or the token differs.
    """
    if not settings.backup_route_enabled:
        raise NotFoundError("Backup route")
    if not authorization or not authorization.startswith("Bearer "):
        raise UnauthorizedError("Missing authorization header")

    token = authorization.split(" ", 1)[1].strip()
    expected = settings.backup_api_token.strip()
    if not hmac.compare_digest(token.encode("utf-8"), expected.encode("utf-8")):
        raise UnauthorizedError("Invalid backup token")


def get_backup_ledger(
    _: None = Depends(require_backup_token),
    ledger: LedgerService = Depends(get_ledger_service),
) -> LedgerService:
    """Return the ledger store after the backup token check passed."""
    return ledger
