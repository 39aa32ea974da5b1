"""Read-through display name resolution."""

from __future__ import annotations

import logging

from kongklang.config import settings
from kongklang.schemas.event import ConversationContext
from kongklang.services.line_service import LineService
from kongklang.utils.cache import TTLCache
from kongklang.utils.errors import UpstreamLookupError

logger = logging.getLogger(__name__)

FALLBACK_LENGTH = 6


def fallback_name(user_id: str) -> str:
    """Return the short id shown when a profile cannot be read."""
    return user_id[:FALLBACK_LENGTH]


class DisplayNameResolver:
    """Resolve user ids to display names through a TTL cache.

    Fallback names are cached for a much shorter time than real names so a
    transient lookup failure heals on its own.
    """

    def __init__(
        self,
        line: LineService,
        cache: TTLCache,
        ttl_seconds: int | None = None,
        failure_ttl_seconds: int | None = None,
    ) -> None:
        self.line = line
        self.cache = cache
        self.ttl_seconds = (
            settings.display_name_ttl_seconds if ttl_seconds is None else ttl_seconds
        )
        self.failure_ttl_seconds = (
            settings.display_name_failure_ttl_seconds
            if failure_ttl_seconds is None
            else failure_ttl_seconds
        )

    def resolve(self, context: ConversationContext, user_id: str) -> str:
        """Return a cached name, or look it up and fall back to a short id."""
        cached = self.cache.get(user_id)
        if cached is not None:
            return cached

        try:
            name = self.line.fetch_display_name(context, user_id)
        except UpstreamLookupError as exc:
            logger.warning("Display name fallback for %s: %s", user_id, exc.message)
            name = fallback_name(user_id)
            self.cache.set(user_id, name, self.failure_ttl_seconds)
            return name

        self.cache.set(user_id, name, self.ttl_seconds)
        return name

    def resolve_many(self, context: ConversationContext, user_ids: list[str]) -> dict[str, str]:
        """Resolve several ids, keeping the given order."""
        return {user_id: self.resolve(context, user_id) for user_id in dict.fromkeys(user_ids)}
