"""Outbound LINE operations: replies and member profile lookups."""

from __future__ import annotations

import logging
from typing import Any

from linebot.v3.messaging import MessagingApi, ReplyMessageRequest, TextMessage

from kongklang.config import settings
from kongklang.schemas.event import ConversationContext, SourceType
from kongklang.utils.errors import UpstreamLookupError

logger = logging.getLogger(__name__)


class LineService:
    """Thin wrapper around ``MessagingApi`` with bounded request timeouts."""

    def __init__(self, api: MessagingApi, timeout_seconds: int | None = None) -> None:
        self.api = api
        self.timeout_seconds = timeout_seconds or settings.line_request_timeout_seconds

    def reply(self, reply_token: str, texts: list[str]) -> None:
        """Send one reply carrying each text as a separate message bubble."""
        if not texts:
            return
        request = ReplyMessageRequest(
            reply_token=reply_token,
            messages=[TextMessage(text=text) for text in texts],
        )
        self.api.reply_message(request, _request_timeout=self.timeout_seconds)

    def fetch_display_name(self, context: ConversationContext, user_id: str) -> str:
        """Look up a user's display name in the scope the message came from.

        Raises:
            UpstreamLookupError: the platform rejected or failed the lookup,
                or returned a profile without a display name.
        """
        try:
            profile = self._fetch_profile(context, user_id)
        except Exception as exc:
            raise UpstreamLookupError(f"Profile lookup failed for {user_id}") from exc

        display_name = getattr(profile, "display_name", None)
        if not display_name:
            raise UpstreamLookupError(f"Profile for {user_id} has no display name")
        return str(display_name)

    def _fetch_profile(self, context: ConversationContext, user_id: str) -> Any:
        if context.source_type is SourceType.GROUP:
            return self.api.get_group_member_profile(
                context.conversation_id, user_id, _request_timeout=self.timeout_seconds
            )
        if context.source_type is SourceType.ROOM:
            return self.api.get_room_member_profile(
                context.conversation_id, user_id, _request_timeout=self.timeout_seconds
            )
        return self.api.get_profile(user_id, _request_timeout=self.timeout_seconds)
