"""Inbound chat event schemas."""

from enum import StrEnum

from pydantic import BaseModel


class SourceType(StrEnum):
    """Where a message was sent from."""

    GROUP = "group"
    ROOM = "room"
    USER = "user"


class ConversationContext(BaseModel):
    """The chat scope a ledger belongs to."""

    source_type: SourceType
    conversation_id: str


class InboundMessage(BaseModel):
    """A text message the bot has to answer."""

    context: ConversationContext
    author_id: str
    text: str
    reply_token: str | None = None

    @property
    def conversation_id(self) -> str:
        return self.context.conversation_id
