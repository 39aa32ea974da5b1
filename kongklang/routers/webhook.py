"""LINE webhook endpoint."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastapi import APIRouter, Depends, Header, Request
from fastapi.concurrency import run_in_threadpool
from linebot.v3 import WebhookParser
from linebot.v3.exceptions import InvalidSignatureError as LineSignatureError
from linebot.v3.webhooks import MessageEvent, TextMessageContent

from kongklang.dependencies import get_dispatcher, get_line_service, get_parser
from kongklang.schemas.event import ConversationContext, InboundMessage, SourceType
from kongklang.services.dispatcher import CommandDispatcher
from kongklang.services.line_service import LineService
from kongklang.services.replies import STORE_FAILURE_TEXT
from kongklang.utils.errors import InvalidSignatureError, StoreError

logger = logging.getLogger(__name__)
router = APIRouter()


def to_inbound(event: Any) -> InboundMessage | None:
    """Convert a LINE text message event; other events return None."""
    if not isinstance(event, MessageEvent) or not isinstance(event.message, TextMessageContent):
        return None

    source = event.source
    author_id = getattr(source, "user_id", None)
    if not author_id:
        logger.info("Skipping message without a user id")
        return None

    source_type = SourceType(getattr(source, "type", SourceType.USER.value))
    if source_type is SourceType.GROUP:
        conversation_id = source.group_id
    elif source_type is SourceType.ROOM:
        conversation_id = source.room_id
    else:
        conversation_id = author_id

    return InboundMessage(
        context=ConversationContext(source_type=source_type, conversation_id=conversation_id),
        author_id=author_id,
        text=event.message.text or "",
        reply_token=event.reply_token,
    )


def process_message(
    message: InboundMessage,
    dispatcher: CommandDispatcher,
    line: LineService,
) -> None:
    """Run one message through the dispatcher and send the reply.

    Any failure while handling still answers the user with the failure text.
    """
    try:
        texts = dispatcher.handle(message)
    except StoreError as exc:
        logger.error(
            "Ledger store failure in %s: %s", message.conversation_id, exc.message, exc_info=exc
        )
        texts = [STORE_FAILURE_TEXT]
    except Exception:
        logger.exception("Failed to handle message in %s", message.conversation_id)
        texts = [STORE_FAILURE_TEXT]

    if message.reply_token:
        line.reply(message.reply_token, texts)


@router.post("")
async def receive_webhook(
    request: Request,
    x_line_signature: str = Header(""),
    parser: WebhookParser = Depends(get_parser),
    dispatcher: CommandDispatcher = Depends(get_dispatcher),
    line: LineService = Depends(get_line_service),
) -> dict[str, Any]:
    """Verify, parse and handle one batch of LINE events.

    Messages in the batch are handled concurrently; a failure in one of them
    is logged and does not affect the others.
    """
    body = (await request.body()).decode("utf-8")
    try:
        events = parser.parse(body, x_line_signature)
    except LineSignatureError as exc:
        raise InvalidSignatureError() from exc

    messages = [message for message in map(to_inbound, events) if message is not None]
    results = await asyncio.gather(
        *(run_in_threadpool(process_message, message, dispatcher, line) for message in messages),
        return_exceptions=True,
    )

    failed = 0
    for message, result in zip(messages, results):
        if isinstance(result, Exception):
            failed += 1
            logger.error(
                "Failed to handle message in %s", message.conversation_id, exc_info=result
            )
    return {"status": "ok", "handled": len(messages) - failed, "failed": failed}
