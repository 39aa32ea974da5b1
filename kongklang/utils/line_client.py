"""LINE Messaging API client singletons."""

from functools import lru_cache

from linebot.v3 import WebhookParser
from linebot.v3.messaging import ApiClient, Configuration, MessagingApi

from kongklang.config import settings


@lru_cache(maxsize=1)
def get_messaging_api() -> MessagingApi:
    """Return the Messaging API client used for replies and profile lookups."""
    configuration = Configuration(access_token=settings.line_channel_access_token)
    return MessagingApi(ApiClient(configuration))


@lru_cache(maxsize=1)
def get_webhook_parser() -> WebhookParser:
    """Return the signature-checking webhook parser for the channel secret."""
    return WebhookParser(settings.line_channel_secret)
