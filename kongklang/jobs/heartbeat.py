"""Liveness heartbeat job."""

from __future__ import annotations

import logging

from kongklang.utils.time import now_utc

logger = logging.getLogger(__name__)


async def heartbeat() -> None:
    """Log that the process is still serving."""
    logger.info("Bot alive %s", now_utc().isoformat())
