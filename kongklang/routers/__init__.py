"""API router package."""

from kongklang.routers import backup, webhook

__all__ = [
    "backup",
    "webhook",
]
