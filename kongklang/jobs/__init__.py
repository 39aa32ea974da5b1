"""Background job modules for periodic bot tasks."""

from kongklang.jobs.heartbeat import heartbeat
from kongklang.jobs.purge_pending import purge_pending_deletions

__all__ = [
    "heartbeat",
    "purge_pending_deletions",
]
