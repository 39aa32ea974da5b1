"""Service package exports with lazy loading."""

from __future__ import annotations

from importlib import import_module
from typing import Any

_EXPORTS = {
    "CommandDispatcher": "kongklang.services.dispatcher",
    "DisplayNameResolver": "kongklang.services.name_service",
    "LedgerService": "kongklang.services.ledger_service",
    "LineService": "kongklang.services.line_service",
    "PendingDeletionStore": "kongklang.services.pending_deletions",
    "SupabaseService": "kongklang.services.common",
}

__all__ = sorted(_EXPORTS.keys())


def __getattr__(name: str) -> Any:
    if name not in _EXPORTS:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module = import_module(_EXPORTS[name])
    return getattr(module, name)
