"""Ledger entry schemas."""

from datetime import datetime
from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel, Field


class EntryKind(StrEnum):
    """Who the money belongs to."""

    CENTER = "center"
    ADVANCE = "advance"


class Entry(BaseModel):
    """A single ledger row."""

    id: int
    conversation_id: str
    author_id: str
    kind: EntryKind
    amount: int = Field(..., gt=0)
    note: str = ""
    recorded_at: datetime


class LedgerSummary(BaseModel):
    """Totals for a set of entries."""

    center_total: int = 0
    advance_by_author: dict[str, int] = Field(default_factory=dict)
    advance_total: int = 0
    total: int = 0
    entry_count: int = 0


class PairSettlement(BaseModel):
    """Two-party settlement between the first two advance payers.

    ``amount`` is ``(advance_a - advance_b) / 2``: positive means B owes A,
    negative means A owes B.
    """

    author_a: str | None = None
    author_b: str | None = None
    advance_a: int = 0
    advance_b: int = 0
    amount: Decimal = Decimal(0)


class Transfer(BaseModel):
    """One payment that moves the group towards an equal split."""

    debtor_id: str
    creditor_id: str
    amount: Decimal
