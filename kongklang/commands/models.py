"""Typed chat commands.

Every message parses into exactly one of the dataclasses below; scopes are
the time windows that summaries and listings work over.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from kongklang.schemas.entry import EntryKind


@dataclass(frozen=True)
class Today:
    pass


@dataclass(frozen=True)
class Day:
    day: date


@dataclass(frozen=True)
class Month:
    year: int
    month: int


@dataclass(frozen=True)
class CurrentMonth:
    pass


@dataclass(frozen=True)
class PastDays:
    days: int


@dataclass(frozen=True)
class AllTime:
    pass


Scope = Today | Day | Month | CurrentMonth | PastDays | AllTime
ListScope = Today | Day | Month | CurrentMonth


@dataclass(frozen=True)
class RecordEntry:
    kind: EntryKind
    amount: int
    note: str = ""


@dataclass(frozen=True)
class RequestDelete:
    entry_id: int


@dataclass(frozen=True)
class ConfirmDelete:
    entry_id: int


@dataclass(frozen=True)
class Summarize:
    scope: Scope


@dataclass(frozen=True)
class ListEntries:
    scope: ListScope


@dataclass(frozen=True)
class ListRecent:
    limit: int


@dataclass(frozen=True)
class ResetMonth:
    pass


@dataclass(frozen=True)
class Backup:
    pass


@dataclass(frozen=True)
class Help:
    pass


@dataclass(frozen=True)
class Unrecognized:
    text: str


Command = (
    RecordEntry
    | RequestDelete
    | ConfirmDelete
    | Summarize
    | ListEntries
    | ListRecent
    | ResetMonth
    | Backup
    | Help
    | Unrecognized
)
