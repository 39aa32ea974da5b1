"""Free-text command parser.

Messages are normalized, matched against a keyword at the start of the line
(longest keyword first) and the remainder must fully match that keyword's
argument grammar. Anything else becomes ``Unrecognized``.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import date

from kongklang.commands.models import (
    AllTime,
    Backup,
    Command,
    ConfirmDelete,
    CurrentMonth,
    Day,
    Help,
    ListEntries,
    ListRecent,
    Month,
    PastDays,
    RecordEntry,
    RequestDelete,
    ResetMonth,
    Scope,
    Summarize,
    Today,
    Unrecognized,
)
from kongklang.schemas.entry import EntryKind
from kongklang.utils.time import parse_iso_date, parse_year_month

DEFAULT_RECENT_LIMIT = 5
MAX_RECENT_LIMIT = 50
MAX_PAST_DAYS = 366
# Largest value the integer amount column holds.
MAX_AMOUNT = 2_147_483_647

_FULLWIDTH = str.maketrans("０１２３４５６７８９　＃，", "0123456789 #,")
_WHITESPACE = re.compile(r"\s+")

# Digit groups ("1,200" / "1 200") or a plain run of digits. A decimal part
# or a dangling separator makes the whole amount invalid.
_RECORD = re.compile(
    r"(?P<amount>\d{1,3}(?:[, ]\d{3})+(?!\d)|\d+)(?!\d|[.,]\d)\s*(?P<note>.*)",
    re.DOTALL,
)
_ENTRY_ID = re.compile(r"#?\s*(?P<id>\d+)")
_TODAY = re.compile(r"วันนี้|today", re.IGNORECASE)
_CURRENT_MONTH = re.compile(r"เดือนนี้|this\s*month|month", re.IGNORECASE)
_MONTH = re.compile(r"(?:เดือน|month)\s*(?P<ym>\d{4}-\d{2})", re.IGNORECASE)
_DAY = re.compile(r"(?P<date>\d{4}-\d{2}-\d{2})")
_ALL = re.compile(r"ทั้งหมด|all", re.IGNORECASE)
_PAST = re.compile(r"(?:ย้อนหลัง|past)\s*(?P<days>\d+)\s*(?:วัน|days?)?", re.IGNORECASE)
_RECENT = re.compile(r"(?:ล่าสุด|recent)(?:\s*(?P<limit>\d+))?", re.IGNORECASE)


def normalize(text: str) -> str:
    """Fold full-width digits, collapse whitespace and trim."""
    folded = (text or "").translate(_FULLWIDTH)
    return _WHITESPACE.sub(" ", folded).strip()


def parse_amount(raw: str) -> int:
    """Strip digit grouping characters and convert to an integer."""
    return int(raw.replace(",", "").replace(" ", ""))


class CommandParser:
    """Turn chat text into one ``Command``."""

    def __init__(
        self,
        recent_default: int = DEFAULT_RECENT_LIMIT,
        recent_max: int = MAX_RECENT_LIMIT,
        past_days_max: int = MAX_PAST_DAYS,
    ) -> None:
        self.recent_max = max(1, recent_max)
        self.recent_default = min(max(1, recent_default), self.recent_max)
        self.past_days_max = max(1, past_days_max)

        table: list[tuple[tuple[str, ...], Callable[[str], Command | None]]] = [
            (("กลาง", "center"), self._record(EntryKind.CENTER)),
            (("ส่วนตัว", "personal"), self._record(EntryKind.ADVANCE)),
            (("ลบ", "delete"), self._delete_request),
            (("ยืนยัน", "confirm"), self._delete_confirm),
            (("สรุป", "summary"), self._summarize),
            (("ดูรายการ", "list"), self._list),
            (("รีเซ็ต", "reset"), self._reset),
            (("สำรองข้อมูล", "backup"), self._exact(Backup())),
            (("วิธีใช้", "help", "?"), self._exact(Help())),
        ]
        rules = [
            (keyword, handler) for keywords, handler in table for keyword in keywords
        ]
        rules.sort(key=lambda item: len(item[0]), reverse=True)
        self._rules = [
            (re.compile(re.escape(keyword), re.IGNORECASE), handler) for keyword, handler in rules
        ]

    def parse(self, text: str) -> Command:
        """Parse one message; never raises for user input."""
        normalized = normalize(text)
        for keyword, handler in self._rules:
            match = keyword.match(normalized)
            if not match:
                continue
            command = handler(normalized[match.end():].strip())
            return command if command is not None else Unrecognized(normalized)
        return Unrecognized(normalized)

    @staticmethod
    def _record(kind: EntryKind) -> Callable[[str], Command | None]:
        def handler(rest: str) -> Command | None:
            match = _RECORD.fullmatch(rest)
            if not match:
                return None
            amount = parse_amount(match["amount"])
            if amount <= 0 or amount > MAX_AMOUNT:
                return None
            return RecordEntry(kind=kind, amount=amount, note=match["note"].strip())

        return handler

    @staticmethod
    def _exact(command: Command) -> Callable[[str], Command | None]:
        return lambda rest: command if not rest else None

    @staticmethod
    def _delete_request(rest: str) -> Command | None:
        match = _ENTRY_ID.fullmatch(rest)
        return RequestDelete(int(match["id"])) if match else None

    @staticmethod
    def _delete_confirm(rest: str) -> Command | None:
        match = _ENTRY_ID.fullmatch(rest)
        return ConfirmDelete(int(match["id"])) if match else None

    def _summarize(self, rest: str) -> Command | None:
        if _ALL.fullmatch(rest):
            return Summarize(AllTime())
        match = _PAST.fullmatch(rest)
        if match:
            days = int(match["days"])
            if days < 1:
                return None
            return Summarize(PastDays(min(days, self.past_days_max)))
        scope = self._calendar_scope(rest)
        return Summarize(scope) if scope is not None else None

    def _list(self, rest: str) -> Command | None:
        match = _RECENT.fullmatch(rest)
        if match:
            limit = int(match["limit"]) if match["limit"] else self.recent_default
            return ListRecent(min(max(1, limit), self.recent_max))
        scope = self._calendar_scope(rest)
        return ListEntries(scope) if scope is not None else None

    @staticmethod
    def _reset(rest: str) -> Command | None:
        return ResetMonth() if _CURRENT_MONTH.fullmatch(rest) else None

    @staticmethod
    def _calendar_scope(rest: str) -> Scope | None:
        if _TODAY.fullmatch(rest):
            return Today()
        if _CURRENT_MONTH.fullmatch(rest):
            return CurrentMonth()
        match = _MONTH.fullmatch(rest)
        if match:
            try:
                year, month = parse_year_month(match["ym"])
                date(year, month, 1)
            except ValueError:
                return None
            return Month(year, month)
        match = _DAY.fullmatch(rest)
        if match:
            try:
                return Day(parse_iso_date(match["date"]))
            except ValueError:
                return None
        return None
