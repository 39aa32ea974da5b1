"""Totals and settlement arithmetic over ledger entries."""

from __future__ import annotations

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

from kongklang.schemas.entry import Entry, EntryKind, LedgerSummary, PairSettlement, Transfer

CENT = Decimal("0.01")
_TOLERANCE = Decimal("0.005")


def aggregate(entries: Iterable[Entry]) -> LedgerSummary:
    """Reduce entries into center, per-author advance and grand totals.

    Authors appear in ``advance_by_author`` in the order of their first
    advance entry by id, so the result does not depend on input order.
    """
    center_total = 0
    advance_by_author: dict[str, int] = {}
    count = 0
    for entry in sorted(entries, key=lambda item: item.id):
        count += 1
        if entry.kind is EntryKind.CENTER:
            center_total += entry.amount
        else:
            advance_by_author[entry.author_id] = (
                advance_by_author.get(entry.author_id, 0) + entry.amount
            )

    advance_total = sum(advance_by_author.values())
    return LedgerSummary(
        center_total=center_total,
        advance_by_author=advance_by_author,
        advance_total=advance_total,
        total=center_total + advance_total,
        entry_count=count,
    )


def settle_pair(summary: LedgerSummary) -> PairSettlement:
    """Split the advance difference between the first two payers evenly.

    A missing payer counts as zero. Payers after the second are ignored here;
    see ``settle_group`` for the equal split across everyone.
    """
    authors = list(summary.advance_by_author)
    author_a = authors[0] if authors else None
    author_b = authors[1] if len(authors) > 1 else None
    advance_a = summary.advance_by_author.get(author_a, 0) if author_a else 0
    advance_b = summary.advance_by_author.get(author_b, 0) if author_b else 0
    return PairSettlement(
        author_a=author_a,
        author_b=author_b,
        advance_a=advance_a,
        advance_b=advance_b,
        amount=Decimal(advance_a - advance_b) / 2,
    )


def settle_group(summary: LedgerSummary) -> list[Transfer]:
    """Return transfers that leave every advance payer at the same net share."""
    payers = summary.advance_by_author
    if len(payers) < 2:
        return []

    share = Decimal(summary.advance_total) / len(payers)
    debtors: list[list] = []
    creditors: list[list] = []
    for author_id, paid in payers.items():
        net = Decimal(paid) - share
        if net < -_TOLERANCE:
            debtors.append([author_id, -net])
        elif net > _TOLERANCE:
            creditors.append([author_id, net])

    debtors.sort(key=lambda item: item[1], reverse=True)
    creditors.sort(key=lambda item: item[1], reverse=True)

    transfers: list[Transfer] = []
    i = j = 0
    while i < len(debtors) and j < len(creditors):
        debtor, creditor = debtors[i], creditors[j]
        amount = min(debtor[1], creditor[1])
        transfers.append(
            Transfer(
                debtor_id=debtor[0],
                creditor_id=creditor[0],
                amount=amount.quantize(CENT, rounding=ROUND_HALF_UP),
            )
        )
        debtor[1] -= amount
        creditor[1] -= amount
        if debtor[1] <= _TOLERANCE:
            i += 1
        if creditor[1] <= _TOLERANCE:
            j += 1
    return transfers
