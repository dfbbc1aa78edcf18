"""Closure rules - membership mode and reconciliation of claimed totals"""

from typing import Iterable, List, Optional
from fiado_ledger.domain.balance import to_money
from fiado_ledger.domain.models import ClosureMode, ClosureTotals


def resolve_mode(transaction_ids: Optional[Iterable[int]]) -> ClosureMode:
    """
    Pick the membership mode of a closure request.

    A non-empty id list is authoritative. Without ids, membership falls back
    to every open transaction dated inside [start_date, end_date].
    """
    if transaction_ids:
        return ClosureMode.EXPLICIT
    return ClosureMode.DATE_RANGE


def unique_ids(transaction_ids: Iterable[int]) -> List[int]:
    """Deduplicate ids keeping first-seen order"""
    seen = set()
    ordered = []
    for tid in transaction_ids:
        if tid not in seen:
            seen.add(tid)
            ordered.append(tid)
    return ordered


def totals_match(claimed: ClosureTotals, verified: ClosureTotals) -> bool:
    """Compare caller-supplied totals with the totals of the stamped membership"""
    return (
        to_money(claimed.total_received) == to_money(verified.total_received)
        and to_money(claimed.total_debts) == to_money(verified.total_debts)
    )
