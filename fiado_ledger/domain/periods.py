"""Settlement period selection - which open transactions belong to the current week"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Iterable, List
from fiado_ledger.domain.balance import to_money
from fiado_ledger.domain.models import ClosureTotals, LedgerEntry, OpenPeriod, SettlementWindow
from fiado_ledger.utils.date_utils import end_of_week, parse_timestamp, start_of_week

logger = logging.getLogger(__name__)


def current_window(now: datetime, week_starts_on: int = 0) -> SettlementWindow:
    """Calendar week containing `now`, both bounds inclusive"""
    return SettlementWindow(
        start=start_of_week(now, week_starts_on),
        end=end_of_week(now, week_starts_on),
    )


def select_open_entries(entries: Iterable[LedgerEntry], window: SettlementWindow) -> List[LedgerEntry]:
    """
    Keep entries that are not yet closed and are dated inside the window.

    An entry whose date cannot be parsed is left out; it never fails the
    whole selection.
    """
    selected = []
    for entry in entries:
        if not entry.is_open:
            continue

        moment = parse_timestamp(entry.date)
        if moment is None:
            logger.warning(
                "Skipping transaction with unreadable date",
                extra={"transaction_id": entry.id, "raw_date": str(entry.date)},
            )
            continue

        if window.contains(moment):
            selected.append(entry)
    return selected


def calculate_totals(entries: Iterable[LedgerEntry]) -> ClosureTotals:
    """
    Candidate closure totals.

    total_received is the absolute sum of payments (amount < 0); total_debts
    is the sum of debts (amount > 0). Zero amounts count toward neither.
    """
    received = Decimal("0")
    debts = Decimal("0")
    for entry in entries:
        amount = to_money(entry.amount)
        if amount < 0:
            received += amount
        elif amount > 0:
            debts += amount
    return ClosureTotals(total_received=to_money(abs(received)), total_debts=to_money(debts))


def summarize_period(entries: Iterable[LedgerEntry], window: SettlementWindow) -> OpenPeriod:
    """Select the open entries of a window and split them into buckets"""
    selected = select_open_entries(entries, window)
    return OpenPeriod(
        window=window,
        entries=selected,
        payments=[e for e in selected if to_money(e.amount) < 0],
        debts=[e for e in selected if to_money(e.amount) > 0],
        totals=calculate_totals(selected),
    )
