"""Unit tests for settlement window selection"""

from datetime import datetime, timedelta
from decimal import Decimal
from fiado_ledger.domain.models import LedgerEntry
from fiado_ledger.domain.periods import calculate_totals, current_window, select_open_entries, summarize_period
from fiado_ledger.utils.date_utils import end_of_week, parse_timestamp, start_of_week

WEDNESDAY = datetime(2026, 10, 14, 15, 30)


def entry(tid: int, amount: str, date, closure_id=None) -> LedgerEntry:
    return LedgerEntry(id=tid, customer_id=1, amount=Decimal(amount), date=date, closure_id=closure_id)


def test_week_starts_on_sunday_by_default():
    window = current_window(WEDNESDAY)

    assert window.start == datetime(2026, 10, 11, 0, 0)
    assert window.end == datetime(2026, 10, 17, 23, 59, 59, 999999)


def test_week_starting_monday():
    window = current_window(WEDNESDAY, week_starts_on=1)

    assert window.start == datetime(2026, 10, 12)
    assert window.end == datetime(2026, 10, 18, 23, 59, 59, 999999)


def test_week_start_day_itself_opens_a_new_week():
    sunday = datetime(2026, 10, 11, 0, 0)
    assert start_of_week(sunday) == sunday
    # Same Sunday with a Monday convention belongs to the previous week
    assert start_of_week(sunday, week_starts_on=1) == datetime(2026, 10, 5)
    assert end_of_week(sunday, week_starts_on=1) == datetime(2026, 10, 11, 23, 59, 59, 999999)


def test_window_bounds_are_inclusive():
    window = current_window(WEDNESDAY)
    entries = [
        entry(1, "10", window.start),
        entry(2, "10", window.end),
        entry(3, "10", window.start - timedelta(microseconds=1)),
        entry(4, "10", window.end + timedelta(microseconds=1)),
    ]

    selected = select_open_entries(entries, window)

    assert [e.id for e in selected] == [1, 2]


def test_closed_entries_are_never_open():
    window = current_window(WEDNESDAY)
    entries = [entry(1, "50", WEDNESDAY), entry(2, "-20", WEDNESDAY, closure_id=7)]

    assert [e.id for e in select_open_entries(entries, window)] == [1]


def test_unreadable_dates_are_skipped_not_fatal():
    window = current_window(WEDNESDAY)
    entries = [
        entry(1, "50", "2026-10-13 09:00:00"),
        entry(2, "30", "not-a-date"),
        entry(3, "20", None),
        entry(4, "-10", "2026-10-14T08:15:00.123456"),
        entry(5, "5", 12345),
    ]

    selected = select_open_entries(entries, window)

    assert [e.id for e in selected] == [1, 4]


def test_parse_timestamp_normalises_aware_values_to_utc():
    assert parse_timestamp("2026-10-14T10:00:00-03:00") == datetime(2026, 10, 14, 13, 0)
    assert parse_timestamp("   ") is None


def test_totals_split_by_sign():
    totals = calculate_totals([entry(1, "50", None), entry(2, "-20", None), entry(3, "-5.50", None), entry(4, "12.25", None)])

    assert totals.total_received == Decimal("25.50")
    assert totals.total_debts == Decimal("62.25")


def test_zero_amount_is_closeable_but_in_no_bucket():
    window = current_window(WEDNESDAY)
    period = summarize_period([entry(1, "50", WEDNESDAY), entry(2, "0", WEDNESDAY), entry(3, "-20", WEDNESDAY)], window)

    assert period.transaction_ids == [1, 2, 3]
    assert [e.id for e in period.debts] == [1]
    assert [e.id for e in period.payments] == [3]
    assert period.totals.total_debts == Decimal("50.00")
    assert period.totals.total_received == Decimal("20.00")


def test_empty_period_has_zero_totals():
    period = summarize_period([], current_window(WEDNESDAY))

    assert period.transaction_ids == []
    assert period.totals.total_received == Decimal("0.00")
    assert period.totals.total_debts == Decimal("0.00")
