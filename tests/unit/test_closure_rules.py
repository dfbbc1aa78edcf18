"""Unit tests for closure membership rules"""

from decimal import Decimal
from fiado_ledger.domain.closures import resolve_mode, totals_match, unique_ids
from fiado_ledger.domain.models import ClosureMode, ClosureTotals


def test_listed_ids_select_explicit_mode():
    assert resolve_mode([10, 11]) is ClosureMode.EXPLICIT


def test_missing_or_empty_ids_fall_back_to_date_range():
    assert resolve_mode(None) is ClosureMode.DATE_RANGE
    assert resolve_mode([]) is ClosureMode.DATE_RANGE


def test_unique_ids_keeps_first_seen_order():
    assert unique_ids([3, 1, 3, 2, 1]) == [3, 1, 2]


def test_totals_match_ignores_representation():
    claimed = ClosureTotals(Decimal("20"), Decimal("50.0"))
    verified = ClosureTotals(Decimal("20.00"), Decimal("50.00"))

    assert totals_match(claimed, verified)
    assert not totals_match(claimed, ClosureTotals(Decimal("20.00"), Decimal("49.99")))
