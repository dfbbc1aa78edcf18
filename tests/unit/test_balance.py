"""Unit tests for balance aggregation"""

from decimal import Decimal
from fiado_ledger.domain.balance import calculate_balance, summarize_receivables, to_money
from fiado_ledger.domain.models import CustomerBalance


def test_balance_sums_signed_amounts():
    assert calculate_balance([Decimal("50"), Decimal("-20")]) == Decimal("30.00")


def test_empty_history_is_zero():
    assert calculate_balance([]) == Decimal("0.00")


def test_overpayment_goes_negative():
    assert calculate_balance(["10.00", "-15.00"]) == Decimal("-5.00")


def test_float_inputs_do_not_leak_binary_noise():
    assert calculate_balance([0.1, 0.2]) == Decimal("0.30")


def test_to_money_rounds_half_up():
    assert to_money("2.345") == Decimal("2.35")
    assert to_money(None) == Decimal("0.00")


def make_balance(customer_id: int, balance: str) -> CustomerBalance:
    value = Decimal(balance)
    return CustomerBalance(
        customer_id=customer_id,
        balance=value,
        total_debts=max(value, Decimal("0")),
        total_payments=max(-value, Decimal("0")),
    )


def test_summary_nets_credits_and_ranks_debtors():
    balances = [make_balance(1, "10"), make_balance(2, "-15"), make_balance(3, "40"), make_balance(4, "0")]

    summary = summarize_receivables(balances, top=5)

    assert summary.total_receivable == Decimal("35.00")
    assert summary.customer_count == 4
    assert [b.customer_id for b in summary.top_debtors] == [3, 1]


def test_summary_ties_ordered_by_customer_id_and_limited():
    balances = [make_balance(i, "20") for i in (7, 3, 5)] + [make_balance(9, "99")]

    summary = summarize_receivables(balances, top=3)

    assert [b.customer_id for b in summary.top_debtors] == [9, 3, 5]
