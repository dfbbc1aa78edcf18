"""Balance aggregation - outstanding amounts derived from transaction history"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, Sequence
from fiado_ledger.domain.models import CustomerBalance, ReceivablesSummary

CENT = Decimal("0.01")


def to_money(value: Any) -> Decimal:
    """Normalise a numeric value to a two-place Decimal"""
    if value is None:
        return Decimal("0.00")
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_balance(amounts: Iterable[Any]) -> Decimal:
    """
    Sum signed transaction amounts into an outstanding balance.

    Positive means the customer owes money; zero or negative means paid up or
    in credit. Closure membership is irrelevant: every amount counts. An empty
    history yields 0.
    """
    return to_money(sum((to_money(amount) for amount in amounts), Decimal("0")))


def summarize_receivables(balances: Sequence[CustomerBalance], top: int = 5) -> ReceivablesSummary:
    """
    Shop-wide view of customer balances.

    total_receivable nets every balance, credits included. top_debtors lists
    up to `top` customers that still owe money, largest balance first.
    """
    debtors = sorted((b for b in balances if b.balance > 0), key=lambda b: (-b.balance, b.customer_id))
    return ReceivablesSummary(
        total_receivable=calculate_balance(b.balance for b in balances),
        customer_count=len(balances),
        top_debtors=debtors[:top],
    )
