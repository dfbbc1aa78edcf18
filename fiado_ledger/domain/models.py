"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, List, Optional


@dataclass
class LedgerEntry:
    """A transaction as seen by the settlement logic"""

    id: int
    customer_id: int
    amount: Decimal  # > 0 debt, < 0 payment
    date: Any  # datetime, raw stored text, or None
    closure_id: Optional[int] = None
    description: Optional[str] = None
    customer_name: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.closure_id is None


@dataclass
class CustomerBalance:
    """Derived balance of a customer, split into what was bought and what was paid"""

    customer_id: int
    balance: Decimal
    total_debts: Decimal
    total_payments: Decimal  # absolute value
    customer_name: Optional[str] = None


@dataclass
class ReceivablesSummary:
    """Shop-wide outstanding amounts"""

    total_receivable: Decimal
    customer_count: int
    top_debtors: List[CustomerBalance] = field(default_factory=list)


@dataclass
class SettlementWindow:
    """Inclusive [start, end] interval of a settlement week"""

    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


@dataclass
class ClosureTotals:
    """Totals of a set of entries"""

    total_received: Decimal
    total_debts: Decimal


@dataclass
class OpenPeriod:
    """Open entries of a settlement window, split by sign"""

    window: SettlementWindow
    entries: List[LedgerEntry] = field(default_factory=list)
    payments: List[LedgerEntry] = field(default_factory=list)
    debts: List[LedgerEntry] = field(default_factory=list)
    totals: ClosureTotals = field(default_factory=lambda: ClosureTotals(Decimal("0.00"), Decimal("0.00")))

    @property
    def transaction_ids(self) -> List[int]:
        return [entry.id for entry in self.entries]


class ClosureMode(str, Enum):
    """How closure membership is resolved"""

    EXPLICIT = "explicit"  # caller-listed transaction ids
    DATE_RANGE = "date_range"  # open transactions dated inside [start, end]


@dataclass
class ClosureOutcome:
    """Result of creating a closure"""

    closure_id: int
    mode: ClosureMode
    stamped_ids: List[int]
    skipped_ids: List[int]
    verified_totals: ClosureTotals
