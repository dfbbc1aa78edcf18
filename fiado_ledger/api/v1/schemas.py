"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from fiado_ledger.utils.date_utils import to_naive_utc


class CustomerCreateRequest(BaseModel):
    """Request body for POST /api/customers"""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, description="Customer display name")
    phone: Optional[str] = Field(None, description="WhatsApp / phone number")


class CustomerResponse(BaseModel):
    """Customer with derived balance"""

    id: int
    name: str
    phone: Optional[str] = None
    balance: Decimal
    total_debts: Decimal = Decimal("0.00")
    total_payments: Decimal = Decimal("0.00")
    created_at: Optional[datetime] = None


class BalanceResponse(BaseModel):
    """Response for GET /api/customers/{customer_id}/balance"""

    customer_id: int
    balance: Decimal
    total_debts: Decimal
    total_payments: Decimal


class DebtorItem(BaseModel):
    """Customer ranked by outstanding balance"""

    customer_id: int
    name: Optional[str] = None
    balance: Decimal


class SummaryResponse(BaseModel):
    """Response for GET /api/summary"""

    total_receivable: Decimal
    customer_count: int
    top_debtors: List[DebtorItem]


class DeleteResponse(BaseModel):
    success: bool = True


class ReminderResponse(BaseModel):
    """Response for POST /api/customers/{customer_id}/reminder"""

    customer_id: int
    message: str
    generated: bool


class TransactionCreateRequest(BaseModel):
    """Request body for POST /api/transactions"""

    customer_id: int = Field(..., gt=0)
    amount: Decimal = Field(..., max_digits=12, description="Positive = debt, negative = payment")
    description: Optional[str] = None


class TransactionResponse(BaseModel):
    """Single transaction"""

    id: int
    customer_id: int
    amount: Decimal
    description: Optional[str] = None
    date: datetime
    closure_id: Optional[int] = None
    customer_name: Optional[str] = None


class ClosureCreateRequest(BaseModel):
    """Request body for POST /api/closures"""

    total_received: Decimal = Field(..., ge=0, max_digits=12)
    total_debts: Decimal = Field(..., ge=0, max_digits=12)
    start_date: datetime
    end_date: datetime
    transaction_ids: Optional[List[int]] = Field(
        None, description="Authoritative membership; omit to close every open transaction in the date range"
    )

    @field_validator("start_date", "end_date")
    @classmethod
    def normalise_to_utc(cls, value: datetime) -> datetime:
        # Transaction dates are stored as naive UTC
        return to_naive_utc(value)

    @model_validator(mode="after")
    def check_window(self) -> "ClosureCreateRequest":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class ClosureCreateResponse(BaseModel):
    """Response for POST /api/closures"""

    id: int
    mode: str
    stamped_count: int
    skipped_ids: List[int]
    verified_total_received: Decimal
    verified_total_debts: Decimal


class ClosureResponse(BaseModel):
    """Stored closure"""

    id: int
    total_received: Decimal
    total_debts: Decimal
    start_date: datetime
    end_date: datetime
    created_at: Optional[datetime] = None


class PendingEntry(BaseModel):
    id: int
    customer_id: int
    customer_name: Optional[str] = None
    amount: Decimal
    description: Optional[str] = None
    date: str


class PendingPeriodResponse(BaseModel):
    """Response for GET /api/closures/pending"""

    start_date: datetime
    end_date: datetime
    total_received: Decimal
    total_debts: Decimal
    transaction_ids: List[int]
    payments: List[PendingEntry]
    debts: List[PendingEntry]
    transactions: List[PendingEntry]
