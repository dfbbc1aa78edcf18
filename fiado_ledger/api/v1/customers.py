"""Customer endpoints - CRUD, derived balances and collection reminders"""

import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session
from fiado_ledger.api.dependencies import get_reminder_client, get_request_id
from fiado_ledger.api.v1.schemas import (
    BalanceResponse,
    CustomerCreateRequest,
    CustomerResponse,
    DebtorItem,
    DeleteResponse,
    ReminderResponse,
    SummaryResponse,
    TransactionResponse,
)
from fiado_ledger.api.v1.transactions import to_transaction_response
from fiado_ledger.domain.balance import summarize_receivables, to_money
from fiado_ledger.infrastructure.clients.reminder import ReminderClient
from fiado_ledger.infrastructure.database.repositories import CustomerRepository, TransactionRepository
from fiado_ledger.infrastructure.database.session import get_db

router = APIRouter()


@router.get("/customers", response_model=List[CustomerResponse])
def list_customers(
    search: Optional[str] = Query(None, description="Case-insensitive part of the customer name"),
    db: Session = Depends(get_db),
):
    """List customers with their outstanding balance, highest first."""
    rows = CustomerRepository(db).list_with_balances(search=search)
    return [
        CustomerResponse(
            id=customer.id,
            name=customer.name,
            phone=customer.phone,
            balance=totals.balance,
            total_debts=totals.total_debts,
            total_payments=totals.total_payments,
            created_at=customer.created_at,
        )
        for customer, totals in rows
    ]


@router.get("/summary", response_model=SummaryResponse)
def get_summary(
    top: int = Query(5, ge=1, le=50, description="How many debtors to rank"),
    db: Session = Depends(get_db),
):
    """Total receivable across all customers and the largest debtors."""
    balances = [totals for _, totals in CustomerRepository(db).list_with_balances()]
    summary = summarize_receivables(balances, top=top)
    return SummaryResponse(
        total_receivable=summary.total_receivable,
        customer_count=summary.customer_count,
        top_debtors=[
            DebtorItem(customer_id=d.customer_id, name=d.customer_name, balance=d.balance)
            for d in summary.top_debtors
        ],
    )


@router.post("/customers", response_model=CustomerResponse)
def create_customer(request_body: CustomerCreateRequest, request: Request, db: Session = Depends(get_db)):
    customer = CustomerRepository(db).create_customer(request_body.name, request_body.phone)
    db.commit()
    db.refresh(customer)

    logging.info("Customer created", extra={"request_id": get_request_id(request), "customer_id": customer.id})
    return CustomerResponse(
        id=customer.id,
        name=customer.name,
        phone=customer.phone,
        balance=to_money(0),
        created_at=customer.created_at,
    )


@router.get("/customers/{customer_id}/balance", response_model=BalanceResponse)
def get_customer_balance(customer_id: int, db: Session = Depends(get_db)):
    """Outstanding balance recomputed from every transaction of the customer."""
    totals = CustomerRepository(db).get_totals(customer_id)
    return BalanceResponse(
        customer_id=customer_id,
        balance=totals.balance,
        total_debts=totals.total_debts,
        total_payments=totals.total_payments,
    )


@router.get("/customers/{customer_id}/transactions", response_model=List[TransactionResponse])
def list_customer_transactions(customer_id: int, db: Session = Depends(get_db)):
    transactions = TransactionRepository(db).list_for_customer(customer_id)
    return [to_transaction_response(txn) for txn in transactions]


@router.delete("/customers/{customer_id}", response_model=DeleteResponse)
def delete_customer(customer_id: int, request: Request, db: Session = Depends(get_db)):
    """Delete a customer together with their whole transaction history."""
    try:
        deleted = CustomerRepository(db).delete_customer(customer_id)
        db.commit()
    except Exception as e:
        db.rollback()
        logging.error(f"Customer deletion failed: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=500, detail="Internal server error")

    if deleted:
        logging.info("Customer deleted", extra={"request_id": get_request_id(request), "customer_id": customer_id})
    return DeleteResponse(success=True)


@router.post("/customers/{customer_id}/reminder", response_model=ReminderResponse)
async def create_reminder(
    customer_id: int,
    db: Session = Depends(get_db),
    reminder_client: ReminderClient = Depends(get_reminder_client),
):
    """
    Draft a WhatsApp collection reminder for a customer.

    Text-generation failures never surface here; the static fallback message
    is returned with generated=False.
    """
    customers = CustomerRepository(db)
    customer = customers.get_customer(customer_id)
    if customer is None:
        raise HTTPException(status_code=404, detail="Customer not found")

    balance = customers.get_balance(customer_id)
    debts = [
        (txn.description, to_money(txn.amount))
        for txn in TransactionRepository(db).recent_debts(customer_id, limit=3)
    ]

    message, generated = await reminder_client.generate_message(customer.name, balance, debts)
    return ReminderResponse(customer_id=customer_id, message=message, generated=generated)
