"""Transaction endpoints - record debts and payments"""

import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from fiado_ledger.api.dependencies import get_request_id
from fiado_ledger.api.v1.schemas import TransactionCreateRequest, TransactionResponse
from fiado_ledger.domain.balance import to_money
from fiado_ledger.domain.exceptions import CustomerNotFoundError
from fiado_ledger.infrastructure.database.models import LedgerTransaction
from fiado_ledger.infrastructure.database.repositories import TransactionRepository
from fiado_ledger.infrastructure.database.session import get_db

router = APIRouter()


def to_transaction_response(txn: LedgerTransaction, customer_name: Optional[str] = None) -> TransactionResponse:
    return TransactionResponse(
        id=txn.id,
        customer_id=txn.customer_id,
        amount=to_money(txn.amount),
        description=txn.description,
        date=txn.date,
        closure_id=txn.closure_id,
        customer_name=customer_name,
    )


@router.post("/transactions", response_model=TransactionResponse)
def create_transaction(request_body: TransactionCreateRequest, request: Request, db: Session = Depends(get_db)):
    """Record a debt (positive amount) or a payment (negative amount)."""
    request_id = get_request_id(request)

    try:
        txn = TransactionRepository(db).create_transaction(
            customer_id=request_body.customer_id,
            amount=request_body.amount,
            description=request_body.description,
        )
        db.commit()
        db.refresh(txn)

    except CustomerNotFoundError as e:
        db.rollback()
        logging.warning(str(e), extra={"request_id": request_id})
        raise HTTPException(status_code=404, detail=str(e))

    except IntegrityError as e:
        db.rollback()
        logging.warning(f"Integrity error: {e.orig}", extra={"request_id": request_id})
        raise HTTPException(status_code=409, detail="Transaction violates a database constraint")

    return to_transaction_response(txn)


@router.get("/transactions", response_model=List[TransactionResponse])
def list_transactions(db: Session = Depends(get_db)):
    """All transactions with their customer's name, newest first."""
    rows = TransactionRepository(db).list_with_customer_names()
    return [to_transaction_response(txn, name) for txn, name in rows]
