"""Closure endpoints - weekly settlement of open transactions"""

import logging
import time
from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session
from fiado_ledger.api.dependencies import get_request_id, get_settings
from fiado_ledger.api.v1.schemas import (
    ClosureCreateRequest,
    ClosureCreateResponse,
    ClosureResponse,
    PendingEntry,
    PendingPeriodResponse,
    TransactionResponse,
)
from fiado_ledger.api.v1.transactions import to_transaction_response
from fiado_ledger.config import Settings
from fiado_ledger.domain.balance import to_money
from fiado_ledger.domain.closures import totals_match
from fiado_ledger.domain.exceptions import ClosureStampError
from fiado_ledger.domain.models import ClosureTotals, LedgerEntry
from fiado_ledger.domain.periods import current_window, summarize_period
from fiado_ledger.infrastructure.database.repositories import ClosureRepository, TransactionRepository
from fiado_ledger.infrastructure.database.session import get_db
from fiado_ledger.infrastructure.observability.logging import log_closure
from fiado_ledger.infrastructure.observability.metrics import closure_failure_counter, record_closure
from fiado_ledger.utils.date_utils import to_naive_utc, utcnow

router = APIRouter()


def _pending_entry(entry: LedgerEntry) -> PendingEntry:
    return PendingEntry(
        id=entry.id,
        customer_id=entry.customer_id,
        customer_name=entry.customer_name,
        amount=entry.amount,
        description=entry.description,
        date=str(entry.date),
    )


@router.get("/closures", response_model=List[ClosureResponse])
def list_closures(db: Session = Depends(get_db)):
    """All closures, newest first."""
    return [
        ClosureResponse(
            id=c.id,
            total_received=to_money(c.total_received),
            total_debts=to_money(c.total_debts),
            start_date=c.start_date,
            end_date=c.end_date,
            created_at=c.created_at,
        )
        for c in ClosureRepository(db).list_closures()
    ]


@router.get("/closures/pending", response_model=PendingPeriodResponse)
def get_pending_period(
    reference: Optional[datetime] = Query(None, description="Instant whose week is inspected (default: now, UTC)"),
    db: Session = Depends(get_db),
    app_settings: Settings = Depends(get_settings),
):
    """
    Open transactions of the current settlement week and their candidate totals.

    The returned transaction_ids and totals are what a closure of this week
    should be created with.
    """
    now = to_naive_utc(reference) if reference else utcnow()
    window = current_window(now, app_settings.week_starts_on)
    period = summarize_period(TransactionRepository(db).list_open_entries(), window)

    return PendingPeriodResponse(
        start_date=window.start,
        end_date=window.end,
        total_received=period.totals.total_received,
        total_debts=period.totals.total_debts,
        transaction_ids=period.transaction_ids,
        payments=[_pending_entry(e) for e in period.payments],
        debts=[_pending_entry(e) for e in period.debts],
        transactions=[_pending_entry(e) for e in period.entries],
    )


@router.post("/closures", response_model=ClosureCreateResponse)
def create_closure(request_body: ClosureCreateRequest, request: Request, db: Session = Depends(get_db)):
    """
    Close a settlement period.

    Flow:
    1. Insert the closure row with the caller's totals
    2. Stamp membership (listed ids, or open transactions in the date range)
    3. Commit both together; any failure rolls both back
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        outcome = ClosureRepository(db).create_closure(
            total_received=request_body.total_received,
            total_debts=request_body.total_debts,
            start_date=request_body.start_date,
            end_date=request_body.end_date,
            transaction_ids=request_body.transaction_ids,
        )
        db.commit()

    except ClosureStampError as e:
        db.rollback()
        closure_failure_counter.inc()
        logging.error(f"Closure stamping failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail=f"Closure was not created: {e}")

    except Exception as e:
        db.rollback()
        closure_failure_counter.inc()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    claimed = ClosureTotals(
        total_received=to_money(request_body.total_received),
        total_debts=to_money(request_body.total_debts),
    )
    matches = totals_match(claimed, outcome.verified_totals)
    if not matches:
        logging.warning(
            "Closure totals differ from stamped transactions",
            extra={
                "request_id": request_id,
                "closure_id": outcome.closure_id,
                "claimed_received": str(claimed.total_received),
                "claimed_debts": str(claimed.total_debts),
                "verified_received": str(outcome.verified_totals.total_received),
                "verified_debts": str(outcome.verified_totals.total_debts),
            },
        )

    duration_ms = (time.time() - start_time) * 1000
    record_closure(outcome.mode.value, len(outcome.stamped_ids), len(outcome.skipped_ids), matches)
    log_closure(
        request_id,
        outcome.closure_id,
        outcome.mode.value,
        len(outcome.stamped_ids),
        len(outcome.skipped_ids),
        duration_ms,
    )

    return ClosureCreateResponse(
        id=outcome.closure_id,
        mode=outcome.mode.value,
        stamped_count=len(outcome.stamped_ids),
        skipped_ids=outcome.skipped_ids,
        verified_total_received=outcome.verified_totals.total_received,
        verified_total_debts=outcome.verified_totals.total_debts,
    )


@router.get("/closures/{closure_id}/transactions", response_model=List[TransactionResponse])
def list_closure_transactions(closure_id: int, db: Session = Depends(get_db)):
    """Transactions stamped with a closure; empty for unknown closures."""
    rows = ClosureRepository(db).list_closure_transactions(closure_id)
    return [to_transaction_response(txn, name) for txn, name in rows]
