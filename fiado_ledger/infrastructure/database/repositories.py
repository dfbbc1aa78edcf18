"""Data access layer for ledger entities"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple
from sqlalchemy import String, case, cast, func, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from fiado_ledger.domain.balance import to_money
from fiado_ledger.domain.closures import resolve_mode, unique_ids
from fiado_ledger.domain.exceptions import ClosureStampError, CustomerNotFoundError
from fiado_ledger.domain.models import ClosureMode, ClosureOutcome, CustomerBalance, LedgerEntry
from fiado_ledger.domain.periods import calculate_totals
from fiado_ledger.infrastructure.database.models import Closure, Customer, LedgerTransaction
from fiado_ledger.utils.date_utils import to_naive_utc


class CustomerRepository:
    """Repository for customers and their derived balances"""

    def __init__(self, db: Session):
        self.db = db

    def _aggregate_columns(self):
        amount = LedgerTransaction.amount
        return (
            func.coalesce(func.sum(amount), 0).label("balance"),
            func.coalesce(func.sum(case((amount > 0, amount), else_=0)), 0).label("total_debts"),
            func.coalesce(func.sum(case((amount < 0, amount), else_=0)), 0).label("total_payments"),
        )

    def list_with_balances(self, search: Optional[str] = None) -> List[Tuple[Customer, CustomerBalance]]:
        """Customers with their balance and debt/payment sums, highest balance first.

        `search` keeps customers whose name contains it, case-insensitively.
        """
        balance, debts, payments = self._aggregate_columns()
        query = (
            self.db.query(Customer, balance, debts, payments)
            .outerjoin(LedgerTransaction, LedgerTransaction.customer_id == Customer.id)
        )
        if search:
            query = query.filter(Customer.name.icontains(search, autoescape=True))
        rows = query.group_by(Customer.id).order_by(balance.desc(), Customer.id).all()

        return [
            (
                customer,
                CustomerBalance(
                    customer_id=customer.id,
                    balance=to_money(total),
                    total_debts=to_money(debt_sum),
                    total_payments=to_money(abs(to_money(payment_sum))),
                    customer_name=customer.name,
                ),
            )
            for customer, total, debt_sum, payment_sum in rows
        ]

    def create_customer(self, name: str, phone: Optional[str] = None) -> Customer:
        customer = Customer(name=name, phone=phone)
        self.db.add(customer)
        self.db.flush()
        return customer

    def get_customer(self, customer_id: int) -> Optional[Customer]:
        return self.db.get(Customer, customer_id)

    def get_totals(self, customer_id: int) -> CustomerBalance:
        """Balance, debt and payment sums of one customer; zeros when it has no transactions"""
        balance, debts, payments = (
            self.db.query(*self._aggregate_columns())
            .filter(LedgerTransaction.customer_id == customer_id)
            .one()
        )
        return CustomerBalance(
            customer_id=customer_id,
            balance=to_money(balance),
            total_debts=to_money(debts),
            total_payments=to_money(abs(to_money(payments))),
        )

    def get_balance(self, customer_id: int) -> Decimal:
        """Sum of every transaction amount of the customer; 0 when none exist"""
        total = (
            self.db.query(func.coalesce(func.sum(LedgerTransaction.amount), 0))
            .filter(LedgerTransaction.customer_id == customer_id)
            .scalar()
        )
        return to_money(total)

    def delete_customer(self, customer_id: int) -> bool:
        """Delete a customer and all of their transactions. Unknown ids are a no-op."""
        self.db.query(LedgerTransaction).filter(
            LedgerTransaction.customer_id == customer_id
        ).delete(synchronize_session=False)
        deleted = self.db.query(Customer).filter(Customer.id == customer_id).delete(synchronize_session=False)
        return deleted > 0


class TransactionRepository:
    """Repository for debt/payment transactions"""

    def __init__(self, db: Session):
        self.db = db

    def create_transaction(
        self,
        customer_id: int,
        amount: Decimal,
        description: Optional[str] = None,
    ) -> LedgerTransaction:
        if self.db.get(Customer, customer_id) is None:
            raise CustomerNotFoundError(customer_id)

        txn = LedgerTransaction(customer_id=customer_id, amount=to_money(amount), description=description)
        self.db.add(txn)
        self.db.flush()
        return txn

    def list_for_customer(self, customer_id: int) -> List[LedgerTransaction]:
        """Customer transactions, newest first"""
        return (
            self.db.query(LedgerTransaction)
            .filter(LedgerTransaction.customer_id == customer_id)
            .order_by(LedgerTransaction.date.desc(), LedgerTransaction.id.desc())
            .all()
        )

    def list_with_customer_names(self) -> List[Tuple[LedgerTransaction, str]]:
        """Every transaction with its owner's name, newest first"""
        return (
            self.db.query(LedgerTransaction, Customer.name)
            .join(Customer, LedgerTransaction.customer_id == Customer.id)
            .order_by(LedgerTransaction.date.desc(), LedgerTransaction.id.desc())
            .all()
        )

    def list_open_entries(self) -> List[LedgerEntry]:
        """
        Open transactions as ledger entries for period selection.

        Dates are read as raw text so a single corrupt value reaches the
        period selector (which skips it) instead of failing the whole query.
        """
        rows = (
            self.db.query(
                LedgerTransaction.id,
                LedgerTransaction.customer_id,
                LedgerTransaction.amount,
                LedgerTransaction.description,
                cast(LedgerTransaction.date, String),
                LedgerTransaction.closure_id,
                Customer.name,
            )
            .join(Customer, LedgerTransaction.customer_id == Customer.id)
            .filter(LedgerTransaction.closure_id.is_(None))
            .order_by(LedgerTransaction.id.desc())
            .all()
        )
        return [
            LedgerEntry(
                id=tid,
                customer_id=customer_id,
                amount=to_money(amount),
                date=raw_date,
                closure_id=closure_id,
                description=description,
                customer_name=name,
            )
            for tid, customer_id, amount, description, raw_date, closure_id, name in rows
        ]

    def recent_debts(self, customer_id: int, limit: int = 3) -> List[LedgerTransaction]:
        """Most recent positive-amount transactions of a customer"""
        return (
            self.db.query(LedgerTransaction)
            .filter(LedgerTransaction.customer_id == customer_id, LedgerTransaction.amount > 0)
            .order_by(LedgerTransaction.date.desc(), LedgerTransaction.id.desc())
            .limit(limit)
            .all()
        )


class ClosureRepository:
    """Repository for closures and their membership stamp"""

    def __init__(self, db: Session):
        self.db = db

    def create_closure(
        self,
        total_received: Decimal,
        total_debts: Decimal,
        start_date: datetime,
        end_date: datetime,
        transaction_ids: Optional[List[int]] = None,
    ) -> ClosureOutcome:
        """
        Persist a closure and stamp its membership.

        The closure row is flushed first so its id can be written onto the
        members. Nothing is committed here: the caller commits or rolls back
        both steps together.

        Raises:
            ClosureStampError: when the membership update fails
        """
        start_date = to_naive_utc(start_date)
        end_date = to_naive_utc(end_date)

        closure = Closure(
            total_received=to_money(total_received),
            total_debts=to_money(total_debts),
            start_date=start_date,
            end_date=end_date,
        )
        self.db.add(closure)
        self.db.flush()

        mode = resolve_mode(transaction_ids)
        requested = unique_ids(transaction_ids or [])

        try:
            stamped_ids = self.stamp_transactions(closure.id, mode, requested, start_date, end_date)
            verified = calculate_totals(self.list_members(closure.id))
        except SQLAlchemyError as e:
            raise ClosureStampError(f"Failed to stamp transactions for closure {closure.id}: {e}") from e

        stamped = set(stamped_ids)
        return ClosureOutcome(
            closure_id=closure.id,
            mode=mode,
            stamped_ids=stamped_ids,
            skipped_ids=[tid for tid in requested if tid not in stamped],
            verified_totals=verified,
        )

    def stamp_transactions(
        self,
        closure_id: int,
        mode: ClosureMode,
        transaction_ids: List[int],
        start_date: datetime,
        end_date: datetime,
    ) -> List[int]:
        """
        Write closure_id onto open transactions; returns the ids stamped.

        Only rows whose closure_id is still NULL are touched, so a transaction
        already claimed by another closure keeps its owner.
        """
        stmt = update(LedgerTransaction).where(LedgerTransaction.closure_id.is_(None))
        if mode is ClosureMode.EXPLICIT:
            stmt = stmt.where(LedgerTransaction.id.in_(transaction_ids))
        else:
            stmt = stmt.where(LedgerTransaction.date.between(start_date, end_date))

        self.db.execute(
            stmt.values(closure_id=closure_id).execution_options(synchronize_session=False)
        )

        rows = (
            self.db.query(LedgerTransaction.id)
            .filter(LedgerTransaction.closure_id == closure_id)
            .order_by(LedgerTransaction.id)
            .all()
        )
        return [row[0] for row in rows]

    def list_members(self, closure_id: int) -> List[LedgerEntry]:
        rows = (
            self.db.query(LedgerTransaction.id, LedgerTransaction.customer_id, LedgerTransaction.amount)
            .filter(LedgerTransaction.closure_id == closure_id)
            .all()
        )
        return [
            LedgerEntry(id=tid, customer_id=customer_id, amount=to_money(amount), date=None, closure_id=closure_id)
            for tid, customer_id, amount in rows
        ]

    def list_closures(self) -> List[Closure]:
        """All closures, newest first"""
        return self.db.query(Closure).order_by(Closure.created_at.desc(), Closure.id.desc()).all()

    def list_closure_transactions(self, closure_id: int) -> List[Tuple[LedgerTransaction, str]]:
        """Transactions stamped with a closure, with their owner's name"""
        return (
            self.db.query(LedgerTransaction, Customer.name)
            .join(Customer, LedgerTransaction.customer_id == Customer.id)
            .filter(LedgerTransaction.closure_id == closure_id)
            .order_by(LedgerTransaction.date.desc(), LedgerTransaction.id.desc())
            .all()
        )
