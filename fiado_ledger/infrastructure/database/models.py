"""SQLAlchemy ORM models for customers, transactions and closures"""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, Text
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func
from fiado_ledger.utils.date_utils import utcnow

Base = declarative_base()

MONEY = Numeric(12, 2)


class Customer(Base):
    """Shop customer buying on credit"""

    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    phone = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    transactions = relationship(
        "LedgerTransaction",
        back_populates="customer",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class Closure(Base):
    """Write-once settlement snapshot"""

    __tablename__ = "closures"

    id = Column(Integer, primary_key=True, autoincrement=True)
    total_received = Column(MONEY, nullable=False)
    total_debts = Column(MONEY, nullable=False)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    created_at = Column(DateTime, nullable=False, server_default=func.now())


class LedgerTransaction(Base):
    """Signed debt (+) or payment (-) entry of a customer"""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(MONEY, nullable=False)
    description = Column(Text, nullable=True)
    date = Column(DateTime, nullable=False, default=utcnow, index=True)
    closure_id = Column(Integer, ForeignKey("closures.id"), nullable=True, index=True)

    customer = relationship("Customer", back_populates="transactions")
