from __future__ import annotations

import enum
import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Enum, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from moneyview.customers.models import Customer
from moneyview.database import Base, money_column, utcnow


class TransactionType(str, enum.Enum):
    CREDIT = "credit"
    DEBIT = "debit"


class PaymentMethod(str, enum.Enum):
    CASH = "cash"
    CARD = "card"
    BANK_TRANSFER = "bank_transfer"
    UPI = "upi"
    OTHER = "other"


class Transaction(Base):
    """One money movement against one customer. Immutable once written."""

    __tablename__ = "transactions"
    __table_args__ = (
        Index("ix_transactions_user_date", "user_id", "date"),
        Index("ix_transactions_customer_date", "customer_id", "date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    customer_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("customers.id", ondelete="CASCADE"), nullable=False
    )
    # Denormalised at write time
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    amount: Mapped[Decimal] = money_column()
    type: Mapped[TransactionType] = mapped_column(Enum(TransactionType), nullable=False)
    # Business-effective moment, distinct from created_at
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    payment_method: Mapped[PaymentMethod | None] = mapped_column(
        Enum(PaymentMethod), nullable=True
    )
    # Snapshot taken at write time; the replayed ledger is authoritative.
    balance_after: Mapped[Decimal] = money_column()
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    customer: Mapped[Customer] = relationship(
        "Customer", back_populates="transactions", lazy="raise"
    )
