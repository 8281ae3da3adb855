from __future__ import annotations

import enum
import uuid
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Enum, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from moneyview.database import Base, TimestampMixin, money_column

if TYPE_CHECKING:
    from moneyview.ledger.models import Transaction


class CustomerStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class Customer(TimestampMixin, Base):
    """A party the business keeps a running account with.

    Sign convention: ``current_balance = opening_balance + credits - debits``.
    A positive balance is a receivable (the customer owes the business),
    a negative balance is a payable (the business owes the customer).

    ``created_at`` doubles as the opening-balance date and is the date of
    the synthetic opening row in the ledger. ``current_balance`` is a
    materialised view over the transaction history; see
    ``ledger.service.reconcile_customer_balance``.
    """

    __tablename__ = "customers"
    __table_args__ = (
        Index("ix_customers_user_name", "user_id", "name"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    opening_balance: Mapped[Decimal] = money_column(default=Decimal("0.00"))
    current_balance: Mapped[Decimal] = money_column(default=Decimal("0.00"))
    status: Mapped[CustomerStatus] = mapped_column(
        Enum(CustomerStatus), default=CustomerStatus.ACTIVE, nullable=False, index=True
    )

    transactions: Mapped[list["Transaction"]] = relationship(
        "Transaction",
        back_populates="customer",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="raise",
    )
