import enum
import uuid
from decimal import Decimal

from sqlalchemy import Enum, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from moneyview.database import Base, TimestampMixin, money_column

MONTHS = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]


class IncomeCategory(str, enum.Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"


class IncomeType(str, enum.Enum):
    CREDIT = "credit"
    DEBIT = "debit"


class IncomeStatus(str, enum.Enum):
    PENDING = "pending"
    RECEIVED = "received"


class IncomeEntry(TimestampMixin, Base):
    """A monthly income (or expense) bucket.

    At most one row exists per (user, year, month, type, category, status);
    writes that land on an occupied tuple are merged into the existing row.
    ``status`` is nullable only for legacy rows, which read as received.
    """

    __tablename__ = "income_entries"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "year", "month", "type", "category", "status",
            name="uq_income_entries_bucket",
        ),
        Index("ix_income_entries_user_year", "user_id", "year"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    amount: Mapped[Decimal] = money_column()
    category: Mapped[IncomeCategory] = mapped_column(Enum(IncomeCategory), nullable=False)
    month: Mapped[str] = mapped_column(String(12), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    type: Mapped[IncomeType] = mapped_column(Enum(IncomeType), nullable=False)
    status: Mapped[IncomeStatus | None] = mapped_column(Enum(IncomeStatus), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
