import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from moneyview.core.dates import UtcDateTime
from moneyview.ledger.models import PaymentMethod, TransactionType


class TransactionCreate(BaseModel):
    customer_id: uuid.UUID
    amount: Decimal = Field(gt=0, max_digits=14, decimal_places=2)
    type: TransactionType
    date: datetime
    description: str | None = Field(None, max_length=1000)
    payment_method: PaymentMethod | None = PaymentMethod.CASH


class TransactionResponse(BaseModel):
    id: uuid.UUID
    customer_id: uuid.UUID
    customer_name: str
    amount: Decimal
    type: TransactionType
    date: UtcDateTime
    description: str | None
    payment_method: PaymentMethod | None
    balance_after: Decimal
    created_at: UtcDateTime

    model_config = {"from_attributes": True}


class TransactionFilter(BaseModel):
    customer_id: uuid.UUID | None = None
    type: TransactionType | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None


class LedgerEntry(BaseModel):
    """One row of a customer's computed ledger. Never persisted."""

    date: UtcDateTime
    description: str
    credit: Decimal
    debit: Decimal
    balance: Decimal
    # Source transaction id, or "opening" for the opening-balance row
    transaction_id: str


class BalanceReconciliation(BaseModel):
    customer_id: uuid.UUID
    stored_balance: Decimal
    recomputed_balance: Decimal
    repaired: bool
    mismatched_snapshots: list[str] = Field(default_factory=list)
