from __future__ import annotations

import enum
import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, computed_field

from moneyview.core.dates import UtcDateTime
from moneyview.customers.models import CustomerStatus


class BalanceFilter(str, enum.Enum):
    RECEIVABLE = "receivable"
    PAYABLE = "payable"
    ZERO = "zero"


class CustomerCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    phone: str = Field(min_length=1, max_length=50)
    email: str | None = Field(None, max_length=255)
    address: str | None = None
    opening_balance: Decimal = Field(default=Decimal("0.00"), max_digits=14, decimal_places=2)
    # Opening balance date; defaults to now.
    date: datetime | None = None
    status: CustomerStatus = CustomerStatus.ACTIVE


class CustomerUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    phone: str | None = Field(None, min_length=1, max_length=50)
    email: str | None = Field(None, max_length=255)
    address: str | None = None
    status: CustomerStatus | None = None


class CustomerResponse(BaseModel):
    id: uuid.UUID
    name: str
    phone: str
    email: str | None
    address: str | None
    opening_balance: Decimal
    current_balance: Decimal
    status: CustomerStatus
    created_at: UtcDateTime
    updated_at: UtcDateTime

    model_config = {"from_attributes": True}

    @computed_field
    @property
    def balance_side(self) -> str:
        if self.current_balance > 0:
            return BalanceFilter.RECEIVABLE.value
        if self.current_balance < 0:
            return BalanceFilter.PAYABLE.value
        return BalanceFilter.ZERO.value


class CustomerFilter(BaseModel):
    search: str | None = None
    status: CustomerStatus | None = None
    balance: BalanceFilter | None = None


class CustomerStats(BaseModel):
    total_customers: int
    active_customers: int
    inactive_customers: int
    total_receivables: Decimal
    total_payables: Decimal
