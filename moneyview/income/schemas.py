import uuid
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from moneyview.core.dates import UtcDateTime
from moneyview.income.models import MONTHS, IncomeCategory, IncomeStatus, IncomeType


def _check_month(value: str | None) -> str | None:
    if value is None:
        return value
    normalized = value.strip().capitalize()
    if normalized not in MONTHS:
        raise ValueError(f"Unknown month {value!r}")
    return normalized


class IncomeCreate(BaseModel):
    amount: Decimal = Field(gt=0, max_digits=14, decimal_places=2)
    category: IncomeCategory
    month: str
    year: int = Field(ge=1900, le=9999)
    type: IncomeType = IncomeType.CREDIT
    status: IncomeStatus = IncomeStatus.RECEIVED
    description: str | None = Field(None, max_length=1000)

    @field_validator("month")
    @classmethod
    def validate_month(cls, v: str | None) -> str | None:
        return _check_month(v)


class IncomeUpdate(BaseModel):
    amount: Decimal | None = Field(None, gt=0, max_digits=14, decimal_places=2)
    category: IncomeCategory | None = None
    month: str | None = None
    year: int | None = Field(None, ge=1900, le=9999)
    type: IncomeType | None = None
    status: IncomeStatus | None = None
    description: str | None = Field(None, max_length=1000)

    @field_validator("month")
    @classmethod
    def validate_month(cls, v: str | None) -> str | None:
        return _check_month(v)


class IncomeEntryResponse(BaseModel):
    id: uuid.UUID
    amount: Decimal
    category: IncomeCategory
    month: str
    year: int
    type: IncomeType
    status: IncomeStatus | None
    description: str | None
    created_at: UtcDateTime

    model_config = {"from_attributes": True}


class MonthlyStats(BaseModel):
    month: str
    primary: Decimal
    secondary: Decimal
    total: Decimal
    net: Decimal
    pending: Decimal
    received: Decimal


class HighestMonth(BaseModel):
    month: str
    amount: Decimal


class YearlyStats(BaseModel):
    total_income: Decimal
    total_primary: Decimal
    total_secondary: Decimal
    monthly_average: Decimal
    highest_month: HighestMonth


class AllTimeStats(BaseModel):
    total_pending: Decimal
    total_received: Decimal
