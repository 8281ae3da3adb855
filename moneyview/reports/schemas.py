from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import BaseModel

from moneyview.core.dates import UtcDateTime
from moneyview.customers.schemas import CustomerResponse
from moneyview.ledger.schemas import TransactionResponse


class DailyBreakdown(BaseModel):
    date: str  # ISO calendar day in the business timezone
    credits: Decimal
    debits: Decimal
    net: Decimal


class CustomerBreakdown(BaseModel):
    customer_id: str
    customer_name: str
    credits: Decimal
    debits: Decimal
    balance: Decimal


class Report(BaseModel):
    period_start: UtcDateTime
    period_end: UtcDateTime
    total_credits: Decimal
    total_debits: Decimal
    net_amount: Decimal
    transaction_count: int
    daily_breakdown: list[DailyBreakdown]
    customer_breakdown: list[CustomerBreakdown]


class DailyReport(Report):
    date: date
    transactions: list[TransactionResponse]


class PeriodReport(Report):
    label: str
    year: int


class PendingSummary(BaseModel):
    total_pending: Decimal
    total_payables: Decimal


class TopCustomer(BaseModel):
    id: str
    name: str
    balance: Decimal


class DashboardStats(BaseModel):
    total_customers: int
    total_receivables: Decimal
    total_payables: Decimal
    transactions_today: int
    transactions_this_month: int
    top_customers: list[TopCustomer]
    recent_transactions: list[TransactionResponse]
    due_customers: list[CustomerResponse]
