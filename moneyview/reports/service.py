import calendar
import uuid
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from sqlalchemy.ext.asyncio import AsyncSession

from moneyview.core.dates import day_bounds, local_day, month_bounds, range_bounds
from moneyview.core.exceptions import ValidationError
from moneyview.customers.schemas import CustomerResponse
from moneyview.customers.service import (
    get_customer_stats,
    get_due_customers,
    list_all_customers,
    summarize_customers,
)
from moneyview.ledger import service as ledger_service
from moneyview.ledger.schemas import TransactionResponse
from moneyview.reports.aggregator import aggregate
from moneyview.reports.schemas import (
    DailyReport,
    DashboardStats,
    PendingSummary,
    PeriodReport,
    Report,
    TopCustomer,
)

TOP_CUSTOMER_COUNT = 5


async def _aggregate_period(
    db: AsyncSession,
    user_id: uuid.UUID,
    start: datetime,
    end: datetime,
    tz: ZoneInfo,
) -> tuple[Report, list]:
    transactions = await ledger_service.get_transactions_by_date_range(db, user_id, start, end)
    known_ids = {str(c.id) for c in await list_all_customers(db, user_id)}
    report = aggregate(transactions, start, end, tz=tz, known_customer_ids=known_ids)
    return report, transactions


async def daily_report(
    db: AsyncSession, user_id: uuid.UUID, day: date, tz: ZoneInfo
) -> DailyReport:
    start, end = day_bounds(day, tz)
    report, transactions = await _aggregate_period(db, user_id, start, end, tz)
    return DailyReport(
        **report.model_dump(),
        date=day,
        transactions=[TransactionResponse.model_validate(t) for t in transactions],
    )


async def monthly_report(
    db: AsyncSession, user_id: uuid.UUID, month: int, year: int, tz: ZoneInfo
) -> PeriodReport:
    if not 1 <= month <= 12:
        raise ValidationError("Month must be between 1 and 12.", field="month")
    start, end = month_bounds(year, month, tz)
    report, _ = await _aggregate_period(db, user_id, start, end, tz)
    return PeriodReport(**report.model_dump(), label=calendar.month_name[month], year=year)


async def range_report(
    db: AsyncSession, user_id: uuid.UUID, start_day: date, end_day: date, tz: ZoneInfo
) -> PeriodReport:
    if start_day > end_day:
        raise ValidationError("Start date must not be after end date.", field="start")
    start, end = range_bounds(start_day, end_day, tz)
    report, _ = await _aggregate_period(db, user_id, start, end, tz)
    label = f"{start_day.strftime('%b')} - {end_day.strftime('%b')}"
    return PeriodReport(**report.model_dump(), label=label, year=start_day.year)


async def get_pending_summary(db: AsyncSession, user_id: uuid.UUID) -> PendingSummary:
    stats = await get_customer_stats(db, user_id)
    return PendingSummary(
        total_pending=stats.total_receivables,
        total_payables=stats.total_payables,
    )


async def get_dashboard_stats(
    db: AsyncSession, user_id: uuid.UUID, tz: ZoneInfo
) -> DashboardStats:
    customers = await list_all_customers(db, user_id)
    stats = summarize_customers(customers)

    today = local_day(datetime.now(timezone.utc), tz)
    today_count = await ledger_service.count_transactions_between(
        db, user_id, *day_bounds(today, tz)
    )
    month_count = await ledger_service.count_transactions_between(
        db, user_id, *month_bounds(today.year, today.month, tz)
    )

    top = sorted(customers, key=lambda c: abs(c.current_balance), reverse=True)
    recent = await ledger_service.get_recent_transactions(db, user_id, limit=5)
    due = await get_due_customers(db, user_id)

    return DashboardStats(
        total_customers=stats.total_customers,
        total_receivables=stats.total_receivables,
        total_payables=stats.total_payables,
        transactions_today=today_count,
        transactions_this_month=month_count,
        top_customers=[
            TopCustomer(id=str(c.id), name=c.name, balance=c.current_balance)
            for c in top[:TOP_CUSTOMER_COUNT]
        ],
        recent_transactions=[TransactionResponse.model_validate(t) for t in recent],
        due_customers=[CustomerResponse.model_validate(c) for c in due],
    )
