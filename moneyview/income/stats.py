"""Pure aggregation over income entries.

Entries are anything exposing ``amount``, ``category``, ``month``, ``type``
and ``status`` attributes (ORM rows or response models).
"""

import logging
from collections.abc import Iterable, Sequence
from decimal import Decimal

from moneyview.core.money import ZERO, to_money
from moneyview.income.models import MONTHS, IncomeCategory, IncomeStatus, IncomeType
from moneyview.income.schemas import AllTimeStats, HighestMonth, MonthlyStats, YearlyStats

logger = logging.getLogger(__name__)


def entry_status(entry) -> IncomeStatus:
    """Status of an entry, treating a missing status as received."""
    if entry.status is None:
        logger.warning("Income entry %s has no status, treating as received", getattr(entry, "id", "?"))
        return IncomeStatus.RECEIVED
    return IncomeStatus(entry.status)


def monthly_stats(entries: Iterable) -> list[MonthlyStats]:
    buckets: dict[str, dict[str, Decimal]] = {
        month: {
            "primary": ZERO, "secondary": ZERO, "credits": ZERO,
            "debits": ZERO, "pending": ZERO, "received": ZERO,
        }
        for month in MONTHS
    }

    for entry in entries:
        bucket = buckets.get(entry.month)
        if bucket is None:
            logger.warning("Skipping income entry with unknown month %r", entry.month)
            continue
        amount = to_money(entry.amount)
        if IncomeType(entry.type) == IncomeType.DEBIT:
            bucket["debits"] += amount
            continue
        bucket["credits"] += amount
        if IncomeCategory(entry.category) == IncomeCategory.PRIMARY:
            bucket["primary"] += amount
        else:
            bucket["secondary"] += amount
        if entry_status(entry) == IncomeStatus.PENDING:
            bucket["pending"] += amount
        else:
            bucket["received"] += amount

    result = []
    for month in MONTHS:
        b = buckets[month]
        result.append(
            MonthlyStats(
                month=month,
                primary=b["primary"],
                secondary=b["secondary"],
                total=b["primary"] + b["secondary"],
                net=b["credits"] - b["debits"],
                pending=b["pending"],
                received=b["received"],
            )
        )
    return result


def yearly_stats_from_monthly(monthly: Sequence[MonthlyStats]) -> YearlyStats:
    total_primary = sum((m.primary for m in monthly), ZERO)
    total_secondary = sum((m.secondary for m in monthly), ZERO)
    total_income = total_primary + total_secondary

    # Strictly greater: ties keep the earliest month, an empty year keeps ''.
    highest = HighestMonth(month="", amount=ZERO)
    for m in monthly:
        if m.total > highest.amount:
            highest = HighestMonth(month=m.month, amount=m.total)

    return YearlyStats(
        total_income=total_income,
        total_primary=total_primary,
        total_secondary=total_secondary,
        # Run rate over a full year, regardless of months with data.
        monthly_average=to_money(total_income / 12),
        highest_month=highest,
    )


def yearly_stats(entries: Iterable) -> YearlyStats:
    return yearly_stats_from_monthly(monthly_stats(entries))


def all_time_stats(entries: Iterable) -> AllTimeStats:
    pending = ZERO
    received = ZERO
    for entry in entries:
        if IncomeType(entry.type) != IncomeType.CREDIT:
            continue
        if entry_status(entry) == IncomeStatus.PENDING:
            pending += to_money(entry.amount)
        else:
            received += to_money(entry.amount)
    return AllTimeStats(total_pending=pending, total_received=received)
