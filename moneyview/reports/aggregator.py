"""Calendar-bucketed aggregation over a pre-filtered transaction set.

One algorithm serves the daily, monthly and arbitrary-range reports; the
caller is responsible for fetching exactly the transactions inside
``[period_start, period_end]``. Nothing here filters by date or user.
"""

import logging
from collections.abc import Collection, Iterable
from datetime import datetime
from zoneinfo import ZoneInfo

from moneyview.core.dates import local_day
from moneyview.core.money import ZERO, to_money
from moneyview.ledger.models import TransactionType
from moneyview.reports.schemas import CustomerBreakdown, DailyBreakdown, Report

logger = logging.getLogger(__name__)


class _Bucket:
    __slots__ = ("credits", "debits")

    def __init__(self):
        self.credits = ZERO
        self.debits = ZERO

    def add(self, transaction_type: TransactionType, amount):
        if transaction_type == TransactionType.CREDIT:
            self.credits += amount
        else:
            self.debits += amount


def aggregate(
    transactions: Iterable,
    period_start: datetime,
    period_end: datetime,
    tz: ZoneInfo = ZoneInfo("UTC"),
    known_customer_ids: Collection[str] | None = None,
) -> Report:
    """Totals plus per-day and per-customer breakdowns.

    ``daily_breakdown`` is sparse (only days with activity) and sorted by
    day. ``customer_breakdown`` keeps first-seen order. When
    ``known_customer_ids`` is given, transactions pointing at any other
    customer still count toward the totals and the daily buckets but are
    left out of the customer breakdown.
    """
    totals = _Bucket()
    count = 0
    days: dict[str, _Bucket] = {}
    customers: dict[str, tuple[str, _Bucket]] = {}
    orphans = 0

    for transaction in transactions:
        count += 1
        transaction_type = TransactionType(transaction.type)
        amount = to_money(transaction.amount)
        totals.add(transaction_type, amount)

        day_key = local_day(transaction.date, tz).isoformat()
        days.setdefault(day_key, _Bucket()).add(transaction_type, amount)

        customer_id = str(transaction.customer_id) if transaction.customer_id else None
        if customer_id is None or (
            known_customer_ids is not None and customer_id not in known_customer_ids
        ):
            orphans += 1
            logger.warning(
                "Transaction %s references unknown customer %s; "
                "excluded from customer breakdown",
                transaction.id, customer_id,
            )
            continue
        if customer_id not in customers:
            customers[customer_id] = (transaction.customer_name, _Bucket())
        customers[customer_id][1].add(transaction_type, amount)

    if orphans:
        logger.warning(
            "%d of %d transactions dropped from customer breakdown", orphans, count
        )

    return Report(
        period_start=period_start,
        period_end=period_end,
        total_credits=totals.credits,
        total_debits=totals.debits,
        net_amount=totals.credits - totals.debits,
        transaction_count=count,
        daily_breakdown=[
            DailyBreakdown(
                date=day,
                credits=bucket.credits,
                debits=bucket.debits,
                net=bucket.credits - bucket.debits,
            )
            for day, bucket in sorted(days.items())
        ],
        customer_breakdown=[
            CustomerBreakdown(
                customer_id=customer_id,
                customer_name=name,
                credits=bucket.credits,
                debits=bucket.debits,
                balance=bucket.credits - bucket.debits,
            )
            for customer_id, (name, bucket) in customers.items()
        ],
    )
