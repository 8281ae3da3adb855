"""
Tests for the report aggregator.

Tests cover:
- Totals, net and count
- Sparse, sorted daily breakdown in the business timezone
- Customer breakdown ordering and orphan handling
- Decimal exactness and repeatability
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from zoneinfo import ZoneInfo

from conftest import make_transaction

from moneyview.reports.aggregator import aggregate

START = datetime(2025, 6, 1, tzinfo=timezone.utc)
END = datetime(2025, 6, 30, 23, 59, 59, tzinfo=timezone.utc)


def _at(day: int, hour: int = 12) -> datetime:
    return datetime(2025, 6, day, hour, 0, tzinfo=timezone.utc)


class TestTotals:
    def test_empty_period(self):
        report = aggregate([], START, END)

        assert report.total_credits == 0
        assert report.total_debits == 0
        assert report.net_amount == 0
        assert report.transaction_count == 0
        assert report.daily_breakdown == []
        assert report.customer_breakdown == []
        assert report.period_start == START
        assert report.period_end == END

    def test_credits_debits_and_net(self):
        transactions = [
            make_transaction(100, "credit", date=_at(1)),
            make_transaction(40, "debit", date=_at(2)),
            make_transaction(15, "credit", date=_at(2)),
        ]

        report = aggregate(transactions, START, END)

        assert report.total_credits == Decimal("115.00")
        assert report.total_debits == Decimal("40.00")
        assert report.net_amount == Decimal("75.00")
        assert report.transaction_count == 3

    def test_cent_amounts_sum_exactly(self):
        """0.10 added ten times is exactly 1.00."""
        transactions = [make_transaction("0.10", date=_at(1)) for _ in range(10)]
        report = aggregate(transactions, START, END)
        assert report.total_credits == Decimal("1.00")

    def test_repeatable(self):
        transactions = [
            make_transaction(10, "credit", date=_at(3)),
            make_transaction(5, "debit", date=_at(1)),
        ]
        assert aggregate(transactions, START, END) == aggregate(transactions, START, END)


class TestDailyBreakdown:
    def test_sparse_and_sorted(self):
        transactions = [
            make_transaction(10, "credit", date=_at(20)),
            make_transaction(5, "debit", date=_at(3)),
            make_transaction(7, "credit", date=_at(3)),
        ]

        report = aggregate(transactions, START, END)

        assert [d.date for d in report.daily_breakdown] == ["2025-06-03", "2025-06-20"]
        june_3 = report.daily_breakdown[0]
        assert june_3.credits == Decimal("7.00")
        assert june_3.debits == Decimal("5.00")
        assert june_3.net == Decimal("2.00")

    def test_daily_sums_equal_totals(self):
        transactions = [
            make_transaction(n, "credit" if n % 2 else "debit", date=_at(n)) for n in range(1, 11)
        ]
        report = aggregate(transactions, START, END)

        assert sum(d.credits for d in report.daily_breakdown) == report.total_credits
        assert sum(d.debits for d in report.daily_breakdown) == report.total_debits

    def test_buckets_use_business_timezone(self):
        """22:30 UTC on June 1 is already June 2 in Kolkata."""
        late = make_transaction(10, date=datetime(2025, 6, 1, 22, 30, tzinfo=timezone.utc))

        utc_report = aggregate([late], START, END)
        ist_report = aggregate([late], START, END, tz=ZoneInfo("Asia/Kolkata"))

        assert utc_report.daily_breakdown[0].date == "2025-06-01"
        assert ist_report.daily_breakdown[0].date == "2025-06-02"


class TestCustomerBreakdown:
    def test_first_seen_order(self):
        transactions = [
            make_transaction(10, date=_at(1), customer_id="b", customer_name="Beta"),
            make_transaction(20, date=_at(2), customer_id="a", customer_name="Alpha"),
            make_transaction(5, "debit", date=_at(3), customer_id="b", customer_name="Beta"),
        ]

        report = aggregate(transactions, START, END)

        assert [c.customer_id for c in report.customer_breakdown] == ["b", "a"]
        beta = report.customer_breakdown[0]
        assert beta.customer_name == "Beta"
        assert beta.credits == Decimal("10.00")
        assert beta.debits == Decimal("5.00")
        assert beta.balance == Decimal("5.00")

    def test_orphan_counts_in_totals_but_not_breakdown(self, caplog):
        transactions = [
            make_transaction(10, date=_at(1), customer_id="known"),
            make_transaction(99, date=_at(1), customer_id="gone"),
        ]

        with caplog.at_level(logging.WARNING, logger="moneyview.reports.aggregator"):
            report = aggregate(transactions, START, END, known_customer_ids={"known"})

        assert report.total_credits == Decimal("109.00")
        assert report.daily_breakdown[0].credits == Decimal("109.00")
        assert [c.customer_id for c in report.customer_breakdown] == ["known"]
        assert "gone" in caplog.text

    def test_no_known_ids_keeps_everyone(self):
        transactions = [make_transaction(1, customer_id=f"c{i}") for i in range(3)]
        report = aggregate(transactions, START, END)
        assert len(report.customer_breakdown) == 3
