"""
Tests for the running-balance ledger.

Tests cover:
- Opening balance row (present, absent, negative)
- Running balance order and stable tie-breaking
- Balance recomputation and snapshot verification
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

from conftest import make_customer, make_transaction

from moneyview.ledger.engine import (
    OPENING_DESCRIPTION,
    OPENING_TRANSACTION_ID,
    build_ledger,
    chronological,
    recompute_balance,
    signed_amount,
    verify_balance_snapshots,
)
from moneyview.ledger.models import TransactionType

BASE = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)


class TestSignedAmount:
    def test_credit_is_positive(self):
        assert signed_amount(TransactionType.CREDIT, Decimal("10")) == Decimal("10.00")

    def test_debit_is_negative(self):
        assert signed_amount("debit", Decimal("10")) == Decimal("-10.00")


class TestBuildLedger:
    """Ledger rows and running balance."""

    def test_opening_row_then_running_balance(self):
        """Opening 100, then credit 50, then debit 30 gives 100, 150, 120."""
        customer = make_customer(opening_balance="100")
        transactions = [
            make_transaction(30, "debit", date=BASE + timedelta(days=2)),
            make_transaction(50, "credit", date=BASE + timedelta(days=1)),
        ]

        ledger = build_ledger(customer, transactions)

        assert [e.balance for e in ledger] == [Decimal("100"), Decimal("150"), Decimal("120")]
        assert ledger[0].transaction_id == OPENING_TRANSACTION_ID
        assert ledger[0].description == OPENING_DESCRIPTION
        assert ledger[0].credit == Decimal("100")
        assert ledger[1].credit == Decimal("50") and ledger[1].debit == 0
        assert ledger[2].debit == Decimal("30") and ledger[2].credit == 0

    def test_zero_opening_balance_has_no_opening_row(self):
        customer = make_customer(opening_balance="0")
        ledger = build_ledger(customer, [make_transaction(25, "credit")])

        assert len(ledger) == 1
        assert ledger[0].transaction_id != OPENING_TRANSACTION_ID
        assert ledger[0].balance == Decimal("25.00")

    def test_negative_opening_balance_is_a_debit_row(self):
        customer = make_customer(opening_balance="-40")
        ledger = build_ledger(customer, [])

        assert len(ledger) == 1
        assert ledger[0].debit == Decimal("40.00")
        assert ledger[0].credit == 0
        assert ledger[0].balance == Decimal("-40.00")

    def test_empty_history(self):
        assert build_ledger(make_customer(), []) == []

    def test_equal_dates_keep_fetch_order(self):
        """Transactions sharing a timestamp keep their input order."""
        first = make_transaction(10, "credit", date=BASE, description="first")
        second = make_transaction(5, "debit", date=BASE, description="second")
        third = make_transaction(1, "credit", date=BASE, description="third")

        ledger = build_ledger(make_customer(), [first, second, third])

        assert [e.description for e in ledger] == ["first", "second", "third"]
        assert [e.balance for e in ledger] == [Decimal("10"), Decimal("5"), Decimal("6")]

    def test_naive_dates_sort_with_aware_dates(self):
        """Naive timestamps (as read back from SQLite) are treated as UTC."""
        naive = make_transaction(1, date=datetime(2025, 3, 2, 9, 0))
        aware = make_transaction(2, date=datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc))

        assert chronological([naive, aware]) == [aware, naive]

    def test_missing_description_gets_default(self):
        ledger = build_ledger(make_customer(), [make_transaction(5, "debit")])
        assert ledger[0].description == "debit transaction"

    def test_final_balance_matches_recompute(self):
        customer = make_customer(opening_balance="12.50")
        transactions = [
            make_transaction("0.10", "credit", date=BASE + timedelta(hours=i)) for i in range(10)
        ] + [make_transaction("3.33", "debit", date=BASE + timedelta(days=1))]

        ledger = build_ledger(customer, transactions)

        assert ledger[-1].balance == recompute_balance(customer, transactions)
        assert ledger[-1].balance == Decimal("10.17")


class TestSnapshots:
    def test_consistent_snapshots(self):
        customer = make_customer(opening_balance="100")
        transactions = [
            make_transaction(50, "credit", date=BASE, balance_after=Decimal("150")),
            make_transaction(20, "debit", date=BASE + timedelta(days=1), balance_after=Decimal("130")),
        ]
        assert verify_balance_snapshots(customer, transactions) == []

    def test_backdated_transaction_is_flagged(self):
        """A back-dated write shifts every later snapshot."""
        customer = make_customer()
        later = make_transaction(50, "credit", date=BASE + timedelta(days=5), balance_after=Decimal("50"))
        backdated = make_transaction(10, "credit", date=BASE, balance_after=Decimal("60"))

        mismatched = verify_balance_snapshots(customer, [later, backdated])

        assert set(mismatched) == {str(later.id), str(backdated.id)}
