"""
Tests for the ledger write and read paths against a real database.

Tests cover:
- current_balance kept equal to opening + credits - debits across add/delete
- Ledger ordering and opening row
- Reconciliation of drifted balances and stale snapshots
- Ownership isolation
- Customer delete cascades to transactions
- Relationships refuse implicit lazy loads
"""

import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest
from sqlalchemy import select
from sqlalchemy.exc import InvalidRequestError

from moneyview.core.exceptions import NotFoundError, ValidationError
from moneyview.customers import service as customer_service
from moneyview.customers.schemas import CustomerCreate
from moneyview.ledger import service
from moneyview.ledger.models import Transaction, TransactionType
from moneyview.ledger.schemas import TransactionCreate

JUNE_1 = datetime(2025, 6, 1, 10, 0, tzinfo=timezone.utc)


async def _customer(db, user, opening="0", name="Acme Traders"):
    return await customer_service.create_customer(
        db,
        CustomerCreate(
            name=name,
            phone="555-0100",
            opening_balance=Decimal(opening),
            date=datetime(2025, 1, 1, tzinfo=timezone.utc),
        ),
        user,
    )


def _txn(customer, amount, type="credit", date=JUNE_1, description=None):
    return TransactionCreate(
        customer_id=customer.id,
        amount=Decimal(str(amount)),
        type=TransactionType(type),
        date=date,
        description=description,
    )


class TestBalanceInvariant:
    async def test_add_updates_current_balance(self, db, user):
        customer = await _customer(db, user, opening="100")

        txn = await service.add_transaction(db, _txn(customer, 50), user)
        await service.add_transaction(db, _txn(customer, 30, "debit"), user)

        refreshed = await customer_service.get_customer(db, customer.id, user.id)
        assert refreshed.current_balance == Decimal("120.00")
        assert txn.balance_after == Decimal("150.00")
        assert txn.customer_name == "Acme Traders"

    async def test_delete_is_exact_inverse(self, db, user):
        customer = await _customer(db, user, opening="10")
        credit = await service.add_transaction(db, _txn(customer, "19.99"), user)
        debit = await service.add_transaction(db, _txn(customer, "4.01", "debit"), user)

        await service.delete_transaction(db, credit.id, user.id)
        await service.delete_transaction(db, debit.id, user.id)

        refreshed = await customer_service.get_customer(db, customer.id, user.id)
        assert refreshed.current_balance == Decimal("10.00")

    async def test_balance_matches_recompute_after_mixed_writes(self, db, user):
        customer = await _customer(db, user, opening="-25")
        created = []
        for i, (amount, kind) in enumerate([(40, "credit"), (15, "debit"), (7, "credit"), (3, "debit")]):
            created.append(
                await service.add_transaction(
                    db, _txn(customer, amount, kind, date=JUNE_1 + timedelta(days=i)), user
                )
            )
        await service.delete_transaction(db, created[1].id, user.id)

        result = await service.reconcile_customer_balance(db, customer.id, user.id)

        assert result.repaired is False
        assert result.stored_balance == result.recomputed_balance == Decimal("19.00")

    async def test_naive_date_is_business_local(self, db, user):
        customer = await _customer(db, user)
        data = _txn(customer, 1, date=datetime(2025, 6, 2, 1, 30))

        txn = await service.add_transaction(db, data, user, tz=ZoneInfo("Asia/Kolkata"))

        stored = txn.date.replace(tzinfo=timezone.utc) if txn.date.tzinfo is None else txn.date
        assert stored == datetime(2025, 6, 1, 20, 0, tzinfo=timezone.utc)


class TestLedger:
    async def test_ledger_is_chronological_with_opening_row(self, db, user):
        customer = await _customer(db, user, opening="100")
        await service.add_transaction(db, _txn(customer, 30, "debit", date=JUNE_1 + timedelta(days=2)), user)
        await service.add_transaction(db, _txn(customer, 50, "credit", date=JUNE_1), user)

        ledger = await service.get_ledger(db, customer.id, user.id)

        assert [e.balance for e in ledger] == [Decimal("100"), Decimal("150"), Decimal("120")]
        assert ledger[0].transaction_id == "opening"

    async def test_same_timestamp_keeps_insertion_order(self, db, user):
        customer = await _customer(db, user)
        for label in ("first", "second", "third"):
            await service.add_transaction(db, _txn(customer, 1, description=label), user)

        ledger = await service.get_ledger(db, customer.id, user.id)

        assert [e.description for e in ledger] == ["first", "second", "third"]


class TestReconcile:
    async def test_repairs_drifted_balance(self, db, user):
        customer = await _customer(db, user, opening="10")
        await service.add_transaction(db, _txn(customer, 5), user)
        customer.current_balance = Decimal("999.00")
        await db.commit()

        result = await service.reconcile_customer_balance(db, customer.id, user.id)

        assert result.repaired is True
        assert result.stored_balance == Decimal("999.00")
        assert result.recomputed_balance == Decimal("15.00")
        refreshed = await customer_service.get_customer(db, customer.id, user.id)
        assert refreshed.current_balance == Decimal("15.00")

    async def test_reports_stale_snapshots_after_backdating(self, db, user):
        customer = await _customer(db, user)
        later = await service.add_transaction(db, _txn(customer, 50, date=JUNE_1 + timedelta(days=5)), user)
        await service.add_transaction(db, _txn(customer, 10, date=JUNE_1), user)

        result = await service.reconcile_customer_balance(db, customer.id, user.id)

        assert result.repaired is False
        assert str(later.id) in result.mismatched_snapshots


class TestIsolationAndLookup:
    async def test_other_users_customer_is_not_found(self, db, user, other_user):
        customer = await _customer(db, user)
        with pytest.raises(NotFoundError):
            await service.add_transaction(db, _txn(customer, 5), other_user)

    async def test_other_users_transaction_cannot_be_deleted(self, db, user, other_user):
        customer = await _customer(db, user)
        txn = await service.add_transaction(db, _txn(customer, 5), user)

        with pytest.raises(NotFoundError):
            await service.delete_transaction(db, txn.id, other_user.id)

        refreshed = await customer_service.get_customer(db, customer.id, user.id)
        assert refreshed.current_balance == Decimal("5.00")

    async def test_missing_transaction(self, db, user):
        with pytest.raises(NotFoundError):
            await service.get_transaction(db, uuid.uuid4(), user.id)

    async def test_inverted_range_is_rejected(self, db, user):
        with pytest.raises(ValidationError):
            await service.get_transactions_by_date_range(
                db, user.id, JUNE_1 + timedelta(days=1), JUNE_1
            )

    async def test_range_is_inclusive(self, db, user):
        customer = await _customer(db, user)
        await service.add_transaction(db, _txn(customer, 1, date=JUNE_1), user)
        await service.add_transaction(db, _txn(customer, 2, date=JUNE_1 + timedelta(days=1)), user)
        await service.add_transaction(db, _txn(customer, 4, date=JUNE_1 + timedelta(days=2)), user)

        found = await service.get_transactions_by_date_range(
            db, user.id, JUNE_1, JUNE_1 + timedelta(days=1)
        )

        assert [t.amount for t in found] == [Decimal("1.00"), Decimal("2.00")]


class TestCustomerDelete:
    async def test_delete_cascades_transactions(self, db, user):
        customer = await _customer(db, user)
        await service.add_transaction(db, _txn(customer, 5), user)

        await customer_service.delete_customer(db, customer.id, user.id)

        remaining = (await db.execute(select(Transaction))).scalars().all()
        assert remaining == []

    async def test_relationships_are_never_loaded_implicitly(self, db, user):
        customer = await _customer(db, user)
        transaction = await service.add_transaction(db, _txn(customer, 5), user)

        with pytest.raises(InvalidRequestError):
            customer.transactions
        with pytest.raises(InvalidRequestError):
            transaction.customer
