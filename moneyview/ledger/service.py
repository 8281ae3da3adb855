"""Write and read paths for customer transactions.

Adding or deleting a transaction touches two rows, the transaction and the
customer's denormalised ``current_balance``. Both changes go out in the
same session commit so they land together or not at all.
"""

import logging
import uuid
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from moneyview.auth.models import User
from moneyview.core.dates import day_bounds, local_day, localize
from moneyview.core.exceptions import NotFoundError, ValidationError
from moneyview.core.money import to_money
from moneyview.core.pagination import PaginationParams, build_pagination_meta
from moneyview.customers.service import get_customer
from moneyview.ledger.engine import (
    build_ledger,
    recompute_balance,
    signed_amount,
    verify_balance_snapshots,
)
from moneyview.ledger.models import Transaction
from moneyview.ledger.schemas import (
    BalanceReconciliation,
    LedgerEntry,
    TransactionCreate,
    TransactionFilter,
)

logger = logging.getLogger(__name__)

_UTC = ZoneInfo("UTC")


# ---------------------------------------------------------------------------
# Write path
# ---------------------------------------------------------------------------


async def add_transaction(
    db: AsyncSession,
    data: TransactionCreate,
    user: User,
    tz: ZoneInfo = _UTC,
) -> Transaction:
    customer = await get_customer(db, data.customer_id, user.id)

    new_balance = to_money(customer.current_balance) + signed_amount(data.type, data.amount)

    transaction = Transaction(
        user_id=user.id,
        customer_id=customer.id,
        customer_name=customer.name,
        amount=to_money(data.amount),
        type=data.type,
        date=localize(data.date, tz),
        description=data.description,
        payment_method=data.payment_method,
        balance_after=new_balance,
    )
    db.add(transaction)
    customer.current_balance = new_balance
    await db.commit()
    await db.refresh(transaction)

    logger.info(
        "Recorded %s of %s for customer %s; balance now %s",
        data.type.value, transaction.amount, customer.id, new_balance,
    )
    return transaction


async def get_transaction(
    db: AsyncSession, transaction_id: uuid.UUID, user_id: uuid.UUID
) -> Transaction:
    result = await db.execute(
        select(Transaction).where(
            Transaction.id == transaction_id, Transaction.user_id == user_id
        )
    )
    transaction = result.scalar_one_or_none()
    if transaction is None:
        raise NotFoundError("Transaction", str(transaction_id))
    return transaction


async def delete_transaction(
    db: AsyncSession, transaction_id: uuid.UUID, user_id: uuid.UUID
) -> None:
    transaction = await get_transaction(db, transaction_id, user_id)
    customer = await get_customer(db, transaction.customer_id, user_id)

    # Exact inverse of what add_transaction applied
    new_balance = to_money(customer.current_balance) - signed_amount(
        transaction.type, transaction.amount
    )
    customer.current_balance = new_balance
    await db.delete(transaction)
    await db.commit()

    logger.info(
        "Deleted transaction %s for customer %s; balance now %s",
        transaction_id, customer.id, new_balance,
    )


# ---------------------------------------------------------------------------
# Read path
# ---------------------------------------------------------------------------


async def list_customer_transactions(
    db: AsyncSession,
    customer_id: uuid.UUID,
    user_id: uuid.UUID,
    newest_first: bool = True,
) -> list[Transaction]:
    await get_customer(db, customer_id, user_id)
    query = select(Transaction).where(
        Transaction.user_id == user_id, Transaction.customer_id == customer_id
    )
    if newest_first:
        query = query.order_by(Transaction.date.desc(), Transaction.created_at.desc())
    else:
        query = query.order_by(Transaction.date.asc(), Transaction.created_at.asc())
    result = await db.execute(query)
    return list(result.scalars().all())


async def list_transactions(
    db: AsyncSession,
    user_id: uuid.UUID,
    filters: TransactionFilter,
    pagination: PaginationParams,
    tz: ZoneInfo = _UTC,
) -> tuple[list[Transaction], dict]:
    query = select(Transaction).where(Transaction.user_id == user_id)

    if filters.customer_id is not None:
        query = query.where(Transaction.customer_id == filters.customer_id)
    if filters.type is not None:
        query = query.where(Transaction.type == filters.type)
    if filters.date_from is not None:
        query = query.where(Transaction.date >= localize(filters.date_from, tz))
    if filters.date_to is not None:
        query = query.where(Transaction.date <= localize(filters.date_to, tz))

    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar() or 0

    query = (
        query.order_by(Transaction.date.desc(), Transaction.created_at.desc())
        .offset(pagination.offset)
        .limit(pagination.page_size)
    )
    result = await db.execute(query)
    return list(result.scalars().all()), build_pagination_meta(total, pagination)


async def get_transactions_by_date_range(
    db: AsyncSession,
    user_id: uuid.UUID,
    start: datetime,
    end: datetime,
) -> list[Transaction]:
    """Transactions with ``start <= date <= end`` (UTC bounds), oldest first."""
    if start > end:
        raise ValidationError("Period start must not be after period end.", field="start")
    result = await db.execute(
        select(Transaction)
        .where(
            Transaction.user_id == user_id,
            Transaction.date >= start,
            Transaction.date <= end,
        )
        .order_by(Transaction.date.asc(), Transaction.created_at.asc())
    )
    return list(result.scalars().all())


async def get_recent_transactions(
    db: AsyncSession, user_id: uuid.UUID, limit: int = 10
) -> list[Transaction]:
    result = await db.execute(
        select(Transaction)
        .where(Transaction.user_id == user_id)
        .order_by(Transaction.date.desc(), Transaction.created_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def get_today_transactions(
    db: AsyncSession, user_id: uuid.UUID, tz: ZoneInfo = _UTC
) -> list[Transaction]:
    today = local_day(datetime.now(timezone.utc), tz)
    start, end = day_bounds(today, tz)
    return await get_transactions_by_date_range(db, user_id, start, end)


async def count_transactions_between(
    db: AsyncSession, user_id: uuid.UUID, start: datetime, end: datetime
) -> int:
    result = await db.execute(
        select(func.count(Transaction.id)).where(
            Transaction.user_id == user_id,
            Transaction.date >= start,
            Transaction.date <= end,
        )
    )
    return result.scalar() or 0


# ---------------------------------------------------------------------------
# Ledger / reconciliation
# ---------------------------------------------------------------------------


async def get_ledger(
    db: AsyncSession, customer_id: uuid.UUID, user_id: uuid.UUID
) -> list[LedgerEntry]:
    customer = await get_customer(db, customer_id, user_id)
    transactions = await list_customer_transactions(
        db, customer_id, user_id, newest_first=False
    )
    return build_ledger(customer, transactions)


async def reconcile_customer_balance(
    db: AsyncSession, customer_id: uuid.UUID, user_id: uuid.UUID
) -> BalanceReconciliation:
    """Recompute ``current_balance`` from the full history and repair drift."""
    customer = await get_customer(db, customer_id, user_id)
    transactions = await list_customer_transactions(
        db, customer_id, user_id, newest_first=False
    )

    stored = to_money(customer.current_balance)
    recomputed = recompute_balance(customer, transactions)
    mismatched = verify_balance_snapshots(customer, transactions)

    repaired = False
    if stored != recomputed:
        logger.warning(
            "Balance drift on customer %s: stored %s, recomputed %s",
            customer_id, stored, recomputed,
        )
        customer.current_balance = recomputed
        await db.commit()
        repaired = True
        logger.info("Repaired balance on customer %s to %s", customer_id, recomputed)

    return BalanceReconciliation(
        customer_id=customer.id,
        stored_balance=stored,
        recomputed_balance=recomputed,
        repaired=repaired,
        mismatched_snapshots=mismatched,
    )
