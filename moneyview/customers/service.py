import logging
import uuid
from collections.abc import Iterable
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from moneyview.auth.models import User
from moneyview.core.dates import localize
from moneyview.core.exceptions import NotFoundError
from moneyview.core.money import ZERO, to_money
from moneyview.core.pagination import PaginationParams, build_pagination_meta
from moneyview.customers.models import Customer, CustomerStatus
from moneyview.customers.schemas import (
    BalanceFilter,
    CustomerCreate,
    CustomerFilter,
    CustomerStats,
    CustomerUpdate,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Rollups
# ---------------------------------------------------------------------------


def summarize_customers(customers: Iterable[Customer]) -> CustomerStats:
    """Receivable/payable rollup over a set of customers.

    Positive balances are receivables, negative balances are payables and
    are reported as a positive magnitude.
    """
    total = active = inactive = 0
    receivables = payables = ZERO
    for customer in customers:
        total += 1
        if customer.status == CustomerStatus.ACTIVE:
            active += 1
        else:
            inactive += 1
        balance = to_money(customer.current_balance)
        if balance > 0:
            receivables += balance
        elif balance < 0:
            payables += -balance

    return CustomerStats(
        total_customers=total,
        active_customers=active,
        inactive_customers=inactive,
        total_receivables=receivables,
        total_payables=payables,
    )


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------


async def create_customer(
    db: AsyncSession, data: CustomerCreate, user: User, tz: ZoneInfo = ZoneInfo("UTC")
) -> Customer:
    opening = to_money(data.opening_balance)
    customer = Customer(
        user_id=user.id,
        name=data.name,
        phone=data.phone,
        email=data.email,
        address=data.address,
        status=data.status,
        opening_balance=opening,
        current_balance=opening,
        created_at=localize(data.date, tz) if data.date else datetime.now(timezone.utc),
    )
    db.add(customer)
    await db.commit()
    await db.refresh(customer)
    return customer


async def get_customer(db: AsyncSession, customer_id: uuid.UUID, user_id: uuid.UUID) -> Customer:
    result = await db.execute(
        select(Customer).where(Customer.id == customer_id, Customer.user_id == user_id)
    )
    customer = result.scalar_one_or_none()
    if customer is None:
        raise NotFoundError("Customer", str(customer_id))
    return customer


async def list_customers(
    db: AsyncSession,
    user_id: uuid.UUID,
    filters: CustomerFilter,
    pagination: PaginationParams,
) -> tuple[list[Customer], dict]:
    query = select(Customer).where(Customer.user_id == user_id)

    if filters.search:
        term = f"%{filters.search}%"
        query = query.where(
            or_(
                Customer.name.ilike(term),
                Customer.phone.ilike(term),
                Customer.email.ilike(term),
            )
        )
    if filters.status is not None:
        query = query.where(Customer.status == filters.status)
    if filters.balance == BalanceFilter.RECEIVABLE:
        query = query.where(Customer.current_balance > 0)
    elif filters.balance == BalanceFilter.PAYABLE:
        query = query.where(Customer.current_balance < 0)
    elif filters.balance == BalanceFilter.ZERO:
        query = query.where(Customer.current_balance == 0)

    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar() or 0

    query = query.order_by(Customer.name).offset(pagination.offset).limit(pagination.page_size)
    result = await db.execute(query)
    customers = list(result.scalars().all())

    return customers, build_pagination_meta(total, pagination)


async def list_all_customers(db: AsyncSession, user_id: uuid.UUID) -> list[Customer]:
    result = await db.execute(
        select(Customer).where(Customer.user_id == user_id).order_by(Customer.name)
    )
    return list(result.scalars().all())


async def update_customer(
    db: AsyncSession, customer_id: uuid.UUID, data: CustomerUpdate, user_id: uuid.UUID
) -> Customer:
    customer = await get_customer(db, customer_id, user_id)
    update_data = data.model_dump(exclude_unset=True)
    for key, value in update_data.items():
        setattr(customer, key, value)
    await db.commit()
    await db.refresh(customer)
    return customer


async def delete_customer(db: AsyncSession, customer_id: uuid.UUID, user_id: uuid.UUID) -> None:
    """Hard delete; the customer's transactions go with it."""
    customer = await get_customer(db, customer_id, user_id)
    await db.delete(customer)
    await db.commit()
    logger.info("Deleted customer %s and its transaction history", customer_id)


# ---------------------------------------------------------------------------
# Rollup queries
# ---------------------------------------------------------------------------


async def get_customer_stats(db: AsyncSession, user_id: uuid.UUID) -> CustomerStats:
    return summarize_customers(await list_all_customers(db, user_id))


async def get_due_customers(db: AsyncSession, user_id: uuid.UUID) -> list[Customer]:
    """Customers carrying a receivable balance, largest amount owed first."""
    result = await db.execute(
        select(Customer)
        .where(Customer.user_id == user_id, Customer.current_balance > 0)
        .order_by(Customer.current_balance.desc(), Customer.name)
    )
    return list(result.scalars().all())
