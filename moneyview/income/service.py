"""Income entries with merge-on-write and a read-through cache.

Every write invalidates the cache key of each year it touches. Reads go
through ``IncomeCache`` and only hit the database on a miss.
"""

import logging
import uuid

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from moneyview.auth.models import User
from moneyview.core.exceptions import NotFoundError
from moneyview.core.money import to_money
from moneyview.income.cache import CacheKey, CacheSlot, IncomeCache
from moneyview.income.models import IncomeCategory, IncomeEntry, IncomeStatus, IncomeType
from moneyview.income.schemas import (
    AllTimeStats,
    IncomeCreate,
    IncomeEntryResponse,
    IncomeUpdate,
    MonthlyStats,
    YearlyStats,
)
from moneyview.income.stats import all_time_stats, monthly_stats, yearly_stats_from_monthly

logger = logging.getLogger(__name__)

DESCRIPTION_SEPARATOR = "; "


def _cache_key(user_id: uuid.UUID, year: int) -> CacheKey:
    return CacheKey(user_id=str(user_id), year=year)


def join_descriptions(*parts: str | None) -> str | None:
    kept = [p.strip() for p in parts if p and p.strip()]
    return DESCRIPTION_SEPARATOR.join(kept) or None


async def _find_bucket(
    db: AsyncSession,
    user_id: uuid.UUID,
    year: int,
    month: str,
    type: IncomeType,
    category: IncomeCategory,
    status: IncomeStatus,
    exclude_id: uuid.UUID | None = None,
) -> IncomeEntry | None:
    """The row occupying a (user, year, month, type, category, status) tuple."""
    status_match = IncomeEntry.status == status
    if status == IncomeStatus.RECEIVED:
        # Legacy rows without a status count as received
        status_match = or_(status_match, IncomeEntry.status.is_(None))

    query = select(IncomeEntry).where(
        IncomeEntry.user_id == user_id,
        IncomeEntry.year == year,
        IncomeEntry.month == month,
        IncomeEntry.type == type,
        IncomeEntry.category == category,
        status_match,
    )
    if exclude_id is not None:
        query = query.where(IncomeEntry.id != exclude_id)
    result = await db.execute(
        query.order_by(IncomeEntry.status.is_(None), IncomeEntry.created_at)
    )
    return result.scalars().first()


async def add_income(
    db: AsyncSession, data: IncomeCreate, user: User, cache: IncomeCache
) -> IncomeEntry:
    existing = await _find_bucket(
        db, user.id, data.year, data.month, data.type, data.category, data.status
    )
    if existing is not None:
        existing.amount = to_money(existing.amount) + to_money(data.amount)
        existing.description = join_descriptions(existing.description, data.description)
        existing.status = data.status
        entry = existing
        logger.info(
            "Merged income of %s into entry %s (%s %s)",
            data.amount, entry.id, data.month, data.year,
        )
    else:
        entry = IncomeEntry(
            user_id=user.id,
            amount=to_money(data.amount),
            category=data.category,
            month=data.month,
            year=data.year,
            type=data.type,
            status=data.status,
            description=join_descriptions(data.description),
        )
        db.add(entry)

    await db.commit()
    await db.refresh(entry)
    cache.invalidate(_cache_key(user.id, data.year))
    return entry


async def get_income(
    db: AsyncSession, income_id: uuid.UUID, user_id: uuid.UUID
) -> IncomeEntry:
    result = await db.execute(
        select(IncomeEntry).where(
            IncomeEntry.id == income_id, IncomeEntry.user_id == user_id
        )
    )
    entry = result.scalar_one_or_none()
    if entry is None:
        raise NotFoundError("IncomeEntry", str(income_id))
    return entry


async def update_income(
    db: AsyncSession,
    income_id: uuid.UUID,
    data: IncomeUpdate,
    user_id: uuid.UUID,
    cache: IncomeCache,
) -> IncomeEntry:
    """Patch an entry, folding it into another row if it lands on an occupied tuple."""
    entry = await get_income(db, income_id, user_id)
    old_year = entry.year
    changes = data.model_dump(exclude_unset=True, exclude_none=True)

    year = changes.get("year", entry.year)
    month = changes.get("month", entry.month)
    type_ = changes.get("type", entry.type)
    category = changes.get("category", entry.category)
    status = changes.get("status", entry.status) or IncomeStatus.RECEIVED
    amount = to_money(changes.get("amount", entry.amount))
    description = changes.get("description", entry.description)

    target = await _find_bucket(
        db, user_id, year, month, type_, category, status, exclude_id=entry.id
    )
    if target is not None:
        # The patched row must be gone before the target takes its status,
        # otherwise the bucket constraint sees both rows at once.
        await db.delete(entry)
        await db.flush()
        target.amount = to_money(target.amount) + amount
        target.description = join_descriptions(target.description, description)
        target.status = status
        logger.info("Merged income entry %s into %s", entry.id, target.id)
        entry = target
    else:
        entry.year = year
        entry.month = month
        entry.type = type_
        entry.category = category
        entry.status = status
        entry.amount = amount
        entry.description = join_descriptions(description)

    await db.commit()
    await db.refresh(entry)
    cache.invalidate(_cache_key(user_id, old_year))
    if year != old_year:
        cache.invalidate(_cache_key(user_id, year))
    return entry


async def delete_income(
    db: AsyncSession, income_id: uuid.UUID, user_id: uuid.UUID, cache: IncomeCache
) -> None:
    entry = await get_income(db, income_id, user_id)
    year = entry.year
    await db.delete(entry)
    await db.commit()
    cache.invalidate(_cache_key(user_id, year))


# ---------------------------------------------------------------------------
# Read path
# ---------------------------------------------------------------------------


async def get_income_by_year(
    db: AsyncSession, year: int, user_id: uuid.UUID, cache: IncomeCache
) -> list[IncomeEntryResponse]:
    key = _cache_key(user_id, year)
    cached = cache.get(key, CacheSlot.ENTRIES)
    if cached is not None:
        return list(cached)

    result = await db.execute(
        select(IncomeEntry)
        .where(IncomeEntry.user_id == user_id, IncomeEntry.year == year)
        .order_by(IncomeEntry.created_at.desc())
    )
    entries = [IncomeEntryResponse.model_validate(e) for e in result.scalars().all()]
    cache.set(key, CacheSlot.ENTRIES, entries)
    return list(entries)


async def get_monthly_stats(
    db: AsyncSession, year: int, user_id: uuid.UUID, cache: IncomeCache
) -> list[MonthlyStats]:
    key = _cache_key(user_id, year)
    cached = cache.get(key, CacheSlot.MONTHLY_STATS)
    if cached is not None:
        return list(cached)

    stats = monthly_stats(await get_income_by_year(db, year, user_id, cache))
    cache.set(key, CacheSlot.MONTHLY_STATS, stats)
    return list(stats)


async def get_yearly_stats(
    db: AsyncSession, year: int, user_id: uuid.UUID, cache: IncomeCache
) -> YearlyStats:
    key = _cache_key(user_id, year)
    cached = cache.get(key, CacheSlot.YEARLY_STATS)
    if cached is not None:
        return cached

    stats = yearly_stats_from_monthly(await get_monthly_stats(db, year, user_id, cache))
    cache.set(key, CacheSlot.YEARLY_STATS, stats)
    return stats


async def get_all_time_stats(
    db: AsyncSession, user_id: uuid.UUID, cache: IncomeCache
) -> AllTimeStats:
    cached = cache.get_all_time(str(user_id))
    if cached is not None:
        return cached

    result = await db.execute(
        select(IncomeEntry).where(
            IncomeEntry.user_id == user_id, IncomeEntry.type == IncomeType.CREDIT
        )
    )
    stats = all_time_stats(result.scalars().all())
    cache.set_all_time(str(user_id), stats)
    return stats
