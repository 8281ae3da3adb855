"""Business logic for the business profile module."""

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from moneyview.auth.models import User
from moneyview.business.models import BusinessProfile
from moneyview.business.schemas import BusinessProfileCreate, BusinessProfileUpdate
from moneyview.core.exceptions import ConflictError, NotFoundError


async def get_business_profile(db: AsyncSession, user_id: uuid.UUID) -> BusinessProfile | None:
    """Return the user's profile, or None if it has not been set up yet."""
    result = await db.execute(
        select(BusinessProfile).where(BusinessProfile.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def create_business_profile(
    db: AsyncSession, data: BusinessProfileCreate, user: User
) -> BusinessProfile:
    if await get_business_profile(db, user.id) is not None:
        raise ConflictError("A business profile already exists for this account.")

    profile = BusinessProfile(user_id=user.id, **data.model_dump())
    db.add(profile)
    await db.commit()
    await db.refresh(profile)
    return profile


async def update_business_profile(
    db: AsyncSession, data: BusinessProfileUpdate, user_id: uuid.UUID
) -> BusinessProfile:
    profile = await get_business_profile(db, user_id)
    if profile is None:
        raise NotFoundError("BusinessProfile", str(user_id))

    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(profile, key, value)
    await db.commit()
    await db.refresh(profile)
    return profile
