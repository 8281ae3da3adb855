from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from moneyview.auth.models import User
from moneyview.business import service
from moneyview.business.schemas import (
    BusinessProfileCreate,
    BusinessProfileResponse,
    BusinessProfileUpdate,
)
from moneyview.core.exceptions import NotFoundError
from moneyview.dependencies import get_current_user, get_db

router = APIRouter()


@router.get("/profile")
async def get_profile(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    profile = await service.get_business_profile(db, current_user.id)
    if profile is None:
        raise NotFoundError("BusinessProfile", str(current_user.id))
    return {"data": BusinessProfileResponse.model_validate(profile)}


@router.post("/profile", status_code=201)
async def create_profile(
    data: BusinessProfileCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    profile = await service.create_business_profile(db, data, current_user)
    return {"data": BusinessProfileResponse.model_validate(profile)}


@router.put("/profile")
async def update_profile(
    data: BusinessProfileUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    profile = await service.update_business_profile(db, data, current_user.id)
    return {"data": BusinessProfileResponse.model_validate(profile)}
