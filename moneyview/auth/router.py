from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from moneyview.auth.models import User
from moneyview.auth.schemas import (
    TokenRefreshRequest,
    UserCreate,
    UserLogin,
    UserResponse,
)
from moneyview.auth.service import (
    authenticate_user,
    describe_user,
    refresh_tokens,
    register_user,
    revoke_refresh_token,
)
from moneyview.dependencies import get_current_user, get_db, get_income_cache
from moneyview.income.cache import IncomeCache

router = APIRouter()


@router.post("/register", status_code=201)
async def register(
    user_data: UserCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    user = await register_user(db, user_data)
    return {"data": UserResponse.model_validate(user)}


@router.post("/login")
async def login(
    credentials: UserLogin,
    db: Annotated[AsyncSession, Depends(get_db)],
    request: Request,
) -> dict:
    tokens = await authenticate_user(
        db, credentials.email, credentials.password, request.app.state.settings
    )
    return {"data": tokens}


@router.post("/refresh")
async def refresh(
    body: TokenRefreshRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    request: Request,
) -> dict:
    tokens = await refresh_tokens(db, body.refresh_token, request.app.state.settings)
    return {"data": tokens}


@router.post("/logout")
async def logout(
    body: TokenRefreshRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    cache: Annotated[IncomeCache, Depends(get_income_cache)],
    _: Annotated[User, Depends(get_current_user)],
) -> dict:
    await revoke_refresh_token(db, body.refresh_token)
    cache.clear()
    return {"data": {"message": "Logged out successfully"}}


@router.get("/me")
async def get_me(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    return {"data": await describe_user(db, current_user)}
