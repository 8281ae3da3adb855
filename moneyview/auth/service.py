from __future__ import annotations

from datetime import timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from moneyview.auth.models import RefreshToken, User
from moneyview.auth.schemas import BusinessLink, TokenResponse, UserCreate, UserResponse
from moneyview.auth.utils import (
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    hash_token,
    verify_password,
)
from moneyview.business.service import get_business_profile
from moneyview.config import Settings
from moneyview.core.exceptions import ConflictError, ValidationError
from moneyview.database import utcnow


async def register_user(db: AsyncSession, user_data: UserCreate) -> User:
    result = await db.execute(select(User).where(User.email == user_data.email))
    if result.scalar_one_or_none() is not None:
        raise ConflictError(f"A user with email {user_data.email} already exists.")

    user = User(
        email=user_data.email,
        hashed_password=hash_password(user_data.password),
        full_name=user_data.full_name,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def _issue_tokens(db: AsyncSession, user: User, settings: Settings) -> TokenResponse:
    access_token = create_access_token(user.id, settings)
    refresh_token = create_refresh_token(user.id, settings)

    db.add(
        RefreshToken(
            user_id=user.id,
            token_hash=hash_token(refresh_token),
            expires_at=utcnow() + timedelta(days=settings.refresh_token_expire_days),
        )
    )
    await db.commit()
    return TokenResponse(access_token=access_token, refresh_token=refresh_token)


async def authenticate_user(
    db: AsyncSession, email: str, password: str, settings: Settings
) -> TokenResponse:
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()

    if user is None or not verify_password(password, user.hashed_password):
        raise ValidationError("Invalid email or password.")
    if not user.is_active:
        raise ValidationError("Account is deactivated.")

    return await _issue_tokens(db, user, settings)


async def refresh_tokens(
    db: AsyncSession, refresh_token: str, settings: Settings
) -> TokenResponse:
    token_data = decode_token(refresh_token, settings, expected_type="refresh")
    if token_data is None:
        raise ValidationError("Invalid or expired refresh token.")

    result = await db.execute(
        select(RefreshToken).where(
            RefreshToken.token_hash == hash_token(refresh_token),
            RefreshToken.revoked.is_(False),
        )
    )
    stored_token = result.scalar_one_or_none()
    if stored_token is None:
        raise ValidationError("Refresh token not found or already revoked.")

    if stored_token.is_expired():
        raise ValidationError("Refresh token has expired.")

    stored_token.revoked = True

    result = await db.execute(select(User).where(User.id == token_data.sub))
    user = result.scalar_one_or_none()
    if user is None or not user.is_active:
        raise ValidationError("User not found or inactive.")

    return await _issue_tokens(db, user, settings)


async def revoke_refresh_token(db: AsyncSession, refresh_token: str) -> None:
    result = await db.execute(
        select(RefreshToken).where(RefreshToken.token_hash == hash_token(refresh_token))
    )
    stored_token = result.scalar_one_or_none()
    if stored_token:
        stored_token.revoked = True
        await db.commit()


async def describe_user(db: AsyncSession, user: User) -> UserResponse:
    """The account as shown to its owner, linked to its business profile if one exists."""
    profile = await get_business_profile(db, user.id)
    response = UserResponse.model_validate(user)
    if profile is not None:
        response.business = BusinessLink.model_validate(profile)
    return response
