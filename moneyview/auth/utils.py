from __future__ import annotations

import hashlib
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt

from moneyview.config import Settings


@dataclass
class TokenPayload:
    sub: uuid.UUID
    token_type: str
    exp: datetime


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))


def _encode(user_id: uuid.UUID, token_type: str, expires_in: timedelta, settings: Settings) -> str:
    payload = {
        "sub": str(user_id),
        "exp": datetime.now(timezone.utc) + expires_in,
        "type": token_type,
        # keeps two tokens minted in the same second distinct
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def create_access_token(user_id: uuid.UUID, settings: Settings) -> str:
    return _encode(
        user_id, "access", timedelta(minutes=settings.access_token_expire_minutes), settings
    )


def create_refresh_token(user_id: uuid.UUID, settings: Settings) -> str:
    return _encode(
        user_id, "refresh", timedelta(days=settings.refresh_token_expire_days), settings
    )


def decode_token(
    token: str, settings: Settings, expected_type: str = "access"
) -> TokenPayload | None:
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
        token_type = payload.get("type", "access")
        if token_type != expected_type:
            return None
        return TokenPayload(
            sub=uuid.UUID(payload["sub"]),
            token_type=token_type,
            exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )
    except (JWTError, ValueError, KeyError):
        return None


def hash_token(token: str) -> str:
    """Hash a refresh token for storage."""
    return hashlib.sha256(token.encode()).hexdigest()
