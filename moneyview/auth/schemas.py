import uuid

from pydantic import BaseModel, EmailStr, Field

from moneyview.core.dates import UtcDateTime


class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    full_name: str = Field(min_length=1, max_length=255)


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class BusinessLink(BaseModel):
    """Just enough of the business profile for a client to brand its screens."""

    id: uuid.UUID
    business_name: str
    currency: str

    model_config = {"from_attributes": True}


class UserResponse(BaseModel):
    id: uuid.UUID
    email: str
    full_name: str
    is_active: bool
    created_at: UtcDateTime
    # None until the owner sets up a business profile
    business: BusinessLink | None = None

    model_config = {"from_attributes": True}


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class TokenRefreshRequest(BaseModel):
    refresh_token: str
