import uuid

from pydantic import BaseModel, Field

from moneyview.core.dates import UtcDateTime


class BusinessProfileCreate(BaseModel):
    business_name: str = Field(min_length=1, max_length=255)
    owner_name: str = Field(min_length=1, max_length=255)
    phone: str = Field(min_length=1, max_length=50)
    email: str | None = Field(None, max_length=255)
    address: str | None = None
    tax_id: str | None = Field(None, max_length=50)
    currency: str = Field(default="INR", min_length=3, max_length=3)


class BusinessProfileUpdate(BaseModel):
    business_name: str | None = Field(None, min_length=1, max_length=255)
    owner_name: str | None = Field(None, min_length=1, max_length=255)
    phone: str | None = Field(None, min_length=1, max_length=50)
    email: str | None = Field(None, max_length=255)
    address: str | None = None
    tax_id: str | None = Field(None, max_length=50)
    currency: str | None = Field(None, min_length=3, max_length=3)


class BusinessProfileResponse(BaseModel):
    id: uuid.UUID
    business_name: str
    owner_name: str
    phone: str
    email: str | None
    address: str | None
    tax_id: str | None
    currency: str
    created_at: UtcDateTime
    updated_at: UtcDateTime

    model_config = {"from_attributes": True}
