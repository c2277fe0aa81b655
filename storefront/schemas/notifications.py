from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, Field, field_validator

from storefront.schemas.base import CamelModel


class RestockNotificationRequest(CamelModel):
    email: str = Field(min_length=3, max_length=320)
    product_id: str = Field(min_length=1)
    variant_id: str = Field(min_length=1)
    product_title: str = Field(min_length=1)
    variant_title: str | None = None

    @field_validator("email")
    @classmethod
    def _email_has_at(cls, value: str) -> str:
        value = value.strip()
        if "@" not in value:
            raise ValueError("Invalid email address")
        return value


class RestockNotificationOut(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    product_id: str
    variant_id: str
    product_title: str
    variant_title: str | None = None
    status: str
    created_at: datetime
    updated_at: datetime


class RestockSignupOut(CamelModel):
    success: bool = True
    message: str
    notification: RestockNotificationOut


class RestockStatusUpdate(CamelModel):
    status: Literal["sent", "failed"]


class RestockStatsOut(CamelModel):
    pending: int
    sent: int
    failed: int
    total_variants: int


class RestockCleanupOut(CamelModel):
    removed: int
