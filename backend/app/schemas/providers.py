"""Schemas for provider profiles and signal subscriptions."""
from datetime import datetime
from typing import List, Optional
from pydantic import AliasGenerator, BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from app.config import settings
from app.schemas.earnings import CamelResponse


class ProviderProfileCreate(BaseModel):
    """Schema for becoming a signal provider. Accepts camelCase or snake_case keys."""

    display_name: Optional[str] = Field(None, min_length=3, max_length=255)
    bio: str = Field(..., min_length=20, max_length=500)
    signal_fee: int = Field(..., description="Monthly fee in whole pounds")
    terms_accepted: bool

    class Config:
        alias_generator = AliasGenerator(validation_alias=to_camel)
        populate_by_name = True

    @field_validator("signal_fee")
    @classmethod
    def validate_signal_fee(cls, v: int) -> int:
        if not settings.SIGNAL_FEE_MIN <= v <= settings.SIGNAL_FEE_MAX:
            raise ValueError(
                f"Fee must be between £{settings.SIGNAL_FEE_MIN} and £{settings.SIGNAL_FEE_MAX}"
            )
        return v

    @field_validator("terms_accepted")
    @classmethod
    def validate_terms_accepted(cls, v: bool) -> bool:
        if not v:
            raise ValueError("You must accept the terms and conditions")
        return v


class ProviderProfileResponse(CamelResponse):
    uuid: str
    name: str
    provider_display_name: Optional[str] = None
    bio: Optional[str] = None
    signal_fee: Optional[int] = None  # pence
    is_provider: bool


class SignalSubscriptionCreate(BaseModel):
    provider_id: str = Field(..., min_length=1)

    class Config:
        alias_generator = AliasGenerator(validation_alias=to_camel)
        populate_by_name = True


class SignalSubscriptionResponse(CamelResponse):
    uuid: str
    user_id: str
    provider_id: str
    price: int
    currency: str
    status: str
    stripe_subscription_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class SubscriberResponse(CamelResponse):
    subscription_id: str
    user_id: str
    name: str
    price: int
    currency: str
    subscribed_at: datetime


class SubscriberListResponse(CamelResponse):
    subscribers: List[SubscriberResponse]
    total: int
    monthly_revenue: int  # gross, pence
