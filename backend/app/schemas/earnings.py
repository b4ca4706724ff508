"""Schemas for provider earnings and payout endpoints.

Amounts are integers in minor currency units. Responses are serialized with
camelCase keys (``availableBalance``, ``grossAmount`` ...) and expose the row
uuid as ``id``.
"""
from datetime import datetime
from typing import List, Literal, Optional
from pydantic import AliasGenerator, BaseModel, Field, StrictInt
from pydantic.alias_generators import to_camel

from app.models.provider_earning import EarningStatus
from app.models.signal_payout import PayoutStatus


class CamelResponse(BaseModel):
    """Base for response schemas serialized with camelCase keys."""

    class Config:
        from_attributes = True
        alias_generator = AliasGenerator(serialization_alias=to_camel)


class EarningsSummary(CamelResponse):
    available_balance: int
    pending_balance: int
    total_earned: int
    total_fees: int


class ProviderEarningResponse(CamelResponse):
    """Schema for a single ledger row."""

    uuid: str = Field(..., serialization_alias="id")
    provider_id: str
    subscription_id: Optional[str] = None
    gross_amount: int
    fee_percentage: int
    fee_amount: int
    net_amount: int
    currency: str
    status: EarningStatus
    payout_id: Optional[str] = None
    earned_at: datetime
    created_at: datetime
    updated_at: datetime


class EarningsResponse(CamelResponse):
    """Summary plus one page of transactions, newest first."""

    summary: EarningsSummary
    transactions: List[ProviderEarningResponse]
    total: int
    skip: int
    limit: int


class ProviderPayoutResponse(CamelResponse):
    uuid: str = Field(..., serialization_alias="id")
    provider_id: str
    amount: int
    currency: str
    stripe_transfer_id: Optional[str] = None
    status: PayoutStatus
    period_start: datetime
    period_end: datetime
    created_at: datetime
    updated_at: datetime


class PayoutRequest(BaseModel):
    """Body of a payout request."""

    amount: StrictInt = Field(..., description="Amount to withdraw in minor currency units (pence)")


class PayoutRequestResponse(CamelResponse):
    payout: ProviderPayoutResponse
    message: str


class PayoutSettleRequest(BaseModel):
    """Admin body recording the outcome of a payout."""

    status: Literal["paid", "failed"]
    stripe_transfer_id: Optional[str] = Field(None, max_length=255)
