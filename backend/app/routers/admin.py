"""Admin router for reviewing and settling provider payouts."""
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.database import get_db
from app.models.user import User
from app.models.signal_payout import SignalPayout, PayoutStatus
from app.schemas.earnings import ProviderPayoutResponse, PayoutSettleRequest
from app.auth.dependencies import admin_required
from app.services.earnings import settle_payout

router = APIRouter()


@router.get("/payouts", response_model=list[ProviderPayoutResponse])
async def list_all_payouts(
    payout_status: Optional[PayoutStatus] = Query(None, alias="status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    admin: User = Depends(admin_required),
    db: AsyncSession = Depends(get_db)
):
    """List payouts across all providers, oldest first, optionally by status."""
    query = select(SignalPayout)
    if payout_status is not None:
        query = query.where(SignalPayout.status == payout_status)

    result = await db.execute(
        query.order_by(SignalPayout.created_at, SignalPayout.uuid).offset(skip).limit(limit)
    )
    return [ProviderPayoutResponse.model_validate(p) for p in result.scalars().all()]


@router.post("/payouts/{payout_id}/settle", response_model=ProviderPayoutResponse)
async def settle_provider_payout(
    payout_id: str,
    request_data: PayoutSettleRequest,
    admin: User = Depends(admin_required),
    db: AsyncSession = Depends(get_db)
):
    """
    Record the outcome of a pending payout.

    - paid: reserved earnings are marked paid_out
    - failed: reserved earnings return to the provider's available balance
    """
    payout = await settle_payout(
        db,
        payout_id,
        PayoutStatus(request_data.status),
        stripe_transfer_id=request_data.stripe_transfer_id,
    )
    await db.commit()
    await db.refresh(payout)

    return ProviderPayoutResponse.model_validate(payout)
