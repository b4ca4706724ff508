"""Provider earnings and payout router."""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.user import User
from app.auth.dependencies import get_current_provider
from app.schemas.earnings import (
    EarningsResponse, EarningsSummary, ProviderEarningResponse,
    ProviderPayoutResponse, PayoutRequest, PayoutRequestResponse
)
from app.services.earnings import (
    get_balance_summary, count_earnings, list_earnings, list_payouts,
    request_payout, payout_confirmation_message
)

router = APIRouter()


@router.get("/api/provider/earnings", response_model=EarningsResponse)
async def get_provider_earnings(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    current_user: User = Depends(get_current_provider),
    db: AsyncSession = Depends(get_db)
):
    """
    Get the earnings summary and transaction history of the current provider.

    - summary: balances recomputed from the ledger on every call
    - transactions: newest first, paginated with skip/limit
    """
    summary = await get_balance_summary(db, current_user.uuid)
    total = await count_earnings(db, current_user.uuid)
    transactions = await list_earnings(db, current_user.uuid, skip=skip, limit=limit)

    return EarningsResponse(
        summary=EarningsSummary(
            available_balance=summary.available_balance,
            pending_balance=summary.pending_balance,
            total_earned=summary.total_earned,
            total_fees=summary.total_fees,
        ),
        transactions=[ProviderEarningResponse.model_validate(t) for t in transactions],
        total=total,
        skip=skip,
        limit=limit,
    )


@router.get("/api/provider/payouts", response_model=list[ProviderPayoutResponse])
async def get_provider_payouts(
    current_user: User = Depends(get_current_provider),
    db: AsyncSession = Depends(get_db)
):
    """List payouts of the current provider, newest first."""
    payouts = await list_payouts(db, current_user.uuid)
    return [ProviderPayoutResponse.model_validate(p) for p in payouts]


@router.post("/api/provider/payouts", response_model=PayoutRequestResponse, status_code=status.HTTP_201_CREATED)
async def create_payout_request(
    request_data: PayoutRequest,
    current_user: User = Depends(get_current_provider),
    db: AsyncSession = Depends(get_db)
):
    """
    Request a payout from the available balance.

    - Rejects non-positive amounts (400, invalid_amount)
    - Rejects amounts above the available balance (400, insufficient_balance)
    - Moves exactly the requested amount from available to pending
    """
    payout = await request_payout(db, current_user.uuid, request_data.amount)
    await db.commit()
    await db.refresh(payout)

    return PayoutRequestResponse(
        payout=ProviderPayoutResponse.model_validate(payout),
        message=payout_confirmation_message(payout),
    )
