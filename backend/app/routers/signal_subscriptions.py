"""Signal subscriptions router: users subscribing to providers."""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.database import get_db
from app.config import settings
from app.models.user import User
from app.models.signal_subscription import SignalSubscription
from app.schemas.providers import SignalSubscriptionCreate, SignalSubscriptionResponse
from app.auth.dependencies import get_current_active_user

router = APIRouter()


@router.post("/api/signal-subscriptions", response_model=SignalSubscriptionResponse, status_code=status.HTTP_201_CREATED)
async def subscribe_to_provider(
    request_data: SignalSubscriptionCreate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Subscribe to a signal provider.

    - Provider must exist and have a provider profile
    - Users cannot subscribe to themselves or twice
    - Price is locked to the provider's current signal fee
    """
    if request_data.provider_id == current_user.uuid:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot subscribe to your own signals"
        )

    provider = await db.get(User, request_data.provider_id)
    if not provider or not provider.is_provider:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Provider not found"
        )

    existing = await db.execute(
        select(SignalSubscription).where(
            SignalSubscription.user_id == current_user.uuid,
            SignalSubscription.provider_id == provider.uuid,
            SignalSubscription.status == "active"
        )
    )
    if existing.scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Already subscribed to this provider"
        )

    subscription = SignalSubscription(
        status="active",
        user_id=current_user.uuid,
        provider_id=provider.uuid,
        price=provider.signal_fee or 0,
        currency=settings.DEFAULT_CURRENCY,
    )

    db.add(subscription)
    await db.commit()
    await db.refresh(subscription)

    return SignalSubscriptionResponse.model_validate(subscription)


@router.post("/api/signal-subscriptions/{subscription_id}/cancel", response_model=SignalSubscriptionResponse)
async def cancel_signal_subscription(
    subscription_id: str,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """Cancel one of the current user's subscriptions."""
    subscription = await db.get(SignalSubscription, subscription_id)

    if not subscription:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Subscription not found"
        )

    if subscription.user_id != current_user.uuid:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to cancel this subscription"
        )

    subscription.status = "cancelled"
    await db.commit()
    await db.refresh(subscription)

    return SignalSubscriptionResponse.model_validate(subscription)
