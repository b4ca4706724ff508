"""Signal provider profile and subscriber router."""
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc

from app.database import get_db
from app.models.user import User
from app.models.signal_subscription import SignalSubscription
from app.auth.dependencies import get_current_active_user, get_current_provider
from app.schemas.providers import (
    ProviderProfileCreate, ProviderProfileResponse,
    SubscriberResponse, SubscriberListResponse
)
from app.services.currency import pounds_to_pence

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/api/provider/profile", response_model=ProviderProfileResponse)
async def create_provider_profile(
    profile: ProviderProfileCreate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Become a signal provider, or update an existing provider profile.

    - Display name defaults to the account name
    - Signal fee is given in whole pounds and stored in pence
    """
    current_user.is_provider = True
    current_user.provider_display_name = profile.display_name or current_user.name
    current_user.bio = profile.bio
    current_user.signal_fee = pounds_to_pence(profile.signal_fee)

    await db.commit()
    await db.refresh(current_user)

    logger.info(f"User {current_user.uuid} is now a signal provider (fee={current_user.signal_fee})")
    return ProviderProfileResponse.model_validate(current_user)


@router.get("/api/provider/subscribers", response_model=SubscriberListResponse)
async def get_provider_subscribers(
    current_user: User = Depends(get_current_provider),
    db: AsyncSession = Depends(get_db)
):
    """List active subscribers of the current provider with their monthly price."""
    result = await db.execute(
        select(SignalSubscription, User)
        .join(User, User.uuid == SignalSubscription.user_id)
        .where(
            SignalSubscription.provider_id == current_user.uuid,
            SignalSubscription.status == "active"
        )
        .order_by(desc(SignalSubscription.created_at))
    )
    rows = result.all()

    subscribers = [
        SubscriberResponse(
            subscription_id=subscription.uuid,
            user_id=subscriber.uuid,
            name=subscriber.name,
            price=subscription.price,
            currency=subscription.currency,
            subscribed_at=subscription.created_at,
        )
        for subscription, subscriber in rows
    ]

    return SubscriberListResponse(
        subscribers=subscribers,
        total=len(subscribers),
        monthly_revenue=sum(s.price for s in subscribers),
    )
