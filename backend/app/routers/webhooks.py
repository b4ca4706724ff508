"""Stripe webhook router: turns paid signal-subscription invoices into provider earnings."""
import logging
from datetime import datetime

import stripe
from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.database import get_db
from app.config import settings
from app.models.provider_earning import ProviderEarning
from app.models.signal_subscription import SignalSubscription
from app.services.earnings import record_earning, UnsupportedCurrency

logger = logging.getLogger(__name__)

router = APIRouter()

# Configure Stripe
stripe.api_key = settings.STRIPE_SECRET_KEY


def _invoice_metadata(invoice: dict) -> dict:
    """Merge invoice metadata with the metadata copied from its subscription."""
    subscription_details = invoice.get("subscription_details") or {}
    parent_details = (invoice.get("parent") or {}).get("subscription_details") or {}
    metadata = {}
    metadata.update(parent_details.get("metadata") or {})
    metadata.update(subscription_details.get("metadata") or {})
    metadata.update(invoice.get("metadata") or {})
    return metadata


@router.post("/api/webhooks/stripe")
async def stripe_webhook(
    request: Request,
    db: AsyncSession = Depends(get_db)
):
    """
    Handle Stripe webhook events.

    - Verifies webhook signature
    - Processes invoice.payment_succeeded for signal subscriptions
    - Records one earnings row per invoice (replays are ignored)
    """
    payload = await request.body()
    sig_header = request.headers.get("stripe-signature")

    if not sig_header:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing stripe-signature header"
        )

    # Verify webhook signature
    try:
        event = stripe.Webhook.construct_event(
            payload, sig_header, settings.STRIPE_WEBHOOK_SECRET
        )
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid payload"
        )
    except stripe.SignatureVerificationError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid signature"
        )

    if event["type"] != "invoice.payment_succeeded":
        return {"status": "ignored"}

    invoice = event["data"]["object"]
    invoice_id = invoice.get("id")
    signal_subscription_id = _invoice_metadata(invoice).get("signal_subscription_id")
    amount_paid = invoice.get("amount_paid") or 0

    if not invoice_id or not signal_subscription_id or amount_paid <= 0:
        return {"status": "ignored"}

    # Prevent double counting when Stripe retries the event
    existing = await db.execute(
        select(ProviderEarning.uuid).where(ProviderEarning.stripe_invoice_id == invoice_id)
    )
    if existing.scalar_one_or_none():
        return {"status": "already_processed"}

    subscription = await db.get(SignalSubscription, signal_subscription_id)
    if not subscription:
        logger.warning(f"Invoice {invoice_id} references unknown signal subscription {signal_subscription_id}")
        return {"status": "ignored"}

    earned_at = datetime.utcfromtimestamp(invoice["created"]) if invoice.get("created") else None

    try:
        earning = await record_earning(
            db,
            subscription.provider_id,
            amount_paid,
            subscription_id=subscription.uuid,
            currency=invoice.get("currency"),
            earned_at=earned_at,
            stripe_invoice_id=invoice_id,
        )
    except UnsupportedCurrency as e:
        logger.warning(f"Ignoring invoice {invoice_id}: {e.message}")
        return {"status": "ignored"}

    if invoice.get("subscription") and not subscription.stripe_subscription_id:
        subscription.stripe_subscription_id = invoice["subscription"]

    await db.commit()

    return {"status": "processed", "earning_id": earning.uuid}
