"""Provider earnings ledger: revenue split, balances, payouts and settlement.

Balances are never cached. Every read sums the ledger rows, and every write
that moves money between statuses runs under row locks inside the caller's
transaction. Service functions only flush; the router owns the commit.

Moving a partial amount to a payout splits the last earnings row it touches,
so the available balance always drops by exactly the requested amount while
total earned and total fees stay unchanged.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import AsyncIterator, List, Optional

from sqlalchemy import select, func, desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.user import User
from app.models.provider_earning import ProviderEarning, EarningStatus
from app.models.signal_payout import SignalPayout, PayoutStatus
from app.services.currency import format_minor_units

logger = logging.getLogger(__name__)


class LedgerError(Exception):
    """Base class for earnings ledger errors."""

    status_code = 400
    code = "ledger_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidAmount(LedgerError):
    code = "invalid_amount"


class InsufficientBalance(LedgerError):
    code = "insufficient_balance"


class UnsupportedCurrency(LedgerError):
    code = "unsupported_currency"


class ProviderNotFound(LedgerError):
    status_code = 404
    code = "provider_not_found"


class PayoutNotFound(LedgerError):
    status_code = 404
    code = "payout_not_found"


class InvalidPayoutTransition(LedgerError):
    status_code = 409
    code = "invalid_payout_transition"


class PersistenceError(LedgerError):
    status_code = 500
    code = "persistence_error"


@dataclass(frozen=True)
class FeeSplit:
    """Gross amount divided into platform fee and provider net."""

    gross_amount: int
    fee_percentage: int
    fee_amount: int
    net_amount: int


@dataclass(frozen=True)
class BalanceSummary:
    """Aggregated balances of one provider, all in minor units."""

    available_balance: int
    pending_balance: int
    total_earned: int
    total_fees: int


def calculate_fee(gross_amount: int, fee_percentage: int) -> int:
    """Platform fee for ``gross_amount``, rounded half up to the nearest minor unit."""
    return (gross_amount * fee_percentage + 50) // 100


def split_gross(gross_amount: int, fee_percentage: int) -> FeeSplit:
    """Apply the revenue split to a gross payment."""
    fee_amount = calculate_fee(gross_amount, fee_percentage)
    return FeeSplit(
        gross_amount=gross_amount,
        fee_percentage=fee_percentage,
        fee_amount=fee_amount,
        net_amount=gross_amount - fee_amount,
    )


def gross_for_net(net_amount: int, fee_percentage: int) -> int:
    """Smallest gross amount whose split leaves exactly ``net_amount``.

    For percentages below 100 the net grows by zero or one per extra minor
    unit of gross, so every net value is reachable.
    """
    if fee_percentage >= 100:
        raise ValueError("No gross amount yields a positive net at a 100% fee")
    gross = net_amount * 100 // (100 - fee_percentage)
    while split_gross(gross, fee_percentage).net_amount < net_amount:
        gross += 1
    while gross > 0 and split_gross(gross - 1, fee_percentage).net_amount >= net_amount:
        gross -= 1
    return gross


def _ensure_positive_amount(amount, label: str = "Amount") -> None:
    """Reject anything that is not a strictly positive integer."""
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidAmount(f"{label} must be a whole number of minor currency units")
    if amount <= 0:
        raise InvalidAmount(f"{label} must be greater than zero")


async def record_earning(
    db: AsyncSession,
    provider_id: str,
    gross_amount: int,
    subscription_id: Optional[str] = None,
    fee_percentage: Optional[int] = None,
    currency: Optional[str] = None,
    earned_at: Optional[datetime] = None,
    stripe_invoice_id: Optional[str] = None,
) -> ProviderEarning:
    """
    Attribute a subscription payment to a provider.

    Splits ``gross_amount`` into platform fee and provider net and stores
    the result as an ``available`` earnings row. The ledger holds a single
    currency; ``currency`` is matched case-insensitively against it.
    """
    _ensure_positive_amount(gross_amount, "Gross amount")
    if fee_percentage is None:
        fee_percentage = settings.PLATFORM_FEE_PERCENT
    if isinstance(fee_percentage, bool) or not isinstance(fee_percentage, int) or not 0 <= fee_percentage <= 100:
        raise InvalidAmount("Fee percentage must be a whole number between 0 and 100")

    currency = (currency or settings.DEFAULT_CURRENCY).upper()
    if currency != settings.DEFAULT_CURRENCY:
        raise UnsupportedCurrency(
            f"Earnings in {currency} cannot be recorded, the ledger currency is {settings.DEFAULT_CURRENCY}"
        )

    provider = await db.get(User, provider_id)
    if provider is None:
        raise ProviderNotFound("Provider not found")

    split = split_gross(gross_amount, fee_percentage)
    earning = ProviderEarning(
        provider_id=provider_id,
        subscription_id=subscription_id,
        gross_amount=split.gross_amount,
        fee_percentage=split.fee_percentage,
        fee_amount=split.fee_amount,
        net_amount=split.net_amount,
        currency=currency,
        status=EarningStatus.AVAILABLE,
        stripe_invoice_id=stripe_invoice_id,
        earned_at=earned_at or datetime.utcnow(),
    )
    db.add(earning)
    await db.flush()

    logger.info(
        f"Recorded earning {earning.uuid} for provider {provider_id}: "
        f"gross={split.gross_amount} fee={split.fee_amount} net={split.net_amount}"
    )
    return earning


async def get_balance_summary(db: AsyncSession, provider_id: str) -> BalanceSummary:
    """Sum a provider's ledger rows grouped by status."""
    result = await db.execute(
        select(
            ProviderEarning.status,
            func.coalesce(func.sum(ProviderEarning.net_amount), 0),
            func.coalesce(func.sum(ProviderEarning.gross_amount), 0),
            func.coalesce(func.sum(ProviderEarning.fee_amount), 0),
        )
        .where(ProviderEarning.provider_id == provider_id)
        .group_by(ProviderEarning.status)
    )

    available = pending = total_earned = total_fees = 0
    for status, net_total, gross_total, fee_total in result.all():
        if status == EarningStatus.AVAILABLE:
            available = int(net_total)
        elif status == EarningStatus.PENDING_PAYOUT:
            pending = int(net_total)
        total_earned += int(gross_total)
        total_fees += int(fee_total)

    return BalanceSummary(
        available_balance=available,
        pending_balance=pending,
        total_earned=total_earned,
        total_fees=total_fees,
    )


async def count_earnings(db: AsyncSession, provider_id: str) -> int:
    result = await db.execute(
        select(func.count(ProviderEarning.uuid)).where(ProviderEarning.provider_id == provider_id)
    )
    return result.scalar() or 0


async def list_earnings(
    db: AsyncSession,
    provider_id: str,
    skip: int = 0,
    limit: int = 50,
) -> List[ProviderEarning]:
    """One page of a provider's earnings, newest first."""
    result = await db.execute(
        select(ProviderEarning)
        .where(ProviderEarning.provider_id == provider_id)
        .order_by(
            desc(ProviderEarning.earned_at),
            desc(ProviderEarning.created_at),
            desc(ProviderEarning.uuid),
        )
        .offset(skip)
        .limit(limit)
    )
    return list(result.scalars().all())


async def iter_earnings(
    db: AsyncSession,
    provider_id: str,
    page_size: int = 100,
) -> AsyncIterator[ProviderEarning]:
    """Lazily walk every earnings row of a provider, newest first, page by page."""
    skip = 0
    while True:
        page = await list_earnings(db, provider_id, skip=skip, limit=page_size)
        for earning in page:
            yield earning
        if len(page) < page_size:
            return
        skip += page_size


async def list_payouts(db: AsyncSession, provider_id: str) -> List[SignalPayout]:
    result = await db.execute(
        select(SignalPayout)
        .where(SignalPayout.provider_id == provider_id)
        .order_by(desc(SignalPayout.created_at), desc(SignalPayout.uuid))
    )
    return list(result.scalars().all())


def _split_off(earning: ProviderEarning, net_part: int, payout_id: str) -> ProviderEarning:
    """Carve ``net_part`` out of ``earning`` into a new row reserved for a payout.

    The carved row gets the smallest gross that yields ``net_part`` at the
    row's fee percentage; the original keeps whatever is left, so the pair
    always sums to the original gross, fee and net. The row left behind can
    therefore carry a fee one minor unit away from ``calculate_fee`` of its
    new gross.
    """
    fee_part = gross_for_net(net_part, earning.fee_percentage) - net_part
    fee_part = min(fee_part, earning.fee_amount)

    earning.gross_amount -= net_part + fee_part
    earning.fee_amount -= fee_part
    earning.net_amount -= net_part

    return ProviderEarning(
        provider_id=earning.provider_id,
        subscription_id=earning.subscription_id,
        gross_amount=net_part + fee_part,
        fee_percentage=earning.fee_percentage,
        fee_amount=fee_part,
        net_amount=net_part,
        currency=earning.currency,
        status=EarningStatus.PENDING_PAYOUT,
        payout_id=payout_id,
        earned_at=earning.earned_at,
    )


async def request_payout(db: AsyncSession, provider_id: str, amount: int) -> SignalPayout:
    """
    Withdraw ``amount`` from a provider's available balance.

    - Locks the provider row so concurrent requests for the same provider
      run one after the other
    - Re-reads the available earnings under lock and validates the amount
    - Creates a pending payout and reserves earnings oldest first

    Raises InvalidAmount or InsufficientBalance without writing anything.
    """
    _ensure_positive_amount(amount)

    result = await db.execute(
        select(User).where(User.uuid == provider_id).with_for_update()
    )
    provider = result.scalar_one_or_none()
    if provider is None:
        raise ProviderNotFound("Provider not found")

    result = await db.execute(
        select(ProviderEarning)
        .where(
            ProviderEarning.provider_id == provider_id,
            ProviderEarning.status == EarningStatus.AVAILABLE,
        )
        .order_by(ProviderEarning.earned_at, ProviderEarning.created_at, ProviderEarning.uuid)
        .with_for_update()
    )
    available_rows = list(result.scalars().all())
    available_balance = sum(row.net_amount for row in available_rows)

    if amount > available_balance:
        logger.warning(
            f"Payout of {amount} rejected for provider {provider_id}: available balance is {available_balance}"
        )
        raise InsufficientBalance(
            f"You can only withdraw up to {format_minor_units(available_balance, settings.DEFAULT_CURRENCY)}"
        )

    try:
        payout = SignalPayout(
            provider_id=provider_id,
            amount=amount,
            currency=settings.DEFAULT_CURRENCY,
            status=PayoutStatus.PENDING,
            period_start=available_rows[0].earned_at,
            period_end=datetime.utcnow(),
        )
        db.add(payout)
        await db.flush()

        remaining = amount
        for earning in available_rows:
            if remaining == 0:
                break
            if earning.net_amount <= remaining:
                earning.status = EarningStatus.PENDING_PAYOUT
                earning.payout_id = payout.uuid
                remaining -= earning.net_amount
            else:
                db.add(_split_off(earning, remaining, payout.uuid))
                remaining = 0

        await db.flush()
    except SQLAlchemyError as e:
        logger.exception(f"Failed to persist payout request for provider {provider_id}")
        raise PersistenceError("Could not save the payout request, please try again") from e

    logger.info(f"Payout {payout.uuid} of {amount} requested by provider {provider_id}")
    return payout


def payout_confirmation_message(payout: SignalPayout) -> str:
    return (
        f"Payout request for {format_minor_units(payout.amount, payout.currency)} submitted. "
        f"Funds will be transferred once the payout has been processed."
    )


async def settle_payout(
    db: AsyncSession,
    payout_id: str,
    outcome: PayoutStatus,
    stripe_transfer_id: Optional[str] = None,
) -> SignalPayout:
    """
    Record the outcome of a pending payout.

    - ``paid``: reserved earnings become ``paid_out``
    - ``failed``: reserved earnings return to ``available``
    """
    if outcome not in (PayoutStatus.PAID, PayoutStatus.FAILED):
        raise InvalidPayoutTransition(f"A payout cannot be settled as '{outcome.value}'")

    result = await db.execute(
        select(SignalPayout).where(SignalPayout.uuid == payout_id).with_for_update()
    )
    payout = result.scalar_one_or_none()
    if payout is None:
        raise PayoutNotFound("Payout not found")

    if payout.status != PayoutStatus.PENDING:
        raise InvalidPayoutTransition(f"Payout is already {payout.status.value}")

    result = await db.execute(
        select(ProviderEarning)
        .where(
            ProviderEarning.payout_id == payout.uuid,
            ProviderEarning.status == EarningStatus.PENDING_PAYOUT,
        )
        .with_for_update()
    )
    reserved = result.scalars().all()

    for earning in reserved:
        if outcome == PayoutStatus.PAID:
            earning.status = EarningStatus.PAID_OUT
        else:
            earning.status = EarningStatus.AVAILABLE
            earning.payout_id = None

    payout.status = outcome
    if stripe_transfer_id:
        payout.stripe_transfer_id = stripe_transfer_id

    try:
        await db.flush()
    except SQLAlchemyError as e:
        logger.exception(f"Failed to persist settlement of payout {payout_id}")
        raise PersistenceError("Could not save the payout settlement, please try again") from e

    logger.info(f"Payout {payout.uuid} settled as {outcome.value} ({len(reserved)} earnings rows)")
    return payout
