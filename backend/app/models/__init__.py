"""Database models for the Chart Signals API."""
from app.models.user import User
from app.models.signal_subscription import SignalSubscription
from app.models.signal_payout import SignalPayout, PayoutStatus
from app.models.provider_earning import ProviderEarning, EarningStatus

__all__ = [
    "User",
    "SignalSubscription",
    "SignalPayout",
    "PayoutStatus",
    "ProviderEarning",
    "EarningStatus",
]
