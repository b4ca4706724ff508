"""Provider earning model: one row per billing event attributed to a provider."""
import enum
from datetime import datetime
from uuid import uuid4

from sqlalchemy import String, Integer, DateTime, ForeignKey, Index, CheckConstraint, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class EarningStatus(str, enum.Enum):
    """Lifecycle of an earnings row."""

    AVAILABLE = "available"
    PENDING_PAYOUT = "pending_payout"
    PAID_OUT = "paid_out"


class ProviderEarning(Base):
    """Records the revenue split of a subscription payment for a provider.

    All amounts are stored in minor currency units (pence).
    ``net_amount + fee_amount == gross_amount`` holds for every row.
    """
    __tablename__ = "provider_earnings"

    uuid: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    provider_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.uuid"), nullable=False)
    subscription_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("signal_subscriptions.uuid"), nullable=True
    )
    gross_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    fee_percentage: Mapped[int] = mapped_column(Integer, nullable=False, default=15)
    fee_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    net_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="GBP")
    status: Mapped[EarningStatus] = mapped_column(
        SAEnum(
            EarningStatus,
            name="earning_status",
            native_enum=False,
            length=20,
            values_callable=lambda e: [member.value for member in e],
        ),
        nullable=False,
        default=EarningStatus.AVAILABLE,
    )

    # Set while the row is reserved by (or paid out through) a payout
    payout_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("signal_payouts.uuid"), nullable=True)
    stripe_invoice_id: Mapped[str | None] = mapped_column(String(255), nullable=True, unique=True)

    earned_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    # Relationships
    provider = relationship("User", foreign_keys=[provider_id])
    subscription = relationship("SignalSubscription", foreign_keys=[subscription_id])
    payout = relationship("SignalPayout", foreign_keys=[payout_id], back_populates="earnings")

    __table_args__ = (
        Index("idx_provider_earning_provider_status", "provider_id", "status"),
        Index("idx_provider_earning_earned_at", "earned_at"),
        Index("idx_provider_earning_payout_id", "payout_id"),
        CheckConstraint("net_amount + fee_amount = gross_amount", name="ck_provider_earning_split"),
        CheckConstraint("net_amount >= 0 AND fee_amount >= 0", name="ck_provider_earning_non_negative"),
    )

    def __repr__(self) -> str:
        return (
            f"<ProviderEarning(uuid={self.uuid}, provider_id={self.provider_id}, "
            f"net_amount={self.net_amount}, status={self.status})>"
        )
