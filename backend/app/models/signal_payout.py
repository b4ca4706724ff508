"""Signal payout model for provider withdrawal requests."""
import enum
from datetime import datetime
from uuid import uuid4

from sqlalchemy import String, Integer, DateTime, ForeignKey, Index, CheckConstraint, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class PayoutStatus(str, enum.Enum):
    """Lifecycle of a payout request."""

    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


class SignalPayout(Base):
    """A provider's request to withdraw part of their available balance.

    The transfer itself happens on the payment rail; this row only tracks it.
    """

    __tablename__ = "signal_payouts"

    uuid: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    provider_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.uuid"), nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="GBP")
    stripe_transfer_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[PayoutStatus] = mapped_column(
        SAEnum(
            PayoutStatus,
            name="payout_status",
            native_enum=False,
            length=20,
            values_callable=lambda e: [member.value for member in e],
        ),
        nullable=False,
        default=PayoutStatus.PENDING,
    )
    period_start: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    period_end: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    # Relationships
    provider = relationship("User", foreign_keys=[provider_id])
    earnings = relationship("ProviderEarning", back_populates="payout", foreign_keys="ProviderEarning.payout_id")

    __table_args__ = (
        Index("idx_signal_payout_provider_id", "provider_id"),
        Index("idx_signal_payout_status", "status"),
        CheckConstraint("amount > 0", name="ck_signal_payout_amount_positive"),
    )

    def __repr__(self) -> str:
        return f"<SignalPayout(uuid={self.uuid}, provider_id={self.provider_id}, amount={self.amount}, status={self.status})>"
