"""Signal subscription model: a user paying a provider for their signals."""
from datetime import datetime
from uuid import uuid4
from sqlalchemy import String, Integer, DateTime, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.database import Base


class SignalSubscription(Base):
    """Subscription of a user to a signal provider."""

    __tablename__ = "signal_subscriptions"

    # Primary key
    uuid: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))

    # Subscription info
    status: Mapped[str] = mapped_column(String(50), default="active")  # "active", "cancelled"
    price: Mapped[int] = mapped_column(Integer, nullable=False)  # pence per month
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="GBP")

    # Stripe info
    stripe_subscription_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Foreign keys
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.uuid"), nullable=False)
    provider_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.uuid"), nullable=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user: Mapped["User"] = relationship("User", foreign_keys=[user_id])
    provider: Mapped["User"] = relationship("User", foreign_keys=[provider_id])

    # Indexes
    __table_args__ = (
        Index("idx_signal_subscription_user_id", "user_id"),
        Index("idx_signal_subscription_provider_id", "provider_id"),
        Index("idx_signal_subscription_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<SignalSubscription(uuid={self.uuid}, user_id={self.user_id}, provider_id={self.provider_id}, status={self.status})>"
