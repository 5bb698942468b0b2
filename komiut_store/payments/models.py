import enum
from datetime import datetime

from sqlalchemy import CheckConstraint, Float, ForeignKey, Index, Integer, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from komiut_store.common.types import UTCDateTime, utcnow
from komiut_store.database import Base


class PaymentType(str, enum.Enum):
    TOP_UP = "top-up"
    TRIP = "trip"
    REFUND = "refund"


class PaymentStatus(str, enum.Enum):
    COMPLETED = "completed"
    FAILED = "failed"
    PENDING = "pending"


class Payment(Base):
    __tablename__ = "payments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    type: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    reference_id: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    transaction_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utcnow, server_default=func.now(), nullable=False
    )

    __table_args__ = (
        CheckConstraint("type IN ('top-up', 'trip', 'refund')", name="check_payment_type"),
        CheckConstraint(
            "status IN ('completed', 'failed', 'pending')", name="check_payment_status"
        ),
        Index("idx_payments_user", "user_id"),
        {"sqlite_autoincrement": True},
    )
