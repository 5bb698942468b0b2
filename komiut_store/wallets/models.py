from datetime import datetime

from sqlalchemy import Float, ForeignKey, Index, Integer, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from komiut_store.common.types import UTCDateTime, utcnow
from komiut_store.database import Base


class Wallet(Base):
    __tablename__ = "wallets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    balance: Mapped[float] = mapped_column(
        Float, default=0.0, server_default="0", nullable=False
    )
    points: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0", nullable=False
    )  # added in schema v2
    currency: Mapped[str] = mapped_column(
        Text, default="KES", server_default="KES", nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utcnow, server_default=func.now(), nullable=False
    )

    __table_args__ = (
        # one wallet per user, schema v6
        Index("uq_wallets_user_id", "user_id", unique=True),
        {"sqlite_autoincrement": True},
    )
