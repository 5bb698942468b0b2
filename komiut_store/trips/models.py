import enum
from datetime import datetime

from sqlalchemy import CheckConstraint, Float, ForeignKey, Index, Integer, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from komiut_store.common.types import UTCDateTime, utcnow
from komiut_store.database import Base


class TripStatus(str, enum.Enum):
    COMPLETED = "completed"
    FAILED = "failed"


class Trip(Base):
    __tablename__ = "trips"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    route_name: Mapped[str] = mapped_column(Text, nullable=False)
    from_location: Mapped[str] = mapped_column(Text, nullable=False)
    to_location: Mapped[str] = mapped_column(Text, nullable=False)
    fare: Mapped[float] = mapped_column(Float, nullable=False)
    status: Mapped[str] = mapped_column(Text, nullable=False)
    trip_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utcnow, server_default=func.now(), nullable=False
    )

    __table_args__ = (
        CheckConstraint("status IN ('completed', 'failed')", name="check_trip_status"),
        Index("idx_trips_user", "user_id"),
        {"sqlite_autoincrement": True},
    )
