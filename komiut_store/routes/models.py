from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Float,
    ForeignKey,
    Index,
    Integer,
    Text,
    UniqueConstraint,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from komiut_store.common.types import UTCDateTime, utcnow
from komiut_store.database import Base


class Route(Base):
    """Bus route reference data. Stops are kept in travel order."""

    __tablename__ = "bus_routes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    start_point: Mapped[str] = mapped_column(Text, nullable=False)
    end_point: Mapped[str] = mapped_column(Text, nullable=False)
    stops_count: Mapped[int] = mapped_column(Integer, nullable=False)
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    base_fare: Mapped[float] = mapped_column(Float, nullable=False)
    fare_per_stop: Mapped[float] = mapped_column(
        Float, default=5.0, server_default="5.0", nullable=False
    )
    currency: Mapped[str] = mapped_column(
        Text, default="KES", server_default="KES", nullable=False
    )
    stops: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default=text("1"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utcnow, server_default=func.now(), nullable=False
    )

    __table_args__ = {"sqlite_autoincrement": True}


class FavoriteRoute(Base):
    __tablename__ = "favorite_routes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    route_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("bus_routes.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utcnow, server_default=func.now(), nullable=False
    )

    __table_args__ = (
        UniqueConstraint("user_id", "route_id", name="uq_favorite_user_route"),
        Index("idx_favorite_routes_user", "user_id"),
        {"sqlite_autoincrement": True},
    )
