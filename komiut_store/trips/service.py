from typing import TYPE_CHECKING

from sqlalchemy import select

from komiut_store.subscriptions import Subscription
from komiut_store.trips.models import Trip
from komiut_store.trips.schemas import TripCreate

if TYPE_CHECKING:
    from komiut_store.store import Store


class TripService:
    def __init__(self, store: "Store"):
        self.store = store

    async def list_by_user_id(self, user_id: int, limit: int | None = None) -> list[Trip]:
        """User's trips, most recent trip date first."""
        stmt = (
            select(Trip)
            .where(Trip.user_id == user_id)
            .order_by(Trip.trip_date.desc(), Trip.id.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        async with self.store.session() as db:
            result = await db.execute(stmt)
            return list(result.scalars().all())

    async def list_recent(self, user_id: int, limit: int = 10) -> list[Trip]:
        return await self.list_by_user_id(user_id, limit=limit)

    async def watch_by_user_id(self, user_id: int) -> Subscription[list[Trip]]:
        return await self.store.subscriptions.subscribe(
            {Trip.__tablename__}, lambda: self.list_by_user_id(user_id)
        )

    async def create(self, data: TripCreate) -> int:
        async with self.store.transaction() as db:
            trip = Trip(**data.model_dump())
            db.add(trip)
            await db.flush()
            return trip.id
