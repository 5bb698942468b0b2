from typing import TYPE_CHECKING

from sqlalchemy import delete, exists, func, select

from komiut_store.routes.models import FavoriteRoute, Route
from komiut_store.routes.schemas import RouteCreate
from komiut_store.subscriptions import Subscription

if TYPE_CHECKING:
    from komiut_store.store import Store


class RouteService:
    def __init__(self, store: "Store"):
        self.store = store

    async def list_active(self) -> list[Route]:
        async with self.store.session() as db:
            result = await db.execute(
                select(Route).where(Route.is_active == True).order_by(Route.name)  # noqa: E712
            )
            return list(result.scalars().all())

    async def get_by_id(self, route_id: int) -> Route | None:
        async with self.store.session() as db:
            return await db.get(Route, route_id)

    async def get_by_name(self, name: str) -> Route | None:
        async with self.store.session() as db:
            result = await db.execute(select(Route).where(Route.name == name))
            return result.scalar_one_or_none()

    async def create(self, data: RouteCreate) -> int:
        async with self.store.transaction() as db:
            route = Route(**data.model_dump())
            db.add(route)
            await db.flush()
            return route.id

    async def has_any(self) -> bool:
        """Whether any active route exists, without loading rows."""
        async with self.store.session() as db:
            count = await db.scalar(
                select(func.count(Route.id)).where(Route.is_active == True)  # noqa: E712
            )
            return (count or 0) > 0

    async def has_rows(self) -> bool:
        """Whether the route table holds anything at all, inactive routes included."""
        async with self.store.session() as db:
            count = await db.scalar(select(func.count(Route.id)))
            return (count or 0) > 0


class FavoriteRouteService:
    def __init__(self, store: "Store"):
        self.store = store

    async def list_for_user(self, user_id: int) -> list[Route]:
        async with self.store.session() as db:
            result = await db.execute(
                select(Route)
                .join(FavoriteRoute, FavoriteRoute.route_id == Route.id)
                .where(FavoriteRoute.user_id == user_id)
                .order_by(FavoriteRoute.created_at.desc(), FavoriteRoute.id.desc())
            )
            return list(result.scalars().all())

    async def is_favorite(self, user_id: int, route_id: int) -> bool:
        async with self.store.session() as db:
            result = await db.execute(
                select(
                    exists().where(
                        FavoriteRoute.user_id == user_id,
                        FavoriteRoute.route_id == route_id,
                    )
                )
            )
            return bool(result.scalar())

    async def add(self, user_id: int, route_id: int) -> int:
        """Favorite a route. A pair that is already favorited raises ConstraintViolation."""
        async with self.store.transaction() as db:
            favorite = FavoriteRoute(user_id=user_id, route_id=route_id)
            db.add(favorite)
            await db.flush()
            return favorite.id

    async def remove(self, user_id: int, route_id: int) -> int:
        async with self.store.transaction() as db:
            result = await db.execute(
                delete(FavoriteRoute).where(
                    FavoriteRoute.user_id == user_id,
                    FavoriteRoute.route_id == route_id,
                )
            )
            return result.rowcount

    async def watch_favorite(self, user_id: int, route_id: int) -> Subscription[bool]:
        return await self.store.subscriptions.subscribe(
            {FavoriteRoute.__tablename__}, lambda: self.is_favorite(user_id, route_id)
        )
