from typing import TYPE_CHECKING

from sqlalchemy import select

from komiut_store.payments.models import Payment
from komiut_store.payments.schemas import PaymentCreate
from komiut_store.subscriptions import Subscription

if TYPE_CHECKING:
    from komiut_store.store import Store


class PaymentService:
    def __init__(self, store: "Store"):
        self.store = store

    async def list_by_user_id(self, user_id: int, limit: int | None = None) -> list[Payment]:
        """User's payments, most recent transaction first."""
        stmt = (
            select(Payment)
            .where(Payment.user_id == user_id)
            .order_by(Payment.transaction_date.desc(), Payment.id.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        async with self.store.session() as db:
            result = await db.execute(stmt)
            return list(result.scalars().all())

    async def list_recent(self, user_id: int, limit: int = 10) -> list[Payment]:
        return await self.list_by_user_id(user_id, limit=limit)

    async def get_by_reference(self, reference_id: str) -> Payment | None:
        async with self.store.session() as db:
            result = await db.execute(
                select(Payment).where(Payment.reference_id == reference_id)
            )
            return result.scalar_one_or_none()

    async def watch_by_user_id(self, user_id: int) -> Subscription[list[Payment]]:
        return await self.store.subscriptions.subscribe(
            {Payment.__tablename__}, lambda: self.list_by_user_id(user_id)
        )

    async def create(self, data: PaymentCreate) -> int:
        async with self.store.transaction() as db:
            payment = Payment(**data.model_dump())
            db.add(payment)
            await db.flush()
            return payment.id
