import logging
from typing import TYPE_CHECKING

from sqlalchemy import func, select, update

from komiut_store.common.types import utcnow
from komiut_store.payments.models import Payment, PaymentStatus, PaymentType
from komiut_store.payments.references import generate_reference_id
from komiut_store.subscriptions import Subscription
from komiut_store.wallets.models import Wallet
from komiut_store.wallets.schemas import WalletCreate

if TYPE_CHECKING:
    from komiut_store.store import Store

logger = logging.getLogger(__name__)


class WalletService:
    def __init__(self, store: "Store"):
        self.store = store

    async def get_by_user_id(self, user_id: int) -> Wallet | None:
        async with self.store.session() as db:
            result = await db.execute(select(Wallet).where(Wallet.user_id == user_id))
            return result.scalar_one_or_none()

    async def watch_by_user_id(self, user_id: int) -> Subscription[Wallet | None]:
        """Live wallet of a user; re-emitted after every write to wallets."""
        return await self.store.subscriptions.subscribe(
            {Wallet.__tablename__}, lambda: self.get_by_user_id(user_id)
        )

    async def create(self, data: WalletCreate) -> int:
        async with self.store.transaction() as db:
            wallet = Wallet(**data.model_dump())
            db.add(wallet)
            await db.flush()
            return wallet.id

    async def update_balance(self, wallet_id: int, new_balance: float) -> bool:
        if new_balance < 0:
            raise ValueError("Wallet balance cannot be negative")
        async with self.store.transaction() as db:
            result = await db.execute(
                update(Wallet)
                .where(Wallet.id == wallet_id)
                .values(balance=round(new_balance, 2), updated_at=utcnow())
            )
            return result.rowcount > 0

    async def top_up(
        self, user_id: int, amount: float, description: str | None = None
    ) -> Payment | None:
        """Credit the wallet and record a completed top-up payment together.

        Returns None when the user has no wallet.
        """
        if amount <= 0:
            raise ValueError("Top-up amount must be positive")

        now = utcnow()
        async with self.store.transaction() as db:
            result = await db.execute(
                update(Wallet)
                .where(Wallet.user_id == user_id)
                .values(
                    balance=func.round(Wallet.balance + round(amount, 2), 2),
                    updated_at=now,
                )
            )
            if result.rowcount == 0:
                return None

            payment = Payment(
                user_id=user_id,
                amount=round(amount, 2),
                type=PaymentType.TOP_UP.value,
                status=PaymentStatus.COMPLETED.value,
                description=description or "Wallet top-up",
                reference_id=generate_reference_id("TOP"),
                transaction_date=now,
            )
            db.add(payment)
            await db.flush()

        logger.info("Topped up wallet of user %s by %.2f", user_id, amount)
        return payment
