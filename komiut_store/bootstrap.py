"""Idempotent first-run setup.

Both helpers check what is already stored instead of relying on an
in-process "seeded" flag, so calling them on every start is harmless.
"""

import logging
from typing import TYPE_CHECKING, Iterable

from komiut_store.routes.models import Route
from komiut_store.routes.schemas import RouteCreate
from komiut_store.wallets.schemas import WalletCreate

if TYPE_CHECKING:
    from komiut_store.store import Store

logger = logging.getLogger(__name__)


async def seed_routes(store: "Store", routes: Iterable[RouteCreate]) -> int:
    """Insert reference routes into an empty route table. Returns rows added."""
    if await store.routes.has_rows():
        return 0

    added = 0
    async with store.transaction() as db:
        for data in routes:
            db.add(Route(**data.model_dump()))
            added += 1
    logger.info("Seeded %d routes", added)
    return added


async def ensure_wallet(store: "Store", user_id: int, currency: str | None = None) -> int:
    """Id of the user's wallet, creating an empty one if they have none."""
    wallet = await store.wallets.get_by_user_id(user_id)
    if wallet is not None:
        return wallet.id
    return await store.wallets.create(
        WalletCreate(user_id=user_id, currency=currency or store.settings.default_currency)
    )
