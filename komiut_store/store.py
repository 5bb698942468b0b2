import asyncio
import logging
import re
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from komiut_store.auth.service import AuthTokenService
from komiut_store.booking.service import BookingService
from komiut_store.common.exceptions import (
    ConstraintViolation,
    MigrationError,
    StorageError,
    StoreClosedError,
)
from komiut_store.config import Settings, get_settings
from komiut_store.database import build_engine, build_sessionmaker, cascade_tables
from komiut_store.migrations import migrate
from komiut_store.payments.service import PaymentService
from komiut_store.routes.service import FavoriteRouteService, RouteService
from komiut_store.subscriptions import SubscriptionRegistry
from komiut_store.trips.service import TripService
from komiut_store.users.service import UserService
from komiut_store.wallets.service import WalletService

logger = logging.getLogger(__name__)

_CONSTRAINT_TABLE = re.compile(r"constraint failed: (\w+)\.")


def _constraint_table(exc: IntegrityError) -> str | None:
    match = _CONSTRAINT_TABLE.search(str(exc.orig))
    return match.group(1) if match else None


class Store:
    """Handle on the on-device database file.

    Reads go through ``session()``; every write goes through
    ``transaction()``, which serialises writers, commits or rolls back as a
    unit and then notifies live subscriptions of the tables it changed.
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self._engine: AsyncEngine | None = None
        self._sessionmaker: async_sessionmaker | None = None
        self._write_lock = asyncio.Lock()
        self.subscriptions = SubscriptionRegistry()

        self.users = UserService(self)
        self.wallets = WalletService(self)
        self.trips = TripService(self)
        self.payments = PaymentService(self)
        self.auth_tokens = AuthTokenService(self)
        self.routes = RouteService(self)
        self.favorites = FavoriteRouteService(self)
        self.booking = BookingService(self)

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    async def open(self, schema_version: int | None = None) -> "Store":
        if self._engine is not None:
            return self

        version = schema_version or self.settings.schema_version
        try:
            self.settings.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise MigrationError(None, version) from exc

        engine = build_engine(self.settings)
        try:
            async with engine.begin() as conn:
                found = await conn.run_sync(migrate, version)
        except Exception as exc:
            await engine.dispose()
            logger.error("Opening store at %s failed", self.settings.database_path)
            raise MigrationError(None, version) from exc

        self._engine = engine
        self._sessionmaker = build_sessionmaker(engine)
        logger.info(
            "Opened store %s (schema version %s, was %s)",
            self.settings.database_path,
            version,
            found,
        )
        return self

    async def close(self) -> None:
        if self._engine is None:
            return
        self.subscriptions.cancel_all()
        # wait for an in-flight write to finish before releasing the file
        async with self._write_lock:
            engine, self._engine, self._sessionmaker = self._engine, None, None
            await engine.dispose()
        logger.info("Closed store %s", self.settings.database_path)

    async def __aenter__(self) -> "Store":
        return await self.open()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _require_open(self) -> async_sessionmaker:
        if self._sessionmaker is None:
            raise StoreClosedError()
        return self._sessionmaker

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Read-only session; nothing written through it is committed."""
        maker = self._require_open()
        try:
            async with maker() as db:
                yield db
        except SQLAlchemyError as exc:
            raise StorageError() from exc

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """Exclusive write scope: all statements land together or not at all."""
        async with self._write_lock:
            maker = self._require_open()
            db = maker()
            try:
                yield db
                await db.commit()
                tracked = db.sync_session
                changed = set(tracked.written_tables)
                changed |= cascade_tables(tracked.deleted_from_tables)
            except IntegrityError as exc:
                await db.rollback()
                raise ConstraintViolation(table=_constraint_table(exc)) from exc
            except SQLAlchemyError as exc:
                await db.rollback()
                raise StorageError() from exc
            except BaseException:
                await db.rollback()
                raise
            finally:
                await db.close()

        await self.subscriptions.notify(changed)


class StoreManager:
    """Owns the single store handle of the process.

    ``open()`` hands out the same ``Store`` until ``close()`` is called.
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self._store: Store | None = None
        self._lock = asyncio.Lock()

    async def open(self) -> Store:
        async with self._lock:
            if self._store is None:
                self._store = await Store(self.settings).open()
            return self._store

    async def close(self) -> None:
        async with self._lock:
            if self._store is not None:
                await self._store.close()
                self._store = None
