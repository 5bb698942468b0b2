from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from sqlalchemy import delete, exists, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from komiut_store.auth.models import AuthToken
from komiut_store.auth.schemas import AuthTokenUpsert
from komiut_store.auth.security import (
    DEFAULT_SESSION_TTL,
    SessionTokens,
    digest_token,
    new_session_tokens,
)
from komiut_store.common.types import utcnow

if TYPE_CHECKING:
    from komiut_store.store import Store


class AuthTokenService:
    """The single active session token per user."""

    def __init__(self, store: "Store"):
        self.store = store

    async def get_by_user_id(self, user_id: int) -> AuthToken | None:
        async with self.store.session() as db:
            result = await db.execute(select(AuthToken).where(AuthToken.user_id == user_id))
            return result.scalar_one_or_none()

    async def upsert(self, data: AuthTokenUpsert) -> None:
        """Store the user's token, replacing any previous one."""
        stmt = sqlite_insert(AuthToken).values(
            user_id=data.user_id,
            access_token=data.access_token,
            refresh_token=data.refresh_token,
            expires_at=data.expires_at,
            created_at=utcnow(),
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[AuthToken.user_id],
            set_={
                "access_token": stmt.excluded.access_token,
                "refresh_token": stmt.excluded.refresh_token,
                "expires_at": stmt.excluded.expires_at,
                "created_at": stmt.excluded.created_at,
            },
        )
        async with self.store.transaction() as db:
            await db.execute(stmt)

    async def delete_by_user_id(self, user_id: int) -> int:
        async with self.store.transaction() as db:
            result = await db.execute(delete(AuthToken).where(AuthToken.user_id == user_id))
            return result.rowcount

    async def is_valid(self, user_id: int, now: datetime | None = None) -> bool:
        """True iff the user has a token expiring strictly after ``now``."""
        if now is None:
            now = datetime.now(timezone.utc)
        async with self.store.session() as db:
            result = await db.execute(
                select(
                    exists().where(AuthToken.user_id == user_id, AuthToken.expires_at > now)
                )
            )
            return bool(result.scalar())

    async def issue(
        self, user_id: int, ttl: timedelta = DEFAULT_SESSION_TTL
    ) -> SessionTokens:
        """Start a new session for the user, replacing any previous one.

        The raw tokens are returned once; only their digests are stored.
        """
        tokens = new_session_tokens(ttl)
        await self.upsert(
            AuthTokenUpsert(
                user_id=user_id,
                access_token=digest_token(tokens.access_token),
                refresh_token=digest_token(tokens.refresh_token),
                expires_at=tokens.expires_at,
            )
        )
        return tokens

    async def verify_access_token(
        self, user_id: int, access_token: str, now: datetime | None = None
    ) -> bool:
        """True iff ``access_token`` is the user's current, unexpired token."""
        stored = await self.get_by_user_id(user_id)
        if stored is None or stored.access_token != digest_token(access_token):
            return False
        if now is None:
            now = datetime.now(timezone.utc)
        return stored.expires_at > now
