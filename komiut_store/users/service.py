from typing import TYPE_CHECKING

from sqlalchemy import delete, select, update

from komiut_store.auth.security import (
    SessionTokens,
    hash_password,
    needs_rehash,
    verify_password,
)
from komiut_store.common.types import utcnow
from komiut_store.users.models import User
from komiut_store.users.schemas import ProfileUpdate, UserCreate, UserRegister, UserUpdate
from komiut_store.wallets.models import Wallet

if TYPE_CHECKING:
    from komiut_store.store import Store


class UserService:
    def __init__(self, store: "Store"):
        self.store = store

    async def get_by_email(self, email: str) -> User | None:
        async with self.store.session() as db:
            result = await db.execute(select(User).where(User.email == email.lower()))
            return result.scalar_one_or_none()

    async def get_by_id(self, user_id: int) -> User | None:
        async with self.store.session() as db:
            return await db.get(User, user_id)

    async def create(self, data: UserCreate) -> int:
        async with self.store.transaction() as db:
            user = User(
                email=data.email.lower(),
                full_name=data.full_name,
                phone=data.phone,
                profile_image=data.profile_image,
                password_hash=data.password_hash,
            )
            db.add(user)
            await db.flush()
            return user.id

    async def register(self, data: UserRegister) -> int:
        """Create a user and their wallet together (local sign-up)."""
        async with self.store.transaction() as db:
            user = User(
                email=data.email.lower(),
                full_name=data.full_name,
                phone=data.phone,
                password_hash=hash_password(data.password),
            )
            db.add(user)
            await db.flush()  # Get user.id

            db.add(
                Wallet(
                    user_id=user.id,
                    balance=data.initial_balance,
                    currency=self.store.settings.default_currency,
                )
            )
            return user.id

    async def authenticate(self, email: str, password: str) -> User | None:
        """Local credential check. Returns the user on a password match."""
        user = await self.get_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            return None

        # Rehash password if needed (Argon2 parameter upgrade)
        if needs_rehash(user.password_hash):
            new_hash = hash_password(password)
            async with self.store.transaction() as db:
                await db.execute(
                    update(User).where(User.id == user.id).values(password_hash=new_hash)
                )
            user.password_hash = new_hash

        return user

    async def sign_in(self, email: str, password: str) -> tuple[User, SessionTokens] | None:
        """Check credentials and open a session; None on a failed check."""
        user = await self.authenticate(email, password)
        if user is None:
            return None
        tokens = await self.store.auth_tokens.issue(user.id)
        return user, tokens

    async def update(self, user_id: int, data: UserUpdate) -> bool:
        async with self.store.transaction() as db:
            result = await db.execute(
                update(User)
                .where(User.id == user_id)
                .values(
                    email=data.email.lower(),
                    full_name=data.full_name,
                    phone=data.phone,
                    profile_image=data.profile_image,
                    password_hash=data.password_hash,
                    updated_at=utcnow(),
                )
            )
            return result.rowcount > 0

    async def update_profile(self, user_id: int, data: ProfileUpdate) -> bool:
        # Only the fields that were given are written
        values = data.model_dump(exclude_none=True)
        values["updated_at"] = utcnow()
        async with self.store.transaction() as db:
            result = await db.execute(update(User).where(User.id == user_id).values(**values))
            return result.rowcount > 0

    async def delete(self, user_id: int) -> bool:
        """Hard delete; wallet, trips, payments, token and favorites cascade."""
        async with self.store.transaction() as db:
            result = await db.execute(delete(User).where(User.id == user_id))
            return result.rowcount > 0
