"""Credential helpers for local sign-in.

Passwords are hashed with Argon2id using the cost parameters from
``Settings``. Session tokens are opaque random strings handed to the caller
once; only their SHA-256 digests are written to ``auth_tokens``.
"""

import hashlib
import secrets
from datetime import datetime, timedelta
from functools import lru_cache
from typing import NamedTuple

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerifyMismatchError

from komiut_store.common.types import utcnow
from komiut_store.config import get_settings

DEFAULT_SESSION_TTL = timedelta(hours=12)


@lru_cache
def password_hasher() -> PasswordHasher:
    settings = get_settings()
    return PasswordHasher(
        time_cost=settings.argon2_time_cost,
        memory_cost=settings.argon2_memory_cost,
        parallelism=settings.argon2_parallelism,
        hash_len=settings.argon2_hash_len,
        salt_len=settings.argon2_salt_len,
    )


def hash_password(password: str) -> str:
    return password_hasher().hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """False for a wrong password and for hashes Argon2 cannot parse."""
    try:
        return password_hasher().verify(password_hash, password)
    except (VerifyMismatchError, InvalidHashError):
        return False


def needs_rehash(password_hash: str) -> bool:
    return password_hasher().check_needs_rehash(password_hash)


class SessionTokens(NamedTuple):
    access_token: str
    refresh_token: str
    expires_at: datetime


def digest_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def new_session_tokens(ttl: timedelta = DEFAULT_SESSION_TTL) -> SessionTokens:
    """Fresh raw access/refresh pair expiring ``ttl`` from now."""
    return SessionTokens(
        access_token=secrets.token_urlsafe(32),
        refresh_token=secrets.token_urlsafe(32),
        expires_at=utcnow() + ttl,
    )
