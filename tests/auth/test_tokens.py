"""Tests for the per-user auth token."""

from datetime import datetime, timedelta, timezone

from komiut_store.auth.schemas import AuthTokenUpsert
from komiut_store.auth.security import digest_token, new_session_tokens


def make_token(user_id: int, expires_in: timedelta) -> AuthTokenUpsert:
    tokens = new_session_tokens()
    return AuthTokenUpsert(
        user_id=user_id,
        access_token=digest_token(tokens.access_token),
        refresh_token=digest_token(tokens.refresh_token),
        expires_at=datetime.now(timezone.utc) + expires_in,
    )


async def test_no_token(store, user_id):
    assert await store.auth_tokens.get_by_user_id(user_id) is None
    assert await store.auth_tokens.is_valid(user_id) is False


async def test_upsert_and_validity(store, user_id):
    token = make_token(user_id, timedelta(hours=1))
    await store.auth_tokens.upsert(token)

    stored = await store.auth_tokens.get_by_user_id(user_id)
    assert stored.access_token == token.access_token
    assert await store.auth_tokens.is_valid(user_id) is True


async def test_upsert_replaces_existing_token(store, user_id):
    first = make_token(user_id, timedelta(hours=1))
    second = make_token(user_id, timedelta(hours=2))
    await store.auth_tokens.upsert(first)
    await store.auth_tokens.upsert(second)

    stored = await store.auth_tokens.get_by_user_id(user_id)
    assert stored.access_token == second.access_token
    assert stored.expires_at == second.expires_at


async def test_expired_token_is_invalid(store, user_id):
    await store.auth_tokens.upsert(make_token(user_id, timedelta(seconds=-1)))
    assert await store.auth_tokens.get_by_user_id(user_id) is not None
    assert await store.auth_tokens.is_valid(user_id) is False


async def test_validity_is_strict(store, user_id):
    expires_at = datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)
    await store.auth_tokens.upsert(
        AuthTokenUpsert(user_id=user_id, access_token="abc", expires_at=expires_at)
    )

    assert await store.auth_tokens.is_valid(user_id, now=expires_at - timedelta(seconds=1))
    assert not await store.auth_tokens.is_valid(user_id, now=expires_at)


async def test_delete_invalidates(store, user_id):
    await store.auth_tokens.upsert(make_token(user_id, timedelta(hours=1)))

    assert await store.auth_tokens.delete_by_user_id(user_id) == 1
    assert await store.auth_tokens.is_valid(user_id) is False
    assert await store.auth_tokens.delete_by_user_id(user_id) == 0


def test_digest_token_is_stable():
    assert digest_token("abc") == digest_token("abc")
    assert digest_token("abc") != digest_token("abd")


# ========== Sessions ==========


async def test_issue_stores_only_digests(store, user_id):
    tokens = await store.auth_tokens.issue(user_id)

    stored = await store.auth_tokens.get_by_user_id(user_id)
    assert stored.access_token == digest_token(tokens.access_token)
    assert stored.refresh_token == digest_token(tokens.refresh_token)
    assert stored.access_token != tokens.access_token
    assert stored.expires_at == tokens.expires_at
    assert await store.auth_tokens.is_valid(user_id) is True


async def test_issue_replaces_previous_session(store, user_id):
    first = await store.auth_tokens.issue(user_id)
    second = await store.auth_tokens.issue(user_id)

    assert await store.auth_tokens.verify_access_token(user_id, second.access_token)
    assert not await store.auth_tokens.verify_access_token(user_id, first.access_token)


async def test_verify_access_token_checks_expiry(store, user_id):
    tokens = await store.auth_tokens.issue(user_id, ttl=timedelta(minutes=5))

    assert await store.auth_tokens.verify_access_token(user_id, tokens.access_token)
    assert not await store.auth_tokens.verify_access_token(
        user_id, tokens.access_token, now=tokens.expires_at
    )
    assert not await store.auth_tokens.verify_access_token(user_id + 1, tokens.access_token)
