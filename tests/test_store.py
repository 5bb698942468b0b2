"""Tests for opening, closing and sharing the store handle."""

import asyncio

import pytest

from komiut_store.common.exceptions import (
    ConstraintViolation,
    MigrationError,
    StoreClosedError,
    SubscriptionClosed,
)
from komiut_store.config import Settings
from komiut_store.store import Store, StoreManager
from komiut_store.users.models import User
from komiut_store.users.schemas import UserCreate
from komiut_store.wallets.schemas import WalletCreate


async def test_database_file_created_in_data_dir(store, settings):
    assert settings.database_path.exists()
    assert settings.database_path.name == "komiut.db"


async def test_open_twice_returns_same_store(store):
    again = await store.open()
    assert again is store


async def test_manager_hands_out_single_handle(settings):
    manager = StoreManager(settings)
    first = await manager.open()
    second = await manager.open()
    try:
        assert first is second
        assert first.is_open
    finally:
        await manager.close()
    assert not first.is_open

    # a fresh handle after close
    third = await manager.open()
    try:
        assert third is not first
    finally:
        await manager.close()


async def test_operations_after_close_raise(settings):
    store = Store(settings)
    await store.open()
    await store.close()

    with pytest.raises(StoreClosedError):
        await store.users.get_by_id(1)
    with pytest.raises(StoreClosedError):
        await store.routes.has_any()


async def test_close_cancels_subscriptions(settings, test_user_data):
    store = Store(settings)
    await store.open()
    user_id = await store.users.create(test_user_data)
    subscription = await store.wallets.watch_by_user_id(user_id)
    assert await subscription.get() is None

    await store.close()

    assert subscription.cancelled
    with pytest.raises(SubscriptionClosed):
        await subscription.get()


async def test_data_survives_reopen(settings, test_user_data):
    async with Store(settings) as store:
        user_id = await store.users.create(test_user_data)

    async with Store(settings) as store:
        user = await store.users.get_by_id(user_id)
        assert user is not None
        assert user.email == "eric@komiut.com"


async def test_corrupt_file_fails_open(settings):
    settings.data_dir.mkdir(parents=True)
    settings.database_path.write_bytes(b"this is not a sqlite database" * 100)

    store = Store(settings)
    with pytest.raises(MigrationError):
        await store.open()
    assert not store.is_open


async def test_unknown_schema_version_fails_open(tmp_path):
    settings = Settings(data_dir=tmp_path, schema_version=99)
    with pytest.raises(MigrationError):
        await Store(settings).open()


async def test_delete_user_cascades(store, user_id, wallet_id, route):
    await store.favorites.add(user_id, route.id)
    await store.booking.book(user_id, route, 0, 2)

    assert await store.users.delete(user_id) is True

    assert await store.wallets.get_by_user_id(user_id) is None
    assert await store.trips.list_by_user_id(user_id) == []
    assert await store.payments.list_by_user_id(user_id) == []
    assert await store.favorites.list_for_user(user_id) == []
    # the route itself is reference data and stays
    assert await store.routes.get_by_id(route.id) is not None


async def test_delete_missing_user(store):
    assert await store.users.delete(404) is False


async def test_foreign_keys_enforced(store):
    with pytest.raises(ConstraintViolation):
        await store.wallets.create(WalletCreate(user_id=999))


async def test_failed_write_leaves_nothing_behind(store, test_user_data):
    with pytest.raises(ConstraintViolation):
        async with store.transaction() as db:
            db.add(User(email="first@komiut.com", full_name="First", password_hash="x"))
            await db.flush()
            db.add(User(email="first@komiut.com", full_name="Dup", password_hash="x"))
            await db.flush()

    assert await store.users.get_by_email("first@komiut.com") is None


async def test_constraint_violation_names_table(store, test_user_data):
    await store.users.create(test_user_data)
    with pytest.raises(ConstraintViolation) as exc_info:
        await store.users.create(
            UserCreate(email=test_user_data.email, full_name="Someone", password_hash="x")
        )
    assert exc_info.value.table == "users"
    assert "users" in exc_info.value.detail


async def test_manager_concurrent_open_shares_handle(settings):
    manager = StoreManager(settings)
    try:
        handles = await asyncio.gather(*(manager.open() for _ in range(5)))
        assert all(handle is handles[0] for handle in handles)
    finally:
        await manager.close()
