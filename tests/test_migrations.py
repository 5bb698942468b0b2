"""Tests for schema versioning and step-by-step upgrades."""

import pytest
from sqlalchemy import inspect, text
from sqlalchemy.ext.asyncio import create_async_engine

from komiut_store.common.exceptions import MigrationError
from komiut_store.config import Settings
from komiut_store.migrations import LATEST_VERSION, current_version
from komiut_store.store import Store


def read_schema(connection) -> dict:
    """Columns, indexes, unique constraints and foreign keys per table."""
    inspector = inspect(connection)
    schema = {}
    for table in inspector.get_table_names():
        if table == "alembic_version":
            continue
        columns = {
            column["name"]: (str(column["type"]), column["nullable"], column["default"])
            for column in inspector.get_columns(table)
        }
        indexes = sorted(
            (index["name"], tuple(index["column_names"]), bool(index["unique"]))
            for index in inspector.get_indexes(table)
        )
        uniques = sorted(
            tuple(constraint["column_names"])
            for constraint in inspector.get_unique_constraints(table)
        )
        foreign_keys = sorted(
            (
                tuple(fk["constrained_columns"]),
                fk["referred_table"],
                (fk.get("options") or {}).get("ondelete"),
            )
            for fk in inspector.get_foreign_keys(table)
        )
        schema[table] = {
            "columns": columns,
            "indexes": indexes,
            "uniques": uniques,
            "foreign_keys": foreign_keys,
        }
    return schema


async def run_on_file(settings: Settings, fn):
    engine = create_async_engine(settings.database_url)
    try:
        async with engine.connect() as conn:
            return await conn.run_sync(fn)
    finally:
        await engine.dispose()


async def test_fresh_store_is_stamped_at_latest_version(settings):
    async with Store(settings):
        pass
    assert await run_on_file(settings, current_version) == LATEST_VERSION


async def test_version_one_schema(tmp_path):
    settings = Settings(data_dir=tmp_path)
    store = Store(settings)
    await store.open(schema_version=1)
    await store.close()

    schema = await run_on_file(settings, read_schema)
    assert set(schema) == {"users", "wallets", "trips", "payments", "auth_tokens"}
    assert "points" not in schema["wallets"]["columns"]
    assert "phone" not in schema["users"]["columns"]
    assert await run_on_file(settings, current_version) == 1


async def test_upgrade_from_version_one_matches_fresh_schema(tmp_path):
    upgraded = Settings(data_dir=tmp_path / "upgraded")
    fresh = Settings(data_dir=tmp_path / "fresh")

    store = Store(upgraded)
    await store.open(schema_version=1)
    await store.close()
    async with Store(upgraded):
        pass

    async with Store(fresh):
        pass

    upgraded_schema = await run_on_file(upgraded, read_schema)
    fresh_schema = await run_on_file(fresh, read_schema)

    assert upgraded_schema == fresh_schema
    assert upgraded_schema["wallets"]["columns"]["points"][1] is False
    assert ("uq_wallets_user_id", ("user_id",), True) in upgraded_schema["wallets"]["indexes"]
    assert ("user_id", "route_id") in upgraded_schema["favorite_routes"]["uniques"]


async def test_upgrade_keeps_existing_rows(tmp_path):
    settings = Settings(data_dir=tmp_path)
    store = Store(settings)
    await store.open(schema_version=1)
    await store.close()

    engine = create_async_engine(settings.database_url)
    async with engine.begin() as conn:
        await conn.execute(
            text(
                "INSERT INTO users (email, full_name, password_hash) "
                "VALUES ('old@komiut.com', 'Old User', 'hash')"
            )
        )
        await conn.execute(text("INSERT INTO wallets (user_id, balance) VALUES (1, 150.0)"))
    await engine.dispose()

    async with Store(settings) as store:
        user = await store.users.get_by_email("old@komiut.com")
        assert user.phone is None
        assert user.profile_image is None

        wallet = await store.wallets.get_by_user_id(user.id)
        assert wallet.balance == 150.0
        assert wallet.points == 0
        assert wallet.currency == "KES"

        assert await store.routes.has_any() is False


async def test_partial_upgrade_then_latest(tmp_path):
    settings = Settings(data_dir=tmp_path)
    store = Store(settings)
    await store.open(schema_version=3)
    await store.close()
    assert await run_on_file(settings, current_version) == 3

    async with Store(settings):
        pass
    assert await run_on_file(settings, current_version) == LATEST_VERSION


async def test_reopen_at_same_version_changes_nothing(settings):
    async with Store(settings):
        pass
    before = await run_on_file(settings, read_schema)

    async with Store(settings):
        pass
    after = await run_on_file(settings, read_schema)

    assert before == after
    assert await run_on_file(settings, current_version) == LATEST_VERSION


async def test_duplicate_wallets_block_one_wallet_upgrade(tmp_path):
    settings = Settings(data_dir=tmp_path)
    store = Store(settings)
    await store.open(schema_version=5)
    await store.close()

    engine = create_async_engine(settings.database_url)
    async with engine.begin() as conn:
        await conn.execute(
            text(
                "INSERT INTO users (email, full_name, password_hash) "
                "VALUES ('twice@komiut.com', 'Two Wallets', 'hash')"
            )
        )
        await conn.execute(text("INSERT INTO wallets (user_id, balance) VALUES (1, 10.0)"))
        await conn.execute(text("INSERT INTO wallets (user_id, balance) VALUES (1, 20.0)"))
    await engine.dispose()

    store = Store(settings)
    with pytest.raises(MigrationError) as exc_info:
        await store.open()
    assert exc_info.value.to_version == LATEST_VERSION
    assert not store.is_open
    assert await run_on_file(settings, current_version) == 5
