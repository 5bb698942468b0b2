import pytest

from komiut_store.config import Settings
from komiut_store.routes.schemas import RouteCreate
from komiut_store.store import Store
from komiut_store.users.schemas import UserCreate
from komiut_store.wallets.schemas import WalletCreate


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a throwaway data directory."""
    return Settings(data_dir=tmp_path / "data", sqlite_journal_mode="DELETE")


@pytest.fixture
async def store(settings):
    """Open store on a fresh database file, closed after the test."""
    store = Store(settings)
    await store.open()
    try:
        yield store
    finally:
        await store.close()


@pytest.fixture
def test_user_data():
    """Sample user fields."""
    return UserCreate(
        email="eric@komiut.com",
        full_name="Eric Mwangi",
        password_hash="not-a-real-hash",
    )


@pytest.fixture
async def user_id(store, test_user_data):
    """Create a user and return its id."""
    return await store.users.create(test_user_data)


@pytest.fixture
async def wallet_id(store, user_id):
    """Wallet with the demo balance of 2450.50 KES."""
    return await store.wallets.create(
        WalletCreate(user_id=user_id, balance=2450.50, points=1250)
    )


@pytest.fixture
def test_route_data():
    """Route with ten stops, base fare 30 and 5 per stop."""
    return RouteCreate(
        name="Route 46 - CBD to Westlands",
        start_point="CBD",
        end_point="Kangemi",
        stops=[
            "CBD",
            "Kencom",
            "Museum Hill",
            "Westlands",
            "Sarit",
            "ABC Place",
            "Safaricom",
            "Mountain View",
            "Uthiru Junction",
            "Kangemi",
        ],
        duration_minutes=45,
        base_fare=30.0,
        fare_per_stop=5.0,
    )


@pytest.fixture
async def route(store, test_route_data):
    """Stored route, loaded back from the store."""
    route_id = await store.routes.create(test_route_data)
    return await store.routes.get_by_id(route_id)
