from komiut_store.booking.schemas import Ticket
from komiut_store.config import Settings, get_settings
from komiut_store.routes.fare import calculate_fare
from komiut_store.store import Store, StoreManager

__all__ = [
    "Settings",
    "Store",
    "StoreManager",
    "Ticket",
    "calculate_fare",
    "get_settings",
]
