"""Imports every mapped model so Base.metadata knows the full schema."""

from komiut_store.auth.models import AuthToken
from komiut_store.payments.models import Payment, PaymentStatus, PaymentType
from komiut_store.routes.models import FavoriteRoute, Route
from komiut_store.trips.models import Trip, TripStatus
from komiut_store.users.models import User
from komiut_store.wallets.models import Wallet

__all__ = [
    "AuthToken",
    "FavoriteRoute",
    "Payment",
    "PaymentStatus",
    "PaymentType",
    "Route",
    "Trip",
    "TripStatus",
    "User",
    "Wallet",
]
