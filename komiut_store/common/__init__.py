from komiut_store.common.exceptions import (
    BookingError,
    BookingFailed,
    ConstraintViolation,
    InsufficientBalance,
    InvalidStopSelection,
    MigrationError,
    StorageError,
    StoreClosedError,
    StoreException,
    SubscriptionClosed,
    WalletNotFound,
)

__all__ = [
    "StoreException",
    "StorageError",
    "MigrationError",
    "StoreClosedError",
    "ConstraintViolation",
    "SubscriptionClosed",
    "BookingError",
    "WalletNotFound",
    "InsufficientBalance",
    "InvalidStopSelection",
    "BookingFailed",
]
