class StoreException(Exception):
    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class StorageError(StoreException):
    def __init__(self, detail: str = "The local data store could not complete the operation"):
        super().__init__(detail)


class MigrationError(StorageError):
    def __init__(self, from_version: int | None, to_version: int):
        self.from_version = from_version
        self.to_version = to_version
        super().__init__(
            detail=f"Could not migrate local store from version {from_version} to {to_version}"
        )


class StoreClosedError(StorageError):
    def __init__(self):
        super().__init__(detail="The local data store is not open")


class ConstraintViolation(StoreException):
    def __init__(self, table: str | None = None, detail: str | None = None):
        self.table = table
        if detail is None:
            detail = (
                f"Record conflicts with an existing {table} entry"
                if table
                else "Record conflicts with an existing entry"
            )
        super().__init__(detail)


# ============ Booking ============

class BookingError(StoreException):
    pass


class WalletNotFound(BookingError):
    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__(detail="Wallet not found")


class InsufficientBalance(BookingError):
    def __init__(self, balance: float, fare: float, currency: str = "KES"):
        self.balance = balance
        self.fare = fare
        self.currency = currency
        super().__init__(
            detail=f"Insufficient balance: {currency} {balance:.2f} available, {currency} {fare:.2f} required"
        )


class InvalidStopSelection(BookingError):
    def __init__(self, detail: str = "Select two different stops on this route"):
        super().__init__(detail)


class BookingFailed(BookingError):
    def __init__(self):
        super().__init__(detail="Booking could not be completed. Please try again")


class SubscriptionClosed(StoreException):
    def __init__(self):
        super().__init__(detail="Subscription has been cancelled")
