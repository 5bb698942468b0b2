from datetime import datetime, timezone

from pydantic import BaseModel


class Ticket(BaseModel):
    """Boarding ticket handed back after a successful booking.

    The validity window exists only on this object; the store never
    expires anything, so callers check ``is_expired()`` themselves.
    """

    ticket_id: str
    route_name: str
    from_stop: str
    to_stop: str
    fare: float
    currency: str
    booking_time: datetime
    valid_until: datetime

    @property
    def formatted_fare(self) -> str:
        return f"{self.currency} {self.fare:.0f}"

    def is_expired(self, now: datetime | None = None) -> bool:
        if now is None:
            now = datetime.now(timezone.utc)
        return now > self.valid_until
