import logging
from datetime import timedelta
from typing import TYPE_CHECKING

from sqlalchemy import func, select, update

from komiut_store.booking.schemas import Ticket
from komiut_store.common.exceptions import (
    BookingFailed,
    ConstraintViolation,
    InsufficientBalance,
    InvalidStopSelection,
    StorageError,
    WalletNotFound,
)
from komiut_store.common.types import utcnow
from komiut_store.payments.models import Payment, PaymentStatus, PaymentType
from komiut_store.payments.references import generate_reference_id
from komiut_store.routes.fare import calculate_fare
from komiut_store.routes.models import Route
from komiut_store.trips.models import Trip, TripStatus
from komiut_store.wallets.models import Wallet

if TYPE_CHECKING:
    from komiut_store.store import Store

logger = logging.getLogger(__name__)


class BookingService:
    """Turns a stop-to-stop selection into a trip, a payment and a wallet debit."""

    def __init__(self, store: "Store"):
        self.store = store

    def _validate_selection(self, route: Route, from_index: int, to_index: int) -> None:
        stops = route.stops or []
        for index in (from_index, to_index):
            if not 0 <= index < len(stops):
                raise InvalidStopSelection(f"Stop {index} is not on route {route.name}")
        if from_index == to_index:
            raise InvalidStopSelection()

    async def book(
        self, user_id: int, route: Route, from_index: int, to_index: int
    ) -> Ticket:
        """Book a ride and return its ticket.

        Wallet lookup, balance check, trip insert, payment insert and
        debit all run in one write transaction. The debit only applies
        while the balance still covers the fare, so two bookings racing
        on the same wallet can never take it below zero.
        """
        self._validate_selection(route, from_index, to_index)
        fare = calculate_fare(route, from_index, to_index)
        from_stop = route.stops[from_index]
        to_stop = route.stops[to_index]

        now = utcnow()
        ticket_id = generate_reference_id("TKT")

        try:
            async with self.store.transaction() as db:
                result = await db.execute(select(Wallet).where(Wallet.user_id == user_id))
                wallet = result.scalar_one_or_none()
                if wallet is None:
                    raise WalletNotFound(user_id)
                if wallet.balance < fare:
                    raise InsufficientBalance(wallet.balance, fare, route.currency)

                db.add(
                    Trip(
                        user_id=user_id,
                        route_name=route.name,
                        from_location=from_stop,
                        to_location=to_stop,
                        fare=fare,
                        status=TripStatus.COMPLETED.value,
                        trip_date=now,
                    )
                )
                db.add(
                    Payment(
                        user_id=user_id,
                        amount=fare,
                        type=PaymentType.TRIP.value,
                        status=PaymentStatus.COMPLETED.value,
                        description=f"{route.name}: {from_stop} → {to_stop}",
                        reference_id=ticket_id,
                        transaction_date=now,
                    )
                )

                debit = await db.execute(
                    update(Wallet)
                    .where(Wallet.id == wallet.id, Wallet.balance >= fare)
                    .values(balance=func.round(Wallet.balance - fare, 2), updated_at=now)
                )
                if debit.rowcount == 0:
                    raise InsufficientBalance(wallet.balance, fare, route.currency)
        except (WalletNotFound, InsufficientBalance) as exc:
            logger.warning("Booking rejected for user %s: %s", user_id, exc.detail)
            raise
        except (StorageError, ConstraintViolation) as exc:
            logger.exception("Booking for user %s failed in storage", user_id)
            raise BookingFailed() from exc

        logger.info(
            "Booked %s for user %s on %s (%s -> %s, %.2f %s)",
            ticket_id,
            user_id,
            route.name,
            from_stop,
            to_stop,
            fare,
            route.currency,
        )
        return Ticket(
            ticket_id=ticket_id,
            route_name=route.name,
            from_stop=from_stop,
            to_stop=to_stop,
            fare=fare,
            currency=route.currency,
            booking_time=now,
            valid_until=now + timedelta(hours=self.store.settings.ticket_validity_hours),
        )
