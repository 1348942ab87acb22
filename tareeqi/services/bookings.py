"""
Booking State Machine -- application service
============================================

create_booking
    reserve seats on the ride -> reject if an active booking exists ->
    reactivate a cancelled row in place, or insert a new pending row.
    The total price is frozen here from the ride's current price and fee.

update_booking_status
    driver/passenger moves a booking to confirmed | cancelled | completed.
    Cancelling releases the booking's seats in the same transaction.

Lock order is always ride row, then booking row.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError

from tareeqi.config import settings
from tareeqi.domain.clock import regional_now
from tareeqi.domain.entities import Requester
from tareeqi.domain.enums import Actor, BookingStatus
from tareeqi.domain.exceptions import (
    AlreadyBooked,
    AuthorizationError,
    NotFoundError,
    ValidationError,
)
from tareeqi.domain.pricing import booking_total
from tareeqi.domain.state_machine import assert_booking_transition
from tareeqi.infrastructure.models import BookingModel, RideModel
from tareeqi.infrastructure.unit_of_work import UnitOfWork
from tareeqi.services.ledger import Clock, InventoryLedger

logger = logging.getLogger(__name__)

# Statuses a party may request explicitly; ``pending`` only comes from create
UPDATABLE_STATUSES = (
    BookingStatus.CONFIRMED,
    BookingStatus.CANCELLED,
    BookingStatus.COMPLETED,
)


def validate_seats(seats) -> int:
    try:
        count = int(seats)
    except (TypeError, ValueError):
        count = 0
    if not 1 <= count <= settings.max_seats_per_booking:
        raise ValidationError(
            f"Seats booked must be between 1 and {settings.max_seats_per_booking}"
        )
    return count


class BookingService:
    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork] = UnitOfWork,
        clock: Clock = regional_now,
    ):
        self.uow_factory = uow_factory
        self.clock = clock

    async def create_booking(
        self,
        ride_id: int,
        requester: Requester,
        seats: int,
        pickup_location: Optional[str] = None,
        dropoff_location: Optional[str] = None,
    ) -> BookingModel:
        seats = validate_seats(seats)

        async with self.uow_factory() as uow:
            ledger = InventoryLedger(uow.rides, self.clock)
            ride = await ledger.reserve(ride_id, seats, requester.id)
            total_price = booking_total(ride.price_per_seat, seats, ride.traffic_fee)

            existing = await uow.bookings.find_for_passenger(ride.id, requester.id)
            if existing is not None:
                assert_active_booking_absent(existing)
                assert_booking_transition(
                    existing.status, BookingStatus.PENDING, Actor.PASSENGER
                )
                existing.status = BookingStatus.PENDING
                existing.seats_booked = seats
                existing.total_price = total_price
                existing.pickup_location = pickup_location
                existing.dropoff_location = dropoff_location
                await uow.session.flush()
                booking = existing
                logger.info(
                    "Booking %d reactivated: passenger %d, ride %d, %d seat(s)",
                    booking.id, requester.id, ride.id, seats,
                )
            else:
                booking = BookingModel(
                    ride_id=ride.id,
                    passenger_id=requester.id,
                    seats_booked=seats,
                    total_price=total_price,
                    status=BookingStatus.PENDING,
                    pickup_location=pickup_location,
                    dropoff_location=dropoff_location,
                )
                try:
                    booking = await uow.bookings.create(booking)
                except IntegrityError as exc:
                    # Lost a race with a concurrent insert for the same pair
                    raise AlreadyBooked() from exc
                logger.info(
                    "Booking %d created: passenger %d, ride %d, %d seat(s), total %.2f",
                    booking.id, requester.id, ride.id, seats, total_price,
                )
            return booking

    async def update_booking_status(
        self, booking_id: int, requester: Requester, new_status
    ) -> BookingModel:
        try:
            target = BookingStatus(new_status)
        except ValueError:
            target = None
        if target not in UPDATABLE_STATUSES:
            raise ValidationError(
                "Valid status is required (confirmed, cancelled, completed)"
            )

        async with self.uow_factory() as uow:
            snapshot = await uow.bookings.get_by_id(booking_id)
            if snapshot is None:
                raise NotFoundError("Booking not found")

            ledger = InventoryLedger(uow.rides, self.clock)
            ride = await ledger.lock(snapshot.ride_id)
            booking = await uow.bookings.get_for_update(booking_id)

            actor = actor_for(ride, booking, requester)
            assert_booking_transition(booking.status, target, actor)

            if target == BookingStatus.CANCELLED:
                await ledger.release(ride, booking.seats_booked)

            previous = BookingStatus(booking.status)
            booking.status = target
            await uow.session.flush()
            logger.info(
                "Booking %d: %s -> %s by %s %d",
                booking.id, previous.value, target.value, actor.value, requester.id,
            )
            return booking

    async def get_booking(self, booking_id: int, requester: Requester) -> BookingModel:
        async with self.uow_factory() as uow:
            booking = await uow.bookings.get_by_id(booking_id)
            if booking is None:
                raise NotFoundError("Booking not found")
            ride = await uow.rides.get_by_id(booking.ride_id)
            if requester.id not in (booking.passenger_id, ride.driver_id):
                raise AuthorizationError("You can only view your own bookings")
            return booking

    async def passenger_bookings(
        self,
        passenger_id: int,
        requester: Requester,
        status: Optional[BookingStatus] = None,
    ) -> list[tuple[BookingModel, RideModel]]:
        if requester.id != passenger_id:
            raise AuthorizationError("You can only view your own bookings")
        async with self.uow_factory() as uow:
            return await uow.bookings.list_for_passenger(passenger_id, status)

    async def ride_bookings(
        self, ride_id: int, requester: Requester
    ) -> list[BookingModel]:
        async with self.uow_factory() as uow:
            ride = await uow.rides.get_by_id(ride_id)
            if ride is None:
                raise NotFoundError("Ride not found")
            if ride.driver_id != requester.id:
                raise AuthorizationError(
                    "You can only view bookings for your own rides"
                )
            return await uow.bookings.list_for_ride(ride_id)


def assert_active_booking_absent(booking: BookingModel) -> None:
    if BookingStatus(booking.status) in (
        BookingStatus.PENDING,
        BookingStatus.CONFIRMED,
    ):
        raise AlreadyBooked()


def actor_for(ride: RideModel, booking: BookingModel, requester: Requester) -> Actor:
    if ride.driver_id == requester.id:
        return Actor.DRIVER
    if booking.passenger_id == requester.id:
        return Actor.PASSENGER
    raise AuthorizationError("You do not have permission to update this booking")
