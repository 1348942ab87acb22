"""
Inventory Ledger
================

Owns ``rides.available_seats``.  Both operations run inside the caller's
unit of work so the seat change commits or rolls back together with the
booking write that justified it.

reserve
-------
1. ``SELECT ... FOR UPDATE`` on the ride row.  A second reservation on the
   same ride blocks here until the first transaction ends, then reads the
   decremented count.
2. Check, in order: ride scheduled, not departed, requester is not the
   driver, enough seats.
3. Guarded ``UPDATE ... WHERE available_seats >= n`` so the row can never
   go negative even if the lock were bypassed.

release
-------
Increment clamped at ``total_seats``.  There is no separate reservation
log: the booking's ``seats_booked`` says how much to give back.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from tareeqi.domain.clock import regional_now
from tareeqi.domain.entities import SeatInventory
from tareeqi.domain.enums import RideStatus
from tareeqi.domain.exceptions import (
    AlreadyDeparted,
    InsufficientSeats,
    NotFoundError,
    RideUnavailable,
    SelfBooking,
)
from tareeqi.infrastructure.models import RideModel
from tareeqi.infrastructure.repositories import RideRepository

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class InventoryLedger:
    def __init__(self, rides: RideRepository, clock: Clock = regional_now):
        self.rides = rides
        self.clock = clock

    async def lock(self, ride_id: int) -> RideModel:
        ride = await self.rides.get_for_update(ride_id)
        if ride is None:
            raise NotFoundError("Ride not found")
        return ride

    async def reserve(self, ride_id: int, seats: int, requester_id: int) -> RideModel:
        ride = await self.lock(ride_id)

        if RideStatus(ride.status) != RideStatus.SCHEDULED:
            raise RideUnavailable()
        if ride.departure_time <= self.clock():
            raise AlreadyDeparted()
        if ride.driver_id == requester_id:
            raise SelfBooking()

        inventory = SeatInventory(ride.total_seats, ride.available_seats)
        inventory.reserve(seats)

        if not await self.rides.decrement_seats(ride.id, seats):
            # Only reachable if the row changed under us without the lock
            ride = await self.rides.refresh(ride)
            raise InsufficientSeats(ride.available_seats)

        logger.debug(
            "Reserved %d seat(s) on ride %d (%d -> %d)",
            seats, ride.id, ride.available_seats, inventory.available,
        )
        return await self.rides.refresh(ride)

    async def release(self, ride: RideModel, seats: int) -> RideModel:
        await self.rides.increment_seats(ride.id, seats)
        ride = await self.rides.refresh(ride)
        logger.debug(
            "Released %d seat(s) on ride %d (now %d/%d)",
            seats, ride.id, ride.available_seats, ride.total_seats,
        )
        return ride
