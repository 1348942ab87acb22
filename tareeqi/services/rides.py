"""
Ride Lifecycle Controller
=========================

Publishing
----------
``create_ride`` validates the driver and seat count, freezes the peak-hour
traffic fee onto the ride and opens the seat inventory at full capacity.

Terminal transitions (all-or-nothing, one unit of work each)
------------------------------------------------------------
complete_ride
    confirmed bookings -> completed, pending bookings -> cancelled,
    ride -> completed, driver ``total_rides`` recomputed.
cancel_ride
    every booking not already cancelled -> cancelled (completed ones
    included), ride -> cancelled.

Neither cascade releases seats: the ride is leaving the bookable pool.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Callable, Optional, Union

from tareeqi.config import settings
from tareeqi.domain.clock import parse_timestamp, regional_now, to_regional
from tareeqi.domain.distance import ride_within_radius
from tareeqi.domain.entities import Location, Requester, SeatInventory
from tareeqi.domain.enums import (
    Actor,
    BookingStatus,
    FuelType,
    GenderPreference,
    RideDirection,
    RideStatus,
)
from tareeqi.domain.exceptions import (
    AuthorizationError,
    NotFoundError,
    ValidationError,
)
from tareeqi.domain.pricing import FeeCalculator
from tareeqi.domain.state_machine import RIDE_CANCEL_CASCADE, assert_ride_transition
from tareeqi.infrastructure.models import RideModel
from tareeqi.infrastructure.unit_of_work import UnitOfWork
from tareeqi.services.ledger import Clock
from tareeqi.services.ratings import recompute_total_rides

logger = logging.getLogger(__name__)

# Fields a driver may change after publishing.  Seats, status and the
# traffic fee are owned by the ledger / lifecycle and stay out of reach.
EDITABLE_FIELDS = frozenset(
    {
        "departure_time",
        "price_per_seat",
        "description",
        "amenities",
        "origin",
        "destination",
        "origin_lat",
        "origin_lng",
        "destination_lat",
        "destination_lng",
        "direction",
        "university_id",
        "gender_preference",
        "distance_km",
        "fuel_type",
        "ac_enabled",
    }
)


@dataclass
class RideDraft:
    origin: str
    destination: str
    departure_time: Union[str, datetime]
    seats: int
    price_per_seat: float
    origin_lat: Optional[float] = None
    origin_lng: Optional[float] = None
    destination_lat: Optional[float] = None
    destination_lng: Optional[float] = None
    distance_km: Optional[float] = None
    gender_preference: GenderPreference = GenderPreference.MALE_ONLY
    direction: Optional[RideDirection] = None
    university_id: Optional[int] = None
    fuel_type: FuelType = FuelType.PETROL
    ac_enabled: bool = False
    description: Optional[str] = None
    amenities: list[str] = field(default_factory=list)


@dataclass
class RideSearch:
    status: RideStatus = RideStatus.SCHEDULED
    university_id: Optional[int] = None
    direction: Optional[RideDirection] = None
    origin: Optional[str] = None
    destination: Optional[str] = None
    departure_date: Optional[date] = None
    min_seats: Optional[int] = None
    max_price: Optional[float] = None
    user_lat: Optional[float] = None
    user_lng: Optional[float] = None
    max_distance_km: Optional[float] = None
    page: int = 1
    limit: int = settings.search_default_limit


@dataclass
class RidePage:
    rides: list[RideModel]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return -(-self.total // self.limit) if self.limit else 0


def departure_as_local(value: Union[str, datetime]) -> datetime:
    if isinstance(value, str):
        try:
            value = parse_timestamp(value)
        except ValueError as exc:
            raise ValidationError(f"Invalid departure time: {value!r}") from exc
    return to_regional(value)


class RideService:
    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork] = UnitOfWork,
        clock: Clock = regional_now,
        fees: Optional[FeeCalculator] = None,
    ):
        self.uow_factory = uow_factory
        self.clock = clock
        self.fees = fees or FeeCalculator()

    # ── Publishing ────────────────────────────────────────────────────

    async def create_ride(self, requester: Requester, draft: RideDraft) -> RideModel:
        _require_driver_role(requester)
        if not 1 <= int(draft.seats) <= settings.max_seats_per_booking:
            raise ValidationError(
                f"Available seats must be between 1 and {settings.max_seats_per_booking}"
            )
        if draft.price_per_seat < 0:
            raise ValidationError("Price per seat cannot be negative")

        departure = departure_as_local(draft.departure_time)
        if departure < self.clock():
            raise ValidationError(
                "Departure time cannot be in the past. "
                "Please select a future date and time."
            )

        async with self.uow_factory() as uow:
            profile = await uow.drivers.get_by_user(requester.id)
            if profile is None:
                raise ValidationError("Please create a driver profile first")
            if draft.seats > profile.car_seats:
                raise ValidationError(
                    "Available seats cannot exceed your car capacity "
                    f"({profile.car_seats} seats)"
                )
            if draft.university_id and not await uow.universities.get_by_id(
                draft.university_id
            ):
                raise ValidationError("Invalid university selected")

            # Fee reads the raw client value so the local/UTC rule applies
            fee = self.fees.traffic_fee(draft.departure_time, draft.distance_km)
            inventory = SeatInventory.fresh(int(draft.seats))

            ride = await uow.rides.create(
                RideModel(
                    driver_id=requester.id,
                    origin=draft.origin,
                    destination=draft.destination,
                    origin_lat=draft.origin_lat,
                    origin_lng=draft.origin_lng,
                    destination_lat=draft.destination_lat,
                    destination_lng=draft.destination_lng,
                    departure_time=departure,
                    total_seats=inventory.total,
                    available_seats=inventory.available,
                    price_per_seat=draft.price_per_seat,
                    traffic_fee=fee,
                    distance_km=draft.distance_km,
                    status=RideStatus.SCHEDULED,
                    gender_preference=draft.gender_preference,
                    direction=draft.direction,
                    university_id=draft.university_id,
                    fuel_type=draft.fuel_type,
                    ac_enabled=draft.ac_enabled,
                    description=draft.description,
                    amenities=list(draft.amenities or []),
                )
            )
            logger.info(
                "Ride %d published by driver %d: %d seat(s), fee %.2f",
                ride.id, requester.id, ride.total_seats, fee,
            )
            return ride

    async def update_ride(
        self, ride_id: int, requester: Requester, changes: dict[str, Any]
    ) -> RideModel:
        _require_driver_role(requester)
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(
                f"Fields cannot be updated: {', '.join(sorted(unknown))}"
            )
        if not changes:
            raise ValidationError("No valid fields to update")

        async with self.uow_factory() as uow:
            ride = await self._owned_ride(uow, ride_id, requester)
            if RideStatus(ride.status) != RideStatus.SCHEDULED:
                raise ValidationError("Only scheduled rides can be edited")
            if changes.get("university_id") and not await uow.universities.get_by_id(
                changes["university_id"]
            ):
                raise ValidationError("Invalid university selected")

            for name, value in changes.items():
                if name == "departure_time" and value is not None:
                    value = departure_as_local(value)
                    if value < self.clock():
                        raise ValidationError("Departure time cannot be in the past")
                setattr(ride, name, value)
            await uow.session.flush()
            logger.info("Ride %d updated: %s", ride.id, ", ".join(sorted(changes)))
            return ride

    # ── Terminal transitions ──────────────────────────────────────────

    async def complete_ride(self, ride_id: int, requester: Requester) -> RideModel:
        _require_driver_role(requester)
        async with self.uow_factory() as uow:
            ride = await self._owned_ride(uow, ride_id, requester, lock=True)
            assert_ride_transition(ride.status, RideStatus.COMPLETED, Actor.DRIVER)

            completed = await uow.bookings.transition_all(
                ride.id, [BookingStatus.CONFIRMED], BookingStatus.COMPLETED
            )
            dropped = await uow.bookings.transition_all(
                ride.id, [BookingStatus.PENDING], BookingStatus.CANCELLED
            )
            ride.status = RideStatus.COMPLETED
            await recompute_total_rides(uow, ride.driver_id)

            logger.info(
                "Ride %d completed: %d booking(s) completed, %d pending cancelled",
                ride.id, completed, dropped,
            )
            return ride

    async def cancel_ride(self, ride_id: int, requester: Requester) -> RideModel:
        _require_driver_role(requester)
        async with self.uow_factory() as uow:
            ride = await self._owned_ride(uow, ride_id, requester, lock=True)
            assert_ride_transition(ride.status, RideStatus.CANCELLED, Actor.DRIVER)

            cancelled = await uow.bookings.transition_all(
                ride.id, RIDE_CANCEL_CASCADE, BookingStatus.CANCELLED
            )
            ride.status = RideStatus.CANCELLED
            await uow.session.flush()

            logger.info("Ride %d cancelled: %d booking(s) cancelled", ride.id, cancelled)
            return ride

    # ── Reads ─────────────────────────────────────────────────────────

    async def get_ride(self, ride_id: int) -> RideModel:
        async with self.uow_factory() as uow:
            ride = await uow.rides.get_by_id(ride_id)
            if ride is None:
                raise NotFoundError("Ride not found")
            return ride

    async def driver_rides(
        self, driver_id: int, status: Optional[RideStatus] = None
    ) -> list[RideModel]:
        async with self.uow_factory() as uow:
            return await uow.rides.list_by_driver(driver_id, status)

    async def search_rides(self, requester: Requester, search: RideSearch) -> RidePage:
        page = max(1, search.page or 1)
        limit = min(settings.search_max_limit, max(1, search.limit or 1))

        async with self.uow_factory() as uow:
            user = await uow.users.get_by_id(requester.id)
            preference = (
                GenderPreference.for_gender(user.gender)
                if user is not None and user.gender
                else None
            )
            rides, total = await uow.rides.search(
                status=search.status,
                gender_preference=preference,
                university_id=search.university_id,
                direction=search.direction,
                origin=search.origin,
                destination=search.destination,
                departure_date=search.departure_date,
                min_seats=search.min_seats,
                max_price=search.max_price,
                limit=limit,
                offset=(page - 1) * limit,
            )

        user_point = Location.maybe(search.user_lat, search.user_lng)
        if user_point is not None and search.max_distance_km:
            # Applied to the fetched page only; ``total`` is the SQL count
            rides = [
                r
                for r in rides
                if ride_within_radius(
                    user_point,
                    search.max_distance_km,
                    r.direction,
                    Location.maybe(r.origin_lat, r.origin_lng),
                    Location.maybe(r.destination_lat, r.destination_lng),
                )
            ]
        return RidePage(rides=rides, page=page, limit=limit, total=total)

    @staticmethod
    async def _owned_ride(
        uow: UnitOfWork, ride_id: int, requester: Requester, lock: bool = False
    ) -> RideModel:
        ride = await (
            uow.rides.get_for_update(ride_id) if lock else uow.rides.get_by_id(ride_id)
        )
        if ride is None:
            raise NotFoundError("Ride not found")
        if ride.driver_id != requester.id:
            raise AuthorizationError("You are not the driver of this ride")
        return ride


def _require_driver_role(requester: Requester) -> None:
    if not requester.can_drive:
        raise AuthorizationError("Access denied. Driver role required.")
