"""
Booking and ride lifecycles as explicit finite-state machines.

Each table maps ``(current, target)`` to the single guard deciding which
actors may perform that transition.  Pairs missing from a table are
rejected outright.

Booking::

    pending ──► confirmed ──► completed
       │            │
       ▼            ▼
    cancelled ◄─────┘
       │
       └──► pending   (passenger re-books a cancelled booking)

Ride::

    scheduled ──► completed | cancelled
"""

from __future__ import annotations

from typing import Callable

from .enums import Actor, BookingStatus, RideStatus
from .exceptions import AuthorizationError, InvalidStateTransition

Guard = Callable[[Actor], bool]


def _driver_only(actor: Actor) -> bool:
    return actor == Actor.DRIVER


def _passenger_only(actor: Actor) -> bool:
    return actor == Actor.PASSENGER


def _any_party(actor: Actor) -> bool:
    return actor in (Actor.DRIVER, Actor.PASSENGER, Actor.SYSTEM)


BOOKING_TRANSITIONS: dict[tuple[BookingStatus, BookingStatus], Guard] = {
    (BookingStatus.PENDING, BookingStatus.CONFIRMED): _driver_only,
    (BookingStatus.PENDING, BookingStatus.CANCELLED): _any_party,
    (BookingStatus.CONFIRMED, BookingStatus.CANCELLED): _any_party,
    (BookingStatus.CONFIRMED, BookingStatus.COMPLETED): _any_party,
    (BookingStatus.CANCELLED, BookingStatus.PENDING): _passenger_only,
}

RIDE_TRANSITIONS: dict[tuple[RideStatus, RideStatus], Guard] = {
    (RideStatus.SCHEDULED, RideStatus.COMPLETED): _driver_only,
    (RideStatus.SCHEDULED, RideStatus.CANCELLED): _driver_only,
}


def _check(table: dict, kind: str, current, target, actor: Actor) -> None:
    current, target = type(target)(current), target
    guard = table.get((current, target))
    if guard is None:
        raise InvalidStateTransition(
            f"Cannot move {kind} from {current.value} to {target.value}"
        )
    if not guard(actor):
        raise AuthorizationError(
            f"A {actor.value} may not move a {kind} from "
            f"{current.value} to {target.value}"
        )


def assert_booking_transition(
    current: BookingStatus, target: BookingStatus, actor: Actor
) -> None:
    """Raise unless *actor* may move a booking from *current* to *target*."""
    _check(BOOKING_TRANSITIONS, "booking", current, target, actor)


def assert_ride_transition(
    current: RideStatus, target: RideStatus, actor: Actor
) -> None:
    _check(RIDE_TRANSITIONS, "ride", current, target, actor)


# A ride cancellation sweeps its bookings without the per-booking guards,
# completed ones included.
RIDE_CANCEL_CASCADE: list[BookingStatus] = [
    status for status in BookingStatus if status != BookingStatus.CANCELLED
]


def can_transition_booking(current: BookingStatus, target: BookingStatus) -> bool:
    return (BookingStatus(current), target) in BOOKING_TRANSITIONS
