"""
Domain value objects.

- ``SeatInventory`` holds the seat-capacity invariant of a ride
  (``0 <= available <= total``) independently of storage.
- ``Requester`` is the identity handed to the core by the external
  authentication layer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .enums import UserRole
from .exceptions import InsufficientSeats, ValidationError


@dataclass(frozen=True)
class Requester:
    id: int
    role: UserRole = UserRole.PASSENGER

    @property
    def can_drive(self) -> bool:
        return UserRole(self.role).can_drive


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float

    @classmethod
    def maybe(
        cls, latitude: Optional[float], longitude: Optional[float]
    ) -> Optional["Location"]:
        if latitude is None or longitude is None:
            return None
        return cls(float(latitude), float(longitude))


@dataclass
class SeatInventory:
    total: int
    available: int

    def __post_init__(self) -> None:
        if self.total < 1:
            raise ValidationError("A ride needs at least one seat")
        if not 0 <= self.available <= self.total:
            raise ValidationError(
                f"available seats {self.available} outside [0, {self.total}]"
            )

    @classmethod
    def fresh(cls, total: int) -> "SeatInventory":
        return cls(total=total, available=total)

    @property
    def taken(self) -> int:
        return self.total - self.available

    def can_reserve(self, seats: int) -> bool:
        return 0 < seats <= self.available

    def reserve(self, seats: int) -> None:
        if seats < 1:
            raise ValidationError("At least one seat must be reserved")
        if not self.can_reserve(seats):
            raise InsufficientSeats(self.available)
        self.available -= seats

    def release(self, seats: int) -> None:
        """Return *seats* to the pool, never beyond ``total``."""
        self.available = min(self.total, self.available + seats)
