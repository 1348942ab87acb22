"""Domain enumerations."""

import enum


class RideStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class BookingStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


# Seats of bookings in these states count against the ride's capacity
ACTIVE_BOOKING_STATUSES = frozenset(
    {BookingStatus.PENDING, BookingStatus.CONFIRMED, BookingStatus.COMPLETED}
)


class UserRole(str, enum.Enum):
    DRIVER = "driver"
    PASSENGER = "passenger"
    BOTH = "both"

    @property
    def can_drive(self) -> bool:
        return self in (UserRole.DRIVER, UserRole.BOTH)


class Gender(str, enum.Enum):
    MALE = "male"
    FEMALE = "female"


class GenderPreference(str, enum.Enum):
    MALE_ONLY = "male_only"
    FEMALE_ONLY = "female_only"

    @classmethod
    def for_gender(cls, gender: Gender) -> "GenderPreference":
        return cls.MALE_ONLY if gender == Gender.MALE else cls.FEMALE_ONLY


class RideDirection(str, enum.Enum):
    TO_UNIVERSITY = "to_university"
    FROM_UNIVERSITY = "from_university"


class FuelType(str, enum.Enum):
    PETROL = "petrol"
    HYBRID = "hybrid"
    ELECTRIC = "electric"


class Actor(str, enum.Enum):
    """Which party drives a state transition."""

    DRIVER = "driver"
    PASSENGER = "passenger"
    SYSTEM = "system"  # cascades run by the ride lifecycle
