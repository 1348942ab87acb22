"""
SQLAlchemy ORM models  (maps to PostgreSQL).

Tables
------
* ``users``            -- identities owned by the auth service (read-only here)
* ``driver_profiles``  -- vehicle data + denormalised rating / ride counters
* ``universities``     -- campuses rides can be tied to
* ``rides``            -- published trips with seat inventory
* ``bookings``         -- a passenger's claim on seats of a ride
* ``reviews``          -- post-trip ratings between the two booking parties

Constraints
-----------
* ``rides``: ``0 <= available_seats <= total_seats`` as a CHECK, so a bad
  ledger write fails the transaction instead of persisting.
* ``bookings``: one row per (ride, passenger); cancelled rows are reused.
* ``reviews``: one row per (booking, reviewer).
"""

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)

from .database import Base
from tareeqi.domain.enums import (
    BookingStatus,
    FuelType,
    Gender,
    GenderPreference,
    RideDirection,
    RideStatus,
    UserRole,
)


def _enum(enum_cls, name: str) -> Enum:
    """Persist enum *values* (lower-case) rather than member names."""
    return Enum(
        enum_cls,
        name=name,
        values_callable=lambda members: [m.value for m in members],
    )


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    full_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    role = Column(_enum(UserRole, "user_role"), default=UserRole.PASSENGER)
    gender = Column(_enum(Gender, "user_gender"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class DriverProfileModel(Base):
    __tablename__ = "driver_profiles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    license_number = Column(String(50), unique=True, nullable=False)
    car_make = Column(String(50), nullable=False)
    car_model = Column(String(50), nullable=False)
    car_year = Column(Integer, nullable=False)
    car_color = Column(String(30), nullable=False)
    car_plate_number = Column(String(20), unique=True, nullable=False)
    car_seats = Column(Integer, nullable=False)

    # Derived caches -- recomputed from reviews / rides, never edited directly
    rating = Column(Float, default=0.0, nullable=False)
    total_reviews = Column(Integer, default=0, nullable=False)
    total_rides = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        CheckConstraint("car_seats >= 1 AND car_seats <= 8", name="ck_driver_car_seats"),
        CheckConstraint("rating >= 0 AND rating <= 5", name="ck_driver_rating"),
        Index("idx_driver_profiles_user", "user_id"),
    )


class UniversityModel(Base):
    __tablename__ = "universities"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    city = Column(String(100), nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class RideModel(Base):
    __tablename__ = "rides"

    id = Column(Integer, primary_key=True, autoincrement=True)
    driver_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    origin = Column(String(255), nullable=False)
    destination = Column(String(255), nullable=False)
    origin_lat = Column(Float, nullable=True)
    origin_lng = Column(Float, nullable=True)
    destination_lat = Column(Float, nullable=True)
    destination_lng = Column(Float, nullable=True)

    # Regional wall time, naive (see tareeqi.domain.clock)
    departure_time = Column(DateTime, nullable=False)

    total_seats = Column(Integer, nullable=False)
    available_seats = Column(Integer, nullable=False)
    price_per_seat = Column(Float, nullable=False)
    traffic_fee = Column(Float, default=0.0, nullable=False)
    distance_km = Column(Float, nullable=True)

    status = Column(
        _enum(RideStatus, "ride_status"), default=RideStatus.SCHEDULED, nullable=False
    )
    gender_preference = Column(
        _enum(GenderPreference, "ride_gender_preference"),
        default=GenderPreference.MALE_ONLY,
        nullable=False,
    )
    direction = Column(_enum(RideDirection, "ride_direction"), nullable=True)
    university_id = Column(Integer, ForeignKey("universities.id"), nullable=True)
    fuel_type = Column(_enum(FuelType, "fuel_type"), default=FuelType.PETROL)
    ac_enabled = Column(Boolean, default=False)
    description = Column(Text, nullable=True)
    amenities = Column(JSON, default=list)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        CheckConstraint("total_seats >= 1", name="ck_rides_total_seats"),
        CheckConstraint(
            "available_seats >= 0 AND available_seats <= total_seats",
            name="ck_rides_available_seats",
        ),
        CheckConstraint("price_per_seat >= 0", name="ck_rides_price"),
        Index("idx_rides_driver", "driver_id"),
        Index("idx_rides_status", "status"),
        Index("idx_rides_departure", "departure_time"),
        Index("idx_rides_university", "university_id"),
    )


class BookingModel(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    ride_id = Column(Integer, ForeignKey("rides.id"), nullable=False)
    passenger_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    seats_booked = Column(Integer, nullable=False)
    total_price = Column(Float, nullable=False)
    status = Column(
        _enum(BookingStatus, "booking_status"),
        default=BookingStatus.PENDING,
        nullable=False,
    )
    pickup_location = Column(String(255), nullable=True)
    dropoff_location = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        UniqueConstraint("ride_id", "passenger_id", name="uq_bookings_ride_passenger"),
        CheckConstraint("seats_booked > 0", name="ck_bookings_seats"),
        CheckConstraint("total_price >= 0", name="ck_bookings_price"),
        Index("idx_bookings_ride", "ride_id"),
        Index("idx_bookings_passenger", "passenger_id"),
        Index("idx_bookings_status", "status"),
    )


class ReviewModel(Base):
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, autoincrement=True)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=False)
    reviewer_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    reviewee_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("booking_id", "reviewer_id", name="uq_reviews_booking_reviewer"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating"),
        Index("idx_reviews_booking", "booking_id"),
        Index("idx_reviews_reviewee", "reviewee_id"),
    )
