"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from tareeqi.domain.clock import parse_timestamp
from tareeqi.domain.enums import (
    BookingStatus,
    FuelType,
    GenderPreference,
    RideDirection,
    RideStatus,
)


def _check_timestamp(value: Optional[str]) -> Optional[str]:
    if value is not None:
        try:
            parse_timestamp(value)
        except ValueError as exc:
            raise ValueError("departure_time must be an ISO 8601 timestamp") from exc
    return value


# ── Requests ──────────────────────────────────────────────────────────


class DriverProfileCreateRequest(BaseModel):
    license_number: str = Field(..., min_length=1, max_length=50)
    car_make: str = Field(..., min_length=1, max_length=50)
    car_model: str = Field(..., min_length=1, max_length=50)
    car_year: int = Field(..., ge=1950, le=2100)
    car_color: str = Field(..., min_length=1, max_length=30)
    car_plate_number: str = Field(..., min_length=1, max_length=20)
    car_seats: int = Field(..., ge=1, le=8)


class DriverProfileUpdateRequest(BaseModel):
    license_number: Optional[str] = Field(None, min_length=1, max_length=50)
    car_make: Optional[str] = Field(None, min_length=1, max_length=50)
    car_model: Optional[str] = Field(None, min_length=1, max_length=50)
    car_year: Optional[int] = Field(None, ge=1950, le=2100)
    car_color: Optional[str] = Field(None, min_length=1, max_length=30)
    car_plate_number: Optional[str] = Field(None, min_length=1, max_length=20)
    car_seats: Optional[int] = Field(None, ge=1, le=8)

    model_config = {"extra": "forbid"}


class RideCreateRequest(BaseModel):
    origin: str = Field(..., min_length=1, max_length=255)
    destination: str = Field(..., min_length=1, max_length=255)
    origin_lat: Optional[float] = Field(None, ge=-90, le=90)
    origin_lng: Optional[float] = Field(None, ge=-180, le=180)
    destination_lat: Optional[float] = Field(None, ge=-90, le=90)
    destination_lng: Optional[float] = Field(None, ge=-180, le=180)
    # Kept as the raw client string: the traffic fee reads its format
    departure_time: str = Field(
        ...,
        description="datetime-local (``2026-01-06T07:30``, local) or UTC ISO (``...Z``)",
    )
    available_seats: int = Field(..., description="Seats offered (1-8)")
    price_per_seat: float = Field(..., ge=0)
    distance_km: Optional[float] = Field(None, ge=0)
    gender_preference: GenderPreference = GenderPreference.MALE_ONLY
    direction: Optional[RideDirection] = None
    university_id: Optional[int] = None
    fuel_type: FuelType = FuelType.PETROL
    ac_enabled: bool = False
    description: Optional[str] = None
    amenities: list[str] = []

    @field_validator("departure_time")
    @classmethod
    def check_departure_time(cls, value):
        return _check_timestamp(value)


class RideUpdateRequest(BaseModel):
    departure_time: Optional[str] = None
    price_per_seat: Optional[float] = Field(None, ge=0)
    description: Optional[str] = None
    amenities: Optional[list[str]] = None
    origin: Optional[str] = Field(None, min_length=1, max_length=255)
    destination: Optional[str] = Field(None, min_length=1, max_length=255)
    origin_lat: Optional[float] = Field(None, ge=-90, le=90)
    origin_lng: Optional[float] = Field(None, ge=-180, le=180)
    destination_lat: Optional[float] = Field(None, ge=-90, le=90)
    destination_lng: Optional[float] = Field(None, ge=-180, le=180)
    direction: Optional[RideDirection] = None
    university_id: Optional[int] = None
    gender_preference: Optional[GenderPreference] = None
    distance_km: Optional[float] = Field(None, ge=0)
    fuel_type: Optional[FuelType] = None
    ac_enabled: Optional[bool] = None

    @field_validator("departure_time")
    @classmethod
    def check_departure_time(cls, value):
        return _check_timestamp(value)

    model_config = {"extra": "forbid"}


class BookingCreateRequest(BaseModel):
    ride_id: int
    # Range is enforced by the booking service so it reports a domain error
    seats_booked: int
    pickup_location: Optional[str] = Field(None, max_length=255)
    dropoff_location: Optional[str] = Field(None, max_length=255)


class BookingStatusRequest(BaseModel):
    status: str


class ReviewCreateRequest(BaseModel):
    booking_id: int
    reviewee_id: int
    rating: int
    comment: Optional[str] = None


class ReviewUpdateRequest(BaseModel):
    rating: Optional[int] = None
    comment: Optional[str] = None


# ── Responses ─────────────────────────────────────────────────────────


class DriverProfileResponse(BaseModel):
    id: int
    user_id: int
    car_make: str
    car_model: str
    car_year: int
    car_color: str
    car_plate_number: str
    car_seats: int
    rating: float
    total_reviews: int
    total_rides: int

    model_config = {"from_attributes": True}


class DriverSummaryResponse(DriverProfileResponse):
    full_name: str


class DriverListResponse(BaseModel):
    data: list[DriverSummaryResponse]
    count: int


class UniversityResponse(BaseModel):
    id: int
    name: str
    city: str
    latitude: float
    longitude: float

    model_config = {"from_attributes": True}


class UniversityListResponse(BaseModel):
    data: list[UniversityResponse]
    count: int


class RideResponse(BaseModel):
    id: int
    driver_id: int
    origin: str
    destination: str
    origin_lat: Optional[float] = None
    origin_lng: Optional[float] = None
    destination_lat: Optional[float] = None
    destination_lng: Optional[float] = None
    departure_time: datetime
    total_seats: int
    available_seats: int
    price_per_seat: float
    traffic_fee: float
    distance_km: Optional[float] = None
    status: RideStatus
    gender_preference: GenderPreference
    direction: Optional[RideDirection] = None
    university_id: Optional[int] = None
    fuel_type: Optional[FuelType] = None
    ac_enabled: Optional[bool] = None
    description: Optional[str] = None
    amenities: Optional[list[str]] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class RideCreatedResponse(BaseModel):
    message: str
    data: RideResponse
    traffic_fee_applied: float


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class RideSearchResponse(BaseModel):
    data: list[RideResponse]
    count: int
    pagination: Pagination


class BookingResponse(BaseModel):
    id: int
    ride_id: int
    passenger_id: int
    seats_booked: int
    total_price: float
    status: BookingStatus
    pickup_location: Optional[str] = None
    dropoff_location: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class PassengerBookingResponse(BookingResponse):
    origin: str
    destination: str
    departure_time: datetime
    driver_id: int
    ride_status: RideStatus


class ReviewResponse(BaseModel):
    id: int
    booking_id: int
    reviewer_id: int
    reviewee_id: int
    rating: int
    comment: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ReviewStats(BaseModel):
    total_reviews: int
    average_rating: float
    five_star: int
    four_star: int
    three_star: int
    two_star: int
    one_star: int


class UserReviewsResponse(BaseModel):
    reviews: list[ReviewResponse]
    stats: ReviewStats


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    status: str = "ok"
    database: str = "ok"


class InventoryAuditResponse(BaseModel):
    ride_id: int
    status: RideStatus
    total_seats: int
    available_seats: int
    seats_held: int
    consistent: bool


class ErrorResponse(BaseModel):
    detail: str
    code: str
