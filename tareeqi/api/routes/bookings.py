"""
Booking endpoints
=================

POST /api/v1/bookings                          -- reserve seats on a ride
GET  /api/v1/bookings/{booking_id}             -- booking details (either party)
GET  /api/v1/bookings/passenger/{passenger_id} -- a passenger's bookings
GET  /api/v1/bookings/ride/{ride_id}           -- bookings on a ride (driver)
PUT  /api/v1/bookings/{booking_id}/status      -- confirm / cancel / complete
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request

from tareeqi.api.dependencies import get_booking_service, get_requester
from tareeqi.api.middleware import RATE_LIMIT, limiter
from tareeqi.api.schemas import (
    BookingCreateRequest,
    BookingResponse,
    BookingStatusRequest,
    PassengerBookingResponse,
)
from tareeqi.domain.entities import Requester
from tareeqi.domain.enums import BookingStatus
from tareeqi.services.bookings import BookingService

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post(
    "",
    status_code=201,
    response_model=BookingResponse,
    summary="Book seats on a ride",
    description=(
        "Seats are reserved atomically against the ride's inventory.  "
        "A previously cancelled booking for the same ride is reactivated."
    ),
)
@limiter.limit(RATE_LIMIT)
async def create_booking(
    request: Request,
    body: BookingCreateRequest,
    requester: Requester = Depends(get_requester),
    service: BookingService = Depends(get_booking_service),
):
    return await service.create_booking(
        body.ride_id,
        requester,
        body.seats_booked,
        pickup_location=body.pickup_location,
        dropoff_location=body.dropoff_location,
    )


@router.get(
    "/passenger/{passenger_id}",
    response_model=list[PassengerBookingResponse],
    summary="List a passenger's bookings",
)
@limiter.limit(RATE_LIMIT)
async def passenger_bookings(
    request: Request,
    passenger_id: int,
    status: Optional[BookingStatus] = None,
    requester: Requester = Depends(get_requester),
    service: BookingService = Depends(get_booking_service),
):
    rows = await service.passenger_bookings(passenger_id, requester, status)
    return [
        PassengerBookingResponse(
            **BookingResponse.model_validate(booking).model_dump(),
            origin=ride.origin,
            destination=ride.destination,
            departure_time=ride.departure_time,
            driver_id=ride.driver_id,
            ride_status=ride.status,
        )
        for booking, ride in rows
    ]


@router.get(
    "/ride/{ride_id}",
    response_model=list[BookingResponse],
    summary="List bookings on one of your rides",
)
@limiter.limit(RATE_LIMIT)
async def ride_bookings(
    request: Request,
    ride_id: int,
    requester: Requester = Depends(get_requester),
    service: BookingService = Depends(get_booking_service),
):
    return await service.ride_bookings(ride_id, requester)


@router.get(
    "/{booking_id}", response_model=BookingResponse, summary="Get booking details"
)
@limiter.limit(RATE_LIMIT)
async def get_booking(
    request: Request,
    booking_id: int,
    requester: Requester = Depends(get_requester),
    service: BookingService = Depends(get_booking_service),
):
    return await service.get_booking(booking_id, requester)


@router.put(
    "/{booking_id}/status",
    response_model=BookingResponse,
    summary="Move a booking to a new status",
    description=(
        "Only the driver may confirm.  Cancelling returns the seats to the "
        "ride; completing leaves them consumed."
    ),
)
@limiter.limit(RATE_LIMIT)
async def update_booking_status(
    request: Request,
    booking_id: int,
    body: BookingStatusRequest,
    requester: Requester = Depends(get_requester),
    service: BookingService = Depends(get_booking_service),
):
    return await service.update_booking_status(booking_id, requester, body.status)
