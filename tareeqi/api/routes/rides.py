"""
Ride endpoints
==============

POST   /api/v1/rides                      -- publish a ride (driver)
GET    /api/v1/rides                      -- search scheduled rides
GET    /api/v1/rides/{ride_id}            -- ride details
GET    /api/v1/rides/driver/{driver_id}   -- a driver's rides
PUT    /api/v1/rides/{ride_id}            -- edit a scheduled ride (driver)
PUT    /api/v1/rides/{ride_id}/complete   -- complete the ride (driver)
DELETE /api/v1/rides/{ride_id}            -- cancel the ride (driver)
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from tareeqi.api.dependencies import get_requester, get_ride_service
from tareeqi.api.middleware import RATE_LIMIT, limiter
from tareeqi.api.schemas import (
    MessageResponse,
    Pagination,
    RideCreatedResponse,
    RideCreateRequest,
    RideResponse,
    RideSearchResponse,
    RideUpdateRequest,
)
from tareeqi.domain.entities import Requester
from tareeqi.domain.enums import RideDirection, RideStatus
from tareeqi.services.rides import RideDraft, RideSearch, RideService

router = APIRouter(prefix="/rides", tags=["rides"])


@router.post(
    "",
    status_code=201,
    response_model=RideCreatedResponse,
    summary="Publish a ride",
)
@limiter.limit(RATE_LIMIT)
async def create_ride(
    request: Request,
    body: RideCreateRequest,
    requester: Requester = Depends(get_requester),
    service: RideService = Depends(get_ride_service),
):
    fields = body.model_dump()
    seats = fields.pop("available_seats")
    ride = await service.create_ride(requester, RideDraft(seats=seats, **fields))
    message = (
        f"Ride created successfully. Traffic fee of {ride.traffic_fee} JOD "
        "applied for peak hours."
        if ride.traffic_fee > 0
        else "Ride created successfully"
    )
    return RideCreatedResponse(
        message=message,
        data=RideResponse.model_validate(ride),
        traffic_fee_applied=ride.traffic_fee,
    )


@router.get(
    "",
    response_model=RideSearchResponse,
    summary="Search rides visible to the requester",
)
@limiter.limit(RATE_LIMIT)
async def search_rides(
    request: Request,
    status: RideStatus = RideStatus.SCHEDULED,
    origin: Optional[str] = None,
    destination: Optional[str] = None,
    departure_date: Optional[date] = None,
    min_seats: Optional[int] = Query(None, ge=1),
    max_price: Optional[float] = Query(None, ge=0),
    university_id: Optional[int] = None,
    direction: Optional[RideDirection] = None,
    user_lat: Optional[float] = Query(None, ge=-90, le=90),
    user_lng: Optional[float] = Query(None, ge=-180, le=180),
    max_distance_km: Optional[float] = Query(None, gt=0),
    page: int = 1,
    limit: int = 20,
    requester: Requester = Depends(get_requester),
    service: RideService = Depends(get_ride_service),
):
    result = await service.search_rides(
        requester,
        RideSearch(
            status=status,
            university_id=university_id,
            direction=direction,
            origin=origin,
            destination=destination,
            departure_date=departure_date,
            min_seats=min_seats,
            max_price=max_price,
            user_lat=user_lat,
            user_lng=user_lng,
            max_distance_km=max_distance_km,
            page=page,
            limit=limit,
        ),
    )
    return RideSearchResponse(
        data=[RideResponse.model_validate(r) for r in result.rides],
        count=len(result.rides),
        pagination=Pagination(
            page=result.page,
            limit=result.limit,
            total=result.total,
            total_pages=result.total_pages,
        ),
    )


@router.get(
    "/driver/{driver_id}",
    response_model=list[RideResponse],
    summary="List a driver's rides",
)
@limiter.limit(RATE_LIMIT)
async def driver_rides(
    request: Request,
    driver_id: int,
    status: Optional[RideStatus] = None,
    requester: Requester = Depends(get_requester),
    service: RideService = Depends(get_ride_service),
):
    return await service.driver_rides(driver_id, status)


@router.get("/{ride_id}", response_model=RideResponse, summary="Get ride details")
@limiter.limit(RATE_LIMIT)
async def get_ride(
    request: Request,
    ride_id: int,
    requester: Requester = Depends(get_requester),
    service: RideService = Depends(get_ride_service),
):
    return await service.get_ride(ride_id)


@router.put(
    "/{ride_id}",
    response_model=RideResponse,
    summary="Edit a scheduled ride",
    description="Seat counts, status and the traffic fee cannot be edited.",
)
@limiter.limit(RATE_LIMIT)
async def update_ride(
    request: Request,
    ride_id: int,
    body: RideUpdateRequest,
    requester: Requester = Depends(get_requester),
    service: RideService = Depends(get_ride_service),
):
    return await service.update_ride(
        ride_id, requester, body.model_dump(exclude_unset=True)
    )


@router.put(
    "/{ride_id}/complete",
    response_model=MessageResponse,
    summary="Mark a ride as completed",
    description=(
        "Confirmed bookings become completed, pending bookings are cancelled "
        "and the driver's ride count is refreshed, all in one transaction."
    ),
)
@limiter.limit(RATE_LIMIT)
async def complete_ride(
    request: Request,
    ride_id: int,
    requester: Requester = Depends(get_requester),
    service: RideService = Depends(get_ride_service),
):
    await service.complete_ride(ride_id, requester)
    return MessageResponse(message="Ride marked as completed successfully")


@router.delete(
    "/{ride_id}",
    response_model=MessageResponse,
    summary="Cancel a ride",
    description="Cancels the ride and every booking on it not already cancelled.",
)
@limiter.limit(RATE_LIMIT)
async def cancel_ride(
    request: Request,
    ride_id: int,
    requester: Requester = Depends(get_requester),
    service: RideService = Depends(get_ride_service),
):
    await service.cancel_ride(ride_id, requester)
    return MessageResponse(message="Ride cancelled successfully")
