"""
Driver profile endpoints
========================

POST /api/v1/drivers            -- register your vehicle
GET  /api/v1/drivers            -- drivers ranked by rating, then rides driven
GET  /api/v1/drivers/{user_id}  -- profile with rating and ride counters
PUT  /api/v1/drivers/{user_id}  -- edit your own vehicle details
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from tareeqi.api.dependencies import get_driver_service, get_requester
from tareeqi.api.middleware import RATE_LIMIT, limiter
from tareeqi.api.schemas import (
    DriverListResponse,
    DriverProfileCreateRequest,
    DriverProfileResponse,
    DriverProfileUpdateRequest,
    DriverSummaryResponse,
)
from tareeqi.domain.entities import Requester
from tareeqi.services.drivers import DriverService, VehicleDetails

router = APIRouter(prefix="/drivers", tags=["drivers"])


@router.post(
    "",
    status_code=201,
    response_model=DriverProfileResponse,
    summary="Create your driver profile",
)
@limiter.limit(RATE_LIMIT)
async def create_profile(
    request: Request,
    body: DriverProfileCreateRequest,
    requester: Requester = Depends(get_requester),
    service: DriverService = Depends(get_driver_service),
):
    return await service.create_profile(requester, VehicleDetails(**body.model_dump()))


@router.get(
    "",
    response_model=DriverListResponse,
    summary="List drivers, best rated first",
)
@limiter.limit(RATE_LIMIT)
async def list_drivers(
    request: Request,
    min_rating: Optional[float] = Query(None, ge=0, le=5),
    car_make: Optional[str] = None,
    requester: Requester = Depends(get_requester),
    service: DriverService = Depends(get_driver_service),
):
    rows = await service.list_drivers(min_rating, car_make)
    drivers = [
        DriverSummaryResponse(
            **DriverProfileResponse.model_validate(profile).model_dump(),
            full_name=user.full_name,
        )
        for profile, user in rows
    ]
    return DriverListResponse(data=drivers, count=len(drivers))


@router.get(
    "/{user_id}", response_model=DriverProfileResponse, summary="Get a driver profile"
)
@limiter.limit(RATE_LIMIT)
async def get_profile(
    request: Request,
    user_id: int,
    service: DriverService = Depends(get_driver_service),
):
    return await service.get_profile(user_id)


@router.put(
    "/{user_id}",
    response_model=DriverProfileResponse,
    summary="Update your driver profile",
    description="A smaller ``car_seats`` caps rides published afterwards only.",
)
@limiter.limit(RATE_LIMIT)
async def update_profile(
    request: Request,
    user_id: int,
    body: DriverProfileUpdateRequest,
    requester: Requester = Depends(get_requester),
    service: DriverService = Depends(get_driver_service),
):
    return await service.update_profile(
        user_id, requester, body.model_dump(exclude_unset=True)
    )
