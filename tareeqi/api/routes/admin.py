"""
Admin / observability endpoints
===============================

GET /api/v1/admin/health                      -- liveness + database check
GET /api/v1/admin/rides/{ride_id}/inventory   -- seat ledger audit for a ride
"""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy import text

from tareeqi.api.dependencies import get_session_factory
from tareeqi.api.middleware import RATE_LIMIT, limiter
from tareeqi.api.schemas import HealthResponse, InventoryAuditResponse
from tareeqi.domain.enums import ACTIVE_BOOKING_STATUSES, RideStatus
from tareeqi.domain.exceptions import NotFoundError
from tareeqi.infrastructure.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health(session_factory=Depends(get_session_factory)):
    try:
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Health check: database unreachable")
        return HealthResponse(status="degraded", database="unreachable")
    return HealthResponse()


@router.get(
    "/rides/{ride_id}/inventory",
    response_model=InventoryAuditResponse,
    summary="Compare a ride's seat counter with the seats its bookings hold",
)
@limiter.limit(RATE_LIMIT)
async def inventory_audit(
    request: Request,
    ride_id: int,
    session_factory=Depends(get_session_factory),
):
    async with UnitOfWork(session_factory) as uow:
        ride = await uow.rides.get_by_id(ride_id)
        if ride is None:
            raise NotFoundError("Ride not found")
        held = await uow.bookings.seats_held(ride.id, ACTIVE_BOOKING_STATUSES)
    status = RideStatus(ride.status)
    # Terminal cascades leave seats consumed, so only scheduled rides balance
    consistent = (
        status != RideStatus.SCHEDULED
        or ride.available_seats + held == ride.total_seats
    )
    if not consistent:
        logger.warning(
            "Ride %d inventory drift: total=%d available=%d held=%d",
            ride.id, ride.total_seats, ride.available_seats, held,
        )
    return InventoryAuditResponse(
        ride_id=ride.id,
        status=status,
        total_seats=ride.total_seats,
        available_seats=ride.available_seats,
        seats_held=held,
        consistent=consistent,
    )
