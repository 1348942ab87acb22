"""FastAPI dependency injection helpers."""

from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tareeqi.domain.entities import Requester
from tareeqi.domain.enums import UserRole
from tareeqi.infrastructure.database import async_session_factory
from tareeqi.infrastructure.unit_of_work import UnitOfWork
from tareeqi.services.bookings import BookingService
from tareeqi.services.drivers import DriverService
from tareeqi.services.reviews import ReviewService
from tareeqi.services.rides import RideService
from tareeqi.services.universities import UniversityService


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory behind every unit of work; overridden in tests."""
    return async_session_factory


def _uow_factory(session_factory: async_sessionmaker[AsyncSession]):
    return lambda: UnitOfWork(session_factory)


def get_requester(
    x_user_id: Optional[int] = Header(None),
    x_user_role: Optional[str] = Header(None),
) -> Requester:
    """Identity asserted by the upstream auth gateway."""
    if x_user_id is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    try:
        role = UserRole(x_user_role) if x_user_role else UserRole.PASSENGER
    except ValueError:
        raise HTTPException(status_code=401, detail="Unknown role") from None
    return Requester(id=x_user_id, role=role)


def get_booking_service(
    session_factory=Depends(get_session_factory),
) -> BookingService:
    return BookingService(_uow_factory(session_factory))


def get_ride_service(session_factory=Depends(get_session_factory)) -> RideService:
    return RideService(_uow_factory(session_factory))


def get_review_service(session_factory=Depends(get_session_factory)) -> ReviewService:
    return ReviewService(_uow_factory(session_factory))


def get_driver_service(session_factory=Depends(get_session_factory)) -> DriverService:
    return DriverService(_uow_factory(session_factory))


def get_university_service(
    session_factory=Depends(get_session_factory),
) -> UniversityService:
    return UniversityService(_uow_factory(session_factory))
