"""Driver profiles: vehicle data plus the derived rating / ride counters."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from sqlalchemy.exc import IntegrityError

from tareeqi.config import settings
from tareeqi.domain.entities import Requester
from tareeqi.domain.exceptions import (
    AuthorizationError,
    NotFoundError,
    ProfileExists,
    StateConflictError,
    ValidationError,
)
from tareeqi.infrastructure.models import DriverProfileModel, UserModel
from tareeqi.infrastructure.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


@dataclass
class VehicleDetails:
    license_number: str
    car_make: str
    car_model: str
    car_year: int
    car_color: str
    car_plate_number: str
    car_seats: int


VEHICLE_FIELDS = frozenset(VehicleDetails.__dataclass_fields__)


class DriverService:
    def __init__(self, uow_factory: Callable[[], UnitOfWork] = UnitOfWork):
        self.uow_factory = uow_factory

    async def create_profile(
        self, requester: Requester, vehicle: VehicleDetails
    ) -> DriverProfileModel:
        if not requester.can_drive:
            raise AuthorizationError("Access denied. Driver role required.")

        async with self.uow_factory() as uow:
            if await uow.drivers.get_by_user(requester.id) is not None:
                raise ProfileExists()
            try:
                profile = await uow.drivers.create(
                    DriverProfileModel(
                        user_id=requester.id,
                        license_number=vehicle.license_number,
                        car_make=vehicle.car_make,
                        car_model=vehicle.car_model,
                        car_year=vehicle.car_year,
                        car_color=vehicle.car_color,
                        car_plate_number=vehicle.car_plate_number,
                        car_seats=vehicle.car_seats,
                        rating=0.0,
                        total_reviews=0,
                        total_rides=0,
                    )
                )
            except IntegrityError as exc:
                raise StateConflictError(
                    "License number or car plate number already exists"
                ) from exc
            logger.info("Driver profile %d created for user %d", profile.id, requester.id)
            return profile

    async def get_profile(self, user_id: int) -> DriverProfileModel:
        async with self.uow_factory() as uow:
            profile = await uow.drivers.get_by_user(user_id)
            if profile is None:
                raise NotFoundError("Driver profile not found")
            return profile

    async def update_profile(
        self, user_id: int, requester: Requester, changes: dict[str, Any]
    ) -> DriverProfileModel:
        """
        Edit your own vehicle details.

        Rides already published keep their seat counts; a smaller
        ``car_seats`` only caps rides published afterwards.
        """
        if not requester.can_drive:
            raise AuthorizationError("Access denied. Driver role required.")
        if requester.id != user_id:
            raise AuthorizationError("You can only update your own driver profile")
        unknown = set(changes) - VEHICLE_FIELDS
        if unknown:
            raise ValidationError(
                f"Fields cannot be updated: {', '.join(sorted(unknown))}"
            )
        changes = {k: v for k, v in changes.items() if v is not None}
        if not changes:
            raise ValidationError("No valid fields to update")
        seats = changes.get("car_seats")
        if seats is not None and not 1 <= seats <= settings.max_seats_per_booking:
            raise ValidationError(
                f"Car seats must be between 1 and {settings.max_seats_per_booking}"
            )

        async with self.uow_factory() as uow:
            profile = await uow.drivers.get_for_update(user_id)
            if profile is None:
                raise NotFoundError("Driver profile not found")
            for name, value in changes.items():
                setattr(profile, name, value)
            try:
                await uow.session.flush()
            except IntegrityError as exc:
                raise StateConflictError(
                    "License number or car plate number already exists"
                ) from exc
            await uow.session.refresh(profile)
            logger.info(
                "Driver profile of user %d updated: %s",
                user_id, ", ".join(sorted(changes)),
            )
            return profile

    async def list_drivers(
        self, min_rating: Optional[float] = None, car_make: Optional[str] = None
    ) -> list[tuple[DriverProfileModel, UserModel]]:
        async with self.uow_factory() as uow:
            return await uow.drivers.list_ranked(min_rating, car_make)
