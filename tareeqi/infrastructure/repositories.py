"""
Repository Pattern -- abstracts DB access so domain logic stays DB-agnostic.

Each repository receives an ``AsyncSession`` (unit-of-work) and exposes
domain-relevant queries only.  Nothing here commits; the unit of work
owns the transaction boundary.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Iterable, Optional

from sqlalchemy import case, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .models import (
    BookingModel,
    DriverProfileModel,
    ReviewModel,
    RideModel,
    UniversityModel,
    UserModel,
)
from tareeqi.domain.enums import (
    BookingStatus,
    GenderPreference,
    RideDirection,
    RideStatus,
)


class RideRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, ride: RideModel) -> RideModel:
        self.session.add(ride)
        await self.session.flush()
        await self.session.refresh(ride)
        return ride

    async def get_by_id(self, ride_id: int) -> Optional[RideModel]:
        return await self.session.get(RideModel, ride_id)

    async def get_for_update(self, ride_id: int) -> Optional[RideModel]:
        """SELECT ... FOR UPDATE; concurrent writers on this ride queue here."""
        result = await self.session.execute(
            select(RideModel)
            .where(RideModel.id == ride_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def decrement_seats(self, ride_id: int, seats: int) -> bool:
        """Take *seats* only if that many are still free.  Returns success."""
        result = await self.session.execute(
            update(RideModel)
            .where(RideModel.id == ride_id, RideModel.available_seats >= seats)
            .values(available_seats=RideModel.available_seats - seats)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def increment_seats(self, ride_id: int, seats: int) -> None:
        """Give back *seats*, clamped at ``total_seats``."""
        restored = RideModel.available_seats + seats
        await self.session.execute(
            update(RideModel)
            .where(RideModel.id == ride_id)
            .values(
                available_seats=case(
                    (restored > RideModel.total_seats, RideModel.total_seats),
                    else_=restored,
                )
            )
            .execution_options(synchronize_session=False)
        )

    async def refresh(self, ride: RideModel) -> RideModel:
        await self.session.refresh(ride)
        return ride

    async def list_by_driver(
        self, driver_id: int, status: RideStatus | None = None
    ) -> list[RideModel]:
        query = select(RideModel).where(RideModel.driver_id == driver_id)
        if status:
            query = query.where(RideModel.status == status)
        result = await self.session.execute(
            query.order_by(RideModel.departure_time.desc())
        )
        return list(result.scalars().all())

    async def count_completed_for_driver(self, driver_id: int) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(RideModel)
            .where(
                RideModel.driver_id == driver_id,
                RideModel.status == RideStatus.COMPLETED,
            )
        )
        return result.scalar() or 0

    async def search(
        self,
        *,
        status: RideStatus = RideStatus.SCHEDULED,
        gender_preference: GenderPreference | None = None,
        university_id: int | None = None,
        direction: RideDirection | None = None,
        origin: str | None = None,
        destination: str | None = None,
        departure_date: date | None = None,
        min_seats: int | None = None,
        max_price: float | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[RideModel], int]:
        """Filtered, departure-ordered page of rides plus the unpaged total."""
        conditions = [RideModel.status == status]
        if gender_preference:
            conditions.append(RideModel.gender_preference == gender_preference)
        if university_id:
            conditions.append(RideModel.university_id == university_id)
        if direction:
            conditions.append(RideModel.direction == direction)
        if origin:
            conditions.append(
                func.lower(RideModel.origin).contains(origin.lower(), autoescape=True)
            )
        if destination:
            conditions.append(
                func.lower(RideModel.destination).contains(
                    destination.lower(), autoescape=True
                )
            )
        if departure_date:
            day_start = datetime.combine(departure_date, time.min)
            conditions.append(RideModel.departure_time >= day_start)
            conditions.append(
                RideModel.departure_time < day_start + timedelta(days=1)
            )
        if min_seats:
            conditions.append(RideModel.available_seats >= min_seats)
        if max_price is not None:
            conditions.append(RideModel.price_per_seat <= max_price)

        total = await self.session.execute(
            select(func.count()).select_from(RideModel).where(*conditions)
        )
        rows = await self.session.execute(
            select(RideModel)
            .where(*conditions)
            .order_by(RideModel.departure_time.asc())
            .limit(limit)
            .offset(offset)
        )
        return list(rows.scalars().all()), total.scalar() or 0


class BookingRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, booking: BookingModel) -> BookingModel:
        self.session.add(booking)
        await self.session.flush()
        await self.session.refresh(booking)
        return booking

    async def get_by_id(self, booking_id: int) -> Optional[BookingModel]:
        return await self.session.get(BookingModel, booking_id)

    async def get_for_update(self, booking_id: int) -> Optional[BookingModel]:
        result = await self.session.execute(
            select(BookingModel)
            .where(BookingModel.id == booking_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def find_for_passenger(
        self, ride_id: int, passenger_id: int
    ) -> Optional[BookingModel]:
        """The (ride, passenger) row, whatever its status."""
        result = await self.session.execute(
            select(BookingModel)
            .where(
                BookingModel.ride_id == ride_id,
                BookingModel.passenger_id == passenger_id,
            )
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_for_ride(self, ride_id: int) -> list[BookingModel]:
        result = await self.session.execute(
            select(BookingModel)
            .where(BookingModel.ride_id == ride_id)
            .order_by(BookingModel.created_at.desc(), BookingModel.id.desc())
        )
        return list(result.scalars().all())

    async def list_for_passenger(
        self, passenger_id: int, status: BookingStatus | None = None
    ) -> list[tuple[BookingModel, RideModel]]:
        query = (
            select(BookingModel, RideModel)
            .join(RideModel, BookingModel.ride_id == RideModel.id)
            .where(BookingModel.passenger_id == passenger_id)
        )
        if status:
            query = query.where(BookingModel.status == status)
        result = await self.session.execute(
            query.order_by(RideModel.departure_time.desc())
        )
        return [(b, r) for b, r in result.all()]

    async def transition_all(
        self,
        ride_id: int,
        from_statuses: Iterable[BookingStatus],
        to_status: BookingStatus,
    ) -> int:
        """Bulk-move a ride's bookings; returns the number of rows touched."""
        result = await self.session.execute(
            update(BookingModel)
            .where(
                BookingModel.ride_id == ride_id,
                BookingModel.status.in_(list(from_statuses)),
            )
            .values(status=to_status)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    async def seats_held(self, ride_id: int, statuses: Iterable[BookingStatus]) -> int:
        result = await self.session.execute(
            select(func.coalesce(func.sum(BookingModel.seats_booked), 0)).where(
                BookingModel.ride_id == ride_id,
                BookingModel.status.in_(list(statuses)),
            )
        )
        return int(result.scalar() or 0)


class ReviewRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, review: ReviewModel) -> ReviewModel:
        self.session.add(review)
        await self.session.flush()
        await self.session.refresh(review)
        return review

    async def get_by_id(self, review_id: int) -> Optional[ReviewModel]:
        return await self.session.get(ReviewModel, review_id)

    async def find(self, booking_id: int, reviewer_id: int) -> Optional[ReviewModel]:
        result = await self.session.execute(
            select(ReviewModel).where(
                ReviewModel.booking_id == booking_id,
                ReviewModel.reviewer_id == reviewer_id,
            )
        )
        return result.scalar_one_or_none()

    async def delete(self, review: ReviewModel) -> None:
        await self.session.delete(review)
        await self.session.flush()

    async def ratings_for(self, reviewee_id: int) -> list[int]:
        result = await self.session.execute(
            select(ReviewModel.rating).where(ReviewModel.reviewee_id == reviewee_id)
        )
        return list(result.scalars().all())

    async def list_for_reviewee(self, reviewee_id: int) -> list[ReviewModel]:
        result = await self.session.execute(
            select(ReviewModel)
            .where(ReviewModel.reviewee_id == reviewee_id)
            .order_by(ReviewModel.created_at.desc(), ReviewModel.id.desc())
        )
        return list(result.scalars().all())

    async def list_for_booking(self, booking_id: int) -> list[ReviewModel]:
        result = await self.session.execute(
            select(ReviewModel).where(ReviewModel.booking_id == booking_id)
        )
        return list(result.scalars().all())


class DriverProfileRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, profile: DriverProfileModel) -> DriverProfileModel:
        self.session.add(profile)
        await self.session.flush()
        await self.session.refresh(profile)
        return profile

    async def get_by_user(self, user_id: int) -> Optional[DriverProfileModel]:
        result = await self.session.execute(
            select(DriverProfileModel).where(DriverProfileModel.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_for_update(self, user_id: int) -> Optional[DriverProfileModel]:
        result = await self.session.execute(
            select(DriverProfileModel)
            .where(DriverProfileModel.user_id == user_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_ranked(
        self, min_rating: Optional[float] = None, car_make: Optional[str] = None
    ) -> list[tuple[DriverProfileModel, UserModel]]:
        """Profiles with their users, best rated and most travelled first."""
        query = select(DriverProfileModel, UserModel).join(
            UserModel, DriverProfileModel.user_id == UserModel.id
        )
        if min_rating is not None:
            query = query.where(DriverProfileModel.rating >= min_rating)
        if car_make:
            query = query.where(
                func.lower(DriverProfileModel.car_make) == car_make.lower()
            )
        result = await self.session.execute(
            query.order_by(
                DriverProfileModel.rating.desc(),
                DriverProfileModel.total_rides.desc(),
                DriverProfileModel.id,
            )
        )
        return [(profile, user) for profile, user in result.all()]


class UserRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: int) -> Optional[UserModel]:
        return await self.session.get(UserModel, user_id)


class UniversityRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, university_id: int) -> Optional[UniversityModel]:
        return await self.session.get(UniversityModel, university_id)

    async def list_all(self, city: Optional[str] = None) -> list[UniversityModel]:
        query = select(UniversityModel)
        if city:
            query = query.where(func.lower(UniversityModel.city) == city.lower())
        result = await self.session.execute(query.order_by(UniversityModel.name))
        return list(result.scalars().all())
