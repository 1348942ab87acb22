"""
Shared test fixtures.

Uses an in-memory SQLite database (via aiosqlite) built from the production
models, so tests run without Docker / PostgreSQL.  SQLite ignores
``FOR UPDATE``; the concurrency tests build their own file-backed engine
that serialises writers instead.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import AsyncGenerator, Optional

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from tareeqi.domain.clock import regional_now
from tareeqi.domain.entities import Requester
from tareeqi.domain.enums import (
    BookingStatus,
    Gender,
    GenderPreference,
    RideStatus,
    UserRole,
)
from tareeqi.infrastructure.database import Base
from tareeqi.infrastructure.models import (
    BookingModel,
    DriverProfileModel,
    RideModel,
    UniversityModel,
    UserModel,
)
from tareeqi.infrastructure.unit_of_work import UnitOfWork

TEST_DB_URL = "sqlite+aiosqlite://"


# ── Engine / sessions ─────────────────────────────────────────────────


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Fresh in-memory schema per test; one shared connection."""
    engine = create_async_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
def uow_factory(session_factory):
    return lambda: UnitOfWork(session_factory)


# ── Builders ──────────────────────────────────────────────────────────


def tomorrow_at(hour: int, minute: int = 0) -> datetime:
    """Naive regional wall time one day ahead."""
    return (regional_now() + timedelta(days=1)).replace(
        hour=hour, minute=minute, second=0, microsecond=0
    )


class Factory:
    """Inserts rows directly, bypassing the services under test."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory
        self._seq = 0

    async def _add(self, obj):
        async with self.session_factory() as session:
            session.add(obj)
            await session.commit()
            await session.refresh(obj)
        return obj

    async def user(
        self,
        role: UserRole = UserRole.PASSENGER,
        gender: Optional[Gender] = Gender.MALE,
    ) -> Requester:
        self._seq += 1
        user = await self._add(
            UserModel(
                full_name=f"User {self._seq}",
                email=f"user{self._seq}@example.com",
                role=role,
                gender=gender,
            )
        )
        return Requester(id=user.id, role=role)

    async def driver(self, car_seats: int = 4, gender: Gender = Gender.MALE) -> Requester:
        requester = await self.user(UserRole.DRIVER, gender)
        await self._add(
            DriverProfileModel(
                user_id=requester.id,
                license_number=f"LIC-{requester.id}",
                car_make="Toyota",
                car_model="Corolla",
                car_year=2020,
                car_color="White",
                car_plate_number=f"PL-{requester.id}",
                car_seats=car_seats,
                rating=0.0,
                total_reviews=0,
                total_rides=0,
            )
        )
        return requester

    async def university(
        self, name: str = "University of Jordan", city: str = "Amman"
    ) -> UniversityModel:
        return await self._add(
            UniversityModel(name=name, city=city, latitude=32.0146, longitude=35.8706)
        )

    async def ride(
        self,
        driver: Requester,
        seats: int = 3,
        price_per_seat: float = 2.0,
        traffic_fee: float = 0.0,
        departure_time: Optional[datetime] = None,
        status: RideStatus = RideStatus.SCHEDULED,
        **fields,
    ) -> RideModel:
        fields.setdefault("gender_preference", GenderPreference.MALE_ONLY)
        fields.setdefault("origin", "Sweileh")
        fields.setdefault("destination", "University of Jordan")
        return await self._add(
            RideModel(
                driver_id=driver.id,
                departure_time=departure_time or tomorrow_at(10),
                total_seats=seats,
                available_seats=seats,
                price_per_seat=price_per_seat,
                traffic_fee=traffic_fee,
                status=status,
                amenities=[],
                **fields,
            )
        )

    async def booking(
        self,
        ride: RideModel,
        passenger: Requester,
        seats: int = 1,
        status: BookingStatus = BookingStatus.COMPLETED,
    ) -> BookingModel:
        return await self._add(
            BookingModel(
                ride_id=ride.id,
                passenger_id=passenger.id,
                seats_booked=seats,
                total_price=ride.price_per_seat * seats,
                status=status,
            )
        )

    async def get(self, model, pk):
        async with self.session_factory() as session:
            return await session.get(model, pk)


@pytest.fixture
def factory(session_factory) -> Factory:
    return Factory(session_factory)
