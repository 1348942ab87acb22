"""
Concurrency safety tests.

Demonstrates:
1. Parallel bookings on one ride never oversell its seats.
2. One passenger racing themselves ends up with a single booking.
3. Parallel cancellations return a booking's seats exactly once.
4. Interleaved bookings and cancellations leave the counter balanced.

SQLite has no row locks, so the engine here opens every transaction with
``BEGIN IMMEDIATE``: writers queue on the database lock the same way they
queue on ``SELECT ... FOR UPDATE`` in PostgreSQL.
"""

from __future__ import annotations

import asyncio

import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from tareeqi.domain.enums import BookingStatus
from tareeqi.domain.exceptions import AlreadyBooked, CapacityError, InvalidStateTransition
from tareeqi.infrastructure.database import Base
from tareeqi.infrastructure.models import BookingModel, RideModel
from tareeqi.infrastructure.unit_of_work import UnitOfWork
from tareeqi.services.bookings import BookingService
from tests.conftest import Factory


@pytest_asyncio.fixture
async def serial_factory(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'concurrency.db'}",
        poolclass=NullPool,
        connect_args={"timeout": 30},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _autocommit_driver(dbapi_connection, connection_record):
        # Let SQLAlchemy emit BEGIN itself
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


def _outcomes(results):
    ok = [r for r in results if isinstance(r, BookingModel)]
    failed = [r for r in results if isinstance(r, Exception)]
    return ok, failed


@pytest.mark.asyncio
async def test_parallel_bookings_never_oversell(serial_factory):
    factory = Factory(serial_factory)
    driver = await factory.driver(car_seats=5)
    ride = await factory.ride(driver, seats=5)
    passengers = [await factory.user() for _ in range(5)]
    service = BookingService(lambda: UnitOfWork(serial_factory))

    results = await asyncio.gather(
        *(service.create_booking(ride.id, p, 2) for p in passengers),
        return_exceptions=True,
    )

    ok, failed = _outcomes(results)
    assert len(ok) == 2
    assert len(failed) == 3
    assert all(isinstance(e, CapacityError) for e in failed)
    assert (await factory.get(RideModel, ride.id)).available_seats == 1


@pytest.mark.asyncio
async def test_same_passenger_racing_books_once(serial_factory):
    factory = Factory(serial_factory)
    driver = await factory.driver()
    ride = await factory.ride(driver, seats=4)
    passenger = await factory.user()
    service = BookingService(lambda: UnitOfWork(serial_factory))

    results = await asyncio.gather(
        *(service.create_booking(ride.id, passenger, 1) for _ in range(3)),
        return_exceptions=True,
    )

    ok, failed = _outcomes(results)
    assert len(ok) == 1
    assert all(isinstance(e, AlreadyBooked) for e in failed)
    assert (await factory.get(RideModel, ride.id)).available_seats == 3


@pytest.mark.asyncio
async def test_parallel_cancellations_release_once(serial_factory):
    factory = Factory(serial_factory)
    driver = await factory.driver()
    ride = await factory.ride(driver, seats=3)
    passenger = await factory.user()
    service = BookingService(lambda: UnitOfWork(serial_factory))
    booking = await service.create_booking(ride.id, passenger, 2)

    results = await asyncio.gather(
        service.update_booking_status(booking.id, passenger, "cancelled"),
        service.update_booking_status(booking.id, driver, "cancelled"),
        return_exceptions=True,
    )

    ok, failed = _outcomes(results)
    assert len(ok) == 1
    assert len(failed) == 1 and isinstance(failed[0], InvalidStateTransition)
    assert (await factory.get(RideModel, ride.id)).available_seats == 3
    assert (await factory.get(BookingModel, booking.id)).status == BookingStatus.CANCELLED


@pytest.mark.asyncio
async def test_mixed_book_and_cancel_keeps_ledger_balanced(serial_factory):
    factory = Factory(serial_factory)
    driver = await factory.driver()
    ride = await factory.ride(driver, seats=4)
    service = BookingService(lambda: UnitOfWork(serial_factory))
    early = [await factory.user() for _ in range(2)]
    late = [await factory.user() for _ in range(3)]
    held = [await service.create_booking(ride.id, p, 2) for p in early]

    results = await asyncio.gather(
        *(service.update_booking_status(b.id, p, "cancelled") for b, p in zip(held, early)),
        *(service.create_booking(ride.id, p, 1) for p in late),
        return_exceptions=True,
    )

    cancels, creates = results[:2], results[2:]
    assert all(isinstance(r, BookingModel) for r in cancels)
    booked, refused = _outcomes(creates)
    assert all(isinstance(e, CapacityError) for e in refused)

    stored = await factory.get(RideModel, ride.id)
    assert stored.available_seats == 4 - len(booked)
