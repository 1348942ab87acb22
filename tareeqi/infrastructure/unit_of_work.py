"""
Unit of work: one ``AsyncSession``, one transaction, all repositories.

::

    async with UnitOfWork(session_factory) as uow:
        ride = await uow.rides.get_for_update(ride_id)
        ...

Leaving the block normally commits.  Any exception -- a domain rejection
or an unexpected failure -- rolls back every write made inside the block
and propagates unchanged, so callers never observe partial mutation.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .database import async_session_factory
from .repositories import (
    BookingRepository,
    DriverProfileRepository,
    ReviewRepository,
    RideRepository,
    UniversityRepository,
    UserRepository,
)
from tareeqi.domain.exceptions import CarpoolError

logger = logging.getLogger(__name__)


class UnitOfWork:
    def __init__(
        self, session_factory: Optional[async_sessionmaker[AsyncSession]] = None
    ):
        self._session_factory = session_factory or async_session_factory
        self.session: Optional[AsyncSession] = None

    async def __aenter__(self) -> "UnitOfWork":
        self.session = self._session_factory()
        self.rides = RideRepository(self.session)
        self.bookings = BookingRepository(self.session)
        self.reviews = ReviewRepository(self.session)
        self.drivers = DriverProfileRepository(self.session)
        self.users = UserRepository(self.session)
        self.universities = UniversityRepository(self.session)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            if exc_type is None:
                await self.session.commit()
            else:
                await self.session.rollback()
                if not isinstance(exc, CarpoolError):
                    logger.error(
                        "Transaction rolled back after unexpected %s: %s",
                        exc_type.__name__,
                        exc,
                    )
        finally:
            await self.session.close()
            self.session = None
