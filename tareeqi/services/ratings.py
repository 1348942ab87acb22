"""
Derived driver-profile counters.

Both caches are rebuilt from their source of truth on every write instead
of being nudged up and down, so they cannot drift:

* ``rating`` / ``total_reviews`` -- from all reviews of the reviewee
* ``total_rides``               -- from the driver's completed rides

Call these inside the unit of work that changed the source rows.
"""

from __future__ import annotations

import logging
from typing import Optional

from tareeqi.domain.rating import mean_rating
from tareeqi.infrastructure.models import DriverProfileModel
from tareeqi.infrastructure.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class RatingAggregator:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def recompute(self, reviewee_id: int) -> Optional[float]:
        """Rewrite the reviewee's rating; ``None`` if they have no profile."""
        await self.uow.session.flush()
        ratings = await self.uow.reviews.ratings_for(reviewee_id)
        average = mean_rating(ratings)

        profile = await self.uow.drivers.get_for_update(reviewee_id)
        if profile is None:
            logger.debug("User %d has no driver profile; rating not cached", reviewee_id)
            return None
        profile.rating = average
        profile.total_reviews = len(ratings)
        await self.uow.session.flush()
        logger.info(
            "Rating for user %d recomputed: %.2f over %d review(s)",
            reviewee_id, average, len(ratings),
        )
        return average


async def recompute_total_rides(
    uow: UnitOfWork, driver_id: int
) -> Optional[DriverProfileModel]:
    await uow.session.flush()
    profile = await uow.drivers.get_for_update(driver_id)
    if profile is None:
        logger.warning("Driver %d has no profile; total_rides not cached", driver_id)
        return None
    profile.total_rides = await uow.rides.count_completed_for_driver(driver_id)
    await uow.session.flush()
    return profile
