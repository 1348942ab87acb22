"""Reviews and the driver rating cache they feed."""

from __future__ import annotations

import pytest
from sqlalchemy import select

from tareeqi.domain.enums import BookingStatus, UserRole
from tareeqi.domain.exceptions import (
    AuthorizationError,
    DuplicateReview,
    NotFoundError,
    StateConflictError,
    ValidationError,
)
from tareeqi.domain.rating import RatingStats, mean_rating
from tareeqi.infrastructure.models import DriverProfileModel
from tareeqi.services.ratings import RatingAggregator
from tareeqi.services.reviews import ReviewService


@pytest.fixture
def reviews(uow_factory) -> ReviewService:
    return ReviewService(uow_factory)


async def _profile(factory, user_id: int) -> DriverProfileModel:
    async with factory.session_factory() as session:
        result = await session.execute(
            select(DriverProfileModel).where(DriverProfileModel.user_id == user_id)
        )
        return result.scalar_one()


async def _completed_trips(factory, driver, count: int):
    """``count`` completed bookings on one driver's rides, one passenger each."""
    trips = []
    for _ in range(count):
        passenger = await factory.user()
        ride = await factory.ride(driver)
        booking = await factory.booking(ride, passenger)
        trips.append((booking, passenger))
    return trips


class TestRatingMaths:
    def test_mean(self):
        assert mean_rating([5, 4, 3]) == 4.0
        assert mean_rating([5, 4]) == 4.5
        assert mean_rating([5, 4, 4]) == 4.33

    def test_no_ratings(self):
        assert mean_rating([]) == 0.0

    def test_stats_histogram(self):
        stats = RatingStats.from_ratings([5, 5, 3])
        assert stats.total_reviews == 3
        assert stats.average_rating == 4.33
        assert stats.histogram == {5: 2, 4: 0, 3: 1, 2: 0, 1: 0}


class TestSubmitReview:
    @pytest.mark.asyncio
    async def test_aggregate_follows_create_and_delete(self, factory, reviews):
        driver = await factory.driver()
        trips = await _completed_trips(factory, driver, 3)

        submitted = []
        for (booking, passenger), rating in zip(trips, [5, 4, 3]):
            submitted.append(
                await reviews.submit_review(booking.id, passenger, driver.id, rating)
            )

        profile = await _profile(factory, driver.id)
        assert (profile.rating, profile.total_reviews) == (4.0, 3)

        _, three_star_author = trips[2]
        await reviews.delete_review(submitted[2].id, three_star_author)

        profile = await _profile(factory, driver.id)
        assert (profile.rating, profile.total_reviews) == (4.5, 2)

    @pytest.mark.asyncio
    async def test_deleting_every_review_resets_rating(self, factory, reviews):
        driver = await factory.driver()
        [(booking, passenger)] = await _completed_trips(factory, driver, 1)
        review = await reviews.submit_review(booking.id, passenger, driver.id, 2)

        await reviews.delete_review(review.id, passenger)

        profile = await _profile(factory, driver.id)
        assert (profile.rating, profile.total_reviews) == (0.0, 0)

    @pytest.mark.asyncio
    async def test_cache_equals_recompute_from_scratch(self, factory, reviews, uow_factory):
        driver = await factory.driver()
        trips = await _completed_trips(factory, driver, 4)
        for (booking, passenger), rating in zip(trips, [1, 5, 5, 2]):
            await reviews.submit_review(booking.id, passenger, driver.id, rating)

        cached = (await _profile(factory, driver.id)).rating
        async with uow_factory() as uow:
            fresh = await RatingAggregator(uow).recompute(driver.id)
        assert cached == fresh == 3.25

    @pytest.mark.asyncio
    async def test_driver_reviews_passenger_without_profile(self, factory, reviews):
        driver = await factory.driver()
        [(booking, passenger)] = await _completed_trips(factory, driver, 1)

        review = await reviews.submit_review(booking.id, driver, passenger.id, 5, "On time")

        assert review.reviewee_id == passenger.id
        _, stats = await reviews.user_reviews(passenger.id)
        assert stats.average_rating == 5.0

    @pytest.mark.asyncio
    async def test_duplicate_review(self, factory, reviews):
        driver = await factory.driver()
        [(booking, passenger)] = await _completed_trips(factory, driver, 1)
        await reviews.submit_review(booking.id, passenger, driver.id, 4)

        with pytest.raises(DuplicateReview):
            await reviews.submit_review(booking.id, passenger, driver.id, 5)

        profile = await _profile(factory, driver.id)
        assert (profile.rating, profile.total_reviews) == (4.0, 1)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status",
        [BookingStatus.PENDING, BookingStatus.CONFIRMED, BookingStatus.CANCELLED],
    )
    async def test_booking_must_be_completed(self, factory, reviews, status):
        driver = await factory.driver()
        passenger = await factory.user()
        ride = await factory.ride(driver)
        booking = await factory.booking(ride, passenger, status=status)

        with pytest.raises(StateConflictError):
            await reviews.submit_review(booking.id, passenger, driver.id, 5)

    @pytest.mark.asyncio
    async def test_passenger_must_review_the_driver(self, factory, reviews):
        driver = await factory.driver()
        [(booking, passenger)] = await _completed_trips(factory, driver, 1)
        stranger = await factory.user()

        with pytest.raises(ValidationError):
            await reviews.submit_review(booking.id, passenger, stranger.id, 5)

    @pytest.mark.asyncio
    async def test_outsider_cannot_review(self, factory, reviews):
        driver = await factory.driver()
        [(booking, _)] = await _completed_trips(factory, driver, 1)
        outsider = await factory.user(role=UserRole.PASSENGER)

        with pytest.raises(AuthorizationError):
            await reviews.submit_review(booking.id, outsider, driver.id, 5)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("rating", [0, 6, 4.5, True, "5"])
    async def test_rating_must_be_whole_star(self, factory, reviews, rating):
        driver = await factory.driver()
        [(booking, passenger)] = await _completed_trips(factory, driver, 1)

        with pytest.raises(ValidationError):
            await reviews.submit_review(booking.id, passenger, driver.id, rating)

    @pytest.mark.asyncio
    async def test_missing_booking(self, factory, reviews):
        with pytest.raises(NotFoundError):
            await reviews.submit_review(999, await factory.user(), 1, 5)


class TestUpdateReview:
    @pytest.mark.asyncio
    async def test_rating_change_recomputes(self, factory, reviews):
        driver = await factory.driver()
        trips = await _completed_trips(factory, driver, 2)
        first = await reviews.submit_review(trips[0][0].id, trips[0][1], driver.id, 5)
        await reviews.submit_review(trips[1][0].id, trips[1][1], driver.id, 3)

        updated = await reviews.update_review(first.id, trips[0][1], rating=1)

        assert updated.rating == 1
        assert (await _profile(factory, driver.id)).rating == 2.0

    @pytest.mark.asyncio
    async def test_comment_only_keeps_rating(self, factory, reviews):
        driver = await factory.driver()
        [(booking, passenger)] = await _completed_trips(factory, driver, 1)
        review = await reviews.submit_review(booking.id, passenger, driver.id, 4)

        updated = await reviews.update_review(review.id, passenger, comment="Great")

        assert (updated.rating, updated.comment) == (4, "Great")

    @pytest.mark.asyncio
    async def test_only_author_may_edit_or_delete(self, factory, reviews):
        driver = await factory.driver()
        [(booking, passenger)] = await _completed_trips(factory, driver, 1)
        review = await reviews.submit_review(booking.id, passenger, driver.id, 4)

        with pytest.raises(AuthorizationError):
            await reviews.update_review(review.id, driver, rating=1)
        with pytest.raises(AuthorizationError):
            await reviews.delete_review(review.id, driver)

    @pytest.mark.asyncio
    async def test_empty_update_rejected(self, factory, reviews):
        driver = await factory.driver()
        [(booking, passenger)] = await _completed_trips(factory, driver, 1)
        review = await reviews.submit_review(booking.id, passenger, driver.id, 4)

        with pytest.raises(ValidationError):
            await reviews.update_review(review.id, passenger)


class TestReviewReads:
    @pytest.mark.asyncio
    async def test_booking_and_user_listings(self, factory, reviews):
        driver = await factory.driver()
        [(booking, passenger)] = await _completed_trips(factory, driver, 1)
        await reviews.submit_review(booking.id, passenger, driver.id, 5)
        await reviews.submit_review(booking.id, driver, passenger.id, 4)

        assert len(await reviews.booking_reviews(booking.id)) == 2
        received, stats = await reviews.user_reviews(driver.id)
        assert [r.rating for r in received] == [5]
        assert stats.histogram[5] == 1

    @pytest.mark.asyncio
    async def test_missing_review(self, reviews):
        with pytest.raises(NotFoundError):
            await reviews.get_review(1)
