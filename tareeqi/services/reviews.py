"""
Reviews between the two parties of a completed booking.

Every create / update / delete recomputes the reviewee's aggregate rating
in the same unit of work as the review write.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError

from tareeqi.domain.entities import Requester
from tareeqi.domain.enums import BookingStatus
from tareeqi.domain.exceptions import (
    AuthorizationError,
    DuplicateReview,
    NotFoundError,
    StateConflictError,
    ValidationError,
)
from tareeqi.domain.rating import MAX_RATING, MIN_RATING, RatingStats
from tareeqi.infrastructure.models import BookingModel, ReviewModel
from tareeqi.infrastructure.unit_of_work import UnitOfWork
from tareeqi.services.ratings import RatingAggregator

logger = logging.getLogger(__name__)

_UNSET = object()


def validate_rating(rating) -> int:
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ValidationError("Rating must be a whole number between 1 and 5")
    if not MIN_RATING <= rating <= MAX_RATING:
        raise ValidationError("Rating must be between 1 and 5")
    return rating


class ReviewService:
    def __init__(self, uow_factory: Callable[[], UnitOfWork] = UnitOfWork):
        self.uow_factory = uow_factory

    async def submit_review(
        self,
        booking_id: int,
        reviewer: Requester,
        reviewee_id: int,
        rating: int,
        comment: Optional[str] = None,
    ) -> ReviewModel:
        rating = validate_rating(rating)

        async with self.uow_factory() as uow:
            booking = await uow.bookings.get_by_id(booking_id)
            if booking is None:
                raise NotFoundError("Booking not found")
            _assert_completed(booking)
            ride = await uow.rides.get_by_id(booking.ride_id)

            is_driver = ride.driver_id == reviewer.id
            is_passenger = booking.passenger_id == reviewer.id
            if not (is_driver or is_passenger):
                raise AuthorizationError(
                    "You can only review bookings you were part of"
                )
            if is_driver and reviewee_id != booking.passenger_id:
                raise ValidationError("As a driver, you can only review the passenger")
            if is_passenger and reviewee_id != ride.driver_id:
                raise ValidationError("As a passenger, you can only review the driver")

            if await uow.reviews.find(booking.id, reviewer.id) is not None:
                raise DuplicateReview()

            try:
                review = await uow.reviews.create(
                    ReviewModel(
                        booking_id=booking.id,
                        reviewer_id=reviewer.id,
                        reviewee_id=reviewee_id,
                        rating=rating,
                        comment=comment,
                    )
                )
            except IntegrityError as exc:
                raise DuplicateReview() from exc

            await RatingAggregator(uow).recompute(reviewee_id)
            logger.info(
                "Review %d: user %d rated user %d %d/5 (booking %d)",
                review.id, reviewer.id, reviewee_id, rating, booking.id,
            )
            return review

    async def update_review(
        self,
        review_id: int,
        reviewer: Requester,
        rating: Optional[int] = None,
        comment=_UNSET,
    ) -> ReviewModel:
        if rating is None and comment is _UNSET:
            raise ValidationError("No valid fields to update")
        if rating is not None:
            rating = validate_rating(rating)

        async with self.uow_factory() as uow:
            review = await self._owned_review(uow, review_id, reviewer)
            booking = await uow.bookings.get_by_id(review.booking_id)
            _assert_completed(booking)

            if rating is not None:
                review.rating = rating
            if comment is not _UNSET:
                review.comment = comment
            await uow.session.flush()

            if rating is not None:
                await RatingAggregator(uow).recompute(review.reviewee_id)
            logger.info("Review %d updated by user %d", review.id, reviewer.id)
            return review

    async def delete_review(self, review_id: int, reviewer: Requester) -> None:
        async with self.uow_factory() as uow:
            review = await self._owned_review(uow, review_id, reviewer)
            reviewee_id = review.reviewee_id
            await uow.reviews.delete(review)
            await RatingAggregator(uow).recompute(reviewee_id)
            logger.info("Review %d deleted by user %d", review_id, reviewer.id)

    async def get_review(self, review_id: int) -> ReviewModel:
        async with self.uow_factory() as uow:
            review = await uow.reviews.get_by_id(review_id)
            if review is None:
                raise NotFoundError("Review not found")
            return review

    async def booking_reviews(self, booking_id: int) -> list[ReviewModel]:
        async with self.uow_factory() as uow:
            return await uow.reviews.list_for_booking(booking_id)

    async def user_reviews(self, user_id: int) -> tuple[list[ReviewModel], RatingStats]:
        async with self.uow_factory() as uow:
            reviews = await uow.reviews.list_for_reviewee(user_id)
            return reviews, RatingStats.from_ratings(r.rating for r in reviews)

    @staticmethod
    async def _owned_review(
        uow: UnitOfWork, review_id: int, reviewer: Requester
    ) -> ReviewModel:
        review = await uow.reviews.get_by_id(review_id)
        if review is None:
            raise NotFoundError("Review not found")
        if review.reviewer_id != reviewer.id:
            raise AuthorizationError("You are not the reviewer")
        return review


def _assert_completed(booking: BookingModel) -> None:
    if BookingStatus(booking.status) != BookingStatus.COMPLETED:
        raise StateConflictError("Only completed bookings can be reviewed")
