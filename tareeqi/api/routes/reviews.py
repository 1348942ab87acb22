"""
Review endpoints
================

POST   /api/v1/reviews                       -- review the other party of a booking
GET    /api/v1/reviews/{review_id}           -- single review
GET    /api/v1/reviews/user/{user_id}        -- reviews received + rating stats
GET    /api/v1/reviews/booking/{booking_id}  -- reviews left on a booking
PUT    /api/v1/reviews/{review_id}           -- edit your review
DELETE /api/v1/reviews/{review_id}           -- delete your review
"""

from fastapi import APIRouter, Depends, Request

from tareeqi.api.dependencies import get_requester, get_review_service
from tareeqi.api.middleware import RATE_LIMIT, limiter
from tareeqi.api.schemas import (
    MessageResponse,
    ReviewCreateRequest,
    ReviewResponse,
    ReviewStats,
    ReviewUpdateRequest,
    UserReviewsResponse,
)
from tareeqi.domain.entities import Requester
from tareeqi.services.reviews import ReviewService

router = APIRouter(prefix="/reviews", tags=["reviews"])

_STAR_FIELDS = {5: "five_star", 4: "four_star", 3: "three_star", 2: "two_star", 1: "one_star"}


@router.post(
    "",
    status_code=201,
    response_model=ReviewResponse,
    summary="Review the other party of a completed booking",
)
@limiter.limit(RATE_LIMIT)
async def create_review(
    request: Request,
    body: ReviewCreateRequest,
    requester: Requester = Depends(get_requester),
    service: ReviewService = Depends(get_review_service),
):
    return await service.submit_review(
        body.booking_id, requester, body.reviewee_id, body.rating, body.comment
    )


@router.get(
    "/user/{user_id}",
    response_model=UserReviewsResponse,
    summary="Reviews received by a user, with rating breakdown",
)
@limiter.limit(RATE_LIMIT)
async def user_reviews(
    request: Request,
    user_id: int,
    requester: Requester = Depends(get_requester),
    service: ReviewService = Depends(get_review_service),
):
    reviews, stats = await service.user_reviews(user_id)
    return UserReviewsResponse(
        reviews=[ReviewResponse.model_validate(r) for r in reviews],
        stats=ReviewStats(
            total_reviews=stats.total_reviews,
            average_rating=stats.average_rating,
            **{name: stats.histogram.get(star, 0) for star, name in _STAR_FIELDS.items()},
        ),
    )


@router.get(
    "/booking/{booking_id}",
    response_model=list[ReviewResponse],
    summary="Reviews left on a booking",
)
@limiter.limit(RATE_LIMIT)
async def booking_reviews(
    request: Request,
    booking_id: int,
    requester: Requester = Depends(get_requester),
    service: ReviewService = Depends(get_review_service),
):
    return await service.booking_reviews(booking_id)


@router.get("/{review_id}", response_model=ReviewResponse, summary="Get a review")
@limiter.limit(RATE_LIMIT)
async def get_review(
    request: Request,
    review_id: int,
    requester: Requester = Depends(get_requester),
    service: ReviewService = Depends(get_review_service),
):
    return await service.get_review(review_id)


@router.put("/{review_id}", response_model=ReviewResponse, summary="Edit your review")
@limiter.limit(RATE_LIMIT)
async def update_review(
    request: Request,
    review_id: int,
    body: ReviewUpdateRequest,
    requester: Requester = Depends(get_requester),
    service: ReviewService = Depends(get_review_service),
):
    changes = body.model_dump(exclude_unset=True)
    return await service.update_review(review_id, requester, **changes)


@router.delete(
    "/{review_id}", response_model=MessageResponse, summary="Delete your review"
)
@limiter.limit(RATE_LIMIT)
async def delete_review(
    request: Request,
    review_id: int,
    requester: Requester = Depends(get_requester),
    service: ReviewService = Depends(get_review_service),
):
    await service.delete_review(review_id, requester)
    return MessageResponse(message="Review deleted successfully")
