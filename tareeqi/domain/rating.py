"""Aggregate rating maths (pure; persistence lives in the service layer)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from .pricing import round_money

MIN_RATING = 1
MAX_RATING = 5


def mean_rating(ratings: Iterable[int]) -> float:
    """Mean of *ratings* rounded to 2 decimals; 0 when there are none."""
    values = list(ratings)
    if not values:
        return 0.0
    return round_money(sum(values) / len(values))


@dataclass
class RatingStats:
    total_reviews: int = 0
    average_rating: float = 0.0
    histogram: dict[int, int] = field(default_factory=dict)

    @classmethod
    def from_ratings(cls, ratings: Iterable[int]) -> "RatingStats":
        values = list(ratings)
        histogram = {star: 0 for star in range(MAX_RATING, MIN_RATING - 1, -1)}
        for r in values:
            histogram[r] += 1
        return cls(
            total_reviews=len(values),
            average_rating=mean_rating(values),
            histogram=histogram,
        )
