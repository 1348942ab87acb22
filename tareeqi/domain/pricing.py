"""
Peak-hour traffic fee and booking totals
========================================

Formula
-------
Traffic_Fee = Distance_KM x Rate_Per_KM   if the departure hour is in a peak window
            = 0                           otherwise

Total_Price = Price_Per_Seat x Seats + Traffic_Fee

* Peak windows default to 07:00-09:00 and 16:00-18:00 (end exclusive).
* The fee is computed once when a ride is published and frozen on the ride;
  each booking's total is frozen on the booking.

Hour extraction
---------------
Clients send either a ``datetime-local`` value (``2026-01-06T07:30``, no
zone, already local) or a UTC ISO string (``...Z``).  A string containing
``T`` that does not end in ``Z`` is read as local wall time straight from
the text; anything else is parsed, taken as UTC and shifted by the fixed
regional offset.  This mirrors what deployed clients rely on.

Complexity: O(1) per call.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Union

from tareeqi.config import settings

from .clock import parse_timestamp
from .exceptions import ValidationError

Timestamp = Union[str, datetime]

_CENT = Decimal("0.01")


def round_money(value: float) -> float:
    """Round to 2 decimals, halves away from zero."""
    return float(Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP))


def local_hour(departure_time: Timestamp, utc_offset_hours: int = 3) -> int:
    if isinstance(departure_time, datetime):
        if departure_time.tzinfo is None:
            return departure_time.hour
        utc_hour = departure_time.astimezone(timezone.utc).hour
        return (utc_hour + utc_offset_hours) % 24

    text = str(departure_time).strip()
    try:
        if "T" in text and not text.endswith("Z"):
            return int(text.split("T")[1].split(":")[0])
        parsed = parse_timestamp(text)
    except ValueError as exc:
        raise ValidationError(f"Invalid departure time: {departure_time!r}") from exc

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return (parsed.hour + utc_offset_hours) % 24


class FeeCalculator:
    """Peak-hour surcharge, configured from settings by default."""

    def __init__(
        self,
        rate_per_km: Optional[float] = None,
        peak_windows: Optional[Iterable[tuple[int, int]]] = None,
        utc_offset_hours: Optional[int] = None,
    ):
        self.rate_per_km = (
            settings.traffic_fee_per_km if rate_per_km is None else rate_per_km
        )
        self.peak_windows = [
            tuple(w)
            for w in (settings.peak_windows if peak_windows is None else peak_windows)
        ]
        self.utc_offset_hours = (
            settings.regional_utc_offset_hours
            if utc_offset_hours is None
            else utc_offset_hours
        )

    def is_peak(self, hour: int) -> bool:
        return any(start <= hour < end for start, end in self.peak_windows)

    def traffic_fee(
        self, departure_time: Optional[Timestamp], distance_km: Optional[float]
    ) -> float:
        if not distance_km or not departure_time:
            return 0.0
        hour = local_hour(departure_time, self.utc_offset_hours)
        if not self.is_peak(hour):
            return 0.0
        return round_money(float(distance_km) * self.rate_per_km)


def traffic_fee(
    departure_time: Optional[Timestamp], distance_km: Optional[float]
) -> float:
    return FeeCalculator().traffic_fee(departure_time, distance_km)


def booking_total(price_per_seat: float, seats: int, fee: float) -> float:
    return round_money(float(price_per_seat) * seats + float(fee or 0))
