"""
Distance helpers for the ride-search radius filter.

Great-circle (Haversine) distance only; the service has no routing engine
and no spatial index, so rides are filtered in memory after the SQL query.

Complexity: O(1) per call.
"""

from __future__ import annotations

import math
from typing import Optional

from .entities import Location
from .enums import RideDirection

EARTH_RADIUS_KM = 6_371.0


def haversine_km(a: Location, b: Location) -> float:
    """Return the great-circle distance in **km** between two points."""
    phi1, phi2 = math.radians(a.latitude), math.radians(b.latitude)
    dphi = phi2 - phi1
    dlmb = math.radians(b.longitude - a.longitude)

    h = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def ride_within_radius(
    user: Location,
    radius_km: float,
    direction: Optional[RideDirection],
    origin: Optional[Location],
    destination: Optional[Location],
) -> bool:
    """
    Is the ride's relevant endpoint within *radius_km* of *user*?

    Rides heading to a university are matched on their origin (where the
    passenger gets picked up), rides leaving one on their destination.
    Without a direction either endpoint counts, and a ride with neither
    endpoint located is dropped.  A directed ride missing its endpoint is
    kept.
    """
    if direction == RideDirection.TO_UNIVERSITY:
        return origin is None or haversine_km(user, origin) <= radius_km
    if direction == RideDirection.FROM_UNIVERSITY:
        return destination is None or haversine_km(user, destination) <= radius_km

    candidates = [p for p in (origin, destination) if p is not None]
    return any(haversine_km(user, p) <= radius_km for p in candidates)
