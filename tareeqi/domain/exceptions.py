"""
Domain error taxonomy.

Every error raised by the booking core derives from ``CarpoolError`` and
carries the HTTP status and stable error code the API layer reports.
Anything else escaping a unit of work is an internal failure.
"""

from __future__ import annotations


class CarpoolError(Exception):
    status_code: int = 400
    code: str = "carpool_error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.__class__.__doc__ or self.code)
        self.message = str(self.args[0])


# ── Base categories ───────────────────────────────────────────────────


class ValidationError(CarpoolError):
    """Malformed or out-of-range input."""

    status_code = 400
    code = "validation_error"


class NotFoundError(CarpoolError):
    """Requested resource does not exist."""

    status_code = 404
    code = "not_found"


class StateConflictError(CarpoolError):
    """Resource is in the wrong lifecycle state for this action."""

    status_code = 409
    code = "state_conflict"


class AuthorizationError(CarpoolError):
    """Requester may not perform this action."""

    status_code = 403
    code = "forbidden"


class CapacityError(CarpoolError):
    """Not enough seats left on the ride."""

    status_code = 400
    code = "insufficient_seats"


# ── Specific outcomes ─────────────────────────────────────────────────


class InvalidStateTransition(StateConflictError):
    code = "invalid_transition"


class RideUnavailable(StateConflictError):
    """Ride is not available for booking."""

    code = "ride_unavailable"


class AlreadyDeparted(StateConflictError):
    """This ride has already departed."""

    code = "ride_departed"


class AlreadyBooked(StateConflictError):
    """You have already booked this ride."""

    code = "already_booked"


class DuplicateReview(StateConflictError):
    """You have already reviewed this booking."""

    code = "already_reviewed"


class ProfileExists(StateConflictError):
    """Driver profile already exists for this user."""

    code = "profile_exists"


class SelfBooking(AuthorizationError):
    """You cannot book your own ride."""

    code = "self_booking"


class InsufficientSeats(CapacityError):
    def __init__(self, available: int):
        super().__init__(f"Only {available} seats available")
        self.available = available
