"""Unit tests for the booking / ride transition tables."""

import itertools

import pytest

from tareeqi.domain.enums import Actor, BookingStatus, RideStatus
from tareeqi.domain.exceptions import AuthorizationError, InvalidStateTransition
from tareeqi.domain.state_machine import (
    BOOKING_TRANSITIONS,
    RIDE_CANCEL_CASCADE,
    assert_booking_transition,
    assert_ride_transition,
    can_transition_booking,
)

P, C, X, D = (
    BookingStatus.PENDING,
    BookingStatus.CONFIRMED,
    BookingStatus.CANCELLED,
    BookingStatus.COMPLETED,
)


class TestBookingTransitions:
    def test_driver_confirms(self):
        assert_booking_transition(P, C, Actor.DRIVER)

    def test_passenger_cannot_confirm(self):
        with pytest.raises(AuthorizationError):
            assert_booking_transition(P, C, Actor.PASSENGER)

    @pytest.mark.parametrize("actor", list(Actor))
    def test_anyone_may_cancel(self, actor):
        assert_booking_transition(P, X, actor)
        assert_booking_transition(C, X, actor)

    def test_only_passenger_reactivates(self):
        assert_booking_transition(X, P, Actor.PASSENGER)
        with pytest.raises(AuthorizationError):
            assert_booking_transition(X, P, Actor.DRIVER)

    def test_pending_cannot_complete(self):
        with pytest.raises(InvalidStateTransition):
            assert_booking_transition(P, D, Actor.DRIVER)

    @pytest.mark.parametrize("target", [P, C, X])
    def test_completed_is_terminal(self, target):
        with pytest.raises(InvalidStateTransition):
            assert_booking_transition(D, target, Actor.DRIVER)

    def test_raw_string_status_is_accepted(self):
        assert_booking_transition("pending", C, Actor.DRIVER)

    def test_every_pair_outside_table_is_rejected(self):
        for current, target in itertools.product(BookingStatus, repeat=2):
            if (current, target) in BOOKING_TRANSITIONS:
                continue
            assert not can_transition_booking(current, target)
            with pytest.raises(InvalidStateTransition):
                assert_booking_transition(current, target, Actor.SYSTEM)

    def test_ride_cancel_sweeps_every_live_status(self):
        assert set(RIDE_CANCEL_CASCADE) == {P, C, D}


class TestRideTransitions:
    def test_driver_completes_and_cancels_scheduled(self):
        assert_ride_transition(RideStatus.SCHEDULED, RideStatus.COMPLETED, Actor.DRIVER)
        assert_ride_transition(RideStatus.SCHEDULED, RideStatus.CANCELLED, Actor.DRIVER)

    def test_passenger_cannot_complete_ride(self):
        with pytest.raises(AuthorizationError):
            assert_ride_transition(
                RideStatus.SCHEDULED, RideStatus.COMPLETED, Actor.PASSENGER
            )

    @pytest.mark.parametrize("terminal", [RideStatus.COMPLETED, RideStatus.CANCELLED])
    def test_terminal_rides_do_not_move(self, terminal):
        with pytest.raises(InvalidStateTransition):
            assert_ride_transition(terminal, RideStatus.COMPLETED, Actor.DRIVER)
        with pytest.raises(InvalidStateTransition):
            assert_ride_transition(terminal, RideStatus.CANCELLED, Actor.DRIVER)
