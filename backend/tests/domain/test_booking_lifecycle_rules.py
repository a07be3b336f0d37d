"""
Booking lifecycle rule tests
"""
import pytest
from datetime import date, datetime, timedelta
from decimal import Decimal

from hms.domain.booking import (
    BookingTrigger, next_status, allowed_triggers, CANCEL_IN_HOUSE_MESSAGE
)
from hms.exceptions import InvalidStateError
from hms.models.ontology import Booking, BookingStatus


def _booking(status):
    return Booking(
        id="b-1", booking_code="HMS-2026-000001", guest_id="g-1", room_id="r-101",
        check_in=date.today(), check_out=date.today() + timedelta(days=1), guests_count=1,
        total_amount=Decimal("1200"), daily_rate=Decimal("1200"),
        status=status, created_at=datetime.now(),
    )


class TestTransitions:
    """Allowed transitions"""

    @pytest.mark.parametrize("status,trigger,expected", [
        (BookingStatus.RESERVED, BookingTrigger.CONFIRM, BookingStatus.CONFIRMED),
        (BookingStatus.RESERVED, BookingTrigger.CHECK_IN, BookingStatus.IN_HOUSE),
        (BookingStatus.CONFIRMED, BookingTrigger.CHECK_IN, BookingStatus.IN_HOUSE),
        (BookingStatus.IN_HOUSE, BookingTrigger.CHECK_OUT, BookingStatus.CHECKED_OUT),
        (BookingStatus.CHECKED_IN, BookingTrigger.CHECK_OUT, BookingStatus.CHECKED_OUT),
        (BookingStatus.RESERVED, BookingTrigger.CANCEL, BookingStatus.CANCELLED),
        (BookingStatus.CONFIRMED, BookingTrigger.CANCEL, BookingStatus.CANCELLED),
        (BookingStatus.RESERVED, BookingTrigger.NO_SHOW, BookingStatus.NO_SHOW),
        (BookingStatus.CONFIRMED, BookingTrigger.NO_SHOW, BookingStatus.NO_SHOW),
    ])
    def test_allowed(self, status, trigger, expected):
        assert next_status(_booking(status), trigger) == expected


class TestRefusals:
    """Refused transitions"""

    @pytest.mark.parametrize("status", [BookingStatus.IN_HOUSE, BookingStatus.CHECKED_IN])
    def test_cancel_in_house(self, status):
        with pytest.raises(InvalidStateError) as exc:
            next_status(_booking(status), BookingTrigger.CANCEL)
        assert str(exc.value) == CANCEL_IN_HOUSE_MESSAGE

    @pytest.mark.parametrize("status", [
        BookingStatus.CHECKED_OUT, BookingStatus.CANCELLED, BookingStatus.NO_SHOW
    ])
    def test_terminal_states_have_no_way_out(self, status):
        booking = _booking(status)
        assert allowed_triggers(booking) == []
        for trigger in (BookingTrigger.CONFIRM, BookingTrigger.CHECK_IN, BookingTrigger.CHECK_OUT,
                        BookingTrigger.CANCEL, BookingTrigger.NO_SHOW):
            with pytest.raises(InvalidStateError):
                next_status(booking, trigger)

    def test_confirm_only_from_reserved(self):
        with pytest.raises(InvalidStateError):
            next_status(_booking(BookingStatus.CONFIRMED), BookingTrigger.CONFIRM)

    def test_check_out_requires_in_house(self):
        with pytest.raises(InvalidStateError):
            next_status(_booking(BookingStatus.CONFIRMED), BookingTrigger.CHECK_OUT)

    def test_no_show_after_check_in(self):
        with pytest.raises(InvalidStateError):
            next_status(_booking(BookingStatus.IN_HOUSE), BookingTrigger.NO_SHOW)
