"""
hms/domain/booking.py

Booking lifecycle rules expressed as a state machine:

    RESERVED --confirm--> CONFIRMED --check_in--> IN_HOUSE --check_out--> CHECKED_OUT
    RESERVED/CONFIRMED --cancel--> CANCELLED
    RESERVED/CONFIRMED --no_show--> NO_SHOW

CHECKED_IN is a legacy synonym of IN_HOUSE and can only be checked out.
"""
import logging

from hms.engine.state_machine import StateMachine, StateMachineConfig, StateTransition
from hms.exceptions import InvalidStateError
from hms.models.ontology import Booking, BookingStatus, IN_HOUSE_STATUSES

logger = logging.getLogger(__name__)


# ============== Triggers ==============

class BookingTrigger:
    CONFIRM = "confirm"
    CHECK_IN = "check_in"
    CHECK_OUT = "check_out"
    CANCEL = "cancel"
    NO_SHOW = "no_show"


_PENDING = [BookingStatus.RESERVED, BookingStatus.CONFIRMED]

_TRANSITIONS = (
    [StateTransition(BookingStatus.RESERVED.value, BookingStatus.CONFIRMED.value, BookingTrigger.CONFIRM)]
    + [StateTransition(s.value, BookingStatus.IN_HOUSE.value, BookingTrigger.CHECK_IN) for s in _PENDING]
    + [StateTransition(s.value, BookingStatus.CHECKED_OUT.value, BookingTrigger.CHECK_OUT)
       for s in (BookingStatus.IN_HOUSE, BookingStatus.CHECKED_IN)]
    + [StateTransition(s.value, BookingStatus.CANCELLED.value, BookingTrigger.CANCEL) for s in _PENDING]
    + [StateTransition(s.value, BookingStatus.NO_SHOW.value, BookingTrigger.NO_SHOW) for s in _PENDING]
)

CANCEL_IN_HOUSE_MESSAGE = "Cannot cancel a checked-in booking. Please check out first."


def create_booking_state_machine(status: BookingStatus) -> StateMachine:
    """Machine positioned at the booking's current status"""
    return StateMachine(
        config=StateMachineConfig(
            name="Booking",
            states=[s.value for s in BookingStatus],
            transitions=_TRANSITIONS,
            initial_state=BookingStatus.RESERVED.value,
        ),
        current_state=BookingStatus(status).value,
    )


def next_status(booking: Booking, trigger: str) -> BookingStatus:
    """
    Resolve the status a trigger moves the booking to.

    Raises:
        InvalidStateError: the trigger is not allowed from the current status
    """
    if trigger == BookingTrigger.CANCEL and booking.status in IN_HOUSE_STATUSES:
        logger.warning(f"Booking {booking.booking_code}: cancel refused while {booking.status.value}")
        raise InvalidStateError(CANCEL_IN_HOUSE_MESSAGE)

    machine = create_booking_state_machine(booking.status)
    target = machine.target_of(trigger)
    if target is None:
        logger.warning(f"Booking {booking.booking_code}: no '{trigger}' transition from {booking.status.value}")
    if target is None or not machine.transition_to(target, trigger):
        raise InvalidStateError(
            f"Booking {booking.booking_code} is {booking.status.value}, cannot {trigger.replace('_', ' ')}"
        )
    return BookingStatus(machine.current_state)


def allowed_triggers(booking: Booking) -> list:
    return create_booking_state_machine(booking.status).available_triggers()
