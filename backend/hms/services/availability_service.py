"""
Availability service
Overlap detection over the half-open [check_in, check_out) interval and the two
room eligibility policies used by the booking flows.
"""
import logging
from datetime import date, datetime
from typing import List, Optional, Callable, Union

from hms.exceptions import ValidationError, NotFoundError
from hms.models.ontology import Room, RoomStatus, TERMINAL_STATUSES
from hms.models.schemas import RoomTypeAvailability
from hms.services.store import HotelStore

logger = logging.getLogger(__name__)

RoomPolicy = Callable[[Room], bool]
DateLike = Union[date, datetime]


# ============== Room eligibility policies ==============

def guest_facing_room_policy(room: Room) -> bool:
    """Public booking site: only rooms that are ready right now"""
    return room.status == RoomStatus.AVAILABLE


def staff_walk_in_room_policy(room: Room) -> bool:
    """Front desk: a room being cleaned can still be sold, one under maintenance cannot"""
    return room.status != RoomStatus.MAINTENANCE


# ============== Date helpers ==============

def _as_date(value: DateLike) -> date:
    # time of day is ignored for overlap and night counting
    return value.date() if isinstance(value, datetime) else value


def calculate_nights(check_in: DateLike, check_out: DateLike) -> int:
    return (_as_date(check_out) - _as_date(check_in)).days


def bookings_overlap(existing_check_in: DateLike, existing_check_out: DateLike,
                     new_check_in: DateLike, new_check_out: DateLike) -> bool:
    """Two stays share at least one night"""
    return (_as_date(existing_check_in) < _as_date(new_check_out)
            and _as_date(existing_check_out) > _as_date(new_check_in))


def validate_date_range(check_in: Optional[DateLike], check_out: Optional[DateLike]) -> int:
    """Return the number of nights, rejecting missing or non-increasing ranges"""
    if check_in is None or check_out is None:
        raise ValidationError("Check-in and check-out dates are required")
    nights = calculate_nights(check_in, check_out)
    if nights <= 0:
        raise ValidationError("Check-out date must be after check-in date")
    return nights


class AvailabilityService:
    """Availability resolver"""

    def __init__(self, store: HotelStore):
        self.store = store

    def has_conflict(self, room_id: str, check_in: DateLike, check_out: DateLike,
                     exclude_booking_id: Optional[str] = None) -> bool:
        """Any non-terminal booking on the room overlapping the range"""
        for booking in self.store.get_bookings():
            if booking.room_id != room_id or booking.status in TERMINAL_STATUSES:
                continue
            if exclude_booking_id and booking.id == exclude_booking_id:
                continue
            if bookings_overlap(booking.check_in, booking.check_out, check_in, check_out):
                return True
        return False

    def is_room_free(self, room_id: str, check_in: DateLike, check_out: DateLike,
                     policy: RoomPolicy, exclude_booking_id: Optional[str] = None) -> bool:
        room = self.store.get_room(room_id)
        if not room:
            raise NotFoundError("room", room_id)
        if not policy(room):
            return False
        return not self.has_conflict(room_id, check_in, check_out, exclude_booking_id)

    def get_free_rooms(self, check_in: DateLike, check_out: DateLike,
                       policy: RoomPolicy) -> List[Room]:
        return [
            room for room in self.store.get_rooms()
            if policy(room) and not self.has_conflict(room.id, check_in, check_out)
        ]

    def check_availability(self, check_in: DateLike, check_out: DateLike,
                           guests_count: int = 1) -> List[RoomTypeAvailability]:
        """
        Guest-facing availability search
        Returns room types with capacity for the party and at least one free room,
        each priced at base_price x nights.
        """
        nights = validate_date_range(check_in, check_out)
        if guests_count is None or guests_count < 1:
            raise ValidationError("Number of guests must be at least 1")

        free_rooms = self.get_free_rooms(check_in, check_out, guest_facing_room_policy)
        results = []
        for room_type in self.store.get_room_types():
            if room_type.capacity < guests_count:
                continue
            rooms = [r for r in free_rooms if r.type_id == room_type.id]
            if not rooms:
                continue
            results.append(RoomTypeAvailability(
                **room_type.model_dump(),
                available_rooms=rooms,
                total_price=room_type.base_price * nights,
                nights=nights,
            ))

        logger.debug(
            f"Availability {check_in}..{check_out} for {guests_count}: "
            f"{len(results)} room types"
        )
        return results

    def get_walk_in_rooms(self, check_in: DateLike, check_out: DateLike) -> List[Room]:
        """Rooms the front desk may sell for the range (staff walk-in policy)"""
        validate_date_range(check_in, check_out)
        return self.get_free_rooms(check_in, check_out, staff_walk_in_room_policy)
