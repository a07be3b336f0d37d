"""
Booking service - lifecycle operations
Creation (front desk and public site), confirm, check-in, check-out, cancel,
no-show and field updates. Each successful operation appends exactly one audit
entry after its changes are persisted; a refused operation changes nothing.
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Dict, Any, Union

import pydantic

from hms.config import settings
from hms.domain.booking import BookingTrigger, next_status
from hms.exceptions import NotFoundError, ValidationError, InvalidStateError
from hms.models.ontology import (
    Booking, BookingStatus, BookingType, PaymentStatus, Room, RoomType, RoomStatus,
    Guest, LineItemType, AuditAction
)
from hms.models.schemas import (
    CreateStayRequest, CreateBookingRequest, GuestCreate, BookingUpdate,
    BookingFilters, BookingDetail, RoomWithType
)
from hms.services.store import HotelStore, new_id
from hms.services.audit_service import AuditService
from hms.services.availability_service import (
    AvailabilityService, RoomPolicy, validate_date_range,
    guest_facing_room_policy, staff_walk_in_room_policy
)
from hms.services.folio_service import FolioService, format_amount

logger = logging.getLogger(__name__)

# Fields a generic booking update may touch; status goes through the lifecycle operations
UPDATABLE_FIELDS = frozenset({
    "room_id", "check_in", "check_out", "guests_count", "daily_rate", "payment_status", "notes"
})
SCHEDULE_FIELDS = frozenset({"room_id", "check_in", "check_out"})


class BookingService:
    """Booking lifecycle service"""

    def __init__(self, store: HotelStore):
        self.store = store
        self.audit_service = AuditService(store)
        self.availability_service = AvailabilityService(store)
        self.folio_service = FolioService(store)

    # ============== Lookups ==============

    def get_booking(self, booking_id: str) -> Booking:
        booking = self.store.get_booking(booking_id)
        if not booking:
            raise NotFoundError("booking", booking_id)
        return booking

    def _get_room(self, room_id: str) -> Room:
        room = self.store.get_room(room_id)
        if not room:
            raise NotFoundError("room", room_id)
        return room

    def _get_room_type(self, room: Room) -> RoomType:
        room_type = self.store.get_room_type(room.type_id)
        if not room_type:
            raise NotFoundError("room type", room.type_id)
        return room_type

    def to_detail(self, booking: Booking, guests: Dict[str, Guest], rooms: Dict[str, Room]) -> BookingDetail:
        guest = guests.get(booking.guest_id)
        if not guest:
            raise NotFoundError("guest", booking.guest_id)
        room = rooms.get(booking.room_id)
        if not room:
            raise NotFoundError("room", booking.room_id)
        return BookingDetail(
            **booking.model_dump(),
            guest=guest,
            room=RoomWithType(**room.model_dump(), type=self._get_room_type(room)),
        )

    def detail_maps(self):
        guests = {g.id: g for g in self.store.get_guests()}
        rooms = {r.id: r for r in self.store.get_rooms()}
        return guests, rooms

    def get_booking_detail(self, booking_id: str) -> BookingDetail:
        booking = self.get_booking(booking_id)
        return self.to_detail(booking, *self.detail_maps())

    def get_booking_by_code(self, code: str) -> BookingDetail:
        code = (code or "").strip().upper()
        booking = next((b for b in self.store.get_bookings() if b.booking_code.upper() == code), None)
        if not booking:
            raise NotFoundError("booking", message=f"Booking {code} not found")
        return self.to_detail(booking, *self.detail_maps())

    def list_bookings(self, filters: Optional[BookingFilters] = None) -> List[BookingDetail]:
        """Bookings newest first, filtered by status, payment status, check-in range and search text"""
        filters = filters or BookingFilters()
        guests, rooms = self.detail_maps()
        bookings = self.store.get_bookings()

        if filters.status:
            bookings = [b for b in bookings if b.status == filters.status]
        if filters.payment_status:
            bookings = [b for b in bookings if b.payment_status == filters.payment_status]
        if filters.date_from:
            bookings = [b for b in bookings if b.check_in >= filters.date_from]
        if filters.date_to:
            bookings = [b for b in bookings if b.check_in <= filters.date_to]
        if filters.search:
            term = filters.search.strip().lower()

            def matches(b: Booking) -> bool:
                guest = guests.get(b.guest_id)
                return (
                    term in b.booking_code.lower()
                    or (guest is not None and (term in guest.name.lower() or term in guest.phone))
                )
            bookings = [b for b in bookings if matches(b)]

        bookings.sort(key=lambda b: b.created_at, reverse=True)
        return [self.to_detail(b, guests, rooms) for b in bookings]

    # ============== Creation ==============

    def _generate_booking_code(self) -> str:
        sequence = self.store.increment_booking_sequence()
        return f"{settings.BOOKING_CODE_PREFIX}-{datetime.now().year}-{sequence:06d}"

    @staticmethod
    def _validate_guest(guest: GuestCreate) -> Dict[str, Any]:
        name = (guest.name or "").strip()
        phone = (guest.phone or "").strip()
        if not name:
            raise ValidationError("Guest name is required")
        if not phone:
            raise ValidationError("Guest phone is required")
        data = guest.model_dump()
        data.update(name=name, phone=phone)
        return data

    def _create(
        self,
        data: Union[CreateStayRequest, CreateBookingRequest],
        policy: RoomPolicy,
        booking_type: BookingType,
        status: BookingStatus,
        payment_status: PaymentStatus,
        daily_rate: Optional[Decimal],
        operator: Optional[str],
        description: str,
    ) -> Booking:
        # Validate everything before the first write
        nights = validate_date_range(data.check_in, data.check_out)
        if data.guests_count is None:
            raise ValidationError("Number of guests is required")
        if data.guests_count < 1:
            raise ValidationError("Number of guests must be at least 1")
        guest_data = self._validate_guest(data.guest)

        room = self._get_room(data.room_id)
        room_type = self._get_room_type(room)
        if data.guests_count > room_type.capacity:
            raise ValidationError(
                f"{room_type.name} accommodates at most {room_type.capacity} guests"
            )
        if not self.availability_service.is_room_free(room.id, data.check_in, data.check_out, policy):
            logger.warning(f"Room {room.number} not available for {data.check_in}..{data.check_out}")
            raise InvalidStateError(f"Room {room.number} is not available for the selected dates")

        rate = room_type.base_price if daily_rate is None else Decimal(daily_rate)
        guest = self.store.add_guest(guest_data)
        booking = self.store.add_booking(Booking(
            id=new_id("b"),
            booking_code=self._generate_booking_code(),
            guest_id=guest.id,
            room_id=room.id,
            check_in=data.check_in,
            check_out=data.check_out,
            guests_count=data.guests_count,
            total_amount=rate * nights,
            daily_rate=rate,
            status=status,
            payment_status=payment_status,
            booking_type=booking_type,
            created_at=datetime.now(),
            notes=data.notes,
        ))
        self.folio_service.open_folio(booking, nights)

        self.audit_service.record(
            AuditAction.BOOKING_CREATED, "booking", booking.id,
            f"{description} created for {guest.name}",
            operator=operator,
            new_value={"booking_code": booking.booking_code, "room_id": room.id,
                       "total_amount": booking.total_amount},
        )
        logger.info(
            f"Booking {booking.booking_code} created: room {room.number}, "
            f"{data.check_in}..{data.check_out}, {booking.status.value}"
        )
        return booking

    def create_stay(self, data: CreateStayRequest, operator: Optional[str] = None) -> Booking:
        """
        Front desk booking (walk-in or reservation)
        Business rules:
        1. check_out after check_in, guests_count set, guest name and phone present
        2. room free for the dates under the staff walk-in policy, party fits the room type
        3. WALK_IN starts CONFIRMED, RESERVATION starts RESERVED
        4. guest, booking and folio (with the room charge) are created together
        """
        booking_type = BookingType(data.booking_type)
        return self._create(
            data,
            policy=staff_walk_in_room_policy,
            booking_type=booking_type,
            status=BookingStatus.CONFIRMED if booking_type == BookingType.WALK_IN else BookingStatus.RESERVED,
            payment_status=PaymentStatus.PENDING,
            daily_rate=data.daily_rate,
            operator=operator,
            description="Walk-in" if booking_type == BookingType.WALK_IN else "Reservation",
        )

    def create_booking(self, data: CreateBookingRequest, operator: Optional[str] = None) -> Booking:
        """
        Public site booking, always at the room type's base price
        PAY_AT_HOTEL is confirmed straight away, ONLINE waits for payment as RESERVED
        """
        pay_at_hotel = data.payment_method == "PAY_AT_HOTEL"
        return self._create(
            data,
            policy=guest_facing_room_policy,
            booking_type=BookingType.RESERVATION,
            status=BookingStatus.CONFIRMED if pay_at_hotel else BookingStatus.RESERVED,
            payment_status=PaymentStatus.PAY_AT_HOTEL if pay_at_hotel else PaymentStatus.PENDING,
            daily_rate=None,
            operator=operator,
            description="Online booking",
        )

    # ============== Lifecycle ==============

    @staticmethod
    def _require_backdate_reason(backdated: bool, reason: Optional[str]) -> Optional[str]:
        reason = reason.strip() if reason else None
        if backdated and not reason:
            raise ValidationError("A reason is required for a backdated operation")
        return reason

    def confirm_booking(self, booking_id: str, operator: Optional[str] = None) -> Booking:
        booking = self.get_booking(booking_id)
        status = next_status(booking, BookingTrigger.CONFIRM)
        updated = self.store.update_booking(booking_id, {"status": status})
        self.audit_service.record(
            AuditAction.BOOKING_UPDATED, "booking", booking_id,
            "Booking confirmed",
            operator=operator,
            previous_value={"status": booking.status.value},
            new_value={"status": status.value},
        )
        logger.info(f"Booking {booking.booking_code} confirmed")
        return updated

    def check_in(self, booking_id: str, backdated: bool = False, reason: Optional[str] = None,
                 operator: Optional[str] = None) -> Booking:
        """
        Check the guest in
        Business rules:
        1. backdated check-in needs a reason
        2. booking -> IN_HOUSE, room -> OCCUPIED
        The room is not re-checked for conflicts here; the booking's own
        availability check at creation time is relied on.
        """
        booking = self.get_booking(booking_id)
        reason = self._require_backdate_reason(backdated, reason)
        status = next_status(booking, BookingTrigger.CHECK_IN)
        room = self._get_room(booking.room_id)

        updated = self.store.update_booking(booking_id, {"status": status})
        self.store.update_room(room.id, {"status": RoomStatus.OCCUPIED})

        self.audit_service.record(
            AuditAction.BACKDATED_CHECK_IN if backdated else AuditAction.CHECK_IN,
            "booking", booking_id,
            f"Guest checked in{' (backdated)' if backdated else ''}",
            operator=operator,
            reason=reason,
        )
        logger.info(f"Booking {booking.booking_code} checked in to room {room.number}")
        return updated

    def ensure_checkout_allowed(self, booking_id: str) -> None:
        """Front desk policy: no checkout while a balance is outstanding"""
        next_status(self.get_booking(booking_id), BookingTrigger.CHECK_OUT)
        summary = self.folio_service.get_balance_summary(booking_id)
        if summary.balance_due > 0:
            logger.warning(f"Checkout refused for {booking_id}: balance {summary.balance_due}")
            raise InvalidStateError(
                f"Outstanding balance of {format_amount(summary.balance_due)}. "
                f"Please collect payment before checkout."
            )

    def check_out(self, booking_id: str, backdated: bool = False, reason: Optional[str] = None,
                  operator: Optional[str] = None) -> Booking:
        """
        Check the guest out
        Business rules:
        1. backdated check-out needs a reason
        2. booking -> CHECKED_OUT, room -> CLEANING
        3. booking marked PAID when payments cover the bill
        The outstanding balance policy is applied by the caller (ensure_checkout_allowed).
        """
        booking = self.get_booking(booking_id)
        reason = self._require_backdate_reason(backdated, reason)
        status = next_status(booking, BookingTrigger.CHECK_OUT)
        room = self._get_room(booking.room_id)
        summary = self.folio_service.get_balance_summary(booking_id)

        updates: Dict[str, Any] = {"status": status}
        if summary.total_paid >= summary.total_billed:
            updates["payment_status"] = PaymentStatus.PAID
        updated = self.store.update_booking(booking_id, updates)
        self.store.update_room(room.id, {"status": RoomStatus.CLEANING})

        self.audit_service.record(
            AuditAction.BACKDATED_CHECK_OUT if backdated else AuditAction.CHECK_OUT,
            "booking", booking_id,
            f"Guest checked out{' (backdated)' if backdated else ''}",
            operator=operator,
            reason=reason,
        )
        logger.info(f"Booking {booking.booking_code} checked out of room {room.number}")
        return updated

    def cancel_booking(self, booking_id: str, reason: str, operator: Optional[str] = None) -> Booking:
        """Cancel a pending booking; in-house bookings must be checked out instead"""
        booking = self.get_booking(booking_id)
        status = next_status(booking, BookingTrigger.CANCEL)
        if not reason or not reason.strip():
            raise ValidationError("A cancellation reason is required")

        updated = self.store.update_booking(booking_id, {"status": status})
        self.audit_service.record(
            AuditAction.BOOKING_CANCELLED, "booking", booking_id,
            "Booking cancelled",
            operator=operator,
            reason=reason.strip(),
            previous_value={"status": booking.status.value},
        )
        logger.info(f"Booking {booking.booking_code} cancelled: {reason.strip()}")
        return updated

    def mark_no_show(self, booking_id: str, operator: Optional[str] = None) -> Booking:
        """The room was never occupied, so its status is left alone"""
        booking = self.get_booking(booking_id)
        status = next_status(booking, BookingTrigger.NO_SHOW)
        updated = self.store.update_booking(booking_id, {"status": status})
        self.audit_service.record(
            AuditAction.NO_SHOW_MARKED, "booking", booking_id,
            "Guest marked as no-show",
            operator=operator,
            previous_value={"status": booking.status.value},
        )
        logger.info(f"Booking {booking.booking_code} marked as no-show")
        return updated

    # ============== Updates ==============

    def update_booking(self, booking_id: str, updates: Union[BookingUpdate, Dict[str, Any]],
                       reason: Optional[str] = None, operator: Optional[str] = None) -> Booking:
        """
        Patch booking fields
        Business rules:
        1. only UPDATABLE_FIELDS, dates must stay ordered, party must fit the room type
        2. a new room or new dates must be free under the staff walk-in policy
        3. a room change while in house moves the guest: old room -> CLEANING, new -> OCCUPIED
        4. a change of nights or rate is reflected on the folio room charge
        """
        booking = self.get_booking(booking_id)
        if isinstance(updates, BookingUpdate):
            updates = updates.model_dump(exclude_unset=True)
        else:
            unknown = set(updates) - UPDATABLE_FIELDS
            if unknown:
                raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")
            try:
                updates = BookingUpdate.model_validate(updates).model_dump(exclude_unset=True)
            except pydantic.ValidationError as e:
                raise ValidationError(f"Invalid booking update: {e}") from e

        changes = {k: v for k, v in updates.items() if getattr(booking, k) != v}
        if not changes:
            return booking

        if booking.is_terminal and SCHEDULE_FIELDS & set(changes):
            raise InvalidStateError(
                f"Booking {booking.booking_code} is {booking.status.value}, room and dates can no longer change"
            )
        for field in ("room_id", "check_in", "check_out", "guests_count", "daily_rate"):
            if field in changes and changes[field] is None:
                raise ValidationError(f"{field} cannot be cleared")

        room_id = changes.get("room_id", booking.room_id)
        check_in = changes.get("check_in", booking.check_in)
        check_out = changes.get("check_out", booking.check_out)
        guests_count = changes.get("guests_count", booking.guests_count)
        nights = validate_date_range(check_in, check_out)

        room = self._get_room(room_id)
        room_type = self._get_room_type(room)
        if guests_count < 1 or guests_count > room_type.capacity:
            raise ValidationError(
                f"{room_type.name} accommodates between 1 and {room_type.capacity} guests"
            )
        if SCHEDULE_FIELDS & set(changes):
            if not self.availability_service.is_room_free(
                room_id, check_in, check_out, staff_walk_in_room_policy, exclude_booking_id=booking_id
            ):
                logger.warning(f"Booking {booking.booking_code}: room {room.number} not free for {check_in}..{check_out}")
                raise InvalidStateError(f"Room {room.number} is not available for the selected dates")

        room_changed = "room_id" in changes
        moving_guest = room_changed and booking.is_in_house
        updated = self.store.update_booking(booking_id, changes)

        if "check_in" in changes or "check_out" in changes or "daily_rate" in changes:
            self._reprice_room_charge(updated, nights)
            updated = self.get_booking(booking_id)

        if moving_guest:
            self.store.update_room(booking.room_id, {"status": RoomStatus.CLEANING})
            self.store.update_room(room_id, {"status": RoomStatus.OCCUPIED})
            self.audit_service.record(
                AuditAction.ROOM_CHANGED, "booking", booking_id,
                "Room changed",
                operator=operator,
                reason=reason,
                previous_value=booking.room_id,
                new_value=room_id,
            )
            logger.info(f"Booking {booking.booking_code} moved from {booking.room_id} to {room_id}")
        else:
            self.audit_service.record(
                AuditAction.BOOKING_UPDATED, "booking", booking_id,
                "Booking details updated",
                operator=operator,
                reason=reason,
                previous_value={k: getattr(booking, k) for k in changes},
                new_value=changes,
            )
            logger.info(f"Booking {booking.booking_code} updated: {', '.join(sorted(changes))}")
        return updated

    def _reprice_room_charge(self, booking: Booking, nights: int) -> None:
        """Keep the folio room charge in step with the booking's nights and rate"""
        folio = self.store.get_folio_by_booking(booking.id)
        if not folio:
            return
        line_items = []
        for item in folio.line_items:
            if item.type == LineItemType.ROOM_CHARGE:
                item = item.model_copy(update={
                    "quantity": nights,
                    "unit_price": booking.daily_rate,
                    "total": booking.daily_rate * nights,
                    "description": f"Room Charges ({nights} night{'s' if nights > 1 else ''})",
                })
            line_items.append(item)
        folio = self.store.update_folio(folio.id, {"line_items": line_items})
        self.store.update_booking(booking.id, {"total_amount": folio.grand_total})
