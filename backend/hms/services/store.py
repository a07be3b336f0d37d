"""
Hotel store - single source of truth
Every collection lives under one key of a KeyValueBackend as a JSON document.
Reads deserialise afresh (callers never share mutable state), writes persist
the full collection back. Business rules live in the services; the store only
guarantees entity shape, folio recalculation and the audit log retention window.
"""
import logging
import uuid
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Dict, Any, TypeVar, Type

import pydantic
from pydantic import BaseModel, TypeAdapter

from hms.catalog import ROOM_TYPES, initial_rooms, get_room_type
from hms.config import settings
from hms.exceptions import NotFoundError, ValidationError
from hms.models.ontology import (
    Room, RoomType, Guest, Booking, Folio, FolioLineItem, Payment, AuditLog
)
from hms.storage.backends import KeyValueBackend

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

# Stable key layout
ROOMS_KEY = "rooms"
BOOKINGS_KEY = "bookings"
GUESTS_KEY = "guests"
FOLIOS_KEY = "folios"
PAYMENTS_KEY = "payments"
AUDIT_LOGS_KEY = "audit_logs"
BOOKING_SEQUENCE_KEY = "booking_sequence"
INITIALIZED_KEY = "initialized"

ALL_KEYS = [
    ROOMS_KEY, BOOKINGS_KEY, GUESTS_KEY, FOLIOS_KEY, PAYMENTS_KEY,
    AUDIT_LOGS_KEY, BOOKING_SEQUENCE_KEY, INITIALIZED_KEY,
]

# Derived folio fields, only ever written by recalculate_folio_totals
FOLIO_DERIVED_FIELDS = frozenset({"subtotal", "tax_amount", "grand_total"})

_HUNDRED = Decimal("100")


def new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def recalculate_folio_totals(folio: Folio) -> Folio:
    """
    Recompute the derived folio totals:
        subtotal       = sum of line item totals
        discount_total = discount_amount + subtotal * discount_percent / 100
        after_discount = subtotal - discount_total
        tax_amount     = after_discount * tax_percent / 100
        grand_total    = after_discount + tax_amount
    """
    subtotal = sum((item.total for item in folio.line_items), Decimal("0"))
    discount_total = folio.discount_amount + subtotal * (folio.discount_percent / _HUNDRED)
    after_discount = subtotal - discount_total
    tax_amount = after_discount * (folio.tax_percent / _HUNDRED)
    grand_total = after_discount + tax_amount
    return folio.model_copy(update={
        "subtotal": subtotal,
        "tax_amount": tax_amount,
        "grand_total": grand_total,
    })


class HotelStore:
    """Key-value backed repository over all hotel entities"""

    def __init__(self, backend: KeyValueBackend, audit_retention: Optional[int] = None,
                 initial_sequence: Optional[int] = None):
        self.backend = backend
        self.audit_retention = (
            settings.AUDIT_LOG_RETENTION if audit_retention is None else audit_retention
        )
        self.initial_sequence = (
            settings.INITIAL_BOOKING_SEQUENCE if initial_sequence is None else initial_sequence
        )
        self._adapters: Dict[type, TypeAdapter] = {}
        self.ensure_initialized()

    # ============== Medium helpers ==============

    def _adapter(self, model: Type[ModelT]) -> TypeAdapter:
        if model not in self._adapters:
            self._adapters[model] = TypeAdapter(List[model])
        return self._adapters[model]

    def _read(self, key: str, model: Type[ModelT]) -> List[ModelT]:
        raw = self.backend.get(key)
        if raw is None:
            return []
        try:
            return self._adapter(model).validate_json(raw)
        except pydantic.ValidationError:
            logger.error(f"Corrupt document under key '{key}'", exc_info=True)
            raise

    def _write(self, key: str, model: Type[ModelT], items: List[ModelT]) -> None:
        self.backend.set(key, self._adapter(model).dump_json(items).decode("utf-8"))

    @staticmethod
    def _apply_updates(item: ModelT, updates: Dict[str, Any], entity_type: str) -> ModelT:
        """Merge a partial update into an entity, re-validating the result"""
        model = type(item)
        if "id" in updates:
            raise ValidationError(f"{entity_type.capitalize()} id cannot be changed")
        unknown = set(updates) - set(model.model_fields)
        if unknown:
            raise ValidationError(
                f"Unknown {entity_type} fields: {', '.join(sorted(unknown))}"
            )
        try:
            return model.model_validate({**item.model_dump(), **updates})
        except pydantic.ValidationError as e:
            raise ValidationError(f"Invalid {entity_type} update: {e}") from e

    def _update_entity(self, key: str, model: Type[ModelT], entity_type: str,
                       item_id: str, updates: Dict[str, Any]) -> ModelT:
        items = self._read(key, model)
        for index, item in enumerate(items):
            if item.id == item_id:
                items[index] = self._apply_updates(item, updates, entity_type)
                self._write(key, model, items)
                return items[index]
        raise NotFoundError(entity_type, item_id)

    @staticmethod
    def _find(items: List[ModelT], item_id: str) -> Optional[ModelT]:
        return next((item for item in items if item.id == item_id), None)

    # ============== Initialization ==============

    def ensure_initialized(self) -> None:
        """Seed an empty medium: rooms from the catalog, empty collections, sequence"""
        if self.backend.get(INITIALIZED_KEY) is not None:
            return
        self._write(ROOMS_KEY, Room, initial_rooms())
        for key, model in (
            (BOOKINGS_KEY, Booking), (GUESTS_KEY, Guest), (FOLIOS_KEY, Folio),
            (PAYMENTS_KEY, Payment), (AUDIT_LOGS_KEY, AuditLog),
        ):
            self._write(key, model, [])
        self.backend.set(BOOKING_SEQUENCE_KEY, str(self.initial_sequence))
        self.backend.set(INITIALIZED_KEY, "true")
        logger.info("Store initialized with seed rooms")

    def reset(self) -> None:
        """Wipe every key and re-seed"""
        for key in ALL_KEYS:
            self.backend.delete(key)
        logger.info("Store reset")
        self.ensure_initialized()

    # ============== Room types & rooms ==============

    def get_room_types(self) -> List[RoomType]:
        return [rt.model_copy(deep=True) for rt in ROOM_TYPES]

    def get_room_type(self, type_id: str) -> Optional[RoomType]:
        room_type = get_room_type(type_id)
        return room_type.model_copy(deep=True) if room_type else None

    def get_rooms(self) -> List[Room]:
        return self._read(ROOMS_KEY, Room)

    def get_room(self, room_id: str) -> Optional[Room]:
        return self._find(self.get_rooms(), room_id)

    def update_room(self, room_id: str, updates: Dict[str, Any]) -> Room:
        return self._update_entity(ROOMS_KEY, Room, "room", room_id, updates)

    # ============== Guests ==============

    def get_guests(self) -> List[Guest]:
        return self._read(GUESTS_KEY, Guest)

    def get_guest(self, guest_id: str) -> Optional[Guest]:
        return self._find(self.get_guests(), guest_id)

    def add_guest(self, data: Dict[str, Any]) -> Guest:
        """Always creates a new guest; duplicates by name or phone are permitted"""
        try:
            guest = Guest(id=new_id("g"), **data)
        except pydantic.ValidationError as e:
            raise ValidationError(f"Invalid guest: {e}") from e
        guests = self.get_guests()
        guests.append(guest)
        self._write(GUESTS_KEY, Guest, guests)
        return guest

    def update_guest(self, guest_id: str, updates: Dict[str, Any]) -> Guest:
        return self._update_entity(GUESTS_KEY, Guest, "guest", guest_id, updates)

    # ============== Bookings ==============

    def get_bookings(self) -> List[Booking]:
        return self._read(BOOKINGS_KEY, Booking)

    def get_booking(self, booking_id: str) -> Optional[Booking]:
        return self._find(self.get_bookings(), booking_id)

    def add_booking(self, booking: Booking) -> Booking:
        bookings = self.get_bookings()
        bookings.append(booking)
        self._write(BOOKINGS_KEY, Booking, bookings)
        return booking.model_copy(deep=True)

    def update_booking(self, booking_id: str, updates: Dict[str, Any]) -> Booking:
        """Field patch only; lifecycle rules are enforced by BookingService"""
        return self._update_entity(BOOKINGS_KEY, Booking, "booking", booking_id, updates)

    def increment_booking_sequence(self) -> int:
        sequence = self.get_booking_sequence() + 1
        self.backend.set(BOOKING_SEQUENCE_KEY, str(sequence))
        return sequence

    def get_booking_sequence(self) -> int:
        raw = self.backend.get(BOOKING_SEQUENCE_KEY)
        return int(raw) if raw is not None else self.initial_sequence

    # ============== Folios ==============

    def get_folios(self) -> List[Folio]:
        return self._read(FOLIOS_KEY, Folio)

    def get_folio(self, folio_id: str) -> Optional[Folio]:
        return self._find(self.get_folios(), folio_id)

    def get_folio_by_booking(self, booking_id: str) -> Optional[Folio]:
        return next((f for f in self.get_folios() if f.booking_id == booking_id), None)

    def add_folio(self, folio: Folio) -> Folio:
        folio = recalculate_folio_totals(folio)
        folios = self.get_folios()
        folios.append(folio)
        self._write(FOLIOS_KEY, Folio, folios)
        return folio.model_copy(deep=True)

    def _save_folio(self, folio_id: str, mutate) -> Folio:
        folios = self.get_folios()
        for index, folio in enumerate(folios):
            if folio.id == folio_id:
                folio = recalculate_folio_totals(mutate(folio))
                folio.updated_at = datetime.now()
                folios[index] = folio
                self._write(FOLIOS_KEY, Folio, folios)
                return folio.model_copy(deep=True)
        raise NotFoundError("folio", folio_id)

    def update_folio(self, folio_id: str, updates: Dict[str, Any]) -> Folio:
        derived = FOLIO_DERIVED_FIELDS & set(updates)
        if derived:
            raise ValidationError(
                f"Folio totals are derived and cannot be set: {', '.join(sorted(derived))}"
            )
        return self._save_folio(
            folio_id, lambda folio: self._apply_updates(folio, updates, "folio")
        )

    def add_line_item(self, folio_id: str, item: FolioLineItem) -> Folio:
        def mutate(folio: Folio) -> Folio:
            folio.line_items.append(item.model_copy(update={"folio_id": folio.id}))
            return folio
        return self._save_folio(folio_id, mutate)

    def remove_line_item(self, folio_id: str, line_item_id: str) -> Folio:
        def mutate(folio: Folio) -> Folio:
            remaining = [li for li in folio.line_items if li.id != line_item_id]
            if len(remaining) == len(folio.line_items):
                raise NotFoundError("line item", line_item_id)
            folio.line_items = remaining
            return folio
        return self._save_folio(folio_id, mutate)

    def apply_discount(self, folio_id: str, amount: Decimal, percent: Decimal) -> Folio:
        """Replaces (does not accumulate) both discount fields"""
        def mutate(folio: Folio) -> Folio:
            folio.discount_amount = Decimal(amount)
            folio.discount_percent = Decimal(percent)
            return folio
        return self._save_folio(folio_id, mutate)

    # ============== Payments ==============

    def get_payments(self, booking_id: Optional[str] = None) -> List[Payment]:
        payments = self._read(PAYMENTS_KEY, Payment)
        if booking_id is not None:
            payments = [p for p in payments if p.booking_id == booking_id]
        return payments

    def get_payment(self, payment_id: str) -> Optional[Payment]:
        return self._find(self.get_payments(), payment_id)

    def add_payment(self, payment: Payment) -> Payment:
        payments = self.get_payments()
        payments.append(payment)
        self._write(PAYMENTS_KEY, Payment, payments)
        return payment.model_copy(deep=True)

    def update_payment(self, payment_id: str, updates: Dict[str, Any]) -> Payment:
        return self._update_entity(PAYMENTS_KEY, Payment, "payment", payment_id, updates)

    def delete_payment(self, payment_id: str) -> Payment:
        payments = self.get_payments()
        payment = self._find(payments, payment_id)
        if payment is None:
            raise NotFoundError("payment", payment_id)
        self._write(PAYMENTS_KEY, Payment, [p for p in payments if p.id != payment_id])
        return payment

    # ============== Audit log ==============

    def get_audit_logs(self) -> List[AuditLog]:
        """Newest first"""
        return self._read(AUDIT_LOGS_KEY, AuditLog)

    def add_audit_log(self, entry: Dict[str, Any]) -> AuditLog:
        """Assign id and timestamp, prepend, then truncate to the retention window"""
        log = AuditLog(id=new_id("log"), created_at=datetime.now(), **entry)
        logs = self.get_audit_logs()
        logs.insert(0, log)
        if self.audit_retention and len(logs) > self.audit_retention:
            dropped = len(logs) - self.audit_retention
            logs = logs[:self.audit_retention]
            logger.debug(f"Audit log truncated, dropped {dropped} oldest entries")
        self._write(AUDIT_LOGS_KEY, AuditLog, logs)
        return log
