"""
Domain objects (Ontology Objects)
Rooms, guests, bookings, folios, payments and the audit trail.
All entities are persisted as JSON documents through the key-value store,
so they are plain pydantic models rather than ORM rows.
"""
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, Field


# ============== Enums ==============

class RoomStatus(str, Enum):
    """Room status"""
    AVAILABLE = "AVAILABLE"
    OCCUPIED = "OCCUPIED"
    CLEANING = "CLEANING"
    MAINTENANCE = "MAINTENANCE"


class BookingStatus(str, Enum):
    """Booking status (CHECKED_IN and IN_HOUSE are synonyms)"""
    RESERVED = "RESERVED"
    CONFIRMED = "CONFIRMED"
    CHECKED_IN = "CHECKED_IN"
    IN_HOUSE = "IN_HOUSE"
    CHECKED_OUT = "CHECKED_OUT"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"


class PaymentStatus(str, Enum):
    """Booking payment status"""
    PENDING = "PENDING"
    PAY_AT_HOTEL = "PAY_AT_HOTEL"
    PAID = "PAID"
    FAILED = "FAILED"


class BookingType(str, Enum):
    """How the booking was taken"""
    RESERVATION = "RESERVATION"
    WALK_IN = "WALK_IN"


class LineItemType(str, Enum):
    """Folio charge type"""
    ROOM_CHARGE = "ROOM_CHARGE"
    EXTRA_BED = "EXTRA_BED"
    FOOD = "FOOD"
    LAUNDRY = "LAUNDRY"
    TRANSPORT = "TRANSPORT"
    MISC = "MISC"


class PaymentMethod(str, Enum):
    """Payment method"""
    CASH = "CASH"
    UPI = "UPI"
    CARD = "CARD"
    ONLINE = "ONLINE"


class AuditAction(str, Enum):
    """Closed taxonomy of loggable events"""
    BOOKING_CREATED = "BOOKING_CREATED"
    BOOKING_UPDATED = "BOOKING_UPDATED"
    BOOKING_CANCELLED = "BOOKING_CANCELLED"
    CHECK_IN = "CHECK_IN"
    CHECK_OUT = "CHECK_OUT"
    BACKDATED_CHECK_IN = "BACKDATED_CHECK_IN"
    BACKDATED_CHECK_OUT = "BACKDATED_CHECK_OUT"
    ROOM_CHANGED = "ROOM_CHANGED"
    PAYMENT_ADDED = "PAYMENT_ADDED"
    PAYMENT_EDITED = "PAYMENT_EDITED"
    PAYMENT_DELETED = "PAYMENT_DELETED"
    FOLIO_UPDATED = "FOLIO_UPDATED"
    NO_SHOW_MARKED = "NO_SHOW_MARKED"


IN_HOUSE_STATUSES = frozenset({BookingStatus.IN_HOUSE, BookingStatus.CHECKED_IN})

# Bookings in these states no longer hold their room
TERMINAL_STATUSES = frozenset({
    BookingStatus.CHECKED_OUT, BookingStatus.CANCELLED, BookingStatus.NO_SHOW
})


# ============== Domain objects ==============

class RoomType(BaseModel):
    """
    Room type - static reference data, immutable at runtime
    """
    id: str
    name: str
    description: str = ""
    base_price: Decimal = Field(..., gt=0)
    capacity: int = Field(..., gt=0)
    amenities: List[str] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)


class Room(BaseModel):
    """
    Room - status only changes through booking transitions or a staff override
    """
    id: str
    number: str
    type_id: str
    status: RoomStatus = RoomStatus.AVAILABLE


class Guest(BaseModel):
    """Guest - created once per booking, duplicates permitted"""
    id: str
    name: str
    phone: str
    email: Optional[str] = None
    city: Optional[str] = None
    id_proof: Optional[str] = None


class Booking(BaseModel):
    """
    Booking - one room, one guest, a half-open [check_in, check_out) date range
    """
    id: str
    booking_code: str
    guest_id: str
    room_id: str
    check_in: date
    check_out: date
    guests_count: int
    total_amount: Decimal
    daily_rate: Decimal
    status: BookingStatus
    payment_status: PaymentStatus = PaymentStatus.PENDING
    booking_type: BookingType = BookingType.RESERVATION
    created_at: datetime
    notes: Optional[str] = None

    @property
    def is_in_house(self) -> bool:
        return self.status in IN_HOUSE_STATUSES

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


class FolioLineItem(BaseModel):
    """One charge on a folio; total = quantity x unit_price"""
    id: str
    folio_id: str
    type: LineItemType
    description: str
    quantity: int = Field(..., gt=0)
    unit_price: Decimal = Field(..., ge=0)
    total: Decimal
    date: datetime


class Folio(BaseModel):
    """
    Folio - the running bill, 1:1 with a booking
    subtotal / tax_amount / grand_total are derived, see recalculate_folio_totals
    """
    id: str
    booking_id: str
    line_items: List[FolioLineItem] = Field(default_factory=list)
    subtotal: Decimal = Decimal("0")
    discount_amount: Decimal = Decimal("0")
    discount_percent: Decimal = Decimal("0")
    tax_amount: Decimal = Decimal("0")
    tax_percent: Decimal = Decimal("0")
    grand_total: Decimal = Decimal("0")
    created_at: datetime
    updated_at: datetime


class Payment(BaseModel):
    """Payment recorded against a folio"""
    id: str
    folio_id: str
    booking_id: str
    amount: Decimal = Field(..., gt=0)
    method: PaymentMethod
    reference: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    created_by: str


class AuditLog(BaseModel):
    """Append-only audit entry"""
    id: str
    action: AuditAction
    entity_type: str
    entity_id: str
    description: str
    reason: Optional[str] = None
    previous_value: Optional[str] = None
    new_value: Optional[str] = None
    created_at: datetime
    created_by: str


class BalanceSummary(BaseModel):
    """Billed vs paid for one booking; balance_due <= 0 means fully paid"""
    total_billed: Decimal
    total_paid: Decimal
    balance_due: Decimal
