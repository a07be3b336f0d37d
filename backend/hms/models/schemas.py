"""
Pydantic schemas
Request/response shapes for the services and the HTTP layer.
Fields that the services validate themselves (dates, guest fields, guests_count)
are left optional here so a bad value surfaces as a domain ValidationError.
"""
from datetime import date
from decimal import Decimal
from typing import Optional, List, Literal
from pydantic import BaseModel, Field
from hms.models.ontology import (
    Room, RoomType, Guest, Booking, Payment, BookingStatus, PaymentStatus,
    BookingType, LineItemType, PaymentMethod, RoomStatus
)


# ============== Room Schemas ==============

class RoomWithType(Room):
    type: RoomType


class RoomStatusUpdate(BaseModel):
    status: RoomStatus


# ============== Availability Schemas ==============

class AvailabilityRequest(BaseModel):
    check_in: date
    check_out: date
    guests_count: int = 1


class RoomTypeAvailability(RoomType):
    """Room type offered for a date range"""
    available_rooms: List[Room]
    total_price: Decimal
    nights: int


# ============== Guest Schemas ==============

class GuestCreate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    city: Optional[str] = None
    id_proof: Optional[str] = None


class GuestUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    city: Optional[str] = None
    id_proof: Optional[str] = None


# ============== Booking Schemas ==============

class CreateStayRequest(BaseModel):
    """Staff new-booking wizard: walk-in or reservation"""
    room_id: str
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    guests_count: Optional[int] = None
    guest: GuestCreate
    booking_type: BookingType = BookingType.WALK_IN
    daily_rate: Optional[Decimal] = Field(None, ge=0)
    notes: Optional[str] = None


class CreateBookingRequest(BaseModel):
    """Public booking site"""
    room_id: str
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    guests_count: Optional[int] = None
    guest: GuestCreate
    payment_method: Literal["ONLINE", "PAY_AT_HOTEL"] = "PAY_AT_HOTEL"
    notes: Optional[str] = None


class BookingUpdate(BaseModel):
    """Generic booking patch; lifecycle fields go through their own operations"""
    room_id: Optional[str] = None
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    guests_count: Optional[int] = Field(None, ge=1)
    daily_rate: Optional[Decimal] = Field(None, ge=0)
    payment_status: Optional[PaymentStatus] = None
    notes: Optional[str] = None


class BackdateRequest(BaseModel):
    backdated: bool = False
    reason: Optional[str] = None


class CheckOutRequest(BackdateRequest):
    allow_unsettled: bool = False


class CancelRequest(BaseModel):
    reason: str


class BookingChangeRequest(BaseModel):
    updates: BookingUpdate
    reason: Optional[str] = None


class BookingFilters(BaseModel):
    status: Optional[BookingStatus] = None
    payment_status: Optional[PaymentStatus] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    search: Optional[str] = None


class BookingDetail(Booking):
    """Booking projection with guest and room embedded"""
    guest: Guest
    room: RoomWithType


# ============== Folio Schemas ==============

class AddLineItemRequest(BaseModel):
    type: LineItemType
    description: str
    quantity: int = 1
    unit_price: Decimal


class DiscountRequest(BaseModel):
    amount: Decimal = Decimal("0")
    percent: Decimal = Decimal("0")


class TaxRequest(BaseModel):
    percent: Decimal


# ============== Payment Schemas ==============

class PaymentCreate(BaseModel):
    folio_id: str
    booking_id: str
    amount: Decimal
    method: PaymentMethod
    reference: Optional[str] = None
    notes: Optional[str] = None


class PaymentUpdate(BaseModel):
    amount: Optional[Decimal] = None
    method: Optional[PaymentMethod] = None
    reference: Optional[str] = None
    notes: Optional[str] = None


class PaymentEditRequest(BaseModel):
    updates: PaymentUpdate
    reason: str


# ============== Report Schemas ==============

class OutstandingBooking(BookingDetail):
    balance: Decimal


class RevenueReport(BaseModel):
    total_cash: Decimal
    total_upi: Decimal
    total_card: Decimal
    total_online: Decimal
    grand_total: Decimal
    payments: List[Payment]


class OccupancyReport(BaseModel):
    total_rooms: int
    occupied_rooms: int
    available_rooms: int
    cleaning_rooms: int
    maintenance_rooms: int
    occupancy_rate: int


class OutstandingReport(BaseModel):
    bookings: List[OutstandingBooking]
    total_outstanding: Decimal


class DashboardStats(BaseModel):
    today_checkins: List[BookingDetail]
    today_checkouts: List[BookingDetail]
    in_house_guests: List[BookingDetail]
    pending_arrivals: List[BookingDetail]
    overdue_checkouts: List[BookingDetail]
    current_occupancy: int
    total_rooms: int
    today_revenue_cash: Decimal
    today_revenue_online: Decimal
    today_revenue_upi: Decimal
    today_revenue_card: Decimal
    unpaid_count: int
    unpaid_amount: Decimal
    recent_bookings: List[BookingDetail]
