"""
Booking routes
"""
from typing import List, Optional
from datetime import date
from fastapi import APIRouter, Depends, HTTPException, status
from hms.config import settings
from hms.dependencies import get_store, get_operator, http_error
from hms.exceptions import HMSError
from hms.models.ontology import Booking, BookingStatus, PaymentStatus
from hms.models.schemas import (
    CreateBookingRequest, BookingDetail, BookingFilters, BookingChangeRequest,
    BackdateRequest, CheckOutRequest, CancelRequest
)
from hms.services.booking_service import BookingService
from hms.services.store import HotelStore

router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.post("", response_model=Booking, status_code=status.HTTP_201_CREATED)
def create_booking(
    data: CreateBookingRequest,
    store: HotelStore = Depends(get_store),
    operator: str = Depends(get_operator)
):
    """Public site booking"""
    try:
        return BookingService(store).create_booking(data, operator)
    except HMSError as e:
        raise http_error(e)


@router.get("", response_model=List[BookingDetail])
def list_bookings(
    status: Optional[BookingStatus] = None,
    payment_status: Optional[PaymentStatus] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    search: Optional[str] = None,
    store: HotelStore = Depends(get_store)
):
    """Bookings, newest first"""
    filters = BookingFilters(
        status=status, payment_status=payment_status,
        date_from=date_from, date_to=date_to, search=search
    )
    return BookingService(store).list_bookings(filters)


@router.get("/code/{code}", response_model=BookingDetail)
def get_booking_by_code(code: str, store: HotelStore = Depends(get_store)):
    """Look up a booking by its shareable code"""
    try:
        return BookingService(store).get_booking_by_code(code)
    except HMSError as e:
        raise http_error(e)


@router.get("/{booking_id}", response_model=BookingDetail)
def get_booking(booking_id: str, store: HotelStore = Depends(get_store)):
    try:
        return BookingService(store).get_booking_detail(booking_id)
    except HMSError as e:
        raise http_error(e)


@router.patch("/{booking_id}", response_model=Booking)
def update_booking(
    booking_id: str,
    data: BookingChangeRequest,
    store: HotelStore = Depends(get_store),
    operator: str = Depends(get_operator)
):
    """Change room, dates or details"""
    try:
        return BookingService(store).update_booking(booking_id, data.updates, data.reason, operator)
    except HMSError as e:
        raise http_error(e)


@router.post("/{booking_id}/confirm", response_model=Booking)
def confirm_booking(
    booking_id: str,
    store: HotelStore = Depends(get_store),
    operator: str = Depends(get_operator)
):
    try:
        return BookingService(store).confirm_booking(booking_id, operator)
    except HMSError as e:
        raise http_error(e)


@router.post("/{booking_id}/check-in", response_model=Booking)
def check_in(
    booking_id: str,
    data: Optional[BackdateRequest] = None,
    store: HotelStore = Depends(get_store),
    operator: str = Depends(get_operator)
):
    data = data or BackdateRequest()
    try:
        return BookingService(store).check_in(booking_id, data.backdated, data.reason, operator)
    except HMSError as e:
        raise http_error(e)


@router.post("/{booking_id}/check-out", response_model=Booking)
def check_out(
    booking_id: str,
    data: Optional[CheckOutRequest] = None,
    store: HotelStore = Depends(get_store),
    operator: str = Depends(get_operator)
):
    """
    Check out
    With BLOCK_UNSETTLED_CHECKOUT the balance must be settled first, unless
    allow_unsettled is given together with a reason.
    """
    data = data or CheckOutRequest()
    service = BookingService(store)
    try:
        if data.allow_unsettled:
            if not (data.reason or "").strip():
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="A reason is required to check out with an unpaid balance"
                )
        elif settings.BLOCK_UNSETTLED_CHECKOUT:
            service.ensure_checkout_allowed(booking_id)
        return service.check_out(booking_id, data.backdated, data.reason, operator)
    except HMSError as e:
        raise http_error(e)


@router.post("/{booking_id}/cancel", response_model=Booking)
def cancel_booking(
    booking_id: str,
    data: CancelRequest,
    store: HotelStore = Depends(get_store),
    operator: str = Depends(get_operator)
):
    try:
        return BookingService(store).cancel_booking(booking_id, data.reason, operator)
    except HMSError as e:
        raise http_error(e)


@router.post("/{booking_id}/no-show", response_model=Booking)
def mark_no_show(
    booking_id: str,
    store: HotelStore = Depends(get_store),
    operator: str = Depends(get_operator)
):
    try:
        return BookingService(store).mark_no_show(booking_id, operator)
    except HMSError as e:
        raise http_error(e)
