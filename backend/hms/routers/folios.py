"""
Folio routes
"""
from typing import Optional
from fastapi import APIRouter, Depends
from hms.dependencies import get_store, get_operator, http_error
from hms.exceptions import HMSError
from hms.models.ontology import Folio, BalanceSummary
from hms.models.schemas import AddLineItemRequest, DiscountRequest, TaxRequest
from hms.services.folio_service import FolioService
from hms.services.store import HotelStore

router = APIRouter(prefix="/folios", tags=["Folios"])


@router.get("/booking/{booking_id}", response_model=Folio)
def get_folio_by_booking(booking_id: str, store: HotelStore = Depends(get_store)):
    try:
        return FolioService(store).get_folio_by_booking(booking_id)
    except HMSError as e:
        raise http_error(e)


@router.get("/balance/{booking_id}", response_model=BalanceSummary)
def get_balance(booking_id: str, store: HotelStore = Depends(get_store)):
    """Billed, paid and balance due for a booking"""
    try:
        return FolioService(store).get_balance_summary(booking_id)
    except HMSError as e:
        raise http_error(e)


@router.get("/{folio_id}", response_model=Folio)
def get_folio(folio_id: str, store: HotelStore = Depends(get_store)):
    try:
        return FolioService(store).get_folio(folio_id)
    except HMSError as e:
        raise http_error(e)


@router.post("/{folio_id}/line-items", response_model=Folio)
def add_line_item(
    folio_id: str,
    data: AddLineItemRequest,
    store: HotelStore = Depends(get_store),
    operator: str = Depends(get_operator)
):
    """Post a charge"""
    try:
        return FolioService(store).add_line_item(
            folio_id, data.type, data.description, data.quantity, data.unit_price, operator
        )
    except HMSError as e:
        raise http_error(e)


@router.delete("/{folio_id}/line-items/{line_item_id}", response_model=Folio)
def remove_line_item(
    folio_id: str,
    line_item_id: str,
    reason: Optional[str] = None,
    allow_room_charge: bool = False,
    store: HotelStore = Depends(get_store),
    operator: str = Depends(get_operator)
):
    try:
        return FolioService(store).remove_line_item(
            folio_id, line_item_id, operator, reason, allow_room_charge
        )
    except HMSError as e:
        raise http_error(e)


@router.post("/{folio_id}/discount", response_model=Folio)
def apply_discount(
    folio_id: str,
    data: DiscountRequest,
    store: HotelStore = Depends(get_store),
    operator: str = Depends(get_operator)
):
    """Replace the flat and percentage discount"""
    try:
        return FolioService(store).apply_discount(folio_id, data.amount, data.percent, operator)
    except HMSError as e:
        raise http_error(e)


@router.post("/{folio_id}/tax", response_model=Folio)
def apply_tax(
    folio_id: str,
    data: TaxRequest,
    store: HotelStore = Depends(get_store),
    operator: str = Depends(get_operator)
):
    try:
        return FolioService(store).apply_tax(folio_id, data.percent, operator)
    except HMSError as e:
        raise http_error(e)
