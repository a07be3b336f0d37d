"""
Payment routes
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from hms.dependencies import get_store, get_operator, http_error
from hms.exceptions import HMSError
from hms.models.ontology import Payment
from hms.models.schemas import PaymentCreate, PaymentEditRequest
from hms.services.folio_service import FolioService
from hms.services.store import HotelStore

router = APIRouter(prefix="/payments", tags=["Payments"])


@router.get("", response_model=List[Payment])
def list_payments(booking_id: Optional[str] = None, store: HotelStore = Depends(get_store)):
    """Payments, newest first"""
    return FolioService(store).get_payments(booking_id)


@router.post("", response_model=Payment, status_code=status.HTTP_201_CREATED)
def add_payment(
    data: PaymentCreate,
    store: HotelStore = Depends(get_store),
    operator: str = Depends(get_operator)
):
    try:
        return FolioService(store).add_payment(data, operator)
    except HMSError as e:
        raise http_error(e)


@router.put("/{payment_id}", response_model=Payment)
def update_payment(
    payment_id: str,
    data: PaymentEditRequest,
    store: HotelStore = Depends(get_store),
    operator: str = Depends(get_operator)
):
    """Edit a payment, a reason is mandatory"""
    try:
        return FolioService(store).update_payment(payment_id, data.updates, data.reason, operator)
    except HMSError as e:
        raise http_error(e)


@router.delete("/{payment_id}", response_model=Payment)
def delete_payment(
    payment_id: str,
    reason: str = Query(default=""),
    store: HotelStore = Depends(get_store),
    operator: str = Depends(get_operator)
):
    """Delete a payment, a reason is mandatory"""
    try:
        return FolioService(store).delete_payment(payment_id, reason, operator)
    except HMSError as e:
        raise http_error(e)
