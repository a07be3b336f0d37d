"""
Guest routes
"""
from fastapi import APIRouter, Depends
from hms.dependencies import get_store, http_error
from hms.exceptions import HMSError
from hms.models.ontology import Guest
from hms.models.schemas import GuestUpdate
from hms.services.guest_service import GuestService
from hms.services.store import HotelStore

router = APIRouter(prefix="/guests", tags=["Guests"])


@router.get("/{guest_id}", response_model=Guest)
def get_guest(guest_id: str, store: HotelStore = Depends(get_store)):
    try:
        return GuestService(store).get_guest(guest_id)
    except HMSError as e:
        raise http_error(e)


@router.patch("/{guest_id}", response_model=Guest)
def update_guest(
    guest_id: str,
    data: GuestUpdate,
    store: HotelStore = Depends(get_store)
):
    """Staff edit of guest details"""
    try:
        return GuestService(store).update_guest(guest_id, data)
    except HMSError as e:
        raise http_error(e)
