"""
Availability routes
"""
from typing import List
from datetime import date
from fastapi import APIRouter, Depends
from hms.dependencies import get_store, http_error
from hms.exceptions import HMSError
from hms.models.ontology import Room
from hms.models.schemas import AvailabilityRequest, RoomTypeAvailability
from hms.services.availability_service import AvailabilityService
from hms.services.store import HotelStore

router = APIRouter(prefix="/availability", tags=["Availability"])


@router.post("", response_model=List[RoomTypeAvailability])
def check_availability(data: AvailabilityRequest, store: HotelStore = Depends(get_store)):
    """Room types bookable on the public site for the dates and party size"""
    try:
        return AvailabilityService(store).check_availability(
            data.check_in, data.check_out, data.guests_count
        )
    except HMSError as e:
        raise http_error(e)


@router.get("/walk-in", response_model=List[Room])
def get_walk_in_rooms(
    check_in: date,
    check_out: date,
    store: HotelStore = Depends(get_store)
):
    """Rooms the front desk can sell for the dates"""
    try:
        return AvailabilityService(store).get_walk_in_rooms(check_in, check_out)
    except HMSError as e:
        raise http_error(e)
