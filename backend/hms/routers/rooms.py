"""
Room routes
"""
from typing import List, Optional
from fastapi import APIRouter, Depends
from hms.dependencies import get_store, http_error
from hms.exceptions import HMSError
from hms.models.ontology import Room, RoomType, RoomStatus
from hms.models.schemas import RoomWithType, RoomStatusUpdate
from hms.services.room_service import RoomService
from hms.services.store import HotelStore

router = APIRouter(prefix="/rooms", tags=["Rooms"])


@router.get("", response_model=List[RoomWithType])
def list_rooms(
    status: Optional[RoomStatus] = None,
    store: HotelStore = Depends(get_store)
):
    """Rooms with their room type"""
    return RoomService(store).get_rooms_with_type(status)


@router.get("/types", response_model=List[RoomType])
def list_room_types(store: HotelStore = Depends(get_store)):
    """Room type catalog"""
    return RoomService(store).get_room_types()


@router.get("/{room_id}", response_model=Room)
def get_room(room_id: str, store: HotelStore = Depends(get_store)):
    try:
        return RoomService(store).get_room(room_id)
    except HMSError as e:
        raise http_error(e)


@router.patch("/{room_id}/status", response_model=Room)
def update_room_status(
    room_id: str,
    data: RoomStatusUpdate,
    store: HotelStore = Depends(get_store)
):
    """Staff override of the room status"""
    try:
        return RoomService(store).update_room_status(room_id, data.status)
    except HMSError as e:
        raise http_error(e)
