"""
Room service - room types, rooms and the staff status override
"""
import logging
from typing import List, Optional

from hms.exceptions import NotFoundError, InvalidStateError
from hms.models.ontology import Room, RoomType, RoomStatus
from hms.models.schemas import RoomWithType
from hms.services.store import HotelStore

logger = logging.getLogger(__name__)


class RoomService:
    """Room service"""

    def __init__(self, store: HotelStore):
        self.store = store

    def get_room_types(self) -> List[RoomType]:
        return self.store.get_room_types()

    def get_room_type(self, type_id: str) -> RoomType:
        room_type = self.store.get_room_type(type_id)
        if not room_type:
            raise NotFoundError("room type", type_id)
        return room_type

    def get_room(self, room_id: str) -> Room:
        room = self.store.get_room(room_id)
        if not room:
            raise NotFoundError("room", room_id)
        return room

    def get_rooms_with_type(self, status: Optional[RoomStatus] = None) -> List[RoomWithType]:
        """Rooms ordered by number, each with its room type embedded"""
        rooms = self.store.get_rooms()
        if status:
            rooms = [r for r in rooms if r.status == status]
        rooms.sort(key=lambda r: r.number)
        return [
            RoomWithType(**room.model_dump(), type=self.get_room_type(room.type_id))
            for room in rooms
        ]

    def update_room_status(self, room_id: str, status: RoomStatus) -> Room:
        """
        Staff override of the room status
        Rules:
        1. an occupied room only changes through check-out or a room move
        2. a room only becomes occupied through check-in
        """
        room = self.get_room(room_id)
        status = RoomStatus(status)
        if room.status == status:
            return room
        if room.status == RoomStatus.OCCUPIED:
            raise InvalidStateError(f"Room {room.number} is occupied, check the guest out first")
        if status == RoomStatus.OCCUPIED:
            raise InvalidStateError("Rooms become occupied through check-in only")

        updated = self.store.update_room(room_id, {"status": status})
        logger.info(f"Room {room.number}: {room.status.value} -> {status.value}")
        return updated
