"""
Static property catalog
Room types are reference data and never persisted; rooms are seeded into the
store on first use and then owned by it.
"""
from decimal import Decimal
from typing import Dict, List, Optional

from hms.models.ontology import RoomType, Room, RoomStatus


ROOM_TYPES: List[RoomType] = [
    RoomType(
        id="rt-1",
        name="Standard Room",
        description="Comfortable room with all basic amenities, perfect for solo travellers or couples.",
        base_price=Decimal("1200"),
        capacity=2,
        amenities=["AC", "TV", "WiFi", "Attached Bathroom", "Hot Water"],
        images=["/images/rooms/standard-1.jpg", "/images/rooms/standard-2.jpg"],
    ),
    RoomType(
        id="rt-2",
        name="Deluxe Room",
        description="Spacious room with premium furnishings and a city view.",
        base_price=Decimal("1800"),
        capacity=3,
        amenities=["AC", "TV", "WiFi", "Attached Bathroom", "Hot Water", "Mini Fridge", "Work Desk"],
        images=["/images/rooms/deluxe-1.jpg", "/images/rooms/deluxe-2.jpg"],
    ),
    RoomType(
        id="rt-3",
        name="Family Suite",
        description="Large suite with a separate sitting area, ideal for families.",
        base_price=Decimal("2500"),
        capacity=4,
        amenities=["AC", "TV", "WiFi", "Attached Bathroom", "Hot Water", "Mini Fridge", "Sofa", "Extra Bed"],
        images=["/images/rooms/family-1.jpg", "/images/rooms/family-2.jpg"],
    ),
    RoomType(
        id="rt-4",
        name="Premium Suite",
        description="Our finest suite with a king bed, lounge and balcony.",
        base_price=Decimal("3500"),
        capacity=2,
        amenities=["AC", "Smart TV", "WiFi", "Bathtub", "Hot Water", "Mini Bar", "Balcony", "Room Service"],
        images=["/images/rooms/premium-1.jpg", "/images/rooms/premium-2.jpg"],
    ),
]

# (room id, number, room type id, initial status)
_INITIAL_ROOMS = [
    ("r-101", "101", "rt-1", RoomStatus.AVAILABLE),
    ("r-102", "102", "rt-1", RoomStatus.AVAILABLE),
    ("r-103", "103", "rt-1", RoomStatus.AVAILABLE),
    ("r-104", "104", "rt-1", RoomStatus.CLEANING),
    ("r-201", "201", "rt-2", RoomStatus.AVAILABLE),
    ("r-202", "202", "rt-2", RoomStatus.AVAILABLE),
    ("r-203", "203", "rt-2", RoomStatus.AVAILABLE),
    ("r-301", "301", "rt-3", RoomStatus.AVAILABLE),
    ("r-302", "302", "rt-3", RoomStatus.MAINTENANCE),
    ("r-401", "401", "rt-4", RoomStatus.AVAILABLE),
    ("r-402", "402", "rt-4", RoomStatus.AVAILABLE),
]

_ROOM_TYPES_BY_ID: Dict[str, RoomType] = {rt.id: rt for rt in ROOM_TYPES}


def initial_rooms() -> List[Room]:
    """Fresh room list used to seed an empty store"""
    return [
        Room(id=room_id, number=number, type_id=type_id, status=status)
        for room_id, number, type_id, status in _INITIAL_ROOMS
    ]


def get_room_type(type_id: str) -> Optional[RoomType]:
    return _ROOM_TYPES_BY_ID.get(type_id)
