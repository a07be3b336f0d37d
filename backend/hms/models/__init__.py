# Domain objects
from hms.models.ontology import (
    RoomType, Room, Guest, Booking, Folio, FolioLineItem, Payment, AuditLog,
    BalanceSummary, RoomStatus, BookingStatus, PaymentStatus, BookingType,
    LineItemType, PaymentMethod, AuditAction
)

__all__ = [
    'RoomType', 'Room', 'Guest', 'Booking', 'Folio', 'FolioLineItem', 'Payment',
    'AuditLog', 'BalanceSummary', 'RoomStatus', 'BookingStatus', 'PaymentStatus',
    'BookingType', 'LineItemType', 'PaymentMethod', 'AuditAction'
]
