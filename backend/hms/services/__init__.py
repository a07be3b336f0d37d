# Business Services
from hms.services.store import HotelStore, recalculate_folio_totals
from hms.services.audit_service import AuditService
from hms.services.availability_service import AvailabilityService
from hms.services.booking_service import BookingService
from hms.services.folio_service import FolioService
from hms.services.room_service import RoomService
from hms.services.report_service import ReportService
from hms.services.guest_service import GuestService

__all__ = [
    'HotelStore', 'recalculate_folio_totals', 'AuditService', 'AvailabilityService',
    'BookingService', 'FolioService', 'RoomService', 'ReportService', 'GuestService'
]
