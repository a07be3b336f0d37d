# API Routers
from hms.routers import rooms, availability, bookings, frontdesk, folios, payments, audit_logs, reports, guests

__all__ = ['rooms', 'availability', 'bookings', 'frontdesk', 'folios', 'payments', 'audit_logs', 'reports', 'guests']
