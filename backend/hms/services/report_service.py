"""
Report service
Read-only figures for the dashboard and the front desk reports
"""
from typing import List, Optional, Dict
from datetime import date
from decimal import Decimal

from hms.models.ontology import (
    Booking, BookingStatus, RoomStatus, PaymentMethod, Payment, IN_HOUSE_STATUSES
)
from hms.models.schemas import (
    BookingDetail, DashboardStats, OutstandingBooking, OutstandingReport,
    RevenueReport, OccupancyReport
)
from hms.services.store import HotelStore
from hms.services.booking_service import BookingService

# Excluded from arrival / departure lists
_NOT_EXPECTED = frozenset({BookingStatus.CANCELLED, BookingStatus.NO_SHOW})
_PENDING = frozenset({BookingStatus.RESERVED, BookingStatus.CONFIRMED})


def _sum_by_method(payments: List[Payment], method: PaymentMethod) -> Decimal:
    return sum((p.amount for p in payments if p.method == method), Decimal("0"))


class ReportService:
    """Report service"""

    def __init__(self, store: HotelStore):
        self.store = store
        self.booking_service = BookingService(store)

    def _details(self, bookings: List[Booking]) -> List[BookingDetail]:
        guests, rooms = self.booking_service.detail_maps()
        return [self.booking_service.to_detail(b, guests, rooms) for b in bookings]

    def _balances(self, bookings: List[Booking]) -> Dict[str, Decimal]:
        """Outstanding balance per booking: folio grand total (or booking total) minus payments"""
        folios = {f.booking_id: f for f in self.store.get_folios()}
        payments = self.store.get_payments()
        balances = {}
        for booking in bookings:
            folio = folios.get(booking.id)
            billed = folio.grand_total if folio else booking.total_amount
            paid = sum((p.amount for p in payments if p.booking_id == booking.id), Decimal("0"))
            balances[booking.id] = billed - paid
        return balances

    def get_dashboard_stats(self, today: Optional[date] = None) -> DashboardStats:
        """Front desk dashboard"""
        today = today or date.today()
        bookings = self.store.get_bookings()
        bookings.sort(key=lambda b: b.created_at, reverse=True)
        rooms = self.store.get_rooms()

        in_house = [b for b in bookings if b.status in IN_HOUSE_STATUSES]
        balances = self._balances(in_house)
        unpaid = [balance for balance in balances.values() if balance > 0]
        today_payments = [p for p in self.store.get_payments() if p.created_at.date() == today]

        return DashboardStats(
            today_checkins=self._details(
                [b for b in bookings if b.check_in == today and b.status not in _NOT_EXPECTED]
            ),
            today_checkouts=self._details(
                [b for b in bookings if b.check_out == today and b.status not in _NOT_EXPECTED]
            ),
            in_house_guests=self._details(in_house),
            pending_arrivals=self._details(
                [b for b in bookings if b.check_in < today and b.status in _PENDING]
            ),
            overdue_checkouts=self._details(
                [b for b in in_house if b.check_out < today]
            ),
            current_occupancy=len([r for r in rooms if r.status == RoomStatus.OCCUPIED]),
            total_rooms=len(rooms),
            today_revenue_cash=_sum_by_method(today_payments, PaymentMethod.CASH),
            today_revenue_online=_sum_by_method(today_payments, PaymentMethod.ONLINE),
            today_revenue_upi=_sum_by_method(today_payments, PaymentMethod.UPI),
            today_revenue_card=_sum_by_method(today_payments, PaymentMethod.CARD),
            unpaid_count=len(unpaid),
            unpaid_amount=sum(unpaid, Decimal("0")),
            recent_bookings=self._details(bookings[:10]),
        )

    def get_arrivals_report(self, day: date) -> List[BookingDetail]:
        return self._details([
            b for b in self.store.get_bookings()
            if b.check_in == day and b.status not in _NOT_EXPECTED
        ])

    def get_departures_report(self, day: date) -> List[BookingDetail]:
        return self._details([
            b for b in self.store.get_bookings()
            if b.check_out == day and b.status not in _NOT_EXPECTED
        ])

    def get_revenue_report(self, date_from: date, date_to: date) -> RevenueReport:
        """Payments received between the two dates, inclusive"""
        payments = [
            p for p in self.store.get_payments()
            if date_from <= p.created_at.date() <= date_to
        ]
        return RevenueReport(
            total_cash=_sum_by_method(payments, PaymentMethod.CASH),
            total_upi=_sum_by_method(payments, PaymentMethod.UPI),
            total_card=_sum_by_method(payments, PaymentMethod.CARD),
            total_online=_sum_by_method(payments, PaymentMethod.ONLINE),
            grand_total=sum((p.amount for p in payments), Decimal("0")),
            payments=payments,
        )

    def get_outstanding_report(self) -> OutstandingReport:
        """In-house bookings that still owe money"""
        in_house = [b for b in self.store.get_bookings() if b.status in IN_HOUSE_STATUSES]
        balances = self._balances(in_house)
        owing = [b for b in in_house if balances[b.id] > 0]
        rows = [
            OutstandingBooking(**detail.model_dump(), balance=balances[detail.id])
            for detail in self._details(owing)
        ]
        return OutstandingReport(
            bookings=rows,
            total_outstanding=sum((row.balance for row in rows), Decimal("0")),
        )

    def get_occupancy_report(self) -> OccupancyReport:
        rooms = self.store.get_rooms()
        counts = {status: 0 for status in RoomStatus}
        for room in rooms:
            counts[room.status] += 1
        total = len(rooms)
        occupied = counts[RoomStatus.OCCUPIED]
        return OccupancyReport(
            total_rooms=total,
            occupied_rooms=occupied,
            available_rooms=counts[RoomStatus.AVAILABLE],
            cleaning_rooms=counts[RoomStatus.CLEANING],
            maintenance_rooms=counts[RoomStatus.MAINTENANCE],
            occupancy_rate=round(occupied / total * 100) if total else 0,
        )
