"""
ReportService tests
Dashboard figures and front desk reports
"""
from datetime import timedelta
from decimal import Decimal

from hms.models.ontology import PaymentMethod
from hms.models.schemas import PaymentCreate


def _pay(folio_service, booking, amount, method):
    folio = folio_service.get_folio_by_booking(booking.id)
    return folio_service.add_payment(PaymentCreate(
        folio_id=folio.id, booking_id=booking.id, amount=Decimal(str(amount)), method=method
    ))


class TestDashboard:
    """Dashboard stats"""

    def test_empty_hotel(self, report_service, today):
        stats = report_service.get_dashboard_stats(today)
        assert stats.total_rooms == 11
        assert stats.current_occupancy == 0
        assert stats.today_checkins == []
        assert stats.unpaid_count == 0
        assert stats.unpaid_amount == Decimal("0")

    def test_figures(self, report_service, folio_service, in_house, reservation, today):
        _pay(folio_service, in_house, 400, PaymentMethod.UPI)
        _pay(folio_service, in_house, 100, PaymentMethod.CASH)

        stats = report_service.get_dashboard_stats(today)
        assert [b.id for b in stats.today_checkins] == [in_house.id]
        assert [b.id for b in stats.in_house_guests] == [in_house.id]
        assert stats.in_house_guests[0].guest.name == "Ravi Kumar"
        assert stats.current_occupancy == 1
        assert stats.today_revenue_upi == Decimal("400")
        assert stats.today_revenue_cash == Decimal("100")
        assert stats.today_revenue_card == Decimal("0")
        assert stats.unpaid_count == 1
        assert stats.unpaid_amount == Decimal("1900")
        assert {b.id for b in stats.recent_bookings} == {in_house.id, reservation.id}

    def test_departures_and_overdue(self, report_service, in_house, today):
        on_departure_day = report_service.get_dashboard_stats(today + timedelta(days=2))
        assert [b.id for b in on_departure_day.today_checkouts] == [in_house.id]
        assert on_departure_day.overdue_checkouts == []

        late = report_service.get_dashboard_stats(today + timedelta(days=3))
        assert [b.id for b in late.overdue_checkouts] == [in_house.id]

    def test_pending_arrivals(self, report_service, reservation, today):
        stats = report_service.get_dashboard_stats(today + timedelta(days=6))
        assert [b.id for b in stats.pending_arrivals] == [reservation.id]


class TestFrontDeskReports:
    """Arrivals, departures, revenue, outstanding and occupancy"""

    def test_arrivals_exclude_cancelled(self, report_service, booking_service, reservation, today):
        day = today + timedelta(days=5)
        assert [b.id for b in report_service.get_arrivals_report(day)] == [reservation.id]
        booking_service.cancel_booking(reservation.id, "Plans changed")
        assert report_service.get_arrivals_report(day) == []

    def test_departures(self, report_service, walk_in, today):
        assert [b.id for b in report_service.get_departures_report(today + timedelta(days=2))] == [walk_in.id]
        assert report_service.get_departures_report(today) == []

    def test_revenue_range_is_inclusive(self, report_service, folio_service, walk_in, today):
        _pay(folio_service, walk_in, 1000, PaymentMethod.CARD)
        _pay(folio_service, walk_in, 200, PaymentMethod.ONLINE)

        report = report_service.get_revenue_report(today, today)
        assert report.total_card == Decimal("1000")
        assert report.total_online == Decimal("200")
        assert report.total_cash == Decimal("0")
        assert report.grand_total == Decimal("1200")
        assert len(report.payments) == 2

        assert report_service.get_revenue_report(today + timedelta(days=1), today + timedelta(days=7)).grand_total == 0

    def test_outstanding_only_in_house(self, report_service, folio_service, in_house, reservation):
        report = report_service.get_outstanding_report()
        assert [b.id for b in report.bookings] == [in_house.id]
        assert report.bookings[0].balance == Decimal("2400")
        assert report.total_outstanding == Decimal("2400")

        _pay(folio_service, in_house, 2400, PaymentMethod.CASH)
        assert report_service.get_outstanding_report().bookings == []

    def test_occupancy(self, report_service, in_house):
        report = report_service.get_occupancy_report()
        assert report.total_rooms == 11
        assert report.occupied_rooms == 1
        assert report.cleaning_rooms == 1
        assert report.maintenance_rooms == 1
        assert report.available_rooms == 8
        assert report.occupancy_rate == 9

    def test_occupancy_with_no_rooms(self, report_service, store):
        store.backend.set("rooms", "[]")
        assert report_service.get_occupancy_report().occupancy_rate == 0
