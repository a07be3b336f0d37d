"""
End-to-end stay scenarios and cross-cutting properties
Walk-in through settlement on the service layer, plus the folio total,
overlap, cancellation guard, balance and audit trail guarantees.
"""
import random
import pytest
from datetime import date, timedelta
from decimal import Decimal

from hms.exceptions import InvalidStateError
from hms.models.ontology import (
    BookingStatus, PaymentStatus, PaymentMethod, RoomStatus, LineItemType, AuditAction
)
from hms.models.schemas import PaymentCreate, PaymentUpdate
from hms.services.store import recalculate_folio_totals
from hms.services.availability_service import bookings_overlap


class TestWalkInStay:
    """A two night walk-in in room 101, start to settlement"""

    def test_full_stay(self, booking_service, folio_service, availability_service, store, stay_request, today):
        # Walk-in
        booking = booking_service.create_stay(stay_request(room_id="r-101", nights=2))
        assert booking.status == BookingStatus.CONFIRMED
        assert booking.total_amount == Decimal("2400")
        folio = folio_service.get_folio_by_booking(booking.id)
        assert [(li.type, li.quantity, li.unit_price, li.total) for li in folio.line_items] == [
            (LineItemType.ROOM_CHARGE, 2, Decimal("1200"), Decimal("2400"))
        ]
        assert folio.grand_total == Decimal("2400")

        # Check-in
        logs_before = len(store.get_audit_logs())
        booking = booking_service.check_in(booking.id)
        assert booking.status == BookingStatus.IN_HOUSE
        assert store.get_room("r-101").status == RoomStatus.OCCUPIED
        assert len(store.get_audit_logs()) == logs_before + 1
        assert store.get_audit_logs()[0].action == AuditAction.CHECK_IN

        # Dinner
        folio = folio_service.add_line_item(folio.id, LineItemType.FOOD, "Dinner", 1, Decimal("500"))
        assert folio.subtotal == Decimal("2900")
        assert folio.grand_total == Decimal("2900")
        assert store.get_booking(booking.id).total_amount == Decimal("2900")

        # Ten percent off
        folio = folio_service.apply_discount(folio.id, Decimal("0"), Decimal("10"))
        assert folio.tax_amount == Decimal("0")
        assert folio.grand_total == Decimal("2610")

        # Settle
        folio_service.add_payment(PaymentCreate(
            folio_id=folio.id, booking_id=booking.id, amount=Decimal("2610"), method=PaymentMethod.CASH
        ))
        assert folio_service.get_balance_summary(booking.id).balance_due == Decimal("0")
        assert store.get_booking(booking.id).payment_status == PaymentStatus.PAID

    def test_availability_while_booked(self, availability_service, walk_in, today):
        def standard_rooms(check_in, check_out):
            results = availability_service.check_availability(check_in, check_out, 1)
            standard = next(rt for rt in results if rt.id == "rt-1")
            return {r.id for r in standard.available_rooms}

        assert "r-101" not in standard_rooms(today + timedelta(days=1), today + timedelta(days=3))
        assert "r-101" in standard_rooms(today + timedelta(days=2), today + timedelta(days=5))


class TestFolioTotals:
    """Stored grand total always matches an independent recalculation"""

    def test_random_sequence(self, folio_service, store, walk_in_folio):
        rng = random.Random(7)
        folio_id = walk_in_folio.id
        for _ in range(40):
            folio = store.get_folio(folio_id)
            removable = [li for li in folio.line_items if li.type != LineItemType.ROOM_CHARGE]
            choice = rng.choice(["add", "remove", "discount"])
            if choice == "remove" and removable:
                folio_service.remove_line_item(folio_id, rng.choice(removable).id)
            elif choice == "discount":
                folio_service.apply_discount(
                    folio_id, Decimal(rng.randint(0, 300)), Decimal(rng.randint(0, 30))
                )
            else:
                folio_service.add_line_item(
                    folio_id, rng.choice([LineItemType.FOOD, LineItemType.TRANSPORT, LineItemType.MISC]),
                    "Charge", rng.randint(1, 4), Decimal(rng.randint(10, 900)) / 4
                )

            stored = store.get_folio(folio_id)
            assert recalculate_folio_totals(stored).grand_total == stored.grand_total
            assert store.get_booking(stored.booking_id).total_amount == stored.grand_total


class TestOverlapProperty:
    """Room excluded iff a < d and b > c"""

    @pytest.mark.parametrize("existing_offset,existing_nights", [(0, 2), (1, 1), (3, 2), (5, 1), (2, 4)])
    def test_against_existing_booking(self, booking_service, availability_service, stay_request,
                                      existing_offset, existing_nights):
        base = date.today()
        existing = booking_service.create_stay(
            stay_request(check_in=base + timedelta(days=existing_offset), nights=existing_nights)
        )
        c, d = base + timedelta(days=2), base + timedelta(days=5)
        results = availability_service.check_availability(c, d, 1)
        standard = next(rt for rt in results if rt.id == "rt-1")
        excluded = "r-101" not in {r.id for r in standard.available_rooms}
        assert excluded == bookings_overlap(existing.check_in, existing.check_out, c, d)
        assert excluded == (existing.check_in < d and existing.check_out > c)


class TestCancellationGuard:

    def test_in_house_cancel_always_refused(self, booking_service, store, in_house):
        before = store.get_booking(in_house.id)
        for reason in ("Guest request", "", None):
            with pytest.raises(InvalidStateError):
                booking_service.cancel_booking(in_house.id, reason)
        assert store.get_booking(in_house.id) == before


class TestBalance:

    def test_payment_reduces_balance_by_its_amount(self, folio_service, store, walk_in, walk_in_folio):
        for amount in (Decimal("500"), Decimal("1200.50"), Decimal("699.50")):
            before = folio_service.get_balance_summary(walk_in.id).balance_due
            folio_service.add_payment(PaymentCreate(
                folio_id=walk_in_folio.id, booking_id=walk_in.id, amount=amount, method=PaymentMethod.UPI
            ))
            after = folio_service.get_balance_summary(walk_in.id).balance_due
            assert before - after == amount

        assert folio_service.get_balance_summary(walk_in.id).balance_due == Decimal("0")
        assert store.get_booking(walk_in.id).payment_status == PaymentStatus.PAID


class TestAuditCompleteness:
    """Each successful mutation leaves exactly one matching entry"""

    def _assert_one_entry(self, store, count_before, action, entity_id):
        logs = store.get_audit_logs()
        assert len(logs) == count_before + 1
        assert logs[0].action == action
        assert logs[0].entity_id == entity_id

    def test_every_operation(self, booking_service, folio_service, store, walk_in, walk_in_folio, reservation):
        folio_id = walk_in_folio.id
        steps = [
            (lambda: booking_service.check_in(walk_in.id), AuditAction.CHECK_IN, walk_in.id),
            (lambda: booking_service.update_booking(walk_in.id, {"room_id": "r-102"}, reason="Upgrade"),
             AuditAction.ROOM_CHANGED, walk_in.id),
            (lambda: folio_service.add_line_item(folio_id, LineItemType.LAUNDRY, "Ironing", 2, Decimal("40")),
             AuditAction.FOLIO_UPDATED, folio_id),
            (lambda: folio_service.remove_line_item(folio_id, store.get_folio(folio_id).line_items[-1].id),
             AuditAction.FOLIO_UPDATED, folio_id),
            (lambda: folio_service.apply_discount(folio_id, Decimal("100"), Decimal("0")),
             AuditAction.FOLIO_UPDATED, folio_id),
        ]
        for operation, action, entity_id in steps:
            count = len(store.get_audit_logs())
            operation()
            self._assert_one_entry(store, count, action, entity_id)

        count = len(store.get_audit_logs())
        payment = folio_service.add_payment(PaymentCreate(
            folio_id=folio_id, booking_id=walk_in.id, amount=Decimal("2300"), method=PaymentMethod.CARD
        ))
        self._assert_one_entry(store, count, AuditAction.PAYMENT_ADDED, payment.id)

        count = len(store.get_audit_logs())
        folio_service.update_payment(payment.id, PaymentUpdate(reference="AUTH-1"), reason="Add reference")
        self._assert_one_entry(store, count, AuditAction.PAYMENT_EDITED, payment.id)

        count = len(store.get_audit_logs())
        folio_service.delete_payment(payment.id, reason="Charged on wrong card")
        self._assert_one_entry(store, count, AuditAction.PAYMENT_DELETED, payment.id)

        count = len(store.get_audit_logs())
        booking_service.check_out(walk_in.id)
        self._assert_one_entry(store, count, AuditAction.CHECK_OUT, walk_in.id)

        count = len(store.get_audit_logs())
        booking_service.cancel_booking(reservation.id, "Dates changed")
        self._assert_one_entry(store, count, AuditAction.BOOKING_CANCELLED, reservation.id)

    def test_no_show(self, booking_service, store, reservation):
        count = len(store.get_audit_logs())
        booking_service.mark_no_show(reservation.id)
        self._assert_one_entry(store, count, AuditAction.NO_SHOW_MARKED, reservation.id)

    def test_refused_operation_leaves_no_entry(self, booking_service, folio_service, store, walk_in, walk_in_folio):
        count = len(store.get_audit_logs())
        with pytest.raises(InvalidStateError):
            booking_service.check_out(walk_in.id)
        with pytest.raises(InvalidStateError):
            folio_service.remove_line_item(walk_in_folio.id, walk_in_folio.line_items[0].id)
        assert len(store.get_audit_logs()) == count
