"""
Demo data script
Resets the configured store and creates a few bookings through the services:

  101  walk-in, in house, food charge, part paid
  201  future reservation
  401  past stay, checked out and settled (backdated)
"""
import sys
sys.path.insert(0, '.')

from datetime import date, timedelta
from decimal import Decimal
from hms.config import settings
from hms.database import init_db
from hms.dependencies import build_store
from hms.models.ontology import BookingType, LineItemType, PaymentMethod
from hms.models.schemas import CreateStayRequest, GuestCreate, PaymentCreate
from hms.services.booking_service import BookingService
from hms.services.folio_service import FolioService

OPERATOR = "demo"


def create_in_house_walk_in(bookings: BookingService, folios: FolioService):
    today = date.today()
    booking = bookings.create_stay(CreateStayRequest(
        room_id="r-101",
        check_in=today,
        check_out=today + timedelta(days=2),
        guests_count=2,
        guest=GuestCreate(name="Ravi Kumar", phone="9876543210", city="Tirupati"),
        booking_type=BookingType.WALK_IN,
    ), OPERATOR)
    bookings.check_in(booking.id, operator=OPERATOR)
    folio = folios.get_folio_by_booking(booking.id)
    folios.add_line_item(folio.id, LineItemType.FOOD, "Dinner", 1, Decimal("450"), OPERATOR)
    folios.add_payment(PaymentCreate(
        folio_id=folio.id, booking_id=booking.id, amount=Decimal("1000"), method=PaymentMethod.UPI
    ), OPERATOR)
    print(f"In house: {booking.booking_code}")


def create_future_reservation(bookings: BookingService):
    start = date.today() + timedelta(days=3)
    booking = bookings.create_stay(CreateStayRequest(
        room_id="r-201",
        check_in=start,
        check_out=start + timedelta(days=2),
        guests_count=3,
        guest=GuestCreate(name="Lakshmi Devi", phone="9123456780", email="lakshmi@example.com"),
        booking_type=BookingType.RESERVATION,
    ), OPERATOR)
    print(f"Reservation: {booking.booking_code}")


def create_past_stay(bookings: BookingService, folios: FolioService):
    start = date.today() - timedelta(days=3)
    booking = bookings.create_stay(CreateStayRequest(
        room_id="r-401",
        check_in=start,
        check_out=start + timedelta(days=2),
        guests_count=2,
        guest=GuestCreate(name="Arjun Reddy", phone="9000012345", city="Chennai"),
        booking_type=BookingType.WALK_IN,
    ), OPERATOR)
    bookings.check_in(booking.id, backdated=True, reason="Entered after the fact", operator=OPERATOR)
    folio = folios.get_folio_by_booking(booking.id)
    folios.add_payment(PaymentCreate(
        folio_id=folio.id, booking_id=booking.id, amount=folio.grand_total, method=PaymentMethod.CASH
    ), OPERATOR)
    bookings.check_out(booking.id, backdated=True, reason="Entered after the fact", operator=OPERATOR)
    print(f"Checked out: {booking.booking_code}")


def main():
    print("=" * 50)
    print(f"{settings.APP_NAME} demo data")
    print("=" * 50)

    if settings.STORAGE_BACKEND == "sql":
        init_db()
    store = build_store()
    store.reset()

    bookings = BookingService(store)
    folios = FolioService(store)
    create_in_house_walk_in(bookings, folios)
    create_future_reservation(bookings)
    create_past_stay(bookings, folios)

    print("Demo data ready")


if __name__ == '__main__':
    main()
