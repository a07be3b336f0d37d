"""
Folio and payment API tests
"""
from datetime import date, timedelta
from decimal import Decimal

from fastapi.testclient import TestClient


def open_stay(client: TestClient) -> dict:
    """Two night walk-in in room 101 with its folio"""
    today = date.today()
    booking = client.post("/front-desk/stays", json={
        "room_id": "r-101",
        "check_in": today.isoformat(),
        "check_out": (today + timedelta(days=2)).isoformat(),
        "guests_count": 1,
        "guest": {"name": "Suresh", "phone": "9811122233"},
    }).json()
    folio = client.get(f"/folios/booking/{booking['id']}").json()
    return {"booking": booking, "folio": folio}


def pay(client: TestClient, stay: dict, amount, method="CASH"):
    return client.post("/payments", json={
        "folio_id": stay["folio"]["id"],
        "booking_id": stay["booking"]["id"],
        "amount": str(amount),
        "method": method,
    })


class TestFolioEndpoints:
    """Folio reads and charges"""

    def test_folio_by_booking(self, client: TestClient):
        stay = open_stay(client)
        folio = stay["folio"]
        assert folio["id"] == f"f-{stay['booking']['id']}"
        assert folio["line_items"][0]["type"] == "ROOM_CHARGE"
        assert Decimal(folio["grand_total"]) == Decimal("2400")
        assert client.get(f"/folios/{folio['id']}").json()["id"] == folio["id"]

    def test_unknown_folio(self, client: TestClient):
        assert client.get("/folios/f-missing").status_code == 404
        assert client.get("/folios/booking/b-missing").status_code == 404

    def test_add_and_remove_charge(self, client: TestClient):
        stay = open_stay(client)
        folio_id = stay["folio"]["id"]
        response = client.post(f"/folios/{folio_id}/line-items", json={
            "type": "EXTRA_BED", "description": "Extra bed", "quantity": 3, "unit_price": "60"
        })
        assert response.status_code == 200
        folio = response.json()
        assert Decimal(folio["grand_total"]) == Decimal("2580")

        booking = client.get(f"/bookings/{stay['booking']['id']}").json()
        assert Decimal(booking["total_amount"]) == Decimal("2580")

        item_id = folio["line_items"][-1]["id"]
        response = client.delete(f"/folios/{folio_id}/line-items/{item_id}", params={"reason": "Not consumed"})
        assert Decimal(response.json()["grand_total"]) == Decimal("2400")

    def test_invalid_charge(self, client: TestClient):
        stay = open_stay(client)
        response = client.post(f"/folios/{stay['folio']['id']}/line-items", json={
            "type": "MISC", "description": "Extra bed", "quantity": 0, "unit_price": "300"
        })
        assert response.status_code == 400

    def test_room_charge_protected(self, client: TestClient):
        stay = open_stay(client)
        folio_id = stay["folio"]["id"]
        item_id = stay["folio"]["line_items"][0]["id"]
        assert client.delete(f"/folios/{folio_id}/line-items/{item_id}").status_code == 409
        response = client.delete(
            f"/folios/{folio_id}/line-items/{item_id}", params={"allow_room_charge": True}
        )
        assert response.status_code == 200

    def test_discount_and_tax(self, client: TestClient):
        stay = open_stay(client)
        folio_id = stay["folio"]["id"]
        client.post(f"/folios/{folio_id}/discount", json={"amount": "400"})
        folio = client.post(f"/folios/{folio_id}/tax", json={"percent": "12"}).json()
        assert Decimal(folio["subtotal"]) == Decimal("2400")
        assert Decimal(folio["tax_amount"]) == Decimal("240")
        assert Decimal(folio["grand_total"]) == Decimal("2240")

    def test_discount_out_of_range(self, client: TestClient):
        stay = open_stay(client)
        response = client.post(f"/folios/{stay['folio']['id']}/discount", json={"percent": "150"})
        assert response.status_code == 400


class TestPaymentEndpoints:
    """Payments and balance"""

    def test_payment_and_balance(self, client: TestClient):
        stay = open_stay(client)
        response = pay(client, stay, 1000, "UPI")
        assert response.status_code == 201
        assert response.json()["method"] == "UPI"

        balance = client.get(f"/folios/balance/{stay['booking']['id']}").json()
        assert Decimal(balance["total_billed"]) == Decimal("2400")
        assert Decimal(balance["total_paid"]) == Decimal("1000")
        assert Decimal(balance["balance_due"]) == Decimal("1400")

    def test_full_payment_marks_paid(self, client: TestClient):
        stay = open_stay(client)
        pay(client, stay, 2400)
        booking = client.get(f"/bookings/{stay['booking']['id']}").json()
        assert booking["payment_status"] == "PAID"

    def test_rejects_non_positive_amount(self, client: TestClient):
        stay = open_stay(client)
        assert pay(client, stay, 0).status_code == 400

    def test_list_by_booking(self, client: TestClient):
        stay = open_stay(client)
        pay(client, stay, 100)
        pay(client, stay, 200, "CARD")
        payments = client.get("/payments", params={"booking_id": stay["booking"]["id"]}).json()
        assert len(payments) == 2
        assert client.get("/payments", params={"booking_id": "b-other"}).json() == []

    def test_edit(self, client: TestClient):
        stay = open_stay(client)
        payment = pay(client, stay, 500).json()
        response = client.put(f"/payments/{payment['id']}", json={
            "updates": {"amount": "550"}, "reason": "Wrong amount keyed"
        })
        assert response.status_code == 200
        assert Decimal(response.json()["amount"]) == Decimal("550")

        response = client.put(f"/payments/{payment['id']}", json={"updates": {"amount": "600"}, "reason": ""})
        assert response.status_code == 400

    def test_delete(self, client: TestClient):
        stay = open_stay(client)
        payment = pay(client, stay, 2400).json()
        assert client.delete(f"/payments/{payment['id']}").status_code == 400

        response = client.delete(f"/payments/{payment['id']}", params={"reason": "Refunded"})
        assert response.status_code == 200
        booking = client.get(f"/bookings/{stay['booking']['id']}").json()
        assert booking["payment_status"] == "PAY_AT_HOTEL"

        logs = client.get("/audit-logs", params={"action": "PAYMENT_DELETED"}).json()
        assert logs[0]["reason"] == "Refunded"

    def test_unknown_payment(self, client: TestClient):
        assert client.delete("/payments/p-missing", params={"reason": "x"}).status_code == 404
