"""
Folio service - billing operations
Line items, discount, tax, payments and balance. Every folio mutation goes through
the store's recalculation and the new grand total is copied onto the booking.
"""
import logging
from datetime import datetime, date, time
from decimal import Decimal, InvalidOperation
from typing import List, Optional, Dict, Any

from hms.config import settings
from hms.exceptions import NotFoundError, ValidationError, InvalidStateError
from hms.models.ontology import (
    Booking, Folio, FolioLineItem, Payment, PaymentStatus, PaymentMethod,
    LineItemType, AuditAction, BalanceSummary
)
from hms.models.schemas import PaymentCreate, PaymentUpdate
from hms.services.store import HotelStore, new_id
from hms.services.audit_service import AuditService

logger = logging.getLogger(__name__)

# Payment status a booking falls back to when one of its payments is deleted.
# Remaining payments are not taken into account unless
# settings.RECOMPUTE_PAYMENT_STATUS_ON_DELETE is enabled.
PAYMENT_STATUS_AFTER_DELETE = PaymentStatus.PAY_AT_HOTEL

_HUNDRED = Decimal("100")


def _to_decimal(value: Any, field: str) -> Decimal:
    try:
        return Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{field} must be a number")


def format_amount(value: Decimal) -> str:
    return f"{settings.CURRENCY_SYMBOL}{value}"


class FolioService:
    """Folio and payment service"""

    def __init__(self, store: HotelStore):
        self.store = store
        self.audit_service = AuditService(store)

    # ============== Reads ==============

    def get_folio(self, folio_id: str) -> Folio:
        folio = self.store.get_folio(folio_id)
        if not folio:
            raise NotFoundError("folio", folio_id)
        return folio

    def get_folio_by_booking(self, booking_id: str) -> Folio:
        folio = self.store.get_folio_by_booking(booking_id)
        if not folio:
            raise NotFoundError("folio", message=f"No folio for booking {booking_id}")
        return folio

    def get_payments(self, booking_id: Optional[str] = None) -> List[Payment]:
        payments = self.store.get_payments(booking_id)
        return sorted(payments, key=lambda p: p.created_at, reverse=True)

    def get_total_paid(self, booking_id: str) -> Decimal:
        return sum((p.amount for p in self.store.get_payments(booking_id)), Decimal("0"))

    def get_balance_summary(self, booking_id: str) -> BalanceSummary:
        """
        total_billed = folio grand total, falling back to the booking total
        balance_due = total_billed - total_paid (negative when overpaid)
        """
        booking = self.store.get_booking(booking_id)
        if not booking:
            raise NotFoundError("booking", booking_id)
        folio = self.store.get_folio_by_booking(booking_id)
        total_billed = folio.grand_total if folio else booking.total_amount
        total_paid = self.get_total_paid(booking_id)
        return BalanceSummary(
            total_billed=total_billed,
            total_paid=total_paid,
            balance_due=total_billed - total_paid,
        )

    # ============== Folio creation ==============

    def open_folio(self, booking: Booking, nights: int) -> Folio:
        """
        Create the folio for a new booking, seeded with the room charge.
        Called by BookingService inside booking creation; not audited separately.
        """
        now = datetime.now()
        folio_id = f"f-{booking.id}"
        room_charge = FolioLineItem(
            id=new_id("li"),
            folio_id=folio_id,
            type=LineItemType.ROOM_CHARGE,
            description=f"Room Charges ({nights} night{'s' if nights > 1 else ''})",
            quantity=nights,
            unit_price=booking.daily_rate,
            total=booking.total_amount,
            date=datetime.combine(booking.check_in, time.min),
        )
        return self.store.add_folio(Folio(
            id=folio_id,
            booking_id=booking.id,
            line_items=[room_charge],
            created_at=now,
            updated_at=now,
        ))

    def _propagate_total(self, folio: Folio) -> None:
        self.store.update_booking(folio.booking_id, {"total_amount": folio.grand_total})

    # ============== Line items ==============

    def add_line_item(
        self,
        folio_id: str,
        item_type: LineItemType,
        description: str,
        quantity: int,
        unit_price: Any,
        operator: Optional[str] = None,
        item_date: Optional[date] = None,
    ) -> Folio:
        """
        Add a charge to the folio
        Business rules:
        1. quantity > 0, unit_price >= 0, description required
        2. total = quantity x unit_price
        3. folio recalculated, booking total updated, FOLIO_UPDATED logged
        """
        self.get_folio(folio_id)
        if not description or not description.strip():
            raise ValidationError("Description is required")
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity <= 0:
            raise ValidationError("Quantity must be a positive whole number")
        unit_price = _to_decimal(unit_price, "Unit price")
        if unit_price < 0:
            raise ValidationError("Unit price cannot be negative")
        try:
            line_type = LineItemType(item_type)
        except ValueError:
            raise ValidationError(f"Unknown line item type: {item_type}")

        item = FolioLineItem(
            id=new_id("li"),
            folio_id=folio_id,
            type=line_type,
            description=description.strip(),
            quantity=quantity,
            unit_price=unit_price,
            total=unit_price * quantity,
            date=datetime.combine(item_date, time.min) if item_date else datetime.now(),
        )
        folio = self.store.add_line_item(folio_id, item)
        self._propagate_total(folio)

        self.audit_service.record(
            AuditAction.FOLIO_UPDATED, "folio", folio_id,
            f"Added {line_type.value}: {item.description}",
            operator=operator,
            new_value=item,
        )
        logger.info(f"Folio {folio_id}: added {line_type.value} {item.total}, grand total {folio.grand_total}")
        return folio

    def remove_line_item(self, folio_id: str, line_item_id: str,
                         operator: Optional[str] = None, reason: Optional[str] = None,
                         allow_room_charge: bool = False) -> Folio:
        """
        Remove a charge from the folio
        The system room charge is protected unless allow_room_charge is set.
        """
        folio = self.get_folio(folio_id)
        item = next((li for li in folio.line_items if li.id == line_item_id), None)
        if not item:
            raise NotFoundError("line item", line_item_id)
        if item.type == LineItemType.ROOM_CHARGE and not allow_room_charge:
            logger.warning(f"Folio {folio_id}: refused removal of room charge {line_item_id}")
            raise InvalidStateError("Room charges cannot be removed from the folio")

        folio = self.store.remove_line_item(folio_id, line_item_id)
        self._propagate_total(folio)

        self.audit_service.record(
            AuditAction.FOLIO_UPDATED, "folio", folio_id,
            f"Removed {item.type.value}: {item.description}",
            operator=operator,
            reason=reason,
            previous_value=item,
        )
        logger.info(f"Folio {folio_id}: removed line item {line_item_id}, grand total {folio.grand_total}")
        return folio

    # ============== Discount & tax ==============

    def apply_discount(self, folio_id: str, amount: Any, percent: Any,
                       operator: Optional[str] = None) -> Folio:
        """Set (replace) the flat and percentage discount"""
        previous = self.get_folio(folio_id)
        amount = _to_decimal(amount, "Discount amount")
        percent = _to_decimal(percent, "Discount percent")
        if amount < 0:
            raise ValidationError("Discount amount cannot be negative")
        if percent < 0 or percent > _HUNDRED:
            raise ValidationError("Discount percent must be between 0 and 100")

        folio = self.store.apply_discount(folio_id, amount, percent)
        self._propagate_total(folio)

        self.audit_service.record(
            AuditAction.FOLIO_UPDATED, "folio", folio_id,
            f"Discount applied: {format_amount(amount)} + {percent}%",
            operator=operator,
            previous_value={
                "discount_amount": previous.discount_amount,
                "discount_percent": previous.discount_percent,
            },
            new_value={"discount_amount": amount, "discount_percent": percent},
        )
        logger.info(f"Folio {folio_id}: discount {amount} + {percent}%, grand total {folio.grand_total}")
        return folio

    def apply_tax(self, folio_id: str, percent: Any, operator: Optional[str] = None) -> Folio:
        """Set the tax percentage charged on the discounted subtotal"""
        previous = self.get_folio(folio_id)
        percent = _to_decimal(percent, "Tax percent")
        if percent < 0 or percent > _HUNDRED:
            raise ValidationError("Tax percent must be between 0 and 100")

        folio = self.store.update_folio(folio_id, {"tax_percent": percent})
        self._propagate_total(folio)

        self.audit_service.record(
            AuditAction.FOLIO_UPDATED, "folio", folio_id,
            f"Tax applied: {percent}%",
            operator=operator,
            previous_value={"tax_percent": previous.tax_percent},
            new_value={"tax_percent": percent},
        )
        logger.info(f"Folio {folio_id}: tax {percent}%, grand total {folio.grand_total}")
        return folio

    # ============== Payments ==============

    def _settle_if_covered(self, booking_id: str) -> None:
        summary = self.get_balance_summary(booking_id)
        if summary.total_paid >= summary.total_billed:
            self.store.update_booking(booking_id, {"payment_status": PaymentStatus.PAID})

    def add_payment(self, data: PaymentCreate, operator: Optional[str] = None) -> Payment:
        """
        Record a payment
        Business rules:
        1. amount > 0, folio must belong to the booking
        2. booking becomes PAID once total paid covers the bill
        3. PAYMENT_ADDED logged
        """
        booking = self.store.get_booking(data.booking_id)
        if not booking:
            raise NotFoundError("booking", data.booking_id)
        folio = self.get_folio(data.folio_id)
        if folio.booking_id != booking.id:
            raise ValidationError("Folio does not belong to this booking")
        amount = _to_decimal(data.amount, "Amount")
        if amount <= 0:
            raise ValidationError("Payment amount must be greater than 0")

        payment = self.store.add_payment(Payment(
            id=new_id("p"),
            folio_id=folio.id,
            booking_id=booking.id,
            amount=amount,
            method=PaymentMethod(data.method),
            reference=data.reference,
            notes=data.notes,
            created_at=datetime.now(),
            created_by=operator or settings.DEFAULT_OPERATOR,
        ))
        self._settle_if_covered(booking.id)

        self.audit_service.record(
            AuditAction.PAYMENT_ADDED, "payment", payment.id,
            f"Payment received: {format_amount(amount)} via {payment.method.value}",
            operator=operator,
            new_value=payment,
        )
        logger.info(f"Payment {payment.id}: {amount} {payment.method.value} for booking {booking.booking_code}")
        return payment

    def update_payment(self, payment_id: str, data: PaymentUpdate, reason: str,
                       operator: Optional[str] = None) -> Payment:
        """Edit a payment; a reason is mandatory and both versions are logged"""
        if not reason or not reason.strip():
            raise ValidationError("A reason is required to edit a payment")
        previous = self.store.get_payment(payment_id)
        if not previous:
            raise NotFoundError("payment", payment_id)

        updates: Dict[str, Any] = data.model_dump(exclude_unset=True)
        if "amount" in updates:
            updates["amount"] = _to_decimal(updates["amount"], "Amount")
            if updates["amount"] <= 0:
                raise ValidationError("Payment amount must be greater than 0")
        if updates.get("method") is None:
            updates.pop("method", None)

        payment = self.store.update_payment(payment_id, updates)

        self.audit_service.record(
            AuditAction.PAYMENT_EDITED, "payment", payment_id,
            "Payment edited",
            operator=operator,
            reason=reason.strip(),
            previous_value=previous,
            new_value=payment,
        )
        logger.info(f"Payment {payment_id} edited: {reason.strip()}")
        return payment

    def delete_payment(self, payment_id: str, reason: str, operator: Optional[str] = None) -> Payment:
        """
        Delete a payment
        The deletion is logged first; afterwards the booking's payment status is
        reset to PAYMENT_STATUS_AFTER_DELETE (or recomputed, if configured).
        """
        if not reason or not reason.strip():
            raise ValidationError("A reason is required to delete a payment")
        payment = self.store.get_payment(payment_id)
        if not payment:
            raise NotFoundError("payment", payment_id)

        self.audit_service.record(
            AuditAction.PAYMENT_DELETED, "payment", payment_id,
            f"Payment deleted: {format_amount(payment.amount)}",
            operator=operator,
            reason=reason.strip(),
            previous_value=payment,
        )
        self.store.delete_payment(payment_id)

        if self.store.get_booking(payment.booking_id):
            self.store.update_booking(
                payment.booking_id, {"payment_status": self._status_after_delete(payment.booking_id)}
            )
        logger.info(f"Payment {payment_id} deleted: {reason.strip()}")
        return payment

    def _status_after_delete(self, booking_id: str) -> PaymentStatus:
        if not settings.RECOMPUTE_PAYMENT_STATUS_ON_DELETE:
            return PAYMENT_STATUS_AFTER_DELETE
        summary = self.get_balance_summary(booking_id)
        if summary.total_paid > 0 and summary.balance_due <= 0:
            return PaymentStatus.PAID
        return PAYMENT_STATUS_AFTER_DELETE
