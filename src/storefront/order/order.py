"""Order aggregate (CQRS): line items, frozen pricing and two status axes.

Fulfilment status:
    PENDING -> PROCESSING -> CONFIRMED -> SHIPPED -> DELIVERED
    PENDING | PROCESSING | CONFIRMED -> CANCELLED   (customer)
    any non-terminal -> CANCELLED                   (admin override)

Payment status (independent axis):
    PENDING -> COMPLETED | FAILED
    FAILED -> PENDING     (a new payment intent is issued)
    FAILED -> COMPLETED   (a later attempt on the same gateway order captured)
    COMPLETED -> REFUNDED (refund approved)

Pricing is computed once in ``place`` and never recomputed. The shipping
address is a snapshot, not a reference to the customer's address book.
"""

from datetime import UTC, datetime, timedelta
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text, ValueObject

from storefront.domain import storefront
from storefront.exceptions import DuplicateRefund, InvalidState, InvalidTransition, ReturnWindowExpired
from storefront.order.events import (
    OrderCancelled,
    OrderConfirmed,
    OrderDelivered,
    OrderPaid,
    OrderPaymentFailed,
    OrderPaymentRetried,
    OrderPlaced,
    OrderRefunded,
    OrderShipped,
    PaymentReceivedForCancelledOrder,
)
from storefront.order.pricing import price_order
from storefront.shared.money import round_money


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "Pending"
    PROCESSING = "Processing"
    CONFIRMED = "Confirmed"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class PaymentStatus(Enum):
    PENDING = "Pending"
    COMPLETED = "Completed"
    FAILED = "Failed"
    REFUNDED = "Refunded"


class CancellationActor(Enum):
    CUSTOMER = "Customer"
    ADMIN = "Admin"
    SYSTEM = "System"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

_PAYMENT_TRANSITIONS = {
    PaymentStatus.PENDING: {PaymentStatus.COMPLETED, PaymentStatus.FAILED},
    PaymentStatus.FAILED: {PaymentStatus.PENDING},
    PaymentStatus.COMPLETED: {PaymentStatus.REFUNDED},
    PaymentStatus.REFUNDED: set(),  # Terminal
}

_CUSTOMER_CANCELLABLE_STATES = {
    OrderStatus.PENDING,
    OrderStatus.PROCESSING,
    OrderStatus.CONFIRMED,
}


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class ShippingAddress:
    """Delivery address copied onto the order at checkout."""

    name = String(required=True, max_length=150)
    phone = String(max_length=20)
    line1 = String(required=True, max_length=255)
    line2 = String(max_length=255)
    city = String(required=True, max_length=100)
    state = String(required=True, max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(max_length=100)

    @classmethod
    def snapshot(cls, address):
        return cls(
            name=address.name,
            phone=address.phone,
            line1=address.line1,
            line2=address.line2,
            city=address.city,
            state=address.state,
            postal_code=address.postal_code,
            country=address.country,
        )


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=255)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    weight = String(max_length=50)
    line_total = Float(required=True, min_value=0.0)


@storefront.entity(part_of="Order")
class StatusChange:
    """One row of the order's status history."""

    status = String(required=True, max_length=50)
    payment_status = String(required=True, max_length=50)
    note = String(max_length=500)
    changed_by = String(max_length=100)
    changed_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    order_number = String(required=True, max_length=50, unique=True)
    customer_id = Identifier(required=True)
    items = HasMany(OrderItem)
    shipping_address = ValueObject(ShippingAddress)

    subtotal = Float(required=True, min_value=0.0)
    shipping_cost = Float(default=0.0, min_value=0.0)
    tax = Float(default=0.0, min_value=0.0)
    total = Float(required=True, min_value=0.0)

    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)

    tracking_number = String(max_length=100)
    cancel_reason = String(max_length=500)
    cancelled_by = String(choices=CancellationActor)
    refund_id = Identifier()
    notes = Text()
    status_history = HasMany(StatusChange)

    created_at = DateTime()
    updated_at = DateTime()
    paid_at = DateTime()
    confirmed_at = DateTime()
    shipped_at = DateTime()
    delivered_at = DateTime()
    cancelled_at = DateTime()

    @invariant.post
    def total_must_equal_its_components(self):
        if self.total is None or self.subtotal is None:
            return
        expected = round_money((self.subtotal or 0) + (self.shipping_cost or 0) + (self.tax or 0))
        if abs(round_money(self.total) - expected) > 0.001:
            raise ValidationError({"total": ["Total must equal subtotal + shipping cost + tax"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, order_number, customer_id, lines, shipping_address, tax_rate=None, notes=None):
        """Create a PENDING order from priced lines.

        ``lines`` are mappings with ``product_id``, ``product_name``,
        ``quantity``, ``unit_price`` and ``weight``; the unit price is the
        catalogue price read at this instant and is frozen on the order.
        """
        if not lines:
            raise ValidationError({"items": ["Cart is empty"]})

        now = datetime.now(UTC)
        pricing = price_order(lines, tax_rate)

        order = cls(
            order_number=order_number,
            customer_id=customer_id,
            items=[
                OrderItem(
                    product_id=line["product_id"],
                    product_name=line["product_name"],
                    quantity=line["quantity"],
                    unit_price=line["unit_price"],
                    weight=line.get("weight"),
                    line_total=round_money(line["unit_price"] * line["quantity"]),
                )
                for line in lines
            ],
            shipping_address=shipping_address,
            subtotal=pricing.subtotal,
            shipping_cost=pricing.shipping_cost,
            tax=pricing.tax,
            total=pricing.total,
            status=OrderStatus.PENDING.value,
            payment_status=PaymentStatus.PENDING.value,
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        order._record_history("Order placed", changed_by=str(customer_id), at=now)

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                customer_id=str(customer_id),
                item_count=sum(line["quantity"] for line in lines),
                subtotal=pricing.subtotal,
                shipping_cost=pricing.shipping_cost,
                tax=pricing.tax,
                total=pricing.total,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidTransition({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def _assert_can_transition_payment(self, target_status):
        current = PaymentStatus(self.payment_status)
        if target_status not in _PAYMENT_TRANSITIONS.get(current, set()):
            raise InvalidTransition(
                {"payment_status": [f"Cannot transition from {current.value} to {target_status.value}"]}
            )

    def _record_history(self, note, changed_by=None, at=None):
        self.add_status_history(
            StatusChange(
                status=self.status,
                payment_status=self.payment_status,
                note=note,
                changed_by=changed_by,
                changed_at=at or datetime.now(UTC),
            )
        )

    def is_owned_by(self, customer_id) -> bool:
        return str(self.customer_id) == str(customer_id)

    @property
    def is_cancelled(self) -> bool:
        return self.status == OrderStatus.CANCELLED.value

    # -------------------------------------------------------------------
    # Payment axis
    # -------------------------------------------------------------------
    def record_payment(self, gateway_payment_id, changed_by="system"):
        """Record a completed payment.

        Moves the order to PROCESSING and returns True. A cancelled order keeps
        its status; the payment is still recorded so it can be refunded, and
        False is returned so the caller skips fulfilment side effects.
        """
        self._assert_can_transition_payment(PaymentStatus.COMPLETED)

        now = datetime.now(UTC)
        self.payment_status = PaymentStatus.COMPLETED.value
        self.paid_at = now
        self.updated_at = now

        if self.is_cancelled:
            self._record_history("Payment received after cancellation", changed_by=changed_by, at=now)
            self.raise_(
                PaymentReceivedForCancelledOrder(
                    order_id=str(self.id),
                    order_number=self.order_number,
                    customer_id=str(self.customer_id),
                    total=self.total,
                    gateway_payment_id=gateway_payment_id,
                    received_at=now,
                )
            )
            return False

        self._assert_can_transition(OrderStatus.PROCESSING)
        self.status = OrderStatus.PROCESSING.value
        self._record_history("Payment completed", changed_by=changed_by, at=now)

        self.raise_(
            OrderPaid(
                order_id=str(self.id),
                order_number=self.order_number,
                customer_id=str(self.customer_id),
                total=self.total,
                gateway_payment_id=gateway_payment_id,
                paid_at=now,
            )
        )
        return True

    def record_payment_failure(self, reason, changed_by="system"):
        """Mark the payment FAILED. A no-op when it already is."""
        if self.payment_status == PaymentStatus.FAILED.value:
            return False
        self._assert_can_transition_payment(PaymentStatus.FAILED)

        now = datetime.now(UTC)
        self.payment_status = PaymentStatus.FAILED.value
        self.updated_at = now
        self._record_history(f"Payment failed: {reason}" if reason else "Payment failed", changed_by, at=now)

        self.raise_(
            OrderPaymentFailed(
                order_id=str(self.id),
                order_number=self.order_number,
                customer_id=str(self.customer_id),
                reason=reason,
                failed_at=now,
            )
        )
        return True

    def reopen_payment(self):
        """Allow another payment attempt after a failure."""
        self._assert_can_transition_payment(PaymentStatus.PENDING)

        now = datetime.now(UTC)
        self.payment_status = PaymentStatus.PENDING.value
        self.updated_at = now
        self.raise_(OrderPaymentRetried(order_id=str(self.id), order_number=self.order_number, retried_at=now))

    # -------------------------------------------------------------------
    # Fulfilment axis
    # -------------------------------------------------------------------
    def confirm(self, changed_by="admin"):
        self._assert_can_transition(OrderStatus.CONFIRMED)

        now = datetime.now(UTC)
        self.status = OrderStatus.CONFIRMED.value
        self.confirmed_at = now
        self.updated_at = now
        self._record_history("Order confirmed", changed_by=changed_by, at=now)

        self.raise_(
            OrderConfirmed(
                order_id=str(self.id),
                order_number=self.order_number,
                customer_id=str(self.customer_id),
                confirmed_at=now,
            )
        )

    def ship(self, tracking_number, changed_by="admin"):
        if not tracking_number:
            raise ValidationError({"tracking_number": ["Tracking number is required to ship an order"]})
        self._assert_can_transition(OrderStatus.SHIPPED)

        now = datetime.now(UTC)
        self.status = OrderStatus.SHIPPED.value
        self.tracking_number = tracking_number
        self.shipped_at = now
        self.updated_at = now
        self._record_history(f"Shipped with tracking number {tracking_number}", changed_by=changed_by, at=now)

        self.raise_(
            OrderShipped(
                order_id=str(self.id),
                order_number=self.order_number,
                customer_id=str(self.customer_id),
                tracking_number=tracking_number,
                shipped_at=now,
            )
        )

    def deliver(self, changed_by="admin"):
        self._assert_can_transition(OrderStatus.DELIVERED)

        now = datetime.now(UTC)
        self.status = OrderStatus.DELIVERED.value
        self.delivered_at = now
        self.updated_at = now
        self._record_history("Order delivered", changed_by=changed_by, at=now)

        self.raise_(
            OrderDelivered(
                order_id=str(self.id),
                order_number=self.order_number,
                customer_id=str(self.customer_id),
                delivered_at=now,
            )
        )

    def cancel(self, reason, cancelled_by=CancellationActor.CUSTOMER.value, changed_by=None):
        current = OrderStatus(self.status)
        if cancelled_by == CancellationActor.CUSTOMER.value and current not in _CUSTOMER_CANCELLABLE_STATES:
            raise InvalidTransition({"status": [f"Order cannot be cancelled once {current.value}"]})
        self._assert_can_transition(OrderStatus.CANCELLED)

        now = datetime.now(UTC)
        self.status = OrderStatus.CANCELLED.value
        self.cancel_reason = reason
        self.cancelled_by = cancelled_by
        self.cancelled_at = now
        self.updated_at = now
        self._record_history(
            f"Order cancelled: {reason}" if reason else "Order cancelled",
            changed_by=changed_by or cancelled_by,
            at=now,
        )

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                order_number=self.order_number,
                customer_id=str(self.customer_id),
                previous_status=current.value,
                reason=reason,
                cancelled_by=cancelled_by,
                cancelled_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Refunds
    # -------------------------------------------------------------------
    def link_refund(self, refund_id):
        if self.refund_id:
            raise DuplicateRefund({"order_id": ["A refund has already been requested for this order"]})
        self.refund_id = refund_id
        self.updated_at = datetime.now(UTC)

    def mark_refunded(self, refund_id, processed_by):
        """Refund approved: payment REFUNDED and the order forced to CANCELLED."""
        self._assert_can_transition_payment(PaymentStatus.REFUNDED)

        now = datetime.now(UTC)
        self.payment_status = PaymentStatus.REFUNDED.value
        if not self.is_cancelled:
            self.status = OrderStatus.CANCELLED.value
            self.cancel_reason = "Refund approved"
            self.cancelled_by = CancellationActor.ADMIN.value
            self.cancelled_at = now
        self.updated_at = now
        self._record_history("Refund approved", changed_by=processed_by, at=now)

        self.raise_(
            OrderRefunded(
                order_id=str(self.id),
                order_number=self.order_number,
                customer_id=str(self.customer_id),
                refund_id=str(refund_id),
                amount=self.total,
                refunded_at=now,
            )
        )

    def assert_returnable(self, window_days, now=None):
        """Returns are accepted for DELIVERED orders within the return window."""
        if self.status != OrderStatus.DELIVERED.value:
            raise ReturnWindowExpired({"order": ["Only delivered orders can be returned"]})

        delivered_at = self.delivered_at or self.created_at
        if delivered_at.tzinfo is None:
            delivered_at = delivered_at.replace(tzinfo=UTC)
        now = now or datetime.now(UTC)
        if now - delivered_at > timedelta(days=window_days):
            raise ReturnWindowExpired({"order": [f"Return window of {window_days} days has expired"]})

    def assert_payment_completed(self):
        if self.payment_status != PaymentStatus.COMPLETED.value:
            raise InvalidState({"payment_status": ["Refunds can only be requested for paid orders"]})


@storefront.repository(part_of=Order)
class OrderRepository:
    def find_by_number(self, order_number: str) -> Order | None:
        results = self._dao.query.filter(order_number=order_number).all().items
        return results[0] if results else None

    def for_customer(self, customer_id) -> list[Order]:
        return self._dao.query.filter(customer_id=str(customer_id)).order_by("-created_at").all().items
