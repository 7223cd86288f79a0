"""Order aggregate (CQRS): an immutable, priced snapshot of a cart.

Lines, prices, totals and the shipping address are frozen when the order is
placed and never recomputed. After placement only the lifecycle fields move:
status (append-only history), payment status, tracking details, courier
delivery attempts, customer-facing notes and the timestamps stamped when
specific states are entered.

Lifecycle::

    pending → confirmed → processing → shipped → out_for_delivery → delivered
    any non-terminal state → cancelled
"""

import json
import re
from datetime import UTC, datetime, timedelta

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    ValueObject,
)

from storefront.catalogue.product import MAX_IMAGE_URL_LENGTH
from storefront.domain import storefront
from storefront.exceptions import InvalidStateError
from storefront.order.events import (
    DeliveryAttemptRecorded,
    OrderCancelled,
    OrderPlaced,
    OrderStatusChanged,
    OrderTrackingUpdated,
)
from storefront.order.pricing import price_lines
from storefront.order.status import (
    ATTEMPTABLE_STATUSES,
    DeliveryAttemptStatus,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    can_transition,
    is_terminal,
)

# Pending orders younger than this may be hard-deleted
DELETION_WINDOW = timedelta(hours=24)
SHIPPING_ESTIMATE = timedelta(days=3)

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[A-Za-z]{2,}$")
_PHONE_PATTERN = re.compile(r"^[+]?[\d\s\-()]{10,15}$")

ADDRESS_REQUIRED_FIELDS = (
    "full_name",
    "email",
    "address_line1",
    "city",
    "state",
    "postal_code",
    "phone_number",
)


def validate_shipping_address(address) -> dict:
    """Return a cleaned copy of ``address`` or raise ``ValidationError``.

    All problems are reported together, keyed by field.
    """
    if not isinstance(address, dict):
        raise ValidationError({"shipping_address": ["Shipping address is required"]})

    cleaned = {key: value.strip() if isinstance(value, str) else value for key, value in address.items()}
    errors = {}

    for field_name in ADDRESS_REQUIRED_FIELDS:
        if not cleaned.get(field_name):
            errors[field_name] = [f"{field_name.replace('_', ' ').capitalize()} is required"]

    if cleaned.get("email") and not _EMAIL_PATTERN.match(cleaned["email"]):
        errors["email"] = ["Please enter a valid email"]
    if cleaned.get("phone_number") and not _PHONE_PATTERN.match(cleaned["phone_number"]):
        errors["phone_number"] = ["Please enter a valid phone number"]

    if errors:
        raise ValidationError(errors)

    cleaned["email"] = cleaned["email"].lower()
    cleaned["country"] = cleaned.get("country") or "India"
    return {
        key: cleaned.get(key)
        for key in (*ADDRESS_REQUIRED_FIELDS, "address_line2", "country")
    }


def _as_utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class ShippingAddress:
    """Where the order ships, copied in full at placement time."""

    full_name = String(required=True, max_length=100)
    email = String(required=True, max_length=254)
    address_line1 = String(required=True, max_length=200)
    address_line2 = String(max_length=200)
    city = String(required=True, max_length=100)
    state = String(required=True, max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(max_length=100, default="India")
    phone_number = String(required=True, max_length=20)


@storefront.value_object(part_of="Order")
class OrderPricing:
    """Amounts locked at placement; catalogue repricing never touches them."""

    subtotal = Float(required=True, min_value=0.0)
    shipping_cost = Float(default=0.0, min_value=0.0)
    tax = Float(default=0.0, min_value=0.0)
    total = Float(required=True, min_value=0.0)
    currency = String(max_length=3, default="INR")

    @invariant.post
    def total_must_add_up(self):
        expected = round(self.subtotal + self.shipping_cost + self.tax, 2)
        if abs(expected - self.total) > 0.005:
            raise ValidationError({"total": [f"Total {self.total} does not equal subtotal + shipping + tax ({expected})"]})


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    """A frozen copy of a product line; it never refers back to the catalogue."""

    product_id = Identifier(required=True)
    name = String(required=True, max_length=100)
    price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    image = String(max_length=MAX_IMAGE_URL_LENGTH)

    @property
    def line_total(self) -> float:
        return round(self.price * self.quantity, 2)


@storefront.entity(part_of="Order")
class StatusEntry:
    sequence = Integer(required=True, min_value=1)
    status = String(required=True, choices=OrderStatus)
    timestamp = DateTime(required=True)
    note = String(max_length=500)
    actor = String(max_length=50)
    location = String(max_length=200)


@storefront.entity(part_of="Order")
class DeliveryAttempt:
    """One courier attempt to hand the parcel over."""

    sequence = Integer(required=True, min_value=1)
    status = String(required=True, choices=DeliveryAttemptStatus)
    attempted_at = DateTime(required=True)
    notes = String(max_length=500)
    location = String(max_length=200)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    order_number = String(required=True, max_length=50, unique=True)
    user_id = Identifier(required=True)
    items = HasMany(OrderItem)
    pricing = ValueObject(OrderPricing)
    shipping_address = ValueObject(ShippingAddress)
    payment_method = String(choices=PaymentMethod, default=PaymentMethod.COD.value)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    status_history = HasMany(StatusEntry)
    notes = String(max_length=500)
    admin_notes = String(max_length=1000)
    tracking_number = String(max_length=100)
    carrier = String(max_length=100)
    tracking_url = String(max_length=500)
    current_location = String(max_length=200)
    delivery_attempts = HasMany(DeliveryAttempt)
    customer_notes = String(max_length=1000)
    estimated_delivery = DateTime()
    actual_delivery = DateTime()
    shipped_at = DateTime()
    out_for_delivery_at = DateTime()
    delivered_at = DateTime()
    cancelled_at = DateTime()
    cancellation_reason = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, order_number, user_id, lines, shipping_address, payment_method="cod", notes=None):
        """Create a pending order from frozen lines.

        Args:
            order_number: Allocated order number.
            user_id: The customer placing the order.
            lines: List of dicts with product_id, name, price, quantity, image.
            shipping_address: Dict already cleaned by ``validate_shipping_address``.
            payment_method: Only ``cod`` is accepted.
            notes: Optional customer notes.
        """
        if not lines:
            raise ValidationError({"items": ["Order must contain at least one item"]})

        now = datetime.now(UTC)
        amounts = price_lines(lines)

        order = cls(
            order_number=order_number,
            user_id=user_id,
            pricing=OrderPricing(**amounts),
            shipping_address=ShippingAddress(**shipping_address),
            payment_method=payment_method,
            payment_status=PaymentStatus.PENDING.value,
            status=OrderStatus.PENDING.value,
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        for line in lines:
            order.add_items(OrderItem(**line))
        order._record(OrderStatus.PENDING, "Order placed", "customer", now)

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                user_id=str(user_id),
                items=json.dumps(lines),
                shipping_address=json.dumps(shipping_address),
                subtotal=amounts["subtotal"],
                shipping_cost=amounts["shipping_cost"],
                tax=amounts["tax"],
                total=amounts["total"],
                currency=amounts["currency"],
                payment_method=payment_method,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def history(self) -> list[StatusEntry]:
        """Status entries in the order they were recorded."""
        return sorted(self.status_history, key=lambda entry: entry.sequence)

    def is_owned_by(self, user_id) -> bool:
        return str(self.user_id) == str(user_id)

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def transition(self, new_status, note=None, actor=None, location=None):
        """Move the order to ``new_status`` and record it in the history.

        ``location`` is where the parcel was when the status changed; it is
        kept on the history entry.

        Raises ``ValidationError`` for an unknown status and
        ``InvalidStateError`` when the lifecycle forbids the move.
        """
        try:
            target = OrderStatus(new_status.value if isinstance(new_status, OrderStatus) else new_status)
        except ValueError:
            raise ValidationError({"status": [f"Invalid order status '{new_status}'"]}) from None

        if target == OrderStatus.CANCELLED:
            return self.cancel("admin", reason=note)

        current = OrderStatus(self.status)
        self._assert_can_transition(current, target)

        now = datetime.now(UTC)
        self.status = target.value
        self._stamp(target, now)
        note = note or f"Status updated to {target.value}"
        self._record(target, note, actor, now, location=location)
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                order_number=self.order_number,
                user_id=str(self.user_id),
                previous_status=current.value,
                new_status=target.value,
                note=note,
                actor=actor,
                email=self.shipping_address.email,
                full_name=self.shipping_address.full_name,
                total=self.pricing.total,
                changed_at=now,
            )
        )

    def cancel(self, actor_role, reason=None):
        """Cancel the order on behalf of ``actor_role`` (customer or admin)."""
        current = OrderStatus(self.status)
        if is_terminal(current):
            raise InvalidStateError(
                {"status": [f"Cannot cancel an order that is already {current.value}"]},
                order_number=self.order_number,
            )

        now = datetime.now(UTC)
        note = f"Order cancelled by {actor_role}"
        if reason:
            note = f"{note}: {reason}"

        self.status = OrderStatus.CANCELLED.value
        self.cancelled_at = now
        self.cancellation_reason = reason
        self._record(OrderStatus.CANCELLED, note, actor_role, now)
        self.updated_at = now

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                order_number=self.order_number,
                user_id=str(self.user_id),
                previous_status=current.value,
                cancelled_by=actor_role,
                reason=reason,
                items=json.dumps([{"product_id": str(i.product_id), "quantity": i.quantity} for i in self.items]),
                email=self.shipping_address.email,
                full_name=self.shipping_address.full_name,
                cancelled_at=now,
            )
        )

    def update_tracking(
        self,
        tracking_number=None,
        carrier=None,
        estimated_delivery=None,
        payment_status=None,
        admin_notes=None,
        tracking_url=None,
        current_location=None,
        customer_notes=None,
    ):
        """Update the mutable fulfilment details; None leaves a field untouched."""
        if payment_status is not None:
            try:
                payment_status = PaymentStatus(payment_status).value
            except ValueError:
                raise ValidationError({"payment_status": [f"Invalid payment status '{payment_status}'"]}) from None

        changes = {
            "tracking_number": tracking_number,
            "carrier": carrier,
            "estimated_delivery": estimated_delivery,
            "payment_status": payment_status,
            "admin_notes": admin_notes,
            "tracking_url": tracking_url,
            "current_location": current_location,
            "customer_notes": customer_notes,
        }
        changes = {key: value for key, value in changes.items() if value is not None}
        if not changes:
            return

        for key, value in changes.items():
            setattr(self, key, value)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            OrderTrackingUpdated(
                order_id=str(self.id),
                order_number=self.order_number,
                tracking_number=self.tracking_number,
                carrier=self.carrier,
                estimated_delivery=self.estimated_delivery,
                payment_status=self.payment_status,
                tracking_url=self.tracking_url,
                current_location=self.current_location,
            )
        )

    def record_delivery_attempt(self, status, notes=None, location=None):
        """Log a courier attempt. Only orders that have shipped can have one."""
        try:
            attempt_status = DeliveryAttemptStatus(status)
        except ValueError:
            raise ValidationError({"delivery_attempt": [f"Invalid delivery attempt status '{status}'"]}) from None

        current = OrderStatus(self.status)
        if current not in ATTEMPTABLE_STATUSES:
            raise InvalidStateError(
                {"delivery_attempt": [f"Cannot record a delivery attempt for an order that is {current.value}"]},
                order_number=self.order_number,
            )

        now = datetime.now(UTC)
        self.add_delivery_attempts(
            DeliveryAttempt(
                sequence=len(self.delivery_attempts) + 1,
                status=attempt_status.value,
                attempted_at=now,
                notes=notes,
                location=location,
            )
        )
        if location:
            self.current_location = location
        self.updated_at = now

        self.raise_(
            DeliveryAttemptRecorded(
                order_id=str(self.id),
                order_number=self.order_number,
                status=attempt_status.value,
                notes=notes,
                location=location,
                attempted_at=now,
            )
        )

    def ensure_deletable(self, now=None):
        """Only cancelled orders, or pending ones younger than a day, may be deleted."""
        now = now or datetime.now(UTC)
        status = OrderStatus(self.status)

        if status == OrderStatus.CANCELLED:
            return
        if status == OrderStatus.PENDING and now - _as_utc(self.created_at) < DELETION_WINDOW:
            return

        raise InvalidStateError(
            {"order": ["Only cancelled orders or pending orders placed within the last 24 hours can be deleted"]},
            order_number=self.order_number,
        )

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def _assert_can_transition(self, current, target):
        if is_terminal(current):
            raise InvalidStateError(
                {"status": [f"Order is already {current.value}"]},
                order_number=self.order_number,
            )
        if not can_transition(current, target):
            raise InvalidStateError(
                {"status": [f"Cannot change status from {current.value} to {target.value}"]},
                order_number=self.order_number,
            )

    def _stamp(self, target, now):
        if target == OrderStatus.SHIPPED:
            self.shipped_at = now
            if self.estimated_delivery is None:
                self.estimated_delivery = now + SHIPPING_ESTIMATE
        elif target == OrderStatus.OUT_FOR_DELIVERY:
            self.out_for_delivery_at = now
        elif target == OrderStatus.DELIVERED:
            self.delivered_at = now
            self.actual_delivery = now
            if self.payment_method == PaymentMethod.COD.value:
                self.payment_status = PaymentStatus.PAID.value

    def _record(self, status, note, actor, now, location=None):
        self.add_status_history(
            StatusEntry(
                sequence=len(self.status_history) + 1,
                status=status.value,
                timestamp=now,
                note=note,
                actor=actor,
                location=location,
            )
        )
