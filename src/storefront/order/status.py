"""Order status vocabulary and lifecycle policy.

Orders move forward along ``_PROGRESSION``; skipping ahead is allowed,
moving back is not. ``cancelled`` is reachable from any non-terminal state.
"""

from enum import Enum


class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(Enum):
    COD = "cod"


class DeliveryAttemptStatus(Enum):
    SUCCESSFUL = "successful"
    FAILED = "failed"
    RESCHEDULED = "rescheduled"


# Delivery attempts are only meaningful once the parcel has left the warehouse
ATTEMPTABLE_STATUSES = frozenset(
    {
        OrderStatus.SHIPPED,
        OrderStatus.OUT_FOR_DELIVERY,
        OrderStatus.DELIVERED,
    }
)


_PROGRESSION = [
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPED,
    OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.DELIVERED,
]

TERMINAL_STATUSES = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}


def is_terminal(status: OrderStatus) -> bool:
    return status in TERMINAL_STATUSES


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    if is_terminal(current) or current == target:
        return False
    if target == OrderStatus.CANCELLED:
        return True
    return _PROGRESSION.index(target) > _PROGRESSION.index(current)


def allowed_transitions(current: OrderStatus) -> list[OrderStatus]:
    return [status for status in OrderStatus if can_transition(current, status)]


# Customer-facing presentation, used by the tracking view
STATUS_LABELS = {
    OrderStatus.PENDING: "Order Placed",
    OrderStatus.CONFIRMED: "Order Confirmed",
    OrderStatus.PROCESSING: "Processing",
    OrderStatus.SHIPPED: "Shipped",
    OrderStatus.OUT_FOR_DELIVERY: "Out for Delivery",
    OrderStatus.DELIVERED: "Delivered",
    OrderStatus.CANCELLED: "Cancelled",
}

STATUS_DESCRIPTIONS = {
    OrderStatus.PENDING: "Your order has been placed and is awaiting confirmation",
    OrderStatus.CONFIRMED: "Your order has been confirmed and will be processed soon",
    OrderStatus.PROCESSING: "Your order is being prepared for shipment",
    OrderStatus.SHIPPED: "Your order has been shipped and is on its way",
    OrderStatus.OUT_FOR_DELIVERY: "Your order is out for delivery and will arrive today",
    OrderStatus.DELIVERED: "Your order has been delivered successfully",
    OrderStatus.CANCELLED: "Your order has been cancelled",
}

STATUS_PROGRESS = {
    OrderStatus.PENDING: 10,
    OrderStatus.CONFIRMED: 20,
    OrderStatus.PROCESSING: 40,
    OrderStatus.SHIPPED: 60,
    OrderStatus.OUT_FOR_DELIVERY: 80,
    OrderStatus.DELIVERED: 100,
    OrderStatus.CANCELLED: 0,
}

# Days until delivery when no estimate has been recorded
DELIVERY_ESTIMATE_DAYS = {
    OrderStatus.PENDING: 7,
    OrderStatus.CONFIRMED: 7,
    OrderStatus.PROCESSING: 5,
    OrderStatus.SHIPPED: 3,
    OrderStatus.OUT_FOR_DELIVERY: 1,
}
