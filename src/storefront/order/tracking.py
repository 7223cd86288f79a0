"""Order read models: the owner/admin detail view and the public tracking view.

The tracking view is served without authentication, so it exposes only the
recipient's name and locality from the shipping address.
"""

from datetime import UTC, datetime, timedelta

from storefront.order.status import (
    DELIVERY_ESTIMATE_DAYS,
    STATUS_DESCRIPTIONS,
    STATUS_LABELS,
    STATUS_PROGRESS,
    OrderStatus,
    allowed_transitions,
)


def _iso(value):
    return value.isoformat() if value else None


def _items(order) -> list[dict]:
    return [
        {
            "product_id": str(item.product_id),
            "name": item.name,
            "price": item.price,
            "quantity": item.quantity,
            "image": item.image,
            "line_total": item.line_total,
        }
        for item in order.items
    ]


def timeline(order) -> list[dict]:
    return [
        {
            "status": entry.status,
            "label": STATUS_LABELS[OrderStatus(entry.status)],
            "timestamp": _iso(entry.timestamp),
            "note": entry.note,
            "actor": entry.actor,
            "location": entry.location,
        }
        for entry in order.history
    ]


def delivery_attempts(order) -> list[dict]:
    attempts = sorted(order.delivery_attempts, key=lambda attempt: attempt.sequence)
    return [
        {
            "status": attempt.status,
            "attempted_at": _iso(attempt.attempted_at),
            "notes": attempt.notes,
            "location": attempt.location,
        }
        for attempt in attempts
    ]


def estimated_delivery(order, now=None):
    """The recorded estimate, or one derived from how far along the order is."""
    if order.estimated_delivery:
        return order.estimated_delivery

    days = DELIVERY_ESTIMATE_DAYS.get(OrderStatus(order.status))
    if days is None:
        return None
    return (now or datetime.now(UTC)) + timedelta(days=days)


def order_detail(order) -> dict:
    status = OrderStatus(order.status)
    address = order.shipping_address
    return {
        "id": str(order.id),
        "order_number": order.order_number,
        "user_id": str(order.user_id),
        "status": order.status,
        "status_label": STATUS_LABELS[status],
        "allowed_transitions": [s.value for s in allowed_transitions(status)],
        "payment_method": order.payment_method,
        "payment_status": order.payment_status,
        "items": _items(order),
        "subtotal": order.pricing.subtotal,
        "shipping_cost": order.pricing.shipping_cost,
        "tax": order.pricing.tax,
        "total": order.pricing.total,
        "currency": order.pricing.currency,
        "shipping_address": {
            "full_name": address.full_name,
            "email": address.email,
            "address_line1": address.address_line1,
            "address_line2": address.address_line2,
            "city": address.city,
            "state": address.state,
            "postal_code": address.postal_code,
            "country": address.country,
            "phone_number": address.phone_number,
        },
        "notes": order.notes,
        "admin_notes": order.admin_notes,
        "customer_notes": order.customer_notes,
        "tracking_number": order.tracking_number,
        "carrier": order.carrier,
        "tracking_url": order.tracking_url,
        "current_location": order.current_location,
        "delivery_attempts": delivery_attempts(order),
        "estimated_delivery": _iso(order.estimated_delivery),
        "actual_delivery": _iso(order.actual_delivery),
        "shipped_at": _iso(order.shipped_at),
        "out_for_delivery_at": _iso(order.out_for_delivery_at),
        "delivered_at": _iso(order.delivered_at),
        "cancelled_at": _iso(order.cancelled_at),
        "cancellation_reason": order.cancellation_reason,
        "status_history": timeline(order),
        "created_at": _iso(order.created_at),
        "updated_at": _iso(order.updated_at),
    }


def tracking_view(order, now=None) -> dict:
    status = OrderStatus(order.status)
    address = order.shipping_address
    return {
        "order_number": order.order_number,
        "status": order.status,
        "status_label": STATUS_LABELS[status],
        "status_description": STATUS_DESCRIPTIONS[status],
        "progress": STATUS_PROGRESS[status],
        "estimated_delivery": _iso(estimated_delivery(order, now)),
        "actual_delivery": _iso(order.actual_delivery),
        "tracking_number": order.tracking_number,
        "carrier": order.carrier,
        "tracking_url": order.tracking_url,
        "current_location": order.current_location,
        "delivery_attempts": delivery_attempts(order),
        "customer_notes": order.customer_notes,
        "total": order.pricing.total,
        "items": _items(order),
        "shipping_address": {
            "full_name": address.full_name,
            "city": address.city,
            "state": address.state,
            "postal_code": address.postal_code,
        },
        "timeline": timeline(order),
        "placed_at": _iso(order.created_at),
    }
