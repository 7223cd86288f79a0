"""Notification dispatcher: best-effort customer messages for order events.

Runs as an event handler, so it only ever sees committed orders. Adapter
failures and exceptions are logged and swallowed: a lost email never
affects the order that triggered it.
"""

import json

import structlog
from protean.utils.mixins import handle

from storefront.domain import storefront
from storefront.notification.channels import get_email_adapter, get_invoice_adapter
from storefront.notification.templates import render
from storefront.order.events import OrderCancelled, OrderPlaced, OrderStatusChanged
from storefront.order.order import Order
from storefront.order.status import OrderStatus

logger = structlog.get_logger(__name__)


def _send_email(kind: str, to: str, context: dict) -> None:
    try:
        content = render(kind, context)
        result = get_email_adapter().send(to=to, subject=content["subject"], body=content["body"])
    except Exception as exc:
        logger.error("notification_failed", kind=kind, order_number=context.get("order_number"), error=str(exc))
        return

    if result.get("status") == "sent":
        logger.info("notification_sent", kind=kind, order_number=context.get("order_number"))
    else:
        logger.warning(
            "notification_failed",
            kind=kind,
            order_number=context.get("order_number"),
            error=result.get("error", "Unknown dispatch error"),
        )


def _send_invoice(context: dict, to: str) -> None:
    try:
        result = get_invoice_adapter().generate_and_send(context, to=to)
    except Exception as exc:
        logger.error("invoice_failed", order_number=context.get("order_number"), error=str(exc))
        return

    if result.get("status") != "sent":
        logger.warning("invoice_failed", order_number=context.get("order_number"), error=result.get("error"))


@storefront.event_handler(part_of=Order)
class OrderNotificationDispatcher:
    @handle(OrderPlaced)
    def on_order_placed(self, event: OrderPlaced) -> None:
        address = json.loads(event.shipping_address)
        context = {
            "order_number": event.order_number,
            "full_name": address.get("full_name"),
            "items": json.loads(event.items),
            "subtotal": event.subtotal,
            "shipping_cost": event.shipping_cost,
            "tax": event.tax,
            "total": event.total,
            "currency": event.currency,
        }
        _send_email("order_placed", address.get("email"), context)
        _send_invoice(context, address.get("email"))

    @handle(OrderStatusChanged)
    def on_status_changed(self, event: OrderStatusChanged) -> None:
        if event.new_status != OrderStatus.CONFIRMED.value or not event.email:
            return

        _send_email(
            "order_confirmed",
            event.email,
            {"order_number": event.order_number, "full_name": event.full_name, "total": event.total},
        )

    @handle(OrderCancelled)
    def on_order_cancelled(self, event: OrderCancelled) -> None:
        if not event.email:
            return

        _send_email(
            "order_cancelled",
            event.email,
            {"order_number": event.order_number, "full_name": event.full_name, "reason": event.reason},
        )
