"""UpdateOrderStatus: admin changes to an order's status and tracking details.

A status equal to the current one is not a transition; the remaining
fields are still applied. Cancelling through this command restores stock
exactly like :mod:`storefront.order.cancellation`. A delivery attempt is
recorded after the status change, so a single update can mark an order
delivered and log the successful attempt.
"""

import json

import structlog
from protean.exceptions import ValidationError
from protean.fields import DateTime, String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from storefront.domain import storefront
from storefront.order.cancellation import lock_order_stock, restore_stock
from storefront.order.order import Order
from storefront.order.status import OrderStatus
from storefront.utils.logging import log_context

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class UpdateOrderStatus:
    order_number = String(required=True, max_length=50)
    status = String(max_length=30)
    note = String(max_length=500)
    actor = String(max_length=50, default="admin")
    tracking_number = String(max_length=100)
    carrier = String(max_length=100)
    tracking_url = String(max_length=500)
    current_location = String(max_length=200)
    estimated_delivery = DateTime()
    payment_status = String(max_length=20)
    admin_notes = String(max_length=1000)
    customer_notes = String(max_length=1000)
    delivery_attempt = Text()  # JSON: {status, notes, location}


def _parse_attempt(payload) -> dict:
    attempt = json.loads(payload)
    if not isinstance(attempt, dict) or not attempt.get("status"):
        raise ValidationError({"delivery_attempt": ["Delivery attempt needs a status"]})
    return {
        "status": attempt["status"],
        "notes": attempt.get("notes"),
        "location": attempt.get("location"),
    }


@storefront.command_handler(part_of=Order)
class UpdateOrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.find_by_number(command.order_number)
        attempt = _parse_attempt(command.delivery_attempt) if command.delivery_attempt else None

        if command.status and command.status != order.status:
            if command.status == OrderStatus.CANCELLED.value:
                order.cancel("admin", reason=command.note)
                restore_stock(order)
            else:
                order.transition(
                    command.status,
                    note=command.note,
                    actor=command.actor,
                    location=command.current_location,
                )

        order.update_tracking(
            tracking_number=command.tracking_number,
            carrier=command.carrier,
            estimated_delivery=command.estimated_delivery,
            payment_status=command.payment_status,
            admin_notes=command.admin_notes,
            tracking_url=command.tracking_url,
            current_location=command.current_location,
            customer_notes=command.customer_notes,
        )

        if attempt:
            order.record_delivery_attempt(**attempt)

        repo.add(order)


def update_order_status(order_number, **changes) -> Order:
    """Apply admin ``changes`` to an order and return it reloaded.

    ``delivery_attempt`` may be passed as a dict of status, notes and location.
    """
    if isinstance(changes.get("delivery_attempt"), dict):
        changes["delivery_attempt"] = json.dumps(changes["delivery_attempt"])

    with log_context(order_number=order_number):
        with lock_order_stock(order_number):
            current_domain.process(UpdateOrderStatus(order_number=order_number, **changes), asynchronous=False)

        order = current_domain.repository_for(Order).find_by_number(order_number)
        logger.info("order_updated", status=order.status)
    return order
