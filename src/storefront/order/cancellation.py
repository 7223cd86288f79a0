"""CancelOrder: cancel an order and return its stock.

Customers may cancel their own orders, admins any order. Ordered quantities
go back to the catalogue in the same unit of work as the status change.
"""

import structlog
from protean.fields import Identifier, String
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.exceptions import NotFoundError
from storefront.order.order import Order
from storefront.utils.locks import stock_locks
from storefront.utils.logging import log_context

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class CancelOrder:
    order_number = String(required=True, max_length=50)
    requested_by = Identifier(required=True)
    role = String(required=True, max_length=20)  # "customer" or "admin"
    reason = String(max_length=500)


def restore_stock(order):
    """Return every line of a cancelled order to stock."""
    repo = current_domain.repository_for(Product)
    for item in order.items:
        product = repo.find(item.product_id)
        if product is None:
            logger.warning(
                "restock_skipped_missing_product",
                order_number=order.order_number,
                product_id=str(item.product_id),
            )
            continue
        product.restock(item.quantity, reason=f"Order {order.order_number} cancelled")
        repo.add(product)


@storefront.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.find_by_number(command.order_number)

        if command.role != "admin" and not order.is_owned_by(command.requested_by):
            raise NotFoundError({"order_number": ["Order not found"]}, order_number=command.order_number)

        order.cancel(command.role, reason=command.reason)
        restore_stock(order)
        repo.add(order)


def lock_order_stock(order_number):
    """Hold the stock locks of every product in the order."""
    order = current_domain.repository_for(Order).find_by_number(order_number)
    return stock_locks.hold(item.product_id for item in order.items)


def cancel_order(order_number, requested_by, role, reason=None) -> Order:
    with log_context(order_number=order_number, user_id=str(requested_by)):
        with lock_order_stock(order_number):
            current_domain.process(
                CancelOrder(order_number=order_number, requested_by=requested_by, role=role, reason=reason),
                asynchronous=False,
            )

        logger.info("order_cancelled", cancelled_by=role)
    return current_domain.repository_for(Order).find_by_number(order_number)
