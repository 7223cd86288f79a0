"""DeleteOrder: hard-delete an order (admin only).

Allowed for cancelled orders, and for pending orders placed less than a
day ago. A deleted pending order returns its stock; a cancelled one
already has.
"""

import structlog
from protean.fields import String
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from storefront.domain import storefront
from storefront.order.cancellation import lock_order_stock, restore_stock
from storefront.order.order import Order
from storefront.order.status import OrderStatus

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class DeleteOrder:
    order_number = String(required=True, max_length=50)


@storefront.command_handler(part_of=Order)
class DeleteOrderHandler:
    @handle(DeleteOrder)
    def delete_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.find_by_number(command.order_number)
        order.ensure_deletable()

        if order.status == OrderStatus.PENDING.value:
            restore_stock(order)
        repo.remove(order)


def delete_order(order_number):
    with lock_order_stock(order_number):
        current_domain.process(DeleteOrder(order_number=order_number), asynchronous=False)

    logger.info("order_deleted", order_number=order_number)
