"""PlaceOrder: convert submitted cart contents into an order.

The handler validates everything before touching stock, then decrements
stock, persists the order and clears the cart in one unit of work. Callers
go through :func:`place_order`, which holds the user's cart lock and the
stock lock of every ordered product until that unit of work has committed.
"""

import json

import structlog
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from storefront.cart.cart import MAX_QUANTITY_PER_PRODUCT, Cart
from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.exceptions import ProductUnavailable
from storefront.order.numbering import next_order_number
from storefront.order.order import Order, validate_shipping_address
from storefront.order.status import PaymentMethod
from storefront.utils.locks import cart_locks, stock_locks
from storefront.utils.logging import log_context

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class PlaceOrder:
    order_number = String(required=True, max_length=50)
    user_id = Identifier(required=True)
    items = Text(required=True)  # JSON: [{product_id, quantity}]
    shipping_address = Text(required=True)  # JSON: address dict
    payment_method = String(max_length=20, default=PaymentMethod.COD.value)
    notes = String(max_length=500)


def normalize_lines(items) -> list[dict]:
    """Validate requested lines, merging repeated products into one line."""
    if not items:
        raise ValidationError({"items": ["Order must contain at least one item"]})

    quantities: dict[str, int] = {}
    for item in items:
        product_id = item.get("product_id") if isinstance(item, dict) else None
        quantity = item.get("quantity") if isinstance(item, dict) else None
        if not product_id:
            raise ValidationError({"items": ["Every item needs a product_id"]})
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
            raise ValidationError({"items": [f"Quantity for product {product_id} must be a whole number of at least 1"]})
        quantities[str(product_id)] = quantities.get(str(product_id), 0) + quantity

    for product_id, quantity in quantities.items():
        if quantity > MAX_QUANTITY_PER_PRODUCT:
            raise ValidationError(
                {"items": [f"Cannot order more than {MAX_QUANTITY_PER_PRODUCT} units of product {product_id}"]}
            )

    return [{"product_id": product_id, "quantity": quantity} for product_id, quantity in quantities.items()]


def validate_payment_method(payment_method) -> str:
    try:
        return PaymentMethod(payment_method or PaymentMethod.COD.value).value
    except ValueError:
        raise ValidationError({"payment_method": ["Only cash on delivery is supported"]}) from None


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        lines = normalize_lines(json.loads(command.items))
        address = validate_shipping_address(json.loads(command.shipping_address))
        payment_method = validate_payment_method(command.payment_method)

        product_repo = current_domain.repository_for(Product)
        cart_repo = current_domain.repository_for(Cart)
        cart = cart_repo.for_user(command.user_id)
        snapshots = cart.price_snapshots() if cart else {}

        # Every line is checked before any stock moves
        checked = []
        for line in lines:
            product = product_repo.find(line["product_id"])
            if product is None:
                raise ProductUnavailable(line["product_id"])
            product.ensure_available()
            product.ensure_stock_for(line["quantity"])
            checked.append((product, line["quantity"]))

        frozen = []
        for product, quantity in checked:
            product = product_repo.decrement_stock(product.id, quantity, reference=command.order_number)
            frozen.append(
                {
                    "product_id": str(product.id),
                    "name": product.name,
                    "price": snapshots.get(str(product.id), product.price),
                    "quantity": quantity,
                    "image": product.primary_image,
                }
            )

        order = Order.place(
            order_number=command.order_number,
            user_id=command.user_id,
            lines=frozen,
            shipping_address=address,
            payment_method=payment_method,
            notes=command.notes,
        )
        current_domain.repository_for(Order).add(order)

        if cart is not None:
            cart.clear()
            cart_repo.add(cart)

        return str(order.id)


def place_order(user_id, items, shipping_address, payment_method=None, notes=None) -> Order:
    """Place an order for ``user_id`` and return it.

    ``items`` is a list of ``{"product_id", "quantity"}`` dicts. Prices come
    from the user's cart snapshots, or the live catalogue price for lines
    that are not in the cart.
    """
    lines = normalize_lines(items)
    validate_shipping_address(shipping_address)
    validate_payment_method(payment_method)

    with log_context(user_id=str(user_id)):
        with cart_locks.hold([user_id]), stock_locks.hold(line["product_id"] for line in lines):
            order_number = next_order_number()
            order_id = current_domain.process(
                PlaceOrder(
                    order_number=order_number,
                    user_id=user_id,
                    items=json.dumps(lines),
                    shipping_address=json.dumps(shipping_address),
                    payment_method=payment_method or PaymentMethod.COD.value,
                    notes=notes,
                ),
                asynchronous=False,
            )

        with log_context(order_number=order_number):
            order = current_domain.repository_for(Order).get(order_id)
            logger.info("order_placed", total=order.pricing.total, lines=len(lines))
    return order
