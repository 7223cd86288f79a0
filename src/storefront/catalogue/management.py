"""Catalogue administration: commands and handler.

Admin operations are the only writers of product details. Stock-changing
commands go through :func:`dispatch_product_command` so they serialize with
order placement on the product's stock lock.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.cart.cart import CartItem
from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.exceptions import InvalidStateError
from storefront.order.order import OrderItem
from storefront.utils.locks import stock_locks

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Product")
class AddProduct:
    name = String(required=True, max_length=100)
    slug = String(required=True, max_length=200)
    price = Float(required=True, min_value=0.0)
    stock = Integer(default=0, min_value=0)
    description = Text()
    category = String(max_length=100)
    images = Text()  # JSON array of image URLs
    is_active = Boolean(default=True)


@storefront.command(part_of="Product")
class ChangeProductPrice:
    product_id = Identifier(required=True)
    price = Float(required=True, min_value=0.0)


@storefront.command(part_of="Product")
class RestockProduct:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@storefront.command(part_of="Product")
class ActivateProduct:
    product_id = Identifier(required=True)


@storefront.command(part_of="Product")
class DeactivateProduct:
    product_id = Identifier(required=True)


@storefront.command(part_of="Product")
class RemoveProduct:
    product_id = Identifier(required=True)


def _is_referenced(product_id) -> bool:
    for entity_cls in (CartItem, OrderItem):
        dao = current_domain.repository_for(entity_cls)._dao
        if dao.query.filter(product_id=str(product_id)).all().items:
            return True
    return False


@storefront.command_handler(part_of=Product)
class ManageProductHandler:
    @handle(AddProduct)
    def add_product(self, command):
        repo = current_domain.repository_for(Product)
        if repo.find_by_slug(command.slug) is not None:
            raise ValidationError({"slug": ["A product with this slug already exists"]})

        product = Product.create(
            name=command.name,
            slug=command.slug,
            price=command.price,
            stock=command.stock,
            description=command.description,
            category=command.category,
            images=json.loads(command.images) if command.images else [],
            is_active=command.is_active,
        )
        repo.add(product)
        return str(product.id)

    @handle(ChangeProductPrice)
    def change_price(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.change_price(command.price)
        repo.add(product)

    @handle(RestockProduct)
    def restock(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.restock(command.quantity, reason="Admin restock")
        repo.add(product)

    @handle(ActivateProduct)
    def activate(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.activate()
        repo.add(product)

    @handle(DeactivateProduct)
    def deactivate(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.deactivate()
        repo.add(product)

    @handle(RemoveProduct)
    def remove(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)

        if _is_referenced(product.id):
            raise InvalidStateError(
                {"product": ["Product is referenced by a cart or an order; deactivate it instead"]},
                product_id=str(product.id),
            )

        repo.remove(product)
        logger.info("product_removed", product_id=str(product.id), slug=product.slug)


def dispatch_product_command(command):
    """Process an admin command under the product's stock lock."""
    product_id = getattr(command, "product_id", None)
    keys = [product_id] if product_id else []
    with stock_locks.hold(keys):
        return current_domain.process(command, asynchronous=False)
