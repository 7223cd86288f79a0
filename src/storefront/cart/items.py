"""Cart operations: commands and handler.

Every command recomputes from the persisted cart inside the handler and
returns the refreshed cart view. :func:`dispatch_cart_command` serializes
commands per user.
"""

import structlog
from protean import handle
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.cart.view import cart_view
from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.exceptions import NotFoundError
from storefront.utils.locks import cart_locks

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Cart")
class AddToCart:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(default=1)


@storefront.command(part_of="Cart")
class UpdateCartQuantity:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)


@storefront.command(part_of="Cart")
class RemoveFromCart:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)


@storefront.command(part_of="Cart")
class ClearCart:
    user_id = Identifier(required=True)


@storefront.command(part_of="Cart")
class ReconcileCart:
    """Read the cart, dropping lines whose product can no longer be sold."""

    user_id = Identifier(required=True)


@storefront.command_handler(part_of=Cart)
class ManageCartHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        product_repo = current_domain.repository_for(Product)
        product = product_repo.find(command.product_id)
        if product is None:
            raise NotFoundError({"product_id": ["Product not found"]}, product_id=str(command.product_id))

        repo = current_domain.repository_for(Cart)
        cart = repo.for_user(command.user_id) or Cart.create(user_id=command.user_id)
        cart.add_item(product, command.quantity)
        repo.add(cart)

        return cart_view(cart, product_repo.find_many(i.product_id for i in cart.items))

    @handle(UpdateCartQuantity)
    def update_cart_quantity(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.for_user(command.user_id)
        if cart is None:
            raise NotFoundError({"cart": ["Cart not found"]})

        product_repo = current_domain.repository_for(Product)
        notice = cart.update_quantity(
            command.product_id,
            command.quantity,
            product=product_repo.find(command.product_id),
        )
        repo.add(cart)

        if notice:
            logger.info("cart_item_dropped", user_id=str(command.user_id), product_id=str(command.product_id))
        return cart_view(cart, product_repo.find_many(i.product_id for i in cart.items), notice=notice)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.for_user(command.user_id)
        if cart is not None:
            cart.remove_item(command.product_id)
            repo.add(cart)

        product_repo = current_domain.repository_for(Product)
        return cart_view(cart, product_repo.find_many(i.product_id for i in cart.items) if cart else {})

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.for_user(command.user_id)
        if cart is not None:
            cart.clear()
            repo.add(cart)

        return cart_view(cart, {})

    @handle(ReconcileCart)
    def reconcile_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.for_user(command.user_id)
        if cart is None:
            return cart_view(None, {})

        products = current_domain.repository_for(Product).find_many(i.product_id for i in cart.items)
        removed = cart.prune(products)
        if removed:
            repo.add(cart)
            logger.info("cart_pruned", user_id=str(command.user_id), product_ids=removed)

        return cart_view(cart, products)


def dispatch_cart_command(command):
    """Process a cart command while holding the user's cart lock."""
    with cart_locks.hold([command.user_id]):
        return current_domain.process(command, asynchronous=False)
