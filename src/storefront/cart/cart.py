"""Cart aggregate (CQRS): one mutable cart per user.

Lines hold a price snapshot taken from the catalogue whenever the line is
added or updated. Totals are never stored; :attr:`Cart.summary` recomputes
them from the lines on every read.
"""

import json
from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer

from storefront.cart.events import (
    CartCleared,
    CartItemAdded,
    CartItemRemoved,
    CartItemsPruned,
    CartQuantityUpdated,
)
from storefront.domain import storefront
from storefront.exceptions import NotFoundError

MAX_QUANTITY_PER_PRODUCT = 50

UNAVAILABLE_NOTICE = "Product is no longer available and has been removed from cart"


@storefront.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1, max_value=MAX_QUANTITY_PER_PRODUCT)
    price_snapshot = Float(required=True, min_value=0.0)
    added_at = DateTime()

    @property
    def line_total(self) -> float:
        return round(self.price_snapshot * self.quantity, 2)


def _check_quantity(quantity):
    if quantity is None or quantity < 1:
        raise ValidationError({"quantity": ["Quantity must be at least 1"]})
    if quantity > MAX_QUANTITY_PER_PRODUCT:
        raise ValidationError(
            {"quantity": [f"Cannot have more than {MAX_QUANTITY_PER_PRODUCT} of the same product in the cart"]}
        )


@storefront.aggregate
class Cart:
    user_id = Identifier(required=True, unique=True)
    items = HasMany(CartItem)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def product_lines_must_be_unique(self):
        product_ids = [str(item.product_id) for item in self.items]
        if len(product_ids) != len(set(product_ids)):
            raise ValidationError({"items": ["A product can appear only once in a cart"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, user_id):
        now = datetime.now(UTC)
        return cls(user_id=user_id, created_at=now, updated_at=now)

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def line_for(self, product_id) -> CartItem | None:
        return next((i for i in self.items if str(i.product_id) == str(product_id)), None)

    def price_snapshots(self) -> dict[str, float]:
        return {str(item.product_id): item.price_snapshot for item in self.items}

    @property
    def summary(self) -> dict:
        return {
            "total_items": sum(item.quantity for item in self.items),
            "unique_items": len(self.items),
            "total_amount": round(sum(item.price_snapshot * item.quantity for item in self.items), 2),
        }

    # -------------------------------------------------------------------
    # Line management
    # -------------------------------------------------------------------
    def add_item(self, product, quantity):
        """Add ``quantity`` units of ``product``, merging with an existing line.

        The requested total (existing + new) is checked against the
        per-product ceiling and the product's current stock.
        """
        if quantity is None or quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        product.ensure_available()

        existing = self.line_for(product.id)
        in_cart = existing.quantity if existing else 0
        requested_total = in_cart + quantity

        _check_quantity(requested_total)
        product.ensure_stock_for(requested_total, in_cart=in_cart)

        now = datetime.now(UTC)
        if existing:
            existing.quantity = requested_total
            existing.price_snapshot = product.price
        else:
            self.add_items(
                CartItem(
                    product_id=str(product.id),
                    quantity=quantity,
                    price_snapshot=product.price,
                    added_at=now,
                )
            )
        self.updated_at = now

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                user_id=str(self.user_id),
                product_id=str(product.id),
                quantity=quantity,
                line_quantity=requested_total,
                price_snapshot=product.price,
            )
        )

    def update_quantity(self, product_id, quantity, product=None):
        """Set a line's quantity.

        ``product`` is the current catalogue entry, or None if it no longer
        exists. A missing or inactive product drops the line instead of
        failing; the returned notice tells the caller why.
        """
        item = self.line_for(product_id)
        if item is None:
            raise NotFoundError({"product_id": ["Item not found in cart"]}, product_id=str(product_id))

        if product is None or not product.is_active:
            self._drop(item, reason=UNAVAILABLE_NOTICE)
            return UNAVAILABLE_NOTICE

        _check_quantity(quantity)
        product.ensure_stock_for(quantity, in_cart=item.quantity)

        previous_quantity = item.quantity
        item.quantity = quantity
        item.price_snapshot = product.price
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                user_id=str(self.user_id),
                product_id=str(product_id),
                previous_quantity=previous_quantity,
                new_quantity=quantity,
                price_snapshot=product.price,
            )
        )
        return None

    def remove_item(self, product_id):
        """Remove a line; removing an absent product is a no-op."""
        item = self.line_for(product_id)
        if item is not None:
            self._drop(item, reason="Removed by customer")

    def clear(self):
        """Empty the cart; clearing an empty cart is a no-op."""
        if not self.items:
            return

        count = len(self.items)
        for item in list(self.items):
            self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(CartCleared(cart_id=str(self.id), user_id=str(self.user_id), items_removed=count))

    def prune(self, products):
        """Drop lines whose product is missing, inactive or out of stock.

        ``products`` maps product id to the current catalogue entry. Returns
        the ids of the dropped lines.
        """
        stale = [item for item in self.items if not _still_sellable(products.get(str(item.product_id)))]
        if not stale:
            return []

        for item in stale:
            self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        removed = [str(item.product_id) for item in stale]
        self.raise_(
            CartItemsPruned(
                cart_id=str(self.id),
                user_id=str(self.user_id),
                product_ids=json.dumps(removed),
            )
        )
        return removed

    def _drop(self, item, reason):
        self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                user_id=str(self.user_id),
                product_id=str(item.product_id),
                reason=reason,
            )
        )


def _still_sellable(product) -> bool:
    return product is not None and product.in_stock
