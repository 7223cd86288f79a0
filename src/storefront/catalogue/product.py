"""Product aggregate, the Catalog Store's unit of consistency.

Stock is the only field mutated outside admin operations: the order engine
decrements it at placement and cancellation restores it.
"""

import json
import re
from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Integer, String, Text

from storefront.catalogue.events import (
    ProductActivated,
    ProductAdded,
    ProductDeactivated,
    ProductPriceChanged,
    StockDecremented,
    StockRestored,
)
from storefront.domain import storefront
from storefront.exceptions import InsufficientStock, ProductUnavailable

PLACEHOLDER_IMAGE = "/placeholder-product.jpg"
# Order lines copy the primary image, so the limit matches OrderItem.image
MAX_IMAGE_URL_LENGTH = 500

_SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


@storefront.aggregate
class Product:
    name = String(required=True, max_length=100)
    slug = String(required=True, max_length=200, unique=True)
    description = Text()
    category = String(max_length=100)
    price = Float(required=True, min_value=0.0)
    stock = Integer(default=0, min_value=0)
    images = Text()  # JSON array of image URLs
    is_active = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def slug_must_be_url_safe(self):
        if self.slug and not _SLUG_PATTERN.match(self.slug):
            raise ValidationError(
                {"slug": ["Slug can only contain lowercase letters, numbers, and single hyphens"]}
            )

    @invariant.post
    def image_urls_must_fit(self):
        if any(len(url) > MAX_IMAGE_URL_LENGTH for url in self.image_urls):
            raise ValidationError({"images": [f"Image URLs cannot be longer than {MAX_IMAGE_URL_LENGTH} characters"]})

    @invariant.post
    def stock_cannot_be_negative(self):
        if self.stock is not None and self.stock < 0:
            raise ValidationError({"stock": ["Stock cannot be negative"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, name, slug, price, stock=0, description=None, category=None, images=None, is_active=True):
        now = datetime.now(UTC)
        product = cls(
            name=name,
            slug=slug,
            price=round(float(price), 2),
            stock=stock,
            description=description,
            category=category,
            images=json.dumps(list(images or [])),
            is_active=is_active,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductAdded(
                product_id=str(product.id),
                name=product.name,
                slug=product.slug,
                price=product.price,
                stock=product.stock,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def image_urls(self) -> list[str]:
        return json.loads(self.images) if self.images else []

    @property
    def primary_image(self) -> str:
        urls = self.image_urls
        return urls[0] if urls else PLACEHOLDER_IMAGE

    @property
    def in_stock(self) -> bool:
        return bool(self.is_active) and self.stock > 0

    def ensure_available(self):
        if not self.is_active:
            raise ProductUnavailable(self.id, self.name)

    def ensure_stock_for(self, quantity, in_cart=None):
        if self.stock < quantity:
            raise InsufficientStock(self.id, self.name, quantity, self.stock, in_cart=in_cart)

    # -------------------------------------------------------------------
    # Stock
    # -------------------------------------------------------------------
    def decrement_stock(self, quantity, reference=None):
        """Take ``quantity`` units; callers must hold the product's stock lock."""
        self.ensure_stock_for(quantity)
        self.stock -= quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            StockDecremented(
                product_id=str(self.id),
                quantity=quantity,
                remaining=self.stock,
                reference=reference,
            )
        )

    def restock(self, quantity, reason=None):
        if quantity < 1:
            raise ValidationError({"quantity": ["Restock quantity must be at least 1"]})

        self.stock += quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            StockRestored(
                product_id=str(self.id),
                quantity=quantity,
                stock=self.stock,
                reason=reason,
            )
        )

    # -------------------------------------------------------------------
    # Admin operations
    # -------------------------------------------------------------------
    def change_price(self, new_price):
        new_price = round(float(new_price), 2)
        if new_price < 0:
            raise ValidationError({"price": ["Price cannot be negative"]})

        previous_price = self.price
        self.price = new_price
        self.updated_at = datetime.now(UTC)

        self.raise_(
            ProductPriceChanged(
                product_id=str(self.id),
                previous_price=previous_price,
                new_price=new_price,
            )
        )

    def activate(self):
        if self.is_active:
            raise ValidationError({"is_active": ["Product is already active"]})
        self.is_active = True
        self.updated_at = datetime.now(UTC)
        self.raise_(ProductActivated(product_id=str(self.id)))

    def deactivate(self):
        if not self.is_active:
            raise ValidationError({"is_active": ["Product is already inactive"]})
        self.is_active = False
        self.updated_at = datetime.now(UTC)
        self.raise_(ProductDeactivated(product_id=str(self.id)))
