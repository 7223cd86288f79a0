"""Storefront error taxonomy.

Field validation uses Protean's ``ValidationError`` and missing aggregates
surface as Protean's ``ObjectNotFoundError``; the classes here cover the
remaining outcomes the HTTP layer distinguishes. Every error carries a
``messages`` dict shaped like ``ValidationError.messages``.
"""


class StorefrontError(Exception):
    def __init__(self, messages: dict, **details):
        super().__init__(messages)
        self.messages = messages
        self.details = details


class NotFoundError(StorefrontError):
    """The referenced product, cart line or order does not exist."""


class ConflictError(StorefrontError):
    """The caller acted on stale state; refreshing and retrying may succeed."""


class InsufficientStock(ConflictError):
    def __init__(self, product_id, name: str, requested: int, available: int, in_cart: int | None = None):
        details = {"product_id": str(product_id), "requested": requested, "available_stock": available}
        if in_cart is not None:
            details["current_in_cart"] = in_cart
        super().__init__(
            {"stock": [f"Insufficient stock for {name}. Only {available} available"]},
            **details,
        )


class ProductUnavailable(ConflictError):
    def __init__(self, product_id, name: str | None = None):
        label = name or "Product"
        super().__init__(
            {"product": [f"{label} is no longer available"]},
            product_id=str(product_id),
        )


class InvalidStateError(StorefrontError):
    """The operation is not allowed from the current lifecycle state."""


class Unauthenticated(StorefrontError):
    def __init__(self, messages: dict | None = None):
        super().__init__(messages or {"auth": ["Authentication required"]})


class Forbidden(StorefrontError):
    def __init__(self, messages: dict | None = None):
        super().__init__(messages or {"auth": ["Admin access required"]})
