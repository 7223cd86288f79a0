"""Template registry: maps notification kinds to template classes."""

from storefront.notification.templates.order_cancelled import OrderCancelledTemplate
from storefront.notification.templates.order_confirmed import OrderConfirmedTemplate
from storefront.notification.templates.order_placed import OrderPlacedTemplate

TEMPLATE_REGISTRY: dict[str, type] = {
    "order_placed": OrderPlacedTemplate,
    "order_confirmed": OrderConfirmedTemplate,
    "order_cancelled": OrderCancelledTemplate,
}


def render(kind: str, context: dict) -> dict:
    return TEMPLATE_REGISTRY[kind].render(context)
