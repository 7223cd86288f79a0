"""Domain events for the Order aggregate.

Events carry enough of the order to be handled without reloading it:
the notification dispatcher renders emails straight from these payloads.
"""

from protean.fields import DateTime, Float, Identifier, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """A cart was converted into a priced, stock-decremented order."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True, max_length=50)
    user_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of frozen line dicts
    shipping_address = Text(required=True)  # JSON: address dict
    subtotal = Float(required=True)
    shipping_cost = Float(required=True)
    tax = Float(required=True)
    total = Float(required=True)
    currency = String(max_length=3, default="INR")
    payment_method = String(required=True, max_length=20)
    placed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderStatusChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True, max_length=50)
    user_id = Identifier(required=True)
    previous_status = String(required=True, max_length=30)
    new_status = String(required=True, max_length=30)
    note = String(max_length=500)
    actor = String(max_length=50)
    email = String(max_length=254)
    full_name = String(max_length=100)
    total = Float()
    changed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderCancelled:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True, max_length=50)
    user_id = Identifier(required=True)
    previous_status = String(required=True, max_length=30)
    cancelled_by = String(required=True, max_length=50)
    reason = String(max_length=500)
    items = Text(required=True)  # JSON: [{product_id, quantity}]
    email = String(max_length=254)
    full_name = String(max_length=100)
    cancelled_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderTrackingUpdated:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True, max_length=50)
    tracking_number = String(max_length=100)
    carrier = String(max_length=100)
    estimated_delivery = DateTime()
    payment_status = String(max_length=20)
    tracking_url = String(max_length=500)
    current_location = String(max_length=200)


@storefront.event(part_of="Order")
class DeliveryAttemptRecorded:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True, max_length=50)
    status = String(required=True, max_length=20)
    notes = String(max_length=500)
    location = String(max_length=200)
    attempted_at = DateTime(required=True)
