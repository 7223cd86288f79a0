"""Pydantic request/response schemas for the storefront API.

These are external contracts, kept separate from the Protean commands.
Field presence and formats that carry business meaning (address
completeness, quantity bounds) are validated by the domain so that every
entry point reports them the same way.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class ShippingAddressSchema(BaseModel):
    full_name: str = ""
    email: str = ""
    address_line1: str = ""
    address_line2: str | None = None
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = "India"
    phone_number: str = ""


class OrderLineSchema(BaseModel):
    product_id: str
    quantity: int


class StatusResponse(BaseModel):
    status: str = "ok"


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------
class AddProductRequest(BaseModel):
    name: str
    slug: str
    price: float = Field(ge=0)
    stock: int = Field(ge=0, default=0)
    description: str | None = None
    category: str | None = None
    images: list[str] = []
    is_active: bool = True

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Mango Pickle 500g",
                    "slug": "mango-pickle-500g",
                    "price": 240.0,
                    "stock": 25,
                    "category": "pickles",
                    "images": ["/images/mango-pickle.jpg"],
                }
            ]
        }
    }


class ChangePriceRequest(BaseModel):
    price: float = Field(ge=0)


class RestockRequest(BaseModel):
    quantity: int = Field(ge=1)


class ProductIdResponse(BaseModel):
    product_id: str


class ProductResponse(BaseModel):
    id: str
    name: str
    slug: str
    description: str | None = None
    category: str | None = None
    price: float
    stock: int
    images: list[str]
    is_active: bool


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = 1


class UpdateCartItemRequest(BaseModel):
    product_id: str
    quantity: int


class CartItemResponse(BaseModel):
    product_id: str
    name: str | None = None
    slug: str | None = None
    image: str | None = None
    current_price: float | None = None
    stock: int = 0
    quantity: int
    price_snapshot: float
    line_total: float


class CartResponse(BaseModel):
    items: list[CartItemResponse]
    total_items: int
    unique_items: int
    total_amount: float
    notice: str | None = None


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class PlaceOrderRequest(BaseModel):
    items: list[OrderLineSchema]
    shipping_address: ShippingAddressSchema
    payment_method: str = "cod"
    notes: str | None = Field(default=None, max_length=500)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "items": [{"product_id": "prod-001", "quantity": 2}],
                    "shipping_address": {
                        "full_name": "Asha Rao",
                        "email": "asha@example.com",
                        "address_line1": "12 MG Road",
                        "city": "Bengaluru",
                        "state": "Karnataka",
                        "postal_code": "560001",
                        "country": "India",
                        "phone_number": "+91 98450 12345",
                    },
                    "payment_method": "cod",
                }
            ]
        }
    }


class DeliveryAttemptSchema(BaseModel):
    status: str
    notes: str | None = Field(default=None, max_length=500)
    location: str | None = Field(default=None, max_length=200)


class UpdateOrderRequest(BaseModel):
    status: str | None = None
    note: str | None = Field(default=None, max_length=500)
    tracking_number: str | None = None
    carrier: str | None = None
    tracking_url: str | None = Field(default=None, max_length=500)
    current_location: str | None = Field(default=None, max_length=200)
    estimated_delivery: datetime | None = None
    payment_status: str | None = None
    admin_notes: str | None = Field(default=None, max_length=1000)
    customer_notes: str | None = Field(default=None, max_length=1000)
    delivery_attempt: DeliveryAttemptSchema | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "status": "out_for_delivery",
                    "current_location": "Bengaluru hub",
                    "tracking_url": "https://track.example.com/TRK-1",
                    "delivery_attempt": {"status": "failed", "notes": "Customer unavailable"},
                }
            ]
        }
    }


class CancelOrderRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=500)


class OrderListResponse(BaseModel):
    orders: list[dict]
    page: int
    limit: int
    total: int
    pages: int
