"""FastAPI routes for the storefront: catalogue, cart and orders."""

import json
import math

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain

from storefront.api.dependencies import current_principal, require_admin
from storefront.api.schemas import (
    AddProductRequest,
    AddToCartRequest,
    CancelOrderRequest,
    CartResponse,
    ChangePriceRequest,
    OrderListResponse,
    PlaceOrderRequest,
    ProductIdResponse,
    ProductResponse,
    RestockRequest,
    StatusResponse,
    UpdateCartItemRequest,
    UpdateOrderRequest,
)
from storefront.auth import Principal
from storefront.cart.items import (
    AddToCart,
    ClearCart,
    ReconcileCart,
    RemoveFromCart,
    UpdateCartQuantity,
    dispatch_cart_command,
)
from storefront.catalogue.management import (
    ActivateProduct,
    AddProduct,
    ChangeProductPrice,
    DeactivateProduct,
    RemoveProduct,
    RestockProduct,
    dispatch_product_command,
)
from storefront.catalogue.product import Product
from storefront.exceptions import NotFoundError
from storefront.order.cancellation import cancel_order
from storefront.order.lifecycle import update_order_status
from storefront.order.order import Order
from storefront.order.placement import place_order
from storefront.order.removal import delete_order
from storefront.order.status import OrderStatus
from storefront.order.tracking import order_detail, tracking_view


def _product_response(product) -> ProductResponse:
    return ProductResponse(
        id=str(product.id),
        name=product.name,
        slug=product.slug,
        description=product.description,
        category=product.category,
        price=product.price,
        stock=product.stock,
        images=product.image_urls,
        is_active=product.is_active,
    )


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.post("", status_code=201, response_model=ProductIdResponse)
async def add_product(body: AddProductRequest, _: Principal = Depends(require_admin)) -> ProductIdResponse:
    command = AddProduct(
        name=body.name,
        slug=body.slug,
        price=body.price,
        stock=body.stock,
        description=body.description,
        category=body.category,
        images=json.dumps(body.images),
        is_active=body.is_active,
    )
    product_id = dispatch_product_command(command)
    return ProductIdResponse(product_id=product_id)


@product_router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str) -> ProductResponse:
    product = current_domain.repository_for(Product).find(product_id)
    if product is None or not product.is_active:
        raise NotFoundError({"product_id": ["Product not found"]}, product_id=product_id)
    return _product_response(product)


@product_router.put("/{product_id}/price", response_model=StatusResponse)
async def change_price(product_id: str, body: ChangePriceRequest, _: Principal = Depends(require_admin)) -> StatusResponse:
    dispatch_product_command(ChangeProductPrice(product_id=product_id, price=body.price))
    return StatusResponse()


@product_router.put("/{product_id}/stock", response_model=StatusResponse)
async def restock(product_id: str, body: RestockRequest, _: Principal = Depends(require_admin)) -> StatusResponse:
    dispatch_product_command(RestockProduct(product_id=product_id, quantity=body.quantity))
    return StatusResponse()


@product_router.put("/{product_id}/activate", response_model=StatusResponse)
async def activate_product(product_id: str, _: Principal = Depends(require_admin)) -> StatusResponse:
    dispatch_product_command(ActivateProduct(product_id=product_id))
    return StatusResponse()


@product_router.put("/{product_id}/deactivate", response_model=StatusResponse)
async def deactivate_product(product_id: str, _: Principal = Depends(require_admin)) -> StatusResponse:
    dispatch_product_command(DeactivateProduct(product_id=product_id))
    return StatusResponse()


@product_router.delete("/{product_id}", response_model=StatusResponse)
async def remove_product(product_id: str, _: Principal = Depends(require_admin)) -> StatusResponse:
    dispatch_product_command(RemoveProduct(product_id=product_id))
    return StatusResponse()


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=CartResponse)
async def get_cart(principal: Principal = Depends(current_principal)) -> CartResponse:
    view = dispatch_cart_command(ReconcileCart(user_id=principal.user_id))
    return CartResponse(**view)


@cart_router.post("", response_model=CartResponse)
async def add_to_cart(body: AddToCartRequest, principal: Principal = Depends(current_principal)) -> CartResponse:
    command = AddToCart(
        user_id=principal.user_id,
        product_id=body.product_id,
        quantity=body.quantity,
    )
    return CartResponse(**dispatch_cart_command(command))


@cart_router.put("", response_model=CartResponse)
async def update_cart_item(
    body: UpdateCartItemRequest, principal: Principal = Depends(current_principal)
) -> CartResponse:
    command = UpdateCartQuantity(
        user_id=principal.user_id,
        product_id=body.product_id,
        quantity=body.quantity,
    )
    return CartResponse(**dispatch_cart_command(command))


@cart_router.delete("", response_model=CartResponse)
async def remove_from_cart(
    product_id: str | None = None, principal: Principal = Depends(current_principal)
) -> CartResponse:
    if product_id:
        command = RemoveFromCart(user_id=principal.user_id, product_id=product_id)
    else:
        command = ClearCart(user_id=principal.user_id)
    return CartResponse(**dispatch_cart_command(command))


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


def _visible_order(order_number: str, principal: Principal) -> Order:
    order = current_domain.repository_for(Order).find_by_number(order_number)
    if not principal.is_admin and not order.is_owned_by(principal.user_id):
        raise NotFoundError({"order_number": ["Order not found"]}, order_number=order_number)
    return order


@order_router.post("", status_code=201)
async def create_order(body: PlaceOrderRequest, principal: Principal = Depends(current_principal)) -> dict:
    order = place_order(
        user_id=principal.user_id,
        items=[line.model_dump() for line in body.items],
        shipping_address=body.shipping_address.model_dump(),
        payment_method=body.payment_method,
        notes=body.notes,
    )
    return order_detail(order)


@order_router.get("", response_model=OrderListResponse)
async def list_orders(
    status: OrderStatus | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    principal: Principal = Depends(current_principal),
) -> OrderListResponse:
    orders, total = current_domain.repository_for(Order).search(
        user_id=None if principal.is_admin else principal.user_id,
        status=status.value if status else None,
        page=page,
        limit=limit,
    )
    return OrderListResponse(
        orders=[order_detail(order) for order in orders],
        page=page,
        limit=limit,
        total=total,
        pages=math.ceil(total / limit) if total else 0,
    )


@order_router.get("/track/{order_number}")
async def track_order(order_number: str) -> dict:
    order = current_domain.repository_for(Order).find_by_number(order_number)
    return tracking_view(order)


@order_router.get("/{order_number}")
async def get_order(order_number: str, principal: Principal = Depends(current_principal)) -> dict:
    return order_detail(_visible_order(order_number, principal))


@order_router.put("/{order_number}")
async def update_order(order_number: str, body: UpdateOrderRequest, principal: Principal = Depends(require_admin)) -> dict:
    changes = body.model_dump(exclude_none=True)
    order = update_order_status(order_number, actor=f"admin:{principal.user_id}", **changes)
    return order_detail(order)


@order_router.delete("/{order_number}")
async def cancel(
    order_number: str,
    body: CancelOrderRequest | None = None,
    principal: Principal = Depends(current_principal),
) -> dict:
    order = cancel_order(
        order_number,
        requested_by=principal.user_id,
        role=principal.role.value,
        reason=body.reason if body else None,
    )
    return order_detail(order)


# ---------------------------------------------------------------------------
# Admin Router
# ---------------------------------------------------------------------------
admin_router = APIRouter(prefix="/admin/orders", tags=["admin"])


@admin_router.delete("/{order_number}", response_model=StatusResponse)
async def purge_order(order_number: str, _: Principal = Depends(require_admin)) -> StatusResponse:
    delete_order(order_number)
    return StatusResponse(status="deleted")
