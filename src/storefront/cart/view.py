"""Cart read model returned by every cart operation."""


def cart_view(cart, products, notice=None) -> dict:
    """Render ``cart`` with product details from ``products`` (id -> Product).

    A missing cart renders as an empty one.
    """
    items = []
    for item in cart.items if cart else []:
        product = products.get(str(item.product_id))
        items.append(
            {
                "product_id": str(item.product_id),
                "name": product.name if product else None,
                "slug": product.slug if product else None,
                "image": product.primary_image if product else None,
                "current_price": product.price if product else None,
                "stock": product.stock if product else 0,
                "quantity": item.quantity,
                "price_snapshot": item.price_snapshot,
                "line_total": item.line_total,
            }
        )

    summary = cart.summary if cart else {"total_items": 0, "unique_items": 0, "total_amount": 0.0}
    view = {"items": items, **summary}
    if notice:
        view["notice"] = notice
    return view
