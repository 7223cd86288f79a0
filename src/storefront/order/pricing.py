"""Order pricing rules.

Amounts are in rupees and rounded to two decimal places. Tax is a
placeholder rate of zero.
"""

CURRENCY = "INR"
FREE_SHIPPING_THRESHOLD = 500.0
FLAT_SHIPPING_FEE = 50.0
TAX_RATE = 0.0


def shipping_cost_for(subtotal: float) -> float:
    return 0.0 if subtotal >= FREE_SHIPPING_THRESHOLD else FLAT_SHIPPING_FEE


def tax_for(subtotal: float) -> float:
    return round(subtotal * TAX_RATE, 2)


def price_lines(lines: list[dict]) -> dict:
    """Price frozen order lines (``price`` and ``quantity`` keys)."""
    subtotal = round(sum(line["price"] * line["quantity"] for line in lines), 2)
    shipping_cost = shipping_cost_for(subtotal)
    tax = tax_for(subtotal)
    return {
        "subtotal": subtotal,
        "shipping_cost": shipping_cost,
        "tax": tax,
        "total": round(subtotal + shipping_cost + tax, 2),
        "currency": CURRENCY,
    }
