"""Shared fixtures for storefront tests."""

import pytest
from protean import current_domain
from storefront.catalogue.product import Product
from storefront.notification.channels import get_email_adapter, get_invoice_adapter


@pytest.fixture()
def make_product():
    """Persist a product and return it; keyword arguments override defaults."""
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        n = counter["n"]
        defaults = {
            "name": f"Product {n}",
            "slug": f"product-{n}",
            "price": 100.0,
            "stock": 10,
            "images": [f"/images/product-{n}.jpg"],
        }
        defaults.update(overrides)
        product = Product.create(**defaults)
        current_domain.repository_for(Product).add(product)
        return product

    return _make


@pytest.fixture()
def address():
    return {
        "full_name": "Asha Rao",
        "email": "asha@example.com",
        "address_line1": "12 MG Road",
        "city": "Bengaluru",
        "state": "Karnataka",
        "postal_code": "560001",
        "country": "India",
        "phone_number": "+91 98450 12345",
    }


@pytest.fixture()
def email_adapter():
    return get_email_adapter()


@pytest.fixture()
def invoice_adapter():
    return get_invoice_adapter()

