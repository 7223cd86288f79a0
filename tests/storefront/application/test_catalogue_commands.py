import json

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError
from storefront.cart.items import AddToCart, dispatch_cart_command
from storefront.catalogue.management import (
    AddProduct,
    ChangeProductPrice,
    DeactivateProduct,
    RemoveProduct,
    RestockProduct,
    dispatch_product_command,
)
from storefront.catalogue.product import Product
from storefront.exceptions import InvalidStateError


def _add_product(**overrides):
    defaults = {"name": "Coconut Oil 1L", "slug": "coconut-oil-1l", "price": 320.0, "stock": 12}
    defaults.update(overrides)
    return dispatch_product_command(AddProduct(**defaults))


class TestAddProduct:
    def test_add_product_persists(self):
        product_id = _add_product(images=json.dumps(["/img/oil.jpg"]))

        product = current_domain.repository_for(Product).get(product_id)
        assert product.name == "Coconut Oil 1L"
        assert product.stock == 12
        assert product.primary_image == "/img/oil.jpg"

    def test_duplicate_slug_rejected(self):
        _add_product()
        with pytest.raises(ValidationError) as exc:
            _add_product(name="Other")
        assert "slug" in exc.value.messages

    def test_find_by_slug(self):
        product_id = _add_product()
        found = current_domain.repository_for(Product).find_by_slug("coconut-oil-1l")
        assert str(found.id) == product_id


class TestProductAdministration:
    def test_change_price(self):
        product_id = _add_product()
        dispatch_product_command(ChangeProductPrice(product_id=product_id, price=299.0))
        assert current_domain.repository_for(Product).get(product_id).price == 299.0

    def test_restock(self):
        product_id = _add_product(stock=0)
        dispatch_product_command(RestockProduct(product_id=product_id, quantity=7))
        assert current_domain.repository_for(Product).get(product_id).stock == 7

    def test_deactivate(self):
        product_id = _add_product()
        dispatch_product_command(DeactivateProduct(product_id=product_id))
        assert current_domain.repository_for(Product).get(product_id).is_active is False


class TestRemoveProduct:
    def test_unreferenced_product_is_removed(self):
        product_id = _add_product()
        dispatch_product_command(RemoveProduct(product_id=product_id))

        with pytest.raises(ObjectNotFoundError):
            current_domain.repository_for(Product).get(product_id)

    def test_product_in_a_cart_cannot_be_removed(self):
        product_id = _add_product()
        dispatch_cart_command(AddToCart(user_id="user-001", product_id=product_id, quantity=1))

        with pytest.raises(InvalidStateError):
            dispatch_product_command(RemoveProduct(product_id=product_id))

        assert current_domain.repository_for(Product).get(product_id) is not None
