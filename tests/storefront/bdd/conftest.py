"""Shared BDD fixtures and step definitions for ordering scenarios."""

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then
from storefront.cart.cart import Cart
from storefront.cart.items import AddToCart, dispatch_cart_command
from storefront.catalogue.management import ChangeProductPrice, dispatch_product_command
from storefront.catalogue.product import Product
from storefront.exceptions import InsufficientStock, InvalidStateError
from storefront.order.lifecycle import update_order_status
from storefront.order.order import Order
from storefront.order.placement import place_order

CUSTOMER = "user-001"


@pytest.fixture()
def catalogue():
    """Products created by the scenario, keyed by name."""
    return {}


@pytest.fixture()
def outcome():
    return {"order": None, "error": None}


@pytest.fixture()
def customer_id():
    return CUSTOMER


def current_order(outcome):
    return current_domain.repository_for(Order).find_by_number(outcome["order"].order_number)


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a product "{name}" priced at {price:g} with {stock:d} in stock'))
def product_in_catalogue(catalogue, make_product, name, price, stock):
    catalogue[name] = make_product(name=name, price=float(price), stock=stock)


@given(parsers.cfparse('the customer has {quantity:d} "{name}" in the cart'))
def product_in_cart(catalogue, name, quantity):
    dispatch_cart_command(AddToCart(user_id=CUSTOMER, product_id=str(catalogue[name].id), quantity=quantity))


@given(parsers.cfparse('the price of "{name}" changes to {price:g}'))
def price_change(catalogue, name, price):
    dispatch_product_command(ChangeProductPrice(product_id=str(catalogue[name].id), price=float(price)))


@given(parsers.cfparse('the customer has placed an order for {quantity:d} "{name}"'))
def placed_order(catalogue, address, outcome, name, quantity):
    outcome["order"] = place_order(CUSTOMER, [{"product_id": str(catalogue[name].id), "quantity": quantity}], address)


@given(parsers.cfparse('the admin has moved the order to "{status}"'))
def moved_order(outcome, status):
    update_order_status(outcome["order"].order_number, status=status)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def order_status(outcome, status):
    assert current_order(outcome).status == status


@then(parsers.cfparse("the order {field} amounts to {amount:g}"))
def order_amount(outcome, field, amount):
    assert getattr(current_order(outcome).pricing, field.replace(" ", "_")) == pytest.approx(amount)


@then(parsers.cfparse('the payment status is "{status}"'))
def payment_status(outcome, status):
    assert current_order(outcome).payment_status == status


@then(parsers.cfparse('the status history reads "{statuses}"'))
def status_history(outcome, statuses):
    assert [entry.status for entry in current_order(outcome).history] == statuses.split(", ")


@then(parsers.cfparse('"{name}" has {stock:d} in stock'))
def stock_level(catalogue, name, stock):
    assert current_domain.repository_for(Product).get(catalogue[name].id).stock == stock


@then("the customer's cart is empty")
def cart_is_empty():
    cart = current_domain.repository_for(Cart).for_user(CUSTOMER)
    assert cart is None or len(cart.items) == 0


@then(parsers.cfparse('the order is rejected because "{name}" is out of stock'))
def rejected_for_stock(catalogue, outcome, name):
    assert isinstance(outcome["error"], InsufficientStock)
    assert outcome["error"].details["product_id"] == str(catalogue[name].id)


@then("the order is rejected as invalid")
def rejected_as_invalid(outcome):
    assert isinstance(outcome["error"], ValidationError)


@then("the change is rejected as an invalid transition")
def rejected_transition(outcome):
    assert isinstance(outcome["error"], InvalidStateError)


@then("no order is recorded")
def no_order():
    assert current_domain.repository_for(Order).search()[1] == 0
