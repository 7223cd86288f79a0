import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from storefront.api import admin_router, cart_router, order_router, product_router, register_error_handlers
from storefront.auth import get_resolver


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(product_router)
    app.include_router(cart_router)
    app.include_router(order_router)
    app.include_router(admin_router)
    register_error_handlers(app)
    return TestClient(app)


@pytest.fixture(autouse=True)
def tokens():
    resolver = get_resolver()
    resolver.register("tok-admin", "admin-001", "admin")
    resolver.register("tok-asha", "user-asha", "customer")
    resolver.register("tok-ravi", "user-ravi", "customer")
    return resolver
