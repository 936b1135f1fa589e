"""Tests for the HTTP API"""

import inspect

import pytest
from fastapi.routing import APIRoute
from fastapi.testclient import TestClient

from cart_simulator.main import create_app


@pytest.fixture
def client(stocked_context):
    return TestClient(create_app(stocked_context))


@pytest.fixture
def cart_id(client):
    response = client.post("/api/cart", json={"user_id": "u-1"})
    assert response.status_code == 201
    return response.json()["cart"]["id"]


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_handlers_that_write_run_in_threadpool(client):
    writers = [
        route for route in client.app.routes
        if isinstance(route, APIRoute) and route.methods - {"GET", "HEAD"}
    ]

    assert writers
    assert not any(inspect.iscoroutinefunction(route.endpoint) for route in writers)


def test_write_lock_is_released_after_errors(client, stocked_context, cart_id):
    assert client.post(f"/api/cart/{cart_id}/items", json={"product_id": "missing"}).status_code == 404
    assert not stocked_context.write_lock.locked()

    assert client.post(f"/api/cart/{cart_id}/items", json={"product_id": "p-050"}).status_code == 200
    assert not stocked_context.write_lock.locked()


# ==================== Products ====================

def test_search_products(client):
    response = client.get("/api/products", params={"query": "chair"})

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert data["products"][0]["final_price"] == pytest.approx(90.0)


def test_get_product(client):
    assert client.get("/api/products/p-100").json()["name"] == "Desk Chair"
    assert client.get("/api/products/missing").status_code == 404


def test_product_lists(client):
    assert client.get("/api/products/categories").json() == ["Accessories", "Home"]
    assert [p["id"] for p in client.get("/api/products/discounted").json()] == ["p-100"]
    assert client.get("/api/products/top-rated").json() == []


def test_create_and_update_product(client):
    response = client.post("/api/products", json={"name": "Kettle", "price": 40, "category": "Home", "stock": 3})
    assert response.status_code == 201
    product_id = response.json()["id"]

    response = client.put(f"/api/products/{product_id}", json={"price": 35})
    assert response.status_code == 200
    assert response.json()["price"] == 35

    assert client.post("/api/products", json={"name": "Bad", "price": 0, "category": "Home"}).status_code == 422
    assert client.delete(f"/api/products/{product_id}").status_code == 200
    assert client.delete(f"/api/products/{product_id}").status_code == 404


def test_invalid_product_update_is_rejected(client):
    response = client.put("/api/products/p-100", json={"discount": 120})

    assert response.status_code == 400
    assert response.json()["detail"]["reason"] == "validation_failed"


# ==================== Cart ====================

def test_cart_flow(client, cart_id):
    response = client.post(f"/api/cart/{cart_id}/items", json={"product_id": "p-100", "quantity": 2})
    assert response.status_code == 200
    assert response.json()["message"] == "Added 2x Desk Chair to cart"

    response = client.post(f"/api/cart/{cart_id}/items", json={"product_id": "p-100", "quantity": 1})
    data = response.json()
    assert len(data["cart"]["items"]) == 1
    assert data["total_items"] == 3

    response = client.put(f"/api/cart/{cart_id}/items/p-100", json={"quantity": 1})
    assert response.json()["summary"]["subtotal"] == pytest.approx(90.0)

    response = client.delete(f"/api/cart/{cart_id}/items/p-100")
    assert response.json()["cart"]["items"] == []


def test_cart_errors(client, cart_id):
    assert client.get("/api/cart/missing").status_code == 404
    assert client.post("/api/cart/missing/items", json={"product_id": "p-100"}).status_code == 404
    assert client.post(f"/api/cart/{cart_id}/items", json={"product_id": "missing"}).status_code == 404

    response = client.post(f"/api/cart/{cart_id}/items", json={"product_id": "p-050", "quantity": 6})
    assert response.status_code == 400
    assert "Insufficient stock" in response.json()["detail"]

    assert client.post(f"/api/cart/{cart_id}/items", json={"product_id": "p-050", "quantity": 0}).status_code == 422


def test_coupons_on_cart(client, cart_id):
    client.post(f"/api/cart/{cart_id}/items", json={"product_id": "p-100", "quantity": 2})

    response = client.post(f"/api/cart/{cart_id}/coupons", json={"code": "ten"})
    assert response.status_code == 200
    assert response.json()["summary"]["coupon_discounts"] == pytest.approx(18.0)

    assert client.post(f"/api/cart/{cart_id}/coupons", json={"code": "TEN"}).status_code == 400
    assert client.post(f"/api/cart/{cart_id}/coupons", json={"code": "NOPE"}).status_code == 404

    response = client.delete(f"/api/cart/{cart_id}/coupons/TEN")
    assert response.json()["summary"]["coupon_discounts"] == 0


def test_cart_statistics_and_user_lookup(client, cart_id):
    client.post(f"/api/cart/{cart_id}/items", json={"product_id": "p-050", "quantity": 2})

    stats = client.get(f"/api/cart/{cart_id}/statistics").json()
    assert stats["total_items"] == 2
    assert stats["categories_breakdown"] == {"Accessories": 2}

    assert client.get("/api/cart/user/u-1").json()["cart"]["id"] == cart_id
    assert client.get("/api/cart/user/nobody").status_code == 404


def test_clear_cart(client, cart_id):
    client.post(f"/api/cart/{cart_id}/items", json={"product_id": "p-050", "quantity": 2})

    response = client.delete(f"/api/cart/{cart_id}")

    assert response.status_code == 200
    assert response.json()["total_items"] == 0


# ==================== Coupons ====================

def test_coupon_routes(client):
    assert {c["code"] for c in client.get("/api/coupons").json()} == {"TEN", "TWENTY"}
    assert client.get("/api/coupons/ten").json()["code"] == "TEN"
    assert client.get("/api/coupons/NOPE").status_code == 404

    response = client.get("/api/coupons/TEN/validate", params={"amount": 100})
    assert response.json() == {
        "code": "TEN",
        "is_valid": True,
        "error": None,
        "discount": 10.0,
        "final_amount": 90.0,
    }

    response = client.get("/api/coupons/TEN/validate", params={"amount": 10})
    assert response.json()["is_valid"] is False
    assert client.get("/api/coupons/NOPE/validate", params={"amount": 10}).status_code == 404


def test_create_and_manage_coupon(client):
    response = client.post("/api/coupons", json={"code": "new5", "type": "fixed", "value": 5})
    assert response.status_code == 201
    assert response.json()["code"] == "NEW5"

    assert client.post("/api/coupons", json={"code": "NEW5", "type": "fixed", "value": 5}).status_code == 400
    assert client.post("/api/coupons/NEW5/deactivate").json()["is_active"] is False
    assert client.post("/api/coupons/NEW5/activate").json()["is_active"] is True
    assert client.put("/api/coupons/NEW5", json={"value": 7}).json()["value"] == 7
    assert client.delete("/api/coupons/NEW5").status_code == 200
    assert client.get("/api/coupons/statistics").json()["total"] == 2


def test_update_can_clear_coupon_limits(client):
    client.post("/api/coupons", json={
        "code": "LIMITED",
        "type": "fixed",
        "value": 5,
        "usage_limit": 3,
        "expiry_date": "2099-01-01T00:00:00",
    })

    response = client.put("/api/coupons/LIMITED", json={"usage_limit": None, "expiry_date": None, "value": None})

    assert response.status_code == 200
    data = response.json()
    assert data["usage_limit"] is None
    assert data["expiry_date"] is None
    assert data["value"] == 5


# ==================== Shipping ====================

def test_shipping_routes(client):
    assert client.get("/api/shipping/validate/01310100").json() == {"postal_code": "01310-100", "valid": True}

    quote = client.get("/api/shipping/quote", params={"postal_code": "01310-100"}).json()
    assert quote["region"] == "São Paulo"

    options = client.get("/api/shipping/options", params={"postal_code": "01310-100"}).json()
    assert [o["type"] for o in options] == ["economic", "standard", "express"]

    assert client.get("/api/shipping/quote", params={"postal_code": "123"}).status_code == 400
    assert client.get("/api/shipping/availability/69050000").json()["available"] is False
    assert client.get("/api/shipping/free-shipping", params={"value": 150}).json()["qualified"] is True


def test_cart_shipping_selection(client, cart_id):
    client.post(f"/api/cart/{cart_id}/items", json={"product_id": "p-050", "quantity": 1})

    options = client.get(f"/api/shipping/cart/{cart_id}", params={"postal_code": "22041001"}).json()
    assert options["weight"] == pytest.approx(0.2)
    assert options["free_shipping"]["remaining"] == pytest.approx(100.0)

    address = {
        "name": "Ana",
        "street": "Rua A, 1",
        "city": "Rio de Janeiro",
        "state": "RJ",
        "postal_code": "22041001",
    }
    response = client.post(f"/api/shipping/cart/{cart_id}", json={"address": address, "type": "express"})

    assert response.status_code == 200
    data = response.json()
    assert data["cart"]["shipping_address"]["postal_code"] == "22041-001"
    assert data["summary"]["shipping_cost"] == pytest.approx(34.80)

    restricted = dict(address, postal_code="69050000")
    assert client.post(f"/api/shipping/cart/{cart_id}", json={"address": restricted}).status_code == 400


# ==================== Checkout ====================

def test_checkout_routes(client, cart_id):
    client.post(f"/api/cart/{cart_id}/items", json={"product_id": "p-100", "quantity": 3})

    response = client.post("/api/checkout", json={"cart_id": cart_id})

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    order_id = data["order"]["order_id"]
    assert data["order"]["status"] == "confirmed"

    assert client.get("/api/products/p-100").json()["stock"] == 7
    assert client.get(f"/api/checkout/orders/{order_id}").json()["order_id"] == order_id
    assert len(client.get("/api/checkout/orders").json()) == 1
    assert client.get("/api/checkout/orders/missing").status_code == 404


def test_checkout_failures(client, cart_id):
    response = client.post("/api/checkout", json={"cart_id": cart_id})
    assert response.json() == {"success": False, "order": None, "error_message": "Cart is not ready for checkout",
                               "errors": ["Cart is empty"]}

    assert client.post("/api/checkout", json={"cart_id": "missing"}).status_code == 404
