"""HTTP layer: routing, error mapping and a full order flow."""

import threading
import time

import pytest
from fastapi.testclient import TestClient
from filelock import FileLock

from munchly.core.config import get_settings
from munchly.main import app

ADDRESS = {
    "street": "1 Market St",
    "city": "San Francisco",
    "state": "CA",
    "zip_code": "94105",
    "latitude": 37.7936,
    "longitude": -122.3950,
}


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setenv("MOCK_MIN_LATENCY", "0")
    monkeypatch.setenv("MOCK_MAX_LATENCY", "0")
    monkeypatch.setenv("DATA_DIRECTORY", str(tmp_path / "data"))
    # Timers stay idle; tests advance orders explicitly
    monkeypatch.setenv("TRACKING_TICK_SECONDS", "3600")
    monkeypatch.setenv("STATUS_ADVANCE_SECONDS", "3600")
    monkeypatch.setenv("PREFERENCES_LOCK_TIMEOUT", "2")
    get_settings.cache_clear()

    with TestClient(app) as test_client:
        yield test_client

    get_settings.cache_clear()


def add_pizza(client, quantity=1, option_ids=()):
    return client.post(
        "/api/cart/items",
        json={"menu_item_id": "item_1_1", "quantity": quantity, "option_ids": list(option_ids)},
    )


def checkout(client, **extra):
    return client.post("/api/orders", json={"delivery_address": ADDRESS, **extra})


def test_root_and_health(client):
    assert client.get("/").json()["health"] == "/health"

    health = client.get("/health").json()
    assert health["status"] == "operational"
    assert health["payment_service"] == "healthy (mock)"
    assert health["tracked_orders"] == 0


def test_browse_catalog(client):
    restaurants = client.get("/api/restaurants").json()
    assert {r["id"] for r in restaurants} == {"rest_1", "rest_2", "rest_3", "rest_5"}

    menu = client.get("/api/restaurants/rest_1/menu").json()
    assert all(item["restaurant_id"] == "rest_1" for item in menu)

    assert client.get("/api/restaurants/rest_404").status_code == 404


def test_search_is_remembered(client):
    results = client.get("/api/restaurants", params={"q": "Sushi"}).json()
    assert [r["name"] for r in results] == ["Sakura Sushi"]

    client.get("/api/restaurants", params={"q": "tacos"})
    assert client.get("/api/searches").json() == {"recent_searches": ["tacos", "Sushi"]}

    assert client.delete("/api/searches/tacos").json() == {"recent_searches": ["Sushi"]}
    assert client.delete("/api/searches").json() == {"recent_searches": []}


def test_cart_totals(client):
    response = add_pizza(client, quantity=2, option_ids=["pizza_size_large"])

    assert response.status_code == 200
    cart = response.json()
    assert cart["subtotal"] == 45.98
    assert cart["item_count"] == 2
    assert cart["total"] == round(45.98 + 2.99 + 45.98 * 0.05 + 45.98 * 0.0875, 2)


def test_different_restaurant_conflict(client):
    add_pizza(client)

    response = client.post("/api/cart/items", json={"menu_item_id": "item_2_1"})
    assert response.status_code == 409
    body = response.json()
    assert body["success"] is False
    assert body["code"] == "different_restaurant"
    assert "Tony's Pizzeria" in body["error"]

    replaced = client.post("/api/cart/replace", json={"menu_item_id": "item_2_1"}).json()
    assert [line["menu_item_id"] for line in replaced["lines"]] == ["item_2_1"]


def test_invalid_customization(client):
    response = add_pizza(client, option_ids=["burger_extra_bacon"])

    assert response.status_code == 422
    assert response.json()["code"] == "invalid_customization"


def test_cart_line_updates(client):
    line_id = add_pizza(client).json()["lines"][0]["id"]

    cart = client.patch(f"/api/cart/items/{line_id}", json={"quantity": 3}).json()
    assert cart["item_count"] == 3

    cart = client.delete(f"/api/cart/items/{line_id}").json()
    assert cart["lines"] == []

    response = client.delete(f"/api/cart/items/{line_id}")
    assert response.status_code == 404
    assert response.json()["code"] == "item_not_found"


def test_promo_errors_and_success(client):
    add_pizza(client)

    response = client.post("/api/cart/promo", json={"code": "SAVE10"})
    assert response.status_code == 400
    assert response.json()["code"] == "minimum_order_not_met"
    assert response.json()["error"] == "Minimum order of $30.00 required for this promo code"

    assert client.post("/api/cart/promo", json={"code": "BOGUS"}).json()["code"] == "invalid_promo_code"

    cart = client.post("/api/cart/promo", json={"code": "freedelivery"}).json()
    assert cart["promo_code"] == "FREEDELIVERY"
    assert cart["delivery_fee"] == 0.0

    cart = client.delete("/api/cart/promo").json()
    assert cart["promo_code"] is None


def test_empty_cart_checkout(client):
    response = checkout(client)

    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "error": "Your cart is empty",
        "code": "empty_cart",
        "detail": None,
    }


def test_full_order_flow(client):
    add_pizza(client, quantity=2)
    response = checkout(client, tip_amount=4.0, payment_method_id="pm_card_visa")
    assert response.status_code == 201
    order = response.json()
    assert order["status"] == "confirmed"
    assert client.get("/api/cart").json()["lines"] == []

    tracking = client.get(f"/api/orders/{order['id']}/tracking").json()
    assert tracking["is_tracking"] is True
    assert tracking["restaurant_position"] == {"latitude": 37.7749, "longitude": -122.4194}
    assert client.get("/health").json()["tracked_orders"] == 1

    status = order["status"]
    while status != "delivered":
        status = client.post(f"/api/orders/{order['id']}/advance").json()["status"]

    tracking = client.get(f"/api/orders/{order['id']}/tracking").json()
    assert tracking["is_tracking"] is False
    assert tracking["driver_progress"] == 1.0
    assert all(step["is_completed"] for step in tracking["steps"])

    orders = client.get("/api/orders").json()
    assert orders["active"] == []
    assert orders["past"][0]["id"] == order["id"]
    assert orders["past"][0]["driver_name"]

    rated = client.post(f"/api/orders/{order['id']}/rating", json={"rating": 5, "review": "Great"}).json()
    assert rated["rating"] == 5

    cart = client.post(f"/api/orders/{order['id']}/reorder").json()
    assert cart["item_count"] == 2


def test_cancel_flow(client):
    add_pizza(client)
    order = checkout(client, start_tracking=False).json()

    cancelled = client.post(f"/api/orders/{order['id']}/cancel").json()
    assert cancelled["status"] == "cancelled"

    response = client.post(f"/api/orders/{order['id']}/cancel")
    assert response.status_code == 404
    assert response.json()["code"] == "order_not_found"


def test_cannot_cancel_or_rate_mid_delivery(client):
    add_pizza(client)
    order = checkout(client, start_tracking=False).json()
    for _ in range(3):
        client.post(f"/api/orders/{order['id']}/advance")

    response = client.post(f"/api/orders/{order['id']}/cancel")
    assert response.status_code == 409
    assert response.json()["code"] == "cannot_cancel"

    response = client.post(f"/api/orders/{order['id']}/rating", json={"rating": 4})
    assert response.status_code == 409
    assert response.json()["code"] == "cannot_rate"


def test_tracking_start_and_stop(client):
    add_pizza(client)
    order = checkout(client, start_tracking=False).json()

    assert client.get(f"/api/orders/{order['id']}/tracking").json()["is_tracking"] is False
    assert client.post(f"/api/orders/{order['id']}/tracking").json()["is_tracking"] is True
    assert client.delete(f"/api/orders/{order['id']}/tracking").json()["is_tracking"] is False


def test_history_is_seeded(client):
    past = client.get("/api/orders").json()["past"]

    assert [o["id"] for o in past] == ["past_order_1", "past_order_2"]
    assert client.get("/api/orders/past_order_1").json()["rating"] == 5
    assert client.get("/api/orders/nope").json()["code"] == "order_not_found"


def test_favorites(client):
    toggled = client.post("/api/favorites/restaurants/rest_1").json()
    assert toggled == {"restaurant_id": "rest_1", "is_favorite": True}
    client.post("/api/favorites/menu-items/item_1_1")

    assert client.get("/api/favorites").json() == {
        "restaurant_ids": ["rest_1"],
        "menu_item_ids": ["item_1_1"],
    }
    assert client.post("/api/favorites/restaurants/rest_404").status_code == 404

    assert client.delete("/api/favorites").json() == {"restaurant_ids": [], "menu_item_ids": []}


def test_busy_preferences_file_does_not_stall_other_requests(client, tmp_path):
    data_dir = tmp_path / "data"
    data_dir.mkdir(exist_ok=True)
    responses = {}

    def read_searches():
        responses["searches"] = client.get("/api/searches")

    with FileLock(str(data_dir / "preferences.json.lock")):
        waiting = threading.Thread(target=read_searches)
        waiting.start()
        time.sleep(0.2)

        started = time.monotonic()
        health = client.get("/health")
        elapsed = time.monotonic() - started

        waiting.join(timeout=10)

    assert health.status_code == 200
    assert elapsed < 1.0
    assert responses["searches"].status_code == 503
    assert responses["searches"].json()["code"] == "preferences_unavailable"
