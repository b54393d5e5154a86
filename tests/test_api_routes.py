"""Integration tests for the Lampshop Admin REST routes.

Covers:
- POST /login issues a token the protected routes accept; bad credentials -> 401
- Protected routes reject missing, malformed, foreign and expired tokens
- Product CRUD: sequential ids, full-replace PUT, DELETE -> 204 then 404
- Orders: create, read, status change and its background notification
- A failing notifier never changes the status-change response
- Category reference routes are public; unknown category -> 404
- Every error uses the {"error": {"code", "message"}} envelope
"""

from datetime import datetime, timedelta, timezone

import pytest
from conftest import ADMIN_PASSWORD, ADMIN_USERNAME, TEST_SECRET, FailingNotifier
from jose import jwt

from catalog.models import OrderStatus

BULB = {
    "sku": "BULB-007",
    "name": "EcoBright 7W",
    "description": "Energy-efficient household bulb.",
    "categoryId": "bulb",
    "isActive": True,
    "imageUrl": "https://example.com/bulb.png",
    "price": 500,
    "stockQty": 20,
    "attributes": {"power": 7, "color": "warm white", "temperature": 2700, "socketType": "E27"},
}

ORDER = {
    "customerName": "Ivan Ivanov",
    "items": [{"productId": 1, "quantity": 2}],
    "totalPrice": 1000,
}


def _auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def _ts(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


# ---------------------------------------------------------------------------
# Login and bearer tokens
# ---------------------------------------------------------------------------


class TestLogin:
    def test_login_returns_usable_token(self, api_client) -> None:
        client, _, _ = api_client
        resp = client.post("/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD})
        assert resp.status_code == 200
        assert resp.headers["cache-control"] == "no-store"
        token = resp.json()["token"]
        assert client.get("/products", headers=_auth(token)).status_code == 200

    @pytest.mark.parametrize(
        "body",
        [
            {"username": "admin", "password": "wrong"},
            {"username": "root", "password": ADMIN_PASSWORD},
        ],
    )
    def test_bad_credentials(self, api_client, body: dict) -> None:
        client, _, _ = api_client
        resp = client.post("/login", json=body)
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "bad_credentials"
        assert "token" not in resp.json()

    def test_missing_field_is_validation_error(self, api_client) -> None:
        client, _, _ = api_client
        resp = client.post("/login", json={"username": ADMIN_USERNAME})
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "validation_error"


class TestBearerAuth:
    @pytest.mark.parametrize("path", ["/products", "/products/1", "/orders", "/orders/1"])
    def test_missing_token(self, api_client, path: str) -> None:
        client, _, _ = api_client
        resp = client.get(path)
        assert resp.status_code == 401
        assert resp.headers["www-authenticate"] == "Bearer"
        assert resp.json()["error"]["code"] == "unauthorized"

    @pytest.mark.parametrize(
        "header",
        ["Token abc", "Bearer", "Bearer not-a-jwt", "bearer abc"],
    )
    def test_malformed_header(self, api_client, header: str) -> None:
        client, _, _ = api_client
        resp = client.get("/products", headers={"Authorization": header})
        assert resp.status_code == 401

    def test_foreign_key_token(self, api_client) -> None:
        client, _, _ = api_client
        exp = datetime.now(timezone.utc) + timedelta(hours=1)
        token = jwt.encode({"sub": "admin", "exp": exp}, "x" * 40, algorithm="HS256")
        assert client.get("/products", headers=_auth(token)).status_code == 401

    def test_expired_token(self, api_client) -> None:
        client, _, _ = api_client
        exp = datetime.now(timezone.utc) - timedelta(seconds=1)
        token = jwt.encode({"sub": "admin", "exp": exp}, TEST_SECRET, algorithm="HS256")
        resp = client.get("/orders", headers=_auth(token))
        assert resp.status_code == 401
        assert resp.json()["error"]["message"] == "Invalid or expired token."

    def test_rejected_request_does_not_mutate(self, api_client) -> None:
        client, _, state = api_client
        resp = client.post("/products", json=BULB)
        assert resp.status_code == 401
        assert state.products.count() == 0


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------


class TestProducts:
    def test_create_assigns_sequential_ids(self, api_client) -> None:
        client, token, _ = api_client
        first = client.post("/products", json=BULB, headers=_auth(token))
        assert first.status_code == 201
        body = first.json()
        assert body["id"] == 1
        assert body["sku"] == "BULB-007"
        assert body["categoryId"] == "bulb"
        assert body["stockQty"] == 20
        assert body["attributes"]["socketType"] == "E27"
        assert body["createdAt"] == body["updatedAt"]

        second = client.post("/products", json={**BULB, "sku": "BULB-009"}, headers=_auth(token))
        assert second.json()["id"] == 2

    def test_get_returns_created(self, api_client) -> None:
        client, token, _ = api_client
        created = client.post("/products", json=BULB, headers=_auth(token)).json()
        fetched = client.get("/products/1", headers=_auth(token))
        assert fetched.status_code == 200
        assert fetched.json() == created

    def test_delete_then_not_found(self, api_client) -> None:
        client, token, _ = api_client
        client.post("/products", json=BULB, headers=_auth(token))
        client.post("/products", json={**BULB, "sku": "BULB-009"}, headers=_auth(token))

        resp = client.delete("/products/1", headers=_auth(token))
        assert resp.status_code == 204
        assert resp.content == b""

        missing = client.get("/products/1", headers=_auth(token))
        assert missing.status_code == 404
        assert missing.json()["error"]["code"] == "product_not_found"
        assert [p["id"] for p in client.get("/products", headers=_auth(token)).json()] == [2]

    def test_put_is_full_replace(self, api_client) -> None:
        client, token, _ = api_client
        created = client.post("/products", json=BULB, headers=_auth(token)).json()
        resp = client.put(
            "/products/1",
            json={"sku": "CABLE-3M", "name": "Copper cable 3m", "price": 120, "id": 77},
            headers=_auth(token),
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["id"] == 1
        assert body["createdAt"] == created["createdAt"]
        assert _ts(body["updatedAt"]) > _ts(created["updatedAt"])
        assert body["sku"] == "CABLE-3M"
        assert body["attributes"] == {}
        assert body["stockQty"] == 0
        assert body["isActive"] is False

    @pytest.mark.parametrize("method", ["get", "delete"])
    def test_missing_product(self, api_client, method: str) -> None:
        client, token, _ = api_client
        resp = getattr(client, method)("/products/42", headers=_auth(token))
        assert resp.status_code == 404

    def test_put_missing_product(self, api_client) -> None:
        client, token, state = api_client
        resp = client.put("/products/42", json=BULB, headers=_auth(token))
        assert resp.status_code == 404
        assert state.products.count() == 0

    def test_non_integer_id(self, api_client) -> None:
        client, token, _ = api_client
        resp = client.get("/products/abc", headers=_auth(token))
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "validation_error"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"price": -1},
            {"stockQty": "many"},
            {"attributes": {"power": {"watts": 7}}},
        ],
    )
    def test_invalid_body(self, api_client, overrides: dict) -> None:
        client, token, state = api_client
        resp = client.post("/products", json={**BULB, **overrides}, headers=_auth(token))
        assert resp.status_code == 422
        assert state.products.count() == 0

    def test_snake_case_body_accepted(self, api_client) -> None:
        client, token, _ = api_client
        resp = client.post(
            "/products",
            json={"sku": "EQ-1", "category_id": "equipment", "stock_qty": 3},
            headers=_auth(token),
        )
        assert resp.status_code == 201
        assert resp.json()["categoryId"] == "equipment"
        assert resp.json()["stockQty"] == 3


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


class TestOrders:
    def test_create_and_get(self, api_client) -> None:
        client, token, _ = api_client
        resp = client.post("/orders", json=ORDER, headers=_auth(token))
        assert resp.status_code == 201
        body = resp.json()
        assert body["id"] == 1
        assert body["status"] == "Pending"
        assert body["items"] == [{"productId": 1, "quantity": 2}]
        assert client.get("/orders/1", headers=_auth(token)).json() == body
        assert len(client.get("/orders", headers=_auth(token)).json()) == 1

    def test_status_change_notifies(self, api_client) -> None:
        client, token, state = api_client
        created = client.post("/orders", json=ORDER, headers=_auth(token)).json()
        resp = client.put("/orders/1/status", json={"status": "Shipped"}, headers=_auth(token))
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "Shipped"
        assert body["customerName"] == "Ivan Ivanov"
        assert _ts(body["updatedAt"]) > _ts(created["updatedAt"])
        assert state.notifier.calls == [(1, OrderStatus.shipped)]

    def test_any_transition_allowed(self, api_client) -> None:
        client, token, _ = api_client
        client.post("/orders", json=ORDER, headers=_auth(token))
        client.put("/orders/1/status", json={"status": "Delivered"}, headers=_auth(token))
        resp = client.put("/orders/1/status", json={"status": "Pending"}, headers=_auth(token))
        assert resp.json()["status"] == "Pending"

    def test_failing_notifier_does_not_fail_request(self, api_client) -> None:
        client, token, state = api_client
        failing = FailingNotifier()
        client.app.state.notifier = failing
        client.post("/orders", json=ORDER, headers=_auth(token))
        resp = client.put("/orders/1/status", json={"status": "Processing"}, headers=_auth(token))
        assert resp.status_code == 200
        assert failing.attempts == 1
        assert state.orders.get_by_id(1).status is OrderStatus.processing

    def test_status_change_missing_order(self, api_client) -> None:
        client, token, state = api_client
        resp = client.put("/orders/9/status", json={"status": "Shipped"}, headers=_auth(token))
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "order_not_found"
        assert state.notifier.calls == []

    def test_unknown_status(self, api_client) -> None:
        client, token, state = api_client
        client.post("/orders", json=ORDER, headers=_auth(token))
        resp = client.put("/orders/1/status", json={"status": "Lost"}, headers=_auth(token))
        assert resp.status_code == 422
        assert state.orders.get_by_id(1).status is OrderStatus.pending
        assert state.notifier.calls == []

    def test_zero_quantity_rejected(self, api_client) -> None:
        client, token, _ = api_client
        body = {**ORDER, "items": [{"productId": 1, "quantity": 0}]}
        assert client.post("/orders", json=body, headers=_auth(token)).status_code == 422


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


class TestCategories:
    def test_list_is_public(self, api_client) -> None:
        client, _, _ = api_client
        resp = client.get("/categories")
        assert resp.status_code == 200
        assert [c["id"] for c in resp.json()] == ["bulb", "cable", "equipment"]

    def test_attribute_options(self, api_client) -> None:
        client, _, _ = api_client
        resp = client.get("/categories/bulb/attributes")
        assert resp.status_code == 200
        assert {"key", "label", "type"} == set(resp.json()[0])
        assert "socketType" in [o["key"] for o in resp.json()]

    def test_unknown_category(self, api_client) -> None:
        client, _, _ = api_client
        resp = client.get("/categories/lamp/attributes")
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "attributes_not_found"
