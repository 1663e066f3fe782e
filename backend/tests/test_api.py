from decimal import Decimal

from fastapi.testclient import TestClient

from storefront.main import app

client = TestClient(app)


def _as(user_id):
    return {"X-User-Id": str(user_id)}


def test_requires_user_header():
    r = client.get("/api/v1/cart")
    assert r.status_code == 401
    body = r.json()
    assert body["success"] is False
    assert body["error"] == "Unauthorized"


def test_cart_and_checkout_flow(make_product, stock_of):
    pid = make_product(price="10.00", stock=5)

    r = client.post("/api/v1/cart/items", json={"product_id": pid, "quantity": 3}, headers=_as(1))
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert Decimal(body["data"]["total"]) == Decimal("30.00")
    item_id = body["data"]["items"][0]["id"]

    r = client.put(f"/api/v1/cart/items/{item_id}", json={"quantity": 2}, headers=_as(1))
    assert r.status_code == 200
    assert r.json()["data"]["items"][0]["quantity"] == 2

    r = client.post("/api/v1/orders", headers=_as(1))
    assert r.status_code == 201
    order = r.json()["data"]
    assert order["status"] == "placed"
    assert Decimal(order["total_amount"]) == Decimal("20.00")
    assert stock_of(pid) == 3

    r = client.get("/api/v1/cart", headers=_as(1))
    assert r.json()["data"]["items"] == []

    r = client.get(f"/api/v1/orders/{order['id']}", headers=_as(1))
    assert r.status_code == 200
    assert r.json()["data"]["order_number"] == order["order_number"]


def test_error_kinds_are_stable(make_product):
    pid = make_product(stock=1)

    r = client.post("/api/v1/cart/items", json={"product_id": pid, "quantity": 2}, headers=_as(1))
    assert r.status_code == 409
    body = r.json()
    assert body["error"] == "InsufficientStock"
    assert body["data"]["product_id"] == pid

    r = client.post("/api/v1/cart/items", json={"product_id": 999, "quantity": 1}, headers=_as(1))
    assert r.status_code == 404
    assert r.json()["error"] == "NotFound"

    r = client.post("/api/v1/cart/items", json={"product_id": pid, "quantity": 0}, headers=_as(1))
    assert r.status_code == 400
    assert r.json()["error"] == "InvalidArgument"

    r = client.post("/api/v1/orders", headers=_as(1))
    assert r.status_code == 409
    assert r.json()["error"] == "EmptyCart"


def test_foreign_order_is_not_found(make_product):
    pid = make_product(stock=5)
    client.post("/api/v1/cart/items", json={"product_id": pid, "quantity": 1}, headers=_as(1))
    order_id = client.post("/api/v1/orders", headers=_as(1)).json()["data"]["id"]

    r = client.get(f"/api/v1/orders/{order_id}", headers=_as(2))
    assert r.status_code == 404
    assert r.json()["error"] == "NotFound"


def test_remove_item_is_quiet(make_product):
    pid = make_product(stock=5)
    item_id = client.post(
        "/api/v1/cart/items", json={"product_id": pid, "quantity": 1}, headers=_as(1)
    ).json()["data"]["items"][0]["id"]

    assert client.delete(f"/api/v1/cart/items/{item_id}", headers=_as(2)).status_code == 200
    assert len(client.get("/api/v1/cart", headers=_as(1)).json()["data"]["items"]) == 1
    assert client.delete(f"/api/v1/cart/items/{item_id}", headers=_as(1)).status_code == 200
    assert client.get("/api/v1/cart", headers=_as(1)).json()["data"]["items"] == []


def test_list_orders_envelope_has_meta(make_product):
    pid = make_product(stock=5)
    for _ in range(3):
        client.post("/api/v1/cart/items", json={"product_id": pid, "quantity": 1}, headers=_as(1))
        client.post("/api/v1/orders", headers=_as(1))

    r = client.get("/api/v1/orders", params={"page": 1, "limit": 2}, headers=_as(1))
    assert r.status_code == 200
    body = r.json()
    assert len(body["data"]) == 2
    assert body["meta"] == {"page": 1, "limit": 2, "total": 3, "total_pages": 2}

    r = client.get("/api/v1/orders", params={"page": 0, "limit": 500}, headers=_as(1))
    assert r.json()["meta"]["page"] == 1
    assert r.json()["meta"]["limit"] == 100


def test_unexpected_checkout_failure_keeps_the_envelope(make_product, stock_of, monkeypatch):
    pid = make_product(stock=5)
    client.post("/api/v1/cart/items", json={"product_id": pid, "quantity": 2}, headers=_as(1))

    def broken_create(self, user_id, assembled):
        raise RuntimeError("disk full")

    monkeypatch.setattr(
        "storefront.repositories.order_repo.OrderRepository.create", broken_create
    )
    r = client.post("/api/v1/orders", headers=_as(1))
    assert r.status_code == 503
    body = r.json()
    assert body["success"] is False
    assert body["error"] == "TransactionFailed"
    assert stock_of(pid) == 5


def test_unhandled_error_outside_checkout_is_enveloped(monkeypatch):
    def broken_view(self, user_id):
        raise RuntimeError("boom")

    monkeypatch.setattr("storefront.services.cart_service.CartService.view", broken_view)
    quiet = TestClient(app, raise_server_exceptions=False)
    r = quiet.get("/api/v1/cart", headers=_as(1))
    assert r.status_code == 500
    assert r.headers["content-type"].startswith("application/json")
    body = r.json()
    assert body["success"] is False
    assert body["error"] == "TransactionFailed"
