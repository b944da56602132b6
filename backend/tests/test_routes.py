"""
HTTP API tests: role enforcement, manager-only ledger routes and the cart flow.
"""

import pytest


def role_headers(role):
    return {"X-Role": role}


MANAGER = role_headers("manager")


@pytest.fixture
def product(db_session, make_product):
    return make_product(total_stock=100, price=25000)


class TestRoleEnforcement:

    def test_missing_role_is_401(self, client, db_session):
        response = client.get("/api/products")
        assert response.status_code == 401

    def test_unknown_role_is_401(self, client, db_session):
        response = client.get("/api/products", headers=role_headers("cashier"))
        assert response.status_code == 401

    @pytest.mark.parametrize("role", ["tiktok", "shopee", "toko"])
    def test_sellers_cannot_use_manager_routes(self, client, product, role):
        headers = role_headers(role)

        assert client.post(
            "/api/products", json={"price": 1, "total_stock": 1, "color": "sage"}, headers=headers
        ).status_code == 403
        assert client.post(
            f"/api/inventory/{product.id}/add-stock", json={"amount": 5}, headers=headers
        ).status_code == 403
        assert client.post(
            f"/api/inventory/{product.id}/distribute",
            json={"allocations": {"tiktok": 5}},
            headers=headers,
        ).status_code == 403
        assert client.post(
            f"/api/inventory/{product.id}/reduce-stock", json={"amount": 5}, headers=headers
        ).status_code == 403

    def test_seller_is_refused_other_channel_cart(self, client, db_session):
        response = client.post("/api/carts/shopee", headers=role_headers("tiktok"))
        assert response.status_code == 403

    @pytest.mark.parametrize("channel", ["tiktok", "shopee", "toko"])
    def test_manager_may_open_every_cart(self, client, db_session, channel):
        response = client.post(f"/api/carts/{channel}", headers=MANAGER)
        assert response.status_code == 201
        assert response.get_json()["cart"]["channel"] == channel

    def test_unknown_channel_is_404(self, client, db_session):
        response = client.post("/api/carts/lazada", headers=MANAGER)
        assert response.status_code == 404


class TestProductRoutes:

    def test_create_product_with_generated_code(self, client, db_session):
        response = client.post(
            "/api/products?code_prefix=TK",
            json={"price": "150000", "total_stock": 100, "color": "Denim"},
            headers=MANAGER,
        )

        assert response.status_code == 201
        data = response.get_json()["product"]
        assert data["product_code"] == "TK110"
        assert data["color"] == "denim"
        assert data["color_hex"] == "#5A86AD"
        assert data["channel_stock"] == {"tiktok": 0, "shopee": 0, "toko": 0}

    @pytest.mark.parametrize("payload", [
        {"price": 1000, "total_stock": 10},
        {"price": "12.5", "total_stock": 10, "color": "sage"},
        {"price": 1000, "total_stock": -1, "color": "sage"},
        {"price": 1000, "total_stock": 10, "color": "navy"},
        {"price": 1000, "total_stock": 10, "color": "sage", "tiktok_stock": 5},
    ])
    def test_create_product_rejects_bad_payload(self, client, db_session, payload):
        response = client.post("/api/products", json=payload, headers=MANAGER)
        assert response.status_code == 400

    def test_duplicate_code_is_409(self, client, product):
        response = client.post(
            "/api/products",
            json={"product_code": product.product_code, "price": 1, "total_stock": 1, "color": "sage"},
            headers=MANAGER,
        )
        assert response.status_code == 409

    def test_list_and_get(self, client, product):
        headers = role_headers("toko")

        listing = client.get("/api/products?search=test&stock=available", headers=headers)
        assert listing.status_code == 200
        assert [item["id"] for item in listing.get_json()["items"]] == [product.id]

        detail = client.get(f"/api/products/{product.id}", headers=headers)
        assert detail.status_code == 200
        assert detail.get_json()["product"]["stock_status"] == "In Stock"

        assert client.get("/api/products/9999", headers=headers).status_code == 404

    def test_bad_stock_filter_is_400(self, client, db_session):
        response = client.get("/api/products?stock=plenty", headers=MANAGER)
        assert response.status_code == 400

    def test_colors(self, client, db_session):
        response = client.get("/api/products/colors", headers=role_headers("shopee"))
        colors = response.get_json()["colors"]
        assert len(colors) == 16
        assert colors[9]["key"] == "denim"


class TestInventoryRoutes:

    def test_distribute_then_add_stock(self, client, product):
        response = client.post(
            f"/api/inventory/{product.id}/distribute",
            json={"allocations": {"tiktok": 30}},
            headers=MANAGER,
        )
        assert response.status_code == 200
        data = response.get_json()["product"]
        assert data["total_stock"] == 70
        assert data["channel_stock"]["tiktok"] == 30

        response = client.post(
            f"/api/inventory/{product.id}/add-stock", json={"amount": 20}, headers=MANAGER
        )
        assert response.status_code == 200
        assert response.get_json()["product"]["total_stock"] == 90

    def test_reduce_stock(self, client, product):
        response = client.post(
            f"/api/inventory/{product.id}/reduce-stock", json={"amount": 30}, headers=MANAGER
        )
        assert response.status_code == 200
        assert response.get_json()["product"]["total_stock"] == 70

        logs = client.get("/api/logs?limit=1", headers=MANAGER).get_json()["items"]
        assert logs[0]["action"] == "Pengurangan stok"

    def test_reduce_more_than_stock_is_409(self, client, product):
        response = client.post(
            f"/api/inventory/{product.id}/reduce-stock", json={"amount": 101}, headers=MANAGER
        )
        assert response.status_code == 409
        assert response.get_json()["details"] == {"product_id": product.id, "requested": 101, "available": 100}

    @pytest.mark.parametrize("body", [{}, {"amount": "abc"}, {"amount": 0}])
    def test_reduce_bad_amount_is_400(self, client, product, body):
        response = client.post(f"/api/inventory/{product.id}/reduce-stock", json=body, headers=MANAGER)
        assert response.status_code == 400

    def test_distribute_more_than_warehouse_is_409(self, client, product):
        response = client.post(
            f"/api/inventory/{product.id}/distribute",
            json={"allocations": {"tiktok": 60, "shopee": 41}},
            headers=MANAGER,
        )
        assert response.status_code == 409
        assert response.get_json()["details"]["available"] == 100

    @pytest.mark.parametrize("body", [
        {},
        {"allocations": {"tiktok": 0}},
        {"allocations": {"tiktok": -4}},
    ])
    def test_distribute_bad_body_is_400(self, client, product, body):
        response = client.post(f"/api/inventory/{product.id}/distribute", json=body, headers=MANAGER)
        assert response.status_code == 400

    def test_add_stock_bad_amount_is_400(self, client, product):
        response = client.post(
            f"/api/inventory/{product.id}/add-stock", json={"amount": "0"}, headers=MANAGER
        )
        assert response.status_code == 400

    def test_missing_product_is_404(self, client, db_session):
        response = client.post("/api/inventory/9999/add-stock", json={"amount": 5}, headers=MANAGER)
        assert response.status_code == 404


class TestCartFlow:

    def _open_cart(self, client, channel, headers):
        response = client.post(f"/api/carts/{channel}", headers=headers)
        assert response.status_code == 201
        return response.get_json()["cart"]["id"]

    def test_add_lines_and_checkout(self, client, make_product):
        product = make_product(total_stock=0, price=25000, shopee=10)
        headers = role_headers("shopee")
        cart_id = self._open_cart(client, "shopee", headers)

        response = client.post(
            f"/api/carts/shopee/{cart_id}/lines",
            json={"product_id": product.id, "quantity": "4"},
            headers=headers,
        )
        assert response.status_code == 201
        assert response.get_json()["cart"]["total"] == 100000

        response = client.post(f"/api/carts/shopee/{cart_id}/checkout", headers=headers)
        assert response.status_code == 200
        data = response.get_json()
        assert data["checkout"]["total"] == 100000
        assert data["cart"]["lines"] == []

        detail = client.get(f"/api/products/{product.id}", headers=headers)
        assert detail.get_json()["product"]["channel_stock"]["shopee"] == 6

        logs = client.get("/api/logs?limit=1", headers=headers).get_json()["items"]
        assert logs[0]["action"] == "Pembelian di shopee"

    def test_checkout_closes_the_cart(self, client, make_product):
        product = make_product(total_stock=0, toko=5)
        headers = role_headers("toko")
        cart_id = self._open_cart(client, "toko", headers)
        client.post(f"/api/carts/toko/{cart_id}/lines", json={"product_id": product.id, "quantity": 2}, headers=headers)
        assert client.get("/health").get_json()["open_carts"] == 1

        assert client.post(f"/api/carts/toko/{cart_id}/checkout", headers=headers).status_code == 200

        assert client.get("/health").get_json()["open_carts"] == 0
        assert client.get(f"/api/carts/toko/{cart_id}", headers=headers).status_code == 404
        assert client.post(f"/api/carts/toko/{cart_id}/checkout", headers=headers).status_code == 404

    def test_line_above_stock_is_409(self, client, make_product):
        product = make_product(total_stock=0, toko=2)
        headers = role_headers("toko")
        cart_id = self._open_cart(client, "toko", headers)

        response = client.post(
            f"/api/carts/toko/{cart_id}/lines",
            json={"product_id": product.id, "quantity": 3},
            headers=headers,
        )
        assert response.status_code == 409
        assert response.get_json()["details"]["available"] == 2

    @pytest.mark.parametrize("body,status", [
        ({"quantity": 1}, 400),
        ({"product_id": "abc", "quantity": 1}, 400),
        ({"product_id": 9999, "quantity": 1}, 404),
    ])
    def test_bad_line_requests(self, client, db_session, body, status):
        cart_id = self._open_cart(client, "tiktok", MANAGER)
        response = client.post(f"/api/carts/tiktok/{cart_id}/lines", json=body, headers=MANAGER)
        assert response.status_code == status

    def test_duplicate_line_needs_confirmation(self, client, make_product):
        product = make_product(total_stock=0, tiktok=5)
        cart_id = self._open_cart(client, "tiktok", MANAGER)
        url = f"/api/carts/tiktok/{cart_id}/lines"

        assert client.post(url, json={"product_id": product.id, "quantity": 1}, headers=MANAGER).status_code == 201
        assert client.post(url, json={"product_id": product.id, "quantity": 1}, headers=MANAGER).status_code == 409
        response = client.post(
            url,
            json={"product_id": product.id, "quantity": 1, "confirm_duplicate": True},
            headers=MANAGER,
        )
        assert response.status_code == 201
        assert len(response.get_json()["cart"]["lines"]) == 2

    def test_failed_checkout_is_409_and_keeps_cart(self, client, make_product):
        a = make_product(total_stock=0, shopee=5)
        b = make_product(total_stock=0, shopee=3)
        headers = role_headers("shopee")
        cart_id = self._open_cart(client, "shopee", headers)
        client.post(f"/api/carts/shopee/{cart_id}/lines", json={"product_id": a.id, "quantity": 5}, headers=headers)
        client.post(f"/api/carts/shopee/{cart_id}/lines", json={"product_id": b.id, "quantity": 3}, headers=headers)

        other_id = self._open_cart(client, "shopee", headers)
        client.post(f"/api/carts/shopee/{other_id}/lines", json={"product_id": b.id, "quantity": 1}, headers=headers)
        assert client.post(f"/api/carts/shopee/{other_id}/checkout", headers=headers).status_code == 200

        response = client.post(f"/api/carts/shopee/{cart_id}/checkout", headers=headers)

        assert response.status_code == 409
        failed = response.get_json()["details"]["failed_lines"]
        assert [(f["line"], f["product_id"], f["available"]) for f in failed] == [(1, b.id, 2)]

        cart = client.get(f"/api/carts/shopee/{cart_id}", headers=headers).get_json()["cart"]
        assert len(cart["lines"]) == 2
        stock = client.get(f"/api/products/{a.id}", headers=headers).get_json()["product"]["channel_stock"]
        assert stock["shopee"] == 5

    def test_empty_checkout_is_400(self, client, db_session):
        cart_id = self._open_cart(client, "toko", MANAGER)
        response = client.post(f"/api/carts/toko/{cart_id}/checkout", headers=MANAGER)
        assert response.status_code == 400

    def test_cart_is_bound_to_its_channel(self, client, db_session):
        cart_id = self._open_cart(client, "tiktok", MANAGER)
        assert client.get(f"/api/carts/shopee/{cart_id}", headers=MANAGER).status_code == 404
        assert client.get(f"/api/carts/tiktok/{cart_id}", headers=MANAGER).status_code == 200

    def test_discard(self, client, db_session):
        cart_id = self._open_cart(client, "toko", MANAGER)
        assert client.delete(f"/api/carts/toko/{cart_id}", headers=MANAGER).status_code == 204
        assert client.get(f"/api/carts/toko/{cart_id}", headers=MANAGER).status_code == 404
        assert client.delete(f"/api/carts/toko/{cart_id}", headers=MANAGER).status_code == 404


def test_logs_newest_first(client, make_product):
    product = make_product(total_stock=10)
    client.post(f"/api/inventory/{product.id}/add-stock", json={"amount": 5}, headers=MANAGER)

    response = client.get("/api/logs", headers=role_headers("toko"))

    assert response.status_code == 200
    actions = [item["action"] for item in response.get_json()["items"]]
    assert actions == ["Penambahan stok", "Penambahan produk"]


def test_logs_rejects_bad_since(client, db_session):
    response = client.get("/api/logs?since=yesterday", headers=MANAGER)
    assert response.status_code == 400


@pytest.mark.parametrize("limit", ["0", "-3", "abc", "2.5"])
def test_logs_rejects_bad_limit(client, db_session, limit):
    response = client.get(f"/api/logs?limit={limit}", headers=MANAGER)
    assert response.status_code == 400


def test_health(client, db_session):
    response = client.get("/health")
    assert response.status_code == 200
    data = response.get_json()
    assert data["status"] == "healthy"
    assert data["open_carts"] == 0
