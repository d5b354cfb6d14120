from uuid import uuid4

from inventory_service.app.models.products import Product


def change_stock(client, headers, product_id, quantity, change_type, **extra):
    payload = {"quantity": quantity, "change_type": change_type}
    payload.update(extra)
    return client.post(f"/api/products/{product_id}/stock", json=payload, headers=headers)


# =============================================================================
# CRUD
# =============================================================================


class TestProducts:

    def test_requires_authentication(self, client):
        response = client.get("/api/products")
        assert response.status_code == 401
        assert response.json()["status"] == "Failure"

    def test_create_and_get(self, client, headers, create_product):
        product = create_product(
            name="Widget", sku="W-1", unit_cost="4.00", selling_price="5.00", reorder_point=5)

        assert product["total_quantity"] == 0
        assert product["is_out_of_stock"] is True
        assert product["needs_restock"] is True
        assert product["profit_margin"] == 20.0

        response = client.get(f"/api/products/{product['id']}", headers=headers)
        assert response.status_code == 200
        assert response.json()["data"]["product"]["sku"] == "W-1"

    def test_opening_quantity_lands_on_primary_location(self, client, headers, create_product):
        product = create_product(current_quantity=12)
        assert product["total_quantity"] == 12
        assert product["needs_restock"] is False

        levels = client.get(f"/api/products/{product['id']}/stock", headers=headers).json()["data"]["stockLevels"]
        assert len(levels) == 1
        assert levels[0]["location_name"] == "Main Warehouse"
        assert levels[0]["quantity"] == 12

    def test_list_filters_and_pagination(self, client, headers, create_product):
        create_product(name="Red Bolt", sku="RB", category="bolts")
        create_product(name="Blue Bolt", sku="BB", category="bolts")
        create_product(name="Hammer", sku="HM", category="tools")

        data = client.get("/api/products", params={"category": "bolts"}, headers=headers).json()["data"]
        assert data["total"] == 2
        assert {p["name"] for p in data["products"]} == {"Red Bolt", "Blue Bolt"}

        data = client.get("/api/products", params={"search": "hm"}, headers=headers).json()["data"]
        assert [p["name"] for p in data["products"]] == ["Hammer"]

        data = client.get("/api/products", params={"skip": 0, "limit": 1}, headers=headers).json()["data"]
        assert data["total"] == 3
        assert len(data["products"]) == 1

    def test_unknown_supplier_is_rejected(self, client, headers):
        response = client.post(
            "/api/products", json={"name": "Widget", "supplier_id": str(uuid4())}, headers=headers)
        assert response.status_code == 400
        assert response.json()["message"] == "Supplier does not exist"

    def test_update(self, client, headers, create_product):
        product = create_product()
        response = client.put(
            f"/api/products/{product['id']}", json={"reorder_point": 0, "category": "misc"}, headers=headers)
        assert response.status_code == 200
        updated = response.json()["data"]["product"]
        assert updated["reorder_point"] == 0
        assert updated["category"] == "misc"
        assert updated["name"] == "Widget"

    def test_delete(self, client, headers, create_product, db):
        product = create_product()
        response = client.delete(f"/api/products/{product['id']}", headers=headers)
        assert response.status_code == 200
        assert response.json()["data"]["message"] == "Product deleted successfully"
        assert db.query(Product).count() == 0

        response = client.get(f"/api/products/{product['id']}", headers=headers)
        assert response.status_code == 404

    def test_tenants_are_isolated(self, client, headers, create_product, make_tenant, headers_for):
        product = create_product()
        _, stranger = make_tenant(email="stranger@acme.io")
        other_headers = headers_for(stranger)

        assert client.get(f"/api/products/{product['id']}", headers=other_headers).status_code == 404
        assert client.get("/api/products", headers=other_headers).json()["data"]["total"] == 0

    def test_product_limit(self, client, make_tenant, headers_for):
        _, owner = make_tenant(plan_name="free", email="tiny@acme.io")
        tiny_headers = headers_for(owner)
        for i in range(50):
            response = client.post("/api/products", json={"name": f"P{i}"}, headers=tiny_headers)
            assert response.status_code == 201

        response = client.post("/api/products", json={"name": "one too many"}, headers=tiny_headers)
        assert response.status_code == 403
        assert response.json()["data"]["limit_type"] == "products"


# =============================================================================
# Stock changes
# =============================================================================


class TestStockChanges:

    def test_add_remove_clamp_sequence(self, client, headers, create_product):
        product = create_product(reorder_point=5)
        pid = product["id"]

        response = change_stock(client, headers, pid, "+10", "add")
        assert response.status_code == 201
        assert response.json()["data"]["stockLevel"]["quantity"] == 10
        assert response.json()["data"]["alerts"] == []

        response = change_stock(client, headers, pid, 3, "remove")
        assert response.json()["data"]["stockLevel"]["quantity"] == 7

        response = change_stock(client, headers, pid, 100, "remove")
        data = response.json()["data"]
        assert data["stockLevel"]["quantity"] == 0
        assert [a["alert_type"] for a in data["alerts"]] == ["out_of_stock"]

        history = client.get(f"/api/products/{pid}/history", headers=headers).json()["data"]["history"]
        assert len(history) == 3
        assert sorted(h["new_quantity"] for h in history) == [0, 7, 10]

    def test_first_remove_stores_raw_delta(self, client, headers, create_product):
        product = create_product()
        response = change_stock(client, headers, product["id"], 5, "remove")
        assert response.json()["data"]["stockLevel"]["quantity"] == 5

    def test_non_numeric_quantity_counts_as_zero(self, client, headers, create_product):
        product = create_product(reorder_point=0)
        change_stock(client, headers, product["id"], 4, "add")
        response = change_stock(client, headers, product["id"], "lots", "add")
        assert response.json()["data"]["stockLevel"]["quantity"] == 4

    def test_non_finite_quantity_counts_as_zero(self, client, headers, create_product):
        product = create_product(reorder_point=0)
        change_stock(client, headers, product["id"], 4, "add")
        for value in ("inf", "-Infinity", "1e999", "nan"):
            response = change_stock(client, headers, product["id"], value, "add")
            assert response.status_code == 201
            assert response.json()["data"]["stockLevel"]["quantity"] == 4

    def test_low_stock_alert(self, client, headers, create_product):
        product = create_product(name="Gizmo", reorder_point=5)
        response = change_stock(client, headers, product["id"], 3, "set")
        alerts = response.json()["data"]["alerts"]
        assert len(alerts) == 1
        assert alerts[0]["alert_type"] == "low_stock"
        assert alerts[0]["product_name"] == "Gizmo"

    def test_per_location_reorder_point_wins(self, client, headers, create_product):
        product = create_product(reorder_point=0)
        response = change_stock(client, headers, product["id"], 8, "add", reorder_point=10)
        data = response.json()["data"]
        assert data["stockLevel"]["reorder_point"] == 10
        assert [a["alert_type"] for a in data["alerts"]] == ["low_stock"]

    def test_totals_span_locations(self, client, headers, create_product):
        product = create_product()
        change_stock(client, headers, product["id"], 4, "add")
        annex = client.post("/api/locations", json={"name": "Annex"}, headers=headers).json()["data"]["location"]
        change_stock(client, headers, product["id"], 6, "add", location_id=annex["id"])

        fetched = client.get(f"/api/products/{product['id']}", headers=headers).json()["data"]["product"]
        assert fetched["total_quantity"] == 10

    def test_unknown_product(self, client, headers):
        response = change_stock(client, headers, uuid4(), 1, "add")
        assert response.status_code == 404
