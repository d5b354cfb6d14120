from decimal import Decimal
from uuid import uuid4

import pytest


def add_stock(client, headers, product_id, quantity, location_id=None):
    payload = {"quantity": quantity, "change_type": "add"}
    if location_id:
        payload["location_id"] = location_id
    response = client.post(f"/api/products/{product_id}/stock", json=payload, headers=headers)
    assert response.status_code == 201, response.text


def stock_quantity(client, headers, product_id):
    levels = client.get(f"/api/products/{product_id}/stock", headers=headers).json()["data"]["stockLevels"]
    return sum(l["quantity"] for l in levels)


@pytest.fixture()
def bolt(client, headers, create_product):
    product = create_product(name="Bolt", sku="B-1", unit_cost="2.00", selling_price="5.00", reorder_point=0)
    add_stock(client, headers, product["id"], 10)
    return product


@pytest.fixture()
def customer(client, headers):
    response = client.post(
        "/api/customers", json={"name": "Carla", "email": "carla@shop.example"}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]["customer"]


def sell(client, headers, items, **fields):
    payload = {"items": items}
    payload.update(fields)
    return client.post("/api/sales", json=payload, headers=headers)


# =============================================================================
# Sales
# =============================================================================


class TestCreateSale:

    def test_sale_takes_stock_and_totals(self, client, headers, bolt, customer):
        response = sell(client, headers, [
            {"product_id": bolt["id"], "quantity": 3, "unit_price": "5.00", "discount": "1.00"},
        ], customer_id=customer["id"], payment_method="cash")
        assert response.status_code == 201, response.text

        sale = response.json()["data"]["sale"]
        assert sale["sale_number"].startswith("SALE-")
        assert Decimal(sale["subtotal"]) == Decimal("14.00")
        assert Decimal(sale["total"]) == Decimal("14.00")
        assert Decimal(sale["tax_amount"]) == Decimal("0")
        assert Decimal(sale["cost_of_goods"]) == Decimal("6.00")
        assert Decimal(sale["gross_profit"]) == Decimal("8.00")
        assert sale["payment_status"] == "paid"
        assert sale["customer_name"] == "Carla"
        assert [(i["product_name"], i["quantity"]) for i in sale["items"]] == [("Bolt", 3)]

        assert stock_quantity(client, headers, bolt["id"]) == 7

    def test_history_names_the_sale(self, client, headers, bolt):
        sale = sell(client, headers, [
            {"product_id": bolt["id"], "quantity": 2, "unit_price": "5"}]).json()["data"]["sale"]

        history = client.get(f"/api/products/{bolt['id']}/history", headers=headers).json()["data"]["history"]
        removals = [h for h in history if h["change_type"] == "remove"]
        assert len(removals) == 1
        assert removals[0]["notes"] == f"Sale {sale['sale_number']}"
        assert removals[0]["quantity_change"] == -2
        assert removals[0]["new_quantity"] == 8

    def test_items_required(self, client, headers):
        response = client.post("/api/sales", json={}, headers=headers)
        assert response.status_code == 400
        assert response.json()["message"] == "Sale items are required"

        response = sell(client, headers, [])
        assert response.status_code == 400

    def test_insufficient_stock(self, client, headers, bolt):
        response = sell(client, headers, [
            {"product_id": bolt["id"], "quantity": 11, "unit_price": "5"}])
        assert response.status_code == 400
        assert response.json()["message"] == "Insufficient stock for Bolt"
        assert stock_quantity(client, headers, bolt["id"]) == 10

    def test_lines_for_one_product_are_summed(self, client, headers, bolt):
        response = sell(client, headers, [
            {"product_id": bolt["id"], "quantity": 6, "unit_price": "5"},
            {"product_id": bolt["id"], "quantity": 5, "unit_price": "5"},
        ])
        assert response.status_code == 400
        assert stock_quantity(client, headers, bolt["id"]) == 10

    def test_never_stocked_product(self, client, headers, bolt, create_product):
        empty = create_product(name="Empty", reorder_point=0)
        response = sell(client, headers, [
            {"product_id": bolt["id"], "quantity": 1, "unit_price": "5"},
            {"product_id": empty["id"], "quantity": 1, "unit_price": "5"},
        ])
        assert response.status_code == 400
        assert response.json()["message"] == "Insufficient stock for Empty"
        assert stock_quantity(client, headers, bolt["id"]) == 10

    def test_unknown_product(self, client, headers, bolt):
        response = sell(client, headers, [
            {"product_id": str(uuid4()), "quantity": 1, "unit_price": "5"}])
        assert response.status_code == 400
        assert response.json()["message"] == "Unknown products in sale"

    def test_unknown_customer(self, client, headers, bolt):
        response = sell(client, headers, [
            {"product_id": bolt["id"], "quantity": 1, "unit_price": "5"}], customer_id=str(uuid4()))
        assert response.status_code == 404
        assert response.json()["message"] == "Customer not found"

    def test_discount_above_line_total(self, client, headers, bolt):
        response = sell(client, headers, [
            {"product_id": bolt["id"], "quantity": 1, "unit_price": "5", "discount": "6"}])
        assert response.status_code == 400
        assert response.json()["message"] == "Discount cannot exceed the line total"

    def test_sells_from_the_given_location(self, client, headers, bolt):
        side = client.post("/api/locations", json={"name": "Side"}, headers=headers).json()["data"]["location"]
        add_stock(client, headers, bolt["id"], 4, location_id=side["id"])

        response = sell(client, headers, [
            {"product_id": bolt["id"], "quantity": 4, "unit_price": "5", "location_id": side["id"]}])
        assert response.status_code == 201, response.text

        levels = client.get(f"/api/products/{bolt['id']}/stock", headers=headers).json()["data"]["stockLevels"]
        assert {l["location_id"]: l["quantity"] for l in levels}[side["id"]] == 0
        assert stock_quantity(client, headers, bolt["id"]) == 10

    def test_other_tenants_products_are_unknown(self, client, bolt, make_tenant, headers_for):
        _, stranger = make_tenant(email="stranger@acme.io")
        response = sell(client, headers_for(stranger), [
            {"product_id": bolt["id"], "quantity": 1, "unit_price": "5"}])
        assert response.status_code == 400


class TestListSales:

    def test_list_and_get(self, client, headers, bolt, customer):
        first = sell(client, headers, [
            {"product_id": bolt["id"], "quantity": 1, "unit_price": "5"}],
            customer_id=customer["id"]).json()["data"]["sale"]
        sell(client, headers, [{"product_id": bolt["id"], "quantity": 1, "unit_price": "5"}])

        sales = client.get("/api/sales", headers=headers).json()["data"]["sales"]
        assert len(sales) == 2

        mine = client.get(
            "/api/sales", params={"customer_id": customer["id"]}, headers=headers).json()["data"]["sales"]
        assert [s["id"] for s in mine] == [first["id"]]

        response = client.get(f"/api/sales/{first['id']}", headers=headers)
        assert response.status_code == 200
        assert response.json()["data"]["sale"]["sale_number"] == first["sale_number"]

    def test_missing_sale(self, client, headers):
        response = client.get(f"/api/sales/{uuid4()}", headers=headers)
        assert response.status_code == 404
        assert response.json()["message"] == "Sale not found"

    def test_tenant_isolation(self, client, headers, bolt, make_tenant, headers_for):
        sale = sell(client, headers, [
            {"product_id": bolt["id"], "quantity": 1, "unit_price": "5"}]).json()["data"]["sale"]
        _, stranger = make_tenant(email="stranger@acme.io")
        other = headers_for(stranger)
        assert client.get("/api/sales", headers=other).json()["data"]["sales"] == []
        assert client.get(f"/api/sales/{sale['id']}", headers=other).status_code == 404


# =============================================================================
# Billing
# =============================================================================


class TestBillingProducts:

    def test_only_stocked_products(self, client, headers, bolt, create_product):
        create_product(name="Empty", sku="E-1", reorder_point=0)
        products = client.get("/api/billing/products", headers=headers).json()["data"]["products"]
        assert [(p["name"], p["current_quantity"]) for p in products] == [("Bolt", 10)]
        assert Decimal(products[0]["selling_price"]) == Decimal("5.00")

    def test_search(self, client, headers, bolt, create_product):
        nut = create_product(name="Nut", sku="N-1", reorder_point=0)
        add_stock(client, headers, nut["id"], 3)

        names = [p["name"] for p in client.get(
            "/api/billing/products", params={"search": "n-1"}, headers=headers).json()["data"]["products"]]
        assert names == ["Nut"]

    def test_sold_out_product_drops_off(self, client, headers, bolt):
        sell(client, headers, [{"product_id": bolt["id"], "quantity": 10, "unit_price": "5"}])
        assert client.get("/api/billing/products", headers=headers).json()["data"]["products"] == []
