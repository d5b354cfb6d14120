from types import SimpleNamespace

from fastapi import FastAPI
from fastapi.testclient import TestClient

from shared.helpers.exception_handler import GENERIC_ERROR_MESSAGE, get_db_error_code, setup_exception_handlers
from shared.utils.exceptions import ConflictError, LimitReachedError
from shared.wrappers.response_wrapper import JsonResponseMiddleware


def build_app():
    app = FastAPI()
    app.add_middleware(JsonResponseMiddleware)
    setup_exception_handlers(app)

    @app.get("/boom")
    def boom():
        raise RuntimeError("connection string with a password in it")

    @app.get("/conflict")
    def conflict():
        raise ConflictError("Stock level was modified concurrently")

    @app.get("/limit")
    def limit():
        raise LimitReachedError("Limit reached", details={"limit_type": "products"})

    @app.get("/ok")
    def ok():
        return {"hello": "world"}

    return app


class TestDbErrorCode:

    def test_postgres_code(self):
        exc = SimpleNamespace(orig=SimpleNamespace(pgcode="23505"))
        assert get_db_error_code(exc) == "23505"

    def test_sqlite_messages(self):
        assert get_db_error_code(SimpleNamespace(
            orig="UNIQUE constraint failed: products.org_id, products.sku")) == "23505"
        assert get_db_error_code(SimpleNamespace(
            orig="FOREIGN KEY constraint failed")) == "23503"
        assert get_db_error_code(SimpleNamespace(
            orig="NOT NULL constraint failed: products.name")) == "23502"

    def test_unknown(self):
        assert get_db_error_code(SimpleNamespace(orig="disk I/O error")) is None


class TestHandlers:

    def setup_method(self):
        self.client = TestClient(build_app())

    def test_unhandled_error_is_generic(self):
        response = self.client.get("/boom")
        assert response.status_code == 500
        body = response.json()
        assert body["message"] == GENERIC_ERROR_MESSAGE
        assert "password" not in response.text

    def test_app_error_keeps_status_and_details(self):
        response = self.client.get("/limit")
        assert response.status_code == 403
        body = response.json()
        assert body["status"] == "Failure"
        assert body["data"] == {"limit_type": "products"}

        assert self.client.get("/conflict").status_code == 409

    def test_success_is_wrapped(self):
        body = self.client.get("/ok").json()
        assert body["status"] == "Success"
        assert body["data"] == {"hello": "world"}


class TestDatabaseErrors:

    def test_duplicate_sku_is_bad_request(self, client, headers, create_product):
        create_product(name="Widget", sku="W-1")
        response = client.post(
            "/api/products", json={"name": "Other", "sku": "W-1"}, headers=headers)
        assert response.status_code == 400
        assert response.json()["message"] == "A record with this information already exists"

    def test_validation_error_lists_fields(self, client, headers):
        response = client.post("/api/products", json={"sku": "X"}, headers=headers)
        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "Validation failed"
        assert any(d["field"] == "name" for d in body["data"])
