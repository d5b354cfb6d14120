"""
Tests for the stock ledger reconciler.

The quantity rule is tested as a pure function; apply_stock_change runs
against its own SQLite engine with SAVEPOINT support so the retry path
can roll back a failed attempt.
"""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.exc import StaleDataError
from sqlalchemy.pool import StaticPool

from inventory_service.app.crud import stock_levels_crud
from inventory_service.app.crud.stock_levels_crud import apply_stock_change, compute_new_quantity
from inventory_service.app.models.locations import Location
from inventory_service.app.models.products import Product
from inventory_service.app.models.stock_history import StockHistory
from shared.core.database import Base, configure_sqlite_engine
from shared.models.organizations import Organization
from shared.utils.exceptions import ConflictError, NotFoundError


# =============================================================================
# Quantity rule
# =============================================================================


class TestComputeNewQuantity:

    @pytest.mark.parametrize("existing,delta,expected", [
        (0, 10, 10),
        (7, 3, 10),
        (5, 0, 5),
    ])
    def test_add_increments(self, existing, delta, expected):
        assert compute_new_quantity(existing, delta, "add") == expected

    @pytest.mark.parametrize("existing,delta,expected", [
        (10, 3, 7),
        (7, 7, 0),
        (7, 100, 0),
    ])
    def test_remove_clamps_at_zero(self, existing, delta, expected):
        assert compute_new_quantity(existing, delta, "remove") == expected

    @pytest.mark.parametrize("change_type", ["add", "remove", "set", "whatever"])
    def test_absent_row_takes_raw_delta(self, change_type):
        assert compute_new_quantity(None, 5, change_type) == 5

    def test_unknown_change_type_sets_verbatim(self):
        assert compute_new_quantity(40, 12, "set") == 12
        assert compute_new_quantity(40, -3, "adjust") == -3


# =============================================================================
# apply_stock_change
# =============================================================================


@pytest.fixture()
def session():
    engine = configure_sqlite_engine(create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool))
    Base.metadata.create_all(bind=engine)
    db = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


@pytest.fixture()
def stocked(session):
    org = Organization(name="Ledger Co")
    session.add(org)
    session.flush()
    product = Product(org_id=org.id, name="Bolt", sku="B-1", reorder_point=2)
    session.add(product)
    session.commit()
    return org, product


class TestApplyStockChange:

    def test_creates_primary_location_on_first_write(self, session, stocked):
        org, product = stocked
        level, _ = apply_stock_change(session, org.id, product.id, None, 10, "add")

        location = session.query(Location).filter(Location.org_id == org.id).one()
        assert location.name == "Main Warehouse"
        assert location.is_primary is True
        assert level.location_id == location.id
        assert level.quantity == 10
        assert level.version == 1

    def test_sequence_clamps_and_writes_history(self, session, stocked):
        org, product = stocked
        apply_stock_change(session, org.id, product.id, None, 10, "add")
        apply_stock_change(session, org.id, product.id, None, 3, "remove")
        level, _ = apply_stock_change(session, org.id, product.id, None, 100, "remove")

        assert level.quantity == 0
        history = (
            session.query(StockHistory)
            .filter(StockHistory.product_id == product.id)
            .order_by(StockHistory.created_at.asc())
            .all()
        )
        assert sorted((h.previous_quantity, h.new_quantity) for h in history) == [(0, 10), (7, 0), (10, 7)]

    def test_first_remove_stores_raw_delta(self, session, stocked):
        org, product = stocked
        level, _ = apply_stock_change(session, org.id, product.id, None, 5, "remove")
        assert level.quantity == 5

    def test_unknown_location_is_not_found(self, session, stocked):
        org, product = stocked
        other = Organization(name="Someone Else")
        session.add(other)
        session.flush()
        foreign = Location(org_id=other.id, name="Theirs", is_primary=True)
        session.add(foreign)
        session.commit()

        with pytest.raises(NotFoundError):
            apply_stock_change(session, org.id, product.id, foreign.id, 1, "add")

    def test_lost_race_is_retried(self, session, stocked, monkeypatch):
        org, product = stocked
        apply_stock_change(session, org.id, product.id, None, 10, "add")

        real_upsert = stock_levels_crud._upsert_stock_level
        calls = {"n": 0}

        def flaky_upsert(*args, **kwargs):
            calls["n"] += 1
            if calls["n"] == 1:
                raise StaleDataError("stock_levels row changed underneath")
            return real_upsert(*args, **kwargs)

        monkeypatch.setattr(stock_levels_crud, "_upsert_stock_level", flaky_upsert)
        level, _ = apply_stock_change(session, org.id, product.id, None, 4, "remove")

        assert calls["n"] == 2
        assert level.quantity == 6

    def test_gives_up_after_max_attempts(self, session, stocked, monkeypatch):
        org, product = stocked

        def always_stale(*args, **kwargs):
            raise StaleDataError("stock_levels row changed underneath")

        monkeypatch.setattr(stock_levels_crud, "_upsert_stock_level", always_stale)
        with pytest.raises(ConflictError):
            apply_stock_change(session, org.id, product.id, None, 1, "add")

    def test_duplicate_insert_is_retried(self, session, stocked, monkeypatch):
        org, product = stocked
        real_upsert = stock_levels_crud._upsert_stock_level
        calls = {"n": 0}

        def racing_insert(*args, **kwargs):
            calls["n"] += 1
            if calls["n"] == 1:
                raise IntegrityError(
                    "INSERT INTO stock_levels", {}, Exception("UNIQUE constraint failed: stock_levels.org_id"))
            return real_upsert(*args, **kwargs)

        monkeypatch.setattr(stock_levels_crud, "_upsert_stock_level", racing_insert)
        level, _ = apply_stock_change(session, org.id, product.id, None, 3, "add")

        assert calls["n"] == 2
        assert level.quantity == 3

    def test_other_store_errors_are_not_retried(self, session, stocked, monkeypatch):
        org, product = stocked
        calls = {"n": 0}

        def broken_insert(*args, **kwargs):
            calls["n"] += 1
            raise IntegrityError(
                "INSERT INTO stock_levels", {}, Exception("NOT NULL constraint failed: stock_levels.quantity"))

        monkeypatch.setattr(stock_levels_crud, "_upsert_stock_level", broken_insert)
        with pytest.raises(IntegrityError):
            apply_stock_change(session, org.id, product.id, None, 1, "add")
        assert calls["n"] == 1

    def test_alert_raised_once_per_window(self, session, stocked):
        org, product = stocked
        _, alerts = apply_stock_change(session, org.id, product.id, None, 2, "add")
        assert [a.alert_type for a in alerts] == ["low_stock"]

        _, alerts = apply_stock_change(session, org.id, product.id, None, 1, "remove")
        assert alerts == []

        _, alerts = apply_stock_change(session, org.id, product.id, None, 5, "remove")
        assert [a.alert_type for a in alerts] == ["out_of_stock"]
