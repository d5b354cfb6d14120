import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import inspect
from sqlalchemy.orm import Session

from shared.exporthelper import csv_download, json_download
from shared.utils.exceptions import NotFoundError, ValidationError
from ..models.alerts import Alert
from ..models.customers import Customer
from ..models.locations import Location
from ..models.products import Product
from ..models.purchase_orders import PurchaseOrder
from ..models.stock_history import StockHistory
from ..models.stock_transfers import StockTransfer
from ..models.suppliers import Supplier

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("csv", "json")

EXPORT_TABLES = {
    "products": Product,
    "locations": Location,
    "suppliers": Supplier,
    "customers": Customer,
    "purchase_orders": PurchaseOrder,
    "stock_transfers": StockTransfer,
    "stock_history": StockHistory,
    "alerts": Alert,
}

DATE_FILTERED_TABLES = {"purchase_orders", "stock_transfers", "stock_history"}


def export_filename(table: str, fmt: str, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    timestamp = now.isoformat().replace(":", "-").replace(".", "-")
    return f"stockalert-{table}-{timestamp}.{fmt}"


def get_export_rows(
        db: Session,
        org_id: UUID,
        table: str,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None) -> List[Dict]:
    model = EXPORT_TABLES[table]
    columns = inspect(model).column_attrs

    query = db.query(model).filter(model.org_id == org_id)
    if table in DATE_FILTERED_TABLES:
        if start_date:
            query = query.filter(model.created_at >= start_date)
        if end_date:
            query = query.filter(model.created_at <= end_date)

    return [
        {attr.columns[0].name: getattr(row, attr.key) for attr in columns}
        for row in query.order_by(model.created_at.asc()).all()
    ]


def export_table(
        db: Session,
        org_id: UUID,
        table: str = "products",
        fmt: str = "csv",
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None):
    if fmt not in EXPORT_FORMATS:
        raise ValidationError("Invalid format")
    if table not in EXPORT_TABLES:
        raise ValidationError("Invalid table")

    rows = get_export_rows(db, org_id, table, start_date, end_date)
    filename = export_filename(table, fmt)
    logger.info("Exporting %s rows of %s as %s for org %s",
                len(rows), table, fmt, org_id)

    if fmt == "json":
        return json_download(rows, filename)

    if not rows:
        raise NotFoundError("No data to export")

    columns = [attr.columns[0].name for attr in inspect(EXPORT_TABLES[table]).column_attrs]
    return csv_download(rows, filename, columns)
