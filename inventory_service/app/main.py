import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.core.config import settings
from shared.core.database import Base, SessionLocal, engine
from shared.data.subscription_plans_insert import seed_subscription_plans
from shared.helpers.exception_handler import setup_exception_handlers
from shared.wrappers.csrf_middleware import CSRFMiddleware
from shared.wrappers.rate_limit_middleware import RateLimitMiddleware
from shared.wrappers.response_wrapper import JsonResponseMiddleware
from . import models  # noqa: F401  registers every table on Base
from .router import (
    alerts_router,
    audit_logs_router,
    billing_router,
    common_router,
    customers_router,
    dashboard_router,
    export_router,
    locations_router,
    products_router,
    purchase_orders_router,
    sales_router,
    stock_transfers_router,
    subscription_router,
    suppliers_router,
    team_router,
)

logging.basicConfig(level=settings.LOG_LEVEL,
                    format="%(asctime)s %(levelname)s %(name)s: %(message)s")

# Create all tables
Base.metadata.create_all(bind=engine)

with SessionLocal() as db:
    seed_subscription_plans(db)

app = FastAPI(title="Inventory Service API")

# Middlewares run outermost-last: CORS, envelope, rate limit, CSRF
app.add_middleware(CSRFMiddleware)
app.add_middleware(RateLimitMiddleware)
app.add_middleware(JsonResponseMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register exception handlers
setup_exception_handlers(app)

# Include routers
app.include_router(common_router.router)
app.include_router(products_router.router)
app.include_router(locations_router.router)
app.include_router(suppliers_router.router)
app.include_router(customers_router.router)
app.include_router(purchase_orders_router.router)
app.include_router(sales_router.router)
app.include_router(billing_router.router)
app.include_router(stock_transfers_router.router)
app.include_router(alerts_router.router)
app.include_router(dashboard_router.router)
app.include_router(export_router.router)
app.include_router(subscription_router.router)
app.include_router(team_router.router)
app.include_router(audit_logs_router.router)
