# app/main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.core.config import settings
from shared.core.database import Base, SessionLocal, engine
from shared.data.subscription_plans_insert import seed_subscription_plans
from shared.helpers.exception_handler import setup_exception_handlers
from shared.models import audit_logs, organizations, subscriptions, user_login_session, users  # noqa: F401
from shared.wrappers.csrf_middleware import CSRFMiddleware
from shared.wrappers.rate_limit_middleware import RateLimitMiddleware
from shared.wrappers.response_wrapper import JsonResponseMiddleware
from .routers import authrouter

# sign-in endpoints run before the client holds a CSRF token
CSRF_EXEMPT_PATHS = (
    "/api/auth/signup",
    "/api/auth/login",
    "/api/auth/google",
)

logging.basicConfig(level=settings.LOG_LEVEL,
                    format="%(asctime)s %(levelname)s %(name)s: %(message)s")

# Create tables
Base.metadata.create_all(bind=engine)

with SessionLocal() as db:
    seed_subscription_plans(db)

# This MUST exist for uvicorn
app = FastAPI(title="StockAlert Auth Service")

app.add_middleware(CSRFMiddleware, exempt_paths=CSRF_EXEMPT_PATHS)
app.add_middleware(RateLimitMiddleware)

# Custom JSON response wrapper middleware
app.add_middleware(JsonResponseMiddleware)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register exception handlers
setup_exception_handlers(app)

# Routers
app.include_router(authrouter.router)
