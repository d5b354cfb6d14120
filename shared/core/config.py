import os
from typing import List, Optional
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Always load .env from root
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))
load_dotenv(os.path.join(BASE_DIR, ".env"))


class Settings(BaseSettings):
    APP_NAME: str = "StockAlert"
    LOG_LEVEL: str = "INFO"

    SERVICE_HOST: str = "0.0.0.0"
    AUTH_SERVICE_PORT: int = 8001
    INVENTORY_SERVICE_PORT: int = 8002
    SERVICE_RELOAD: bool = False

    JWT_SECRET: str = "change-in-production-min-32-characters!"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7 days
    SESSION_COOKIE_NAME: str = "auth_token"
    COOKIE_SECURE: bool = False
    BCRYPT_ROUNDS: int = 12

    CSRF_SECRET: str = "change-in-production"
    CSRF_TOKEN_MAX_AGE_SECONDS: int = 24 * 60 * 60

    RATE_LIMIT_REQUESTS: int = 100
    RATE_LIMIT_WINDOW_SECONDS: int = 60
    RATE_LIMIT_MAX_ENTRIES: int = 10000

    GOOGLE_USERINFO_URL: str = "https://www.googleapis.com/oauth2/v2/userinfo"

    DEFAULT_PLAN_NAME: str = "starter"
    TRIAL_DAYS: int = 14

    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:8080",
    ]

    DATABASE_URL: Optional[str] = None
    DB_USER: Optional[str] = None
    DB_PASS: Optional[str] = None
    DB_HOST: Optional[str] = "localhost"
    DB_PORT: Optional[str] = "5432"
    DB_NAME: Optional[str] = "stockalert"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()

SQLALCHEMY_DATABASE_URL = settings.DATABASE_URL or (
    f"postgresql+psycopg2://{settings.DB_USER}:{settings.DB_PASS}@{settings.DB_HOST}:{settings.DB_PORT}/{settings.DB_NAME}"
)
