import hashlib
import hmac
import secrets
import time
from typing import Optional

from shared.core.config import settings

CSRF_HEADER_NAME = "X-CSRF-Token"


def _now_ms() -> int:
    return int(time.time() * 1000)


def sign_csrf_payload(nonce: str, timestamp: str, secret: Optional[str] = None) -> str:
    key = (secret or settings.CSRF_SECRET).encode("utf-8")
    message = f"{nonce}:{timestamp}".encode("utf-8")
    return hmac.new(key, message, hashlib.sha256).hexdigest()


def generate_csrf_token(now_ms: Optional[int] = None, secret: Optional[str] = None) -> str:
    """Issue a `nonce:timestamp:signature` token."""
    nonce = secrets.token_hex(32)
    timestamp = str(now_ms if now_ms is not None else _now_ms())
    signature = sign_csrf_payload(nonce, timestamp, secret)
    return f"{nonce}:{timestamp}:{signature}"


def validate_csrf_token(
        token: Optional[str],
        now_ms: Optional[int] = None,
        secret: Optional[str] = None,
        max_age_seconds: Optional[int] = None) -> bool:
    if not token:
        return False

    parts = token.split(":")
    if len(parts) != 3:
        return False

    nonce, timestamp, signature = parts
    if not nonce or not timestamp.isdigit():
        return False

    expected = sign_csrf_payload(nonce, timestamp, secret)
    if not hmac.compare_digest(signature, expected):
        return False

    max_age_ms = (max_age_seconds if max_age_seconds is not None
                  else settings.CSRF_TOKEN_MAX_AGE_SECONDS) * 1000
    age = (now_ms if now_ms is not None else _now_ms()) - int(timestamp)
    return age <= max_age_ms
