from fastapi import APIRouter

from shared.helpers.csrf_helper import generate_csrf_token

router = APIRouter(prefix="/api", tags=["common"])


@router.get("/csrf-token")
def get_csrf_token():
    return {"csrfToken": generate_csrf_token()}


@router.get("/health")
def health():
    return {"status": "ok"}
