from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session
from shared.core import auth
from shared.core.database import get_db
from shared.core.schemas import UserToken
from shared.helpers.csrf_helper import generate_csrf_token
from ..schemas import authschema
from ..services import authservices

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post("/signup", response_model=authschema.AuthenticationResponse, status_code=201)
def signup(
        req: authschema.SignupRequest,
        request: Request,
        response: Response,
        db: Session = Depends(get_db)):
    return authservices.signup(request, response, db, req)


@router.post("/login", response_model=authschema.AuthenticationResponse)
def login(
        req: authschema.LoginRequest,
        request: Request,
        response: Response,
        db: Session = Depends(get_db)):
    return authservices.login(request, response, db, req)


@router.post("/google", response_model=authschema.AuthenticationResponse)
def google_login(
        req: authschema.GoogleAuthRequest,
        request: Request,
        response: Response,
        db: Session = Depends(get_db)):
    return authservices.google_login(request, response, db, req)


@router.post("/logout")
def logout(
        response: Response,
        db: Session = Depends(get_db),
        current_user: UserToken = Depends(auth.validate_current_token)):
    return authservices.logout_user(response, db, current_user)


@router.get("/me", response_model=authschema.MeResponse)
def me(
        db: Session = Depends(get_db),
        current_user: UserToken = Depends(auth.validate_current_token)):
    return authservices.get_me(db, current_user)


@router.get("/csrf-token")
def csrf_token():
    return {"csrfToken": generate_csrf_token()}


@router.get("/health")
def health():
    return {"status": "healthy"}
