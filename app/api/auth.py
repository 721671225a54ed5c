"""Authentication API — register, login, current user, password and profile updates."""
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_current_user
from app.api.schemas import ApiModel
from app.api.serializers import envelope, user_out
from app.exceptions import ValidationError
from app.models.base import get_db
from app.models.user import User
from app.services import auth_service

router = APIRouter(prefix="/auth", tags=["auth"])


# ── Schemas ──────────────────────────────────────────────

class RegisterRequest(ApiModel):
    name: str
    email: str
    password: str


class LoginRequest(ApiModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UpdatePasswordRequest(ApiModel):
    password_current: str
    password: str


class UpdateMeRequest(ApiModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    profile_picture: Optional[str] = None
    # Accepted only so it can be rejected with a pointer to /update-password
    password: Optional[str] = None


def _token_response(user: User, token: str) -> dict:
    return {"status": "success", "token": token, "data": {"user": user_out(user)}}


# ── Auth endpoints ───────────────────────────────────────

@router.post("/register", status_code=201)
def register(body: RegisterRequest, db: Session = Depends(get_db)):
    """Public sign-up; the new account is always a customer."""
    user = auth_service.register(db, body.name, body.email, body.password)
    return _token_response(user, auth_service.create_access_token(user.id))


@router.post("/login")
def login(body: LoginRequest, db: Session = Depends(get_db)):
    """Exchange email + password for a bearer token."""
    if not body.email or not body.password:
        raise ValidationError("Please provide email and password.")
    user, token = auth_service.login(db, body.email, body.password)
    return _token_response(user, token)


@router.get("/me")
def me(user: User = Depends(get_current_user)):
    return envelope(user=user_out(user))


@router.patch("/update-password")
def update_password(
    body: UpdatePasswordRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Change password; the response carries a fresh token."""
    token = auth_service.change_password(db, user, body.password_current, body.password)
    return _token_response(user, token)


@router.patch("/update-me")
def update_me(
    body: UpdateMeRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    user = auth_service.update_me(db, user, body.changes())
    return envelope(user=user_out(user))
