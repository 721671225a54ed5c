"""Authentication service — password hashing, tokens, account self-service"""
import calendar
import logging
from datetime import datetime, timedelta
from typing import Iterable

from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from app.config import get_settings
from app.exceptions import AuthenticationError, PermissionDeniedError, ValidationError
from app.models.user import User, ROLE_ADMIN, ROLE_CUSTOMER

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

MIN_PASSWORD_LENGTH = 8

# Deliberately identical for unknown email and wrong password
BAD_CREDENTIALS = "Incorrect email or password."


def hash_password(plain: str) -> str:
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def normalize_email(email: str) -> str:
    return email.lower().strip()


def validate_password(password: str) -> None:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")


def ensure_email_available(db: Session, email: str, exclude_user_id: int | None = None) -> None:
    """Raise ValidationError if another account already uses ``email``."""
    query = db.query(User).filter(User.email == normalize_email(email))
    if exclude_user_id is not None:
        query = query.filter(User.id != exclude_user_id)
    if query.first():
        raise ValidationError("A user with this email already exists")


# ── Tokens ───────────────────────────────────────────────────

def create_access_token(user_id: int) -> str:
    """Signed, time-limited token carrying the user id and its issue time."""
    settings = get_settings()
    now = datetime.utcnow()
    expire = now + timedelta(minutes=settings.jwt_expires_minutes)
    return jwt.encode(
        {"sub": str(user_id), "iat": calendar.timegm(now.utctimetuple()), "exp": expire},
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )


def resolve_token(db: Session, token: str) -> User:
    """
    Verify signature and expiry, then load the user fresh from the database.

    Role and status are never read from the token, so changes apply on the
    very next request.
    """
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
        user_id = int(payload.get("sub"))
        issued_at = int(payload.get("iat", 0))
    except (JWTError, TypeError, ValueError):
        raise AuthenticationError("Invalid token. Please log in again.")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise AuthenticationError("The user belonging to this token no longer exists.")
    if user.changed_password_after(issued_at):
        raise AuthenticationError("User recently changed password. Please log in again.")
    return user


def authorize(user: User, allowed_roles: Iterable[str]) -> User:
    if user.role not in allowed_roles:
        raise PermissionDeniedError("You do not have permission to perform this action.")
    return user


# ── Account operations ───────────────────────────────────────

def login(db: Session, email: str, password: str) -> tuple[User, str]:
    """Verify credentials and return (user, token)."""
    user = db.query(User).filter(User.email == normalize_email(email)).first()
    if not user or not verify_password(password, user.password_hash):
        logger.warning(f"Failed login attempt for {normalize_email(email)}")
        raise AuthenticationError(BAD_CREDENTIALS)
    return user, create_access_token(user.id)


def create_user(
    db: Session,
    name: str,
    email: str,
    password: str,
    role: str = ROLE_CUSTOMER,
    **fields,
) -> User:
    """Create a new account. Fails with ValidationError on a taken email."""
    if not name or not name.strip():
        raise ValidationError("Please provide a name")
    validate_password(password)
    ensure_email_available(db, email)
    user = User(
        name=name.strip(),
        email=normalize_email(email),
        password_hash=hash_password(password),
        role=role,
        **{k: v for k, v in fields.items() if v is not None},
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"Created {role} account {user.email}")
    return user


def register(db: Session, name: str, email: str, password: str) -> User:
    """Public sign-up. Always creates a customer."""
    return create_user(db, name, email, password, role=ROLE_CUSTOMER)


def change_password(db: Session, user: User, current_password: str, new_password: str) -> str:
    """Re-hash the password after checking the current one. Returns a fresh token."""
    if not verify_password(current_password or "", user.password_hash):
        raise AuthenticationError("Your current password is wrong.")
    validate_password(new_password)
    user.password_hash = hash_password(new_password)
    user.password_changed_at = datetime.utcnow()
    db.commit()
    logger.info(f"Password changed for user {user.id}")
    return create_access_token(user.id)


UPDATE_ME_FIELDS = ("name", "email", "phone", "location", "profile_picture")


def update_me(db: Session, user: User, changes: dict) -> User:
    """Partial profile update. Role and password are not reachable from here."""
    if changes.get("password") is not None:
        raise ValidationError("This route is not for password updates. Please use /update-password.")

    for field in UPDATE_ME_FIELDS:
        value = changes.get(field)
        if value is None:
            continue
        if field == "email":
            ensure_email_available(db, value, exclude_user_id=user.id)
            value = normalize_email(value)
        setattr(user, field, value)
    db.commit()
    db.refresh(user)
    return user


def seed_initial_user(db: Session) -> None:
    """Create the configured admin if there is no admin yet."""
    settings = get_settings()
    if not settings.initial_admin_email or not settings.initial_admin_password:
        return
    if db.query(User).filter(User.role == ROLE_ADMIN).first():
        return
    create_user(
        db,
        settings.initial_admin_name,
        settings.initial_admin_email,
        settings.initial_admin_password,
        role=ROLE_ADMIN,
    )
    from app.utils.logger import log
    log.info(f"Seeded initial admin user: {settings.initial_admin_email}")
