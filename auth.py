"""
Authentication & authorization: password hashing, signed session tokens,
identity derivation and the FastAPI dependencies protecting routes.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Request, Response
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from config import Settings
from database import reading, transaction
from errors import AuthError, AuthorizationError, NotFound, ValidationError
from models import User

logger = logging.getLogger(__name__)

ADMIN_USERNAME = "admin"
ADMIN_ROLE = "admin"
MIN_PASSWORD_LENGTH = 8

pwd_context = CryptContext(
    schemes=["pbkdf2_sha256"],
    deprecated="auto",
)


def hash_password(password: str) -> str:
    """
    Hash a plain-text password using PBKDF2-SHA256.
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed: str) -> bool:
    """
    Verify a candidate password against a stored hash.
    """
    return pwd_context.verify(plain_password, hashed)


@dataclass
class Identity:
    """Who the caller is, as carried by a valid session token."""

    id: int
    username: str
    email: str
    created_at: Optional[str]
    is_admin: bool

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "created_at": self.created_at,
            "isAdmin": self.is_admin,
        }


def is_admin_user(user: User, settings: Settings) -> bool:
    if settings.admin_by_role:
        return user.role == ADMIN_ROLE
    return user.username == ADMIN_USERNAME


def format_created_at(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.strftime("%Y-%m-%d %H:%M:%S")


def create_token(user: User, settings: Settings) -> str:
    expires = datetime.now(timezone.utc) + timedelta(
        seconds=settings.token_expiry_seconds
    )
    claims = {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "created_at": format_created_at(user.created_at),
        "isAdmin": is_admin_user(user, settings),
        "exp": expires,
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_claims(settings: Settings, token: Optional[str]) -> Optional[dict]:
    """Raw claims of a valid token, or None."""
    if not token:
        return None
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def validate(settings: Settings, token: Optional[str]) -> Optional[Identity]:
    """
    Verify signature and expiry and return the caller's Identity.
    Any problem with the token yields None; this never raises.
    """
    payload = decode_claims(settings, token)
    if payload is None:
        return None
    try:
        return Identity(
            id=payload["id"],
            username=payload["username"],
            email=payload.get("email"),
            created_at=payload.get("created_at"),
            is_admin=bool(payload.get("isAdmin")),
        )
    except (KeyError, TypeError):
        return None


def login(db: Session, settings: Settings, username, password):
    """Check credentials and return ``(user, token)``."""
    if not isinstance(username, str) or not isinstance(password, str):
        raise ValidationError("Username and password are required", key="message")
    if not username or not password:
        raise ValidationError("Username and password are required", key="message")

    with reading(db):
        user = db.query(User).filter(User.username == username).first()
    if user is None or not verify_password(password, user.password):
        logger.info("Failed login attempt for %r", username)
        raise AuthError("Invalid username or password")

    logger.info("Login successful - JWT issued for %s", user.username)
    return user, create_token(user, settings)


def change_password(
    db: Session, settings: Settings, identity: Identity, new_password
) -> str:
    """
    Replace the caller's password and return a freshly issued token.
    The current password is deliberately not asked for.
    """
    if not new_password:
        raise ValidationError("New password is required", key="message")
    if not isinstance(new_password, str) or len(new_password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"New password must be at least {MIN_PASSWORD_LENGTH} characters",
            key="message",
        )

    with transaction(db):
        user = db.query(User).filter(User.id == identity.id).first()
        if user is None:
            raise NotFound("User not found", key="message")
        user.password = hash_password(new_password)

    logger.info("Password changed for %s", user.username)
    return create_token(user, settings)


# ---------------- Request plumbing ----------------


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def token_from_request(request: Request, settings: Settings) -> Optional[str]:
    """Bearer header first, then the session cookie."""
    header = request.headers.get("authorization")
    if header and header.startswith("Bearer "):
        return header[len("Bearer "):]
    return request.cookies.get(settings.cookie_name)


def set_session_cookie(response: Response, settings: Settings, token: str) -> None:
    response.set_cookie(
        settings.cookie_name,
        token,
        max_age=settings.token_expiry_seconds,
        httponly=settings.cookie_httponly,
        secure=False,
        samesite="lax",
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(settings.cookie_name)


def require_auth(
    request: Request, settings: Settings = Depends(get_settings)
) -> Identity:
    identity = validate(settings, token_from_request(request, settings))
    if identity is None:
        raise AuthError()
    return identity


def require_admin(identity: Identity = Depends(require_auth)) -> Identity:
    if not identity.is_admin:
        raise AuthorizationError()
    return identity


def require_reviewer(
    identity: Identity = Depends(require_auth),
    settings: Settings = Depends(get_settings),
) -> Identity:
    """Approve/reject gate: any logged-in user unless review is admin-only."""
    if settings.review_requires_admin and not identity.is_admin:
        raise AuthorizationError()
    return identity
