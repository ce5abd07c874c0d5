# storefront/auth.py
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from .config import settings
from .models import User


pwd = CryptContext(schemes=["argon2"], deprecated="auto")


class TokenError(Exception):
    """Raised when a token cannot be used to authenticate a request."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def hash_password(p: str) -> str:
    return pwd.hash(p)


def verify_password(p: str, h: str | None) -> bool:
    if not h:
        return False
    return pwd.verify(p, h)


def create_token(user: User) -> str:
    exp = datetime.now(timezone.utc) + timedelta(minutes=settings.jwt_expire_minutes)
    payload = {"userId": user.id, "email": user.email, "role": user.role, "exp": exp}
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_alg)


def decode_token(token: str) -> Dict[str, Any]:
    try:
        data = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_alg])
    except ExpiredSignatureError as e:
        raise TokenError("Token expired") from e
    except JWTError as e:
        raise TokenError("Invalid token") from e

    if not data.get("userId"):
        raise TokenError("Invalid token")
    return data


def cookie_options() -> Dict[str, Any]:
    # session cookie: no max_age, expires with the browser
    return {
        "httponly": True,
        "secure": settings.is_production,
        "samesite": "strict" if settings.is_production else "lax",
    }
