# storefront/deps.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from uuid import uuid4

from fastapi import Cookie, Depends, Header, HTTPException, Response
from sqlalchemy.orm import Session

from .auth import TokenError, decode_token
from .db import get_db
from .models import User

TOKEN_COOKIE = "token"
CART_SESSION_COOKIE = "cart_session"


def _bearer(authorization: str | None) -> str | None:
    if authorization and authorization.lower().startswith("bearer "):
        return authorization.split(" ", 1)[1].strip() or None
    return None


def request_token(
    authorization: str | None = Header(default=None),
    token: str | None = Cookie(default=None, alias=TOKEN_COOKIE),
) -> str | None:
    # cookie first, then the bearer header
    return token or _bearer(authorization)


def get_current_user(
    token: str | None = Depends(request_token),
    db: Session = Depends(get_db),
) -> User:
    if not token:
        raise HTTPException(status_code=401, detail="Authentication required")

    try:
        data = decode_token(token)
    except TokenError as e:
        raise HTTPException(status_code=401, detail=e.message)

    user = db.query(User).filter(User.id == data["userId"]).first()
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Admin access required")
    return user


def get_optional_user(
    token: str | None = Depends(request_token),
    db: Session = Depends(get_db),
) -> Optional[User]:
    if not token:
        return None
    try:
        data = decode_token(token)
    except TokenError:
        return None
    return db.query(User).filter(User.id == data["userId"]).first()


@dataclass
class CartOwner:
    user: Optional[User]
    session_id: Optional[str]

    @property
    def user_id(self) -> Optional[str]:
        return self.user.id if self.user else None


def get_cart_owner(
    response: Response,
    user: Optional[User] = Depends(get_optional_user),
    cart_session: str | None = Cookie(default=None, alias=CART_SESSION_COOKIE),
) -> CartOwner:
    """
    Signed-in users own their cart by user id.
    Everyone else gets a guest cart keyed by a cookie.
    """
    if user:
        return CartOwner(user=user, session_id=None)

    if not cart_session:
        cart_session = uuid4().hex

    # Refresh cookie (30 days)
    response.set_cookie(
        key=CART_SESSION_COOKIE,
        value=cart_session,
        httponly=True,
        samesite="lax",
        max_age=60 * 60 * 24 * 30,
    )
    return CartOwner(user=None, session_id=cart_session)
