# storefront/routes/auth.py
from __future__ import annotations

import logging
import secrets
from typing import Any, Dict
from urllib.parse import urlencode

from fastapi import APIRouter, BackgroundTasks, Cookie, Depends, HTTPException, Response
from fastapi.responses import RedirectResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..auth import cookie_options, create_token, hash_password, verify_password
from ..config import settings
from ..db import get_db
from ..deps import CART_SESSION_COOKIE, TOKEN_COOKIE, get_current_user
from ..email_templates import STORE_NAME, welcome_email
from ..emailer import send_email
from ..models import PROVIDER_LOCAL, ROLE_CUSTOMER, User
from ..oauth import OAuthError, authorization_url, fetch_profile, resolve_user
from ..responses import success_response
from ..schemas import LoginIn, RegisterIn
from ..shop.cart import merge_guest_cart

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

OAUTH_STATE_COOKIE = "oauth_state"


def issue_session(
    response: Response, db: Session, user: User, cart_session: str | None, token: str | None = None
) -> Dict[str, Any]:
    """Log ``user`` in: set the token cookie and pull in their guest cart."""
    token = token or create_token(user)
    response.set_cookie(key=TOKEN_COOKIE, value=token, **cookie_options())
    if cart_session:
        merge_guest_cart(db, user.id, cart_session)
        response.delete_cookie(CART_SESSION_COOKIE)
    return {"user": user.to_dict(), "token": token}


@router.post("/register", status_code=201)
def register(
    payload: RegisterIn,
    response: Response,
    background: BackgroundTasks,
    db: Session = Depends(get_db),
    cart_session: str | None = Cookie(default=None, alias=CART_SESSION_COOKIE),
):
    if db.query(User).filter(User.email == payload.email).first():
        raise HTTPException(status_code=400, detail="User already exists with this email")

    user = User(
        name=payload.name,
        email=payload.email,
        password_hash=hash_password(payload.password),
        role=ROLE_CUSTOMER,
        auth_provider=PROVIDER_LOCAL,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    log.info("registered user %s", user.id)

    background.add_task(send_email, user.email, f"Welcome to {STORE_NAME}", welcome_email(user.name))

    return success_response("Registration successful", issue_session(response, db, user, cart_session))


@router.post("/login")
def login(
    payload: LoginIn,
    response: Response,
    db: Session = Depends(get_db),
    cart_session: str | None = Cookie(default=None, alias=CART_SESSION_COOKIE),
):
    user = db.query(User).filter(User.email == payload.email).first()
    if not user or user.auth_provider != PROVIDER_LOCAL:
        raise HTTPException(status_code=401, detail="Invalid email or password")
    if not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    return success_response("Login successful", issue_session(response, db, user, cart_session))


@router.get("/google")
def google_login():
    if not settings.google_enabled:
        raise HTTPException(status_code=503, detail="Google sign-in is not configured")

    state = secrets.token_urlsafe(24)
    resp = RedirectResponse(authorization_url(state), status_code=302)
    resp.set_cookie(key=OAUTH_STATE_COOKIE, value=state, httponly=True, samesite="lax", max_age=600)
    return resp


@router.get("/google/callback")
def google_callback(
    code: str | None = None,
    state: str | None = None,
    db: Session = Depends(get_db),
    oauth_state: str | None = Cookie(default=None, alias=OAUTH_STATE_COOKIE),
    cart_session: str | None = Cookie(default=None, alias=CART_SESSION_COOKIE),
):
    error_url = f"{settings.frontend_url}?{urlencode({'auth': 'error'})}"

    if not settings.google_enabled or not code or not state or state != oauth_state:
        log.warning("rejected google callback (missing code or state mismatch)")
        return RedirectResponse(error_url, status_code=302)

    try:
        profile = fetch_profile(code)
    except OAuthError as e:
        log.error("google oauth failed: %s", e)
        return RedirectResponse(error_url, status_code=302)

    try:
        user = resolve_user(db, profile)
        token = create_token(user)
        success_url = f"{settings.frontend_url}?{urlencode({'token': token, 'auth': 'success'})}"
        resp = RedirectResponse(success_url, status_code=302)
        issue_session(resp, db, user, cart_session, token=token)
    except SQLAlchemyError:
        db.rollback()
        log.exception("google sign-in failed for %s", profile.email)
        return RedirectResponse(error_url, status_code=302)
    resp.delete_cookie(OAUTH_STATE_COOKIE)
    return resp


@router.post("/logout")
def logout(response: Response, user: User = Depends(get_current_user)):
    opts = cookie_options()
    response.delete_cookie(TOKEN_COOKIE, httponly=opts["httponly"], secure=opts["secure"], samesite=opts["samesite"])
    return success_response("Logout successful")


@router.get("/me")
def me(user: User = Depends(get_current_user)):
    return success_response("User retrieved successfully", {"user": user.to_dict()})
