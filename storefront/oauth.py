# storefront/oauth.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlencode

import httpx
from sqlalchemy.orm import Session

from .config import settings
from .models import PROVIDER_GOOGLE, ROLE_CUSTOMER, User

log = logging.getLogger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v3/userinfo"


class OAuthError(Exception):
    pass


@dataclass
class GoogleProfile:
    id: str
    email: str
    name: str
    avatar: Optional[str] = None


def authorization_url(state: str) -> str:
    params = {
        "client_id": settings.google_client_id,
        "redirect_uri": settings.google_redirect_uri,
        "response_type": "code",
        "scope": "openid profile email",
        "state": state,
        "prompt": "select_account",
    }
    return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"


def fetch_profile(code: str) -> GoogleProfile:
    """Trade an authorization code for the user's Google profile."""
    try:
        with httpx.Client(timeout=10.0) as client:
            token_resp = client.post(
                GOOGLE_TOKEN_URL,
                data={
                    "code": code,
                    "client_id": settings.google_client_id,
                    "client_secret": settings.google_client_secret,
                    "redirect_uri": settings.google_redirect_uri,
                    "grant_type": "authorization_code",
                },
            )
            token_resp.raise_for_status()
            access_token = token_resp.json().get("access_token")
            if not access_token:
                raise OAuthError("Google did not return an access token")

            info_resp = client.get(GOOGLE_USERINFO_URL, headers={"Authorization": f"Bearer {access_token}"})
            info_resp.raise_for_status()
            info = info_resp.json()
    except httpx.HTTPError as e:
        raise OAuthError(f"Google OAuth request failed: {e}") from e

    sub = str(info.get("sub") or "").strip()
    email = str(info.get("email") or "").strip().lower()
    if not sub or not email:
        raise OAuthError("Google profile is missing id or email")

    return GoogleProfile(
        id=sub,
        email=email,
        name=str(info.get("name") or email.split("@")[0]),
        avatar=info.get("picture"),
    )


def resolve_user(db: Session, profile: GoogleProfile) -> User:
    """Find the account for a Google profile, linking or creating it as needed."""
    user = db.query(User).filter(User.google_id == profile.id).first()
    if user:
        return user

    user = db.query(User).filter(User.email == profile.email).first()
    if user:
        user.google_id = profile.id
        user.avatar = profile.avatar or user.avatar
        db.commit()
        db.refresh(user)
        log.info("linked google account to user %s", user.id)
        return user

    user = User(
        google_id=profile.id,
        name=profile.name[:100],
        email=profile.email,
        avatar=profile.avatar,
        auth_provider=PROVIDER_GOOGLE,
        is_email_verified=True,
        role=ROLE_CUSTOMER,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    log.info("created google user %s", user.id)
    return user
