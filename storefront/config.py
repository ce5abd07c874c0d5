# storefront/config.py
from __future__ import annotations

import os

from dotenv import load_dotenv
from pydantic import BaseModel

# Load .env locally (safe in prod too)
load_dotenv()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, str(default))
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


def _env_str(name: str, default: str = "") -> str:
    return os.getenv(name, default).strip()


class Settings(BaseModel):
    environment: str = _env_str("ENVIRONMENT", "development").lower()
    database_url: str = _env_str("DATABASE_URL", "sqlite:///./storefront.db")
    log_level: str = _env_str("LOG_LEVEL", "INFO").upper()

    jwt_secret: str = _env_str("JWT_SECRET", "dev-secret-change-me")
    jwt_alg: str = _env_str("JWT_ALG", "HS256")
    # default 12h
    jwt_expire_minutes: int = _env_int("JWT_EXPIRE_MIN", 720)

    frontend_url: str = _env_str("FRONTEND_URL", "http://localhost:5173")

    uploads_dir: str = _env_str("UPLOADS_DIR", "uploads")
    max_upload_images: int = _env_int("MAX_UPLOAD_IMAGES", 5)

    cloudinary_cloud_name: str = _env_str("CLOUDINARY_CLOUD_NAME")
    cloudinary_api_key: str = _env_str("CLOUDINARY_API_KEY")
    cloudinary_api_secret: str = _env_str("CLOUDINARY_API_SECRET")

    smtp_host: str = _env_str("SMTP_HOST")
    smtp_port: int = _env_int("SMTP_PORT", 587)
    smtp_user: str = _env_str("SMTP_USER")
    smtp_password: str = _env_str("SMTP_PASSWORD")
    mail_from: str = _env_str("MAIL_FROM", "Navrasi Store <no-reply@localhost>")
    admin_email: str = _env_str("ADMIN_EMAIL", "admin@navrasi.com")

    google_client_id: str = _env_str("GOOGLE_CLIENT_ID")
    google_client_secret: str = _env_str("GOOGLE_CLIENT_SECRET")
    google_redirect_uri: str = _env_str(
        "GOOGLE_REDIRECT_URI", "http://localhost:8000/api/auth/google/callback"
    )

    low_stock_threshold: int = _env_int("LOW_STOCK_THRESHOLD", 5)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def google_enabled(self) -> bool:
        return bool(self.google_client_id and self.google_client_secret)

    @property
    def cloudinary_enabled(self) -> bool:
        return bool(self.cloudinary_cloud_name and self.cloudinary_api_key and self.cloudinary_api_secret)

    @property
    def smtp_enabled(self) -> bool:
        return bool(self.smtp_host)


settings = Settings()
