# storefront/storage.py
"""
Product image storage.

Images go to Cloudinary when CLOUDINARY_* credentials are configured and to
the local uploads directory (served under /uploads) otherwise.
"""
from __future__ import annotations

import io
import logging
import re
import time
from pathlib import Path
from uuid import uuid4

import cloudinary
import cloudinary.exceptions
import cloudinary.uploader

from .config import settings

log = logging.getLogger(__name__)

URL_PREFIX = "/uploads/"
CLOUDINARY_FOLDER = "navrasi-products"

_UNSAFE_RE = re.compile(r"[^A-Za-z0-9._-]+")


class StorageError(Exception):
    pass


def uploads_dir() -> Path:
    path = Path(settings.uploads_dir).resolve()
    path.mkdir(parents=True, exist_ok=True)
    return path


def _safe_filename(filename: str) -> str:
    name = Path(filename or "").name
    name = _UNSAFE_RE.sub("-", name).strip("-.")
    return name or "image"


def _use_cloudinary() -> bool:
    if not settings.cloudinary_enabled:
        return False
    cloudinary.config(
        cloud_name=settings.cloudinary_cloud_name,
        api_key=settings.cloudinary_api_key,
        api_secret=settings.cloudinary_api_secret,
        secure=True,
    )
    return True


def cloudinary_public_id(url: str) -> str:
    # .../<folder>/<name>.<ext> -> <folder>/<name>
    parts = url.split("/")
    return f"{parts[-2]}/{parts[-1].split('.')[0]}"


def _upload_cloudinary(data: bytes, filename: str) -> str:
    try:
        result = cloudinary.uploader.upload(
            io.BytesIO(data),
            folder=CLOUDINARY_FOLDER,
            resource_type="auto",
            transformation=[{"width": 1000, "height": 1000, "crop": "limit"}, {"quality": "auto"}],
        )
    except cloudinary.exceptions.Error as e:
        log.error("cloudinary upload of %s failed: %s", filename, e)
        raise StorageError(f"could not store {filename}") from e

    url = result["secure_url"]
    log.info("uploaded image %s to cloudinary as %s", filename, url)
    return url


def save_image(data: bytes, filename: str) -> str:
    """Store an uploaded image and return its public URL."""
    if _use_cloudinary():
        return _upload_cloudinary(data, filename)

    unique = f"{int(time.time() * 1000)}-{uuid4().hex[:12]}-{_safe_filename(filename)}"
    (uploads_dir() / unique).write_bytes(data)
    log.info("stored image %s (%d bytes)", unique, len(data))
    return URL_PREFIX + unique


def delete_image(url: str) -> bool:
    if not url:
        return False

    if "cloudinary" in url:
        if not _use_cloudinary():
            return False
        public_id = cloudinary_public_id(url)
        try:
            cloudinary.uploader.destroy(public_id)
        except cloudinary.exceptions.Error:
            log.exception("could not delete cloudinary image %s", public_id)
            return False
        log.info("deleted cloudinary image %s", public_id)
        return True

    if not url.startswith(URL_PREFIX):
        return False

    root = uploads_dir()
    path = (root / url[len(URL_PREFIX):]).resolve()
    if path.parent != root or not path.is_file():
        return False

    try:
        path.unlink()
    except OSError:
        log.exception("could not delete image %s", url)
        return False
    log.info("deleted image %s", url)
    return True
