# storefront/schemas.py
"""
Request payloads.

These pydantic models are the validation layer of the API: anything that
reaches a router has already passed the field-level rules below.
"""
from __future__ import annotations

import json
import re
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from .models import FEATURE_TAGS

_PASSWORD_RE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")


def _normalize_email(v: str) -> str:
    return (v or "").strip().lower()


def _strip_or_none(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = str(v).strip()
    return v or None


def parse_list_field(value: Any) -> Any:
    """Accept a JSON array string, a comma-separated string or a list."""
    if value is None or isinstance(value, list):
        return value
    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return []
        if raw.startswith("["):
            try:
                return json.loads(raw)
            except ValueError:
                return value
        return [p.strip() for p in raw.split(",") if p.strip()]
    return value


# -------------------
# Auth
# -------------------
class RegisterIn(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6)

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("email", mode="after")
    @classmethod
    def _email(cls, v: str) -> str:
        return _normalize_email(v)

    @field_validator("password")
    @classmethod
    def _password_strength(cls, v: str) -> str:
        if not _PASSWORD_RE.match(v):
            raise ValueError(
                "Password must contain at least one lowercase letter, one uppercase letter, and one number"
            )
        return v


class LoginIn(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email", mode="after")
    @classmethod
    def _email(cls, v: str) -> str:
        return _normalize_email(v)


class AdminLoginIn(LoginIn):
    password: str = Field(..., min_length=6)


# -------------------
# Products
# -------------------
class ProductIn(BaseModel):
    title: str = Field(..., min_length=3, max_length=255)
    description: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    stock: int = Field(..., ge=0)
    category: Optional[str] = Field(None, max_length=100)
    sizeOptions: List[str] = Field(default_factory=list)
    colorOptions: List[str] = Field(default_factory=list)
    feature: List[str] = Field(default_factory=list)

    @field_validator("title", "description", mode="before")
    @classmethod
    def _strip(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("category", mode="before")
    @classmethod
    def _category(cls, v: Any) -> Any:
        return _strip_or_none(v)

    @field_validator("sizeOptions", "colorOptions", "feature", mode="before")
    @classmethod
    def _lists(cls, v: Any) -> Any:
        parsed = parse_list_field(v)
        return [] if parsed is None else parsed

    @field_validator("feature")
    @classmethod
    def _features(cls, v: List[str]) -> List[str]:
        return validate_features(v)


class ProductUpdateIn(BaseModel):
    title: Optional[str] = Field(None, min_length=3, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    price: Optional[float] = Field(None, ge=0)
    stock: Optional[int] = Field(None, ge=0)
    category: Optional[str] = Field(None, max_length=100)
    sizeOptions: Optional[List[str]] = None
    colorOptions: Optional[List[str]] = None
    feature: Optional[List[str]] = None
    existingImages: Optional[List[str]] = None

    @field_validator("title", "description", "category", mode="before")
    @classmethod
    def _strip(cls, v: Any) -> Any:
        return _strip_or_none(v)

    @field_validator("sizeOptions", "colorOptions", "feature", "existingImages", mode="before")
    @classmethod
    def _lists(cls, v: Any) -> Any:
        return parse_list_field(v)

    @field_validator("feature")
    @classmethod
    def _features(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return None if v is None else validate_features(v)


def validate_features(values: List[str]) -> List[str]:
    invalid = [f for f in values if f not in FEATURE_TAGS]
    if invalid:
        raise ValueError(
            f"Invalid features: {', '.join(invalid)}. Valid features are: {', '.join(FEATURE_TAGS)}"
        )
    return values


# -------------------
# Cart
# -------------------
class CartAddIn(BaseModel):
    productId: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=1)
    size: Optional[str] = None
    color: Optional[str] = None

    @field_validator("size", "color", mode="before")
    @classmethod
    def _trim(cls, v: Any) -> Any:
        return _strip_or_none(v)


class CartUpdateIn(BaseModel):
    quantity: int = Field(..., ge=1)
    size: Optional[str] = None
    color: Optional[str] = None

    @field_validator("size", "color", mode="before")
    @classmethod
    def _trim(cls, v: Any) -> Any:
        return _strip_or_none(v)


# -------------------
# Orders
# -------------------
class OrderItemIn(BaseModel):
    productId: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=1)
    size: Optional[str] = None
    color: Optional[str] = None


class ShippingAddressIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    pincode: str = Field(..., min_length=1)


class OrderIn(BaseModel):
    # omitted -> check out the caller's cart
    items: Optional[List[OrderItemIn]] = Field(None, min_length=1)
    shippingAddress: ShippingAddressIn
    paymentMethod: str = Field(..., min_length=1)
    notes: Optional[str] = None


class OrderStatusIn(BaseModel):
    status: str
