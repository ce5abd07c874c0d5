# storefront/models.py
from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict, List
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from .db import Base

ROLE_ADMIN = "admin"
ROLE_CUSTOMER = "customer"

PROVIDER_LOCAL = "local"
PROVIDER_GOOGLE = "google"

ORDER_STATUSES = ("pending", "accepted", "rejected", "completed", "cancelled")

FEATURE_TAGS = ("Sales", "Trending", "Top Rated", "New Collection")


def _uuid() -> str:
    return str(uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def load_json_list(raw: str | None) -> List[Any]:
    try:
        v = json.loads(raw or "[]")
        return v if isinstance(v, list) else []
    except (TypeError, ValueError):
        return []


def load_json_dict(raw: str | None) -> Dict[str, Any]:
    try:
        v = json.loads(raw or "{}")
        return v if isinstance(v, dict) else {}
    except (TypeError, ValueError):
        return {}


def dump_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


class TimestampMixin:
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)


class User(TimestampMixin, Base):
    __tablename__ = "users"
    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=True)  # null for OAuth-only accounts
    role = Column(String(20), nullable=False, default=ROLE_CUSTOMER)
    auth_provider = Column(String(20), nullable=False, default=PROVIDER_LOCAL)
    google_id = Column(String(255), unique=True, nullable=True)
    avatar = Column(String(500), nullable=True)
    is_email_verified = Column(Boolean, nullable=False, default=False)

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "avatar": self.avatar,
            "authProvider": self.auth_provider,
            "isEmailVerified": bool(self.is_email_verified),
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


class Product(TimestampMixin, Base):
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_products_price_positive"),
        CheckConstraint("stock >= 0", name="ck_products_stock_positive"),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    title = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=False)
    price = Column(Numeric(10, 2, asdecimal=False), nullable=False, index=True)
    stock = Column(Integer, nullable=False, default=0)
    category = Column(String(100), nullable=True, default="General", index=True)
    is_active = Column(Boolean, nullable=False, default=True)

    size_options_json = Column(Text, nullable=False, default="[]")
    color_options_json = Column(Text, nullable=False, default="[]")
    feature_json = Column(Text, nullable=False, default="[]")
    images_json = Column(Text, nullable=False, default="[]")

    @property
    def size_options(self) -> List[str]:
        return load_json_list(self.size_options_json)

    @size_options.setter
    def size_options(self, value: List[str]) -> None:
        self.size_options_json = dump_json(list(value or []))

    @property
    def color_options(self) -> List[str]:
        return load_json_list(self.color_options_json)

    @color_options.setter
    def color_options(self, value: List[str]) -> None:
        self.color_options_json = dump_json(list(value or []))

    @property
    def feature(self) -> List[str]:
        return load_json_list(self.feature_json)

    @feature.setter
    def feature(self, value: List[str]) -> None:
        self.feature_json = dump_json(list(value or []))

    @property
    def images(self) -> List[str]:
        return load_json_list(self.images_json)

    @images.setter
    def images(self, value: List[str]) -> None:
        self.images_json = dump_json(list(value or []))

    @property
    def primary_image(self) -> str:
        imgs = self.images
        return imgs[0] if imgs else ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "price": round(float(self.price or 0.0), 2),
            "sizeOptions": self.size_options,
            "colorOptions": self.color_options,
            "feature": self.feature,
            "images": self.images,
            "stock": int(self.stock or 0),
            "category": self.category,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


class Cart(TimestampMixin, Base):
    __tablename__ = "carts"
    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=True, index=True)
    session_id = Column(String(64), nullable=True, index=True)
    items_json = Column(Text, nullable=False, default="[]")

    @property
    def items(self) -> List[Dict[str, Any]]:
        return load_json_list(self.items_json)

    @items.setter
    def items(self, value: List[Dict[str, Any]]) -> None:
        self.items_json = dump_json(list(value or []))


class Order(TimestampMixin, Base):
    __tablename__ = "orders"
    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    order_number = Column(String(40), unique=True, nullable=False, index=True)
    items_json = Column(Text, nullable=False, default="[]")
    total_amount = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    status = Column(String(20), nullable=False, default="pending", index=True)
    shipping_address_json = Column(Text, nullable=False, default="{}")
    payment_method = Column(String(50), nullable=False)
    notes = Column(Text, nullable=True)

    user = relationship("User", lazy="joined")

    @property
    def items(self) -> List[Dict[str, Any]]:
        return load_json_list(self.items_json)

    @items.setter
    def items(self, value: List[Dict[str, Any]]) -> None:
        self.items_json = dump_json(list(value or []))

    @property
    def shipping_address(self) -> Dict[str, Any]:
        return load_json_dict(self.shipping_address_json)

    @shipping_address.setter
    def shipping_address(self, value: Dict[str, Any]) -> None:
        self.shipping_address_json = dump_json(dict(value or {}))

    def to_dict(self, include_user: bool = False) -> Dict[str, Any]:
        out = {
            "id": self.id,
            "userId": self.user_id,
            "orderNumber": self.order_number,
            "items": self.items,
            "totalAmount": f"{float(self.total_amount or 0.0):.2f}",
            "status": self.status,
            "shippingAddress": self.shipping_address,
            "paymentMethod": self.payment_method,
            "notes": self.notes,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }
        if include_user:
            u = self.user
            out["user"] = {"id": u.id, "name": u.name, "email": u.email} if u else None
        return out
