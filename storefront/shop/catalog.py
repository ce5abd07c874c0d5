# storefront/shop/catalog.py
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import asc, desc, func, or_
from sqlalchemy.orm import Query, Session

from ..models import FEATURE_TAGS, Product
from . import ShopError

SORTABLE = {
    "createdAt": Product.created_at,
    "price": Product.price,
    "title": Product.title,
    "stock": Product.stock,
}


@dataclass
class ProductFilters:
    page: int = 1
    limit: int = 12
    search: str = ""
    category: str = ""
    feature: str = ""
    sort_by: str = "createdAt"
    sort_order: str = "DESC"
    min_price: Optional[float] = None
    max_price: Optional[float] = None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def page_params(page: Optional[int], limit: Optional[int], default_limit: int) -> Tuple[int, int]:
    page = page if page and page > 0 else 1
    limit = limit if limit and limit > 0 else default_limit
    return page, limit


def active_products(db: Session) -> Query:
    return db.query(Product).filter(Product.is_active.is_(True))


def has_feature(feature: str):
    # feature tags are stored as a JSON array of quoted strings
    return Product.feature_json.like(f"%{json.dumps(feature)}%")


def search_products(db: Session, f: ProductFilters) -> Tuple[List[Product], int]:
    q = active_products(db)

    if f.search:
        pattern = f"%{f.search.lower()}%"
        q = q.filter(
            or_(
                func.lower(Product.title).like(pattern),
                func.lower(Product.description).like(pattern),
            )
        )
    if f.category:
        q = q.filter(Product.category == f.category)
    if f.feature:
        q = q.filter(has_feature(f.feature))
    if f.min_price is not None:
        q = q.filter(Product.price >= f.min_price)
    if f.max_price is not None:
        q = q.filter(Product.price <= f.max_price)

    total = q.count()

    column = SORTABLE.get(f.sort_by, Product.created_at)
    direction = asc if (f.sort_order or "").upper() == "ASC" else desc
    rows = q.order_by(direction(column), Product.id).offset(f.offset).limit(f.limit).all()
    return rows, total


def products_by_feature(db: Session, feature: str, page: int, limit: int) -> Tuple[List[Product], int]:
    if feature not in FEATURE_TAGS:
        raise ShopError(f"Invalid feature. Valid features are: {', '.join(FEATURE_TAGS)}")

    q = active_products(db).filter(has_feature(feature))
    total = q.count()
    rows = q.order_by(desc(Product.created_at), Product.id).offset((page - 1) * limit).limit(limit).all()
    return rows, total


def categories(db: Session) -> List[str]:
    rows = (
        db.query(Product.category)
        .filter(Product.is_active.is_(True))
        .group_by(Product.category)
        .order_by(Product.category)
        .all()
    )
    return [c for (c,) in rows if c]


def get_active(db: Session, product_id: str) -> Optional[Product]:
    return active_products(db).filter(Product.id == product_id).first()


def load_products(db: Session, ids: Iterable[str], lock: bool = False) -> Dict[str, Product]:
    ids = [i for i in ids if i]
    if not ids:
        return {}
    q = db.query(Product).filter(Product.id.in_(ids))
    if lock:
        q = q.with_for_update()
    return {p.id: p for p in q.all()}
