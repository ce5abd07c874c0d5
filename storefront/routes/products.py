# storefront/routes/products.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Type, TypeVar

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session

from ..config import settings
from ..db import get_db
from ..deps import require_admin
from ..models import Product, User
from ..responses import paginated_response, success_response
from ..schemas import ProductIn, ProductUpdateIn
from ..shop import catalog
from ..storage import StorageError, delete_image, save_image

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/products", tags=["products"])

M = TypeVar("M", bound=BaseModel)


def _parse_form(model: Type[M], fields: Dict[str, Any]) -> M:
    """Run multipart form fields through a payload model."""
    try:
        return model(**{k: v for k, v in fields.items() if v is not None})
    except ValidationError as e:
        raise RequestValidationError(e.errors()) from e


def _store_uploads(files: List[UploadFile], existing: int = 0) -> List[str]:
    files = [f for f in (files or []) if f is not None and f.filename]
    if existing + len(files) > settings.max_upload_images:
        raise HTTPException(
            status_code=400,
            detail=f"File upload error: at most {settings.max_upload_images} images are allowed",
        )
    for f in files:
        if not (f.content_type or "").startswith("image/"):
            raise HTTPException(status_code=400, detail=f"File upload error: {f.filename} is not an image")

    try:
        return [save_image(f.file.read(), f.filename) for f in files]
    except StorageError as e:
        raise HTTPException(status_code=502, detail=f"File upload error: {e}") from e


# -------------------
# Public catalog
# -------------------
@router.get("")
def list_products(
    page: Optional[int] = None,
    limit: Optional[int] = None,
    search: str = "",
    category: str = "",
    feature: str = "",
    sortBy: str = "createdAt",
    sortOrder: str = "DESC",
    minPrice: Optional[float] = None,
    maxPrice: Optional[float] = None,
    db: Session = Depends(get_db),
):
    page, limit = catalog.page_params(page, limit, 12)
    filters = catalog.ProductFilters(
        page=page,
        limit=limit,
        search=search.strip(),
        category=category.strip(),
        feature=feature.strip(),
        sort_by=sortBy,
        sort_order=sortOrder,
        min_price=minPrice,
        max_price=maxPrice,
    )
    rows, total = catalog.search_products(db, filters)
    return paginated_response("Products retrieved successfully", [p.to_dict() for p in rows], page, limit, total)


@router.get("/categories")
def list_categories(db: Session = Depends(get_db)):
    return success_response("Categories retrieved successfully", catalog.categories(db))


@router.get("/feature/{feature}")
def list_by_feature(
    feature: str,
    page: Optional[int] = None,
    limit: Optional[int] = None,
    db: Session = Depends(get_db),
):
    page, limit = catalog.page_params(page, limit, 12)
    rows, total = catalog.products_by_feature(db, feature, page, limit)
    return paginated_response(
        f"{feature} products retrieved successfully", [p.to_dict() for p in rows], page, limit, total
    )


@router.get("/{product_id}")
def get_product(product_id: str, db: Session = Depends(get_db)):
    product = catalog.get_active(db, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return success_response("Product retrieved successfully", product.to_dict())


# -------------------
# Admin
# -------------------
@router.post("", status_code=201)
def create_product(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    stock: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    sizeOptions: Optional[str] = Form(None),
    colorOptions: Optional[str] = Form(None),
    feature: Optional[str] = Form(None),
    images: List[UploadFile] = File(default=[]),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    payload = _parse_form(
        ProductIn,
        {
            "title": title,
            "description": description,
            "price": price,
            "stock": stock,
            "category": category,
            "sizeOptions": sizeOptions,
            "colorOptions": colorOptions,
            "feature": feature,
        },
    )

    product = Product(
        title=payload.title,
        description=payload.description,
        price=payload.price,
        stock=payload.stock,
        category=payload.category or "General",
        size_options=payload.sizeOptions,
        color_options=payload.colorOptions,
        feature=payload.feature,
        images=_store_uploads(images),
    )
    db.add(product)
    db.commit()
    db.refresh(product)
    log.info("product %s created by %s", product.id, admin.id)
    return success_response("Product created successfully", product.to_dict())


@router.put("/{product_id}")
def update_product(
    product_id: str,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    stock: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    sizeOptions: Optional[str] = Form(None),
    colorOptions: Optional[str] = Form(None),
    feature: Optional[str] = Form(None),
    existingImages: Optional[str] = Form(None),
    images: List[UploadFile] = File(default=[]),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    payload = _parse_form(
        ProductUpdateIn,
        {
            "title": title,
            "description": description,
            "price": price,
            "stock": stock,
            "category": category,
            "sizeOptions": sizeOptions,
            "colorOptions": colorOptions,
            "feature": feature,
            "existingImages": existingImages,
        },
    )

    # no existingImages field -> keep every current image
    current = product.images
    if payload.existingImages is None:
        kept = current
    else:
        kept = [u for u in payload.existingImages if u in current]

    new_images = _store_uploads(images, existing=len(kept))
    for img in current:
        if img not in kept:
            delete_image(img)

    if payload.title is not None:
        product.title = payload.title
    if payload.description is not None:
        product.description = payload.description
    if payload.price is not None:
        product.price = payload.price
    if payload.stock is not None:
        product.stock = payload.stock
    if payload.category is not None:
        product.category = payload.category
    if payload.sizeOptions is not None:
        product.size_options = payload.sizeOptions
    if payload.colorOptions is not None:
        product.color_options = payload.colorOptions
    if payload.feature is not None:
        product.feature = payload.feature
    product.images = kept + new_images

    db.commit()
    db.refresh(product)
    log.info("product %s updated by %s", product.id, admin.id)
    return success_response("Product updated successfully", product.to_dict())


@router.delete("/{product_id}")
def delete_product(product_id: str, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    for img in product.images:
        delete_image(img)

    # soft delete: orders and carts still reference the row
    product.is_active = False
    db.commit()
    log.info("product %s deactivated by %s", product.id, admin.id)
    return success_response("Product deleted successfully")
