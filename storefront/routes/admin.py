# storefront/routes/admin.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..auth import cookie_options, create_token, verify_password
from ..config import settings
from ..db import get_db
from ..deps import TOKEN_COOKIE, require_admin
from ..models import ORDER_STATUSES, Order, Product, User
from ..responses import success_response
from ..schemas import AdminLoginIn

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.post("/login")
def admin_login(payload: AdminLoginIn, response: Response, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == payload.email).first()
    if not user:
        raise HTTPException(status_code=401, detail="Invalid email or password")
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Access denied. Admin privileges required")
    if not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    token = create_token(user)
    response.set_cookie(key=TOKEN_COOKIE, value=token, **cookie_options())
    return success_response(
        "Login successful",
        {"user": {"id": user.id, "name": user.name, "email": user.email, "role": user.role}, "token": token},
    )


@router.post("/logout")
def admin_logout(response: Response, admin: User = Depends(require_admin)):
    opts = cookie_options()
    response.delete_cookie(TOKEN_COOKIE, httponly=opts["httponly"], secure=opts["secure"], samesite=opts["samesite"])
    return success_response("Logout successful")


@router.get("/me")
def admin_me(admin: User = Depends(require_admin)):
    return success_response("User retrieved successfully", {"user": admin.to_dict()})


@router.get("/stats")
def admin_stats(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    by_status = {s: 0 for s in ORDER_STATUSES}
    for status, count in db.query(Order.status, func.count(Order.id)).group_by(Order.status).all():
        by_status[status] = count

    revenue = (
        db.query(func.coalesce(func.sum(Order.total_amount), 0))
        .filter(Order.status.notin_(("cancelled", "rejected")))
        .scalar()
    )

    low_stock = (
        db.query(Product)
        .filter(Product.is_active.is_(True), Product.stock <= settings.low_stock_threshold)
        .order_by(Product.stock, Product.title)
        .all()
    )

    return success_response(
        "Stats retrieved successfully",
        {
            "users": db.query(func.count(User.id)).scalar(),
            "products": db.query(func.count(Product.id)).filter(Product.is_active.is_(True)).scalar(),
            "orders": sum(by_status.values()),
            "ordersByStatus": by_status,
            "revenue": f"{float(revenue or 0.0):.2f}",
            "lowStock": [{"id": p.id, "title": p.title, "stock": p.stock} for p in low_stock],
        },
    )
