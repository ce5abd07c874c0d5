# storefront/routes/orders.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from sqlalchemy import desc
from sqlalchemy.orm import Session

from ..config import settings
from ..db import get_db
from ..deps import get_current_user, require_admin
from ..email_templates import order_email, order_status_email
from ..emailer import send_email
from ..models import ORDER_STATUSES, Order, User
from ..responses import paginated_response, success_response
from ..schemas import OrderIn, OrderStatusIn
from ..shop import cart as carts
from ..shop import checkout
from ..shop.catalog import page_params

router = APIRouter(prefix="/api/orders", tags=["orders"])


def _own_order(db: Session, order_id: str, user: User) -> Order:
    order = db.query(Order).filter(Order.id == order_id, Order.user_id == user.id).first()
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


def _send_order_emails(name: str, email: str, order_number: str, items: List[Dict[str, Any]], total: str) -> None:
    html = order_email(name, order_number, items, total)
    text, _total = carts.build_summary(items)

    send_email(email, f"Order Confirmed - #{order_number}", html, text)
    send_email(settings.admin_email, f"New Order Placed - #{order_number}", html, text)


@router.post("", status_code=201)
def create_order(
    payload: OrderIn,
    background: BackgroundTasks,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    cart = None
    if payload.items is None:
        cart = carts.find_cart(db, user_id=user.id)
        items = cart.items if cart else []
        if not items:
            raise HTTPException(status_code=400, detail="Order must contain at least one item")
    else:
        items = [i.model_dump() for i in payload.items]

    order = checkout.place_order(
        db,
        user,
        items,
        shipping_address=payload.shippingAddress.model_dump(),
        payment_method=payload.paymentMethod,
        notes=payload.notes,
        cart=cart,
    )

    total = f"{float(order.total_amount or 0.0):.2f}"
    background.add_task(_send_order_emails, user.name, user.email, order.order_number, order.items, total)

    return success_response(
        "Order placed successfully",
        {
            "order": {
                "id": order.id,
                "orderNumber": order.order_number,
                "totalAmount": total,
                "status": order.status,
                "createdAt": order.created_at.isoformat() if order.created_at else None,
            }
        },
    )


@router.get("/my-orders")
def my_orders(
    page: Optional[int] = None,
    limit: Optional[int] = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    page, limit = page_params(page, limit, 10)
    q = db.query(Order).filter(Order.user_id == user.id)
    total = q.count()
    rows = q.order_by(desc(Order.created_at), Order.id).offset((page - 1) * limit).limit(limit).all()
    return paginated_response("Orders retrieved successfully", [o.to_dict() for o in rows], page, limit, total)


# admin routes are declared before /{order_id} so "admin" is never taken for an id
@router.get("/admin/all")
def all_orders(
    page: Optional[int] = None,
    limit: Optional[int] = None,
    status: str = "",
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    page, limit = page_params(page, limit, 20)
    q = db.query(Order)
    if status:
        q = q.filter(Order.status == status)
    total = q.count()
    rows = q.order_by(desc(Order.created_at), Order.id).offset((page - 1) * limit).limit(limit).all()
    return paginated_response(
        "Orders retrieved successfully", [o.to_dict(include_user=True) for o in rows], page, limit, total
    )


@router.put("/admin/{order_id}/status")
def update_order_status(
    order_id: str,
    payload: OrderStatusIn,
    background: BackgroundTasks,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    if payload.status not in ORDER_STATUSES:
        raise HTTPException(status_code=400, detail="Invalid order status")

    order = db.query(Order).filter(Order.id == order_id).first()
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")

    order = checkout.set_status(db, order, payload.status)

    if order.user:
        background.add_task(
            send_email,
            order.user.email,
            f"Order #{order.order_number} is {order.status}",
            order_status_email(order.user.name, order.order_number, order.status),
        )

    return success_response(
        "Order status updated successfully",
        {"id": order.id, "orderNumber": order.order_number, "status": order.status},
    )


@router.get("/{order_id}")
def get_order(order_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    order = _own_order(db, order_id, user)
    return success_response("Order retrieved successfully", order.to_dict())


@router.put("/{order_id}/cancel")
def cancel_order(order_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    order = _own_order(db, order_id, user)
    checkout.cancel_order(db, order)
    return success_response("Order cancelled successfully")
