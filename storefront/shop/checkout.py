# storefront/shop/checkout.py
from __future__ import annotations

import logging
import secrets
import time
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..models import ORDER_STATUSES, Cart, Order, User
from . import ShopError
from .catalog import load_products

log = logging.getLogger(__name__)

_B36 = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def _base36(n: int) -> str:
    if n == 0:
        return "0"
    out = []
    while n:
        n, r = divmod(n, 36)
        out.append(_B36[r])
    return "".join(reversed(out))


def generate_order_number() -> str:
    stamp = _base36(int(time.time() * 1000))
    rand = "".join(secrets.choice(_B36) for _ in range(5))
    return f"ORD-{stamp}-{rand}"


def place_order(
    db: Session,
    user: User,
    items: List[Dict[str, Any]],
    shipping_address: Dict[str, Any],
    payment_method: str,
    notes: Optional[str] = None,
    cart: Optional[Cart] = None,
) -> Order:
    """Snapshot the requested lines into a pending order and take them out of stock.

    Product rows are locked for the length of the transaction, so two
    checkouts racing for the last unit cannot both succeed. When ``cart`` is
    given it is emptied in the same transaction.
    """
    if not items:
        raise ShopError("Order must contain at least one item")

    try:
        products = load_products(db, [str(x["productId"]) for x in items], lock=True)
        requested: Dict[str, int] = {}
        for x in items:
            requested[str(x["productId"])] = requested.get(str(x["productId"]), 0) + int(x["quantity"])

        if any(pid not in products or not products[pid].is_active for pid in requested):
            raise ShopError("Some products are not available")

        for pid, qty in requested.items():
            product = products[pid]
            if int(product.stock or 0) < qty:
                raise ShopError(f"Insufficient stock for {product.title}")

        total = 0.0
        lines: List[Dict[str, Any]] = []
        for x in items:
            product = products[str(x["productId"])]
            qty = int(x["quantity"])
            price = round(float(product.price or 0.0), 2)
            total += price * qty
            lines.append(
                {
                    "productId": product.id,
                    "title": product.title,
                    "price": price,
                    "quantity": qty,
                    "size": x.get("size") or None,
                    "color": x.get("color") or None,
                    "image": product.primary_image or None,
                }
            )

        for pid, qty in requested.items():
            products[pid].stock = int(products[pid].stock) - qty

        order = Order(
            user_id=user.id,
            order_number=generate_order_number(),
            items=lines,
            total_amount=round(total, 2),
            shipping_address=shipping_address,
            payment_method=payment_method,
            notes=notes or None,
            status="pending",
        )
        db.add(order)
        if cart is not None:
            cart.items = []
            db.add(cart)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(order)
    log.info("order %s placed by %s (%d lines, total %.2f)", order.order_number, user.id, len(lines), total)
    return order


def restore_stock(db: Session, order: Order) -> None:
    qty_by_product: Dict[str, int] = {}
    for line in order.items:
        pid = str(line.get("productId") or "")
        qty_by_product[pid] = qty_by_product.get(pid, 0) + int(line.get("quantity", 0) or 0)

    products = load_products(db, qty_by_product.keys(), lock=True)
    for pid, qty in qty_by_product.items():
        product = products.get(pid)
        if product is not None:
            product.stock = int(product.stock or 0) + qty


def cancel_order(db: Session, order: Order) -> Order:
    try:
        # status is re-read under the row lock so a concurrent cancel sees "cancelled"
        order = (
            db.query(Order)
            .filter(Order.id == order.id)
            .populate_existing()
            .with_for_update(of=Order)
            .one()
        )
        if order.status != "pending":
            raise ShopError("Only pending orders can be cancelled")

        order.status = "cancelled"
        restore_stock(db, order)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(order)
    log.info("order %s cancelled by customer", order.order_number)
    return order


def set_status(db: Session, order: Order, status: str) -> Order:
    if status not in ORDER_STATUSES:
        raise ShopError("Invalid order status")

    previous = order.status
    order.status = status
    db.commit()
    db.refresh(order)
    log.info("order %s status %s -> %s", order.order_number, previous, status)
    return order
