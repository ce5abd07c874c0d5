# storefront/shop/cart.py
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from sqlalchemy.orm import Session

from ..models import Cart, Product
from . import ShopError
from .catalog import load_products

log = logging.getLogger(__name__)


def line_key(product_id: str, size: Optional[str] = None, color: Optional[str] = None) -> str:
    return f"{product_id}-{size or 'nosize'}-{color or 'nocolor'}"


def make_line(product: Product, quantity: int, size: Optional[str] = None, color: Optional[str] = None) -> Dict[str, Any]:
    return {
        "id": line_key(product.id, size, color),
        "productId": product.id,
        "title": product.title,
        "price": round(float(product.price or 0.0), 2),
        "quantity": int(quantity),
        "size": size or None,
        "color": color or None,
        "image": product.primary_image,
        "stock": int(product.stock or 0),
    }


def find_line(cart: List[Dict[str, Any]], key: str) -> int:
    for i, line in enumerate(cart):
        if line.get("id") == key:
            return i
    return -1


def _refresh_from_product(line: Dict[str, Any], product: Product) -> Dict[str, Any]:
    return {
        **line,
        "title": product.title,
        "price": round(float(product.price or 0.0), 2),
        "image": product.primary_image,
        "stock": int(product.stock or 0),
    }


def add_item(
    cart: List[Dict[str, Any]],
    product: Product,
    quantity: int,
    size: Optional[str] = None,
    color: Optional[str] = None,
) -> List[Dict[str, Any]]:
    stock = int(product.stock or 0)
    if stock < quantity:
        raise ShopError(f"Insufficient stock. Only {stock} items available")

    out = [dict(x) for x in cart]
    idx = find_line(out, line_key(product.id, size, color))
    if idx == -1:
        out.append(make_line(product, quantity, size, color))
        return out

    new_qty = int(out[idx].get("quantity", 0) or 0) + quantity
    if new_qty > stock:
        raise ShopError(f"Cannot add more items. Maximum stock is {stock}")
    out[idx]["quantity"] = new_qty
    return out


def update_item(
    cart: List[Dict[str, Any]],
    product: Product,
    quantity: int,
    size: Optional[str] = None,
    color: Optional[str] = None,
) -> List[Dict[str, Any]]:
    out = [dict(x) for x in cart]
    idx = find_line(out, line_key(product.id, size, color))
    if idx == -1:
        raise ShopError("Item not found in cart", 404)

    stock = int(product.stock or 0)
    if quantity > stock:
        raise ShopError(f"Insufficient stock. Only {stock} items available")

    out[idx] = {**_refresh_from_product(out[idx], product), "quantity": int(quantity)}
    return out


def remove_item(
    cart: List[Dict[str, Any]],
    product_id: str,
    size: Optional[str] = None,
    color: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Drop every line of ``product_id``, or only one variant when size/color is given."""
    if size or color:
        key = line_key(product_id, size, color)
        out = [x for x in cart if x.get("id") != key]
    else:
        out = [x for x in cart if x.get("productId") != product_id]

    if len(out) == len(cart):
        raise ShopError("Item not found in cart", 404)
    return out


def revalidate(cart: List[Dict[str, Any]], products: Mapping[str, Product]) -> Tuple[List[Dict[str, Any]], bool]:
    """Refresh lines from the catalog and drop lines whose product is gone or inactive.

    Returns the new lines and whether any line was dropped.
    """
    out: List[Dict[str, Any]] = []
    for line in cart:
        product = products.get(str(line.get("productId") or ""))
        if product is None or not product.is_active:
            continue
        fresh = _refresh_from_product(line, product)
        fresh["size"] = line.get("size") or None
        fresh["color"] = line.get("color") or None
        out.append(fresh)
    return out, len(out) != len(cart)


def merge(
    user_cart: List[Dict[str, Any]],
    guest_cart: List[Dict[str, Any]],
    products: Mapping[str, Product],
) -> List[Dict[str, Any]]:
    """Fold a guest cart into a user cart.

    Matching lines add up, capped at current stock. Lines for unavailable
    products are dropped.
    """
    out, _ = revalidate(user_cart, products)
    for line in guest_cart:
        product = products.get(str(line.get("productId") or ""))
        if product is None or not product.is_active:
            continue
        stock = int(product.stock or 0)
        qty = int(line.get("quantity", 0) or 0)
        idx = find_line(out, line_key(product.id, line.get("size"), line.get("color")))
        if idx == -1:
            qty = min(qty, stock)
            if qty > 0:
                out.append(make_line(product, qty, line.get("size"), line.get("color")))
            continue
        out[idx]["quantity"] = min(int(out[idx].get("quantity", 0) or 0) + qty, stock)

    return [x for x in out if int(x.get("quantity", 0) or 0) > 0]


def product_ids(*carts: Iterable[Dict[str, Any]]) -> List[str]:
    seen: List[str] = []
    for cart in carts:
        for line in cart:
            pid = str(line.get("productId") or "")
            if pid and pid not in seen:
                seen.append(pid)
    return seen


def item_count(cart: List[Dict[str, Any]]) -> int:
    return sum(int(x.get("quantity", 0) or 0) for x in cart)


def cart_total(cart: List[Dict[str, Any]]) -> float:
    total = 0.0
    for x in cart:
        total += float(x.get("price", 0.0) or 0.0) * int(x.get("quantity", 0) or 0)
    return round(total, 2)


def build_summary(lines: List[Dict[str, Any]], currency_symbol: str = "₹") -> Tuple[str, float]:
    if not lines:
        return ("Your cart is empty.", 0.0)

    out: List[str] = []
    for i, line in enumerate(lines, start=1):
        qty = int(line.get("quantity", 1) or 1)
        name = str(line.get("title", "Item"))
        variant = ", ".join(v for v in (line.get("size"), line.get("color")) if v)
        if variant:
            name = f"{name} ({variant})"
        lt = float(line.get("price", 0.0) or 0.0) * qty
        out.append(f"{i}. x{qty} {name} = {currency_symbol}{lt:.2f}")

    total = cart_total(lines)
    return ("Order summary:\n" + "\n".join(out) + f"\n\nTotal: {currency_symbol}{total:.2f}", total)


# -------------------
# Persistence
# -------------------
def find_cart(db: Session, user_id: Optional[str] = None, session_id: Optional[str] = None) -> Optional[Cart]:
    if user_id:
        return db.query(Cart).filter(Cart.user_id == user_id).first()
    if session_id:
        return db.query(Cart).filter(Cart.session_id == session_id, Cart.user_id.is_(None)).first()
    return None


def get_or_create_cart(db: Session, user_id: Optional[str] = None, session_id: Optional[str] = None) -> Cart:
    cart = find_cart(db, user_id, session_id)
    if cart:
        return cart

    cart = Cart(user_id=user_id, session_id=None if user_id else session_id, items_json="[]")
    db.add(cart)
    db.commit()
    db.refresh(cart)
    return cart


def save_cart(db: Session, cart: Cart, items: List[Dict[str, Any]]) -> Cart:
    cart.items = items
    db.add(cart)
    db.commit()
    db.refresh(cart)
    return cart


def merge_guest_cart(db: Session, user_id: str, session_id: Optional[str]) -> Optional[Cart]:
    """Move a guest session's cart into the user's cart after sign-in."""
    guest = find_cart(db, session_id=session_id) if session_id else None
    if guest is None:
        return None

    guest_id, guest_items = guest.id, guest.items
    cart = get_or_create_cart(db, user_id=user_id)
    if guest_items:
        products = load_products(db, product_ids(cart.items, guest_items))
        cart.items = merge(cart.items, guest_items, products)
        db.add(cart)

    db.delete(guest)
    db.commit()
    db.refresh(cart)
    log.info("merged guest cart %s into cart of user %s", guest_id, user_id)
    return cart


def cart_payload(cart: Cart, items: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    items = cart.items if items is None else items
    return {
        "id": cart.id,
        "items": items,
        "itemCount": item_count(items),
        "totalAmount": f"{cart_total(items):.2f}",
    }
