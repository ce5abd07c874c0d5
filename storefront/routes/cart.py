# storefront/routes/cart.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..db import get_db
from ..deps import CartOwner, get_cart_owner
from ..responses import success_response
from ..schemas import CartAddIn, CartUpdateIn
from ..shop import cart as carts
from ..shop import catalog

router = APIRouter(prefix="/api/cart", tags=["cart"])


def _existing_cart(db: Session, owner: CartOwner):
    cart = carts.find_cart(db, owner.user_id, owner.session_id)
    if not cart:
        raise HTTPException(status_code=404, detail="Cart not found")
    return cart


def _available_product(db: Session, product_id: str):
    product = catalog.get_active(db, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found or unavailable")
    return product


@router.get("")
def get_cart(owner: CartOwner = Depends(get_cart_owner), db: Session = Depends(get_db)):
    cart = carts.get_or_create_cart(db, owner.user_id, owner.session_id)

    items = cart.items
    products = catalog.load_products(db, carts.product_ids(items))
    validated, dropped = carts.revalidate(items, products)
    if dropped:
        cart = carts.save_cart(db, cart, validated)

    return success_response("Cart retrieved successfully", {"cart": carts.cart_payload(cart, validated)})


@router.post("/add")
def add_to_cart(payload: CartAddIn, owner: CartOwner = Depends(get_cart_owner), db: Session = Depends(get_db)):
    product = _available_product(db, payload.productId)
    cart = carts.get_or_create_cart(db, owner.user_id, owner.session_id)

    items = carts.add_item(cart.items, product, payload.quantity, payload.size, payload.color)
    cart = carts.save_cart(db, cart, items)
    return success_response("Item added to cart successfully", {"cart": carts.cart_payload(cart)})


@router.put("/update/{product_id}")
def update_cart_item(
    product_id: str,
    payload: CartUpdateIn,
    owner: CartOwner = Depends(get_cart_owner),
    db: Session = Depends(get_db),
):
    cart = _existing_cart(db, owner)
    if carts.find_line(cart.items, carts.line_key(product_id, payload.size, payload.color)) == -1:
        raise HTTPException(status_code=404, detail="Item not found in cart")

    product = _available_product(db, product_id)
    items = carts.update_item(cart.items, product, payload.quantity, payload.size, payload.color)
    cart = carts.save_cart(db, cart, items)
    return success_response("Cart item updated successfully", {"cart": carts.cart_payload(cart)})


@router.delete("/remove/{product_id}")
def remove_from_cart(
    product_id: str,
    size: Optional[str] = None,
    color: Optional[str] = None,
    owner: CartOwner = Depends(get_cart_owner),
    db: Session = Depends(get_db),
):
    cart = _existing_cart(db, owner)
    items = carts.remove_item(cart.items, product_id, size, color)
    cart = carts.save_cart(db, cart, items)
    return success_response("Item removed from cart successfully", {"cart": carts.cart_payload(cart)})


@router.delete("/clear")
def clear_cart(owner: CartOwner = Depends(get_cart_owner), db: Session = Depends(get_db)):
    cart = _existing_cart(db, owner)
    cart = carts.save_cart(db, cart, [])
    return success_response("Cart cleared successfully", {"cart": carts.cart_payload(cart)})
