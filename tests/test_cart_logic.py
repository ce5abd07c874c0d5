import pytest

from storefront.models import Product
from storefront.shop import ShopError
from storefront.shop import cart as carts


def _product(pid="p1", stock=5, price=10.0, active=True, title="Tee"):
    return Product(id=pid, title=title, description="d", price=price, stock=stock, is_active=active,
                   images=["https://img/1.jpg"])


def test_line_key():
    assert carts.line_key("p1") == "p1-nosize-nocolor"
    assert carts.line_key("p1", "M", None) == "p1-M-nocolor"
    assert carts.line_key("p1", "", "Red") == "p1-nosize-Red"


def test_add_item_does_not_mutate_input():
    p = _product()
    cart = carts.add_item([], p, 1)
    again = carts.add_item(cart, p, 2)
    assert cart[0]["quantity"] == 1
    assert again[0]["quantity"] == 3


def test_add_item_stock_limits():
    p = _product(stock=2)
    with pytest.raises(ShopError, match="Only 2 items available"):
        carts.add_item([], p, 3)
    cart = carts.add_item([], p, 2)
    with pytest.raises(ShopError, match="Maximum stock is 2"):
        carts.add_item(cart, p, 1)


def test_update_item_missing_line_is_404():
    with pytest.raises(ShopError) as exc:
        carts.update_item([], _product(), 1)
    assert exc.value.status_code == 404


def test_revalidate_refreshes_and_drops():
    p1 = _product("p1", price=12.0)
    p2 = _product("p2", active=False)
    lines = carts.add_item([], _product("p1", price=10.0), 1)
    lines += carts.add_item([], _product("p2"), 1)
    lines += [{"id": "p3-nosize-nocolor", "productId": "p3", "quantity": 1}]

    fresh, dropped = carts.revalidate(lines, {"p1": p1, "p2": p2})
    assert dropped is True
    assert [x["productId"] for x in fresh] == ["p1"]
    assert fresh[0]["price"] == 12.0


def test_merge_caps_at_stock_and_keeps_variants():
    p = _product("p1", stock=4)
    q = _product("q1", stock=1, title="Cap")
    user = carts.add_item([], p, 3, size="M")
    guest = carts.add_item([], p, 2, size="M")
    guest = carts.add_item(guest, p, 1, size="L")
    guest = carts.add_item(guest, q, 1)
    guest[-1]["quantity"] = 5  # stale guest line above current stock

    merged = carts.merge(user, guest, {"p1": p, "q1": q})
    qty = {x["id"]: x["quantity"] for x in merged}
    assert qty == {"p1-M-nocolor": 4, "p1-L-nocolor": 1, "q1-nosize-nocolor": 1}


def test_merge_drops_unavailable_and_sold_out():
    gone = _product("g", active=False)
    sold_out = _product("s", stock=0)
    guest = [
        {"id": "g-nosize-nocolor", "productId": "g", "quantity": 1},
        {"id": "s-nosize-nocolor", "productId": "s", "quantity": 1},
    ]
    assert carts.merge([], guest, {"g": gone, "s": sold_out}) == []


def test_totals_and_summary():
    lines = carts.add_item([], _product("p1", price=10.5), 2, size="M")
    lines = carts.add_item(lines, _product("p2", price=3.0, title="Socks"), 1)
    assert carts.item_count(lines) == 3
    assert carts.cart_total(lines) == 24.0

    text, total = carts.build_summary(lines)
    assert total == 24.0
    assert "x2 Tee (M)" in text
    assert text.endswith("Total: ₹24.00")
    assert carts.build_summary([]) == ("Your cart is empty.", 0.0)
