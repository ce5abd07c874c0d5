# storefront/email_templates.py
from __future__ import annotations

from datetime import datetime, timezone
from html import escape
from typing import Any, Dict, List

from .config import settings

STORE_NAME = "Navrasi Store"


def base_template(title: str, content: str) -> str:
    year = datetime.now(timezone.utc).year
    return f"""
  <div style="font-family: 'Segoe UI', sans-serif; background:#f4f4f7; padding:30px;">
    <div style="max-width:600px; margin:0 auto; background:white; border-radius:10px; overflow:hidden;">
      <div style="padding:20px 30px; border-bottom:1px solid #eee;">
        <h2 style="margin:0; font-size:22px; color:#111;">{escape(title)}</h2>
      </div>
      <div style="padding:30px; font-size:16px; color:#333; line-height:1.6;">
        {content}
      </div>
      <div style="background:#fafafa; padding:18px; text-align:center; font-size:13px; color:#777;">
        &copy; {year} {STORE_NAME}. All rights reserved.
      </div>
    </div>
  </div>"""


def welcome_email(name: str) -> str:
    return base_template(
        f"Welcome to {STORE_NAME}",
        f"""
      <p>Hi <strong>{escape(name)}</strong>,</p>
      <p>Thank you for creating an account with <strong>{STORE_NAME}</strong>.</p>
      <p>Start exploring the latest trends now.</p>
      <p><a href="{escape(settings.frontend_url)}"
        style="padding:12px 20px; background:#111; color:white; text-decoration:none; border-radius:6px;">
        Visit Store</a></p>
      <p>If you didn't create an account, you can ignore this email.</p>
    """,
    )


def _item_row(item: Dict[str, Any]) -> str:
    variant = " | ".join(
        f"{label}: {escape(str(item[key]))}" for label, key in (("Size", "size"), ("Color", "color")) if item.get(key)
    )
    variant_html = f'<div style="font-size:13px; color:#666;">{variant}</div>' if variant else ""
    return f"""
        <tr style="border-bottom:1px solid #eee;">
          <td style="padding:12px 10px;">
            <div style="font-weight:600; color:#111;">{escape(str(item.get("title", "Item")))}</div>
            {variant_html}
          </td>
          <td align="center" style="padding:12px 10px;">{int(item.get("quantity", 0) or 0)}</td>
          <td align="right" style="padding:12px 10px;">&#8377;{float(item.get("price", 0.0) or 0.0):.2f}</td>
        </tr>"""


def order_email(name: str, order_number: str, items: List[Dict[str, Any]], total: str) -> str:
    rows = "".join(_item_row(i) for i in items)
    return base_template(
        "Your Order is Confirmed",
        f"""
      <p>Hi <strong>{escape(name)}</strong>,</p>
      <p>Your order <strong>#{escape(order_number)}</strong> has been received and is now being processed.</p>
      <h3 style="margin-top:25px; color:#111;">Items Summary</h3>
      <table width="100%" style="border-collapse:collapse; margin-top:10px;">
        <tr style="background:#fafafa; font-size:14px;">
          <th align="left" style="padding:10px;">Item</th>
          <th align="center" style="padding:10px;">Qty</th>
          <th align="right" style="padding:10px;">Price</th>
        </tr>
        {rows}
      </table>
      <div style="margin-top:18px; text-align:right; font-weight:600;">Total: &#8377;{escape(total)}</div>
      <p style="text-align:center; margin:28px 0;">
        <a href="{escape(settings.frontend_url)}/orders"
          style="background:#111; color:white; padding:12px 22px; border-radius:6px; text-decoration:none;">
          View Order Status</a>
      </p>
    """,
    )


def order_status_email(name: str, order_number: str, status: str) -> str:
    return base_template(
        "Order Update",
        f"""
      <p>Hi <strong>{escape(name)}</strong>,</p>
      <p>The status of your order <strong>#{escape(order_number)}</strong> is now
        <strong>{escape(status)}</strong>.</p>
    """,
    )
