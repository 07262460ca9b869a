from __future__ import annotations

from typing import List

import pandas as pd

from .data.models import BasketLine, Order, PricingResult, Promotion

ORDER_TABLE_COLUMNS = [
    "order_id", "user_id", "created_at", "total_amount", "status", "status_changed_at", "shipping_address", "lines",
]
ORDER_LINE_COLUMNS = ["item_id", "item_name", "unit_price", "quantity", "subtotal"]
PROMOTION_TABLE_COLUMNS = ["promotion_id", "name", "type", "state", "tag", "valid_until"]


def orders_frame(orders: List[Order]) -> pd.DataFrame:
    """One row per order, in the order given."""
    rows = [
        {
            "order_id": o.order_id,
            "user_id": o.user_id,
            "created_at": o.created_at,
            "total_amount": round(o.total_amount, 2),
            "status": o.status.label,
            "status_changed_at": o.status_changed_at,
            "shipping_address": o.shipping_address,
            "lines": len(o.items),
        }
        for o in orders
    ]
    return pd.DataFrame(rows, columns=ORDER_TABLE_COLUMNS)


def order_lines_frame(order: Order) -> pd.DataFrame:
    rows = [
        {
            "item_id": it.item_id,
            "item_name": it.item_name,
            "unit_price": round(it.unit_price, 2),
            "quantity": it.quantity,
            "subtotal": round(it.subtotal, 2),
        }
        for it in order.items
    ]
    return pd.DataFrame(rows, columns=ORDER_LINE_COLUMNS)


def promotions_frame(promotions: List[Promotion]) -> pd.DataFrame:
    rows = [
        {
            "promotion_id": p.promotion_id,
            "name": p.name,
            "type": "Discount" if p.is_discount else "Full reduction",
            "state": "active" if p.active else "inactive",
            "tag": p.display_tag(),
            "valid_until": p.valid_until.strftime("%Y-%m-%d"),
        }
        for p in promotions
    ]
    return pd.DataFrame(rows, columns=PROMOTION_TABLE_COLUMNS)


def format_pricing_preview(basket: List[BasketLine], result: PricingResult) -> str:
    """Checkout confirmation text; amounts rounded to cents here only."""
    lines = ["========== Order preview =========="]
    for line in basket:
        lines.append(f"  {line.item.name} x{line.quantity} = {line.line_total:.2f}")
    lines.append("-----------------------------------")
    lines.append(f"Original total: {result.original_total:.2f}")
    if result.item_discounts:
        lines.append(f"Discounts: -{result.total_item_discount:.2f} ({', '.join(result.discount_tags)})")
        lines.append(f"Subtotal: {result.after_discount_total:.2f}")
    if result.total_reduction > 0:
        lines.append(f"Reductions: -{result.total_reduction:.2f} ({', '.join(result.reduction_tags)})")
    lines.append("===================================")
    payable = f"Payable: {result.final_total:.2f}"
    if result.total_savings > 0:
        payable += f" [saved {result.total_savings:.2f}]"
    lines.append(payable)
    return "\n".join(lines)


def format_order_detail(order: Order) -> str:
    header = [
        f"Order: {order.order_id}",
        f"User: {order.user_id}",
        f"Created: {order.created_at:%Y-%m-%d %H:%M:%S}",
        f"Status: {order.status.label} (since {order.status_changed_at:%Y-%m-%d %H:%M:%S})",
        f"Ship to: {order.shipping_address}",
    ]
    table = order_lines_frame(order).to_string(index=False)
    return "\n".join(header + ["", table, "", f"Total: {order.total_amount:.2f}"])
