from decimal import Decimal

from restopos.core.config import SERVICE_CHARGE_RATE, TAX_RATE
from restopos.schemas.order import OrderView

CURRENCY = "Rs."


def _money(amount: Decimal) -> str:
    return f"{CURRENCY} {Decimal(amount):.2f}"


def _percent(rate: Decimal) -> str:
    return f"{(rate * 100).normalize():f}%"


def format_receipt(order: OrderView) -> str:
    """Plain-text customer receipt. Derived output only; nothing is stored."""
    lines = [
        "RESTAURANT RECEIPT",
        "==================",
        f"Order #: {order.id[:8]}",
        f"Table: {order.table_number if order.table_number is not None else '-'}",
        f"Date: {order.created_at:%d/%m/%Y}",
        f"Time: {order.created_at:%H:%M:%S}",
        f"Status: {order.status.value.upper()}",
        "",
        "ITEMS:",
    ]
    for item in order.items:
        lines.append(f"{item.name} x{item.quantity} - {_money(item.total_price)}")
        if item.modifiers:
            lines.append(f"  Modifiers: {', '.join(item.modifiers)}")
    lines += [
        "",
        f"Subtotal: {_money(order.total)}",
        f"Tax ({_percent(TAX_RATE)}): {_money(order.tax)}",
        f"Service ({_percent(SERVICE_CHARGE_RATE)}): {_money(order.service_charge)}",
        f"Discount: {_money(order.discount)}",
        "",
        f"TOTAL: {_money(order.final_total)}",
        "",
        "Thank you for dining with us!",
    ]
    return "\n".join(lines)
