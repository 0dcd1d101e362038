"""
Read-time joins for the order lists.

Orders, lines, menu items and tables are loaded as whole collections and
joined through id-indexed maps, never through live object references, so a
deleted menu item or table leaves a placeholder rather than a dangling link.
"""
from typing import Dict, Iterable, List, Optional

from restopos.core import store
from restopos.models import MenuItem, Order, OrderItem, OrderStatus, Table
from restopos.schemas.order import OrderItemView, OrderView

KITCHEN_STATUSES = (OrderStatus.PENDING, OrderStatus.IN_PROGRESS)


def index_by_id(records: Iterable) -> Dict[str, object]:
    return {r.id: r for r in records}


def group_items_by_order(items: Iterable[OrderItem]) -> Dict[str, List[OrderItem]]:
    grouped: Dict[str, List[OrderItem]] = {}
    for item in items:
        grouped.setdefault(item.order_id, []).append(item)
    return grouped


def build_order_view(
    order: Order,
    items: List[OrderItem],
    menu_by_id: Dict[str, MenuItem],
    table_by_id: Dict[str, Table],
) -> OrderView:
    table = table_by_id.get(order.table_id)
    lines = []
    for item in items:
        menu = menu_by_id.get(item.menu_item_id)
        lines.append(OrderItemView(
            id=item.id,
            menu_item_id=item.menu_item_id,
            name=menu.name if menu else "Unknown item",
            quantity=item.quantity,
            unit_price=item.unit_price,
            modifiers=list(item.modifiers or []),
            total_price=item.total_price,
        ))
    return OrderView(
        id=order.id,
        table_id=order.table_id,
        table_number=table.number if table else None,
        creator_id=order.creator_id,
        status=order.status,
        total=order.total,
        discount=order.discount,
        tax=order.tax,
        service_charge=order.service_charge,
        final_total=order.final_total,
        created_at=order.created_at,
        updated_at=order.updated_at,
        items=lines,
    )


async def _load_views(orders: List[Order]) -> List[OrderView]:
    menu_by_id = index_by_id(await store.get_all("menuItems"))
    table_by_id = index_by_id(await store.get_all("tables"))
    items_by_order = group_items_by_order(await store.get_all("orderItems"))
    return [
        build_order_view(o, items_by_order.get(o.id, []), menu_by_id, table_by_id)
        for o in orders
    ]


async def load_kitchen_orders() -> List[OrderView]:
    """Pending and in-progress orders, oldest first."""
    orders = [o for o in await store.get_all("orders") if o.status in KITCHEN_STATUSES]
    orders.sort(key=lambda o: o.created_at)
    return await _load_views(orders)


async def load_orders(status: Optional[OrderStatus] = None) -> List[OrderView]:
    """All orders (optionally one status), newest first."""
    orders = await store.get_all("orders")
    if status is not None:
        orders = [o for o in orders if o.status == status]
    orders.sort(key=lambda o: o.created_at, reverse=True)
    return await _load_views(orders)


async def get_order_details(order_id: str) -> OrderView:
    order = await store.require("orders", order_id)
    items = await store.get_order_items(order_id)
    menu_by_id = index_by_id(await store.get_all("menuItems"))
    table = await store.get("tables", order.table_id)
    table_by_id = {table.id: table} if table else {}
    return build_order_view(order, items, menu_by_id, table_by_id)
