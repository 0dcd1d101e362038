import logging
from typing import Any, List

from restopos.core import store
from restopos.core.config import CRITICAL_STOCK_THRESHOLD, LOW_STOCK_THRESHOLD
from restopos.core.exceptions import InsufficientStockError, ValidationError
from restopos.models import MenuItem

log = logging.getLogger(__name__)


async def reserve_and_deduct(menu_item_id: str, quantity: int, conn: Any = None) -> MenuItem:
    """
    Decrements a menu item's stock for an immediate sale.

    The read and the write are separate store calls, so two actors selling
    the same item at once can overwrite each other (last writer wins).
    Only the point-of-sale path calls this; table-service orders do not
    touch stock.
    """
    if quantity < 1:
        raise ValidationError(f"Quantity must be a positive integer, got {quantity}.")

    item = await store.require("menuItems", menu_item_id, using_db=conn)
    if item.stock < quantity:
        raise InsufficientStockError(menu_item_id, quantity, item.stock)

    item.stock -= quantity
    await store.put(item, using_db=conn)
    log.info(f"Stock deducted for {item.name}: -{quantity}, {item.stock} remaining")

    if item.stock <= LOW_STOCK_THRESHOLD:
        log.warning(f"Low stock for {item.name} ({item.id}): {item.stock} remaining")
    return item


async def set_stock(menu_item_id: str, stock: int) -> MenuItem:
    """Manual inventory correction from the inventory screen."""
    if stock < 0:
        raise ValidationError("Stock cannot be negative.")

    item = await store.require("menuItems", menu_item_id)
    item.stock = stock
    await store.put(item)
    log.info(f"Stock for {item.name} set to {stock}")
    return item


def stock_level(stock: int) -> str:
    if stock <= 0:
        return "Out of Stock"
    if stock <= CRITICAL_STOCK_THRESHOLD:
        return "Critical"
    if stock <= LOW_STOCK_THRESHOLD:
        return "Low Stock"
    return "In Stock"


async def low_stock_items() -> List[MenuItem]:
    """Items still sellable but at or under the low-stock threshold."""
    items = await store.get_all("menuItems")
    return [i for i in items if 0 < i.stock <= LOW_STOCK_THRESHOLD]
