import logging
from decimal import Decimal
from typing import Any, Dict, List, Union

from tortoise.transactions import in_transaction

from restopos.core import store
from restopos.core.exceptions import ValidationError
from restopos.events.notification_bus import NotificationBus
from restopos.models import NotificationType, Payment, PaymentMethod, Role
from restopos.schemas.order import CartLine
from restopos.services.order_service import build_order, notify_committed
from restopos.services.stock_ledger import reserve_and_deduct

log = logging.getLogger(__name__)


async def sell(
    table_id: str,
    items: List[Union[CartLine, Dict[str, Any]]],
    creator_id: str,
    bus: NotificationBus,
    payment_method: Union[PaymentMethod, str] = PaymentMethod.CASH,
    discount: Decimal = Decimal("0"),
) -> str:
    """
    Immediate-sale path (point of sale): order, lines, stock deduction and
    payment are committed together, then the kitchen is notified.

    Unlike the table-service path this deducts stock for every line and
    leaves the table status alone.
    """
    try:
        payment_method = PaymentMethod(payment_method)
    except ValueError:
        raise ValidationError(f"Unsupported payment method: {payment_method}") from None

    async with in_transaction() as conn:
        order, priced, table = await build_order(table_id, items, creator_id, discount, conn)

        await store.put(order, using_db=conn)
        for item, menu in priced:
            await store.put(item, using_db=conn)
            # Raises InsufficientStockError and rolls back the whole sale
            await reserve_and_deduct(menu.id, item.quantity, conn=conn)

        await store.put(
            Payment(order_id=order.id, method=payment_method, amount=order.final_total),
            using_db=conn,
        )

    log.info(f"Sale {order.id} paid by {payment_method.value}: {order.final_total}")

    async def announce():
        await bus.publish(
            type=NotificationType.ORDER_CREATED,
            order_id=order.id,
            message=f"New order #{order.id[:8]} for Table {table.number}",
            target_role=Role.CHEF,
        )

    await notify_committed(order.id, announce)
    return order.id
