import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Tuple, Union

from pydantic import ValidationError as PydanticValidationError
from tortoise.transactions import in_transaction

from restopos.core import store
from restopos.core.config import SERVICE_CHARGE_RATE, TAX_RATE
from restopos.core.exceptions import InvalidTransitionError, POSError, ValidationError
from restopos.events.notification_bus import NotificationBus
from restopos.models import (
    MenuItem,
    NotificationType,
    Order,
    OrderItem,
    OrderStatus,
    Role,
    Table,
    TableStatus,
)
from restopos.schemas.order import CartLine, OrderTotals
from restopos.services.permissions import check_transition

log = logging.getLogger(__name__)

CENT = Decimal("0.01")


def round2(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_totals(line_totals: Iterable[Decimal], discount: Decimal = Decimal("0")) -> OrderTotals:
    """
    total = sum of line totals; tax and service charge are fixed shares of it.
    tax and service charge stay exact so that
    final_total == round2(total * (1 + rates) - discount).
    """
    total = sum(line_totals, Decimal("0"))
    tax = total * TAX_RATE
    service_charge = total * SERVICE_CHARGE_RATE
    return OrderTotals(
        total=total,
        tax=tax,
        service_charge=service_charge,
        discount=discount,
        final_total=round2(total + tax + service_charge - discount),
    )


def _parse_cart(items: List[Union[CartLine, Dict[str, Any]]]) -> List[CartLine]:
    if not items:
        raise ValidationError("Cart is empty.")
    try:
        lines = [CartLine.model_validate(it) for it in items]
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid cart line: {e}") from e
    for line in lines:
        if line.quantity < 1:
            raise ValidationError(f"Quantity for {line.menu_item_id} must be a positive integer.")
    return lines


async def _available_table(table_id: str, conn: Any) -> Table:
    if not table_id:
        raise ValidationError("Please select a table.")
    table = await store.get("tables", table_id, using_db=conn)
    if table is None:
        raise ValidationError(f"Table {table_id} does not exist.")
    if table.status != TableStatus.AVAILABLE:
        raise ValidationError(f"Table {table.number} is {table.status.value}.")
    return table


async def build_order(
    table_id: str,
    items: List[Union[CartLine, Dict[str, Any]]],
    creator_id: str,
    discount: Decimal,
    conn: Any,
) -> Tuple[Order, List[Tuple[OrderItem, MenuItem]], Table]:
    """
    Validates a cart against the store and prices it. Nothing is written;
    the caller persists the returned order and lines in its transaction.
    """
    lines = _parse_cart(items)
    discount = Decimal(str(discount))
    if discount < 0:
        raise ValidationError("Discount cannot be negative.")

    table = await _available_table(table_id, conn)

    order = Order(table_id=table.id, creator_id=creator_id, status=OrderStatus.PENDING)
    priced: List[Tuple[OrderItem, MenuItem]] = []
    for line in lines:
        menu = await store.require("menuItems", line.menu_item_id, using_db=conn)
        unknown = [m for m in line.modifiers if m not in (menu.modifiers or [])]
        if unknown:
            raise ValidationError(f"{menu.name} has no modifier(s): {', '.join(unknown)}")

        item = OrderItem(
            order_id=order.id,
            menu_item_id=menu.id,
            quantity=line.quantity,
            unit_price=menu.price,
            modifiers=list(line.modifiers),
            total_price=menu.price * line.quantity,
        )
        priced.append((item, menu))

    totals = calculate_totals((item.total_price for item, _ in priced), discount)
    order.total = totals.total
    order.tax = totals.tax
    order.service_charge = totals.service_charge
    order.discount = totals.discount
    order.final_total = totals.final_total
    return order, priced, table


async def _creator_name(creator_id: str) -> str:
    user = await store.get("users", creator_id)
    return user.name if user else creator_id


async def _table_label(table_id: str) -> str:
    table = await store.get("tables", table_id)
    return str(table.number) if table else "?"


async def notify_committed(order_id: str, announce: Callable[[], Awaitable[Any]]) -> None:
    """
    Runs the notification step for an order that is already committed.
    Notifications are advisory: a failure here is logged and never reported
    to the caller as a failed order operation.
    """
    try:
        await announce()
    except POSError as e:
        log.error(f"Order {order_id} committed but notification failed: {e}")


async def create_order(
    table_id: str,
    items: List[Union[CartLine, Dict[str, Any]]],
    creator_id: str,
    bus: NotificationBus,
) -> str:
    """
    Table-service path: sends a new order to the kitchen and seats the table.
    Stock is not touched here; it is tracked manually for dine-in.
    Returns the new order id.
    """
    async with in_transaction() as conn:
        order, priced, table = await build_order(table_id, items, creator_id, Decimal("0"), conn)

        await store.put(order, using_db=conn)
        for item, _ in priced:
            await store.put(item, using_db=conn)

        table.status = TableStatus.OCCUPIED
        await store.put(table, using_db=conn)

    log.info(f"Order {order.id} created for table {table.number}: final total {order.final_total}")

    async def announce():
        await bus.publish(
            type=NotificationType.ORDER_CREATED,
            order_id=order.id,
            message=f"New order for Table {table.number} by {await _creator_name(creator_id)}",
            target_role=Role.CHEF,
        )

    await notify_committed(order.id, announce)
    return order.id


async def transition_order(
    order_id: str,
    new_status: Union[OrderStatus, str],
    actor_role: Union[Role, str],
    bus: NotificationBus,
) -> Order:
    """
    Moves an order one step through the state machine on behalf of actor_role.
    Re-applying the current status is an invalid edge, never a no-op.
    """
    try:
        new_status = OrderStatus(new_status)
    except ValueError:
        raise InvalidTransitionError(f"'{new_status}' is not a valid order status.") from None
    try:
        actor_role = Role(actor_role)
    except ValueError:
        raise InvalidTransitionError(f"Unknown role '{actor_role}' has no transition rights.") from None

    order = await store.require("orders", order_id)
    old_status = order.status
    check_transition(actor_role, old_status, new_status)

    order.status = new_status
    await store.put(order)
    log.info(f"Order {order.id} moved {old_status.value} -> {new_status.value} by {actor_role.value}")

    if new_status == OrderStatus.READY:
        async def announce_ready():
            await bus.publish(
                type=NotificationType.ORDER_READY,
                order_id=order.id,
                message=f"Order #{order.id[:8]} for Table {await _table_label(order.table_id)} is ready!",
                target_role=Role.CASHIER,
            )
            # publish already rang for a cashier's own bus
            if bus.role != Role.CASHIER:
                bus.alert()

        await notify_committed(order.id, announce_ready)

    elif new_status == OrderStatus.SERVED:
        async def announce_served():
            await bus.publish(
                type=NotificationType.ORDER_SERVED,
                order_id=order.id,
                message=f"Order #{order.id[:8]} for Table {await _table_label(order.table_id)} has been served.",
                target_role=Role.WAITER,
            )

        await notify_committed(order.id, announce_served)

    return order
