from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest

from restopos.core import store
from restopos.core.exceptions import (
    InvalidTransitionError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from restopos.events.notification_log import NotificationLog
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
from restopos.services.order_service import (
    calculate_totals,
    create_order,
    round2,
    transition_order,
)


async def _events(event_type):
    return [e for e in await NotificationLog().read_all() if e.type == event_type]


# --- create ---

@pytest.mark.asyncio
async def test_create_order_computes_totals_and_seats_table(seeded, make_bus):
    waiter_bus, _ = make_bus(Role.WAITER)
    waiter = seeded["users"][Role.WAITER]

    order_id = await create_order(
        seeded["t1"].id,
        [{"menu_item_id": seeded["burger"].id, "quantity": 2}],
        waiter.id,
        waiter_bus,
    )

    order = await Order.get(id=order_id)
    assert order.status == OrderStatus.PENDING
    assert order.total == Decimal("200")
    assert order.tax == Decimal("32")
    assert order.service_charge == Decimal("10")
    assert order.discount == Decimal("0")
    assert order.final_total == Decimal("242")
    assert order.creator_id == waiter.id

    table = await Table.get(id=seeded["t1"].id)
    assert table.status == TableStatus.OCCUPIED

    created = await _events(NotificationType.ORDER_CREATED)
    assert len(created) == 1
    assert created[0].target_role == "chef"
    assert created[0].order_id == order_id
    assert "Table 1" in created[0].message


@pytest.mark.asyncio
async def test_create_order_persists_price_snapshot_and_modifiers(seeded, make_bus):
    bus, _ = make_bus(Role.WAITER)
    order_id = await create_order(
        seeded["t1"].id,
        [
            {"menu_item_id": seeded["burger"].id, "quantity": 1, "modifiers": ["Extra Cheese"]},
            {"menu_item_id": seeded["lime"].id, "quantity": 3},
        ],
        seeded["users"][Role.WAITER].id,
        bus,
    )

    items = await store.get_order_items(order_id)
    assert len(items) == 2
    by_menu = {i.menu_item_id: i for i in items}
    assert by_menu[seeded["burger"].id].modifiers == ["Extra Cheese"]
    assert by_menu[seeded["lime"].id].unit_price == Decimal("45.50")
    assert by_menu[seeded["lime"].id].total_price == Decimal("136.50")

    order = await Order.get(id=order_id)
    assert order.total == sum(i.total_price for i in items)


@pytest.mark.asyncio
async def test_create_order_does_not_touch_stock(seeded, make_bus):
    bus, _ = make_bus(Role.WAITER)
    await create_order(
        seeded["t1"].id,
        [{"menu_item_id": seeded["lime"].id, "quantity": 5}],  # more than the 3 in stock
        seeded["users"][Role.WAITER].id,
        bus,
    )
    lime = await MenuItem.get(id=seeded["lime"].id)
    assert lime.stock == 3


@pytest.mark.asyncio
async def test_create_order_rejects_empty_cart(seeded, make_bus):
    bus, _ = make_bus(Role.WAITER)
    with pytest.raises(ValidationError, match="empty"):
        await create_order(seeded["t1"].id, [], "someone", bus)
    assert await Order.all().count() == 0


@pytest.mark.asyncio
async def test_create_order_rejects_unavailable_or_missing_table(seeded, make_bus):
    bus, _ = make_bus(Role.WAITER)
    cart = [{"menu_item_id": seeded["burger"].id, "quantity": 1}]

    with pytest.raises(ValidationError):
        await create_order(seeded["t2"].id, cart, "someone", bus)  # reserved
    with pytest.raises(ValidationError):
        await create_order("no-such-table", cart, "someone", bus)
    with pytest.raises(ValidationError):
        await create_order("", cart, "someone", bus)

    assert await Order.all().count() == 0
    assert await NotificationLog().read_all() == []


@pytest.mark.asyncio
async def test_create_order_rejects_bad_lines(seeded, make_bus):
    bus, _ = make_bus(Role.WAITER)
    with pytest.raises(ValidationError):
        await create_order(seeded["t1"].id, [{"menu_item_id": seeded["burger"].id, "quantity": 0}], "x", bus)
    with pytest.raises(ValidationError, match="modifier"):
        await create_order(
            seeded["t1"].id,
            [{"menu_item_id": seeded["burger"].id, "quantity": 1, "modifiers": ["Gold Leaf"]}],
            "x",
            bus,
        )
    with pytest.raises(NotFoundError):
        await create_order(seeded["t1"].id, [{"menu_item_id": "ghost", "quantity": 1}], "x", bus)

    table = await Table.get(id=seeded["t1"].id)
    assert table.status == TableStatus.AVAILABLE


@pytest.mark.asyncio
async def test_create_order_rolls_back_on_mid_sequence_failure(seeded, make_bus):
    bus, _ = make_bus(Role.WAITER)
    real_put = store.put

    async def flaky_put(record, using_db=None):
        if isinstance(record, OrderItem):
            raise PersistenceError("disk full")
        return await real_put(record, using_db=using_db)

    with patch.object(store, "put", flaky_put):
        with pytest.raises(PersistenceError):
            await create_order(
                seeded["t1"].id,
                [{"menu_item_id": seeded["burger"].id, "quantity": 1}],
                "x",
                bus,
            )

    assert await Order.all().count() == 0
    assert await OrderItem.all().count() == 0
    table = await Table.get(id=seeded["t1"].id)
    assert table.status == TableStatus.AVAILABLE


@pytest.mark.asyncio
async def test_create_order_succeeds_when_notification_log_is_down(seeded, make_bus):
    bus, alerts = make_bus(Role.CHEF)
    failing_append = AsyncMock(side_effect=PersistenceError("disk full"))

    with patch.object(NotificationLog, "append", failing_append):
        order_id = await create_order(
            seeded["t1"].id,
            [{"menu_item_id": seeded["burger"].id, "quantity": 1}],
            seeded["users"][Role.WAITER].id,
            bus,
        )

    failing_append.assert_awaited_once()
    assert (await Order.get(id=order_id)).status == OrderStatus.PENDING
    assert (await Table.get(id=seeded["t1"].id)).status == TableStatus.OCCUPIED
    # Nothing reached the log, so this view shows nothing either
    assert bus.notifications == []
    assert alerts.count == 0


@pytest.mark.parametrize(
    "lines, discount",
    [
        ([("100.00", 2)], "0"),
        ([("0.10", 1)], "0"),
        ([("45.50", 3), ("12.99", 7)], "5.00"),
        ([("0.05", 1), ("0.05", 1)], "0.01"),
        ([("1199.99", 4)], "250.75"),
    ],
)
def test_final_total_matches_rounded_formula(lines, discount):
    line_totals = [Decimal(price) * qty for price, qty in lines]
    discount = Decimal(discount)

    totals = calculate_totals(line_totals, discount)

    assert totals.total == sum(line_totals)
    assert totals.final_total == round2(sum(line_totals) * Decimal("1.21") - discount)
    assert totals.tax == totals.total * Decimal("0.16")
    assert totals.service_charge == totals.total * Decimal("0.05")


# --- transition ---

async def _new_order(seeded, make_bus):
    bus, _ = make_bus(Role.WAITER)
    return await create_order(
        seeded["t1"].id,
        [{"menu_item_id": seeded["burger"].id, "quantity": 1}],
        seeded["users"][Role.WAITER].id,
        bus,
    )


@pytest.mark.asyncio
async def test_chef_flow_publishes_order_ready_once(seeded, make_bus):
    order_id = await _new_order(seeded, make_bus)
    chef_bus, chef_alerts = make_bus(Role.CHEF)

    order = await transition_order(order_id, "in-progress", "chef", chef_bus)
    assert order.status == OrderStatus.IN_PROGRESS
    assert await _events(NotificationType.ORDER_READY) == []
    assert chef_alerts.count == 0

    order = await transition_order(order_id, OrderStatus.READY, Role.CHEF, chef_bus)
    assert order.status == OrderStatus.READY

    ready = await _events(NotificationType.ORDER_READY)
    assert len(ready) == 1
    assert ready[0].target_role == "cashier"
    assert ready[0].order_id == order_id
    # The kitchen hears its own confirmation beep once
    assert chef_alerts.count == 1

    stored = await Order.get(id=order_id)
    assert stored.status == OrderStatus.READY
    assert stored.updated_at >= stored.created_at


@pytest.mark.asyncio
async def test_cashier_serves_ready_order(seeded, make_bus):
    order_id = await _new_order(seeded, make_bus)
    admin_bus, _ = make_bus(Role.ADMIN)
    cashier_bus, _ = make_bus(Role.CASHIER)
    await transition_order(order_id, "in-progress", "admin", admin_bus)
    await transition_order(order_id, "ready", "admin", admin_bus)

    order = await transition_order(order_id, "served", "cashier", cashier_bus)
    assert order.status == OrderStatus.SERVED

    served = await _events(NotificationType.ORDER_SERVED)
    assert len(served) == 1
    assert served[0].target_role == "waiter"
    assert served[0].order_id == order_id


@pytest.mark.asyncio
async def test_ready_alerts_cashier_view_exactly_once(seeded, make_bus):
    order_id = await _new_order(seeded, make_bus)
    admin_bus, _ = make_bus(Role.ADMIN)
    cashier_bus, cashier_alerts = make_bus(Role.CASHIER)
    await transition_order(order_id, "in-progress", "admin", admin_bus)

    # An admin working from the cashier station marks it ready
    await transition_order(order_id, "ready", "admin", cashier_bus)
    assert cashier_alerts.count == 1


@pytest.mark.asyncio
async def test_transition_commits_when_notification_log_is_down(seeded, make_bus):
    order_id = await _new_order(seeded, make_bus)
    chef_bus, chef_alerts = make_bus(Role.CHEF)
    await transition_order(order_id, "in-progress", "chef", chef_bus)

    with patch.object(NotificationLog, "append", AsyncMock(side_effect=PersistenceError("disk full"))):
        order = await transition_order(order_id, "ready", "chef", chef_bus)

    assert order.status == OrderStatus.READY
    assert (await Order.get(id=order_id)).status == OrderStatus.READY
    assert await _events(NotificationType.ORDER_READY) == []
    assert chef_alerts.count == 0


@pytest.mark.asyncio
async def test_waiter_cannot_transition(seeded, make_bus):
    order_id = await _new_order(seeded, make_bus)
    waiter_bus, _ = make_bus(Role.WAITER)

    with pytest.raises(InvalidTransitionError):
        await transition_order(order_id, "in-progress", "waiter", waiter_bus)

    order = await Order.get(id=order_id)
    assert order.status == OrderStatus.PENDING


@pytest.mark.asyncio
async def test_pending_never_jumps_to_ready(seeded, make_bus):
    order_id = await _new_order(seeded, make_bus)
    for role in Role:
        bus, _ = make_bus(role)
        with pytest.raises(InvalidTransitionError):
            await transition_order(order_id, "ready", role, bus)
    assert (await Order.get(id=order_id)).status == OrderStatus.PENDING


@pytest.mark.asyncio
@pytest.mark.parametrize("terminal", [OrderStatus.SERVED, OrderStatus.CANCELLED])
async def test_terminal_states_reject_every_role(seeded, make_bus, terminal):
    order_id = await _new_order(seeded, make_bus)
    await Order.filter(id=order_id).update(status=terminal)

    for role in Role:
        bus, _ = make_bus(role)
        for target in OrderStatus:
            with pytest.raises(InvalidTransitionError):
                await transition_order(order_id, target, role, bus)

    assert (await Order.get(id=order_id)).status == terminal


@pytest.mark.asyncio
async def test_only_admin_can_cancel(seeded, make_bus):
    order_id = await _new_order(seeded, make_bus)
    chef_bus, _ = make_bus(Role.CHEF)
    admin_bus, _ = make_bus(Role.ADMIN)

    with pytest.raises(InvalidTransitionError):
        await transition_order(order_id, "cancelled", "chef", chef_bus)

    order = await transition_order(order_id, "cancelled", "admin", admin_bus)
    assert order.status == OrderStatus.CANCELLED


@pytest.mark.asyncio
async def test_reapplying_current_status_is_rejected(seeded, make_bus):
    order_id = await _new_order(seeded, make_bus)
    chef_bus, _ = make_bus(Role.CHEF)
    await transition_order(order_id, "in-progress", "chef", chef_bus)

    with pytest.raises(InvalidTransitionError):
        await transition_order(order_id, "in-progress", "chef", chef_bus)


@pytest.mark.asyncio
async def test_transition_unknown_order(db, make_bus):
    bus, _ = make_bus(Role.ADMIN)
    with pytest.raises(NotFoundError):
        await transition_order("missing", "in-progress", "admin", bus)


@pytest.mark.asyncio
async def test_transition_rejects_unknown_status_and_role(seeded, make_bus):
    order_id = await _new_order(seeded, make_bus)
    bus, _ = make_bus(Role.ADMIN)
    with pytest.raises(InvalidTransitionError):
        await transition_order(order_id, "delivered", "admin", bus)
    with pytest.raises(InvalidTransitionError):
        await transition_order(order_id, "in-progress", "manager", bus)
