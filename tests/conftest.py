from decimal import Decimal

import pytest
import pytest_asyncio
from tortoise import Tortoise

from restopos.core.db import MODELS_MODULES
from restopos.events.notification_bus import NotificationBus
from restopos.events.notification_log import NotificationLog
from restopos.models import Category, MenuItem, Role, Table, TableStatus, User


class AlertRecorder:
    """Stands in for the speaker: counts how many times a view beeped."""

    def __init__(self):
        self.count = 0

    def __call__(self):
        self.count += 1


@pytest_asyncio.fixture
async def db():
    """A fresh in-memory store per test."""
    await Tortoise.init(db_url="sqlite://:memory:", modules={"models": MODELS_MODULES})
    await Tortoise.generate_schemas()
    yield
    await Tortoise.close_connections()


@pytest.fixture
def alerts():
    return AlertRecorder()


@pytest.fixture
def make_bus():
    """Builds independent views sharing the same durable log."""
    def _make(role):
        alerts = AlertRecorder()
        bus = NotificationBus(role, NotificationLog(), alert=alerts)
        return bus, alerts
    return _make


@pytest_asyncio.fixture
async def seeded(db):
    """One category, two menu items, two tables and a user per role."""
    category = await Category.create(name="Main Course")
    burger = await MenuItem.create(
        name="Beef Burger",
        category_id=category.id,
        price=Decimal("100.00"),
        modifiers=["Extra Cheese", "No Onion"],
        stock=10,
    )
    lime = await MenuItem.create(
        name="Fresh Lime",
        category_id=category.id,
        price=Decimal("45.50"),
        modifiers=[],
        stock=3,
    )
    t1 = await Table.create(number=1, status=TableStatus.AVAILABLE)
    t2 = await Table.create(number=2, status=TableStatus.RESERVED)
    users = {}
    for role in Role:
        users[role] = await User.create(name=f"{role.value.title()} User", email=f"{role.value}@restaurant.com", role=role)
    return {"burger": burger, "lime": lime, "t1": t1, "t2": t2, "users": users}
