# restopos/scripts/seed_data.py
import asyncio
import logging
from decimal import Decimal

from restopos.core.db import close_db, init_db
from restopos.models import Category, MenuItem, Role, Table, User

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
log = logging.getLogger("restopos.seed")

USERS = [
    ("Admin User", "admin@restaurant.com", Role.ADMIN),
    ("Cashier User", "cashier@restaurant.com", Role.CASHIER),
    ("Waiter User", "waiter@restaurant.com", Role.WAITER),
    ("Chef User", "chef@restaurant.com", Role.CHEF),
]

MENU = {
    "Appetizers": [
        ("Chicken Wings", "450.00", "Spicy buffalo wings with ranch dip", ["Extra Spicy", "Mild"], 50),
        ("Spring Rolls", "320.00", "Crispy vegetable spring rolls", ["Extra Sauce"], 30),
    ],
    "Main Course": [
        ("Chicken Karahi", "1200.00", "Traditional chicken curry", ["Extra Spicy", "Less Oil"], 20),
        ("Beef Burger", "850.00", "Grilled beef patty with fries", ["No Onion", "Extra Cheese"], 25),
    ],
    "Beverages": [
        ("Fresh Lime", "180.00", "Freshly squeezed lime soda", ["Sweet", "Salted"], 100),
        ("Mint Margarita", "250.00", "Frozen mint lemonade", [], 8),
    ],
}

TABLE_COUNT = 10


async def seed():
    for name, email, role in USERS:
        user, created = await User.get_or_create(email=email, defaults={"name": name, "role": role})
        if created:
            log.info(f"User {email} ({role.value}): {user.id}")

    for category_name, items in MENU.items():
        category, _ = await Category.get_or_create(name=category_name)
        for name, price, description, modifiers, stock in items:
            item, created = await MenuItem.get_or_create(
                name=name,
                defaults={
                    "category_id": category.id,
                    "price": Decimal(price),
                    "description": description,
                    "modifiers": modifiers,
                    "stock": stock,
                },
            )
            if not created:
                # Re-running the seed resets stock (idempotent)
                item.stock = stock
                await item.save()

    for number in range(1, TABLE_COUNT + 1):
        await Table.get_or_create(number=number)

    log.info("Seed data loaded.")


async def main():
    await init_db()
    try:
        await seed()
    finally:
        await close_db()

if __name__ == "__main__":
    asyncio.run(main())
