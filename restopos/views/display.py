"""
Runs one independent view of the application in the terminal.

    python -m restopos.views.display --role chef

Each process is its own view: it polls the Store for its order list and
follows the shared notification log for its role.
"""
import argparse
import asyncio
import logging
from typing import List

from restopos.core.config import PROJECT_NAME
from restopos.core.db import close_db, init_db
from restopos.events.notification_bus import NotificationBus
from restopos.models import Role
from restopos.schemas.order import OrderView
from restopos.views.refresh_loop import kitchen_refresh_loop, orders_refresh_loop

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
log = logging.getLogger("restopos.display")


def render(orders: List[OrderView]) -> None:
    print(f"\n--- {len(orders)} order(s) ---")
    for order in orders:
        items = ", ".join(f"{i.name} x{i.quantity}" for i in order.items)
        print(f"#{order.id[:8]}  Table {order.table_number}  {order.status.value:<12} {order.final_total:>10}  {items}")


async def run_view(role: Role) -> None:
    await init_db()
    loop = kitchen_refresh_loop(render) if role == Role.CHEF else orders_refresh_loop(render)
    bus = NotificationBus(role)
    log.info(f"{PROJECT_NAME}: {role.value} view started")
    try:
        async with bus, loop:
            await asyncio.Event().wait()
    finally:
        await close_db()


def main() -> None:
    parser = argparse.ArgumentParser(description="Open a role's order view.")
    parser.add_argument("--role", choices=[r.value for r in Role], default=Role.CHEF.value)
    args = parser.parse_args()
    try:
        asyncio.run(run_view(Role(args.role)))
    except KeyboardInterrupt:
        log.info("View closed.")


if __name__ == "__main__":
    main()
