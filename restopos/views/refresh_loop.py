import asyncio
import logging
from typing import Awaitable, Callable, Generic, List, Optional, TypeVar

from restopos.core.config import KITCHEN_REFRESH_INTERVAL, ORDERS_REFRESH_INTERVAL
from restopos.core.exceptions import POSError
from restopos.schemas.order import OrderView
from restopos.services.order_queries import load_kitchen_orders, load_orders

log = logging.getLogger(__name__)

T = TypeVar("T")


class RefreshLoop(Generic[T]):
    """
    Rebuilds one view's list from the Store on a fixed interval.

    Every tick is a full reload; the previous snapshot is simply replaced.
    Staleness is bounded by the interval. A failed load keeps the previous
    snapshot and the loop carries on.
    """

    def __init__(
        self,
        name: str,
        loader: Callable[[], Awaitable[T]],
        interval: float,
        on_refresh: Optional[Callable[[T], None]] = None,
    ):
        self.name = name
        self.loader = loader
        self.interval = interval
        self.on_refresh = on_refresh
        self.snapshot: Optional[T] = None
        self.last_error: Optional[Exception] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def refresh(self) -> Optional[T]:
        try:
            self.snapshot = await self.loader()
            self.last_error = None
        except POSError as e:
            self.last_error = e
            log.error(f"{self.name}: failed to load orders: {e}")
            return self.snapshot
        if self.on_refresh is not None:
            self.on_refresh(self.snapshot)
        return self.snapshot

    async def _run(self) -> None:
        while True:
            try:
                await self.refresh()
            except Exception as e:
                self.last_error = e
                log.exception(f"{self.name}: refresh failed")
            await asyncio.sleep(self.interval)

    def start(self) -> None:
        if not self.running:
            self._task = asyncio.create_task(self._run())
            log.info(f"{self.name}: refreshing every {self.interval}s")

    async def stop(self) -> None:
        """Cancels the interval; called on view teardown."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        log.info(f"{self.name}: stopped")

    async def __aenter__(self) -> "RefreshLoop[T]":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.stop()


def kitchen_refresh_loop(
    on_refresh: Optional[Callable[[List[OrderView]], None]] = None,
    interval: float = KITCHEN_REFRESH_INTERVAL,
) -> RefreshLoop[List[OrderView]]:
    return RefreshLoop("kitchen", load_kitchen_orders, interval, on_refresh)


def orders_refresh_loop(
    on_refresh: Optional[Callable[[List[OrderView]], None]] = None,
    interval: float = ORDERS_REFRESH_INTERVAL,
) -> RefreshLoop[List[OrderView]]:
    return RefreshLoop("orders", load_orders, interval, on_refresh)
