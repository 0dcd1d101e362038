"""
Durable shared log backing the Notification Bus.

The log lives in the same database as the Store, so every process that
opens it sees the same entries. Change detection polls a cheap
fingerprint of the retained entries on a fixed interval.
"""
import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Tuple

from tortoise.exceptions import BaseORMException

from restopos.core.config import NOTIFICATION_LOG_CAP, NOTIFICATION_SYNC_INTERVAL
from restopos.core.exceptions import PersistenceError
from restopos.models import NotificationLogEntry
from restopos.schemas.notification import NotificationEvent

log = logging.getLogger(__name__)

OnChange = Callable[[List[NotificationEvent]], Awaitable[None]]


class NotificationLog:
    """Append-only (with retention) list of events visible to every open view."""

    def __init__(self, cap: int = NOTIFICATION_LOG_CAP):
        self.cap = cap

    async def append(self, event: NotificationEvent) -> None:
        try:
            await NotificationLogEntry.create(
                event_id=event.event_id,
                type=event.type,
                order_id=event.order_id,
                message=event.message,
                target_role=event.target_role,
                timestamp=event.timestamp,
            )
            await self._trim()
        except BaseORMException as e:
            raise PersistenceError(f"Failed to append to notification log: {e}") from e

    async def read_all(self) -> List[NotificationEvent]:
        """Returns the retained entries, newest first."""
        try:
            entries = await NotificationLogEntry.all().order_by("-seq").limit(self.cap)
        except BaseORMException as e:
            raise PersistenceError(f"Failed to read notification log: {e}") from e
        return [NotificationEvent.model_validate(entry) for entry in entries]

    async def clear(self) -> None:
        try:
            await NotificationLogEntry.all().delete()
        except BaseORMException as e:
            raise PersistenceError(f"Failed to clear notification log: {e}") from e

    async def fingerprint(self) -> Tuple[int, ...]:
        """Sequence numbers of the retained entries. Moves whenever any view appends or clears."""
        try:
            seqs = await NotificationLogEntry.all().order_by("seq").values_list("seq", flat=True)
        except BaseORMException as e:
            raise PersistenceError(f"Failed to read notification log: {e}") from e
        return tuple(seqs)

    def subscribe(self, on_change: OnChange, interval: float = NOTIFICATION_SYNC_INTERVAL) -> "LogSubscription":
        subscription = LogSubscription(self, on_change, interval)
        subscription.start()
        return subscription

    async def _trim(self) -> None:
        keep = await NotificationLogEntry.all().order_by("-seq").limit(self.cap).values_list("seq", flat=True)
        if len(keep) >= self.cap:
            await NotificationLogEntry.filter(seq__lt=min(keep)).delete()


class LogSubscription:
    """Calls on_change with the full log contents each time its fingerprint moves."""

    def __init__(self, notification_log: NotificationLog, on_change: OnChange, interval: float):
        self.log = notification_log
        self.on_change = on_change
        self.interval = interval
        self._last_fingerprint: Optional[Tuple[int, ...]] = None
        self._task: Optional[asyncio.Task] = None

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._run())

    async def check(self) -> bool:
        """One reconciliation tick. Returns True if on_change was called."""
        current = await self.log.fingerprint()
        if current == self._last_fingerprint:
            return False
        self._last_fingerprint = current
        await self.on_change(await self.log.read_all())
        return True

    async def _run(self) -> None:
        while True:
            try:
                await self.check()
            except PersistenceError as e:
                log.error(f"Notification log sync failed: {e}")
            except Exception:
                log.exception("Notification log subscriber failed")
            await asyncio.sleep(self.interval)

    async def cancel(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
