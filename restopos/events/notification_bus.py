import logging
import sys
from datetime import datetime, timezone
from typing import Callable, List, Optional, Set

from restopos.core.config import NOTIFICATION_LOG_CAP, NOTIFICATION_SYNC_INTERVAL
from restopos.events.notification_log import LogSubscription, NotificationLog
from restopos.models import NotificationType, Role
from restopos.schemas.notification import NotificationEvent

log = logging.getLogger(__name__)

AlertSink = Callable[[], None]


def terminal_bell() -> None:
    """Default audible alert: ring the terminal bell."""
    log.info("ALERT: new notification for this station")
    sys.stdout.write("\a")
    sys.stdout.flush()


class NotificationBus:
    """
    One view's handle on the cross-role notification stream.

    Each open view owns a bus bound to the viewer's role. Publishing appends
    to the durable shared log, then prepends to the in-memory list. Changes made
    by other views reach this one through a log subscription that reconciles
    the in-memory list and rings the alert for net-new entries aimed at this
    role. Notifications are advisory and never gate order processing.
    """

    def __init__(
        self,
        role: Optional[Role],
        notification_log: Optional[NotificationLog] = None,
        alert: AlertSink = terminal_bell,
        cap: int = NOTIFICATION_LOG_CAP,
    ):
        self.role = Role(role) if role is not None else None
        self.log = notification_log or NotificationLog(cap)
        self.alert_sink = alert
        self.cap = cap
        self.notifications: List[NotificationEvent] = []
        self._seen: Set[str] = set()
        self._subscription: Optional[LogSubscription] = None

    def alert(self) -> None:
        try:
            self.alert_sink()
        except Exception as e:
            # Audio is best-effort; a broken sink must not fail the caller
            log.warning(f"Audible alert not supported: {e}")

    async def publish(
        self,
        type: NotificationType,
        order_id: str,
        message: str,
        target_role: Role,
    ) -> NotificationEvent:
        event = NotificationEvent(
            type=type,
            order_id=order_id,
            message=message,
            target_role=Role(target_role).value,
            timestamp=datetime.now(timezone.utc),
        )
        # Durable first: an event that never reached the log stays invisible here too
        await self.log.append(event)

        self._seen.add(event.event_id)
        self.notifications = [event, *self.notifications][: self.cap]
        if self.role is not None and self.role.value == event.target_role:
            self.alert()

        log.info(f"Published {event.type.value} for order {order_id} to role '{event.target_role}'")
        return event

    async def clear(self) -> None:
        self.notifications = []
        await self.log.clear()
        log.info("Notifications cleared.")

    async def load(self) -> None:
        """Adopts the current log contents without alerting (view mount)."""
        entries = await self.log.read_all()
        self._seen.update(e.event_id for e in entries)
        self.notifications = entries[: self.cap]

    async def reconcile(self, entries: List[NotificationEvent]) -> List[NotificationEvent]:
        """
        Replaces the in-memory list with the log contents. Alerts once per
        reconciliation if any net-new entry targets this view's role.
        Returns the net-new entries.
        """
        fresh = [e for e in entries if e.event_id not in self._seen]
        self._seen.update(e.event_id for e in fresh)
        self.notifications = entries[: self.cap]

        if self.role is not None and any(e.target_role == self.role.value for e in fresh):
            self.alert()
        if fresh:
            log.info(f"Reconciled {len(fresh)} new notification(s) from the shared log")
        return fresh

    async def sync(self) -> List[NotificationEvent]:
        """Runs one reconciliation against the log right now."""
        return await self.reconcile(await self.log.read_all())

    async def start(self, interval: float = NOTIFICATION_SYNC_INTERVAL) -> None:
        await self.load()
        if self._subscription is None:
            self._subscription = self.log.subscribe(self.reconcile, interval)

    async def stop(self) -> None:
        if self._subscription is not None:
            await self._subscription.cancel()
            self._subscription = None

    async def __aenter__(self) -> "NotificationBus":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.stop()
