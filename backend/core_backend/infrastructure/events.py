"""
In-process change notifications.

Each ``ChangeFeed`` owns its own ``django.dispatch.Signal`` so two containers
(e.g. one per test) never see each other's events. Delivery is synchronous and
best effort: a failing subscriber is logged and the remaining subscribers
still run.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from django.db.models import TextChoices
from django.dispatch import Signal

logger = logging.getLogger(__name__)


class ChangeKind(TextChoices):
    ORDER_CREATED = "order_created"
    ORDER_STATUS_CHANGED = "order_status_changed"
    ORDER_PAID = "order_paid"
    CAFETERIA_UPDATED = "cafeteria_updated"
    MENU_UPDATED = "menu_updated"
    MARKETER_UPDATED = "marketer_updated"
    RECHARGE_REQUESTED = "recharge_requested"
    RECHARGE_PROCESSED = "recharge_processed"
    PAYOUT_CREATED = "payout_created"
    CONFIG_UPDATED = "config_updated"
    STAFF_UPDATED = "staff_updated"
    SECURITY_EVENT_LOGGED = "security_event_logged"
    STORE_RESET = "store_reset"


@dataclass(frozen=True)
class ChangeEvent:
    kind: str
    entity_id: Optional[str] = None


class ChangeFeed:
    def __init__(self):
        self._signal = Signal()

    def subscribe(self, callback: Callable[[ChangeEvent], None]) -> Callable[[], None]:
        """
        Register ``callback`` and return a function that unregisters it.

        The callback receives a single ``ChangeEvent``.
        """

        def receiver(sender, event, **kwargs):
            callback(event)

        # weak=False: the closure above has no other reference holding it alive
        self._signal.connect(receiver, weak=False)

        def unsubscribe():
            self._signal.disconnect(receiver)

        return unsubscribe

    def publish(self, kind: str, entity_id: Optional[str] = None) -> None:
        event = ChangeEvent(kind=str(kind), entity_id=entity_id)
        for receiver, result in self._signal.send_robust(sender=self.__class__, event=event):
            if isinstance(result, Exception):
                logger.error(
                    f"Change subscriber failed for {event.kind} ({event.entity_id}): {result}",
                    exc_info=(type(result), result, result.__traceback__),
                )

    def clear(self) -> None:
        """Drop every subscriber."""
        self._signal = Signal()
