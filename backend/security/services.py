import logging
from typing import List, Optional

from django.utils import timezone

from core_backend.base import new_id
from core_backend.infrastructure.events import ChangeKind

from .entities import SecurityEvent

logger = logging.getLogger(__name__)


class SecurityEventService:
    """Writes and reads the security audit log."""

    def __init__(self, repositories, feed):
        self.repos = repositories
        self.feed = feed

    def log_event(
        self,
        actor_id: str,
        role: str,
        attempted_action: str,
        target_id: str,
        reason: str = "",
        blocked: bool = True,
    ) -> SecurityEvent:
        event = SecurityEvent(
            id=new_id("sec"),
            actor_id=actor_id,
            role=str(role),
            attempted_action=attempted_action,
            target_id=target_id,
            timestamp=timezone.now(),
            blocked=blocked,
            reason=reason,
        )
        self.repos.security_events.log(event)
        if blocked:
            logger.warning(
                f"Blocked {role} {actor_id}: {attempted_action} on {target_id} ({reason})"
            )
        else:
            logger.info(f"Security event for {role} {actor_id}: {attempted_action} on {target_id}")
        self.feed.publish(ChangeKind.SECURITY_EVENT_LOGGED, event.id)
        return event

    def get_events(
        self, actor_id: Optional[str] = None, blocked: Optional[bool] = None
    ) -> List[SecurityEvent]:
        if actor_id is not None:
            events = self.repos.security_events.get_by_actor_id(actor_id)
        else:
            events = self.repos.security_events.get_all()
        if blocked is not None:
            events = [e for e in events if e.blocked == blocked]
        return events
