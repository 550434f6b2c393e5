"""
Ward-partitioned notification bus for live problem updates.

Every ward number maps to one topic, "ward-{n}". Sessions (one per connected
WebSocket client) join the topics they care about; a publish targets exactly
one topic and fans out an independent copy of the payload to every session
joined to it at that moment.

Design decisions:
- Fire-and-forget, at-most-once: no acknowledgment, retry, persistence or
  replay. A session that joins after a publish never sees that event.
- Delivery failures are isolated: one broken session is logged and skipped,
  the others still receive the event.
- Every send is bounded by send_timeout. A session that stalls is treated as
  a failed delivery, so a publisher never waits on a slow client.
- Membership is only changed through the owning session's own join/leave/
  disconnect calls. The bus never lets one session alter another's topics.
- Everything runs on the event loop thread, so membership updates (which
  never await) cannot interleave with each other.
"""

import asyncio
import copy
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Set
from uuid import uuid4

from wardwatch.core.settings import settings

logger = logging.getLogger(__name__)

NEW_PROBLEM = "new-problem"
PROBLEM_UPDATED = "problem-updated"


def topic_for(ward_number: int) -> str:
    return f"ward-{ward_number}"


class Session(ABC):
    """A subscriber connection that can receive events."""

    def __init__(self, session_id: Optional[str] = None):
        self.session_id = session_id or uuid4().hex

    @abstractmethod
    async def send(self, event: str, data: Any) -> None:
        """Deliver one event to the remote client."""
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.session_id[:8]})"


@dataclass
class BusEvent:
    """A single publish on one topic."""
    name: str
    topic: str
    payload: Dict[str, Any]
    event_id: str = field(default_factory=lambda: uuid4().hex)
    published_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __str__(self) -> str:
        return f"BusEvent({self.name}, topic={self.topic}, id={self.event_id[:8]})"


class NotificationBus:
    """
    In-process topic broker.

    Example usage:
        bus = NotificationBus()
        bus.join(session, 3)
        await bus.publish(3, "new-problem", {"problem": {...}, "wardNumber": 3})
    """

    def __init__(self, send_timeout: Optional[float] = None):
        self.send_timeout = send_timeout if send_timeout is not None else settings.PUBLISH_SEND_TIMEOUT
        # topic -> {session_id: session}
        self._topics: Dict[str, Dict[str, Session]] = {}
        # session_id -> topics joined
        self._memberships: Dict[str, Set[str]] = {}

    def join(self, session: Session, ward_number: int) -> str:
        topic = topic_for(ward_number)
        self._topics.setdefault(topic, {})[session.session_id] = session
        self._memberships.setdefault(session.session_id, set()).add(topic)
        logger.info(f"{session!r} joined {topic}")
        return topic

    def leave(self, session: Session, ward_number: int) -> bool:
        """Remove the session from one ward's topic. Returns False if it was not joined."""
        topic = topic_for(ward_number)
        joined = self._memberships.get(session.session_id, set())
        if topic not in joined:
            return False
        joined.discard(topic)
        if not joined:
            self._memberships.pop(session.session_id, None)
        self._drop_member(topic, session.session_id)
        logger.info(f"{session!r} left {topic}")
        return True

    def disconnect(self, session: Session) -> List[str]:
        """Remove the session from every topic it joined. Returns those topics."""
        topics = sorted(self._memberships.pop(session.session_id, set()))
        for topic in topics:
            self._drop_member(topic, session.session_id)
        logger.info(f"{session!r} disconnected (left {len(topics)} topic(s))")
        return topics

    def _drop_member(self, topic: str, session_id: str) -> None:
        members = self._topics.get(topic)
        if members is None:
            return
        members.pop(session_id, None)
        if not members:
            del self._topics[topic]

    async def publish(self, ward_number: int, event: str, payload: Dict[str, Any]) -> int:
        """
        Deliver `event` to every session joined to the ward's topic.

        Returns the number of sessions that received it.
        """
        bus_event = BusEvent(name=event, topic=topic_for(ward_number), payload=payload)
        # Snapshot: joins/leaves during delivery do not affect this publish
        recipients = list(self._topics.get(bus_event.topic, {}).values())

        if not recipients:
            logger.debug(f"No subscribers for {bus_event}")
            return 0

        results = await asyncio.gather(
            *(self._send(session, event, copy.deepcopy(payload)) for session in recipients),
            return_exceptions=True,
        )

        delivered = 0
        for session, result in zip(recipients, results):
            if isinstance(result, asyncio.TimeoutError):
                logger.warning(f"Delivery of {bus_event} to {session!r} timed out after {self.send_timeout}s")
            elif isinstance(result, BaseException):
                logger.warning(f"Delivery of {bus_event} to {session!r} failed: {result}")
            else:
                delivered += 1

        logger.info(f"Published {bus_event} to {delivered}/{len(recipients)} session(s)")
        return delivered

    async def _send(self, session: Session, event: str, data: Dict[str, Any]) -> None:
        await asyncio.wait_for(session.send(event, data), timeout=self.send_timeout)

    def subscriber_count(self, ward_number: int) -> int:
        return len(self._topics.get(topic_for(ward_number), {}))

    def topics_for(self, session: Session) -> Set[str]:
        return set(self._memberships.get(session.session_id, set()))


async def publish_best_effort(bus: NotificationBus, ward_number: int, event: str, payload: Dict[str, Any]) -> int:
    """
    Publish after a committed store mutation.

    Never raises: the mutation has already succeeded and the live notification
    is a side channel, so a failure here is logged and the request carries on.
    """
    try:
        return await bus.publish(ward_number, event, payload)
    except Exception as e:
        logger.error(f"Failed to publish {event} to ward {ward_number}: {e}", exc_info=True)
        return 0


# Module-level singleton, injected into handlers via get_notification_bus
_default_bus: Optional[NotificationBus] = None


def get_notification_bus() -> NotificationBus:
    global _default_bus
    if _default_bus is None:
        _default_bus = NotificationBus()
    return _default_bus


def reset_notification_bus() -> NotificationBus:
    """Replace the singleton with an empty bus (useful for testing)."""
    global _default_bus
    _default_bus = NotificationBus()
    return _default_bus
