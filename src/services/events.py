import logging
from typing import Callable, List, Optional, Type

from schemas.vault_events import VaultEvent

logger = logging.getLogger(__name__)

Subscriber = Callable[[VaultEvent], None]


class EventBus:
    """Synchronous fan-out of vault notifications.

    Events published while an operation is in flight are held back and only
    delivered once the outermost operation commits; a failed operation drops
    them, so subscribers never see effects that were rolled back.
    """

    def __init__(self):
        self._subscribers: List[tuple] = []
        self._pending: List[VaultEvent] = []
        self._depth = 0

    def subscribe(self, subscriber: Subscriber, event_type: Optional[Type[VaultEvent]] = None):
        self._subscribers.append((event_type, subscriber))

    def unsubscribe(self, subscriber: Subscriber):
        self._subscribers = [(t, s) for t, s in self._subscribers if s != subscriber]

    def publish(self, event: VaultEvent):
        if self._depth > 0:
            self._pending.append(event)
        else:
            self._deliver([event])

    def begin(self) -> int:
        self._depth += 1
        return len(self._pending)

    def commit(self):
        self._depth -= 1
        if self._depth == 0:
            events, self._pending = self._pending, []
            self._deliver(events)

    def rollback(self, mark: int):
        self._depth -= 1
        del self._pending[mark:]

    def _deliver(self, events: List[VaultEvent]):
        for event in events:
            logger.debug(f"Publishing {event.name}: {event}")
            for event_type, subscriber in list(self._subscribers):
                if event_type is None or isinstance(event, event_type):
                    try:
                        subscriber(event)
                    except Exception:
                        # notifications are observability only, the operation already committed
                        logger.exception(f"Subscriber {subscriber!r} failed on {event.name}")
