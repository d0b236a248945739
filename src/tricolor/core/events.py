"""
In-process event bus for tricolor.

The session publishes what happened (a draw, a finished cycle, a phase
change in the reveal, a failure) and any number of listeners react: a UI,
a sound player, a log sink. Publishers never learn who is listening, and a
misbehaving listener can't break a draw.
"""

from collections import deque
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Awaitable, Callable
import asyncio
import inspect
import logging
import time

logger = logging.getLogger(__name__)


class EventType(Enum):
    """What the session announces."""
    # Draws and cycles
    DRAW_COMPLETED = auto()
    CYCLE_COMPLETED = auto()
    CYCLE_STARTED = auto()

    # Persistence
    STATE_LOADED = auto()
    STATE_SAVED = auto()

    # Reveal
    ANIMATION_PHASE_CHANGED = auto()
    ANIMATION_FINISHED = auto()

    ERROR = auto()


@dataclass
class Event:
    """
    One published occurrence.

    Attributes:
        type: EventType, or a free-form string for ad-hoc events
        data: JSON-friendly payload
        source: Publisher name
        timestamp: Creation time (epoch seconds)
    """
    type: EventType | str
    data: dict[str, Any] = field(default_factory=dict)
    source: str = "lottery"
    timestamp: float = field(default_factory=time.time)


Listener = Callable[[Event], None] | Callable[[Event], Awaitable[None]]

# Key under which catch-all listeners are registered
_ANY = None


class EventBus:
    """
    Publish/subscribe hub.

    ``emit`` calls plain listeners in registration order and skips
    coroutine listeners; ``emit_async`` additionally awaits the coroutine
    ones concurrently. Exceptions from listeners are logged and swallowed.
    """

    def __init__(self, history_limit: int = 100) -> None:
        self._listeners: dict[EventType | str | None, list[Listener]] = {}
        self._recent: deque[Event] = deque(maxlen=history_limit)

    def subscribe(
        self,
        event_type: EventType | str | None,
        listener: Listener,
    ) -> Callable[[], None]:
        """
        Register ``listener`` for one event type (None means every type).

        Returns:
            A function that removes the registration again
        """
        bucket = self._listeners.setdefault(event_type, [])
        bucket.append(listener)
        logger.debug(f"Listener added for {event_type or 'all events'}")

        def unsubscribe() -> None:
            if listener in bucket:
                bucket.remove(listener)
                logger.debug(f"Listener removed for {event_type or 'all events'}")

        return unsubscribe

    def subscribe_all(self, listener: Listener) -> Callable[[], None]:
        return self.subscribe(_ANY, listener)

    def emit(self, event: Event) -> None:
        """Record ``event`` and deliver it to plain listeners."""
        self._recent.append(event)
        for listener in self._targets(event):
            if not inspect.iscoroutinefunction(listener):
                self._call(listener, event)

    async def emit_async(self, event: Event) -> None:
        """Record ``event`` and deliver it to every listener, awaiting coroutines."""
        self._recent.append(event)

        pending = []
        for listener in self._targets(event):
            if inspect.iscoroutinefunction(listener):
                pending.append(listener(event))
            else:
                self._call(listener, event)

        for outcome in await asyncio.gather(*pending, return_exceptions=True):
            if isinstance(outcome, Exception):
                logger.error(f"Async listener failed on {event.type}: {outcome}")

    def get_history(
        self,
        event_type: EventType | str | None = None,
        limit: int = 10,
    ) -> list[Event]:
        """Most recent events, oldest first, optionally of one type only."""
        events = [e for e in self._recent if event_type is None or e.type == event_type]
        return events[-limit:]

    def clear_history(self) -> None:
        self._recent.clear()

    def _targets(self, event: Event) -> list[Listener]:
        # Copy so listeners may unsubscribe while being called
        return [*self._listeners.get(event.type, ()), *self._listeners.get(_ANY, ())]

    @staticmethod
    def _call(listener: Listener, event: Event) -> None:
        try:
            listener(event)
        except Exception as e:
            logger.error(f"Listener failed on {event.type}: {e}")
