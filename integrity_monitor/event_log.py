"""
Event Log - Append-only, order-preserving sink for raised events
"""

import logging
from typing import Iterator, List, Optional, Tuple

from .events import Event

logger = logging.getLogger(__name__)


class EventLog:
    """
    Chronological event log with single-slot duplicate suppression.

    An event is dropped when it has the same kind (and object class) as
    the most recently appended one. The same kind is accepted again once
    any other event has been appended in between.
    """

    def __init__(self):
        self._events: List[Event] = []

    def append(self, event: Event) -> bool:
        """
        Append an event unless it repeats the last one.

        Returns:
            True if the event was appended
        """
        last = self.last
        if last is not None and last.key == event.key:
            logger.debug(f"Dropped repeated event: {event.description}")
            return False
        self._events.append(event)
        return True

    @property
    def last(self) -> Optional[Event]:
        return self._events[-1] if self._events else None

    def snapshot(self) -> Tuple[Event, ...]:
        """Chronological copy of the log as of now"""
        return tuple(self._events)

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[Event]:
        return iter(self.snapshot())
