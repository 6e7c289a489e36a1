"""Callback the monitors raise events through"""

from typing import Optional, Protocol

from ..events import EventKind


class EventSink(Protocol):
    def __call__(self, kind: EventKind, object_class: Optional[str] = None) -> None: ...
