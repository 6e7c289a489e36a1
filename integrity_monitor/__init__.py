"""
Integrity Monitor

Watches a live video feed during a remote assessment and keeps a
timestamped log of integrity-relevant behaviour:
- Face absence
- Looking away from the screen
- Multiple people in frame
- Suspicious objects (phone, book)

The event log is reduced to an Integrity Score (0-100) at session end.
"""

from .config import MonitorSettings, get_settings
from .events import Event, EventKind
from .event_log import EventLog
from .scoring import IntegrityScorer
from .session import MonitorSession, SessionReport

__all__ = [
    "MonitorSettings",
    "get_settings",
    "Event",
    "EventKind",
    "EventLog",
    "IntegrityScorer",
    "MonitorSession",
    "SessionReport",
]
