"""
Event model - Behavioural events raised by the monitors
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class EventKind(str, Enum):
    """Closed set of integrity events"""
    MULTIPLE_FACES_DETECTED = "MultipleFacesDetected"
    USER_ABSENT = "UserAbsent"
    USER_LOOKING_AWAY = "UserLookingAway"
    SUSPICIOUS_OBJECT_DETECTED = "SuspiciousObjectDetected"


def humanize_object_class(object_class: str) -> str:
    """'cellPhone' -> 'Cell phone'"""
    words = re.sub(r"(?<!^)(?=[A-Z])", " ", object_class).lower()
    return words[:1].upper() + words[1:]


def describe(
    kind: EventKind,
    object_class: Optional[str] = None,
    absence_seconds: float = 10,
    looking_away_seconds: float = 5,
) -> str:
    """Human-readable log line for an event"""
    if kind == EventKind.MULTIPLE_FACES_DETECTED:
        return "Multiple faces detected"
    if kind == EventKind.USER_ABSENT:
        return f"User absent for > {absence_seconds:g} seconds"
    if kind == EventKind.USER_LOOKING_AWAY:
        return f"User looking away for > {looking_away_seconds:g} seconds"
    return f"{humanize_object_class(object_class or 'object')} detected"


@dataclass(frozen=True)
class Event:
    """
    One immutable entry of the event log.

    object_class is set only for SUSPICIOUS_OBJECT_DETECTED.
    description is display text and takes no part in equality.
    """

    kind: EventKind
    timestamp: datetime
    object_class: Optional[str] = None
    description: str = field(default="", compare=False)

    def __post_init__(self):
        if self.kind == EventKind.SUSPICIOUS_OBJECT_DETECTED and not self.object_class:
            raise ValueError("SuspiciousObjectDetected requires an object_class")
        if self.kind != EventKind.SUSPICIOUS_OBJECT_DETECTED and self.object_class is not None:
            raise ValueError(f"{self.kind.value} does not carry an object_class")
        if not self.description:
            object.__setattr__(self, "description", describe(self.kind, self.object_class))

    @property
    def key(self) -> Tuple[EventKind, Optional[str]]:
        """Identity used for adjacent-duplicate suppression"""
        return (self.kind, self.object_class)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "event": self.kind.value,
            "timestamp": self.timestamp.isoformat(),
            "description": self.description,
        }
        if self.object_class is not None:
            data["objectClass"] = self.object_class
        return data
