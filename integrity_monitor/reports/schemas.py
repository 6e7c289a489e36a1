"""
Report wire schemas

Field aliases follow the report store's JSON format
(camelCase, `interviewDuration` for the session length).
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, model_validator

from ..events import Event, EventKind, describe
from ..perception.object_detector import normalize_label

_KNOWN_KINDS = {kind.value for kind in EventKind}


def _kind_from_description(text: str) -> Dict[str, Optional[str]]:
    """Map a display line ('Cell phone detected') back to kind and object class"""
    if text == "Multiple faces detected":
        return {"event": EventKind.MULTIPLE_FACES_DETECTED.value, "objectClass": None}
    if text.startswith("User absent"):
        return {"event": EventKind.USER_ABSENT.value, "objectClass": None}
    if text.startswith("User looking away"):
        return {"event": EventKind.USER_LOOKING_AWAY.value, "objectClass": None}
    if text.endswith(" detected"):
        return {
            "event": EventKind.SUSPICIOUS_OBJECT_DETECTED.value,
            "objectClass": normalize_label(text[: -len(" detected")]),
        }
    return {"event": text, "objectClass": None}


class EventRecord(BaseModel):
    """One event as stored in a report"""
    kind: str = Field(..., alias="event", description="Event kind, e.g. UserAbsent")
    object_class: Optional[str] = Field(None, alias="objectClass")
    timestamp: str = Field(..., description="ISO-8601 timestamp")
    description: str = ""

    class Config:
        populate_by_name = True

    @model_validator(mode="before")
    @classmethod
    def _accept_display_text(cls, data: Any) -> Any:
        # Older reports stored the display line in `event`
        if isinstance(data, dict):
            text = data.get("event", data.get("kind"))
            if isinstance(text, str) and text not in _KNOWN_KINDS:
                mapped = _kind_from_description(text)
                data = {**data, "description": data.get("description") or text}
                data.pop("kind", None)
                data["event"] = mapped["event"]
                if mapped["objectClass"] and not data.get("objectClass"):
                    data["objectClass"] = mapped["objectClass"]
        return data

    @classmethod
    def from_event(cls, event: Event) -> "EventRecord":
        return cls(
            kind=event.kind.value,
            object_class=event.object_class,
            timestamp=event.timestamp.isoformat(),
            description=event.description or describe(event.kind, event.object_class),
        )


class ReportPayload(BaseModel):
    """Report submitted at session end"""
    candidate_name: str = Field("", alias="candidateName")
    duration_seconds: int = Field(..., alias="interviewDuration", ge=0)
    events: List[EventRecord] = Field(default_factory=list)
    created_at: str = Field(..., alias="createdAt", description="ISO-8601 timestamp")
    metadata: Dict[str, Any] = Field(default_factory=dict)

    class Config:
        populate_by_name = True

    @classmethod
    def from_session_report(cls, report) -> "ReportPayload":
        return cls(
            candidate_name=report.candidate_name,
            duration_seconds=report.duration_seconds,
            events=[EventRecord.from_event(event) for event in report.events],
            created_at=report.created_at.isoformat(),
            metadata={"sessionId": report.session_id, **report.metadata},
        )

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class ReportRecord(ReportPayload):
    """Report as returned by the store"""
    id: str
