"""
Integrity Scorer - Reduces an event log to an integrity score
"""

import logging
from collections import Counter
from typing import Any, Dict, Iterable, Optional

from ..config import MonitorSettings, get_settings
from ..events import EventKind

logger = logging.getLogger(__name__)


def _kind_value(event: Any) -> str:
    kind = getattr(event, "kind", None)
    return getattr(kind, "value", kind) or ""


class IntegrityScorer:
    """
    Computes the integrity score of a session from its events.

    Formula:
        integrity_score = max(floor, 100 - sum(deduction(event)))

    Default deductions:
        MultipleFacesDetected          15
        UserAbsent                     10
        UserLookingAway                 5
        SuspiciousObject(cellPhone)    20
        SuspiciousObject(book)         15

    Unknown kinds and unlisted object classes deduct nothing. The result
    depends only on the multiset of events, never on their order, so live
    logs and reports fetched back from the store score identically.
    Events only need `kind` and `object_class` attributes.
    """

    def __init__(
        self,
        settings: Optional[MonitorSettings] = None,
        deductions: Optional[Dict[str, int]] = None,
        object_deductions: Optional[Dict[str, int]] = None,
    ):
        """
        Initialize scorer with optional deduction overrides.

        Args:
            settings: Source of the default tables and score bounds
            deductions: Overrides per event kind
            object_deductions: Overrides per suspicious object class
        """
        settings = settings or get_settings()
        self.base = settings.SCORE_BASE
        self.floor = settings.SCORE_FLOOR

        self.deductions = dict(settings.EVENT_DEDUCTIONS)
        if deductions:
            self.deductions.update(deductions)
        self.object_deductions = dict(settings.OBJECT_DEDUCTIONS)
        if object_deductions:
            self.object_deductions.update(object_deductions)

        for name, points in {**self.deductions, **self.object_deductions}.items():
            if points < 0:
                raise ValueError(f"Deduction for {name} must not be negative, got {points}")

    def deduction_for(self, event: Any) -> int:
        """Points deducted for a single event"""
        kind = _kind_value(event)
        if kind == EventKind.SUSPICIOUS_OBJECT_DETECTED.value:
            return self.object_deductions.get(getattr(event, "object_class", None) or "", 0)
        return self.deductions.get(kind, 0)

    def compute(self, events: Iterable[Any]) -> int:
        """
        Compute integrity score from events.

        Args:
            events: Chronological events of one session

        Returns:
            Integrity score (floor-100, higher is better)
        """
        total = sum(self.deduction_for(event) for event in events)
        final_score = max(self.floor, self.base - total)

        logger.info(f"Computed integrity score: {final_score} (deductions={total})")
        return final_score

    def compute_breakdown(self, events: Iterable[Any]) -> Dict[str, Any]:
        """
        Compute integrity score with a per-kind breakdown.

        Object events are keyed as "SuspiciousObjectDetected:<class>".
        """
        counts: Counter = Counter()
        penalties: Dict[str, int] = {}

        for event in events:
            kind = _kind_value(event)
            if kind == EventKind.SUSPICIOUS_OBJECT_DETECTED.value:
                kind = f"{kind}:{getattr(event, 'object_class', None)}"
            counts[kind] += 1
            penalties[kind] = penalties.get(kind, 0) + self.deduction_for(event)

        total = sum(penalties.values())
        final_score = max(self.floor, self.base - total)

        return {
            "integrity_score": final_score,
            "total_deduction": total,
            "breakdown": {
                kind: {"count": counts[kind], "deduction": penalties[kind]}
                for kind in counts
            },
        }

    def get_rating(self, score: int) -> str:
        """
        Convert score to a rating band.

        Returns:
            'good' (above 70), 'warning' (above 40) or 'poor'
        """
        if score > 70:
            return "good"
        elif score > 40:
            return "warning"
        else:
            return "poor"
