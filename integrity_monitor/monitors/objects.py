"""
Object Flag Evaluator - Flags suspicious objects above a confidence threshold
"""

import logging
from typing import Dict, List, Sequence

from ..events import EventKind
from ..perception.port import ObjectObservation
from .sink import EventSink

logger = logging.getLogger(__name__)


class ObjectFlagEvaluator:
    """
    Stateless per-sample check.

    Each observation whose class is in the suspicious set and whose score
    strictly exceeds that class's threshold raises one event, in
    observation order.
    """

    def __init__(self, thresholds: Dict[str, float], raise_event: EventSink):
        if not thresholds:
            raise ValueError("Suspicious-object set must not be empty")
        self.thresholds = dict(thresholds)
        self._raise_event = raise_event

    def flagged(self, objects: Sequence[ObjectObservation]) -> List[str]:
        """Object classes that should be flagged for this sample"""
        hits = []
        for obj in objects:
            threshold = self.thresholds.get(obj.object_class)
            if threshold is not None and obj.score > threshold:
                hits.append(obj.object_class)
        return hits

    def observe(self, objects: Sequence[ObjectObservation]) -> None:
        for object_class in self.flagged(objects):
            logger.debug(f"Suspicious object: {object_class}")
            self._raise_event(EventKind.SUSPICIOUS_OBJECT_DETECTED, object_class)
