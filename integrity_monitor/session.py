"""
Monitor Session - Owns the event log and the per-axis monitors of one assessment
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from .clock import Clock, LoopClock
from .config import MonitorSettings, get_settings
from .event_log import EventLog
from .events import Event, EventKind, describe
from .exceptions import ConfigurationError, SessionClosedError
from .monitors import AttentionMonitor, MultiFaceGate, ObjectFlagEvaluator, PresenceMonitor
from .perception.port import FrameSource, PerceptionPort, Sample
from .scheduler import SamplingScheduler
from .scoring import IntegrityScorer
from .utils.logging import log_event_raised, log_sample_skipped, log_session_end, log_session_start

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionReport:
    """Output of a finished session, ready for the report store"""

    session_id: str
    candidate_name: str
    events: Tuple[Event, ...]
    duration_seconds: int
    created_at: datetime
    metadata: Dict[str, Any] = field(default_factory=dict)


class MonitorSession:
    """
    Manages a single monitoring session.

    Each sample is fanned out in a fixed order: presence, attention,
    multiplicity, objects. Events raised by deferred checks between
    samples are appended when the check fires.
    """

    def __init__(
        self,
        candidate_name: str = "",
        settings: Optional[MonitorSettings] = None,
        clock: Optional[Clock] = None,
        session_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize a new monitoring session.

        Args:
            candidate_name: Name shown on the report
            settings: Base settings (defaults to the environment)
            clock: Time source; defaults to the running asyncio loop
            session_id: Optional custom session ID (auto-generated if not provided)
            metadata: Caller identity data passed through to the report
            overrides: Setting values replacing those in `settings`

        Raises:
            ConfigurationError: if the resulting configuration is invalid
        """
        self.settings = self._resolve_settings(settings, overrides)
        self.id = session_id or f"MON_{uuid.uuid4().hex[:6].upper()}"
        self.candidate_name = candidate_name
        self.metadata = dict(metadata or {})
        self.clock = clock or LoopClock()
        self.log = EventLog()
        self.is_active = True
        self.samples_processed = 0
        self.samples_skipped = 0

        self._started_at = self.clock.now()
        self.last_activity = self._started_at
        self._ended_at: Optional[float] = None
        self._ended_wall: Optional[datetime] = None
        self._sample_events: Optional[List[Event]] = None
        self._scheduler: Optional[SamplingScheduler] = None

        s = self.settings
        try:
            self.presence = PresenceMonitor(self.clock, s.ABSENCE_THRESHOLD_MS, self._raise)
            self.attention = AttentionMonitor(
                self.clock,
                threshold=s.LOOKING_AWAY_THRESHOLD,
                debounce_ms=s.LOOKING_AWAY_DEBOUNCE_MS,
                raise_event=self._raise,
                face_policy=s.ATTENTION_FACE_POLICY,
            )
            self.multiplicity = MultiFaceGate(
                self.clock,
                raise_event=self._raise,
                policy=s.MULTIPLE_FACES_POLICY,
                debounce_ms=s.MULTIPLE_FACES_DEBOUNCE_MS,
            )
            self.objects = ObjectFlagEvaluator(s.SUSPICIOUS_OBJECTS, self._raise)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

        log_session_start(self.id, candidate_name)

    @staticmethod
    def _resolve_settings(
        settings: Optional[MonitorSettings],
        overrides: Optional[Dict[str, Any]],
    ) -> MonitorSettings:
        try:
            settings = settings or get_settings()
            if overrides:
                unknown = sorted(set(overrides) - set(MonitorSettings.model_fields))
                if unknown:
                    raise ConfigurationError(f"Unknown monitor settings: {', '.join(unknown)}")
                settings = MonitorSettings(**{**settings.model_dump(), **overrides})
        except ValidationError as e:
            raise ConfigurationError(f"Invalid monitor configuration: {e}") from e
        return settings

    # ------------------------------------------------------------------
    # Sampling
    # ------------------------------------------------------------------

    def process_sample(self, sample: Sample) -> List[Event]:
        """
        Feed one sample through every monitor.

        Returns:
            Events appended to the log by this sample
        """
        if not self.is_active:
            raise SessionClosedError(f"Session {self.id} is not active")

        self._sample_events = []
        try:
            self.presence.observe(sample.face_count)
            self.attention.observe(sample.faces)
            self.multiplicity.observe(sample.face_count)
            self.objects.observe(sample.objects)
            self.samples_processed += 1
            self.last_activity = self.clock.now()
            return self._sample_events
        finally:
            self._sample_events = None

    def record_skipped(self, reason: str) -> None:
        """Note a sample dropped by the scheduler"""
        self.samples_skipped += 1
        log_sample_skipped(self.id, reason)

    def _raise(self, kind: EventKind, object_class: Optional[str] = None) -> None:
        if not self.is_active:
            return

        event = Event(
            kind=kind,
            timestamp=self.clock.wall_time(),
            object_class=object_class,
            description=describe(
                kind,
                object_class,
                absence_seconds=self.settings.ABSENCE_THRESHOLD_MS / 1000,
                looking_away_seconds=self.settings.LOOKING_AWAY_DEBOUNCE_MS / 1000,
            ),
        )
        if self.log.append(event):
            log_event_raised(self.id, kind.value, event.description)
            if self._sample_events is not None:
                self._sample_events.append(event)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, frame_source: FrameSource, perception: PerceptionPort) -> SamplingScheduler:
        """
        Start pulling frames on the configured sampling period.

        Must be called from a running event loop.
        """
        if not self.is_active:
            raise SessionClosedError(f"Session {self.id} is not active")
        if self._scheduler is not None:
            raise RuntimeError(f"Session {self.id} is already sampling")

        self._scheduler = SamplingScheduler(
            self,
            frame_source,
            perception,
            period=self.settings.sampling_period,
            min_brightness=self.settings.FRAME_MIN_BRIGHTNESS,
        )
        self._scheduler.start()
        return self._scheduler

    async def stop(self) -> SessionReport:
        """Discard pending checks, stop sampling and return the report"""
        # Pending checks must not fire while the scheduler winds down
        self.close()
        if self._scheduler is not None:
            await self._scheduler.stop()
        return self.build_report()

    def close(self) -> None:
        """Terminate the session. Pending checks are discarded without firing."""
        if not self.is_active:
            return
        self.is_active = False
        self._ended_at = self.clock.now()
        self._ended_wall = self.clock.wall_time()
        self.presence.close()
        self.attention.close()
        self.multiplicity.close()

    @property
    def idle_seconds(self) -> float:
        """Seconds since the last sample, or since start if none arrived"""
        return self.clock.now() - self.last_activity

    @property
    def duration_seconds(self) -> int:
        end = self._ended_at if self._ended_at is not None else self.clock.now()
        return int(round(end - self._started_at))

    def build_report(self) -> SessionReport:
        return SessionReport(
            session_id=self.id,
            candidate_name=self.candidate_name,
            events=self.log.snapshot(),
            duration_seconds=self.duration_seconds,
            created_at=self._ended_wall or self.clock.wall_time(),
            metadata=dict(self.metadata),
        )

    def finalize(self, scorer: Optional[IntegrityScorer] = None) -> Dict[str, Any]:
        """
        Close the session and return final results.

        Returns:
            Final results with integrity score and the event log
        """
        self.close()
        scorer = scorer or IntegrityScorer(self.settings)
        report = self.build_report()
        score = scorer.compute(report.events)

        log_session_end(self.id, len(report.events), self.samples_processed, report.duration_seconds)

        result = {
            "session_id": self.id,
            "candidate_name": self.candidate_name,
            "integrity_score": score,
            "rating": scorer.get_rating(score),
            "events": [event.to_dict() for event in report.events],
            "duration_seconds": report.duration_seconds,
            "samples_processed": self.samples_processed,
            "samples_skipped": self.samples_skipped,
            "created_at": report.created_at.isoformat(),
            "report": report,
        }

        logger.info(f"Session {self.id} finalized: score={score}, events={len(report.events)}")

        return result
