"""
Monitoring API - FastAPI endpoints for push-mode sessions and scoring

Perception runs next to the camera (e.g. in the candidate's browser);
each sample's observations are pushed here.

Endpoints:
- POST /api/monitor/start - Start a monitoring session
- POST /api/monitor/sample - Push one sample of face/object observations
- GET /api/monitor/status/{session_id} - Get session status
- POST /api/monitor/stop - Stop session, score it, optionally submit the report
- POST /api/monitor/score - Score a list of events
- GET /api/monitor/reports/{report_id}/score - Fetch a stored report and score it
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from .config import get_settings
from .exceptions import ConfigurationError, ReportNotFoundError, ReportTransportError
from .perception.port import FaceObservation, Keypoint, ObjectObservation, Sample
from .reports import EventRecord, ReportClient
from .scoring import IntegrityScorer
from .session import MonitorSession

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/monitor", tags=["Monitoring"])

# In-memory session storage, one process
_sessions: Dict[str, MonitorSession] = {}


def get_report_client() -> ReportClient:
    return ReportClient()


# ============== Request/Response Models ==============

class StartSessionRequest(BaseModel):
    """Request to start a monitoring session"""
    candidate_name: str = Field(..., description="Candidate shown on the report")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Caller identity data")
    overrides: Optional[Dict[str, Any]] = Field(None, description="Per-session setting overrides")


class StartSessionResponse(BaseModel):
    session_id: str
    status: str
    message: str


class KeypointModel(BaseModel):
    x: float
    y: float


class FaceModel(BaseModel):
    keypoints: Dict[str, KeypointModel] = Field(default_factory=dict)

    def to_observation(self) -> FaceObservation:
        return FaceObservation({name: Keypoint(p.x, p.y) for name, p in self.keypoints.items()})


class ObjectModel(BaseModel):
    object_class: str = Field(..., alias="class")
    score: float = Field(..., ge=0.0, le=1.0)

    class Config:
        populate_by_name = True

    def to_observation(self) -> ObjectObservation:
        return ObjectObservation(self.object_class, self.score)


class SampleRequest(BaseModel):
    """One sample of perception results"""
    session_id: str
    faces: List[FaceModel] = Field(default_factory=list)
    objects: List[ObjectModel] = Field(default_factory=list)


class SampleResponse(BaseModel):
    processed: bool
    events_raised: List[EventRecord]
    event_count: int


class StopSessionRequest(BaseModel):
    session_id: str
    submit: bool = Field(False, description="Submit the report to the report store")


class StopSessionResponse(BaseModel):
    """Final monitoring results"""
    session_id: str
    integrity_score: int
    rating: str
    events: List[EventRecord]
    duration_seconds: int
    samples_processed: int
    report_id: Optional[str] = None


class SessionStatusResponse(BaseModel):
    session_id: str
    is_active: bool
    samples_processed: int
    current_score: int
    event_count: int
    duration_seconds: int
    timers: Dict[str, str]


class ScoreRequest(BaseModel):
    events: List[EventRecord]


class ScoreResponse(BaseModel):
    integrity_score: int
    rating: str
    total_deduction: int
    breakdown: Dict[str, Dict[str, int]]
    report_id: Optional[str] = None


# ============== Helpers ==============

def _get_session(session_id: str) -> MonitorSession:
    session = _sessions.get(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


def _evict_idle_sessions() -> None:
    """Close and drop sessions that stopped receiving samples"""
    for session_id, session in list(_sessions.items()):
        if session.idle_seconds > session.settings.SESSION_IDLE_TIMEOUT_SECONDS:
            session.close()
            del _sessions[session_id]
            logger.info(f"Evicted idle session {session_id} after {session.idle_seconds:.0f}s")


def _score(events, report_id: Optional[str] = None) -> ScoreResponse:
    scorer = IntegrityScorer(get_settings())
    breakdown = scorer.compute_breakdown(events)
    score = breakdown["integrity_score"]
    return ScoreResponse(
        integrity_score=score,
        rating=scorer.get_rating(score),
        total_deduction=breakdown["total_deduction"],
        breakdown=breakdown["breakdown"],
        report_id=report_id
    )


# ============== API Endpoints ==============

@router.post("/start", response_model=StartSessionResponse)
async def start_session(request: StartSessionRequest):
    """
    Start a new monitoring session.

    Deferred checks run on the server's event loop, so absence and
    looking-away events are raised even if samples stop arriving.
    Sessions idle for longer than SESSION_IDLE_TIMEOUT_SECONDS are evicted.
    """
    _evict_idle_sessions()

    try:
        session = MonitorSession(
            candidate_name=request.candidate_name,
            metadata=request.metadata,
            overrides=request.overrides
        )
    except ConfigurationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    _sessions[session.id] = session

    logger.info(f"Started monitoring session: {session.id}")

    return StartSessionResponse(
        session_id=session.id,
        status="active",
        message="Monitoring session started successfully"
    )


@router.post("/sample", response_model=SampleResponse)
async def push_sample(request: SampleRequest):
    """Feed one sample of observations through the session's monitors"""
    session = _get_session(request.session_id)

    if not session.is_active:
        raise HTTPException(status_code=409, detail="Session is not active")

    sample = Sample(
        faces=tuple(face.to_observation() for face in request.faces),
        objects=tuple(obj.to_observation() for obj in request.objects)
    )
    raised = session.process_sample(sample)

    return SampleResponse(
        processed=True,
        events_raised=[EventRecord.from_event(event) for event in raised],
        event_count=len(session.log)
    )


@router.get("/status/{session_id}", response_model=SessionStatusResponse)
async def get_session_status(session_id: str):
    """Get current status of a monitoring session"""
    session = _get_session(session_id)
    scorer = IntegrityScorer(session.settings)

    return SessionStatusResponse(
        session_id=session.id,
        is_active=session.is_active,
        samples_processed=session.samples_processed,
        current_score=scorer.compute(session.log.snapshot()),
        event_count=len(session.log),
        duration_seconds=session.duration_seconds,
        timers={
            "presence": session.presence.state.value,
            "attention": session.attention.state.value,
            "multiplicity": session.multiplicity.state.value
        }
    )


@router.post("/stop", response_model=StopSessionResponse)
async def stop_session(
    request: StopSessionRequest,
    client: ReportClient = Depends(get_report_client)
):
    """
    Stop a monitoring session and get final results.

    Pending checks are discarded. With submit=true the report is sent to
    the report store; a store failure returns 502 and the session stays
    finished.
    """
    session = _get_session(request.session_id)
    result = session.finalize()
    _sessions.pop(session.id, None)

    report_id = None
    if request.submit:
        try:
            report_id = await client.submit(result["report"])
        except ReportTransportError as e:
            logger.error(f"Report submission failed for {session.id}: {e}")
            raise HTTPException(status_code=502, detail=str(e))

    return StopSessionResponse(
        session_id=result["session_id"],
        integrity_score=result["integrity_score"],
        rating=result["rating"],
        events=[EventRecord.from_event(event) for event in result["report"].events],
        duration_seconds=result["duration_seconds"],
        samples_processed=result["samples_processed"],
        report_id=report_id
    )


@router.post("/score", response_model=ScoreResponse)
async def score_events(request: ScoreRequest):
    """Score an event list, e.g. one read back from the report store"""
    return _score(request.events)


@router.get("/reports/{report_id}/score", response_model=ScoreResponse)
async def score_stored_report(
    report_id: str,
    client: ReportClient = Depends(get_report_client)
):
    """Fetch a stored report and compute its integrity score"""
    try:
        report = await client.fetch(report_id)
    except ReportNotFoundError:
        raise HTTPException(status_code=404, detail="No report found with that ID")
    except ReportTransportError as e:
        logger.error(f"Report retrieval failed for {report_id}: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    return _score(report.events, report_id=report.id)


@router.get("/health")
async def health_check():
    """Health check for the monitoring module"""
    return {
        "status": "healthy",
        "active_sessions": len(_sessions),
        "module": "monitoring"
    }
