"""
Monitor Logger - Single-line diagnostics for monitoring sessions
"""

import logging
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


def log_monitor_event(
    session_id: str,
    event_type: str,
    details: Optional[Dict[str, Any]] = None,
    level: str = "info"
):
    """
    Log a monitoring event.

    Args:
        session_id: Monitoring session ID
        event_type: Type of event (session_start, event_raised, sample_skipped, ...)
        details: Optional event details
        level: Log level (debug, info, warning, error)
    """
    message = f"[MONITOR] session={session_id} event={event_type}"

    if details:
        detail_str = " ".join(f"{k}={v}" for k, v in details.items())
        message += f" {detail_str}"

    if level == "debug":
        logger.debug(message)
    elif level == "warning":
        logger.warning(message)
    elif level == "error":
        logger.error(message)
    else:
        logger.info(message)


def log_session_start(session_id: str, candidate_name: str):
    """Log session start event"""
    log_monitor_event(
        session_id=session_id,
        event_type="session_start",
        details={"candidate": candidate_name}
    )


def log_session_end(session_id: str, event_count: int, samples: int, duration_seconds: int):
    """Log session end event"""
    log_monitor_event(
        session_id=session_id,
        event_type="session_end",
        details={
            "events": event_count,
            "samples_processed": samples,
            "duration_seconds": duration_seconds
        }
    )


def log_event_raised(session_id: str, kind: str, description: str):
    """Log an event appended to the session log"""
    log_monitor_event(
        session_id=session_id,
        event_type="event_raised",
        details={"kind": kind, "description": repr(description)},
        level="warning"
    )


def log_sample_skipped(session_id: str, reason: str):
    """Log a sample dropped because of a perception failure"""
    log_monitor_event(
        session_id=session_id,
        event_type="sample_skipped",
        details={"reason": repr(reason)},
        level="debug"
    )
