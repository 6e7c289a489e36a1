"""
Pytest Configuration for Integrity Monitor Tests
"""
import pytest

from integrity_monitor.clock import VirtualClock
from integrity_monitor.config import MonitorSettings
from integrity_monitor.perception import FaceObservation, ObjectObservation, Sample
from integrity_monitor.session import MonitorSession


def _face(offset: float = 0.0) -> FaceObservation:
    """Face whose nose sits `offset` units right of the eye midpoint (100)"""
    return FaceObservation.from_points({
        "noseTip": (100.0 + offset, 120.0),
        "leftEye": (80.0, 100.0),
        "rightEye": (120.0, 100.0),
    })


def _sample(faces: int = 1, offset: float = 0.0, objects=()) -> Sample:
    return Sample(
        faces=tuple(_face(offset) for _ in range(faces)),
        objects=tuple(ObjectObservation(name, score) for name, score in objects)
    )


@pytest.fixture
def make_face():
    return _face


@pytest.fixture
def make_sample():
    return _sample


@pytest.fixture
def clock():
    return VirtualClock()


@pytest.fixture
def settings():
    """Default settings, isolated from any local .env"""
    return MonitorSettings(_env_file=None)


@pytest.fixture
def session(settings, clock):
    return MonitorSession("Test Candidate", settings=settings, clock=clock)


@pytest.fixture
def recorder():
    """EventSink that records (kind, object_class) pairs"""
    raised = []

    def sink(kind, object_class=None):
        raised.append((kind, object_class))

    sink.raised = raised
    return sink
