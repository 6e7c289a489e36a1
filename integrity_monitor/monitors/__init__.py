"""Per-axis monitors"""

from .debounce import DebounceTimer, TimerState
from .presence import PresenceMonitor
from .attention import AttentionMonitor, horizontal_distance
from .multiplicity import MultiFaceGate
from .objects import ObjectFlagEvaluator

__all__ = [
    "DebounceTimer",
    "TimerState",
    "PresenceMonitor",
    "AttentionMonitor",
    "horizontal_distance",
    "MultiFaceGate",
    "ObjectFlagEvaluator",
]
