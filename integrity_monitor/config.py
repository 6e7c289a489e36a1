"""
Integrity Monitor Configuration Settings

All values can be overridden from the environment with the MONITOR_ prefix
(e.g. MONITOR_SAMPLING_PERIOD_MS=1000) or from a local .env file.
Dict-valued settings are read as JSON.
"""
from functools import lru_cache
from typing import Dict, Literal, Optional

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings


class MonitorSettings(BaseSettings):
    """Configuration for the integrity monitoring engine."""

    # API Settings
    APP_NAME: str = "Integrity Monitor Service"
    DEBUG: bool = True

    # Sampling
    SAMPLING_PERIOD_MS: int = 2000
    FRAME_MIN_BRIGHTNESS: float = 5.0  # mean pixel value below this = camera not ready

    # Presence axis
    ABSENCE_THRESHOLD_MS: int = 10000

    # Attention axis
    LOOKING_AWAY_THRESHOLD: float = 35.0  # same units as keypoints (pixels)
    LOOKING_AWAY_DEBOUNCE_MS: int = 5000
    ATTENTION_FACE_POLICY: Literal["exactly_one", "at_least_one"] = "exactly_one"

    # Multiplicity axis
    MULTIPLE_FACES_POLICY: Literal["debounced", "immediate"] = "debounced"
    MULTIPLE_FACES_DEBOUNCE_MS: int = 2000

    # Object axis: class -> minimum confidence (strictly exceeded)
    SUSPICIOUS_OBJECTS: Dict[str, float] = {
        "cellPhone": 0.6,
        "book": 0.6,
    }

    # Scoring
    SCORE_BASE: int = 100
    SCORE_FLOOR: int = 0
    EVENT_DEDUCTIONS: Dict[str, int] = {
        "MultipleFacesDetected": 15,
        "UserAbsent": 10,
        "UserLookingAway": 5,
    }
    OBJECT_DEDUCTIONS: Dict[str, int] = {
        "cellPhone": 20,
        "book": 15,
    }

    # Report store
    REPORT_SERVICE_URL: str = "http://localhost:4000"
    REPORT_TIMEOUT_SECONDS: float = 10.0

    # Push-mode sessions with no samples for this long are evicted
    SESSION_IDLE_TIMEOUT_SECONDS: float = 3600.0

    # Perception models (optional extra)
    YOLO_MODEL_PATH: Optional[str] = None
    YOLO_CONFIDENCE: float = 0.25
    MAX_FACES: int = 4

    class Config:
        env_prefix = "MONITOR_"
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"
        validate_assignment = True

    @field_validator(
        "SAMPLING_PERIOD_MS",
        "ABSENCE_THRESHOLD_MS",
        "LOOKING_AWAY_DEBOUNCE_MS",
        "MULTIPLE_FACES_DEBOUNCE_MS",
    )
    @classmethod
    def _positive_interval(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("intervals must be greater than 0 ms")
        return value

    @field_validator("LOOKING_AWAY_THRESHOLD", "REPORT_TIMEOUT_SECONDS", "SESSION_IDLE_TIMEOUT_SECONDS")
    @classmethod
    def _positive_threshold(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("must be greater than 0")
        return value

    @field_validator("SUSPICIOUS_OBJECTS")
    @classmethod
    def _check_suspicious_objects(cls, value: Dict[str, float]) -> Dict[str, float]:
        if not value:
            raise ValueError("suspicious-object set must not be empty")
        for name, confidence in value.items():
            if not name:
                raise ValueError("object class names must not be empty")
            if not 0.0 <= confidence <= 1.0:
                raise ValueError(f"confidence threshold for {name!r} must be within [0, 1]")
        return value

    @field_validator("EVENT_DEDUCTIONS", "OBJECT_DEDUCTIONS")
    @classmethod
    def _non_negative_deductions(cls, value: Dict[str, int]) -> Dict[str, int]:
        for name, points in value.items():
            if points < 0:
                raise ValueError(f"deduction for {name!r} must not be negative")
        return value

    @model_validator(mode="after")
    def _check_score_bounds(self) -> "MonitorSettings":
        if self.SCORE_FLOOR >= self.SCORE_BASE:
            raise ValueError("SCORE_FLOOR must be lower than SCORE_BASE")
        return self

    @property
    def sampling_period(self) -> float:
        """Sampling period in seconds"""
        return self.SAMPLING_PERIOD_MS / 1000.0


@lru_cache(maxsize=1)
def get_settings() -> MonitorSettings:
    return MonitorSettings()
