"""Report transport and retrieval"""

from .client import ReportClient
from .schemas import EventRecord, ReportPayload, ReportRecord

__all__ = ["ReportClient", "EventRecord", "ReportPayload", "ReportRecord"]
