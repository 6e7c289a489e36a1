"""
Report Client - Submits finished sessions to the report store and reads them back

The store exposes:
- POST /api/report      -> 201 {"message": ..., "reportId": ...}
- GET  /api/report/{id} -> 200 {"id": ..., <report fields>} | 404

Failures are raised, never retried.
"""

import logging
from typing import TYPE_CHECKING, Optional, Union

import httpx
from pydantic import ValidationError

from ..config import MonitorSettings, get_settings
from ..exceptions import ReportNotFoundError, ReportSubmissionError, ReportTransportError
from .schemas import ReportPayload, ReportRecord

if TYPE_CHECKING:
    from ..session import SessionReport

logger = logging.getLogger(__name__)


class ReportClient:
    """Async HTTP client for the report store"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        settings: Optional[MonitorSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = settings or get_settings()
        self.base_url = (base_url or settings.REPORT_SERVICE_URL).rstrip("/")
        self.timeout = timeout or settings.REPORT_TIMEOUT_SECONDS
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self._transport)

    async def submit(self, report: Union[ReportPayload, "SessionReport"]) -> str:
        """
        Submit a finished report.

        Args:
            report: ReportPayload or a SessionReport from MonitorSession

        Returns:
            Report ID assigned by the store

        Raises:
            ReportSubmissionError: on network errors or a rejected request
        """
        if not isinstance(report, ReportPayload):
            report = ReportPayload.from_session_report(report)

        try:
            async with self._client() as client:
                response = await client.post("/api/report", json=report.to_wire())
        except httpx.HTTPError as e:
            logger.error(f"[REPORT] Error submitting report: {e}")
            raise ReportSubmissionError(f"Report submission failed: {e}") from e

        if response.status_code not in (200, 201):
            logger.warning(f"[REPORT] Submission rejected: {response.status_code}")
            raise ReportSubmissionError(f"Report store responded with {response.status_code}")

        try:
            report_id = response.json().get("reportId")
        except ValueError as e:
            raise ReportSubmissionError("Report store returned invalid JSON") from e

        if not report_id:
            raise ReportSubmissionError("Report store did not return a reportId")

        logger.info(f"[REPORT] Saved report {report_id} ({len(report.events)} events)")
        return str(report_id)

    async def fetch(self, report_id: str) -> ReportRecord:
        """
        Retrieve a stored report.

        Raises:
            ReportNotFoundError: if the store has no such report
            ReportTransportError: on network errors or malformed responses
        """
        try:
            async with self._client() as client:
                response = await client.get(f"/api/report/{report_id}")
        except httpx.HTTPError as e:
            logger.error(f"[REPORT] Error fetching report {report_id}: {e}")
            raise ReportTransportError(f"Report retrieval failed: {e}") from e

        if response.status_code == 404:
            raise ReportNotFoundError(report_id)
        if response.status_code != 200:
            raise ReportTransportError(f"Report store responded with {response.status_code}")

        try:
            return ReportRecord.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise ReportTransportError(f"Malformed report {report_id}: {e}") from e
