"""
Monitor errors

Every failure is scoped to a single sample or a single session.
"""


class MonitorError(Exception):
    """Base class for integrity monitor errors"""
    pass


class ConfigurationError(MonitorError, ValueError):
    """Invalid thresholds or an empty suspicious-object set"""
    pass


class PerceptionError(MonitorError):
    """A perception call failed for one sample"""
    pass


class FrameNotReadyError(PerceptionError):
    """The frame source has no usable frame yet"""
    pass


class SessionClosedError(MonitorError):
    """The session has been terminated"""
    pass


class ReportTransportError(MonitorError):
    """Report submission or retrieval failed"""
    pass


class ReportSubmissionError(ReportTransportError):
    """The report store rejected or did not accept the report"""
    pass


class ReportNotFoundError(ReportTransportError):
    """No report exists with the requested ID"""

    def __init__(self, report_id: str):
        super().__init__(f"No report found with ID {report_id}")
        self.report_id = report_id
