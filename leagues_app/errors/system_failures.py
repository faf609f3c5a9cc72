"""
System failure error classifications.

These exceptions represent failures outside the core: storage, network and
configuration problems. They are surfaced to the caller, never swallowed.
"""

from typing import Optional, Dict, Any


class SystemFailureError(Exception):
    """Base class for failures outside the core's control."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class PersistenceError(SystemFailureError):
    """Database, network or schema failure while storing a submission."""

    def __init__(self, message: str, operation: Optional[str] = None,
                 target: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.operation = operation
        self.target = target
        # The roster is left intact, so the caller may submit again.
        self.recoverable = True


class PartialSubmissionError(PersistenceError):
    """Parent team record stored without all of its selection rows."""

    def __init__(self, message: str, expected_rows: Optional[int] = None,
                 stored_rows: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.expected_rows = expected_rows
        self.stored_rows = stored_rows


class SubmissionTimeoutError(PersistenceError):
    """Gateway call did not finish within the configured timeout."""

    def __init__(self, message: str, timeout_seconds: Optional[float] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.timeout_seconds = timeout_seconds


class ConfigurationError(SystemFailureError):
    """Configuration values failed validation."""

    def __init__(self, message: str, errors: Optional[list] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.errors = errors or []
