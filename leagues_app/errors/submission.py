"""
Submission validation errors.

All of these are detected locally by the submission controller before the
gateway is called, so none of them leave a partial record behind.
"""

from typing import Optional, Dict, Any


class SubmissionError(Exception):
    """Base class for submissions rejected before reaching storage."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = True


class EmptyRosterError(SubmissionError):
    """Submit attempted with zero selections."""


class IncompleteRosterError(SubmissionError):
    """Submit attempted before the roster reached its required size."""

    def __init__(self, message: str, required_size: Optional[int] = None,
                 actual_size: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.required_size = required_size
        self.actual_size = actual_size


class InvalidContestStateError(SubmissionError):
    """Contest is not in a state that accepts (or reports) entries."""

    def __init__(self, message: str, contest_id: Optional[str] = None,
                 contest_state: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.contest_id = contest_id
        self.contest_state = contest_state


class DuplicateSubmissionError(SubmissionError):
    """Roster already submitted, or a submission is still in flight."""

    def __init__(self, message: str, in_flight: bool = False, **kwargs):
        super().__init__(message, **kwargs)
        self.in_flight = in_flight


class OwnerIdentityMissingError(SubmissionError):
    """No submitter identity (wallet address) is connected."""
