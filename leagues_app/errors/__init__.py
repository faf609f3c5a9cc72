"""
Error classification for roster submission and catalog handling.

This module provides the structured exception hierarchy for errors raised while
validating a submission locally, talking to the submission store, and decoding
catalog payloads.
"""

from .data_quality import (
    DataQualityError,
    MissingDataError,
    MalformedDataError,
)
from .submission import (
    SubmissionError,
    EmptyRosterError,
    IncompleteRosterError,
    InvalidContestStateError,
    DuplicateSubmissionError,
    OwnerIdentityMissingError,
)
from .system_failures import (
    SystemFailureError,
    PersistenceError,
    PartialSubmissionError,
    SubmissionTimeoutError,
    ConfigurationError,
)

__all__ = [
    # Data Quality Errors
    "DataQualityError",
    "MissingDataError",
    "MalformedDataError",
    # Submission Validation Errors
    "SubmissionError",
    "EmptyRosterError",
    "IncompleteRosterError",
    "InvalidContestStateError",
    "DuplicateSubmissionError",
    "OwnerIdentityMissingError",
    # System Failures
    "SystemFailureError",
    "PersistenceError",
    "PartialSubmissionError",
    "SubmissionTimeoutError",
    "ConfigurationError",
]
