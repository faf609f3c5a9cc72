"""
Submission persistence layer.

Gateways that durably store submitted rosters: a local SQLite store and a
PostgREST (Supabase) HTTP backend.
"""
from .base import SubmissionGateway
from .rest_gateway import RestSubmissionGateway
from .submission_store import SubmissionStore

__all__ = ["SubmissionGateway", "RestSubmissionGateway", "SubmissionStore"]
