"""Base class for submission storage backends."""

from abc import ABC, abstractmethod
from typing import Sequence

from ..data.models import Selection, Submission


class SubmissionGateway(ABC):
    """
    Durable storage for submitted rosters.

    save_submission must be atomic from the caller's point of view: either the
    team record and one selection record per roster entry are all stored, or a
    PersistenceError is raised and nothing is left behind.
    """

    @abstractmethod
    def save_submission(
        self,
        selections: Sequence[Selection],
        contest_id: str,
        owner_identity: str,
        team_name: str = "My Team"
    ) -> Submission:
        """
        Store a roster against a contest.

        Args:
            selections: Roster snapshot; order is kept as a position index
            contest_id: Contest the roster is entered into
            owner_identity: Submitter identity (wallet address)
            team_name: Display name stored with the team

        Returns:
            The stored Submission

        Raises:
            PersistenceError: On storage, network or schema failure
        """

    @abstractmethod
    def list_submissions(self, contest_id: str) -> list[Submission]:
        """All submissions for a contest, oldest first."""

    @abstractmethod
    def health_check(self) -> bool:
        """Check if the backend is reachable."""
