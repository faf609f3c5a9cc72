"""
Leaderboard projection over persisted submissions.

Read-only: ranks stored submissions for a finished contest. Ranking is by score
descending; equal scores go to the earlier submission, then to the lower
submission id, so ranks are always 1..N without gaps or shared places.
"""

from dataclasses import dataclass
from typing import Mapping, Protocol, Sequence

from ..data.models import Contest, ContestState, Submission
from ..errors import InvalidContestStateError
from ..logging.config import get_logger
from .scoring import PredictionScorer

logger = get_logger(__name__)


class SubmissionReader(Protocol):
    """Anything that can list the stored submissions of a contest."""

    def list_submissions(self, contest_id: str) -> list[Submission]:
        ...


@dataclass(frozen=True)
class LeaderboardEntry:
    """One ranked row."""
    rank: int
    submission_id: str
    submitter_identity: str
    score: int
    asset_names: tuple[str, ...]


@dataclass(frozen=True)
class ContestLeaderboard:
    """Ranked results for a single contest."""
    contest_id: str
    contest_name: str
    sport: str
    entries: tuple[LeaderboardEntry, ...]


def rank_submissions(
    submissions: Sequence[Submission],
    scores: Mapping[str, int]
) -> list[LeaderboardEntry]:
    """
    Rank submissions by score.

    Args:
        submissions: Submissions of one contest
        scores: Score per submission id; missing ids score 0

    Returns:
        Entries ordered best first, ranked from 1
    """
    ordered = sorted(
        submissions,
        key=lambda s: (-scores.get(s.submission_id, 0), s.submitted_at, s.submission_id)
    )

    return [
        LeaderboardEntry(
            rank=position,
            submission_id=submission.submission_id,
            submitter_identity=submission.owner_identity,
            score=scores.get(submission.submission_id, 0),
            asset_names=submission.asset_names,
        )
        for position, submission in enumerate(ordered, start=1)
    ]


class PredictionResultProjection:
    """Builds contest leaderboards and owner views from stored submissions."""

    def __init__(self, reader: SubmissionReader, scorer: PredictionScorer):
        self.reader = reader
        self.scorer = scorer

    def leaderboard(self, contest: Contest, price_changes: Mapping[str, float]) -> ContestLeaderboard:
        """
        Rank every submission of a finished contest.

        Raises:
            InvalidContestStateError: If the contest has not finished
        """
        if contest.state != ContestState.FINISHED:
            raise InvalidContestStateError(
                f"Contest {contest.id} is {contest.state.value}; results need a finished contest",
                contest_id=contest.id,
                contest_state=contest.state.value
            )

        submissions = self.reader.list_submissions(contest.id)
        scores = {
            s.submission_id: self.scorer.score_submission(s, price_changes)
            for s in submissions
        }
        entries = rank_submissions(submissions, scores)

        logger.info(
            "Leaderboard built",
            contest_id=contest.id,
            entry_count=len(entries),
            top_score=entries[0].score if entries else None
        )

        return ContestLeaderboard(
            contest_id=contest.id,
            contest_name=contest.name,
            sport=contest.sport,
            entries=tuple(entries),
        )

    def submissions_for_owner(self, owner_identity: str, contest_id: str) -> list[Submission]:
        """An owner's submissions for a contest, newest first."""
        wanted = owner_identity.lower()
        owned = [
            s for s in self.reader.list_submissions(contest_id)
            if s.owner_identity.lower() == wanted
        ]
        return sorted(owned, key=lambda s: (s.submitted_at, s.submission_id), reverse=True)
