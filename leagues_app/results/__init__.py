"""
Prediction results: scoring and ranked leaderboards over stored submissions.
"""
from .leaderboard import (
    ContestLeaderboard,
    LeaderboardEntry,
    PredictionResultProjection,
    rank_submissions,
)
from .scoring import PredictionScorer

__all__ = [
    "ContestLeaderboard",
    "LeaderboardEntry",
    "PredictionResultProjection",
    "PredictionScorer",
    "rank_submissions",
]
