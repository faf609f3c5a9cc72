"""Prediction scoring against realized price moves."""

from typing import Mapping, Optional

from ..config.defaults import ScoringParams
from ..data.models import Prediction, Selection, Submission


class PredictionScorer:
    """
    Scores submissions from per-asset price change percentages.

    A pick is correct when it predicted Up and the asset rose, or Down and it
    fell. Flat or unpriced assets count as incorrect.
    """

    def __init__(self, params: Optional[ScoringParams] = None):
        self.params = params or ScoringParams()

    def is_correct(self, selection: Selection, change_pct: Optional[float]) -> bool:
        if change_pct is None:
            return False
        if selection.prediction == Prediction.UP:
            return change_pct > 0
        return change_pct < 0

    def score_selection(self, selection: Selection, change_pct: Optional[float]) -> int:
        if not self.is_correct(selection, change_pct):
            return self.params.points_per_incorrect

        bonus = round(abs(change_pct) * self.params.magnitude_weight)
        return self.params.points_per_correct + bonus

    def score_submission(self, submission: Submission, price_changes: Mapping[str, float]) -> int:
        """Total score; price_changes maps asset id to % change over the contest."""
        return sum(
            self.score_selection(selection, price_changes.get(selection.asset.id))
            for selection in submission.selections
        )
