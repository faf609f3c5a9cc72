"""Contest catalog: the latest fetched snapshot of contest records."""

from typing import Iterable, Optional, Union

from ..data.models import Contest, ContestState
from ..logging.config import get_logger

logger = get_logger(__name__)


class ContestCatalog:
    """Read-only view over the most recent contest snapshot."""

    def __init__(self, contests: Iterable[Contest] = ()):
        self._contests: tuple[Contest, ...] = ()
        self.refresh(contests)

    def refresh(self, contests: Iterable[Contest]) -> None:
        """Replace the snapshot, keeping feed order."""
        self._contests = tuple(contests)
        logger.info("Contest catalog refreshed", contest_count=len(self._contests))

    def current_contests(self) -> list[Contest]:
        return list(self._contests)

    def get(self, contest_id: str) -> Optional[Contest]:
        for contest in self._contests:
            if contest.id == contest_id:
                return contest
        return None

    def by_state(self, state: Union[ContestState, str]) -> list[Contest]:
        """Contests currently in the given lifecycle state."""
        wanted = ContestState.parse(state)
        return [c for c in self._contests if c.state == wanted]

    def __len__(self) -> int:
        return len(self._contests)
