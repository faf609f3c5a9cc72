"""
Session coordinator.

Wires catalogs, roster, submission controller and results projection for one
user session. Every collaborator is passed in or built here from configuration;
nothing is shared through module-level singletons.
"""

from typing import Any, Optional

from .catalog.assets import AssetCatalog
from .catalog.contests import ContestCatalog
from .config.defaults import DefaultConfig, get_default_config
from .config.loader import ConfigLoader
from .config.persistence import RestGatewayConfig, SqliteStoreConfig
from .data.models import Contest, Submission
from .logging.config import get_logger
from .persistence.base import SubmissionGateway
from .persistence.rest_gateway import RestSubmissionGateway
from .persistence.submission_store import SubmissionStore
from .results.leaderboard import PredictionResultProjection
from .results.scoring import PredictionScorer
from .state.roster import RosterManager
from .state.submission import SubmissionController

logger = get_logger(__name__)


def build_gateway(config: DefaultConfig) -> SubmissionGateway:
    """Create the submission gateway selected by persistence.backend."""
    if config.persistence.backend == "rest":
        return RestSubmissionGateway(RestGatewayConfig.from_env())
    return SubmissionStore(SqliteStoreConfig(db_path=config.persistence.db_path))


class LeagueSession:
    """
    One user's roster-building session.

    Catalog -> Roster -> Submission -> Storage, with leaderboards read back
    from the same storage.
    """

    def __init__(
        self,
        config: DefaultConfig,
        gateway: SubmissionGateway,
        owner_identity: Optional[str] = None,
        asset_catalog: Optional[AssetCatalog] = None,
        contest_catalog: Optional[ContestCatalog] = None
    ) -> None:
        self.config = config
        self.gateway = gateway
        self.asset_catalog = asset_catalog or AssetCatalog()
        self.contest_catalog = contest_catalog or ContestCatalog()
        self.roster = RosterManager(config.roster)
        self.controller = SubmissionController(
            self.roster,
            gateway,
            owner_identity=owner_identity,
            params=config.submission
        )
        self.scorer = PredictionScorer(config.scoring)
        self.results = PredictionResultProjection(gateway, self.scorer)

        logger.info(
            "League session initialized",
            roster_id=self.roster.roster_id,
            max_size=config.roster.max_size,
            backend=type(gateway).__name__
        )

    @classmethod
    def from_config(
        cls,
        config: Optional[DefaultConfig] = None,
        gateway: Optional[SubmissionGateway] = None,
        owner_identity: Optional[str] = None
    ) -> "LeagueSession":
        """Build a session, creating the configured gateway unless one is given."""
        config = config or get_default_config()
        return cls(config, gateway or build_gateway(config), owner_identity=owner_identity)

    @classmethod
    def from_config_dir(
        cls,
        config_dir: Optional[str] = None,
        overrides: Optional[dict[str, Any]] = None,
        **kwargs: Any
    ) -> "LeagueSession":
        """Build a session from leagues.yaml plus overrides."""
        config = ConfigLoader.create(config_dir).build_config(overrides)
        return cls.from_config(config, **kwargs)

    def eligible_contests(self) -> list[Contest]:
        return self.controller.list_eligible_contests(self.contest_catalog.current_contests())

    async def submit(self, contest_id: str) -> Submission:
        """Submit the roster to a contest from the contest catalog."""
        contest = self.contest_catalog.get(contest_id)
        if contest is None:
            raise KeyError(f"Unknown contest: {contest_id}")
        return await self.controller.submit(contest)

    def status(self) -> dict[str, Any]:
        """Snapshot of the session for a presentation layer."""
        return {
            "roster_id": self.roster.roster_id,
            "phase": self.controller.phase.value,
            "is_submitting": self.controller.is_submitting,
            "size": self.roster.size,
            "max_size": self.roster.max_size,
            "selections": [
                {"asset_id": s.asset.id, "symbol": s.asset.symbol, "prediction": s.prediction.value}
                for s in self.roster.selections
            ],
            "last_submission_id": (
                self.controller.last_submission.submission_id
                if self.controller.last_submission else None
            ),
        }
