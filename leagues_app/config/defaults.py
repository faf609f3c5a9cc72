"""Default configuration parameters for roster building and contest submission."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RosterParams:
    """Roster capacity parameters."""
    max_size: int = 5                               # Selections allowed per roster


@dataclass(frozen=True)
class SubmissionParams:
    """Submission flow parameters."""
    require_full_roster: bool = True                 # Submit only at max_size
    timeout_seconds: float = 15.0                    # Gateway call deadline
    team_name: str = "My Team"                       # Stored with each team


@dataclass(frozen=True)
class ScoringParams:
    """Prediction scoring parameters."""
    points_per_correct: int = 100
    points_per_incorrect: int = 0
    magnitude_weight: float = 10.0                   # Bonus points per % moved


@dataclass(frozen=True)
class PersistenceParams:
    """Submission storage parameters."""
    backend: str = "sqlite"                          # sqlite, rest
    db_path: str = "submissions.db"


@dataclass(frozen=True)
class LoggingParams:
    """Logging output parameters."""
    level: str = "INFO"
    format_json: bool = False


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    roster: RosterParams
    submission: SubmissionParams
    scoring: ScoringParams
    persistence: PersistenceParams
    logging: LoggingParams


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        roster=RosterParams(),
        submission=SubmissionParams(),
        scoring=ScoringParams(),
        persistence=PersistenceParams(),
        logging=LoggingParams(),
    )
