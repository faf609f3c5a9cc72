"""Configuration for submission storage backends."""

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from ..errors import ConfigurationError


@dataclass(frozen=True)
class SqliteStoreConfig:
    """Configuration for the local SQLite submission store."""
    db_path: str = "submissions.db"
    connect_timeout_seconds: float = 30.0


@dataclass(frozen=True)
class RestGatewayConfig:
    """Configuration for a PostgREST (Supabase) submission backend."""
    base_url: str
    api_key: str
    teams_table: str = "teams"
    selections_table: str = "team_tokens"
    timeout_seconds: int = 30
    headers: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "RestGatewayConfig":
        """Build from SUPABASE_URL and SUPABASE_KEY."""
        env = os.environ if environ is None else environ
        base_url = env.get("SUPABASE_URL", "").strip()
        api_key = env.get("SUPABASE_KEY", "").strip()

        missing = [name for name, value in (("SUPABASE_URL", base_url), ("SUPABASE_KEY", api_key))
                   if not value]
        if missing:
            raise ConfigurationError(
                f"Missing environment variables: {', '.join(missing)}",
                context={"missing": missing}
            )

        return cls(base_url=base_url.rstrip("/"), api_key=api_key)
