#!/usr/bin/env python3
"""
Basic Usage Example - Leagues Roster Submission

This script walks one user through a contest round using a local SQLite store.
It shows how to:
- Load configuration and set up logging
- Fill the asset and contest catalogs from feed payloads
- Build a roster with up/down predictions
- Submit it to a contest and read back a leaderboard

Run: python examples/basic_usage.py
"""

import asyncio
import tempfile
from pathlib import Path
from typing import Any, Dict, List

from leagues_app.catalog.assets import AssetCatalog
from leagues_app.catalog.contests import ContestCatalog
from leagues_app.config.loader import ConfigLoader
from leagues_app.config.persistence import SqliteStoreConfig
from leagues_app.data.models import Prediction
from leagues_app.data.parsers import parse_coin_markets, parse_contests, parse_equity_quotes
from leagues_app.errors import SubmissionError
from leagues_app.logging.config import configure_logging
from leagues_app.persistence.submission_store import SubmissionStore
from leagues_app.session import LeagueSession


def create_coin_feed() -> List[Dict[str, Any]]:
    """Create CoinGecko-style market records."""
    return [
        {"id": "bitcoin", "symbol": "btc", "name": "Bitcoin", "current_price": 61250.0,
         "price_change_percentage_24h": 1.8},
        {"id": "ethereum", "symbol": "eth", "name": "Ethereum", "current_price": 3120.5,
         "price_change_percentage_24h": -0.6},
        {"id": "solana", "symbol": "sol", "name": "Solana", "current_price": 142.3,
         "price_change_percentage_24h": 4.1},
        {"id": "dogecoin", "symbol": "doge", "name": "Dogecoin", "current_price": 0.16,
         "price_change_percentage_24h": -2.2},
    ]


def create_equity_feed() -> List[Dict[str, Any]]:
    """Create equity quote records."""
    return [
        {"symbol": "NVDA", "name": "NVIDIA Corporation", "price": 905.1, "changesPercentage": 2.4},
        {"symbol": "TSLA", "name": "Tesla, Inc.", "price": 171.0, "changesPercentage": -1.3},
    ]


def create_contest_feed(state: str = "Active") -> List[Dict[str, Any]]:
    """Create contest records."""
    return [
        {"id": 7, "name": "Weekly Crypto Cup", "sport": "Mixed", "entryFee": 0,
         "prizePool": 1000, "startTime": 1767268800, "endTime": 1767873600,
         "maxParticipants": 100, "currentParticipants": 12, "state": state},
    ]


def print_status(session: LeagueSession) -> None:
    """Print current roster state."""
    status = session.status()
    print(f"📋 Roster {status['roster_id'][:8]}: {status['phase']} "
          f"({status['size']}/{status['max_size']})")
    for selection in status["selections"]:
        print(f"    {selection['symbol']:>6}  {selection['prediction']}")
    print()


def main():
    """Main demonstration function."""
    print("🏆 Leagues - Basic Usage Demo")
    print("=" * 60)

    workdir = Path(tempfile.mkdtemp(prefix="leagues-demo-"))
    config = ConfigLoader.create(workdir).build_config({
        "persistence": {"db_path": str(workdir / "submissions.db")},
    })
    configure_logging(level=config.logging.level, format_json=config.logging.format_json)

    print("1. Loading catalogs...")
    assets = AssetCatalog(
        parse_coin_markets(create_coin_feed()) + parse_equity_quotes(create_equity_feed())
    )
    contests = ContestCatalog(parse_contests(create_contest_feed()))
    print(f"   {len(assets)} assets, {len(contests)} contests")
    print()

    store = SubmissionStore(SqliteStoreConfig(db_path=config.persistence.db_path))
    session = LeagueSession(config, store, owner_identity="0x742d35Cc6634C0532925a3b844Bc454e4438f44e",
                            asset_catalog=assets, contest_catalog=contests)

    print("2. Building a roster...")
    picks = [("bitcoin", "up"), ("ethereum", "down"), ("solana", "up"),
             ("stock:NVDA", "up"), ("stock:TSLA", "down")]
    for asset_id, prediction in picks:
        session.roster.toggle_selection(assets.get(asset_id), prediction)
    print_status(session)

    print("3. Changing our mind on Ethereum...")
    session.roster.toggle_selection(assets.get("ethereum"), Prediction.UP)
    print_status(session)

    print("4. Submitting...")
    contest = session.eligible_contests()[0]
    try:
        submission = asyncio.run(session.submit(contest.id))
    except SubmissionError as e:
        print(f"   ❌ Rejected: {e}")
        return
    print(f"   ✅ Stored team {submission.submission_id} for {contest.name}")
    print_status(session)

    print("5. Contest finished, computing leaderboard...")
    finished = ContestCatalog(parse_contests(create_contest_feed("Finished"))).get(contest.id)
    price_changes = {"bitcoin": 3.2, "ethereum": -1.1, "solana": 0.4,
                     "stock:NVDA": 5.0, "stock:TSLA": -0.8}
    board = session.results.leaderboard(finished, price_changes)
    for entry in board.entries:
        print(f"   #{entry.rank} {entry.submitter_identity[:10]}… {entry.score} pts "
              f"({', '.join(entry.asset_names)})")
    print()

    print("✅ Demo completed successfully!")


if __name__ == "__main__":
    main()
