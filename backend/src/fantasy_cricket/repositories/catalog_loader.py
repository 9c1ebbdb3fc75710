"""Seed a repository with reference data from CSV files.

Expected files in the catalog directory:
    teams.csv     id, name, code, primary_color, secondary_color
    players.csv   id, name, team, type, price, stats (JSON object)
    fixtures.csv  id, home_team, away_team, venue, start_offset_hours, status,
                  home_score, away_score
    leagues.csv   id, name, code, is_global   (optional)

Fixture start times are offsets in hours from load time, so a fresh seed
always has a live match and a few upcoming ones.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pandas as pd

from fantasy_cricket.models.fixture import Fixture, FixtureStatus
from fantasy_cricket.models.league import League
from fantasy_cricket.models.player import IplTeam, Player
from fantasy_cricket.repositories.base import FantasyRepository
from fantasy_cricket.utils.player_types import normalize_player_type_strict

logger = logging.getLogger(__name__)

# Creator id for leagues that ship with the catalog
SYSTEM_USER_ID = 0


@dataclass
class CatalogSummary:
    """Counts of what a load wrote."""

    teams: int = 0
    players: int = 0
    fixtures: int = 0
    leagues: int = 0


def default_catalog_dir() -> Path:
    """data/catalog at the repo root."""
    # backend/src/fantasy_cricket/repositories -> repo root
    return Path(__file__).resolve().parents[4] / "data" / "catalog"


def _read_csv(path: Path) -> list[dict]:
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    df.columns = [c.strip() for c in df.columns]
    return [{k: v.strip() for k, v in row.items()} for row in df.to_dict(orient="records")]


def _or_none(value: str) -> str | None:
    return value or None


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "y"}


def load_catalog(
    repository: FantasyRepository,
    catalog_dir: Path | None = None,
    now: datetime | None = None,
) -> CatalogSummary:
    """Load teams, players, fixtures and global leagues into the repository.

    Args:
        repository: Target store
        catalog_dir: Directory with the CSV files (default: data/catalog)
        now: Reference time for fixture offsets (default: current UTC time)

    Returns:
        CatalogSummary of rows written

    Raises:
        FileNotFoundError: If the directory or a required CSV is missing
        ValueError: If a player has an unknown type
    """
    catalog_dir = Path(catalog_dir) if catalog_dir else default_catalog_dir()
    now = now or datetime.now(timezone.utc)

    for required in ("teams.csv", "players.csv", "fixtures.csv"):
        if not (catalog_dir / required).exists():
            raise FileNotFoundError(f"Catalog file not found: {catalog_dir / required}")

    summary = CatalogSummary()

    for row in _read_csv(catalog_dir / "teams.csv"):
        repository.put_team(IplTeam(
            id=int(row["id"]),
            name=row["name"],
            code=row["code"],
            primary_color=_or_none(row.get("primary_color", "")),
            secondary_color=_or_none(row.get("secondary_color", "")),
        ))
        summary.teams += 1

    for row in _read_csv(catalog_dir / "players.csv"):
        repository.put_player(Player(
            id=int(row["id"]),
            name=row["name"],
            team=row["team"],
            type=normalize_player_type_strict(row["type"]),
            price=float(row["price"]),
            image=row.get("image", ""),
            stats=json.loads(row["stats"]) if row.get("stats") else {},
        ))
        summary.players += 1

    for row in _read_csv(catalog_dir / "fixtures.csv"):
        offset = float(row.get("start_offset_hours") or 0)
        repository.put_fixture(Fixture(
            id=int(row["id"]),
            home_team=row["home_team"],
            away_team=row["away_team"],
            venue=row["venue"],
            start_time=now + timedelta(hours=offset),
            status=FixtureStatus(row.get("status") or FixtureStatus.UPCOMING.value),
            home_score=_or_none(row.get("home_score", "")),
            away_score=_or_none(row.get("away_score", "")),
        ))
        summary.fixtures += 1

    leagues_csv = catalog_dir / "leagues.csv"
    if leagues_csv.exists():
        for row in _read_csv(leagues_csv):
            repository.put_league(League(
                id=int(row["id"]),
                name=row["name"],
                code=row["code"],
                creator_id=SYSTEM_USER_ID,
                is_global=_parse_bool(row.get("is_global", "false")),
            ))
            summary.leagues += 1

    logger.info(
        f"Loaded catalog from {catalog_dir}: {summary.teams} teams, {summary.players} players, "
        f"{summary.fixtures} fixtures, {summary.leagues} leagues"
    )
    return summary
