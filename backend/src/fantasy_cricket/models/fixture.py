"""Fixture and per-match performance models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class FixtureStatus(str, Enum):
    """Lifecycle of a match."""

    UPCOMING = "upcoming"
    LIVE = "live"
    COMPLETED = "completed"


@dataclass
class Fixture:
    """A scheduled match between two IPL teams."""

    id: int
    home_team: str  # IplTeam.code
    away_team: str
    venue: str
    start_time: datetime
    status: FixtureStatus = FixtureStatus.UPCOMING
    result: str | None = None
    home_score: str | None = None
    away_score: str | None = None

    @property
    def teams(self) -> tuple[str, str]:
        return self.home_team, self.away_team


@dataclass
class PlayerPerformance:
    """Points a player earned in one fixture.

    A performance existing for a fixture is what marks the player as having
    taken the field.
    """

    id: int
    fixture_id: int
    player_id: int
    points: int = 0
    stats: dict = field(default_factory=dict)
