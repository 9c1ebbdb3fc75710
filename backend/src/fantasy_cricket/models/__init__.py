"""Data models for the fantasy cricket backend."""

from fantasy_cricket.models.player import IplTeam, Player, PlayerType
from fantasy_cricket.models.squad import (
    CAPTAIN_ROLES,
    PowerUp,
    Squad,
    SquadEntry,
    SquadRole,
)
from fantasy_cricket.models.fixture import Fixture, FixtureStatus, PlayerPerformance
from fantasy_cricket.models.league import League, LeagueMember, User

__all__ = [
    "IplTeam",
    "Player",
    "PlayerType",
    "CAPTAIN_ROLES",
    "PowerUp",
    "Squad",
    "SquadEntry",
    "SquadRole",
    "Fixture",
    "FixtureStatus",
    "PlayerPerformance",
    "League",
    "LeagueMember",
    "User",
]
