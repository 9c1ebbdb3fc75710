"""User and league models."""

from dataclasses import dataclass, field
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class User:
    """A registered player of the game."""

    id: int
    username: str
    created_at: datetime = field(default_factory=_utcnow)


@dataclass
class League:
    """A mini-league users join with a code."""

    id: int
    name: str
    code: str
    creator_id: int
    is_global: bool = False
    created_at: datetime = field(default_factory=_utcnow)


@dataclass
class LeagueMember:
    """Membership of one user in one league."""

    league_id: int
    user_id: int
    rank: int = 0
    joined_at: datetime = field(default_factory=_utcnow)
