"""Player catalog models."""

from dataclasses import dataclass, field
from enum import Enum


class PlayerType(str, Enum):
    """Playing role of a cricketer in the catalog."""

    WICKET_KEEPER = "wicket-keeper"
    BATSMAN = "batsman"
    BOWLER = "bowler"
    ALL_ROUNDER = "all-rounder"


@dataclass
class IplTeam:
    """A franchise players are affiliated with."""

    id: int
    name: str
    code: str  # MI, CSK, RCB, ...
    primary_color: str | None = None
    secondary_color: str | None = None


@dataclass(frozen=True)
class Player:
    """Catalog entry for a player. Never mutated by squad logic."""

    id: int
    name: str
    team: str  # IplTeam.code
    type: PlayerType
    price: float
    image: str = ""
    stats: dict = field(default_factory=dict, hash=False, compare=False)
