"""Squad (user team) models."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class SquadRole(str, Enum):
    """Leadership role a squad entry can hold."""

    CAPTAIN = "captain"
    VICE_CAPTAIN = "vice-captain"
    TRIPLE_CAPTAIN = "triple-captain"


# Roles that occupy the single captain slot
CAPTAIN_ROLES = frozenset({SquadRole.CAPTAIN, SquadRole.TRIPLE_CAPTAIN})


class PowerUp(str, Enum):
    """One-off chips a squad can play."""

    WILDCARD = "wildcard"
    TRIPLE_CAPTAIN = "triple-captain"
    BENCH_BOOST = "bench-boost"
    FREE_HIT = "free-hit"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SquadEntry:
    """One player held by a squad."""

    player_id: int
    role: SquadRole | None = None
    is_starting: bool = True
    bench_position: int = 0  # 0 while starting, 1-4 on the bench


@dataclass
class Squad:
    """A user's fantasy squad and its budget/transfer bookkeeping."""

    id: int
    user_id: int
    name: str
    points: int = 0
    rank: int = 0
    budget_used: float = 0.0
    budget_total: float = 100.0
    transfers_remaining: int = 2
    last_week_points: int = 0
    average_points: int = 0
    fixtures_played: int = 0
    # Set once the squad first reaches full size; later additions are transfers
    build_complete: bool = False
    active_power_up: PowerUp | None = None
    used_power_ups: list[PowerUp] = field(default_factory=list)
    # Transfers to restore when a free hit expires
    saved_transfers: int | None = None
    entries: list[SquadEntry] = field(default_factory=list)
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @property
    def starting(self) -> list[SquadEntry]:
        """Entries in the starting XI, in insertion order."""
        return [e for e in self.entries if e.is_starting]

    @property
    def bench(self) -> list[SquadEntry]:
        """Bench entries ordered by bench position."""
        return sorted(
            (e for e in self.entries if not e.is_starting),
            key=lambda e: e.bench_position,
        )

    @property
    def player_ids(self) -> set[int]:
        return {e.player_id for e in self.entries}

    def get_entry(self, player_id: int) -> SquadEntry | None:
        for entry in self.entries:
            if entry.player_id == player_id:
                return entry
        return None

    def touch(self) -> None:
        self.updated_at = _utcnow()
