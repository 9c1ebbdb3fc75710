"""Squad composition rule tables.

Two separate tiers apply:

- SQUAD_BUILD_CAPS limit how many players of each type the whole 15-man
  squad may hold. Checked when players are added.
- STARTING_XI_LIMITS bound each type inside the starting XI. Maximums are
  checked when a player is promoted, minimums when one is benched.
"""

from dataclasses import dataclass

from fantasy_cricket.models.player import PlayerType

SQUAD_SIZE = 15
STARTING_XI_SIZE = 11
BENCH_SIZE = SQUAD_SIZE - STARTING_XI_SIZE
BENCH_POSITIONS = tuple(range(1, BENCH_SIZE + 1))


@dataclass(frozen=True)
class XILimit:
    """Inclusive bounds for one player type in the starting XI."""

    min: int
    max: int


SQUAD_BUILD_CAPS: dict[PlayerType, int] = {
    PlayerType.BATSMAN: 3,
    PlayerType.BOWLER: 5,
    PlayerType.ALL_ROUNDER: 5,
    PlayerType.WICKET_KEEPER: 2,
}

STARTING_XI_LIMITS: dict[PlayerType, XILimit] = {
    PlayerType.WICKET_KEEPER: XILimit(min=1, max=1),
    PlayerType.BATSMAN: XILimit(min=3, max=5),
    PlayerType.BOWLER: XILimit(min=3, max=5),
    PlayerType.ALL_ROUNDER: XILimit(min=1, max=3),
}

for _table_name, _table in (("SQUAD_BUILD_CAPS", SQUAD_BUILD_CAPS), ("STARTING_XI_LIMITS", STARTING_XI_LIMITS)):
    _missing = set(PlayerType) - set(_table)
    if _missing:
        raise RuntimeError(f"{_table_name} has no rule for {sorted(t.value for t in _missing)}")


def squad_cap(player_type: PlayerType) -> int:
    """Maximum players of this type in the whole squad."""
    return SQUAD_BUILD_CAPS[player_type]


def xi_limit(player_type: PlayerType) -> XILimit:
    """Starting-XI bounds for this type."""
    return STARTING_XI_LIMITS[player_type]
