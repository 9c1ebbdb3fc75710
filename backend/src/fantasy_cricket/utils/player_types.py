"""Centralized player type normalization.

Catalog files and API callers spell player types in many ways. Everything is
normalized to a PlayerType member here so that unknown strings never reach the
composition rules.
"""

from typing import Optional

from fantasy_cricket.models.player import PlayerType

# Mapping from any known spelling (lowercased) to the canonical type
TYPE_ALIASES: dict[str, PlayerType] = {
    # Wicket-keeper variations
    "wicket-keeper": PlayerType.WICKET_KEEPER,
    "wicketkeeper": PlayerType.WICKET_KEEPER,
    "wicket keeper": PlayerType.WICKET_KEEPER,
    "keeper": PlayerType.WICKET_KEEPER,
    "wk": PlayerType.WICKET_KEEPER,

    # Batsman variations
    "batsman": PlayerType.BATSMAN,
    "batter": PlayerType.BATSMAN,
    "bat": PlayerType.BATSMAN,

    # Bowler variations
    "bowler": PlayerType.BOWLER,
    "bowl": PlayerType.BOWLER,
    "bow": PlayerType.BOWLER,

    # All-rounder variations
    "all-rounder": PlayerType.ALL_ROUNDER,
    "allrounder": PlayerType.ALL_ROUNDER,
    "all rounder": PlayerType.ALL_ROUNDER,
    "ar": PlayerType.ALL_ROUNDER,
    "all": PlayerType.ALL_ROUNDER,
}

# Display order: keeper, batting, all-round, bowling
TYPE_ORDER = [
    PlayerType.WICKET_KEEPER,
    PlayerType.BATSMAN,
    PlayerType.ALL_ROUNDER,
    PlayerType.BOWLER,
]


def normalize_player_type(value: Optional[str]) -> Optional[PlayerType]:
    """Normalize a player type string.

    Args:
        value: Type in any known spelling (e.g. "WK", "batter", "All Rounder")

    Returns:
        The PlayerType, or None if the value is None or unrecognized

    Examples:
        >>> normalize_player_type("WK")
        <PlayerType.WICKET_KEEPER: 'wicket-keeper'>
        >>> normalize_player_type("Batter")
        <PlayerType.BATSMAN: 'batsman'>
    """
    if value is None:
        return None
    if isinstance(value, PlayerType):
        return value
    key = value.strip().lower().replace("_", "-")
    if key in TYPE_ALIASES:
        return TYPE_ALIASES[key]
    return TYPE_ALIASES.get(key.replace("-", " "))


def normalize_player_type_strict(value: str) -> PlayerType:
    """Normalize a player type string, raising ValueError if unknown."""
    normalized = normalize_player_type(value)
    if normalized is None:
        raise ValueError(f"Unknown player type: {value}")
    return normalized


def sort_by_type(players: list, type_key: str = "type") -> list:
    """Sort player dicts or objects by type in display order, then by name."""
    def sort_key(player) -> tuple[int, str]:
        if isinstance(player, dict):
            raw, name = player.get(type_key), player.get("name", "")
        else:
            raw, name = getattr(player, type_key, None), getattr(player, "name", "")
        player_type = normalize_player_type(raw)
        index = TYPE_ORDER.index(player_type) if player_type else 99
        return index, name

    return sorted(players, key=sort_key)
