"""Utility modules for fantasy_cricket."""

from fantasy_cricket.utils.player_types import (
    TYPE_ALIASES,
    TYPE_ORDER,
    normalize_player_type,
    normalize_player_type_strict,
    sort_by_type,
)
from fantasy_cricket.utils.league_codes import generate_league_code

__all__ = [
    "TYPE_ALIASES",
    "TYPE_ORDER",
    "normalize_player_type",
    "normalize_player_type_strict",
    "sort_by_type",
    "generate_league_code",
]
