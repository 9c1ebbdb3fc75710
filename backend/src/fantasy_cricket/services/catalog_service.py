"""Player catalog and IPL teams."""

from fantasy_cricket.models.player import IplTeam, Player
from fantasy_cricket.repositories.base import FantasyRepository
from fantasy_cricket.services.errors import SquadValidationError, ValidationErrorCode
from fantasy_cricket.utils.player_types import normalize_player_type_strict, sort_by_type


class CatalogService:
    """Read-only view over catalog players and teams."""

    def __init__(self, repository: FantasyRepository):
        self.repository = repository

    def list_players(
        self,
        player_type: str | None = None,
        team: str | None = None,
        by_type: bool = False,
    ) -> list[Player]:
        """List players, optionally filtered by type and team code.

        Raises:
            ValueError: If player_type is not a known type
        """
        players = self.repository.list_players()
        if player_type:
            wanted = normalize_player_type_strict(player_type)
            players = [p for p in players if p.type is wanted]
        if team:
            players = [p for p in players if p.team.upper() == team.upper()]
        return sort_by_type(players) if by_type else players

    def get_player(self, player_id: int) -> Player:
        player = self.repository.get_player(player_id)
        if player is None:
            raise SquadValidationError(ValidationErrorCode.PLAYER_NOT_FOUND, f"Player not found: {player_id}")
        return player

    def list_teams(self) -> list[IplTeam]:
        return self.repository.list_teams()
