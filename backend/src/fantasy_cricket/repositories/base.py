"""Storage interface the services depend on.

Services only ever talk to a FantasyRepository, so the in-memory store used in
development and tests can be swapped for the DuckDB-backed one (or anything
else implementing get/put/delete by id) without touching squad logic.

Implementations must hand out copies: mutating a returned object never
changes stored state until it is put back.
"""

from abc import ABC, abstractmethod

from fantasy_cricket.models.fixture import Fixture, PlayerPerformance
from fantasy_cricket.models.league import League, LeagueMember, User
from fantasy_cricket.models.player import IplTeam, Player
from fantasy_cricket.models.squad import Squad

# Collections that get sequential integer ids
ID_KINDS = ("teams", "players", "users", "squads", "fixtures", "performances", "leagues")


class FantasyRepository(ABC):
    """CRUD access to every collection of the game."""

    @abstractmethod
    def next_id(self, kind: str) -> int:
        """Allocate the next id for one of ID_KINDS."""

    # --- IPL teams ---------------------------------------------------------

    @abstractmethod
    def list_teams(self) -> list[IplTeam]: ...

    @abstractmethod
    def get_team(self, code: str) -> IplTeam | None: ...

    @abstractmethod
    def put_team(self, team: IplTeam) -> None: ...

    # --- Players -----------------------------------------------------------

    @abstractmethod
    def list_players(self) -> list[Player]: ...

    @abstractmethod
    def get_player(self, player_id: int) -> Player | None: ...

    @abstractmethod
    def put_player(self, player: Player) -> None: ...

    # --- Users -------------------------------------------------------------

    @abstractmethod
    def get_user(self, user_id: int) -> User | None: ...

    @abstractmethod
    def get_user_by_username(self, username: str) -> User | None:
        """Case-insensitive lookup."""

    @abstractmethod
    def put_user(self, user: User) -> None: ...

    # --- Squads ------------------------------------------------------------

    @abstractmethod
    def list_squads(self) -> list[Squad]: ...

    @abstractmethod
    def get_squad(self, squad_id: int) -> Squad | None: ...

    @abstractmethod
    def get_squad_by_user(self, user_id: int) -> Squad | None: ...

    @abstractmethod
    def put_squad(self, squad: Squad) -> None:
        """Store the whole aggregate, entries included, atomically."""

    @abstractmethod
    def delete_squad(self, squad_id: int) -> None: ...

    # --- Fixtures & performances ------------------------------------------

    @abstractmethod
    def list_fixtures(self) -> list[Fixture]: ...

    @abstractmethod
    def get_fixture(self, fixture_id: int) -> Fixture | None: ...

    @abstractmethod
    def put_fixture(self, fixture: Fixture) -> None: ...

    @abstractmethod
    def list_performances(self, fixture_id: int) -> list[PlayerPerformance]: ...

    @abstractmethod
    def put_performance(self, performance: PlayerPerformance) -> None:
        """Store a performance, replacing any earlier one for the same fixture and player."""

    # --- Leagues -----------------------------------------------------------

    @abstractmethod
    def list_leagues(self) -> list[League]: ...

    @abstractmethod
    def get_league(self, league_id: int) -> League | None: ...

    @abstractmethod
    def get_league_by_code(self, code: str) -> League | None: ...

    @abstractmethod
    def put_league(self, league: League) -> None: ...

    @abstractmethod
    def list_league_members(self, league_id: int) -> list[LeagueMember]: ...

    @abstractmethod
    def list_user_memberships(self, user_id: int) -> list[LeagueMember]: ...

    @abstractmethod
    def put_league_member(self, member: LeagueMember) -> None: ...

    def is_empty(self) -> bool:
        """True when no catalog has been loaded yet."""
        return not self.list_players()
