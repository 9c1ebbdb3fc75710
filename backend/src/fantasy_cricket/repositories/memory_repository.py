"""Process-local repository backed by dicts."""

import copy
import threading
from collections import defaultdict

from fantasy_cricket.models.fixture import Fixture, PlayerPerformance
from fantasy_cricket.models.league import League, LeagueMember, User
from fantasy_cricket.models.player import IplTeam, Player
from fantasy_cricket.models.squad import Squad
from fantasy_cricket.repositories.base import ID_KINDS, FantasyRepository


class InMemoryRepository(FantasyRepository):
    """Non-persistent store. Used for development and tests."""

    def __init__(self):
        self._lock = threading.Lock()
        self._ids = {kind: 0 for kind in ID_KINDS}
        self._teams: dict[str, IplTeam] = {}
        self._players: dict[int, Player] = {}
        self._users: dict[int, User] = {}
        self._squads: dict[int, Squad] = {}
        self._fixtures: dict[int, Fixture] = {}
        # fixture_id -> player_id -> performance
        self._performances: dict[int, dict[int, PlayerPerformance]] = defaultdict(dict)
        self._leagues: dict[int, League] = {}
        # league_id -> user_id -> member
        self._members: dict[int, dict[int, LeagueMember]] = defaultdict(dict)

    def next_id(self, kind: str) -> int:
        if kind not in self._ids:
            raise ValueError(f"Unknown id kind: {kind}")
        with self._lock:
            self._ids[kind] += 1
            return self._ids[kind]

    def _bump(self, kind: str, used_id: int) -> None:
        """Keep the id counter ahead of explicitly stored ids."""
        with self._lock:
            self._ids[kind] = max(self._ids[kind], used_id)

    # --- IPL teams ---------------------------------------------------------

    def list_teams(self) -> list[IplTeam]:
        return copy.deepcopy(sorted(self._teams.values(), key=lambda t: t.id))

    def get_team(self, code: str) -> IplTeam | None:
        return copy.deepcopy(self._teams.get(code))

    def put_team(self, team: IplTeam) -> None:
        self._bump("teams", team.id)
        self._teams[team.code] = copy.deepcopy(team)

    # --- Players -----------------------------------------------------------

    def list_players(self) -> list[Player]:
        return copy.deepcopy(sorted(self._players.values(), key=lambda p: p.id))

    def get_player(self, player_id: int) -> Player | None:
        return copy.deepcopy(self._players.get(player_id))

    def put_player(self, player: Player) -> None:
        self._bump("players", player.id)
        self._players[player.id] = copy.deepcopy(player)

    # --- Users -------------------------------------------------------------

    def get_user(self, user_id: int) -> User | None:
        return copy.deepcopy(self._users.get(user_id))

    def get_user_by_username(self, username: str) -> User | None:
        wanted = username.strip().lower()
        for user in self._users.values():
            if user.username.lower() == wanted:
                return copy.deepcopy(user)
        return None

    def put_user(self, user: User) -> None:
        self._bump("users", user.id)
        self._users[user.id] = copy.deepcopy(user)

    # --- Squads ------------------------------------------------------------

    def list_squads(self) -> list[Squad]:
        return copy.deepcopy(sorted(self._squads.values(), key=lambda s: s.id))

    def get_squad(self, squad_id: int) -> Squad | None:
        return copy.deepcopy(self._squads.get(squad_id))

    def get_squad_by_user(self, user_id: int) -> Squad | None:
        for squad in self._squads.values():
            if squad.user_id == user_id:
                return copy.deepcopy(squad)
        return None

    def put_squad(self, squad: Squad) -> None:
        self._bump("squads", squad.id)
        self._squads[squad.id] = copy.deepcopy(squad)

    def delete_squad(self, squad_id: int) -> None:
        self._squads.pop(squad_id, None)

    # --- Fixtures & performances ------------------------------------------

    def list_fixtures(self) -> list[Fixture]:
        return copy.deepcopy(sorted(self._fixtures.values(), key=lambda f: f.id))

    def get_fixture(self, fixture_id: int) -> Fixture | None:
        return copy.deepcopy(self._fixtures.get(fixture_id))

    def put_fixture(self, fixture: Fixture) -> None:
        self._bump("fixtures", fixture.id)
        self._fixtures[fixture.id] = copy.deepcopy(fixture)

    def list_performances(self, fixture_id: int) -> list[PlayerPerformance]:
        performances = self._performances.get(fixture_id, {})
        return copy.deepcopy(sorted(performances.values(), key=lambda p: p.id))

    def put_performance(self, performance: PlayerPerformance) -> None:
        self._bump("performances", performance.id)
        self._performances[performance.fixture_id][performance.player_id] = copy.deepcopy(performance)

    # --- Leagues -----------------------------------------------------------

    def list_leagues(self) -> list[League]:
        return copy.deepcopy(sorted(self._leagues.values(), key=lambda lg: lg.id))

    def get_league(self, league_id: int) -> League | None:
        return copy.deepcopy(self._leagues.get(league_id))

    def get_league_by_code(self, code: str) -> League | None:
        wanted = code.strip().upper()
        for league in self._leagues.values():
            if league.code.upper() == wanted:
                return copy.deepcopy(league)
        return None

    def put_league(self, league: League) -> None:
        self._bump("leagues", league.id)
        self._leagues[league.id] = copy.deepcopy(league)

    def list_league_members(self, league_id: int) -> list[LeagueMember]:
        return copy.deepcopy(list(self._members.get(league_id, {}).values()))

    def list_user_memberships(self, user_id: int) -> list[LeagueMember]:
        return copy.deepcopy([
            members[user_id]
            for _, members in sorted(self._members.items())
            if user_id in members
        ])

    def put_league_member(self, member: LeagueMember) -> None:
        self._members[member.league_id][member.user_id] = copy.deepcopy(member)
