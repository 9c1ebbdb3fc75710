"""Shared fixtures: a small deterministic catalog on an in-memory repository."""

from datetime import datetime, timedelta, timezone

import pytest

from fantasy_cricket.models.fixture import Fixture, FixtureStatus
from fantasy_cricket.models.league import User
from fantasy_cricket.models.player import IplTeam, Player, PlayerType
from fantasy_cricket.repositories.memory_repository import InMemoryRepository
from fantasy_cricket.services.squad_service import SquadService

WK, BAT, BOW, ALL = (
    PlayerType.WICKET_KEEPER,
    PlayerType.BATSMAN,
    PlayerType.BOWLER,
    PlayerType.ALL_ROUNDER,
)

# id -> (type, team); every player costs 5.0
TEST_PLAYERS = {
    101: (WK, "MI"), 102: (WK, "CSK"), 103: (WK, "RCB"),
    201: (BAT, "MI"), 202: (BAT, "CSK"), 203: (BAT, "RCB"), 204: (BAT, "KKR"),
    301: (BOW, "MI"), 302: (BOW, "CSK"), 303: (BOW, "RCB"),
    304: (BOW, "MI"), 305: (BOW, "CSK"), 306: (BOW, "KKR"),
    401: (ALL, "MI"), 402: (ALL, "CSK"), 403: (ALL, "RCB"),
    404: (ALL, "MI"), 405: (ALL, "CSK"), 406: (ALL, "KKR"),
}

# First 11 form a legal XI (1 WK, 3 BAT, 4 BOW, 3 ALL); last 4 fill bench 1-4
FULL_SQUAD_ORDER = [101, 201, 202, 203, 301, 302, 303, 401, 402, 403, 304, 102, 305, 404, 405]

NOW = datetime(2025, 4, 1, 14, 0, tzinfo=timezone.utc)


def make_player(player_id: int, player_type: PlayerType, team: str = "MI", price: float = 5.0) -> Player:
    return Player(
        id=player_id,
        name=f"{player_type.value} {player_id}",
        team=team,
        type=player_type,
        price=price,
    )


@pytest.fixture
def players() -> dict[int, Player]:
    return {pid: make_player(pid, ptype, team) for pid, (ptype, team) in TEST_PLAYERS.items()}


@pytest.fixture
def repository(players) -> InMemoryRepository:
    repo = InMemoryRepository()
    for i, code in enumerate(["MI", "CSK", "RCB", "KKR"], start=1):
        repo.put_team(IplTeam(id=i, name=f"Team {code}", code=code))
    for player in players.values():
        repo.put_player(player)
    repo.put_fixture(Fixture(
        id=1, home_team="MI", away_team="CSK", venue="Wankhede Stadium",
        start_time=NOW, status=FixtureStatus.LIVE,
    ))
    repo.put_fixture(Fixture(
        id=2, home_team="RCB", away_team="KKR", venue="Chinnaswamy Stadium",
        start_time=NOW + timedelta(hours=24),
    ))
    return repo


@pytest.fixture
def squad_service(repository) -> SquadService:
    return SquadService(repository)


@pytest.fixture
def user(repository) -> User:
    user = User(id=repository.next_id("users"), username="alice")
    repository.put_user(user)
    return user


@pytest.fixture
def squad_id(squad_service, user) -> int:
    """An empty squad owned by the user fixture."""
    return squad_service.create_squad(user.id, "alice's Team").id


@pytest.fixture
def full_squad_id(squad_service, squad_id) -> int:
    """The user's squad built out to 15 players."""
    for player_id in FULL_SQUAD_ORDER:
        squad_service.add_player(squad_id, player_id)
    return squad_id
