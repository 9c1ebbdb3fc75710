"""Tests for the DuckDB repository (in-memory database)."""
from datetime import datetime, timezone

import pytest

from fantasy_cricket.models.fixture import Fixture, FixtureStatus, PlayerPerformance
from fantasy_cricket.models.league import League, LeagueMember, User
from fantasy_cricket.models.player import IplTeam, Player, PlayerType
from fantasy_cricket.models.squad import PowerUp, Squad, SquadEntry, SquadRole
from fantasy_cricket.repositories.duckdb_repository import DuckDBRepository
from fantasy_cricket.services.squad_service import SquadService

NOW = datetime(2025, 4, 1, 14, 0, tzinfo=timezone.utc)


@pytest.fixture
def repo():
    repository = DuckDBRepository(":memory:")
    yield repository
    repository.close()


def test_empty_repository(repo):
    assert repo.is_empty() is True
    assert repo.list_squads() == []
    assert repo.get_squad(1) is None
    assert repo.next_id("squads") == 1


def test_player_round_trip(repo):
    player = Player(id=7, name="MS Dhoni", team="CSK", type=PlayerType.WICKET_KEEPER,
                    price=7.5, stats={"average": 38.1})
    repo.put_player(player)
    loaded = repo.get_player(7)
    assert loaded == player
    assert loaded.stats == {"average": 38.1}
    assert repo.next_id("players") == 8


def test_put_replaces_row(repo):
    repo.put_team(IplTeam(id=1, name="Mumbai Indians", code="MI"))
    repo.put_team(IplTeam(id=1, name="Mumbai Indians", code="MI", primary_color="#004BA0"))
    teams = repo.list_teams()
    assert len(teams) == 1
    assert teams[0].primary_color == "#004BA0"


def test_squad_round_trip(repo):
    squad = Squad(
        id=3, user_id=1, name="Chennai Chargers", points=42, rank=2,
        budget_used=61.5, transfers_remaining=1, build_complete=True,
        active_power_up=PowerUp.BENCH_BOOST, used_power_ups=[PowerUp.WILDCARD, PowerUp.BENCH_BOOST],
        entries=[
            SquadEntry(player_id=11, role=SquadRole.CAPTAIN),
            SquadEntry(player_id=12, role=SquadRole.VICE_CAPTAIN),
            SquadEntry(player_id=13, is_starting=False, bench_position=2),
        ],
        created_at=NOW, updated_at=NOW,
    )
    repo.put_squad(squad)

    assert repo.get_squad(3) == squad
    assert repo.get_squad_by_user(1) == squad
    assert repo.next_id("squads") == 4


def test_put_squad_replaces_entries(repo):
    squad = Squad(id=1, user_id=1, name="Test", entries=[SquadEntry(player_id=1), SquadEntry(player_id=2)])
    repo.put_squad(squad)
    squad.entries = [SquadEntry(player_id=3)]
    repo.put_squad(squad)
    assert [e.player_id for e in repo.get_squad(1).entries] == [3]


def test_delete_squad(repo):
    repo.put_squad(Squad(id=1, user_id=1, name="Test", entries=[SquadEntry(player_id=1)]))
    repo.delete_squad(1)
    assert repo.get_squad(1) is None


def test_user_lookup_ignores_case(repo):
    repo.put_user(User(id=1, username="Alice", created_at=NOW))
    assert repo.get_user_by_username("alice").id == 1
    assert repo.get_user_by_username("bob") is None


def test_fixtures_and_performances(repo):
    repo.put_fixture(Fixture(id=1, home_team="MI", away_team="CSK", venue="Wankhede Stadium",
                             start_time=NOW, status=FixtureStatus.LIVE, home_score="156/4"))
    repo.put_performance(PlayerPerformance(id=1, fixture_id=1, player_id=5, points=12, stats={"runs": 12}))
    repo.put_performance(PlayerPerformance(id=2, fixture_id=1, player_id=5, points=20, stats={"runs": 20}))

    fixture = repo.get_fixture(1)
    assert fixture.status is FixtureStatus.LIVE
    assert fixture.start_time == NOW
    assert fixture.away_score is None
    [performance] = repo.list_performances(1)
    assert performance.points == 20


def test_leagues_and_members(repo):
    repo.put_league(League(id=1, name="Office", code="ABCD1234", creator_id=1, created_at=NOW))
    repo.put_league_member(LeagueMember(league_id=1, user_id=1, rank=1, joined_at=NOW))
    repo.put_league_member(LeagueMember(league_id=1, user_id=1, rank=3, joined_at=NOW))

    assert repo.get_league_by_code("abcd1234").id == 1
    assert [m.rank for m in repo.list_league_members(1)] == [3]
    assert [m.league_id for m in repo.list_user_memberships(1)] == [1]


def test_squad_service_on_duckdb(repo):
    """Validated mutations persist through the DuckDB backend."""
    for pid, ptype in ((1, PlayerType.WICKET_KEEPER), (2, PlayerType.BATSMAN)):
        repo.put_player(Player(id=pid, name=f"Player {pid}", team="MI", type=ptype, price=6.0))
    service = SquadService(repo)
    squad = service.create_squad(user_id=1, name="Duck XI")

    service.add_player(squad.id, 1)
    service.add_player(squad.id, 2)
    service.set_player_role(squad.id, 2, "captain")

    stored = repo.get_squad(squad.id)
    assert stored.budget_used == 12.0
    assert stored.get_entry(2).role is SquadRole.CAPTAIN
    assert [e.player_id for e in stored.entries] == [1, 2]
