"""Tests for catalog loading and the catalog service."""
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from fantasy_cricket.models.fixture import FixtureStatus
from fantasy_cricket.models.player import PlayerType
from fantasy_cricket.repositories.catalog_loader import load_catalog
from fantasy_cricket.repositories.memory_repository import InMemoryRepository
from fantasy_cricket.services.catalog_service import CatalogService
from fantasy_cricket.services.composition_rules import SQUAD_BUILD_CAPS
from fantasy_cricket.services.errors import SquadValidationError, ValidationErrorCode

CATALOG_DIR = Path(__file__).resolve().parents[2] / "data" / "catalog"
NOW = datetime(2025, 4, 1, 14, 0, tzinfo=timezone.utc)


@pytest.fixture
def seeded() -> InMemoryRepository:
    repo = InMemoryRepository()
    load_catalog(repo, CATALOG_DIR, now=NOW)
    return repo


def test_load_catalog_counts():
    repo = InMemoryRepository()
    summary = load_catalog(repo, CATALOG_DIR, now=NOW)
    assert (summary.teams, summary.players, summary.fixtures, summary.leagues) == (10, 39, 4, 3)
    assert repo.is_empty() is False


def test_fixture_times_are_offsets(seeded):
    live = seeded.get_fixture(1)
    assert live.status is FixtureStatus.LIVE
    assert live.start_time == NOW
    assert seeded.get_fixture(2).start_time == NOW + timedelta(hours=24)


def test_global_leagues_loaded(seeded):
    league = seeded.get_league_by_code("iplfg123")
    assert league is not None
    assert league.is_global is True


def test_players_parsed(seeded):
    kohli = seeded.get_player(1)
    assert kohli.name == "Virat Kohli"
    assert kohli.type is PlayerType.BATSMAN
    assert kohli.team == "RCB"
    assert "average" in kohli.stats


def test_full_squad_fits_default_budget(seeded):
    prices: dict[PlayerType, list[float]] = {}
    for player in seeded.list_players():
        prices.setdefault(player.type, []).append(player.price)
    cheapest = sum(sum(sorted(prices[t])[:cap]) for t, cap in SQUAD_BUILD_CAPS.items())
    assert cheapest <= 100.0


def test_missing_catalog_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_catalog(InMemoryRepository(), tmp_path)


def test_unknown_player_type(tmp_path):
    (tmp_path / "teams.csv").write_text("id,name,code,primary_color,secondary_color\n1,Mumbai Indians,MI,,\n")
    (tmp_path / "players.csv").write_text("id,name,team,type,price,stats\n1,Someone,MI,coach,5,\n")
    (tmp_path / "fixtures.csv").write_text(
        "id,home_team,away_team,venue,start_offset_hours,status,home_score,away_score\n"
    )
    with pytest.raises(ValueError):
        load_catalog(InMemoryRepository(), tmp_path)


class TestCatalogService:
    def test_filter_by_type_and_team(self, seeded):
        service = CatalogService(seeded)
        bowlers = service.list_players(player_type="bowler")
        assert len(bowlers) == 12
        mi_bowlers = service.list_players(player_type="bowl", team="mi")
        assert {p.name for p in mi_bowlers} == {"Jasprit Bumrah", "Trent Boult"}

    def test_sorted_by_type(self, seeded):
        players = CatalogService(seeded).list_players(by_type=True)
        assert players[0].type is PlayerType.WICKET_KEEPER
        assert players[-1].type is PlayerType.BOWLER

    def test_unknown_type_filter(self, seeded):
        with pytest.raises(ValueError):
            CatalogService(seeded).list_players(player_type="coach")

    def test_get_player(self, seeded):
        service = CatalogService(seeded)
        assert service.get_player(17).name == "Jasprit Bumrah"
        with pytest.raises(SquadValidationError) as exc_info:
            service.get_player(999)
        assert exc_info.value.code is ValidationErrorCode.PLAYER_NOT_FOUND

    def test_list_teams(self, seeded):
        teams = CatalogService(seeded).list_teams()
        assert [t.code for t in teams][:2] == ["MI", "CSK"]
