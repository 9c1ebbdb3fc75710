"""Tests for leagues, standings and user registration."""
import threading
import time

import pytest

from fantasy_cricket.models.league import League
from fantasy_cricket.services.errors import SquadValidationError, ValidationErrorCode
from fantasy_cricket.services.league_service import LeagueService
from fantasy_cricket.services.user_service import UserService


@pytest.fixture
def users(repository, squad_service) -> UserService:
    return UserService(repository, squad_service)


@pytest.fixture
def leagues(repository, squad_service) -> LeagueService:
    return LeagueService(repository, squad_service)


def set_points(squad_service, user_id: int, points: int) -> None:
    squad = squad_service.get_squad_by_user(user_id)

    def apply(s, players):
        s.points = points
        s.last_week_points = points

    squad_service.update(squad.id, apply)


class TestRegister:
    def test_register_creates_squad(self, users, squad_service):
        user, squad = users.register("  bob ")
        assert user.username == "bob"
        assert squad.name == "bob's Team"
        assert squad.user_id == user.id
        assert squad.budget_total == 100.0
        assert squad.transfers_remaining == 2
        assert squad_service.get_squad_by_user(user.id).id == squad.id

    def test_username_taken_ignores_case(self, users):
        users.register("Bob")
        with pytest.raises(SquadValidationError) as exc_info:
            users.register("bOB")
        assert exc_info.value.code is ValidationErrorCode.USERNAME_TAKEN

    def test_blank_username(self, users):
        with pytest.raises(SquadValidationError) as exc_info:
            users.register("   ")
        assert exc_info.value.code is ValidationErrorCode.INVALID_NAME

    def test_unknown_user(self, users):
        with pytest.raises(SquadValidationError) as exc_info:
            users.get_user(404)
        assert exc_info.value.code is ValidationErrorCode.USER_NOT_FOUND

    def test_concurrent_registrations_of_one_name(self, users, repository, monkeypatch):
        """Only one of two simultaneous registrations for a name succeeds."""
        lookup = repository.get_user_by_username

        def slow_lookup(username):
            found = lookup(username)
            time.sleep(0.05)
            return found

        monkeypatch.setattr(repository, "get_user_by_username", slow_lookup)
        registered, errors = [], []

        def register(name):
            try:
                registered.append(users.register(name)[0].id)
            except SquadValidationError as e:
                errors.append(e.code)

        threads = [threading.Thread(target=register, args=(name,)) for name in ("bob", "BOB")]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(registered) == 1
        assert errors == [ValidationErrorCode.USERNAME_TAKEN]
        assert repository.get_user_by_username("bob").id == registered[0]


class TestLeagues:
    def test_create_league_joins_creator(self, users, leagues):
        user, _ = users.register("bob")
        league = leagues.create_league(user.id, "Office League")
        assert len(league.code) == 8
        assert leagues.user_leagues(user.id) == [{
            "id": league.id,
            "name": "Office League",
            "code": league.code,
            "is_global": False,
            "member_count": 1,
            "rank": 1,
        }]

    def test_join_by_code(self, users, leagues):
        owner, _ = users.register("bob")
        other, _ = users.register("carol")
        league = leagues.create_league(owner.id, "Office League")

        joined = leagues.join_league(other.id, league.code.lower())

        assert joined.id == league.id
        assert leagues.user_leagues(other.id)[0]["member_count"] == 2

    def test_join_twice(self, users, leagues):
        owner, _ = users.register("bob")
        league = leagues.create_league(owner.id, "Office League")
        with pytest.raises(SquadValidationError) as exc_info:
            leagues.join_league(owner.id, league.code)
        assert exc_info.value.code is ValidationErrorCode.ALREADY_LEAGUE_MEMBER

    def test_join_unknown_code(self, users, leagues):
        user, _ = users.register("bob")
        with pytest.raises(SquadValidationError) as exc_info:
            leagues.join_league(user.id, "NOPE1234")
        assert exc_info.value.code is ValidationErrorCode.LEAGUE_NOT_FOUND

    def test_create_requires_name_and_user(self, users, leagues):
        user, _ = users.register("bob")
        with pytest.raises(SquadValidationError) as exc_info:
            leagues.create_league(user.id, " ")
        assert exc_info.value.code is ValidationErrorCode.INVALID_NAME
        with pytest.raises(SquadValidationError) as exc_info:
            leagues.create_league(999, "Ghosts")
        assert exc_info.value.code is ValidationErrorCode.USER_NOT_FOUND

    def test_global_leagues(self, users, leagues, repository, squad_service):
        repository.put_league(League(id=50, name="Everyone", code="GLOBAL01", creator_id=0, is_global=True))
        bob, _ = users.register("bob")
        carol, _ = users.register("carol")
        leagues.join_league(bob.id, "GLOBAL01")
        leagues.join_league(carol.id, "GLOBAL01")
        set_points(squad_service, bob.id, 40)
        set_points(squad_service, carol.id, 21)

        [entry] = leagues.global_leagues(bob.id)

        assert entry["member_count"] == 2
        assert entry["average_points"] == 30
        assert entry["joined"] is True
        assert leagues.global_leagues()[0]["joined"] is False


class TestStandings:
    @pytest.fixture
    def league(self, users, leagues, squad_service):
        names_points = [("bob", 40), ("carol", 55), ("dave", 40), ("erin", 10)]
        registered = [users.register(name)[0] for name, _ in names_points]
        league = leagues.create_league(registered[0].id, "Office League")
        for user, (_, points) in zip(registered, names_points):
            if user.id != registered[0].id:
                leagues.join_league(user.id, league.code)
            set_points(squad_service, user.id, points)
        return league

    def test_ties_share_rank(self, leagues, league):
        standings = leagues.standings(league.id)
        assert [(row["username"], row["rank"]) for row in standings] == [
            ("carol", 1), ("bob", 2), ("dave", 2), ("erin", 4),
        ]
        assert standings[0]["points"] == 55

    def test_refresh_ranks(self, leagues, league, squad_service, repository):
        leagues.refresh_ranks()

        ranks = {s.name: s.rank for s in repository.list_squads()}
        assert ranks == {"bob's Team": 2, "carol's Team": 1, "dave's Team": 2, "erin's Team": 4}
        members = {m.user_id: m.rank for m in repository.list_league_members(league.id)}
        carol = repository.get_user_by_username("carol")
        assert members[carol.id] == 1

    def test_unknown_league(self, leagues):
        with pytest.raises(SquadValidationError) as exc_info:
            leagues.standings(404)
        assert exc_info.value.code is ValidationErrorCode.LEAGUE_NOT_FOUND
