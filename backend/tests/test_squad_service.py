"""Tests for SquadService mutations and read views."""
import threading

import pytest

from fantasy_cricket.models.fixture import PlayerPerformance
from fantasy_cricket.models.squad import SquadRole
from fantasy_cricket.services.errors import SquadValidationError, ValidationErrorCode
from fantasy_cricket.services.substitution_engine import Substitution


def record_played(repository, fixture_id: int, player_ids) -> None:
    for player_id in player_ids:
        repository.put_performance(PlayerPerformance(
            id=repository.next_id("performances"),
            fixture_id=fixture_id,
            player_id=player_id,
            points=10,
        ))


class TestAddPlayer:
    def test_add_first_player(self, squad_service, squad_id):
        squad = squad_service.add_player(squad_id, 101)
        assert squad.player_ids == {101}
        assert squad.get_entry(101).is_starting is True
        assert squad.budget_used == 5.0
        assert squad.transfers_remaining == 2

    def test_build_out_to_fifteen(self, squad_service, full_squad_id):
        squad = squad_service.get_squad(full_squad_id)
        assert len(squad.entries) == 15
        assert len(squad.starting) == 11
        assert [e.bench_position for e in squad.bench] == [1, 2, 3, 4]
        assert squad.budget_used == 75.0
        assert squad.build_complete is True
        assert squad.transfers_remaining == 2

    def test_rejected_add_leaves_squad_unchanged(self, squad_service, squad_id, repository):
        for player_id in (201, 202, 203):
            squad_service.add_player(squad_id, player_id)
        before = repository.get_squad(squad_id)

        with pytest.raises(SquadValidationError) as exc_info:
            squad_service.add_player(squad_id, 204)

        assert exc_info.value.code is ValidationErrorCode.ROLE_CAP_REACHED
        assert repository.get_squad(squad_id) == before

    def test_unknown_player(self, squad_service, squad_id):
        with pytest.raises(SquadValidationError) as exc_info:
            squad_service.add_player(squad_id, 999)
        assert exc_info.value.code is ValidationErrorCode.PLAYER_NOT_FOUND

    def test_unknown_squad(self, squad_service):
        with pytest.raises(SquadValidationError) as exc_info:
            squad_service.add_player(42, 101)
        assert exc_info.value.code is ValidationErrorCode.TEAM_NOT_FOUND

    def test_unknown_squad_registers_no_lock(self, squad_service, squad_id):
        for _ in range(3):
            with pytest.raises(SquadValidationError):
                squad_service.add_player(42, 101)
        squad_service.add_player(squad_id, 101)
        assert list(squad_service._locks) == [squad_id]

    def test_refill_after_build_out_costs_a_transfer(self, squad_service, full_squad_id):
        squad_service.remove_player(full_squad_id, 405)
        squad = squad_service.add_player(full_squad_id, 406)
        assert squad.transfers_remaining == 1
        assert squad.get_entry(406).bench_position == 4

    def test_no_transfers_remaining(self, squad_service, full_squad_id):
        for out_id, in_id in ((405, 406), (406, 405)):
            squad_service.remove_player(full_squad_id, out_id)
            squad_service.add_player(full_squad_id, in_id)
        squad_service.remove_player(full_squad_id, 405)

        with pytest.raises(SquadValidationError) as exc_info:
            squad_service.add_player(full_squad_id, 406)
        assert exc_info.value.code is ValidationErrorCode.NO_TRANSFERS_REMAINING


class TestRemovePlayer:
    def test_refunds_and_frees_bench_slot(self, squad_service, full_squad_id):
        squad = squad_service.remove_player(full_squad_id, 305)
        assert 305 not in squad.player_ids
        assert squad.budget_used == 70.0
        assert [e.bench_position for e in squad.bench] == [1, 3, 4]

        squad = squad_service.add_player(full_squad_id, 306)
        assert squad.get_entry(306).bench_position == 2

    def test_player_not_in_squad(self, squad_service, squad_id):
        with pytest.raises(SquadValidationError) as exc_info:
            squad_service.remove_player(squad_id, 101)
        assert exc_info.value.code is ValidationErrorCode.PLAYER_NOT_IN_SQUAD


class TestRoles:
    def test_new_captain_demotes_old(self, squad_service, full_squad_id):
        squad_service.set_player_role(full_squad_id, 201, "captain")
        squad = squad_service.set_player_role(full_squad_id, 202, "captain")
        assert squad.get_entry(201).role is None
        assert squad.get_entry(202).role is SquadRole.CAPTAIN

    def test_captain_and_vice_captain(self, squad_service, full_squad_id):
        squad_service.set_player_role(full_squad_id, 201, SquadRole.CAPTAIN)
        squad = squad_service.set_player_role(full_squad_id, 301, "vice-captain")
        assert squad.get_entry(201).role is SquadRole.CAPTAIN
        assert squad.get_entry(301).role is SquadRole.VICE_CAPTAIN

    def test_clear_role(self, squad_service, full_squad_id):
        squad_service.set_player_role(full_squad_id, 201, "captain")
        squad = squad_service.set_player_role(full_squad_id, 201, None)
        assert squad.get_entry(201).role is None

    @pytest.mark.parametrize("role", ["triple-captain", "skipper"])
    def test_invalid_role(self, squad_service, full_squad_id, role):
        with pytest.raises(SquadValidationError) as exc_info:
            squad_service.set_player_role(full_squad_id, 201, role)
        assert exc_info.value.code is ValidationErrorCode.INVALID_ROLE


class TestLineup:
    def test_move_bench_player_onto_occupied_slot_swaps(self, squad_service, full_squad_id):
        squad = squad_service.set_starting(full_squad_id, 405, False, 1)
        assert squad.get_entry(405).bench_position == 1
        assert squad.get_entry(102).bench_position == 4

    def test_bench_full(self, squad_service, full_squad_id):
        with pytest.raises(SquadValidationError) as exc_info:
            squad_service.set_starting(full_squad_id, 304, False)
        assert exc_info.value.code is ValidationErrorCode.INVALID_BENCH_POSITION

    def test_demote_then_promote(self, squad_service, full_squad_id):
        squad_service.remove_player(full_squad_id, 405)
        squad = squad_service.set_starting(full_squad_id, 304, False)
        assert squad.get_entry(304).bench_position == 4
        assert len(squad.starting) == 10

        squad = squad_service.set_starting(full_squad_id, 304, True)
        assert squad.get_entry(304).is_starting is True
        assert squad.get_entry(304).bench_position == 0

    def test_swap_players(self, squad_service, full_squad_id):
        squad = squad_service.swap_players(full_squad_id, 101, 102)
        assert squad.get_entry(102).is_starting is True
        assert squad.get_entry(101).bench_position == 1
        assert len(squad.starting) == 11


class TestTransfers:
    def test_transfer_player(self, squad_service, full_squad_id):
        squad = squad_service.transfer_player(full_squad_id, 201, 204)
        assert 201 not in squad.player_ids
        assert squad.get_entry(204).is_starting is True
        assert squad.transfers_remaining == 1
        assert squad.budget_used == 75.0

    def test_transfer_drops_outgoing_role(self, squad_service, full_squad_id):
        squad_service.set_player_role(full_squad_id, 201, "captain")
        squad = squad_service.transfer_player(full_squad_id, 201, 204)
        assert squad.get_entry(204).role is None
        assert all(e.role is None for e in squad.entries)

    def test_transfer_during_build_out_is_free(self, squad_service, squad_id):
        squad_service.add_player(squad_id, 201)
        squad = squad_service.transfer_player(squad_id, 201, 202)
        assert squad.player_ids == {202}
        assert squad.transfers_remaining == 2


class TestReset:
    def test_reset_squad(self, squad_service, full_squad_id):
        squad_service.transfer_player(full_squad_id, 201, 204)
        squad = squad_service.reset_squad(full_squad_id)
        assert squad.entries == []
        assert squad.budget_used == 0.0
        assert squad.transfers_remaining == 2
        assert squad.build_complete is False

    def test_rebuild_after_reset_is_free(self, squad_service, full_squad_id):
        squad_service.reset_squad(full_squad_id)
        squad = squad_service.add_player(full_squad_id, 101)
        assert squad.transfers_remaining == 2


def test_rename_squad(squad_service, squad_id):
    assert squad_service.rename_squad(squad_id, "  Royal Strikers ").name == "Royal Strikers"
    with pytest.raises(SquadValidationError) as exc_info:
        squad_service.rename_squad(squad_id, "   ")
    assert exc_info.value.code is ValidationErrorCode.INVALID_NAME


class TestApplySubstitutions:
    def test_absent_starter_swapped(self, squad_service, full_squad_id, repository):
        squad = squad_service.get_squad(full_squad_id)
        record_played(repository, 1, squad.player_ids - {201})

        result = squad_service.apply_substitutions(full_squad_id, 1)

        # No batsman on the bench, so the first participating bench player comes in
        assert result.substitutions == [Substitution(player_out=201, player_in=102)]
        squad = squad_service.get_squad(full_squad_id)
        assert squad.get_entry(102).is_starting is True
        assert squad.get_entry(201).bench_position == 1
        assert len(squad.starting) == 11

    def test_second_call_is_noop(self, squad_service, full_squad_id, repository):
        squad = squad_service.get_squad(full_squad_id)
        record_played(repository, 1, squad.player_ids - {301})
        squad_service.apply_substitutions(full_squad_id, 1)
        after_first = squad_service.get_squad(full_squad_id)

        result = squad_service.apply_substitutions(full_squad_id, 1)

        assert result.substitutions == []
        assert squad_service.get_squad(full_squad_id).entries == after_first.entries

    def test_unknown_fixture(self, squad_service, full_squad_id):
        with pytest.raises(SquadValidationError) as exc_info:
            squad_service.apply_substitutions(full_squad_id, 99)
        assert exc_info.value.code is ValidationErrorCode.FIXTURE_NOT_FOUND

    def test_result_to_dict(self, squad_service, full_squad_id, repository):
        squad = squad_service.get_squad(full_squad_id)
        record_played(repository, 1, squad.player_ids - {301})
        data = squad_service.apply_substitutions(full_squad_id, 1).to_dict()
        assert data["substitutions"] == [{"out": 301, "in": 305}]


class TestReadViews:
    def test_squad_players_order(self, squad_service, full_squad_id):
        rows = squad_service.get_squad_players(full_squad_id)
        assert len(rows) == 15
        assert rows[0]["id"] == 101
        assert [r["is_starting"] for r in rows] == [True] * 11 + [False] * 4
        assert [r["bench_position"] for r in rows[11:]] == [1, 2, 3, 4]

    def test_composition(self, squad_service, full_squad_id):
        composition = squad_service.get_composition(full_squad_id)
        types = {t["type"]: t for t in composition["types"]}
        assert types["batsman"]["count"] == 3
        assert types["bowler"]["starting"] == 4
        assert types["wicket-keeper"]["max"] == 2
        assert composition["total_players"] == 15
        assert composition["starting_players"] == 11

    def test_distribution(self, squad_service, full_squad_id):
        assert squad_service.get_distribution(full_squad_id) == {"MI": 6, "CSK": 6, "RCB": 3}

    def test_get_squad_by_user(self, squad_service, squad_id, user):
        assert squad_service.get_squad_by_user(user.id).id == squad_id
        with pytest.raises(SquadValidationError) as exc_info:
            squad_service.get_squad_by_user(999)
        assert exc_info.value.code is ValidationErrorCode.TEAM_NOT_FOUND


def test_concurrent_adds_respect_squad_cap(squad_service, squad_id):
    """Parallel adds of four batsmen leave exactly three in the squad."""
    errors = []

    def add(player_id):
        try:
            squad_service.add_player(squad_id, player_id)
        except SquadValidationError as e:
            errors.append(e.code)

    threads = [threading.Thread(target=add, args=(pid,)) for pid in (201, 202, 203, 204)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    squad = squad_service.get_squad(squad_id)
    assert len(squad.entries) == 3
    assert errors == [ValidationErrorCode.ROLE_CAP_REACHED]
