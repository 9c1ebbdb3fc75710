"""Shared helpers for the REST routes: error translation and serializers."""

from contextlib import contextmanager
from typing import Iterator

from fastapi import HTTPException

from fantasy_cricket.models.fixture import Fixture, PlayerPerformance
from fantasy_cricket.models.league import League, User
from fantasy_cricket.models.player import IplTeam, Player
from fantasy_cricket.models.squad import Squad
from fantasy_cricket.services.errors import SquadValidationError


@contextmanager
def translate_errors() -> Iterator[None]:
    """Turn service errors into HTTP errors: not-found codes 404, others 400."""
    try:
        yield
    except SquadValidationError as e:
        raise HTTPException(status_code=404 if e.is_not_found else 400, detail=e.to_dict()) from e
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


def serialize_player(player: Player) -> dict:
    return {
        "id": player.id,
        "name": player.name,
        "team": player.team,
        "type": player.type.value,
        "price": player.price,
        "image": player.image,
        "stats": player.stats,
    }


def serialize_team(team: IplTeam) -> dict:
    return {
        "id": team.id,
        "name": team.name,
        "code": team.code,
        "primary_color": team.primary_color,
        "secondary_color": team.secondary_color,
    }


def serialize_squad(squad: Squad) -> dict:
    return {
        "id": squad.id,
        "user_id": squad.user_id,
        "name": squad.name,
        "points": squad.points,
        "rank": squad.rank,
        "budget_used": squad.budget_used,
        "budget_total": squad.budget_total,
        "budget_remaining": round(squad.budget_total - squad.budget_used, 2),
        "transfers_remaining": squad.transfers_remaining,
        "last_week_points": squad.last_week_points,
        "average_points": squad.average_points,
        "fixtures_played": squad.fixtures_played,
        "active_power_up": squad.active_power_up.value if squad.active_power_up else None,
        "used_power_ups": [p.value for p in squad.used_power_ups],
        "players": [
            {
                "player_id": e.player_id,
                "role": e.role.value if e.role else None,
                "is_starting": e.is_starting,
                "bench_position": e.bench_position,
            }
            for e in squad.entries
        ],
    }


def serialize_fixture(fixture: Fixture) -> dict:
    return {
        "id": fixture.id,
        "home_team": fixture.home_team,
        "away_team": fixture.away_team,
        "venue": fixture.venue,
        "start_time": fixture.start_time.isoformat(),
        "status": fixture.status.value,
        "result": fixture.result,
        "home_score": fixture.home_score,
        "away_score": fixture.away_score,
    }


def serialize_performance(performance: PlayerPerformance) -> dict:
    return {
        "id": performance.id,
        "fixture_id": performance.fixture_id,
        "player_id": performance.player_id,
        "points": performance.points,
        "stats": performance.stats,
    }


def serialize_user(user: User) -> dict:
    return {"id": user.id, "username": user.username, "created_at": user.created_at.isoformat()}


def serialize_league(league: League) -> dict:
    return {
        "id": league.id,
        "name": league.name,
        "code": league.code,
        "creator_id": league.creator_id,
        "is_global": league.is_global,
    }
