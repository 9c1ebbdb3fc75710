"""REST endpoints for mini-leagues."""

from fastapi import APIRouter, Request
from pydantic import BaseModel

from fantasy_cricket.api.routes.common import serialize_league, translate_errors

router = APIRouter(prefix="/api/leagues", tags=["leagues"])


class CreateLeagueRequest(BaseModel):
    user_id: int
    name: str
    is_global: bool = False


class JoinLeagueRequest(BaseModel):
    user_id: int
    code: str


@router.post("", status_code=201)
def create_league(request: Request, body: CreateLeagueRequest):
    with translate_errors():
        league = request.app.state.league_service.create_league(body.user_id, body.name, body.is_global)
    return serialize_league(league)


@router.post("/join")
def join_league(request: Request, body: JoinLeagueRequest):
    with translate_errors():
        league = request.app.state.league_service.join_league(body.user_id, body.code)
    return serialize_league(league)


@router.get("/global")
def global_leagues(request: Request, user_id: int | None = None):
    leagues = request.app.state.league_service.global_leagues(user_id)
    return {"leagues": leagues}


@router.get("/user/{user_id}")
def user_leagues(request: Request, user_id: int):
    with translate_errors():
        leagues = request.app.state.league_service.user_leagues(user_id)
    return {"user_id": user_id, "leagues": leagues}


@router.get("/{league_id}/standings")
def league_standings(request: Request, league_id: int):
    """Members ranked by squad points; equal points share a rank."""
    with translate_errors():
        standings = request.app.state.league_service.standings(league_id)
    return {"league_id": league_id, "standings": standings}
