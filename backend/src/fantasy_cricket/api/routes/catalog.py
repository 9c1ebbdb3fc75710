"""REST endpoints for the player catalog and IPL teams."""

from typing import Annotated

from fastapi import APIRouter, Query, Request

from fantasy_cricket.api.routes.common import serialize_player, serialize_team, translate_errors

router = APIRouter(prefix="/api", tags=["catalog"])


@router.get("/players")
def list_players(
    request: Request,
    player_type: Annotated[str | None, Query(alias="type")] = None,
    team: str | None = None,
    sort: str | None = None,
):
    """List catalog players, optionally filtered by type and team code."""
    with translate_errors():
        players = request.app.state.catalog_service.list_players(
            player_type=player_type, team=team, by_type=sort == "type"
        )
    return {"players": [serialize_player(p) for p in players]}


@router.get("/players/{player_id}")
def get_player(request: Request, player_id: int):
    with translate_errors():
        player = request.app.state.catalog_service.get_player(player_id)
    return serialize_player(player)


@router.get("/teams")
def list_teams(request: Request):
    teams = request.app.state.catalog_service.list_teams()
    return {"teams": [serialize_team(t) for t in teams]}
