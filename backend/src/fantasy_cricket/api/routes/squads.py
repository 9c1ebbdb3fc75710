"""REST endpoints for squad management."""

from fastapi import APIRouter, Request
from pydantic import BaseModel

from fantasy_cricket.api.routes.common import serialize_squad, translate_errors

router = APIRouter(prefix="/api/squads", tags=["squads"])


class AddPlayerRequest(BaseModel):
    player_id: int


class SetRoleRequest(BaseModel):
    """Role to assign; null clears it."""

    role: str | None = None


class SetStartingRequest(BaseModel):
    """Move a player into the XI or onto the bench."""

    is_starting: bool
    bench_position: int | None = None  # 1-4, only when benching


class SwapRequest(BaseModel):
    starter_id: int
    bench_id: int


class TransferRequest(BaseModel):
    out_player_id: int
    in_player_id: int


class RenameRequest(BaseModel):
    name: str


class PowerUpRequest(BaseModel):
    """Power-up to activate; player_id is required for triple-captain."""

    power_up: str
    player_id: int | None = None


@router.get("/{squad_id}")
def get_squad(request: Request, squad_id: int):
    with translate_errors():
        squad = request.app.state.squad_service.get_squad(squad_id)
    return serialize_squad(squad)


@router.get("/{squad_id}/players")
def get_squad_players(request: Request, squad_id: int):
    """Squad players with catalog details, XI first then bench."""
    with translate_errors():
        players = request.app.state.squad_service.get_squad_players(squad_id)
    return {"squad_id": squad_id, "players": players}


@router.post("/{squad_id}/players", status_code=201)
def add_player(request: Request, squad_id: int, body: AddPlayerRequest):
    with translate_errors():
        squad = request.app.state.squad_service.add_player(squad_id, body.player_id)
    return serialize_squad(squad)


@router.delete("/{squad_id}/players")
def reset_squad(request: Request, squad_id: int):
    """Remove every player and restore budget and transfers."""
    with translate_errors():
        squad = request.app.state.squad_service.reset_squad(squad_id)
    return serialize_squad(squad)


@router.delete("/{squad_id}/players/{player_id}")
def remove_player(request: Request, squad_id: int, player_id: int):
    with translate_errors():
        squad = request.app.state.squad_service.remove_player(squad_id, player_id)
    return serialize_squad(squad)


@router.patch("/{squad_id}/players/{player_id}/role")
def set_player_role(request: Request, squad_id: int, player_id: int, body: SetRoleRequest):
    with translate_errors():
        squad = request.app.state.squad_service.set_player_role(squad_id, player_id, body.role)
    return serialize_squad(squad)


@router.patch("/{squad_id}/players/{player_id}/starting")
def set_starting(request: Request, squad_id: int, player_id: int, body: SetStartingRequest):
    with translate_errors():
        squad = request.app.state.squad_service.set_starting(
            squad_id, player_id, body.is_starting, body.bench_position
        )
    return serialize_squad(squad)


@router.post("/{squad_id}/swap")
def swap_players(request: Request, squad_id: int, body: SwapRequest):
    """Exchange a starter with a bench player."""
    with translate_errors():
        squad = request.app.state.squad_service.swap_players(squad_id, body.starter_id, body.bench_id)
    return serialize_squad(squad)


@router.post("/{squad_id}/transfers")
def transfer_player(request: Request, squad_id: int, body: TransferRequest):
    with translate_errors():
        squad = request.app.state.squad_service.transfer_player(
            squad_id, body.out_player_id, body.in_player_id
        )
    return serialize_squad(squad)


@router.patch("/{squad_id}/name")
def rename_squad(request: Request, squad_id: int, body: RenameRequest):
    with translate_errors():
        squad = request.app.state.squad_service.rename_squad(squad_id, body.name)
    return serialize_squad(squad)


@router.get("/{squad_id}/composition")
def get_composition(request: Request, squad_id: int):
    with translate_errors():
        return request.app.state.squad_service.get_composition(squad_id)


@router.get("/{squad_id}/distribution")
def get_distribution(request: Request, squad_id: int):
    """Number of squad players from each IPL team."""
    with translate_errors():
        distribution = request.app.state.squad_service.get_distribution(squad_id)
    return {"squad_id": squad_id, "distribution": distribution}


@router.post("/{squad_id}/power-ups")
def apply_power_up(request: Request, squad_id: int, body: PowerUpRequest):
    with translate_errors():
        squad = request.app.state.power_up_service.apply_power_up(squad_id, body.power_up, body.player_id)
    return serialize_squad(squad)


@router.post("/{squad_id}/substitutions/{fixture_id}")
def apply_substitutions(request: Request, squad_id: int, fixture_id: int):
    """Swap starters who did not play for bench players who did."""
    with translate_errors():
        result = request.app.state.squad_service.apply_substitutions(squad_id, fixture_id)
    return result.to_dict()
