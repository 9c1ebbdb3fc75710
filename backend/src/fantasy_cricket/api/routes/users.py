"""REST endpoints for users."""

from fastapi import APIRouter, Request
from pydantic import BaseModel

from fantasy_cricket.api.routes.common import serialize_squad, serialize_user, translate_errors

router = APIRouter(prefix="/api/users", tags=["users"])


class RegisterRequest(BaseModel):
    """Request body for registering a user."""

    username: str


@router.post("", status_code=201)
def register_user(request: Request, body: RegisterRequest):
    """Register a user; an empty squad is created with them."""
    with translate_errors():
        user, squad = request.app.state.user_service.register(body.username)
    return {"user": serialize_user(user), "squad": serialize_squad(squad)}


@router.get("/{user_id}")
def get_user(request: Request, user_id: int):
    with translate_errors():
        user = request.app.state.user_service.get_user(user_id)
    return serialize_user(user)


@router.get("/{user_id}/squad")
def get_user_squad(request: Request, user_id: int):
    with translate_errors():
        squad = request.app.state.squad_service.get_squad_by_user(user_id)
    return serialize_squad(squad)
