"""REST endpoints for fixtures, performances and settlement."""

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, ConfigDict, Field

from fantasy_cricket.api.routes.common import serialize_fixture, serialize_performance, translate_errors

router = APIRouter(prefix="/api/fixtures", tags=["fixtures"])


class PerformanceStats(BaseModel):
    """Match stats; strike rate and economy are derived when left out."""

    model_config = ConfigDict(extra="forbid")

    runs: int = Field(default=0, ge=0)
    fours: int = Field(default=0, ge=0)
    sixes: int = Field(default=0, ge=0)
    balls: int = Field(default=0, ge=0)
    strike_rate: float | None = Field(default=None, ge=0)
    overs: float = Field(default=0, ge=0)
    maidens: int = Field(default=0, ge=0)
    wickets: int = Field(default=0, ge=0)
    runs_conceded: int = Field(default=0, ge=0)
    economy: float | None = Field(default=None, ge=0)
    catches: int = Field(default=0, ge=0)
    stumpings: int = Field(default=0, ge=0)


class PerformanceRequest(BaseModel):
    """Match stats for one player; points are computed server-side."""

    player_id: int
    stats: PerformanceStats = Field(default_factory=PerformanceStats)


class GeneratePointsRequest(BaseModel):
    seed: int | None = None


@router.get("")
def list_fixtures(request: Request):
    fixtures = request.app.state.fixture_service.list_fixtures()
    return {"fixtures": [serialize_fixture(f) for f in fixtures]}


@router.get("/upcoming")
def upcoming_fixtures(request: Request):
    fixtures = request.app.state.fixture_service.upcoming_fixtures()
    return {"fixtures": [serialize_fixture(f) for f in fixtures]}


@router.get("/next")
def next_fixture(request: Request):
    """Next fixture to start with time left until its deadline."""
    upcoming = request.app.state.fixture_service.next_fixture()
    if upcoming is None:
        raise HTTPException(status_code=404, detail="No upcoming fixtures")
    fixture, deadline = upcoming
    return {"fixture": serialize_fixture(fixture), "deadline": deadline}


@router.get("/{fixture_id}/performances")
def list_performances(request: Request, fixture_id: int):
    with translate_errors():
        performances = request.app.state.fixture_service.performances(fixture_id)
    return {"fixture_id": fixture_id, "performances": [serialize_performance(p) for p in performances]}


@router.post("/{fixture_id}/performances", status_code=201)
def record_performance(request: Request, fixture_id: int, body: PerformanceRequest):
    with translate_errors():
        performance = request.app.state.points_service.record_performance(
            fixture_id, body.player_id, body.stats.model_dump(exclude_unset=True, exclude_none=True)
        )
    return serialize_performance(performance)


@router.post("/{fixture_id}/generate-points", status_code=201)
def generate_points(request: Request, fixture_id: int, body: GeneratePointsRequest | None = None):
    """Demo feed: random performances for both teams of the fixture."""
    seed = body.seed if body else None
    with translate_errors():
        performances = request.app.state.points_service.generate_fixture_points(fixture_id, seed=seed)
    return {"fixture_id": fixture_id, "performances": [serialize_performance(p) for p in performances]}


@router.post("/{fixture_id}/settle")
def settle_fixture(request: Request, fixture_id: int):
    """Apply substitutions, award points and update ranks."""
    with translate_errors():
        result = request.app.state.points_service.settle_fixture(fixture_id)
    return result.to_dict()
