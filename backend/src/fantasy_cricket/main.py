"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fantasy_cricket.config import Settings, settings
from fantasy_cricket.api.routes.catalog import router as catalog_router
from fantasy_cricket.api.routes.fixtures import router as fixtures_router
from fantasy_cricket.api.routes.leagues import router as leagues_router
from fantasy_cricket.api.routes.squads import router as squads_router
from fantasy_cricket.api.routes.users import router as users_router
from fantasy_cricket.repositories.base import FantasyRepository
from fantasy_cricket.repositories.catalog_loader import load_catalog
from fantasy_cricket.repositories.duckdb_repository import DuckDBRepository
from fantasy_cricket.repositories.memory_repository import InMemoryRepository
from fantasy_cricket.services import (
    CatalogService,
    FixtureService,
    LeagueService,
    PointsService,
    PowerUpService,
    SquadService,
    UserService,
)

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def get_database_path() -> Path | None:
    """Database path from settings, or None for the in-memory store."""
    if not settings.database_path:
        return None
    db_path = Path(settings.database_path)
    if db_path.is_absolute():
        return db_path
    # Relative path - resolve from repo root
    repo_root = Path(__file__).parent.parent.parent.parent
    return repo_root / settings.database_path


def create_repository() -> FantasyRepository:
    db_path = get_database_path()
    if db_path is None:
        logger.info("Using in-memory repository")
        return InMemoryRepository()
    return DuckDBRepository(str(db_path))


def install_services(app: FastAPI, repository: FantasyRepository, config: Settings = settings) -> None:
    """Wire the repository and every service into app.state."""
    squad_service = SquadService(
        repository,
        default_total_budget=config.default_total_budget,
        default_transfers=config.default_transfers,
    )
    league_service = LeagueService(repository, squad_service)

    app.state.repository = repository
    app.state.squad_service = squad_service
    app.state.league_service = league_service
    app.state.catalog_service = CatalogService(repository)
    app.state.fixture_service = FixtureService(repository)
    app.state.power_up_service = PowerUpService(squad_service)
    app.state.points_service = PointsService(repository, squad_service, league_service)
    app.state.user_service = UserService(repository, squad_service)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # Tests install their own services before the app starts
    if not hasattr(app.state, "repository"):
        repository = create_repository()
        if settings.seed_catalog and repository.is_empty():
            load_catalog(repository, Path(settings.catalog_dir) if settings.catalog_dir else None)
        install_services(app, repository)
    yield
    close = getattr(app.state.repository, "close", None)
    if close is not None:
        close()


app = FastAPI(
    title="Fantasy Cricket",
    description="IPL fantasy cricket backend - squads, substitutions, points and leagues",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "fantasy-cricket"}


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "Fantasy Cricket API",
        "version": "0.1.0",
        "docs": "/docs",
    }


# Register routers
app.include_router(users_router)
app.include_router(catalog_router)
app.include_router(squads_router)
app.include_router(fixtures_router)
app.include_router(leagues_router)


def run() -> None:
    """Run the API with uvicorn."""
    import uvicorn

    uvicorn.run("fantasy_cricket.main:app", host=settings.host, port=settings.port, reload=settings.debug)
