"""Business logic services."""

from fantasy_cricket.services.errors import (
    NOT_FOUND_CODES,
    SquadValidationError,
    ValidationErrorCode,
)
from fantasy_cricket.services.substitution_engine import (
    Substitution,
    SubstitutionPlan,
    plan_substitutions,
)
from fantasy_cricket.services.squad_service import SquadService, SubstitutionResult
from fantasy_cricket.services.catalog_service import CatalogService
from fantasy_cricket.services.fixture_service import FixtureService
from fantasy_cricket.services.league_service import LeagueService
from fantasy_cricket.services.power_up_service import PowerUpService
from fantasy_cricket.services.points_service import PointsService, SettlementResult
from fantasy_cricket.services.user_service import UserService

__all__ = [
    "NOT_FOUND_CODES",
    "SquadValidationError",
    "ValidationErrorCode",
    "Substitution",
    "SubstitutionPlan",
    "plan_substitutions",
    "SquadService",
    "SubstitutionResult",
    "CatalogService",
    "FixtureService",
    "LeagueService",
    "PowerUpService",
    "PointsService",
    "SettlementResult",
    "UserService",
]
