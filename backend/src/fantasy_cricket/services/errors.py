"""Validation errors raised by the squad, league and fixture services."""

from enum import Enum


class ValidationErrorCode(str, Enum):
    """Machine-readable rejection reasons."""

    DUPLICATE_PLAYER = "DuplicatePlayer"
    BUDGET_EXCEEDED = "BudgetExceeded"
    SQUAD_FULL = "SquadFull"
    ROLE_CAP_REACHED = "RoleCapReached"
    NO_TRANSFERS_REMAINING = "NoTransfersRemaining"
    STARTING_XI_FULL = "StartingXIFull"
    ROLE_CAP_EXCEEDED_IN_XI = "RoleCapExceededInXI"
    MINIMUM_ROLE_VIOLATION = "MinimumRoleViolation"
    PLAYER_NOT_IN_SQUAD = "PlayerNotInSquad"
    INVALID_BENCH_POSITION = "InvalidBenchPosition"
    TEAM_NOT_FOUND = "TeamNotFound"

    PLAYER_NOT_FOUND = "PlayerNotFound"
    FIXTURE_NOT_FOUND = "FixtureNotFound"
    FIXTURE_ALREADY_SETTLED = "FixtureAlreadySettled"
    INVALID_STATS = "InvalidStats"
    INVALID_ROLE = "InvalidRole"
    INVALID_NAME = "InvalidName"
    USERNAME_TAKEN = "UsernameTaken"
    USER_NOT_FOUND = "UserNotFound"
    LEAGUE_NOT_FOUND = "LeagueNotFound"
    ALREADY_LEAGUE_MEMBER = "AlreadyLeagueMember"
    INVALID_POWER_UP = "InvalidPowerUp"
    POWER_UP_ALREADY_USED = "PowerUpAlreadyUsed"
    POWER_UP_ACTIVE = "PowerUpActive"


NOT_FOUND_CODES = frozenset({
    ValidationErrorCode.PLAYER_NOT_IN_SQUAD,
    ValidationErrorCode.TEAM_NOT_FOUND,
    ValidationErrorCode.PLAYER_NOT_FOUND,
    ValidationErrorCode.FIXTURE_NOT_FOUND,
    ValidationErrorCode.USER_NOT_FOUND,
    ValidationErrorCode.LEAGUE_NOT_FOUND,
})


class SquadValidationError(ValueError):
    """A rejected mutation. State is left unchanged when this is raised."""

    def __init__(self, code: ValidationErrorCode, message: str):
        super().__init__(message)
        self.code = code
        self.message = message

    @property
    def is_not_found(self) -> bool:
        return self.code in NOT_FOUND_CODES

    def to_dict(self) -> dict:
        return {"code": self.code.value, "message": self.message}
