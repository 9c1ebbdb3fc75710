"""Power-ups (chips): one use each, one active at a time."""

import logging

from fantasy_cricket.models.player import Player
from fantasy_cricket.models.squad import PowerUp, Squad, SquadRole
from fantasy_cricket.services.composition_validator import check_set_role
from fantasy_cricket.services.errors import SquadValidationError, ValidationErrorCode
from fantasy_cricket.services.squad_service import SquadService, apply_role_changes

logger = logging.getLogger(__name__)

# Transfers granted while a wildcard or free hit is active
UNLIMITED_TRANSFERS = 999


def parse_power_up(value: str | PowerUp) -> PowerUp:
    try:
        return PowerUp(value)
    except ValueError:
        raise SquadValidationError(
            ValidationErrorCode.INVALID_POWER_UP, f"Invalid power-up: {value}"
        ) from None


def expire_power_up(squad: Squad) -> PowerUp | None:
    """End the active power-up after a fixture is settled.

    Wildcard and free hit give back the transfers held before activation;
    a triple captain goes back to being a regular captain.
    """
    chip = squad.active_power_up
    if chip is None:
        return None

    if chip in (PowerUp.WILDCARD, PowerUp.FREE_HIT) and squad.saved_transfers is not None:
        squad.transfers_remaining = squad.saved_transfers
    if chip is PowerUp.TRIPLE_CAPTAIN:
        for entry in squad.entries:
            if entry.role is SquadRole.TRIPLE_CAPTAIN:
                entry.role = SquadRole.CAPTAIN

    squad.saved_transfers = None
    squad.active_power_up = None
    return chip


class PowerUpService:
    """Activates power-ups through the squad service."""

    def __init__(self, squad_service: SquadService):
        self.squad_service = squad_service

    def apply_power_up(self, squad_id: int, power_up: str | PowerUp, player_id: int | None = None) -> Squad:
        """Activate a power-up for a squad.

        Args:
            squad_id: Squad to activate on
            power_up: wildcard, triple-captain, bench-boost or free-hit
            player_id: Squad member to triple-captain (triple-captain only)

        Raises:
            SquadValidationError: InvalidPowerUp, PowerUpAlreadyUsed,
                PowerUpActive, or PlayerNotInSquad for a bad triple captain
        """
        chip = parse_power_up(power_up)

        def activate(squad: Squad, players: dict[int, Player]) -> None:
            if chip in squad.used_power_ups:
                raise SquadValidationError(
                    ValidationErrorCode.POWER_UP_ALREADY_USED,
                    f"{chip.value} has already been used",
                )
            if squad.active_power_up is not None:
                raise SquadValidationError(
                    ValidationErrorCode.POWER_UP_ACTIVE,
                    f"{squad.active_power_up.value} is already active",
                )

            if chip in (PowerUp.WILDCARD, PowerUp.FREE_HIT):
                squad.saved_transfers = squad.transfers_remaining
                squad.transfers_remaining = UNLIMITED_TRANSFERS
            elif chip is PowerUp.TRIPLE_CAPTAIN:
                if player_id is None:
                    raise SquadValidationError(
                        ValidationErrorCode.PLAYER_NOT_IN_SQUAD,
                        "A squad player is required for triple captain",
                    )
                apply_role_changes(squad, check_set_role(squad, player_id, SquadRole.TRIPLE_CAPTAIN))

            squad.active_power_up = chip
            squad.used_power_ups.append(chip)

        squad = self.squad_service.update(squad_id, activate, action=f"power-up {chip.value}")
        logger.info(f"Squad {squad_id}: activated {chip.value}")
        return squad
