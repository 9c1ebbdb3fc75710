"""Squad business logic.

SquadService is the only component that writes squads. Each mutation runs
under that squad's lock: load a copy, validate, apply, put the aggregate back.
A rejected mutation raises before anything is written.
"""

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Iterator

from fantasy_cricket.models.player import Player
from fantasy_cricket.models.squad import Squad, SquadRole
from fantasy_cricket.repositories.base import FantasyRepository
from fantasy_cricket.services.composition_rules import (
    SQUAD_BUILD_CAPS,
    SQUAD_SIZE,
    STARTING_XI_LIMITS,
    STARTING_XI_SIZE,
)
from fantasy_cricket.services.composition_validator import (
    LineupChange,
    RoleChange,
    check_add_player,
    check_set_role,
    check_set_starting,
    check_swap_players,
    check_transfer,
    count_by_type,
    is_fully_built,
    require_entry,
)
from fantasy_cricket.services.errors import SquadValidationError, ValidationErrorCode
from fantasy_cricket.services.substitution_engine import Substitution, plan_substitutions
from fantasy_cricket.utils.player_types import TYPE_ORDER, sort_by_type

logger = logging.getLogger(__name__)

# Roles a user may set directly; triple-captain comes from the power-up
ASSIGNABLE_ROLES = frozenset({SquadRole.CAPTAIN, SquadRole.VICE_CAPTAIN})

SquadMutator = Callable[[Squad, dict[int, Player]], None]


@dataclass
class SubstitutionResult:
    """Substitutions applied to one squad for one fixture."""

    squad_id: int
    fixture_id: int
    substitutions: list[Substitution] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "squad_id": self.squad_id,
            "fixture_id": self.fixture_id,
            "substitutions": [s.to_dict() for s in self.substitutions],
        }


def parse_role(value: str | SquadRole | None) -> SquadRole | None:
    """Parse a user-supplied role; None or "" clears the role."""
    if value is None or value == "":
        return None
    try:
        role = SquadRole(value)
    except ValueError:
        raise SquadValidationError(ValidationErrorCode.INVALID_ROLE, f"Invalid role: {value}") from None
    if role not in ASSIGNABLE_ROLES:
        raise SquadValidationError(ValidationErrorCode.INVALID_ROLE, f"Invalid role: {value}")
    return role


def apply_lineup_changes(squad: Squad, changes: list[LineupChange]) -> None:
    for change in changes:
        entry = require_entry(squad, change.player_id)
        entry.is_starting = change.is_starting
        entry.bench_position = change.bench_position


def apply_role_changes(squad: Squad, changes: list[RoleChange]) -> None:
    for change in changes:
        require_entry(squad, change.player_id).role = change.role


class SquadService:
    """Validated mutations and read views over squads."""

    def __init__(
        self,
        repository: FantasyRepository,
        default_total_budget: float = 100.0,
        default_transfers: int = 2,
    ):
        self.repository = repository
        self.default_total_budget = default_total_budget
        self.default_transfers = default_transfers
        self._locks: dict[int, threading.Lock] = {}
        self._locks_lock = threading.Lock()

    # --- plumbing ----------------------------------------------------------

    def _lock_for(self, squad_id: int) -> threading.Lock:
        with self._locks_lock:
            lock = self._locks.get(squad_id)
            if lock is None:
                # Squads are never deleted, so only existing ids get a lock
                self._load(squad_id)
                lock = threading.Lock()
                self._locks[squad_id] = lock
            return lock

    @contextmanager
    def _locked(self, squad_id: int, action: str) -> Iterator[None]:
        """Serialize work on one squad and log rejections."""
        try:
            lock = self._lock_for(squad_id)
        except SquadValidationError as e:
            logger.info(f"Squad {squad_id}: {action} rejected ({e.code.value}): {e.message}")
            raise
        with lock:
            try:
                yield
            except SquadValidationError as e:
                logger.info(f"Squad {squad_id}: {action} rejected ({e.code.value}): {e.message}")
                raise

    def _load(self, squad_id: int) -> Squad:
        squad = self.repository.get_squad(squad_id)
        if squad is None:
            raise SquadValidationError(ValidationErrorCode.TEAM_NOT_FOUND, f"Team not found: {squad_id}")
        return squad

    def _catalog_player(self, player_id: int) -> Player:
        player = self.repository.get_player(player_id)
        if player is None:
            raise SquadValidationError(ValidationErrorCode.PLAYER_NOT_FOUND, f"Player not found: {player_id}")
        return player

    def _players_for(self, squad: Squad, *extra: Player) -> dict[int, Player]:
        """Catalog lookup covering every squad member plus extra players."""
        players = {p.id: p for p in extra}
        for player_id in squad.player_ids - set(players):
            players[player_id] = self._catalog_player(player_id)
        return players

    def _save(self, squad: Squad) -> Squad:
        squad.touch()
        self.repository.put_squad(squad)
        return squad

    def update(self, squad_id: int, mutator: SquadMutator, action: str = "update") -> Squad:
        """Run mutator on a locked copy of the squad and store the result.

        The mutator receives the squad and a lookup of its players. If it
        raises, nothing is stored.
        """
        with self._locked(squad_id, action):
            squad = self._load(squad_id)
            mutator(squad, self._players_for(squad))
            return self._save(squad)

    # --- creation & reads --------------------------------------------------

    def create_squad(self, user_id: int, name: str) -> Squad:
        squad = Squad(
            id=self.repository.next_id("squads"),
            user_id=user_id,
            name=name,
            budget_total=self.default_total_budget,
            transfers_remaining=self.default_transfers,
        )
        self.repository.put_squad(squad)
        logger.info(f"Created squad {squad.id} for user {user_id}")
        return squad

    def get_squad(self, squad_id: int) -> Squad:
        return self._load(squad_id)

    def get_squad_by_user(self, user_id: int) -> Squad:
        squad = self.repository.get_squad_by_user(user_id)
        if squad is None:
            raise SquadValidationError(ValidationErrorCode.TEAM_NOT_FOUND, f"No team for user {user_id}")
        return squad

    def get_squad_players(self, squad_id: int) -> list[dict]:
        """Squad members joined with catalog data; XI first, then bench order."""
        squad = self._load(squad_id)
        players = self._players_for(squad)
        rows = []
        for entry in squad.entries:
            player = players[entry.player_id]
            rows.append({
                "id": player.id,
                "name": player.name,
                "team": player.team,
                "type": player.type.value,
                "price": player.price,
                "image": player.image,
                "stats": player.stats,
                "role": entry.role.value if entry.role else None,
                "is_starting": entry.is_starting,
                "bench_position": entry.bench_position,
            })
        starters = sort_by_type([r for r in rows if r["is_starting"]])
        bench = sorted((r for r in rows if not r["is_starting"]), key=lambda r: r["bench_position"])
        return starters + bench

    def get_composition(self, squad_id: int) -> dict:
        """Per-type counts against the squad caps and starting-XI limits."""
        squad = self._load(squad_id)
        players = self._players_for(squad)
        squad_counts = count_by_type(squad.entries, players)
        xi_counts = count_by_type(squad.starting, players)
        return {
            "types": [
                {
                    "type": player_type.value,
                    "count": squad_counts[player_type],
                    "max": SQUAD_BUILD_CAPS[player_type],
                    "starting": xi_counts[player_type],
                    "starting_min": STARTING_XI_LIMITS[player_type].min,
                    "starting_max": STARTING_XI_LIMITS[player_type].max,
                }
                for player_type in TYPE_ORDER
            ],
            "total_players": len(squad.entries),
            "max_total_players": SQUAD_SIZE,
            "starting_players": len(squad.starting),
            "max_starting_players": STARTING_XI_SIZE,
        }

    def get_distribution(self, squad_id: int) -> dict[str, int]:
        """Number of squad players from each IPL team."""
        squad = self._load(squad_id)
        distribution: dict[str, int] = {}
        for player in self._players_for(squad).values():
            distribution[player.team] = distribution.get(player.team, 0) + 1
        return distribution

    # --- mutations ---------------------------------------------------------

    def add_player(self, squad_id: int, player_id: int) -> Squad:
        with self._locked(squad_id, f"add player {player_id}"):
            squad = self._load(squad_id)
            player = self._catalog_player(player_id)
            entry = check_add_player(squad, player, self._players_for(squad, player))

            is_transfer = is_fully_built(squad)
            squad.entries.append(entry)
            squad.budget_used = round(squad.budget_used + player.price, 2)
            if is_transfer:
                squad.transfers_remaining -= 1
            if len(squad.entries) >= SQUAD_SIZE:
                squad.build_complete = True

            logger.info(
                f"Squad {squad_id}: added {player.name} ({player.type.value}), "
                f"starting={entry.is_starting}, transfer={is_transfer}"
            )
            return self._save(squad)

    def remove_player(self, squad_id: int, player_id: int) -> Squad:
        with self._locked(squad_id, f"remove player {player_id}"):
            squad = self._load(squad_id)
            entry = require_entry(squad, player_id)
            player = self._catalog_player(player_id)

            squad.entries.remove(entry)
            squad.budget_used = max(0.0, round(squad.budget_used - player.price, 2))

            logger.info(f"Squad {squad_id}: removed {player.name}")
            return self._save(squad)

    def set_player_role(self, squad_id: int, player_id: int, role: str | SquadRole | None) -> Squad:
        with self._locked(squad_id, f"set role of {player_id}"):
            parsed = parse_role(role)
            squad = self._load(squad_id)
            apply_role_changes(squad, check_set_role(squad, player_id, parsed))
            logger.info(f"Squad {squad_id}: player {player_id} role -> {parsed.value if parsed else None}")
            return self._save(squad)

    def set_starting(
        self,
        squad_id: int,
        player_id: int,
        is_starting: bool,
        bench_position: int | None = None,
    ) -> Squad:
        with self._locked(squad_id, f"set starting of {player_id}"):
            squad = self._load(squad_id)
            changes = check_set_starting(squad, player_id, is_starting, bench_position, self._players_for(squad))
            apply_lineup_changes(squad, changes)
            logger.info(f"Squad {squad_id}: player {player_id} starting={is_starting} ({len(changes)} changes)")
            return self._save(squad)

    def swap_players(self, squad_id: int, starter_id: int, bench_id: int) -> Squad:
        with self._locked(squad_id, f"swap {starter_id} with {bench_id}"):
            squad = self._load(squad_id)
            changes = check_swap_players(squad, starter_id, bench_id, self._players_for(squad))
            apply_lineup_changes(squad, changes)
            logger.info(f"Squad {squad_id}: swapped starter {starter_id} with bench {bench_id}")
            return self._save(squad)

    def transfer_player(self, squad_id: int, out_id: int, in_id: int) -> Squad:
        with self._locked(squad_id, f"transfer {out_id} -> {in_id}"):
            squad = self._load(squad_id)
            incoming = self._catalog_player(in_id)
            players = self._players_for(squad, incoming)
            new_entry = check_transfer(squad, out_id, incoming, players)

            is_transfer = is_fully_built(squad)
            index = squad.entries.index(require_entry(squad, out_id))
            squad.entries[index] = new_entry
            squad.budget_used = round(squad.budget_used - players[out_id].price + incoming.price, 2)
            if is_transfer:
                squad.transfers_remaining -= 1

            logger.info(f"Squad {squad_id}: transferred {players[out_id].name} -> {incoming.name}")
            return self._save(squad)

    def rename_squad(self, squad_id: int, name: str) -> Squad:
        with self._locked(squad_id, "rename"):
            name = (name or "").strip()
            if not name:
                raise SquadValidationError(ValidationErrorCode.INVALID_NAME, "Team name is required")
            squad = self._load(squad_id)
            squad.name = name
            return self._save(squad)

    def reset_squad(self, squad_id: int) -> Squad:
        with self._locked(squad_id, "reset"):
            squad = self._load(squad_id)
            squad.entries = []
            squad.budget_used = 0.0
            squad.transfers_remaining = self.default_transfers
            squad.build_complete = False
            logger.info(f"Squad {squad_id}: reset")
            return self._save(squad)

    def apply_substitutions(self, squad_id: int, fixture_id: int) -> SubstitutionResult:
        """Swap absent starters for participating bench players."""
        with self._locked(squad_id, f"substitutions for fixture {fixture_id}"):
            if self.repository.get_fixture(fixture_id) is None:
                raise SquadValidationError(
                    ValidationErrorCode.FIXTURE_NOT_FOUND, f"Fixture not found: {fixture_id}"
                )
            squad = self._load(squad_id)
            participating = {p.player_id for p in self.repository.list_performances(fixture_id)}
            player_types = {pid: p.type for pid, p in self._players_for(squad).items()}

            plan = plan_substitutions(squad.entries, player_types, participating)
            if plan.changed:
                squad.entries = plan.entries
                self._save(squad)
                logger.info(
                    f"Squad {squad_id}: {len(plan.substitutions)} substitutions for fixture {fixture_id}"
                )
            return SubstitutionResult(squad_id, fixture_id, plan.substitutions)
