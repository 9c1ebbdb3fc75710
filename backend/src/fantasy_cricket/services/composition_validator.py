"""Squad composition validation.

Every check here is pure: it inspects a Squad (plus a player_id -> Player
lookup for types and prices) and either raises SquadValidationError or returns
the change the caller is allowed to make. Nothing in this module writes.
"""

from collections import Counter
from dataclasses import dataclass
from typing import Iterable, Mapping

from fantasy_cricket.models.player import Player, PlayerType
from fantasy_cricket.models.squad import CAPTAIN_ROLES, Squad, SquadEntry, SquadRole
from fantasy_cricket.services.composition_rules import (
    BENCH_POSITIONS,
    SQUAD_SIZE,
    STARTING_XI_SIZE,
    squad_cap,
    xi_limit,
)
from fantasy_cricket.services.errors import SquadValidationError, ValidationErrorCode

PlayerLookup = Mapping[int, Player]


@dataclass(frozen=True)
class LineupChange:
    """New starting/bench placement for one entry."""

    player_id: int
    is_starting: bool
    bench_position: int


@dataclass(frozen=True)
class RoleChange:
    """New leadership role for one entry."""

    player_id: int
    role: SquadRole | None


def count_by_type(entries: Iterable[SquadEntry], players: PlayerLookup) -> Counter:
    """Count entries per PlayerType."""
    return Counter(players[e.player_id].type for e in entries)


def is_fully_built(squad: Squad) -> bool:
    """True once the squad has completed its initial 15-player build-out."""
    return squad.build_complete or len(squad.entries) >= SQUAD_SIZE


def free_bench_positions(squad: Squad, exclude_player_id: int | None = None) -> list[int]:
    """Bench slots not held by any bench entry, lowest first."""
    used = {
        e.bench_position
        for e in squad.entries
        if not e.is_starting and e.player_id != exclude_player_id
    }
    return [p for p in BENCH_POSITIONS if p not in used]


def require_entry(squad: Squad, player_id: int) -> SquadEntry:
    entry = squad.get_entry(player_id)
    if entry is None:
        raise SquadValidationError(
            ValidationErrorCode.PLAYER_NOT_IN_SQUAD,
            f"Player {player_id} is not in squad {squad.id}",
        )
    return entry


def _budget_after(squad: Squad, delta: float) -> float:
    return round(squad.budget_used + delta, 2)


def check_add_player(squad: Squad, player: Player, players: PlayerLookup) -> SquadEntry:
    """Validate adding a catalog player to the squad.

    Args:
        squad: Current squad state
        player: Candidate from the catalog
        players: Lookup covering every player already in the squad

    Returns:
        The SquadEntry to insert. Starts in the XI while it has fewer than
        11 players, otherwise goes to the lowest free bench slot.

    Raises:
        SquadValidationError: DuplicatePlayer, BudgetExceeded, SquadFull,
            RoleCapReached or NoTransfersRemaining, checked in that order
    """
    if player.id in squad.player_ids:
        raise SquadValidationError(
            ValidationErrorCode.DUPLICATE_PLAYER,
            f"{player.name} is already in the squad",
        )

    if _budget_after(squad, player.price) > squad.budget_total:
        raise SquadValidationError(
            ValidationErrorCode.BUDGET_EXCEEDED,
            f"Not enough budget: {squad.budget_total - squad.budget_used:g} left, "
            f"{player.name} costs {player.price:g}",
        )

    if len(squad.entries) >= SQUAD_SIZE:
        raise SquadValidationError(
            ValidationErrorCode.SQUAD_FULL,
            f"Maximum squad size of {SQUAD_SIZE} players reached",
        )

    counts = count_by_type(squad.entries, players)
    cap = squad_cap(player.type)
    if counts[player.type] >= cap:
        raise SquadValidationError(
            ValidationErrorCode.ROLE_CAP_REACHED,
            f"Maximum {cap} {player.type.value} players reached",
        )

    if is_fully_built(squad) and squad.transfers_remaining <= 0:
        raise SquadValidationError(
            ValidationErrorCode.NO_TRANSFERS_REMAINING,
            "No transfers remaining",
        )

    if len(squad.starting) < STARTING_XI_SIZE:
        return SquadEntry(player_id=player.id, is_starting=True, bench_position=0)

    free = free_bench_positions(squad)
    if not free:
        raise SquadValidationError(
            ValidationErrorCode.INVALID_BENCH_POSITION,
            "No free bench position",
        )
    return SquadEntry(player_id=player.id, is_starting=False, bench_position=free[0])


def check_set_starting(
    squad: Squad,
    player_id: int,
    want_starting: bool,
    bench_position: int | None,
    players: PlayerLookup,
) -> list[LineupChange]:
    """Validate moving a player into the XI or onto the bench.

    Benching onto a slot held by another bench player swaps the two. If the
    mover came from the XI the displaced player takes the lowest free slot.

    Returns:
        Changes to apply, occupant first. Empty when nothing moves.
    """
    entry = require_entry(squad, player_id)
    player_type = players[player_id].type
    limit = xi_limit(player_type)
    starters = squad.starting

    if want_starting:
        if entry.is_starting:
            return []
        if len(starters) >= STARTING_XI_SIZE:
            raise SquadValidationError(
                ValidationErrorCode.STARTING_XI_FULL,
                f"Already have {STARTING_XI_SIZE} players in starting XI",
            )
        counts = count_by_type(starters, players)
        if counts[player_type] + 1 > limit.max:
            raise SquadValidationError(
                ValidationErrorCode.ROLE_CAP_EXCEEDED_IN_XI,
                f"Maximum {limit.max} {player_type.value} players allowed in starting XI",
            )
        return [LineupChange(player_id, True, 0)]

    if entry.is_starting:
        remaining = count_by_type((e for e in starters if e.player_id != player_id), players)
        if remaining[player_type] < limit.min:
            raise SquadValidationError(
                ValidationErrorCode.MINIMUM_ROLE_VIOLATION,
                f"Need at least {limit.min} {player_type.value} players in starting XI",
            )

    if bench_position is not None and bench_position not in BENCH_POSITIONS:
        raise SquadValidationError(
            ValidationErrorCode.INVALID_BENCH_POSITION,
            f"Bench position must be between {BENCH_POSITIONS[0]} and {BENCH_POSITIONS[-1]}",
        )

    current = None if entry.is_starting else entry.bench_position
    free = free_bench_positions(squad, exclude_player_id=player_id)

    if bench_position is None:
        if current is not None:
            return []
        if not free:
            raise SquadValidationError(ValidationErrorCode.INVALID_BENCH_POSITION, "Bench is full")
        return [LineupChange(player_id, False, free[0])]

    occupant = next(
        (e for e in squad.bench if e.player_id != player_id and e.bench_position == bench_position),
        None,
    )
    move = LineupChange(player_id, False, bench_position)
    if occupant is None:
        return [move]

    if current is not None:
        return [LineupChange(occupant.player_id, False, current), move]

    if not free:
        raise SquadValidationError(ValidationErrorCode.INVALID_BENCH_POSITION, "Bench is full")
    return [LineupChange(occupant.player_id, False, free[0]), move]


def check_set_role(squad: Squad, player_id: int, role: SquadRole | None) -> list[RoleChange]:
    """Assign a leadership role, demoting whoever currently holds it.

    Captain and triple-captain share one slot.
    """
    entry = require_entry(squad, player_id)

    if role is None:
        return [RoleChange(player_id, None)] if entry.role is not None else []

    slot = CAPTAIN_ROLES if role in CAPTAIN_ROLES else {role}
    changes = [
        RoleChange(e.player_id, None)
        for e in squad.entries
        if e.player_id != player_id and e.role in slot
    ]
    changes.append(RoleChange(player_id, role))
    return changes


def _check_xi_exchange(
    starters: list[SquadEntry],
    out_id: int,
    in_type: PlayerType,
    players: PlayerLookup,
) -> None:
    """Validate replacing one starter with a player of in_type."""
    out_type = players[out_id].type
    if out_type == in_type:
        return
    counts = count_by_type((e for e in starters if e.player_id != out_id), players)

    in_limit = xi_limit(in_type)
    if counts[in_type] + 1 > in_limit.max:
        raise SquadValidationError(
            ValidationErrorCode.ROLE_CAP_EXCEEDED_IN_XI,
            f"Maximum {in_limit.max} {in_type.value} players allowed in starting XI",
        )

    out_limit = xi_limit(out_type)
    if counts[out_type] < out_limit.min:
        raise SquadValidationError(
            ValidationErrorCode.MINIMUM_ROLE_VIOLATION,
            f"Need at least {out_limit.min} {out_type.value} players in starting XI",
        )


def check_swap_players(
    squad: Squad,
    starter_id: int,
    bench_id: int,
    players: PlayerLookup,
) -> list[LineupChange]:
    """Validate exchanging a starter with a bench player in one step."""
    starter = require_entry(squad, starter_id)
    substitute = require_entry(squad, bench_id)

    if not starter.is_starting:
        raise SquadValidationError(
            ValidationErrorCode.INVALID_BENCH_POSITION,
            f"Player {starter_id} is not in the starting XI",
        )
    if substitute.is_starting:
        raise SquadValidationError(
            ValidationErrorCode.INVALID_BENCH_POSITION,
            f"Player {bench_id} is not on the bench",
        )

    _check_xi_exchange(squad.starting, starter_id, players[bench_id].type, players)

    return [
        LineupChange(starter_id, False, substitute.bench_position),
        LineupChange(bench_id, True, 0),
    ]


def check_transfer(
    squad: Squad,
    out_id: int,
    in_player: Player,
    players: PlayerLookup,
) -> SquadEntry:
    """Validate replacing out_id with in_player as a single transfer.

    The incoming player takes the outgoing player's slot (XI or bench
    position); the outgoing player's price is refunded before the budget
    check.
    """
    outgoing = require_entry(squad, out_id)

    if in_player.id in squad.player_ids:
        raise SquadValidationError(
            ValidationErrorCode.DUPLICATE_PLAYER,
            f"{in_player.name} is already in the squad",
        )

    if _budget_after(squad, in_player.price - players[out_id].price) > squad.budget_total:
        raise SquadValidationError(
            ValidationErrorCode.BUDGET_EXCEEDED,
            f"Not enough budget to bring in {in_player.name}",
        )

    remaining = [e for e in squad.entries if e.player_id != out_id]
    cap = squad_cap(in_player.type)
    if count_by_type(remaining, players)[in_player.type] >= cap:
        raise SquadValidationError(
            ValidationErrorCode.ROLE_CAP_REACHED,
            f"Maximum {cap} {in_player.type.value} players reached",
        )

    if is_fully_built(squad) and squad.transfers_remaining <= 0:
        raise SquadValidationError(
            ValidationErrorCode.NO_TRANSFERS_REMAINING,
            "No transfers remaining",
        )

    if outgoing.is_starting:
        _check_xi_exchange(squad.starting, out_id, in_player.type, players)

    return SquadEntry(
        player_id=in_player.id,
        is_starting=outgoing.is_starting,
        bench_position=outgoing.bench_position,
    )
