"""Automatic substitutions after a fixture.

Starters who did not take the field are swapped for bench players who did.
Two passes run over the bench in bench-position order:

1. Strict: a substitute must have the same player type as the absent starter.
2. Relaxed: leftover absent starters are paired, in order, with leftover
   participating bench players regardless of type. Starting-XI limits are not
   re-checked here; fielding eleven players wins over composition.

A starter with no eligible substitute stays in the XI and scores nothing.
The number of starters never changes.
"""

from dataclasses import dataclass, field, replace
from typing import Iterable, Mapping

from fantasy_cricket.models.player import PlayerType
from fantasy_cricket.models.squad import SquadEntry


@dataclass(frozen=True)
class Substitution:
    """One absent starter replaced by one bench player."""

    player_out: int
    player_in: int

    def to_dict(self) -> dict:
        return {"out": self.player_out, "in": self.player_in}


@dataclass
class SubstitutionPlan:
    """Result of planning substitutions for one squad."""

    entries: list[SquadEntry]
    substitutions: list[Substitution] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.substitutions)


def _swap(starter: SquadEntry, substitute: SquadEntry) -> Substitution:
    starter.bench_position, substitute.bench_position = substitute.bench_position, 0
    starter.is_starting, substitute.is_starting = False, True
    return Substitution(player_out=starter.player_id, player_in=substitute.player_id)


def plan_substitutions(
    entries: Iterable[SquadEntry],
    player_types: Mapping[int, PlayerType],
    participating: set[int],
) -> SubstitutionPlan:
    """Plan automatic substitutions for a squad.

    Args:
        entries: Current squad entries (not modified)
        player_types: player_id -> PlayerType for every entry
        participating: Player ids with a performance in the fixture

    Returns:
        SubstitutionPlan with updated copies of the entries, in the original
        order, and the substitutions made
    """
    updated = [replace(e) for e in entries]

    missing = [e for e in updated if e.is_starting and e.player_id not in participating]
    if not missing:
        return SubstitutionPlan(entries=updated)

    bench = sorted((e for e in updated if not e.is_starting), key=lambda e: e.bench_position)
    used: set[int] = set()
    substitutions: list[Substitution] = []
    unresolved: list[SquadEntry] = []

    for starter in missing:
        starter_type = player_types[starter.player_id]
        substitute = next(
            (
                b for b in bench
                if b.player_id not in used
                and b.player_id in participating
                and player_types[b.player_id] == starter_type
            ),
            None,
        )
        if substitute is None:
            unresolved.append(starter)
            continue
        used.add(substitute.player_id)
        substitutions.append(_swap(starter, substitute))

    leftover_bench = [b for b in bench if b.player_id not in used and b.player_id in participating]
    for starter, substitute in zip(unresolved, leftover_bench):
        used.add(substitute.player_id)
        substitutions.append(_swap(starter, substitute))

    return SubstitutionPlan(entries=updated, substitutions=substitutions)
