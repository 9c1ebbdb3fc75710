"""Fixture scoring and settlement."""

import logging
import random
import threading
from dataclasses import dataclass, field
from typing import Mapping

from fantasy_cricket.models.fixture import FixtureStatus, PlayerPerformance
from fantasy_cricket.models.player import Player, PlayerType
from fantasy_cricket.models.squad import PowerUp, Squad, SquadRole
from fantasy_cricket.repositories.base import FantasyRepository
from fantasy_cricket.services.errors import SquadValidationError, ValidationErrorCode
from fantasy_cricket.services.league_service import LeagueService
from fantasy_cricket.services.power_up_service import expire_power_up
from fantasy_cricket.services.squad_service import SquadService

logger = logging.getLogger(__name__)

ROLE_MULTIPLIERS = {
    SquadRole.CAPTAIN: 2.0,
    SquadRole.VICE_CAPTAIN: 1.5,
    SquadRole.TRIPLE_CAPTAIN: 3.0,
}

STAT_FIELDS = frozenset({
    "runs", "fours", "sixes", "balls", "strike_rate",
    "overs", "maidens", "wickets", "runs_conceded", "economy",
    "catches", "stumpings",
})


def validate_stats(stats: Mapping) -> dict:
    """Check match stats are known, non-negative numbers.

    Raises:
        SquadValidationError: InvalidStats naming the first bad field
    """
    cleaned = {}
    for key, value in stats.items():
        if key not in STAT_FIELDS:
            raise SquadValidationError(ValidationErrorCode.INVALID_STATS, f"Unknown stat: {key}")
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
            raise SquadValidationError(
                ValidationErrorCode.INVALID_STATS,
                f"Stat {key} must be a non-negative number, got {value!r}",
            )
        cleaned[key] = value
    return cleaned


def _strike_rate(stats: Mapping) -> float:
    if "strike_rate" in stats:
        return float(stats["strike_rate"])
    balls = stats.get("balls", 0)
    return round(stats.get("runs", 0) / balls * 100) if balls > 0 else 0.0


def _economy(stats: Mapping) -> float:
    if "economy" in stats:
        return float(stats["economy"])
    overs = stats.get("overs", 0)
    return round(stats.get("runs_conceded", 0) / overs, 1) if overs > 0 else 0.0


def _batting_base(stats: Mapping) -> int:
    return stats.get("runs", 0) + stats.get("fours", 0) + 2 * stats.get("sixes", 0)


def score_performance(player_type: PlayerType, stats: Mapping) -> int:
    """Fantasy points for one player's match stats."""
    runs = stats.get("runs", 0)
    wickets = stats.get("wickets", 0)

    if player_type is PlayerType.BATSMAN:
        points = _batting_base(stats)
        if runs >= 100:
            points += 20
        elif runs >= 50:
            points += 10
        if runs > 10 and _strike_rate(stats) > 150:
            points += 5
        return points

    if player_type is PlayerType.BOWLER:
        points = 25 * wickets + 5 * stats.get("maidens", 0)
        if wickets >= 5:
            points += 30
        elif wickets >= 3:
            points += 15
        if stats.get("overs", 0) >= 2 and _economy(stats) < 6:
            points += 5
        return points

    if player_type is PlayerType.ALL_ROUNDER:
        points = _batting_base(stats) + 25 * wickets + 5 * stats.get("maidens", 0)
        if runs >= 30 and wickets >= 2:
            points += 10
        return points

    # Wicket-keeper
    dismissals = stats.get("catches", 0) + stats.get("stumpings", 0)
    points = _batting_base(stats) + 10 * stats.get("catches", 0) + 15 * stats.get("stumpings", 0)
    if dismissals >= 4:
        points += 10
    return points


def _batting_stats(rng: random.Random, max_runs: int, max_fours: int, max_sixes: int) -> dict:
    runs = rng.randrange(max_runs)
    balls = int(runs * 1.2) + rng.randrange(10)
    return {
        "runs": runs,
        "fours": rng.randrange(max_fours),
        "sixes": rng.randrange(max_sixes),
        "balls": balls,
        "strike_rate": round(runs / balls * 100) if balls > 0 else 0,
    }


def _bowling_stats(rng: random.Random, max_overs: int, max_maidens: int, max_wickets: int, max_runs: int) -> dict:
    overs = rng.randrange(max_overs) + 1
    runs_conceded = rng.randrange(max_runs)
    return {
        "overs": overs,
        "maidens": rng.randrange(max_maidens),
        "wickets": rng.randrange(max_wickets),
        "runs_conceded": runs_conceded,
        "economy": round(runs_conceded / overs, 1),
    }


def random_stats(player_type: PlayerType, rng: random.Random) -> dict:
    """Plausible random match stats for a player type."""
    if player_type is PlayerType.BATSMAN:
        return _batting_stats(rng, 100, 10, 5)
    if player_type is PlayerType.BOWLER:
        return _bowling_stats(rng, 4, 2, 5, 40)
    if player_type is PlayerType.ALL_ROUNDER:
        return {**_batting_stats(rng, 60, 5, 3), **_bowling_stats(rng, 3, 1, 3, 30)}
    return {
        **_batting_stats(rng, 70, 8, 4),
        "catches": rng.randrange(4),
        "stumpings": rng.randrange(2),
    }


def squad_fixture_points(squad: Squad, performances: Mapping[int, PlayerPerformance]) -> int:
    """Points a squad earns from one fixture's performances.

    Starters score; the bench scores too while bench-boost is active.
    Leadership multipliers are floored to whole points.
    """
    bench_counts = squad.active_power_up is PowerUp.BENCH_BOOST
    total = 0
    for entry in squad.entries:
        if not entry.is_starting and not bench_counts:
            continue
        performance = performances.get(entry.player_id)
        if performance is None:
            continue
        total += int(performance.points * ROLE_MULTIPLIERS.get(entry.role, 1.0))
    return total


@dataclass
class SettlementResult:
    """Outcome of settling one fixture."""

    fixture_id: int
    squads_settled: int = 0
    substitutions: int = 0
    points: dict[int, int] = field(default_factory=dict)  # squad_id -> points earned

    def to_dict(self) -> dict:
        return {
            "fixture_id": self.fixture_id,
            "squads_settled": self.squads_settled,
            "substitutions": self.substitutions,
            "points": self.points,
        }


class PointsService:
    """Records performances and settles fixtures into squad points."""

    def __init__(
        self,
        repository: FantasyRepository,
        squad_service: SquadService,
        league_service: LeagueService,
    ):
        self.repository = repository
        self.squad_service = squad_service
        self.league_service = league_service
        self._locks: dict[int, threading.Lock] = {}
        self._locks_lock = threading.Lock()

    def _require_fixture(self, fixture_id: int):
        fixture = self.repository.get_fixture(fixture_id)
        if fixture is None:
            raise SquadValidationError(
                ValidationErrorCode.FIXTURE_NOT_FOUND, f"Fixture not found: {fixture_id}"
            )
        return fixture

    def _store(self, fixture_id: int, player: Player, stats: dict) -> PlayerPerformance:
        existing = {p.player_id: p for p in self.repository.list_performances(fixture_id)}
        previous = existing.get(player.id)
        performance = PlayerPerformance(
            id=previous.id if previous else self.repository.next_id("performances"),
            fixture_id=fixture_id,
            player_id=player.id,
            points=score_performance(player.type, stats),
            stats=stats,
        )
        self.repository.put_performance(performance)
        return performance

    def record_performance(self, fixture_id: int, player_id: int, stats: dict) -> PlayerPerformance:
        """Score and store one player's stats, replacing any earlier record.

        Raises:
            SquadValidationError: FixtureNotFound, PlayerNotFound or InvalidStats
        """
        stats = validate_stats(stats)
        self._require_fixture(fixture_id)
        player = self.repository.get_player(player_id)
        if player is None:
            raise SquadValidationError(
                ValidationErrorCode.PLAYER_NOT_FOUND, f"Player not found: {player_id}"
            )
        performance = self._store(fixture_id, player, dict(stats))
        logger.info(f"Fixture {fixture_id}: recorded {performance.points} points for player {player_id}")
        return performance

    def generate_fixture_points(self, fixture_id: int, seed: int | None = None) -> list[PlayerPerformance]:
        """Demo feed: random performances for both fixture teams' players."""
        fixture = self._require_fixture(fixture_id)
        rng = random.Random(seed)
        teams = set(fixture.teams)
        performances = [
            self._store(fixture_id, player, random_stats(player.type, rng))
            for player in self.repository.list_players()
            if player.team in teams
        ]
        logger.info(f"Fixture {fixture_id}: generated {len(performances)} performances")
        return performances

    def _lock_for(self, fixture_id: int) -> threading.Lock:
        with self._locks_lock:
            lock = self._locks.get(fixture_id)
            if lock is None:
                self._require_fixture(fixture_id)
                lock = threading.Lock()
                self._locks[fixture_id] = lock
            return lock

    def settle_fixture(self, fixture_id: int) -> SettlementResult:
        """Apply substitutions, award points and close the fixture.

        The fixture is marked completed before any squad is scored, so a
        concurrent or retried settle is rejected instead of paying twice.

        Raises:
            SquadValidationError: FixtureNotFound, or FixtureAlreadySettled
                when the fixture is already completed
        """
        with self._lock_for(fixture_id):
            fixture = self._require_fixture(fixture_id)
            if fixture.status is FixtureStatus.COMPLETED:
                raise SquadValidationError(
                    ValidationErrorCode.FIXTURE_ALREADY_SETTLED,
                    f"Fixture {fixture_id} has already been settled",
                )
            fixture.status = FixtureStatus.COMPLETED
            self.repository.put_fixture(fixture)

            performances = {p.player_id: p for p in self.repository.list_performances(fixture_id)}
            result = SettlementResult(fixture_id=fixture_id)

            for squad in self.repository.list_squads():
                try:
                    subs = self.squad_service.apply_substitutions(squad.id, fixture_id)
                    result.substitutions += len(subs.substitutions)

                    def award(s: Squad, players: dict[int, Player]) -> None:
                        earned = squad_fixture_points(s, performances)
                        s.points += earned
                        s.last_week_points = earned
                        s.fixtures_played += 1
                        s.average_points = s.points // s.fixtures_played
                        expire_power_up(s)
                        result.points[s.id] = earned

                    self.squad_service.update(squad.id, award, action=f"settle fixture {fixture_id}")
                except Exception:
                    logger.error(
                        f"Settling fixture {fixture_id} failed at squad {squad.id} "
                        f"after {result.squads_settled} squads"
                    )
                    raise
                result.squads_settled += 1

        self.league_service.refresh_ranks()

        logger.info(
            f"Settled fixture {fixture_id}: {result.squads_settled} squads, "
            f"{result.substitutions} substitutions"
        )
        return result
