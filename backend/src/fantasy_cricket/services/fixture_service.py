"""Fixture feed: schedule lookups and match deadlines."""

from datetime import datetime, timedelta, timezone

from fantasy_cricket.models.fixture import Fixture, FixtureStatus, PlayerPerformance
from fantasy_cricket.repositories.base import FantasyRepository
from fantasy_cricket.services.errors import SquadValidationError, ValidationErrorCode

UPCOMING_LIMIT = 10


def format_deadline(remaining: timedelta) -> str:
    """Render time left as "Hh Mm"; past deadlines show "0h 0m"."""
    total_minutes = max(0, int(remaining.total_seconds() // 60))
    hours, minutes = divmod(total_minutes, 60)
    return f"{hours}h {minutes}m"


class FixtureService:
    """Read access to fixtures and their performances."""

    def __init__(self, repository: FantasyRepository):
        self.repository = repository

    def list_fixtures(self) -> list[Fixture]:
        return sorted(self.repository.list_fixtures(), key=lambda f: f.start_time)

    def get_fixture(self, fixture_id: int) -> Fixture:
        fixture = self.repository.get_fixture(fixture_id)
        if fixture is None:
            raise SquadValidationError(
                ValidationErrorCode.FIXTURE_NOT_FOUND, f"Fixture not found: {fixture_id}"
            )
        return fixture

    def upcoming_fixtures(self, limit: int = UPCOMING_LIMIT, now: datetime | None = None) -> list[Fixture]:
        """Fixtures not yet completed that start later or are still upcoming."""
        now = now or datetime.now(timezone.utc)
        fixtures = [
            f for f in self.list_fixtures()
            if f.status is not FixtureStatus.COMPLETED
            and (f.start_time > now or f.status is FixtureStatus.UPCOMING)
        ]
        return fixtures[:limit]

    def next_fixture(self, now: datetime | None = None) -> tuple[Fixture, str] | None:
        """The next fixture to start and its deadline, or None."""
        now = now or datetime.now(timezone.utc)
        for fixture in self.upcoming_fixtures(now=now):
            if fixture.start_time > now:
                return fixture, format_deadline(fixture.start_time - now)
        return None

    def performances(self, fixture_id: int) -> list[PlayerPerformance]:
        self.get_fixture(fixture_id)
        return self.repository.list_performances(fixture_id)
