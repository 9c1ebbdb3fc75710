"""Mini-leagues, standings and rankings."""

import logging
from dataclasses import replace

import pandas as pd

from fantasy_cricket.models.league import League, LeagueMember, User
from fantasy_cricket.repositories.base import FantasyRepository
from fantasy_cricket.services.errors import SquadValidationError, ValidationErrorCode
from fantasy_cricket.services.squad_service import SquadService
from fantasy_cricket.utils.league_codes import generate_league_code

logger = logging.getLogger(__name__)

MAX_CODE_ATTEMPTS = 20


def rank_by_points(rows: list[dict], points_key: str = "points") -> pd.DataFrame:
    """Rank rows by points, highest first; equal points share a rank."""
    df = pd.DataFrame(rows)
    df["rank"] = df[points_key].rank(method="min", ascending=False).astype(int)
    return df.sort_values(["rank", "user_id"], kind="stable")


class LeagueService:
    """League membership and ranking."""

    def __init__(self, repository: FantasyRepository, squad_service: SquadService):
        self.repository = repository
        self.squad_service = squad_service

    def _require_user(self, user_id: int) -> User:
        user = self.repository.get_user(user_id)
        if user is None:
            raise SquadValidationError(ValidationErrorCode.USER_NOT_FOUND, f"User not found: {user_id}")
        return user

    def _require_league(self, league_id: int) -> League:
        league = self.repository.get_league(league_id)
        if league is None:
            raise SquadValidationError(ValidationErrorCode.LEAGUE_NOT_FOUND, f"League not found: {league_id}")
        return league

    def _unique_code(self) -> str:
        for _ in range(MAX_CODE_ATTEMPTS):
            code = generate_league_code()
            if self.repository.get_league_by_code(code) is None:
                return code
        raise RuntimeError("Could not generate a unique league code")

    def _add_member(self, league: League, user_id: int) -> LeagueMember:
        rank = len(self.repository.list_league_members(league.id)) + 1
        member = LeagueMember(league_id=league.id, user_id=user_id, rank=rank)
        self.repository.put_league_member(member)
        return member

    def create_league(self, user_id: int, name: str, is_global: bool = False) -> League:
        name = (name or "").strip()
        if not name:
            raise SquadValidationError(ValidationErrorCode.INVALID_NAME, "League name is required")
        self._require_user(user_id)

        league = League(
            id=self.repository.next_id("leagues"),
            name=name,
            code=self._unique_code(),
            creator_id=user_id,
            is_global=is_global,
        )
        self.repository.put_league(league)
        self._add_member(league, user_id)
        logger.info(f"User {user_id} created league {league.id} ({league.code})")
        return league

    def join_league(self, user_id: int, code: str) -> League:
        self._require_user(user_id)
        league = self.repository.get_league_by_code(code or "")
        if league is None:
            raise SquadValidationError(ValidationErrorCode.LEAGUE_NOT_FOUND, f"No league with code {code}")
        if any(m.user_id == user_id for m in self.repository.list_league_members(league.id)):
            raise SquadValidationError(
                ValidationErrorCode.ALREADY_LEAGUE_MEMBER,
                f"Already a member of {league.name}",
            )
        self._add_member(league, user_id)
        logger.info(f"User {user_id} joined league {league.id}")
        return league

    def _squad_points(self, user_id: int) -> int:
        squad = self.repository.get_squad_by_user(user_id)
        return squad.points if squad else 0

    def user_leagues(self, user_id: int) -> list[dict]:
        """Leagues the user belongs to, with member count and the user's rank."""
        self._require_user(user_id)
        leagues = []
        for membership in self.repository.list_user_memberships(user_id):
            league = self.repository.get_league(membership.league_id)
            if league is None:
                continue
            leagues.append({
                "id": league.id,
                "name": league.name,
                "code": league.code,
                "is_global": league.is_global,
                "member_count": len(self.repository.list_league_members(league.id)),
                "rank": membership.rank,
            })
        return leagues

    def global_leagues(self, user_id: int | None = None) -> list[dict]:
        """Global leagues with member count, average squad points and joined flag."""
        leagues = []
        for league in self.repository.list_leagues():
            if not league.is_global:
                continue
            members = self.repository.list_league_members(league.id)
            points = [self._squad_points(m.user_id) for m in members]
            leagues.append({
                "id": league.id,
                "name": league.name,
                "code": league.code,
                "member_count": len(members),
                "average_points": round(sum(points) / len(points)) if points else 0,
                "joined": user_id is not None and any(m.user_id == user_id for m in members),
            })
        return leagues

    def standings(self, league_id: int) -> list[dict]:
        """League members ranked by squad points."""
        self._require_league(league_id)
        rows = []
        for member in self.repository.list_league_members(league_id):
            user = self.repository.get_user(member.user_id)
            squad = self.repository.get_squad_by_user(member.user_id)
            rows.append({
                "user_id": member.user_id,
                "username": user.username if user else "",
                "squad_id": squad.id if squad else 0,
                "squad_name": squad.name if squad else "",
                "points": squad.points if squad else 0,
                "last_week_points": squad.last_week_points if squad else 0,
            })
        if not rows:
            return []
        return rank_by_points(rows).to_dict(orient="records")

    def refresh_ranks(self) -> None:
        """Write global squad ranks and every league's member ranks."""
        squads = self.repository.list_squads()
        if squads:
            ranked = rank_by_points([{"user_id": s.user_id, "squad_id": s.id, "points": s.points} for s in squads])
            for row in ranked.to_dict(orient="records"):
                rank = int(row["rank"])

                def set_rank(squad, players, rank=rank):
                    squad.rank = rank

                self.squad_service.update(int(row["squad_id"]), set_rank, action="rank")

        for league in self.repository.list_leagues():
            members = {m.user_id: m for m in self.repository.list_league_members(league.id)}
            for row in self.standings(league.id):
                member = members[int(row["user_id"])]
                self.repository.put_league_member(replace(member, rank=int(row["rank"])))
        logger.info(f"Refreshed ranks for {len(squads)} squads")
