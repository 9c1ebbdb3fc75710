"""DuckDB-backed persistent repository."""

import json
import logging
import threading
from datetime import datetime
from pathlib import Path

import duckdb
import pandas as pd

from fantasy_cricket.models.fixture import Fixture, FixtureStatus, PlayerPerformance
from fantasy_cricket.models.league import League, LeagueMember, User
from fantasy_cricket.models.player import IplTeam, Player
from fantasy_cricket.models.squad import PowerUp, Squad, SquadEntry, SquadRole
from fantasy_cricket.repositories.base import ID_KINDS, FantasyRepository
from fantasy_cricket.utils.player_types import normalize_player_type_strict

logger = logging.getLogger(__name__)

SCHEMA = """
    CREATE TABLE IF NOT EXISTS ipl_teams (
        id INTEGER,
        name VARCHAR,
        code VARCHAR,
        primary_color VARCHAR,
        secondary_color VARCHAR
    );
    CREATE TABLE IF NOT EXISTS players (
        id INTEGER,
        name VARCHAR,
        team VARCHAR,
        type VARCHAR,
        price DOUBLE,
        image VARCHAR,
        stats VARCHAR  -- JSON object
    );
    CREATE TABLE IF NOT EXISTS users (
        id INTEGER,
        username VARCHAR,
        created_at VARCHAR
    );
    CREATE TABLE IF NOT EXISTS squads (
        id INTEGER,
        user_id INTEGER,
        name VARCHAR,
        points INTEGER,
        squad_rank INTEGER,
        budget_used DOUBLE,
        budget_total DOUBLE,
        transfers_remaining INTEGER,
        last_week_points INTEGER,
        average_points INTEGER,
        fixtures_played INTEGER,
        build_complete BOOLEAN,
        active_power_up VARCHAR,
        used_power_ups VARCHAR,  -- JSON array
        saved_transfers INTEGER,
        created_at VARCHAR,
        updated_at VARCHAR
    );
    CREATE TABLE IF NOT EXISTS squad_entries (
        squad_id INTEGER,
        entry_order INTEGER,
        player_id INTEGER,
        role VARCHAR,
        is_starting BOOLEAN,
        bench_position INTEGER
    );
    CREATE TABLE IF NOT EXISTS fixtures (
        id INTEGER,
        home_team VARCHAR,
        away_team VARCHAR,
        venue VARCHAR,
        start_time VARCHAR,
        status VARCHAR,
        result VARCHAR,
        home_score VARCHAR,
        away_score VARCHAR
    );
    CREATE TABLE IF NOT EXISTS player_performances (
        id INTEGER,
        fixture_id INTEGER,
        player_id INTEGER,
        points INTEGER,
        stats VARCHAR  -- JSON object
    );
    CREATE TABLE IF NOT EXISTS leagues (
        id INTEGER,
        name VARCHAR,
        code VARCHAR,
        creator_id INTEGER,
        is_global BOOLEAN,
        created_at VARCHAR
    );
    CREATE TABLE IF NOT EXISTS league_members (
        league_id INTEGER,
        user_id INTEGER,
        member_rank INTEGER,
        joined_at VARCHAR
    );
"""

# id kind -> table holding that id
ID_TABLES = {
    "teams": "ipl_teams",
    "players": "players",
    "users": "users",
    "squads": "squads",
    "fixtures": "fixtures",
    "performances": "player_performances",
    "leagues": "leagues",
}


def _ts(value: datetime) -> str:
    return value.isoformat()


def _parse_ts(value: str) -> datetime:
    return datetime.fromisoformat(value)


def _opt_int(value) -> int | None:
    return None if value is None else int(value)


class DuckDBRepository(FantasyRepository):
    """Data access layer - one DuckDB database file (or ':memory:').

    Tables carry no key constraints; uniqueness is kept by replacing rows
    (delete then insert) inside a transaction.
    """

    def __init__(self, database_path: str | Path):
        self._db_path = str(database_path)
        if self._db_path != ":memory:":
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)

        self._lock = threading.RLock()
        self._conn = duckdb.connect(self._db_path)
        for statement in SCHEMA.split(";"):
            if statement.strip():
                self._conn.execute(statement)

        self._ids = {kind: 0 for kind in ID_KINDS}
        for kind, table in ID_TABLES.items():
            row = self._conn.execute(f"SELECT COALESCE(MAX(id), 0) FROM {table}").fetchone()
            self._ids[kind] = int(row[0])

        tables = self._conn.execute("SHOW TABLES").fetchall()
        logger.info(f"DuckDBRepository: Using {self._db_path} ({len(tables)} tables)")

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    # --- plumbing ----------------------------------------------------------

    def _query(self, sql: str, params: list | None = None) -> list[dict]:
        """Execute a query and return plain-Python records (NULL -> None)."""
        with self._lock:
            df = self._conn.execute(sql, params or []).df()
        if df.empty:
            return []
        df = df.astype(object).where(pd.notna(df), None)
        return df.to_dict(orient="records")

    def _replace(self, delete_sql: str, delete_params: list, insert_sql: str, rows: list[list]) -> None:
        """Run a delete, then insert_sql once per row, in one transaction."""
        with self._lock:
            self._conn.execute("BEGIN TRANSACTION")
            try:
                self._conn.execute(delete_sql, delete_params)
                if rows:
                    self._conn.executemany(insert_sql, rows)
                self._conn.execute("COMMIT")
            except Exception:
                self._conn.execute("ROLLBACK")
                raise

    def next_id(self, kind: str) -> int:
        if kind not in self._ids:
            raise ValueError(f"Unknown id kind: {kind}")
        with self._lock:
            self._ids[kind] += 1
            return self._ids[kind]

    def _bump(self, kind: str, used_id: int) -> None:
        with self._lock:
            self._ids[kind] = max(self._ids[kind], used_id)

    # --- IPL teams ---------------------------------------------------------

    @staticmethod
    def _team_from_row(row: dict) -> IplTeam:
        return IplTeam(
            id=int(row["id"]),
            name=row["name"],
            code=row["code"],
            primary_color=row["primary_color"],
            secondary_color=row["secondary_color"],
        )

    def list_teams(self) -> list[IplTeam]:
        return [self._team_from_row(r) for r in self._query("SELECT * FROM ipl_teams ORDER BY id")]

    def get_team(self, code: str) -> IplTeam | None:
        rows = self._query("SELECT * FROM ipl_teams WHERE code = ?", [code])
        return self._team_from_row(rows[0]) if rows else None

    def put_team(self, team: IplTeam) -> None:
        self._bump("teams", team.id)
        self._replace(
            "DELETE FROM ipl_teams WHERE code = ?", [team.code],
            "INSERT INTO ipl_teams VALUES (?, ?, ?, ?, ?)",
            [[team.id, team.name, team.code, team.primary_color, team.secondary_color]],
        )

    # --- Players -----------------------------------------------------------

    @staticmethod
    def _player_from_row(row: dict) -> Player:
        return Player(
            id=int(row["id"]),
            name=row["name"],
            team=row["team"],
            type=normalize_player_type_strict(row["type"]),
            price=float(row["price"]),
            image=row["image"] or "",
            stats=json.loads(row["stats"]) if row["stats"] else {},
        )

    def list_players(self) -> list[Player]:
        return [self._player_from_row(r) for r in self._query("SELECT * FROM players ORDER BY id")]

    def get_player(self, player_id: int) -> Player | None:
        rows = self._query("SELECT * FROM players WHERE id = ?", [player_id])
        return self._player_from_row(rows[0]) if rows else None

    def put_player(self, player: Player) -> None:
        self._bump("players", player.id)
        self._replace(
            "DELETE FROM players WHERE id = ?", [player.id],
            "INSERT INTO players VALUES (?, ?, ?, ?, ?, ?, ?)",
            [[
                player.id, player.name, player.team, player.type.value,
                player.price, player.image, json.dumps(player.stats),
            ]],
        )

    # --- Users -------------------------------------------------------------

    @staticmethod
    def _user_from_row(row: dict) -> User:
        return User(id=int(row["id"]), username=row["username"], created_at=_parse_ts(row["created_at"]))

    def get_user(self, user_id: int) -> User | None:
        rows = self._query("SELECT * FROM users WHERE id = ?", [user_id])
        return self._user_from_row(rows[0]) if rows else None

    def get_user_by_username(self, username: str) -> User | None:
        rows = self._query(
            "SELECT * FROM users WHERE lower(username) = ? ORDER BY id LIMIT 1",
            [username.strip().lower()],
        )
        return self._user_from_row(rows[0]) if rows else None

    def put_user(self, user: User) -> None:
        self._bump("users", user.id)
        self._replace(
            "DELETE FROM users WHERE id = ?", [user.id],
            "INSERT INTO users VALUES (?, ?, ?)",
            [[user.id, user.username, _ts(user.created_at)]],
        )

    # --- Squads ------------------------------------------------------------

    def _entries_for(self, squad_ids: list[int]) -> dict[int, list[SquadEntry]]:
        if not squad_ids:
            return {}
        placeholders = ", ".join("?" for _ in squad_ids)
        rows = self._query(
            f"SELECT * FROM squad_entries WHERE squad_id IN ({placeholders}) "
            f"ORDER BY squad_id, entry_order",
            list(squad_ids),
        )
        entries: dict[int, list[SquadEntry]] = {squad_id: [] for squad_id in squad_ids}
        for row in rows:
            entries[int(row["squad_id"])].append(SquadEntry(
                player_id=int(row["player_id"]),
                role=SquadRole(row["role"]) if row["role"] else None,
                is_starting=bool(row["is_starting"]),
                bench_position=int(row["bench_position"]),
            ))
        return entries

    def _squads_from_rows(self, rows: list[dict]) -> list[Squad]:
        entries = self._entries_for([int(r["id"]) for r in rows])
        squads = []
        for row in rows:
            squad_id = int(row["id"])
            squads.append(Squad(
                id=squad_id,
                user_id=int(row["user_id"]),
                name=row["name"],
                points=int(row["points"]),
                rank=int(row["squad_rank"]),
                budget_used=float(row["budget_used"]),
                budget_total=float(row["budget_total"]),
                transfers_remaining=int(row["transfers_remaining"]),
                last_week_points=int(row["last_week_points"]),
                average_points=int(row["average_points"]),
                fixtures_played=int(row["fixtures_played"]),
                build_complete=bool(row["build_complete"]),
                active_power_up=PowerUp(row["active_power_up"]) if row["active_power_up"] else None,
                used_power_ups=[PowerUp(p) for p in json.loads(row["used_power_ups"] or "[]")],
                saved_transfers=_opt_int(row["saved_transfers"]),
                entries=entries.get(squad_id, []),
                created_at=_parse_ts(row["created_at"]),
                updated_at=_parse_ts(row["updated_at"]),
            ))
        return squads

    def list_squads(self) -> list[Squad]:
        return self._squads_from_rows(self._query("SELECT * FROM squads ORDER BY id"))

    def get_squad(self, squad_id: int) -> Squad | None:
        squads = self._squads_from_rows(self._query("SELECT * FROM squads WHERE id = ?", [squad_id]))
        return squads[0] if squads else None

    def get_squad_by_user(self, user_id: int) -> Squad | None:
        squads = self._squads_from_rows(
            self._query("SELECT * FROM squads WHERE user_id = ? ORDER BY id LIMIT 1", [user_id])
        )
        return squads[0] if squads else None

    def put_squad(self, squad: Squad) -> None:
        self._bump("squads", squad.id)
        squad_row = [
            squad.id, squad.user_id, squad.name, squad.points, squad.rank,
            squad.budget_used, squad.budget_total, squad.transfers_remaining,
            squad.last_week_points, squad.average_points, squad.fixtures_played,
            squad.build_complete,
            squad.active_power_up.value if squad.active_power_up else None,
            json.dumps([p.value for p in squad.used_power_ups]),
            squad.saved_transfers,
            _ts(squad.created_at), _ts(squad.updated_at),
        ]
        entry_rows = [
            [squad.id, order, e.player_id, e.role.value if e.role else None, e.is_starting, e.bench_position]
            for order, e in enumerate(squad.entries)
        ]
        with self._lock:
            self._conn.execute("BEGIN TRANSACTION")
            try:
                self._conn.execute("DELETE FROM squads WHERE id = ?", [squad.id])
                self._conn.execute("DELETE FROM squad_entries WHERE squad_id = ?", [squad.id])
                self._conn.execute(
                    "INSERT INTO squads VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                    squad_row,
                )
                if entry_rows:
                    self._conn.executemany(
                        "INSERT INTO squad_entries VALUES (?, ?, ?, ?, ?, ?)",
                        entry_rows,
                    )
                self._conn.execute("COMMIT")
            except Exception:
                self._conn.execute("ROLLBACK")
                raise

    def delete_squad(self, squad_id: int) -> None:
        self._replace(
            "DELETE FROM squads WHERE id = ?", [squad_id],
            "DELETE FROM squad_entries WHERE squad_id = ?", [[squad_id]],
        )

    # --- Fixtures & performances ------------------------------------------

    @staticmethod
    def _fixture_from_row(row: dict) -> Fixture:
        return Fixture(
            id=int(row["id"]),
            home_team=row["home_team"],
            away_team=row["away_team"],
            venue=row["venue"],
            start_time=_parse_ts(row["start_time"]),
            status=FixtureStatus(row["status"]),
            result=row["result"],
            home_score=row["home_score"],
            away_score=row["away_score"],
        )

    def list_fixtures(self) -> list[Fixture]:
        return [self._fixture_from_row(r) for r in self._query("SELECT * FROM fixtures ORDER BY id")]

    def get_fixture(self, fixture_id: int) -> Fixture | None:
        rows = self._query("SELECT * FROM fixtures WHERE id = ?", [fixture_id])
        return self._fixture_from_row(rows[0]) if rows else None

    def put_fixture(self, fixture: Fixture) -> None:
        self._bump("fixtures", fixture.id)
        self._replace(
            "DELETE FROM fixtures WHERE id = ?", [fixture.id],
            "INSERT INTO fixtures VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
            [[
                fixture.id, fixture.home_team, fixture.away_team, fixture.venue,
                _ts(fixture.start_time), fixture.status.value, fixture.result,
                fixture.home_score, fixture.away_score,
            ]],
        )

    def list_performances(self, fixture_id: int) -> list[PlayerPerformance]:
        rows = self._query(
            "SELECT * FROM player_performances WHERE fixture_id = ? ORDER BY id",
            [fixture_id],
        )
        return [
            PlayerPerformance(
                id=int(r["id"]),
                fixture_id=int(r["fixture_id"]),
                player_id=int(r["player_id"]),
                points=int(r["points"]),
                stats=json.loads(r["stats"]) if r["stats"] else {},
            )
            for r in rows
        ]

    def put_performance(self, performance: PlayerPerformance) -> None:
        self._bump("performances", performance.id)
        self._replace(
            "DELETE FROM player_performances WHERE fixture_id = ? AND player_id = ?",
            [performance.fixture_id, performance.player_id],
            "INSERT INTO player_performances VALUES (?, ?, ?, ?, ?)",
            [[
                performance.id, performance.fixture_id, performance.player_id,
                performance.points, json.dumps(performance.stats),
            ]],
        )

    # --- Leagues -----------------------------------------------------------

    @staticmethod
    def _league_from_row(row: dict) -> League:
        return League(
            id=int(row["id"]),
            name=row["name"],
            code=row["code"],
            creator_id=int(row["creator_id"]),
            is_global=bool(row["is_global"]),
            created_at=_parse_ts(row["created_at"]),
        )

    @staticmethod
    def _member_from_row(row: dict) -> LeagueMember:
        return LeagueMember(
            league_id=int(row["league_id"]),
            user_id=int(row["user_id"]),
            rank=int(row["member_rank"]),
            joined_at=_parse_ts(row["joined_at"]),
        )

    def list_leagues(self) -> list[League]:
        return [self._league_from_row(r) for r in self._query("SELECT * FROM leagues ORDER BY id")]

    def get_league(self, league_id: int) -> League | None:
        rows = self._query("SELECT * FROM leagues WHERE id = ?", [league_id])
        return self._league_from_row(rows[0]) if rows else None

    def get_league_by_code(self, code: str) -> League | None:
        rows = self._query("SELECT * FROM leagues WHERE upper(code) = ?", [code.strip().upper()])
        return self._league_from_row(rows[0]) if rows else None

    def put_league(self, league: League) -> None:
        self._bump("leagues", league.id)
        self._replace(
            "DELETE FROM leagues WHERE id = ?", [league.id],
            "INSERT INTO leagues VALUES (?, ?, ?, ?, ?, ?)",
            [[league.id, league.name, league.code, league.creator_id, league.is_global, _ts(league.created_at)]],
        )

    def list_league_members(self, league_id: int) -> list[LeagueMember]:
        rows = self._query(
            "SELECT * FROM league_members WHERE league_id = ? ORDER BY joined_at, user_id",
            [league_id],
        )
        return [self._member_from_row(r) for r in rows]

    def list_user_memberships(self, user_id: int) -> list[LeagueMember]:
        rows = self._query(
            "SELECT * FROM league_members WHERE user_id = ? ORDER BY league_id",
            [user_id],
        )
        return [self._member_from_row(r) for r in rows]

    def put_league_member(self, member: LeagueMember) -> None:
        self._replace(
            "DELETE FROM league_members WHERE league_id = ? AND user_id = ?",
            [member.league_id, member.user_id],
            "INSERT INTO league_members VALUES (?, ?, ?, ?)",
            [[member.league_id, member.user_id, member.rank, _ts(member.joined_at)]],
        )
