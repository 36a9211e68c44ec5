"""SQLite-backed analysis stores.

Both tables live in one database file but are written independently, so
replacing a repository analysis never touches cached route deep dives.
Owner and name compare case-insensitively, as GitHub does; rows keep the
spelling of the latest write.
"""

from __future__ import annotations

import sqlite3
import threading
from pathlib import Path

from reposcope.cache.models import (
    RepositoryAnalysis,
    RepositoryAnalysisSummary,
    RouteAnalysisEntry,
)
from reposcope.identity import RepositoryIdentity

_SCHEMA = """\
CREATE TABLE IF NOT EXISTS repository_analyses (
    owner TEXT NOT NULL COLLATE NOCASE,
    name TEXT NOT NULL COLLATE NOCASE,
    repo_url TEXT NOT NULL,
    payload_json TEXT NOT NULL,
    analyzed_at TEXT NOT NULL,
    PRIMARY KEY (owner, name)
);
CREATE TABLE IF NOT EXISTS route_analyses (
    owner TEXT NOT NULL COLLATE NOCASE,
    name TEXT NOT NULL COLLATE NOCASE,
    route TEXT NOT NULL,
    flow_visualization TEXT NOT NULL DEFAULT '',
    execution_trace TEXT NOT NULL DEFAULT '',
    cached_at TEXT NOT NULL,
    PRIMARY KEY (owner, name, route)
);
"""


def _connect(db_path: str) -> sqlite3.Connection:
    if db_path != ":memory:":
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    # check_same_thread=False: orchestrators call the stores via asyncio.to_thread.
    conn = sqlite3.connect(
        db_path, isolation_level=None, timeout=5, check_same_thread=False
    )
    conn.execute("PRAGMA journal_mode=WAL")
    conn.executescript(_SCHEMA)
    return conn


class _SQLiteStore:
    def __init__(
        self,
        db_path: str = ".reposcope/cache.db",
        conn: sqlite3.Connection | None = None,
        lock: threading.Lock | None = None,
    ) -> None:
        self.db_path = db_path
        self._conn = conn or _connect(db_path)
        self._lock = lock or threading.Lock()

    def close(self) -> None:
        self._conn.close()


class SQLiteRepositoryStore(_SQLiteStore):
    """RepositoryAnalysisStore backed by the ``repository_analyses`` table."""

    def get(self, identity: RepositoryIdentity) -> RepositoryAnalysis | None:
        with self._lock:
            row = self._conn.execute(
                "SELECT payload_json FROM repository_analyses WHERE owner = ? AND name = ?",
                (identity.owner, identity.name),
            ).fetchone()
        if row is None:
            return None
        return RepositoryAnalysis.model_validate_json(row[0])

    def summary(self, identity: RepositoryIdentity) -> RepositoryAnalysisSummary | None:
        """Existence check that skips loading the payload."""
        with self._lock:
            row = self._conn.execute(
                "SELECT repo_url, owner, name, analyzed_at FROM repository_analyses "
                "WHERE owner = ? AND name = ?",
                (identity.owner, identity.name),
            ).fetchone()
        if row is None:
            return None
        repo_url, owner, name, analyzed_at = row
        return RepositoryAnalysisSummary(
            repo_url=repo_url, owner=owner, name=name, analyzed_at=analyzed_at
        )

    def upsert(self, analysis: RepositoryAnalysis) -> None:
        with self._lock:
            self._conn.execute(
                "INSERT INTO repository_analyses (owner, name, repo_url, payload_json, analyzed_at) "
                "VALUES (?, ?, ?, ?, ?) "
                "ON CONFLICT (owner, name) DO UPDATE SET "
                "owner = excluded.owner, name = excluded.name, "
                "repo_url = excluded.repo_url, payload_json = excluded.payload_json, "
                "analyzed_at = excluded.analyzed_at",
                (
                    analysis.owner,
                    analysis.name,
                    analysis.repo_url,
                    analysis.model_dump_json(by_alias=True),
                    analysis.analyzed_at.isoformat(),
                ),
            )

    def count(self) -> int:
        with self._lock:
            return self._conn.execute("SELECT COUNT(*) FROM repository_analyses").fetchone()[0]


class SQLiteRouteStore(_SQLiteStore):
    """RouteAnalysisStore backed by the ``route_analyses`` table."""

    def get(self, identity: RepositoryIdentity, route: str) -> RouteAnalysisEntry | None:
        with self._lock:
            row = self._conn.execute(
                "SELECT owner, name, route, flow_visualization, execution_trace, cached_at "
                "FROM route_analyses WHERE owner = ? AND name = ? AND route = ?",
                (identity.owner, identity.name, route),
            ).fetchone()
        if row is None:
            return None
        owner, name, route_, flow, trace, cached_at = row
        return RouteAnalysisEntry(
            owner=owner,
            name=name,
            route=route_,
            flow_visualization=flow,
            execution_trace=trace,
            cached_at=cached_at,
        )

    def upsert(self, entry: RouteAnalysisEntry) -> None:
        with self._lock:
            self._conn.execute(
                "INSERT INTO route_analyses "
                "(owner, name, route, flow_visualization, execution_trace, cached_at) "
                "VALUES (?, ?, ?, ?, ?, ?) "
                "ON CONFLICT (owner, name, route) DO UPDATE SET "
                "owner = excluded.owner, name = excluded.name, "
                "flow_visualization = excluded.flow_visualization, "
                "execution_trace = excluded.execution_trace, "
                "cached_at = excluded.cached_at",
                (
                    entry.owner,
                    entry.name,
                    entry.route,
                    entry.flow_visualization,
                    entry.execution_trace,
                    entry.cached_at.isoformat(),
                ),
            )

    def count(self) -> int:
        with self._lock:
            return self._conn.execute("SELECT COUNT(*) FROM route_analyses").fetchone()[0]


def open_stores(db_path: str) -> tuple[SQLiteRepositoryStore, SQLiteRouteStore]:
    """Both stores on one shared connection (required for ``:memory:``)."""
    conn = _connect(db_path)
    lock = threading.Lock()
    return (
        SQLiteRepositoryStore(db_path, conn, lock),
        SQLiteRouteStore(db_path, conn, lock),
    )
