from __future__ import annotations

import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, List, Optional, Sequence
from urllib.parse import urlparse

from cleaning_checklist.checklist.fields import STATUS_COLUMNS
from cleaning_checklist.errors import ApiError, StoreError
from cleaning_checklist.schema import boolean_column_ddl, get_schema_sql


def _debug(msg: str) -> None:
    print(f"[db] {msg}")


def _detect_dialect(dsn: str) -> str:
    """Return 'postgres' or 'sqlite'."""
    s = (dsn or "").strip()
    if not s:
        return "sqlite"
    try:
        scheme = urlparse(s).scheme.lower()
    except Exception:
        scheme = ""
    if scheme in ("postgres", "postgresql"):
        return "postgres"
    return "sqlite"


def _qmark_to_pct(sql: str) -> str:
    """Convert SQLite qmark placeholders (?) to psycopg2 placeholders (%s).

    Question marks inside single/double-quoted literals are left alone. Literal
    percent signs are doubled everywhere, since psycopg2 formats the whole
    string. Not a full SQL parser, but sufficient for this codebase.
    """
    out: List[str] = []
    in_single = False
    in_double = False
    for ch in sql:
        if ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif ch == "?" and not in_single and not in_double:
            out.append("%s")
            continue
        elif ch == "%":
            out.append("%%")
            continue
        out.append(ch)
    return "".join(out)


class PGCursor:
    def __init__(self, cur: Any):
        self._cur = cur

    def execute(self, sql: str, params: Sequence[Any] | None = None) -> "PGCursor":
        self._cur.execute(_qmark_to_pct(sql), tuple(params or ()))
        return self

    def fetchone(self) -> Any:
        return self._cur.fetchone()

    def fetchall(self) -> Any:
        return self._cur.fetchall()

    @property
    def rowcount(self) -> int:
        try:
            return int(self._cur.rowcount or 0)
        except Exception:
            return 0

    def close(self) -> None:
        self._cur.close()


class PGConnection:
    """A tiny adapter that makes psycopg2 connections look like sqlite3 connections."""

    dialect = "postgres"

    def __init__(self, conn: Any):
        self._conn = conn

    def execute(self, sql: str, params: Sequence[Any] | None = None) -> PGCursor:
        wrapper = PGCursor(self._conn.cursor())
        wrapper.execute(sql, params)
        return wrapper

    def commit(self) -> None:
        self._conn.commit()

    def rollback(self) -> None:
        self._conn.rollback()

    def close(self) -> None:
        self._conn.close()


def _import_psycopg2() -> Any:
    try:
        import psycopg2
        import psycopg2.extras
        import psycopg2.pool
    except ImportError as e:
        raise RuntimeError(
            "Postgres selected but psycopg2 is not installed. "
            "Install the 'postgres' extra (psycopg2-binary) and try again."
        ) from e
    return psycopg2


def _sqlite_path(dsn: str) -> str:
    if dsn.lower().startswith("sqlite:///"):
        return dsn[len("sqlite:///") :]
    return dsn


@contextmanager
def connect(db_dsn: str) -> Iterator[Any]:
    """Open a single unpooled connection (scripts, schema init).

    - SQLite: WAL + NORMAL sync, rows as sqlite3.Row.
    - Postgres: psycopg2 with RealDictCursor so rows behave like dicts.

    Commits on success, rolls back on error.
    """
    dsn = (db_dsn or "").strip()

    if _detect_dialect(dsn) == "postgres":
        psycopg2 = _import_psycopg2()
        raw = psycopg2.connect(dsn, cursor_factory=psycopg2.extras.RealDictCursor)
        conn: Any = PGConnection(raw)
    else:
        path = _sqlite_path(dsn)
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(path, timeout=30, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute("PRAGMA synchronous=NORMAL;")
        conn.execute("PRAGMA busy_timeout=5000;")  # 5s
        conn.execute("PRAGMA foreign_keys = ON;")

    try:
        yield conn
        conn.commit()
    except BaseException:
        conn.rollback()
        raise
    finally:
        conn.close()


class Database:
    """Bounded connection pool shared by all requests.

    At most `pool_size` connections are checked out at once. Callers beyond
    that block until a slot frees up; the wait queue has no length cap.

    Any exception raised inside a checkout (other than an `ApiError`) is
    logged and re-raised as `StoreError`, after the transaction is rolled back.
    """

    def __init__(self, dsn: str, *, pool_size: int = 10):
        self.dsn = (dsn or "").strip()
        self.dialect = _detect_dialect(self.dsn)
        self.pool_size = max(1, int(pool_size))
        self._slots = threading.BoundedSemaphore(self.pool_size)
        self._pg_pool: Optional[Any] = None
        self._pg_lock = threading.Lock()

    def _postgres_pool(self) -> Any:
        with self._pg_lock:
            if self._pg_pool is None:
                psycopg2 = _import_psycopg2()
                self._pg_pool = psycopg2.pool.ThreadedConnectionPool(
                    1,
                    self.pool_size,
                    self.dsn,
                    cursor_factory=psycopg2.extras.RealDictCursor,
                )
            return self._pg_pool

    @contextmanager
    def _checkout(self) -> Iterator[Any]:
        if self.dialect != "postgres":
            with connect(self.dsn) as conn:
                yield conn
            return

        pool = self._postgres_pool()
        raw = pool.getconn()
        conn = PGConnection(raw)
        try:
            yield conn
            conn.commit()
        except BaseException:
            if not raw.closed:
                conn.rollback()
            raise
        finally:
            pool.putconn(raw, close=bool(raw.closed))

    @contextmanager
    def connect(self) -> Iterator[Any]:
        with self._slots:
            try:
                with self._checkout() as conn:
                    yield conn
            except ApiError:
                raise
            except Exception as e:
                _debug(f"store error: {e!r}")
                raise StoreError() from e

    def close(self) -> None:
        with self._pg_lock:
            if self._pg_pool is not None:
                self._pg_pool.closeall()
                self._pg_pool = None


def init_db(db_dsn: str) -> None:
    """Create all tables and run lightweight migrations."""
    dialect = _detect_dialect(db_dsn)
    _debug(f"Initializing DB ({dialect}) at {db_dsn}")
    with connect(db_dsn) as conn:
        schema_sql = get_schema_sql(dialect)
        # Only one process may run schema DDL at a time on Postgres.
        if dialect == "postgres":
            conn.execute("SELECT pg_advisory_lock(2147483646);")
            try:
                _exec_schema(conn, schema_sql, dialect=dialect)
            finally:
                conn.execute("SELECT pg_advisory_unlock(2147483646);")
        else:
            _exec_schema(conn, schema_sql, dialect=dialect)

        _migrate(conn, dialect=dialect)


def _exec_schema(conn: Any, ddl: str, *, dialect: str) -> None:
    if dialect == "postgres":
        # Naive split is OK for our schema
        statements = [s.strip() for s in ddl.split(";") if s.strip()]
        for stmt in statements:
            conn.execute(stmt)
        return

    conn.executescript(ddl)


def _table_columns(conn: Any, table: str, *, dialect: str) -> List[str]:
    if dialect == "postgres":
        rows = conn.execute(
            """
            SELECT column_name
            FROM information_schema.columns
            WHERE table_schema='public' AND table_name=?
            ORDER BY ordinal_position
            """,
            (table,),
        ).fetchall()
        return [str(r["column_name"]) for r in rows]

    rows = conn.execute(f"PRAGMA table_info({table})").fetchall()
    return [str(r["name"]) for r in rows]


def _migrate(conn: Any, *, dialect: str) -> None:
    """Forward-only migrations for existing DBs."""
    # checklist_items: status columns added after the table was first deployed
    # (sheets / onsen_start / onsen_stop).
    cols = set(_table_columns(conn, "checklist_items", dialect=dialect))
    for col in STATUS_COLUMNS:
        if col not in cols:
            _debug(f"Adding missing column checklist_items.{col}")
            conn.execute(
                f"ALTER TABLE checklist_items ADD COLUMN {col} {boolean_column_ddl(dialect)}"
            )
