"""Database schema for the cleaning checklist service.

SQLite is the local/dev engine; Postgres is used in production. The Postgres
DDL is generated from the SQLite DDL with a small set of transformations
(types, autoincrement, boolean defaults).

Status columns are BOOLEAN NOT NULL with a false default. SQLite stores them
as 0/1 integers; the store layer converts them back to bool.
"""

from __future__ import annotations

import re


SCHEMA_SQLITE = r"""
PRAGMA foreign_keys = ON;

-- Users / Auth
-- `password` holds the bcrypt hash, never the plaintext.
CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    email TEXT NOT NULL UNIQUE,
    password TEXT NOT NULL
);

-- Checklist items, partitioned by facility
CREATE TABLE IF NOT EXISTS checklist_items (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    facility TEXT NOT NULL DEFAULT 'galleria',
    checked_out BOOLEAN NOT NULL DEFAULT 0,
    bussing BOOLEAN NOT NULL DEFAULT 0,
    amenities BOOLEAN NOT NULL DEFAULT 0,
    washing BOOLEAN NOT NULL DEFAULT 0,
    bed_making BOOLEAN NOT NULL DEFAULT 0,
    bath_toilet BOOLEAN NOT NULL DEFAULT 0,
    vacuum BOOLEAN NOT NULL DEFAULT 0,
    finishing BOOLEAN NOT NULL DEFAULT 0,
    final_check BOOLEAN NOT NULL DEFAULT 0,
    stayed BOOLEAN NOT NULL DEFAULT 0,
    today_used BOOLEAN NOT NULL DEFAULT 0,
    sheets BOOLEAN NOT NULL DEFAULT 0,
    onsen_start BOOLEAN NOT NULL DEFAULT 0,
    onsen_stop BOOLEAN NOT NULL DEFAULT 0
);
CREATE INDEX IF NOT EXISTS idx_checklist_items_facility ON checklist_items (facility, id);
"""


def _sqlite_to_postgres(ddl: str) -> str:
    # Remove SQLite pragmas
    lines: list[str] = []
    for line in ddl.splitlines():
        if line.strip().upper().startswith("PRAGMA "):
            continue
        lines.append(line)
    out = "\n".join(lines)

    # Boolean defaults
    out = re.sub(r"\bBOOLEAN NOT NULL DEFAULT 0\b", "BOOLEAN NOT NULL DEFAULT FALSE", out)
    out = re.sub(r"\bBOOLEAN NOT NULL DEFAULT 1\b", "BOOLEAN NOT NULL DEFAULT TRUE", out)

    # AUTOINCREMENT primary keys
    out = re.sub(
        r"INTEGER\s+PRIMARY\s+KEY\s+AUTOINCREMENT",
        "BIGSERIAL PRIMARY KEY",
        out,
        flags=re.IGNORECASE,
    )
    out = re.sub(r"\bAUTOINCREMENT\b", "", out, flags=re.IGNORECASE)

    return out


SCHEMA_POSTGRES = _sqlite_to_postgres(SCHEMA_SQLITE)


def get_schema_sql(dialect: str) -> str:
    d = (dialect or "").lower()
    if d.startswith("post"):
        return SCHEMA_POSTGRES
    return SCHEMA_SQLITE


def boolean_column_ddl(dialect: str) -> str:
    """Column type used when migrating a missing status column onto an older table."""
    if (dialect or "").lower().startswith("post"):
        return "BOOLEAN NOT NULL DEFAULT FALSE"
    return "BOOLEAN NOT NULL DEFAULT 0"
