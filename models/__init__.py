"""Data access layer for the assess type store without external ORM dependencies."""

from __future__ import annotations

import datetime
import enum
import os
import sqlite3
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

import psycopg
from psycopg.rows import dict_row

from config.settings import get_settings

_connection: Optional[object] = None
_backend: Optional[str] = None  # "sqlite" or "postgres"


class StorageError(RuntimeError):
    """Raised when the underlying database call fails."""


class AssessTypeKind(enum.IntEnum):
    FORMATIVE = 0
    SUMMATIVE = 1
    DUMMY = 2


@dataclass(frozen=True)
class AssessTypeRecord:
    """One stored classification row."""

    id: int
    cmid: int
    gradeitemid: int
    courseid: int
    type: int
    locked: bool
    timemodified: Optional[datetime.datetime] = None

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "cmid": self.cmid,
            "gradeitemid": self.gradeitemid,
            "courseid": self.courseid,
            "type": int(self.type),
            "locked": self.locked,
            "timemodified": self.timemodified.isoformat() if self.timemodified else None,
        }


def _resolve_default_sqlite_path() -> str:
    root_dir = os.path.dirname(os.path.dirname(__file__))
    return os.path.join(root_dir, "assess_type_dev.sqlite")


def _normalize_sqlite_path(database_url: str) -> str:
    parsed = urlparse(database_url)
    path = parsed.path or ""
    if path.startswith("/"):
        path = path[1:]
    if path in {"", ":memory:"}:
        return ":memory:"
    if parsed.netloc:
        path = os.path.join(parsed.netloc, path)
    return path or _resolve_default_sqlite_path()


def backend_for(connection) -> str:
    """Return "sqlite" or "postgres" for a DB-API connection."""
    if isinstance(connection, sqlite3.Connection):
        return "sqlite"
    return "postgres"


def get_connection():
    """Return a singleton database connection."""
    global _connection, _backend
    if _connection is not None:
        return _connection

    settings = get_settings()
    database_url = settings.DATABASE_URL or f"sqlite:///{_resolve_default_sqlite_path()}"

    if database_url.startswith("postgres://"):
        database_url = database_url.replace("postgres://", "postgresql://", 1)

    if database_url.startswith("sqlite"):
        db_path = _normalize_sqlite_path(database_url)
        conn = sqlite3.connect(
            db_path,
            detect_types=sqlite3.PARSE_DECLTYPES,
            check_same_thread=False,
        )
        conn.row_factory = sqlite3.Row
        _connection = conn
        _backend = "sqlite"
    else:
        try:
            conn = psycopg.connect(database_url, row_factory=dict_row)
        except psycopg.Error as exc:
            raise StorageError("Could not connect to the database.") from exc
        _connection = conn
        _backend = "postgres"

    return _connection


def reset_engine() -> None:
    """Reset the current database connection (used in tests)."""
    global _connection, _backend
    if _connection is not None:
        _connection.close()
    _connection = None
    _backend = None


def init_db(connection=None) -> None:
    """Create the assess type table if it does not already exist."""
    conn = connection if connection is not None else get_connection()
    cur = conn.cursor()
    try:
        if backend_for(conn) == "postgres":
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS local_assess_type (
                    id SERIAL PRIMARY KEY,
                    cmid INTEGER NOT NULL,
                    gradeitemid INTEGER NOT NULL DEFAULT 0,
                    courseid INTEGER NOT NULL,
                    type SMALLINT NOT NULL CHECK (type IN (0, 1, 2)),
                    locked BOOLEAN NOT NULL DEFAULT FALSE,
                    timemodified TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
                    CONSTRAINT uq_assess_type_cm_gradeitem UNIQUE (cmid, gradeitemid)
                );
                """
            )
        else:
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS local_assess_type (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    cmid INTEGER NOT NULL,
                    gradeitemid INTEGER NOT NULL DEFAULT 0,
                    courseid INTEGER NOT NULL,
                    type INTEGER NOT NULL CHECK (type IN (0, 1, 2)),
                    locked INTEGER NOT NULL DEFAULT 0,
                    timemodified TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
                    UNIQUE (cmid, gradeitemid)
                );
                """
            )
        cur.execute(
            """
            CREATE INDEX IF NOT EXISTS idx_assess_type_course
            ON local_assess_type (courseid);
            """
        )
        conn.commit()
    except (sqlite3.Error, psycopg.Error) as exc:
        conn.rollback()
        raise StorageError("Could not create the assess type table.") from exc
    finally:
        cur.close()


def row_to_record(row) -> Optional[AssessTypeRecord]:
    if not row:
        return None
    if isinstance(row, sqlite3.Row):
        row = dict(row)

    timemodified = row.get("timemodified")
    if isinstance(timemodified, str):
        timemodified = datetime.datetime.fromisoformat(timemodified)

    return AssessTypeRecord(
        id=int(row["id"]),
        cmid=int(row["cmid"]),
        gradeitemid=int(row["gradeitemid"]),
        courseid=int(row["courseid"]),
        type=int(row["type"]),
        locked=bool(row["locked"]),
        timemodified=timemodified,
    )


__all__ = [
    "StorageError",
    "AssessTypeKind",
    "AssessTypeRecord",
    "backend_for",
    "get_connection",
    "reset_engine",
    "init_db",
    "row_to_record",
]
