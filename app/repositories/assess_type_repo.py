from __future__ import annotations

import logging
import sqlite3
from typing import Optional

import psycopg

from models import (
    AssessTypeRecord,
    StorageError,
    backend_for,
    get_connection,
    row_to_record,
)

logger = logging.getLogger(__name__)

_UPSERT_SQL = """
    INSERT INTO local_assess_type (cmid, gradeitemid, courseid, type, locked, timemodified)
    VALUES (%s, %s, %s, %s, %s, CURRENT_TIMESTAMP)
    ON CONFLICT (cmid, gradeitemid) DO UPDATE
    SET courseid = excluded.courseid,
        gradeitemid = excluded.gradeitemid,
        type = excluded.type,
        locked = excluded.locked,
        timemodified = excluded.timemodified
    WHERE local_assess_type.type <> excluded.type
       OR local_assess_type.locked <> excluded.locked;
"""


class AssessTypeRepository:
    """Record storage for the local_assess_type table.

    The connection is injected so tests can hand in their own; by default the
    process-wide connection from ``models.get_connection`` is used.
    """

    def __init__(self, connection=None) -> None:
        self._connection = connection

    @property
    def connection(self):
        if self._connection is None:
            return get_connection()
        return self._connection

    def _execute(self, query: str, params: tuple):
        conn = self.connection
        if backend_for(conn) == "sqlite":
            query = query.replace("%s", "?")
        cur = conn.cursor()
        try:
            cur.execute(query, params)
        except (sqlite3.Error, psycopg.Error) as exc:
            cur.close()
            conn.rollback()
            logger.error("Query on local_assess_type failed: %s", exc)
            raise StorageError("Assess type storage call failed.") from exc
        return conn, cur

    def get_record(self, cmid: int, gradeitemid: Optional[int] = None) -> Optional[AssessTypeRecord]:
        """Return the row for an activity, or None.

        Without ``gradeitemid`` the lookup is by ``cmid`` alone and the row with
        the lowest grade item id wins.
        """
        if gradeitemid is None:
            _, cur = self._execute(
                """
                SELECT * FROM local_assess_type
                WHERE cmid = %s
                ORDER BY gradeitemid, id
                LIMIT 1;
                """,
                (cmid,),
            )
        else:
            _, cur = self._execute(
                "SELECT * FROM local_assess_type WHERE cmid = %s AND gradeitemid = %s;",
                (cmid, gradeitemid),
            )
        try:
            return row_to_record(cur.fetchone())
        finally:
            cur.close()

    def get_records(self, courseid: int, type: Optional[int] = None) -> list[AssessTypeRecord]:
        """Return all rows for a course, optionally restricted to one type."""
        if type is None:
            _, cur = self._execute(
                "SELECT * FROM local_assess_type WHERE courseid = %s;",
                (courseid,),
            )
        else:
            _, cur = self._execute(
                "SELECT * FROM local_assess_type WHERE courseid = %s AND type = %s;",
                (courseid, int(type)),
            )
        try:
            return [row_to_record(row) for row in cur.fetchall()]
        finally:
            cur.close()

    def upsert(
        self,
        *,
        courseid: int,
        type: int,
        cmid: int,
        gradeitemid: int,
        locked: bool,
    ) -> bool:
        """Insert or update the row for (cmid, gradeitemid) in one statement.

        Returns True when a row was inserted or changed; an existing row with the
        same type and locked flag is left alone.
        """
        conn, cur = self._execute(
            _UPSERT_SQL,
            (cmid, gradeitemid, courseid, int(type), bool(locked)),
        )
        try:
            written = cur.rowcount > 0
            conn.commit()
        except (sqlite3.Error, psycopg.Error) as exc:
            conn.rollback()
            raise StorageError("Could not commit assess type change.") from exc
        finally:
            cur.close()
        return written

    def count(self) -> int:
        _, cur = self._execute("SELECT COUNT(*) AS total FROM local_assess_type;", ())
        try:
            row = cur.fetchone()
        finally:
            cur.close()
        if row is None:
            return 0
        if isinstance(row, (dict, sqlite3.Row)):
            return int(row["total"])
        return int(row[0])
