from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Optional, Sequence

import mysql.connector

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key, storage_errors
from .model import AttendanceRecord, AttendanceSession
from .store import SessionStore

logger = logging.getLogger(__name__)

_SESSION_COLUMNS = "session_id, lesson_id, token, issued_at, expires_at, active"
_RECORD_COLUMNS = "record_id, lesson_id, session_id, student_id, recorded_at, origin_address"


def _to_session(r: dict) -> AttendanceSession:
    return AttendanceSession(
        session_id=str(r["session_id"]),
        lesson_id=str(r["lesson_id"]),
        token=str(r["token"]),
        issued_at=r["issued_at"],
        expires_at=r["expires_at"],
        active=bool(r["active"]),
    )


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        record_id=int(r["record_id"]),
        lesson_id=str(r["lesson_id"]),
        session_id=str(r["session_id"]),
        student_id=str(r["student_id"]),
        recorded_at=r["recorded_at"],
        origin_address=r.get("origin_address"),
    )


class MySQLSessionStore(SessionStore):
    """MySQL-backed store.

    Uniqueness is enforced by the schema: ``token`` and ``active_lesson_id``
    for sessions, (``lesson_id``, ``student_id``) for records.
    """

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_session_deactivating_prior(
        self,
        *,
        lesson_id: str,
        token: str,
        issued_at: datetime,
        expires_at: datetime,
    ) -> AttendanceSession:
        session_id = uuid.uuid4().hex
        with storage_errors("session issuance"), db_cursor(self._conn_factory) as (_, cur):
            # Serialises issuance per lesson: a later caller waits here, then
            # deactivates whatever the earlier one committed (last writer wins).
            cur.execute("SELECT lesson_id FROM lessons WHERE lesson_id=%s FOR UPDATE", (lesson_id,))
            fetchall(cur)
            cur.execute(
                """
                UPDATE attendance_sessions
                SET active=0, active_lesson_id=NULL
                WHERE active_lesson_id=%s
                """,
                (lesson_id,),
            )
            deactivated = cur.rowcount
            cur.execute(
                """
                INSERT INTO attendance_sessions(
                    session_id, lesson_id, token, issued_at, expires_at, active, active_lesson_id
                )
                VALUES(%s,%s,%s,%s,%s,1,%s)
                """,
                (session_id, lesson_id, token, issued_at, expires_at, lesson_id),
            )
        logger.debug("Lesson %s: deactivated %s prior session(s)", lesson_id, max(deactivated, 0))
        return AttendanceSession(
            session_id=session_id,
            lesson_id=lesson_id,
            token=token,
            issued_at=issued_at,
            expires_at=expires_at,
            active=True,
        )

    def find_active_session_by_token(self, token: str) -> Optional[AttendanceSession]:
        with storage_errors("token lookup"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_SESSION_COLUMNS} FROM attendance_sessions WHERE token=%s AND active=1",
                (token,),
            )
            r = fetchone(cur)
            return _to_session(r) if r else None

    def insert_attendance_if_absent(
        self,
        *,
        lesson_id: str,
        student_id: str,
        session_id: str,
        recorded_at: datetime,
        origin_address: Optional[str] = None,
    ) -> Optional[AttendanceRecord]:
        with storage_errors("attendance insert"):
            try:
                with db_cursor(self._conn_factory) as (_, cur):
                    cur.execute(
                        """
                        INSERT INTO attendance_records(lesson_id, session_id, student_id, recorded_at, origin_address)
                        VALUES(%s,%s,%s,%s,%s)
                        """,
                        (lesson_id, session_id, student_id, recorded_at, origin_address),
                    )
                    record_id = int(cur.lastrowid)
            except mysql.connector.IntegrityError as e:
                if not is_duplicate_key(e):
                    raise
                return None

        return AttendanceRecord(
            record_id=record_id,
            lesson_id=lesson_id,
            session_id=session_id,
            student_id=student_id,
            recorded_at=recorded_at,
            origin_address=origin_address,
        )

    def get_active_session_for_lesson(self, lesson_id: str) -> Optional[AttendanceSession]:
        with storage_errors("active session lookup"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_SESSION_COLUMNS} FROM attendance_sessions WHERE lesson_id=%s AND active=1",
                (lesson_id,),
            )
            r = fetchone(cur)
            return _to_session(r) if r else None

    def list_attendance_for_lesson(self, lesson_id: str) -> Sequence[AttendanceRecord]:
        with storage_errors("attendance list"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS}
                FROM attendance_records
                WHERE lesson_id=%s
                ORDER BY recorded_at DESC, record_id DESC
                """,
                (lesson_id,),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_sessions_for_lesson(self, lesson_id: str) -> Sequence[AttendanceSession]:
        with storage_errors("session list"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_SESSION_COLUMNS}
                FROM attendance_sessions
                WHERE lesson_id=%s
                ORDER BY issued_at ASC, session_id ASC
                """,
                (lesson_id,),
            )
            return [_to_session(r) for r in fetchall(cur)]
