from __future__ import annotations

import threading
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Optional, Sequence

from ..core.exceptions import StorageUnavailableError
from .model import AttendanceRecord, AttendanceSession
from .store import SessionStore


class InMemorySessionStore(SessionStore):
    """Process-local store for the memory backend.

    One lock guards every table, so each public method is a single atomic
    unit. The dict keys mirror the unique keys of the MySQL schema.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._sessions: dict[str, AttendanceSession] = {}
        self._session_by_token: dict[str, str] = {}
        self._active_by_lesson: dict[str, str] = {}
        self._records: dict[tuple[str, str], AttendanceRecord] = {}
        self._next_record_id = 1

    def create_session_deactivating_prior(
        self,
        *,
        lesson_id: str,
        token: str,
        issued_at: datetime,
        expires_at: datetime,
    ) -> AttendanceSession:
        session = AttendanceSession(
            session_id=uuid.uuid4().hex,
            lesson_id=lesson_id,
            token=token,
            issued_at=issued_at,
            expires_at=expires_at,
            active=True,
        )
        with self._lock:
            if token in self._session_by_token:
                raise StorageUnavailableError("Storage unavailable (token collision)")
            prior_id = self._active_by_lesson.get(lesson_id)
            if prior_id:
                self._sessions[prior_id] = replace(self._sessions[prior_id], active=False)
            self._sessions[session.session_id] = session
            self._session_by_token[token] = session.session_id
            self._active_by_lesson[lesson_id] = session.session_id
        return session

    def find_active_session_by_token(self, token: str) -> Optional[AttendanceSession]:
        with self._lock:
            session_id = self._session_by_token.get(token)
            session = self._sessions.get(session_id) if session_id else None
            if session is None or not session.active:
                return None
            return session

    def insert_attendance_if_absent(
        self,
        *,
        lesson_id: str,
        student_id: str,
        session_id: str,
        recorded_at: datetime,
        origin_address: Optional[str] = None,
    ) -> Optional[AttendanceRecord]:
        key = (lesson_id, student_id)
        with self._lock:
            if key in self._records:
                return None
            record = AttendanceRecord(
                record_id=self._next_record_id,
                lesson_id=lesson_id,
                session_id=session_id,
                student_id=student_id,
                recorded_at=recorded_at,
                origin_address=origin_address,
            )
            self._next_record_id += 1
            self._records[key] = record
            return record

    def get_active_session_for_lesson(self, lesson_id: str) -> Optional[AttendanceSession]:
        with self._lock:
            session_id = self._active_by_lesson.get(lesson_id)
            return self._sessions.get(session_id) if session_id else None

    def list_attendance_for_lesson(self, lesson_id: str) -> Sequence[AttendanceRecord]:
        with self._lock:
            items = [r for (l_id, _), r in self._records.items() if l_id == lesson_id]
        items.sort(key=lambda r: (r.recorded_at, r.record_id), reverse=True)
        return items

    def list_sessions_for_lesson(self, lesson_id: str) -> Sequence[AttendanceSession]:
        with self._lock:
            items = [s for s in self._sessions.values() if s.lesson_id == lesson_id]
        items.sort(key=lambda s: (s.issued_at, s.session_id))
        return items
