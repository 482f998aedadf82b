from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord, AttendanceSession


class SessionStore(Protocol):
    """Sole owner and writer of attendance sessions and records.

    Every write is one atomic unit; no intermediate state is observable.
    Driver failures surface as StorageUnavailableError.
    """

    def create_session_deactivating_prior(
        self,
        *,
        lesson_id: str,
        token: str,
        issued_at: datetime,
        expires_at: datetime,
    ) -> AttendanceSession:
        raise NotImplementedError

    def find_active_session_by_token(self, token: str) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def insert_attendance_if_absent(
        self,
        *,
        lesson_id: str,
        student_id: str,
        session_id: str,
        recorded_at: datetime,
        origin_address: Optional[str] = None,
    ) -> Optional[AttendanceRecord]:
        """Insert unless (lesson_id, student_id) exists; ``None`` signals the conflict."""

        raise NotImplementedError

    def get_active_session_for_lesson(self, lesson_id: str) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def list_attendance_for_lesson(self, lesson_id: str) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_sessions_for_lesson(self, lesson_id: str) -> Sequence[AttendanceSession]:
        """Every session ever issued for the lesson, oldest first."""

        raise NotImplementedError
