from __future__ import annotations

import logging
from typing import Optional

from ..common.clock import Clock, SystemClock
from ..core.exceptions import DuplicateAttendanceError, InvalidOrExpiredTokenError, NotEnrolledError
from ..lessons.repository import LessonDirectory
from .model import AttendanceRecord
from .store import SessionStore

logger = logging.getLogger(__name__)


class TokenVerifier:
    """Use case: a student presents a scanned token.

    Checks run in a fixed order and the first failure wins:
    token validity, then enrolment, then the store's atomic insert.
    """

    def __init__(self, store: SessionStore, lessons: LessonDirectory, *, clock: Optional[Clock] = None):
        self._store = store
        self._lessons = lessons
        self._clock = clock or SystemClock()

    def record_attendance(
        self,
        token: str,
        *,
        student_id: str,
        origin_address: Optional[str] = None,
    ) -> AttendanceRecord:
        # Blank means unknown; anything else is looked up exactly as presented.
        session = None
        if token and token.strip():
            session = self._store.find_active_session_by_token(token)

        # Expiry is judged at scan time.
        now = self._clock.now()
        if session is None or not session.is_valid_at(now):
            logger.info("Rejected scan by student %s: invalid or expired token", student_id)
            raise InvalidOrExpiredTokenError()

        if not self._lessons.is_enrolled(session.lesson_id, student_id):
            logger.info("Rejected scan by student %s for lesson %s: not enrolled", student_id, session.lesson_id)
            raise NotEnrolledError("You are not enrolled in this class")

        record = self._store.insert_attendance_if_absent(
            lesson_id=session.lesson_id,
            student_id=str(student_id),
            session_id=session.session_id,
            recorded_at=now,
            origin_address=origin_address,
        )
        if record is None:
            logger.info("Rejected scan by student %s for lesson %s: duplicate", student_id, session.lesson_id)
            raise DuplicateAttendanceError("You have already recorded attendance for this lesson")

        logger.info("Recorded attendance of student %s for lesson %s", student_id, session.lesson_id)
        return record
