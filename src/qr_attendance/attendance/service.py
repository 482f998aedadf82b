from __future__ import annotations

from typing import Sequence

from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError
from ..lessons.repository import LessonDirectory
from .model import AttendanceRecord
from .store import SessionStore


class AttendanceListService:
    """Use case: the owning teacher reviews who attended a lesson."""

    def __init__(self, store: SessionStore, lessons: LessonDirectory):
        self._store = store
        self._lessons = lessons

    def list_for_lesson(self, lesson_id: str, *, requester_id: str, requester_role: Role) -> Sequence[AttendanceRecord]:
        if requester_role != Role.TEACHER:
            raise AuthorizationError("Only teachers can view attendance")

        lesson = self._lessons.get_by_id(lesson_id)
        if not lesson:
            raise NotFoundError("Lesson not found")
        if lesson.teacher_id != str(requester_id):
            raise AuthorizationError("Not authorized to view attendance for this lesson")

        return self._store.list_attendance_for_lesson(lesson.lesson_id)
