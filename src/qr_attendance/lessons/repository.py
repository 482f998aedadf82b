from __future__ import annotations

from typing import Optional, Protocol

from .model import Lesson


class LessonDirectory(Protocol):
    """Read-only view of lessons and class membership.

    Lesson CRUD and enrolment live elsewhere; attendance only asks these
    two questions.
    """

    def get_by_id(self, lesson_id: str) -> Optional[Lesson]:
        raise NotImplementedError

    def is_enrolled(self, lesson_id: str, student_id: str) -> bool:
        raise NotImplementedError
