from __future__ import annotations

from typing import Iterable, Mapping, Optional

from .model import Lesson
from .repository import LessonDirectory


class InMemoryLessonDirectory(LessonDirectory):
    """Lesson directory for the memory backend (development and tests)."""

    def __init__(self, lessons: Iterable[Lesson] = (), enrolments: Mapping[str, Iterable[str]] | None = None):
        self._lessons: dict[str, Lesson] = {l.lesson_id: l for l in lessons}
        self._students_by_class: dict[str, set[str]] = {
            str(class_id): {str(s) for s in students} for class_id, students in (enrolments or {}).items()
        }

    @classmethod
    def from_seed(cls, seed: Iterable[Mapping]) -> "InMemoryLessonDirectory":
        """Build from settings rows like ``{"lesson_id", "class_id", "teacher_id", "students"}``."""

        directory = cls()
        for row in seed:
            directory.add_lesson(
                Lesson(
                    lesson_id=str(row["lesson_id"]),
                    class_id=str(row["class_id"]),
                    teacher_id=str(row["teacher_id"]),
                    title=str(row.get("title", "")),
                )
            )
            for student_id in row.get("students", ()):
                directory.enrol(str(row["class_id"]), str(student_id))
        return directory

    def add_lesson(self, lesson: Lesson) -> None:
        self._lessons[lesson.lesson_id] = lesson

    def enrol(self, class_id: str, student_id: str) -> None:
        self._students_by_class.setdefault(str(class_id), set()).add(str(student_id))

    def get_by_id(self, lesson_id: str) -> Optional[Lesson]:
        return self._lessons.get(str(lesson_id))

    def is_enrolled(self, lesson_id: str, student_id: str) -> bool:
        lesson = self._lessons.get(str(lesson_id))
        if not lesson:
            return False
        return str(student_id) in self._students_by_class.get(lesson.class_id, set())
