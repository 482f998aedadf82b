from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Lesson:
    """Read model of a lesson owned by the class-management side."""

    lesson_id: str
    class_id: str
    teacher_id: str
    title: str = ""
