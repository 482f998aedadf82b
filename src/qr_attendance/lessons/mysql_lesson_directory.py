from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, storage_errors
from .model import Lesson
from .repository import LessonDirectory


class MySQLLessonDirectory(LessonDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, lesson_id: str) -> Optional[Lesson]:
        with storage_errors("lesson lookup"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT lesson_id, class_id, teacher_id, title FROM lessons WHERE lesson_id=%s",
                (str(lesson_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Lesson(
                lesson_id=str(r["lesson_id"]),
                class_id=str(r["class_id"]),
                teacher_id=str(r["teacher_id"]),
                title=r.get("title") or "",
            )

    def is_enrolled(self, lesson_id: str, student_id: str) -> bool:
        with storage_errors("enrolment check"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT 1 AS enrolled
                FROM lessons l
                JOIN class_students cs ON cs.class_id = l.class_id
                WHERE l.lesson_id=%s AND cs.student_id=%s
                """,
                (str(lesson_id), str(student_id)),
            )
            return fetchone(cur) is not None
