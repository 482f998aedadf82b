from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

from .attendance.issuer import IssuerConfig, TokenIssuer
from .attendance.memory_session_store import InMemorySessionStore
from .attendance.mysql_session_store import MySQLSessionStore
from .attendance.service import AttendanceListService
from .attendance.store import SessionStore
from .attendance.verifier import TokenVerifier
from .common.clock import Clock, SystemClock
from .core.enums import StoreBackend
from .database.connection import DBConfig, DatabaseConnection
from .lessons.memory_lesson_directory import InMemoryLessonDirectory
from .lessons.mysql_lesson_directory import MySQLLessonDirectory
from .lessons.repository import LessonDirectory


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]
    clock: Clock

    session_store: SessionStore
    lessons: LessonDirectory

    token_issuer: TokenIssuer
    token_verifier: TokenVerifier
    attendance_list_service: AttendanceListService


def build_container(
    *,
    db_config: dict,
    store_backend: StoreBackend | str = StoreBackend.MYSQL,
    issuer_config: Optional[IssuerConfig] = None,
    clock: Optional[Clock] = None,
    demo_lessons: Iterable[Mapping] = (),
) -> Container:
    backend = StoreBackend(store_backend)
    clock = clock or SystemClock()

    conn: Optional[DatabaseConnection] = None
    if backend == StoreBackend.MYSQL:
        conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))
        session_store: SessionStore = MySQLSessionStore(conn)
        lessons: LessonDirectory = MySQLLessonDirectory(conn)
    else:
        session_store = InMemorySessionStore()
        lessons = InMemoryLessonDirectory.from_seed(demo_lessons)

    token_issuer = TokenIssuer(session_store, lessons, clock=clock, config=issuer_config)
    token_verifier = TokenVerifier(session_store, lessons, clock=clock)
    attendance_list_service = AttendanceListService(session_store, lessons)

    return Container(
        conn=conn,
        clock=clock,
        session_store=session_store,
        lessons=lessons,
        token_issuer=token_issuer,
        token_verifier=token_verifier,
        attendance_list_service=attendance_list_service,
    )
