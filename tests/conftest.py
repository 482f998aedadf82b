from __future__ import annotations

import itertools
from datetime import datetime

import pytest

from qr_attendance.attendance.issuer import IssuerConfig, TokenIssuer
from qr_attendance.attendance.memory_session_store import InMemorySessionStore
from qr_attendance.attendance.verifier import TokenVerifier
from qr_attendance.common.clock import ManualClock
from qr_attendance.lessons.memory_lesson_directory import InMemoryLessonDirectory
from qr_attendance.lessons.model import Lesson

T0 = datetime(2026, 2, 1, 8, 0, 0)

_LESSON_SEED = [
    {"lesson_id": "L1", "class_id": "C1", "teacher_id": "T1", "title": "Algebra", "students": ["S1", "S2", "S3"]},
    {"lesson_id": "L2", "class_id": "C2", "teacher_id": "T2", "title": "Biology", "students": ["S4"]},
]


@pytest.fixture
def fixed_now() -> datetime:
    return T0


@pytest.fixture
def clock(fixed_now) -> ManualClock:
    return ManualClock(fixed_now)


@pytest.fixture
def lessons(lesson_seed) -> InMemoryLessonDirectory:
    directory = InMemoryLessonDirectory.from_seed(lesson_seed)
    # A lesson nobody is enrolled in yet.
    directory.add_lesson(Lesson(lesson_id="L3", class_id="C3", teacher_id="T1", title="Empty"))
    return directory


@pytest.fixture
def store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def token_factory():
    counter = itertools.count(1)

    def make(nbytes: int) -> str:
        return f"{next(counter):0{nbytes * 2}x}"

    return make


@pytest.fixture
def issuer(store, lessons, clock, token_factory) -> TokenIssuer:
    return TokenIssuer(store, lessons, clock=clock, config=IssuerConfig(), token_factory=token_factory)


@pytest.fixture
def verifier(store, lessons, clock) -> TokenVerifier:
    return TokenVerifier(store, lessons, clock=clock)


@pytest.fixture
def lesson_seed() -> list[dict]:
    return [dict(row) for row in _LESSON_SEED]
