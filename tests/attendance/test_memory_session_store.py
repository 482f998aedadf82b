from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from qr_attendance.attendance.memory_session_store import InMemorySessionStore
from qr_attendance.core.exceptions import StorageUnavailableError

NOW = datetime(2026, 2, 1, 9, 0, 0)


def _create(store, lesson_id="L1", token="tok-1", issued_at=NOW):
    return store.create_session_deactivating_prior(
        lesson_id=lesson_id,
        token=token,
        issued_at=issued_at,
        expires_at=issued_at + timedelta(minutes=15),
    )


def test_create_deactivates_prior_session():
    store = InMemorySessionStore()
    first = _create(store, token="tok-1")
    second = _create(store, token="tok-2")

    assert store.find_active_session_by_token("tok-1") is None
    assert store.find_active_session_by_token("tok-2") == second
    assert store.get_active_session_for_lesson("L1") == second
    assert [s.active for s in store.list_sessions_for_lesson("L1")] == [False, True]
    assert first.session_id != second.session_id


def test_duplicate_token_is_a_storage_failure_and_changes_nothing():
    store = InMemorySessionStore()
    original = _create(store, lesson_id="L1", token="same")

    with pytest.raises(StorageUnavailableError):
        _create(store, lesson_id="L1", token="same")

    assert store.get_active_session_for_lesson("L1") == original
    assert len(store.list_sessions_for_lesson("L1")) == 1


def test_insert_if_absent_reports_conflict_with_none():
    store = InMemorySessionStore()
    session = _create(store)

    first = store.insert_attendance_if_absent(
        lesson_id="L1", student_id="S1", session_id=session.session_id, recorded_at=NOW, origin_address="1.2.3.4"
    )
    again = store.insert_attendance_if_absent(
        lesson_id="L1", student_id="S1", session_id=session.session_id, recorded_at=NOW + timedelta(seconds=1)
    )

    assert first is not None
    assert first.record_id == 1
    assert again is None
    assert store.list_attendance_for_lesson("L1") == [first]


def test_same_student_may_attend_different_lessons():
    store = InMemorySessionStore()
    s1 = _create(store, lesson_id="L1", token="a")
    s2 = _create(store, lesson_id="L2", token="b")

    assert store.insert_attendance_if_absent(lesson_id="L1", student_id="S1", session_id=s1.session_id, recorded_at=NOW)
    assert store.insert_attendance_if_absent(lesson_id="L2", student_id="S1", session_id=s2.session_id, recorded_at=NOW)


def test_attendance_list_is_newest_first():
    store = InMemorySessionStore()
    session = _create(store)
    for offset, student in enumerate(["S1", "S2", "S3"]):
        store.insert_attendance_if_absent(
            lesson_id="L1",
            student_id=student,
            session_id=session.session_id,
            recorded_at=NOW + timedelta(seconds=offset),
        )

    assert [r.student_id for r in store.list_attendance_for_lesson("L1")] == ["S3", "S2", "S1"]
    assert store.list_attendance_for_lesson("L2") == []
