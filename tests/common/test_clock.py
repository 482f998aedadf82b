from datetime import datetime, timedelta, timezone

from qr_attendance.common.clock import ManualClock, SystemClock


def test_manual_clock_moves_only_when_told():
    start = datetime(2026, 2, 1, 8, 0, 0)
    clock = ManualClock(start)

    assert clock.now() == start
    assert clock.advance(seconds=90) == start + timedelta(seconds=90)
    assert clock.advance(milliseconds=1) == start + timedelta(seconds=90, milliseconds=1)
    assert clock.advance(timedelta(hours=1)) == start + timedelta(hours=1, seconds=90, milliseconds=1)

    clock.set(start)
    assert clock.now() == start


def test_system_clock_is_naive_utc():
    now = SystemClock().now()

    assert now.tzinfo is None
    assert abs(datetime.now(timezone.utc).replace(tzinfo=None) - now) < timedelta(seconds=5)
