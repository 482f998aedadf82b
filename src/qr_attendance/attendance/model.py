from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class AttendanceSession:
    """Domain entity: the token/expiry pair issued for a lesson."""

    session_id: str
    lesson_id: str
    token: str
    issued_at: datetime
    expires_at: datetime
    active: bool = True

    def is_valid_at(self, now: datetime) -> bool:
        return self.active and now < self.expires_at


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one student's presence at one lesson."""

    record_id: int
    lesson_id: str
    session_id: str
    student_id: str
    recorded_at: datetime
    origin_address: Optional[str] = None


@dataclass(frozen=True)
class IssuedSession:
    """What the issuer hands to the display surface."""

    lesson_id: str
    token: str
    expires_at: datetime
