from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Caller role supplied by the authentication layer."""

    TEACHER = "teacher"
    STUDENT = "student"


class StoreBackend(str, Enum):
    MYSQL = "mysql"
    MEMORY = "memory"
