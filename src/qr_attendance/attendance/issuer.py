from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Callable, Optional

from ..common.clock import Clock, SystemClock
from ..core.constants import DEFAULT_TOKEN_BYTES, DEFAULT_WINDOW_MINUTES, MIN_TOKEN_BYTES
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError
from ..lessons.repository import LessonDirectory
from .model import IssuedSession
from .store import SessionStore

logger = logging.getLogger(__name__)

TokenFactory = Callable[[int], str]


@dataclass(frozen=True)
class IssuerConfig:
    window: timedelta = field(default_factory=lambda: timedelta(minutes=DEFAULT_WINDOW_MINUTES))
    token_bytes: int = DEFAULT_TOKEN_BYTES

    def __post_init__(self):
        if self.window <= timedelta(0):
            raise ValueError("attendance window must be positive")
        if int(self.token_bytes) < MIN_TOKEN_BYTES:
            raise ValueError(f"token_bytes must be at least {MIN_TOKEN_BYTES} (128 bits)")

    @classmethod
    def from_settings(cls, *, window_minutes: float, token_bytes: int) -> "IssuerConfig":
        return cls(window=timedelta(minutes=float(window_minutes)), token_bytes=int(token_bytes))


class TokenIssuer:
    """Use case: a lesson's teacher opens a new attendance session."""

    def __init__(
        self,
        store: SessionStore,
        lessons: LessonDirectory,
        *,
        clock: Optional[Clock] = None,
        config: Optional[IssuerConfig] = None,
        token_factory: Optional[TokenFactory] = None,
    ):
        self._store = store
        self._lessons = lessons
        self._clock = clock or SystemClock()
        self._config = config or IssuerConfig()
        self._token_factory = token_factory or secrets.token_hex

    @property
    def config(self) -> IssuerConfig:
        return self._config

    def issue_session(self, lesson_id: str, *, requester_id: str, requester_role: Role) -> IssuedSession:
        """Issue a fresh token for ``lesson_id``.

        Any token previously issued for the lesson stops verifying the moment
        this returns; there is no grace period.
        """

        if requester_role != Role.TEACHER:
            raise AuthorizationError("Only teachers can generate attendance QR codes")

        lesson = self._lessons.get_by_id(lesson_id)
        if not lesson:
            raise NotFoundError("Lesson not found")
        if lesson.teacher_id != str(requester_id):
            raise AuthorizationError("Not authorized to manage this lesson")

        token = self._token_factory(self._config.token_bytes)
        issued_at = self._clock.now()
        expires_at = issued_at + self._config.window

        session = self._store.create_session_deactivating_prior(
            lesson_id=lesson.lesson_id,
            token=token,
            issued_at=issued_at,
            expires_at=expires_at,
        )
        logger.info(
            "Issued attendance session %s for lesson %s (expires %s)",
            session.session_id,
            lesson.lesson_id,
            expires_at.isoformat(),
        )
        return IssuedSession(lesson_id=lesson.lesson_id, token=token, expires_at=expires_at)
