"""Session lifecycle for timed voting windows."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Protocol

from brewvote.domain.errors import ForbiddenError, NotFoundError
from brewvote.domain.models import SessionRecord, UserRecord

if TYPE_CHECKING:
    from brewvote.services.votes import VoteRepository

logger = logging.getLogger(__name__)

DEFAULT_SESSION_DURATION = timedelta(minutes=10)


class Timed(Protocol):
    """Anything with a session start time."""

    start_time: datetime


class SessionRepository(Protocol):
    """Persistence interface for voting sessions."""

    def get_session(self, session_id: str) -> SessionRecord | None:
        """Return a session by id, if present."""

    def get_active_session(self) -> SessionRecord | None:
        """Return the active session, if any."""

    def list_sessions(self) -> list[SessionRecord]:
        """Return all sessions, most recent first."""

    def create_session(
        self, start_time: datetime, created_by: str | None
    ) -> SessionRecord:
        """Create a new active session with a zero vote counter."""

    def deactivate_active_sessions(self, end_time: datetime) -> None:
        """Mark every active session as ended."""

    def end_session(self, session_id: str, end_time: datetime) -> SessionRecord | None:
        """Mark one session as ended and return it."""

    def increment_total_votes(self, session_id: str) -> None:
        """Atomically add one to the session vote counter."""

    def set_total_votes(self, session_id: str, total_votes: int) -> None:
        """Overwrite the session vote counter."""

    def delete_session(self, session_id: str) -> None:
        """Delete a session row."""


@dataclass
class SessionService:
    """State machine for session start, end and expiry."""

    session_repository: SessionRepository
    vote_repository: VoteRepository

    def start_session(self, requesting_user: UserRecord | None) -> SessionRecord:
        """Close any active session and open a new one."""
        _require_admin(requesting_user, "Only admins can start sessions")
        now = datetime.now(tz=UTC)
        self.session_repository.deactivate_active_sessions(now)
        session = self.session_repository.create_session(
            start_time=now, created_by=requesting_user.id
        )
        logger.info("Session %s started by %s", session.id, requesting_user.id)
        return session

    def end_session(
        self, session_id: str, requesting_user: UserRecord | None = None
    ) -> SessionRecord:
        """End a session; ending an ended session leaves it unchanged."""
        if requesting_user is not None:
            _require_admin(requesting_user, "Only admins can end sessions")
        session = self.session_repository.get_session(session_id)
        if session is None:
            raise NotFoundError("Session", session_id)
        if not session.is_active:
            return session
        ended = self.session_repository.end_session(
            session_id, datetime.now(tz=UTC)
        )
        if ended is None:
            raise NotFoundError("Session", session_id)
        logger.info("Session %s ended with %s votes", session_id, ended.total_votes)
        return ended

    def get_active_session(
        self, requesting_user: UserRecord | None = None
    ) -> SessionRecord | None:
        """Return the active session; non-admin identities never see it."""
        if requesting_user is not None and not requesting_user.is_admin:
            return None
        return self.session_repository.get_active_session()

    def get_session(self, session_id: str) -> SessionRecord:
        session = self.session_repository.get_session(session_id)
        if session is None:
            raise NotFoundError("Session", session_id)
        return session

    def list_sessions(self) -> list[SessionRecord]:
        return self.session_repository.list_sessions()

    def delete_session(
        self, session_id: str, requesting_user: UserRecord | None
    ) -> None:
        """Delete a session together with its votes."""
        _require_admin(requesting_user, "Only admins can delete sessions")
        if self.session_repository.get_session(session_id) is None:
            raise NotFoundError("Session", session_id)
        self.vote_repository.delete_session_votes(session_id)
        self.session_repository.delete_session(session_id)
        logger.info("Session %s deleted", session_id)

    def reconcile_total_votes(self, session_id: str) -> SessionRecord:
        """Recompute the vote counter from the stored votes."""
        session = self.get_session(session_id)
        counted = self.vote_repository.count_session_votes(session_id)
        if counted == session.total_votes:
            return session
        logger.warning(
            "Session %s counter drifted: stored %s, counted %s",
            session_id,
            session.total_votes,
            counted,
        )
        self.session_repository.set_total_votes(session_id, counted)
        return self.get_session(session_id)


def session_deadline(session: Timed, duration: timedelta) -> datetime:
    """Return the moment a session logically expires."""
    return session.start_time + duration


def remaining_time(
    session: Timed, duration: timedelta, now: datetime | None = None
) -> timedelta:
    """Return time left before expiry; zero or negative means expired."""
    current = now or datetime.now(tz=UTC)
    return session_deadline(session, duration) - current


def is_expired(
    session: Timed, duration: timedelta, now: datetime | None = None
) -> bool:
    return remaining_time(session, duration, now) <= timedelta(0)


def _require_admin(user: UserRecord | None, message: str) -> None:
    if user is None or not user.is_admin:
        raise ForbiddenError(message)
