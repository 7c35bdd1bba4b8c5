"""Vote casting with one vote per user per session."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

from brewvote.domain.errors import (
    DuplicateVoteError,
    InvalidArgumentError,
    NotFoundError,
)
from brewvote.domain.models import VoteRecord, VoteType
from brewvote.services.sessions import SessionRepository

logger = logging.getLogger(__name__)


class VoteRepository(Protocol):
    """Persistence interface for votes."""

    def get_vote(self, session_id: str, user_id: str) -> VoteRecord | None:
        """Return the vote a user cast in a session, if any."""

    def create_vote(
        self,
        session_id: str,
        user_id: str,
        user_name: str | None,
        vote_type: VoteType,
        timestamp: datetime,
    ) -> VoteRecord:
        """Insert a vote; raises DuplicateVoteError on a uniqueness violation."""

    def list_votes(self) -> list[VoteRecord]:
        """Return all votes."""

    def list_session_votes(self, session_id: str) -> list[VoteRecord]:
        """Return the votes of one session."""

    def count_session_votes(self, session_id: str) -> int:
        """Return how many votes reference the session."""

    def delete_session_votes(self, session_id: str) -> None:
        """Delete every vote of a session."""


@dataclass
class VoteService:
    """Application service for casting and listing votes."""

    vote_repository: VoteRepository
    session_repository: SessionRepository

    def cast_vote(
        self,
        session_id: str | None,
        user_id: str | None,
        user_name: str | None,
        vote_type: str | None,
    ) -> VoteRecord:
        """Record a vote and bump the session counter."""
        if not session_id or not user_id or not vote_type:
            raise InvalidArgumentError("Missing required fields")
        choice = parse_vote_type(vote_type)

        session = self.session_repository.get_session(session_id)
        if session is None:
            raise NotFoundError("Session", session_id)
        if not session.is_active:
            raise InvalidArgumentError(
                "Session is not accepting votes", field="sessionId"
            )
        if self.vote_repository.get_vote(session_id, user_id) is not None:
            raise DuplicateVoteError(session_id, user_id)

        vote = self.vote_repository.create_vote(
            session_id=session_id,
            user_id=user_id,
            user_name=user_name,
            vote_type=choice,
            timestamp=datetime.now(tz=UTC),
        )
        self.session_repository.increment_total_votes(session_id)
        logger.info("Vote %s recorded for session %s", choice, session_id)
        return vote

    def list_votes(self) -> list[VoteRecord]:
        return self.vote_repository.list_votes()

    def list_session_votes(self, session_id: str) -> list[VoteRecord]:
        return self.vote_repository.list_session_votes(session_id)


def parse_vote_type(raw: str) -> VoteType:
    """Parse a vote choice, rejecting anything outside COFFEE/TEA."""
    try:
        return VoteType(raw)
    except ValueError:
        raise InvalidArgumentError(
            f"Invalid vote type: {raw}", field="type"
        ) from None
