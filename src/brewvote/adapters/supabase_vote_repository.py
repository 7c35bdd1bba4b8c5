"""Supabase-backed vote repository."""

from dataclasses import dataclass
from datetime import datetime

from postgrest.exceptions import APIError
from supabase import Client

from brewvote.adapters.supabase_support import execute, parse_timestamp, parse_uuid
from brewvote.domain.errors import DuplicateVoteError, InvalidArgumentError
from brewvote.domain.models import VoteRecord, VoteType
from brewvote.services.votes import VoteRepository

_COLUMNS = "id, session_id, user_id, user_name, type, voted_at"


@dataclass
class SupabaseVoteRepository(VoteRepository):
    """Supabase implementation for votes.

    The ``votes`` table carries a unique index on ``(session_id, user_id)``,
    so a duplicate that slips past the existence check is still rejected.
    """

    client: Client

    def get_vote(self, session_id: str, user_id: str) -> VoteRecord | None:
        """Return the vote a user cast in a session, if any."""
        session_uuid = parse_uuid(session_id)
        user_uuid = parse_uuid(user_id)
        if session_uuid is None or user_uuid is None:
            return None
        response = execute(
            self.client.table("votes")
            .select(_COLUMNS)
            .eq("session_id", str(session_uuid))
            .eq("user_id", str(user_uuid))
            .limit(1),
            "load vote",
        )
        if not response.data:
            return None
        return _parse_vote(response.data[0])

    def create_vote(
        self,
        session_id: str,
        user_id: str,
        user_name: str | None,
        vote_type: VoteType,
        timestamp: datetime,
    ) -> VoteRecord:
        """Insert a vote row and return it."""
        session_uuid = parse_uuid(session_id)
        if session_uuid is None:
            raise InvalidArgumentError("Invalid session id", field="sessionId")
        user_uuid = parse_uuid(user_id)
        if user_uuid is None:
            raise InvalidArgumentError("Invalid user id", field="userId")
        try:
            response = execute(
                self.client.table("votes").insert(
                    {
                        "session_id": str(session_uuid),
                        "user_id": str(user_uuid),
                        "user_name": user_name,
                        "type": vote_type.value,
                        "voted_at": timestamp.isoformat(),
                    }
                ),
                "create vote",
                conflict_ok=True,
            )
        except APIError as exc:
            raise DuplicateVoteError(session_id, user_id) from exc
        if not response.data:
            raise RuntimeError("Failed to create vote")
        return _parse_vote(response.data[0])

    def list_votes(self) -> list[VoteRecord]:
        """Return all votes in the order they were cast."""
        response = execute(
            self.client.table("votes").select(_COLUMNS).order("voted_at", desc=False),
            "list votes",
        )
        return [_parse_vote(row) for row in response.data or []]

    def list_session_votes(self, session_id: str) -> list[VoteRecord]:
        """Return the votes of one session."""
        session_uuid = parse_uuid(session_id)
        if session_uuid is None:
            return []
        response = execute(
            self.client.table("votes")
            .select(_COLUMNS)
            .eq("session_id", str(session_uuid))
            .order("voted_at", desc=False),
            "list session votes",
        )
        return [_parse_vote(row) for row in response.data or []]

    def count_session_votes(self, session_id: str) -> int:
        """Return the exact number of votes in a session."""
        session_uuid = parse_uuid(session_id)
        if session_uuid is None:
            return 0
        response = execute(
            self.client.table("votes")
            .select("id", count="exact")
            .eq("session_id", str(session_uuid)),
            "count session votes",
        )
        if response.count is not None:
            return int(response.count)
        return len(response.data or [])

    def delete_session_votes(self, session_id: str) -> None:
        """Delete every vote of a session."""
        session_uuid = parse_uuid(session_id)
        if session_uuid is None:
            return
        execute(
            self.client.table("votes").delete().eq("session_id", str(session_uuid)),
            "delete session votes",
        )


def _parse_vote(row: dict[str, object]) -> VoteRecord:
    voted_at = parse_timestamp(row.get("voted_at"))
    if voted_at is None:
        raise ValueError(f"Vote {row.get('id')} has no voted_at")
    return VoteRecord(
        id=str(row["id"]),
        session_id=str(row["session_id"]),
        user_id=str(row["user_id"]),
        user_name=row.get("user_name"),
        type=VoteType(row["type"]),
        timestamp=voted_at,
    )
