"""Supabase-backed session repository."""

from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from brewvote.adapters.supabase_support import execute, parse_timestamp, parse_uuid
from brewvote.domain.models import SessionRecord
from brewvote.services.sessions import SessionRepository

_COLUMNS = "id, start_time, end_time, is_active, total_votes, created_by"


@dataclass
class SupabaseSessionRepository(SessionRepository):
    """Supabase implementation for voting sessions."""

    client: Client

    def get_session(self, session_id: str) -> SessionRecord | None:
        """Return a session by id, if present."""
        session_uuid = parse_uuid(session_id)
        if session_uuid is None:
            return None
        response = execute(
            self.client.table("vote_sessions")
            .select(_COLUMNS)
            .eq("id", str(session_uuid))
            .limit(1),
            "load session",
        )
        if not response.data:
            return None
        return _parse_session(response.data[0])

    def get_active_session(self) -> SessionRecord | None:
        """Return the active session, if any."""
        response = execute(
            self.client.table("vote_sessions")
            .select(_COLUMNS)
            .eq("is_active", True)
            .order("start_time", desc=True)
            .limit(1),
            "load active session",
        )
        if not response.data:
            return None
        return _parse_session(response.data[0])

    def list_sessions(self) -> list[SessionRecord]:
        """Return all sessions, most recent first."""
        response = execute(
            self.client.table("vote_sessions")
            .select(_COLUMNS)
            .order("start_time", desc=True),
            "list sessions",
        )
        return [_parse_session(row) for row in response.data or []]

    def create_session(
        self, start_time: datetime, created_by: str | None
    ) -> SessionRecord:
        """Create an active session row and return it."""
        response = execute(
            self.client.table("vote_sessions").insert(
                {
                    "start_time": start_time.isoformat(),
                    "is_active": True,
                    "total_votes": 0,
                    "created_by": created_by,
                }
            ),
            "create session",
        )
        if not response.data:
            raise RuntimeError("Failed to create session")
        return _parse_session(response.data[0])

    def deactivate_active_sessions(self, end_time: datetime) -> None:
        """Mark every active session as ended."""
        execute(
            self.client.table("vote_sessions")
            .update({"is_active": False, "end_time": end_time.isoformat()})
            .eq("is_active", True),
            "deactivate sessions",
        )

    def end_session(self, session_id: str, end_time: datetime) -> SessionRecord | None:
        """Mark a session as ended and return the updated row."""
        session_uuid = parse_uuid(session_id)
        if session_uuid is None:
            return None
        response = execute(
            self.client.table("vote_sessions")
            .update({"is_active": False, "end_time": end_time.isoformat()})
            .eq("id", str(session_uuid)),
            "end session",
        )
        if not response.data:
            return None
        return _parse_session(response.data[0])

    def increment_total_votes(self, session_id: str) -> None:
        """Increment the counter server-side so concurrent votes do not race."""
        session_uuid = parse_uuid(session_id)
        if session_uuid is None:
            return
        execute(
            self.client.rpc("increment_session_votes", {"p_session_id": str(session_uuid)}),
            "increment session votes",
        )

    def set_total_votes(self, session_id: str, total_votes: int) -> None:
        """Overwrite the session vote counter."""
        session_uuid = parse_uuid(session_id)
        if session_uuid is None:
            return
        execute(
            self.client.table("vote_sessions")
            .update({"total_votes": total_votes})
            .eq("id", str(session_uuid)),
            "update session votes",
        )

    def delete_session(self, session_id: str) -> None:
        """Delete a session row."""
        session_uuid = parse_uuid(session_id)
        if session_uuid is None:
            return
        execute(
            self.client.table("vote_sessions").delete().eq("id", str(session_uuid)),
            "delete session",
        )


def _parse_session(row: dict[str, object]) -> SessionRecord:
    start_time = parse_timestamp(row.get("start_time"))
    if start_time is None:
        raise ValueError(f"Session {row.get('id')} has no start_time")
    return SessionRecord(
        id=str(row["id"]),
        start_time=start_time,
        end_time=parse_timestamp(row.get("end_time")),
        is_active=bool(row.get("is_active", False)),
        total_votes=int(row.get("total_votes") or 0),
        created_by=row.get("created_by"),
    )
