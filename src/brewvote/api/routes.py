"""Voting API endpoints."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, Query, Request

from brewvote.api.models import (
    HistoryEntryOut,
    LoginRequest,
    SessionOut,
    StatsOut,
    TrendPointOut,
    UserOut,
    VoteOut,
    VoteRequest,
)
from brewvote.domain.errors import ForbiddenError
from brewvote.services.stats import DEFAULT_TREND_SESSIONS

if TYPE_CHECKING:
    from brewvote.containers import AppContainer
    from brewvote.domain.models import UserRecord

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["voting"])


def _container(request: Request) -> AppContainer:
    return request.app.state.container


def _resolve_user(container: AppContainer, user_id: str | None) -> UserRecord | None:
    if not user_id:
        return None
    return container.user_service.get_user(user_id)


@router.post("/init")
async def init(request: Request) -> dict[str, bool]:
    """Ensure the admin identity exists."""
    _container(request).user_service.ensure_admin()
    return {"success": True}


@router.post("/auth/login")
async def login(payload: LoginRequest, request: Request) -> UserOut:
    """Log in an admin or log in / register an employee."""
    user = _container(request).user_service.login(
        payload.employee_id, name=payload.name, role=payload.role
    )
    return UserOut.from_record(user)


@router.get("/users")
async def list_users(request: Request) -> list[UserOut]:
    return [UserOut.from_record(user) for user in _container(request).user_service.list_users()]


@router.get("/sessions")
async def list_sessions(request: Request) -> list[SessionOut]:
    """Return all sessions, most recent first."""
    sessions = _container(request).session_service.list_sessions()
    return [SessionOut.from_record(session) for session in sessions]


@router.get("/sessions/active")
async def active_session(
    request: Request, user_id: str | None = Query(default=None, alias="userId")
) -> SessionOut | None:
    """Return the active session; always null for non-admin callers."""
    container = _container(request)
    requester = _resolve_user(container, user_id)
    if user_id and requester is None:
        return None
    session = container.session_service.get_active_session(requester)
    return SessionOut.from_record(session) if session else None


@router.get("/sessions/history")
async def session_history(request: Request) -> list[HistoryEntryOut]:
    """Return ended sessions with their vote breakdown."""
    history = _container(request).stats_service.get_history()
    return [HistoryEntryOut.from_entry(entry) for entry in history]


@router.post("/sessions/start")
async def start_session(
    request: Request, user_id: str | None = Query(default=None, alias="userId")
) -> SessionOut:
    """Start a new session; admins only."""
    container = _container(request)
    requester = _resolve_user(container, user_id)
    session = container.session_service.start_session(requester)
    return SessionOut.from_record(session)


@router.post("/sessions/{session_id}/end")
async def end_session(
    session_id: str,
    request: Request,
    user_id: str | None = Query(default=None, alias="userId"),
) -> SessionOut:
    """Mark a session as ended."""
    container = _container(request)
    requester = _resolve_user(container, user_id)
    if user_id and requester is None:
        raise ForbiddenError("Only admins can end sessions")
    session = container.session_service.end_session(session_id, requester)
    return SessionOut.from_record(session)


@router.get("/sessions/{session_id}/pending")
async def pending_voters(session_id: str, request: Request) -> list[UserOut]:
    """Return employees that have not voted in the session."""
    container = _container(request)
    container.session_service.get_session(session_id)
    pending = container.stats_service.pending_voters(session_id)
    return [UserOut.from_record(user) for user in pending]


@router.post("/sessions/{session_id}/reconcile")
async def reconcile_session(session_id: str, request: Request) -> SessionOut:
    """Recompute a session's vote counter from its votes."""
    session = _container(request).session_service.reconcile_total_votes(session_id)
    return SessionOut.from_record(session)


@router.delete("/sessions/{session_id}")
async def delete_session(
    session_id: str,
    request: Request,
    user_id: str | None = Query(default=None, alias="userId"),
) -> dict[str, bool]:
    """Delete a session and its votes; admins only."""
    container = _container(request)
    requester = _resolve_user(container, user_id)
    container.session_service.delete_session(session_id, requester)
    return {"success": True}


@router.get("/votes")
async def list_votes(request: Request) -> list[VoteOut]:
    return [VoteOut.from_record(vote) for vote in _container(request).vote_service.list_votes()]


@router.get("/votes/session/{session_id}")
async def list_session_votes(session_id: str, request: Request) -> list[VoteOut]:
    votes = _container(request).vote_service.list_session_votes(session_id)
    return [VoteOut.from_record(vote) for vote in votes]


@router.post("/votes")
async def cast_vote(payload: VoteRequest, request: Request) -> VoteOut:
    """Cast a vote in a session."""
    vote = _container(request).vote_service.cast_vote(
        session_id=payload.session_id,
        user_id=payload.user_id,
        user_name=payload.user_name,
        vote_type=payload.type,
    )
    return VoteOut.from_record(vote)


@router.get("/stats")
async def stats(request: Request) -> StatsOut:
    """Return totals across every vote."""
    return StatsOut.from_totals(_container(request).stats_service.get_totals())


@router.get("/stats/trends")
async def trends(
    request: Request, limit: int = Query(default=DEFAULT_TREND_SESSIONS, ge=1, le=100)
) -> list[TrendPointOut]:
    """Return per-session counts for the most recent sessions."""
    points = _container(request).stats_service.get_trends(limit)
    return [TrendPointOut.from_point(point) for point in points]


@router.get("/stats/session/{session_id}")
async def session_stats(session_id: str, request: Request) -> StatsOut:
    """Return coffee and tea counts for one session."""
    container = _container(request)
    container.session_service.get_session(session_id)
    return StatsOut.from_totals(container.stats_service.get_session_totals(session_id))
