"""HTTP client for the voting API."""

from dataclasses import dataclass
from typing import Protocol

import httpx
from pydantic import TypeAdapter

from brewvote.api.models import SessionOut, StatsOut, UserOut, VoteOut

_USERS = TypeAdapter(list[UserOut])
_SESSIONS = TypeAdapter(list[SessionOut])
_VOTES = TypeAdapter(list[VoteOut])


class ApiError(Exception):
    """Raised when the API answers with a non-success status."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class VoteApi(Protocol):
    """Interface for the voting API used by the pollers."""

    async def init(self) -> None:
        """Ensure the admin identity exists."""

    async def login(
        self, employee_id: str, name: str | None = None, role: str | None = None
    ) -> UserOut:
        """Log in and return the user."""

    async def list_users(self) -> list[UserOut]:
        """Return all users."""

    async def list_sessions(self) -> list[SessionOut]:
        """Return all sessions, most recent first."""

    async def get_active_session(self, user_id: str | None = None) -> SessionOut | None:
        """Return the active session visible to the caller."""

    async def start_session(self, user_id: str) -> SessionOut:
        """Start a new session."""

    async def end_session(self, session_id: str, user_id: str | None = None) -> SessionOut:
        """End a session."""

    async def list_votes(self) -> list[VoteOut]:
        """Return all votes."""

    async def list_session_votes(self, session_id: str) -> list[VoteOut]:
        """Return votes of one session."""

    async def cast_vote(
        self, session_id: str, user_id: str, user_name: str | None, vote_type: str
    ) -> VoteOut:
        """Cast a vote."""

    async def get_stats(self) -> StatsOut:
        """Return totals across all votes."""

    async def get_session_stats(self, session_id: str) -> StatsOut:
        """Return coffee and tea counts for one session."""

    async def list_pending_voters(self, session_id: str) -> list[UserOut]:
        """Return employees that have not voted in a session."""

    async def close(self) -> None:
        """Release the underlying connection."""


@dataclass
class HttpxVoteApiClient:
    """Voting API client implemented with httpx."""

    base_url: str
    http_client: httpx.AsyncClient
    timeout: float = 10.0

    @classmethod
    def create(cls, base_url: str, timeout: float = 10.0) -> "HttpxVoteApiClient":
        """Create a client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            http_client=httpx.AsyncClient(),
            timeout=timeout,
        )

    async def init(self) -> None:
        await self._request("POST", "/init")

    async def login(
        self, employee_id: str, name: str | None = None, role: str | None = None
    ) -> UserOut:
        payload: dict[str, object] = {"employeeId": employee_id}
        if name is not None:
            payload["name"] = name
        if role is not None:
            payload["role"] = role
        data = await self._request("POST", "/auth/login", json=payload)
        return UserOut.model_validate(data)

    async def list_users(self) -> list[UserOut]:
        return _USERS.validate_python(await self._request("GET", "/users"))

    async def list_sessions(self) -> list[SessionOut]:
        return _SESSIONS.validate_python(await self._request("GET", "/sessions"))

    async def get_active_session(self, user_id: str | None = None) -> SessionOut | None:
        params = {"userId": user_id} if user_id else None
        data = await self._request("GET", "/sessions/active", params=params)
        return SessionOut.model_validate(data) if data else None

    async def start_session(self, user_id: str) -> SessionOut:
        data = await self._request(
            "POST", "/sessions/start", params={"userId": user_id}
        )
        return SessionOut.model_validate(data)

    async def end_session(self, session_id: str, user_id: str | None = None) -> SessionOut:
        params = {"userId": user_id} if user_id else None
        data = await self._request(
            "POST", f"/sessions/{session_id}/end", params=params
        )
        return SessionOut.model_validate(data)

    async def list_votes(self) -> list[VoteOut]:
        return _VOTES.validate_python(await self._request("GET", "/votes"))

    async def list_session_votes(self, session_id: str) -> list[VoteOut]:
        data = await self._request("GET", f"/votes/session/{session_id}")
        return _VOTES.validate_python(data)

    async def cast_vote(
        self, session_id: str, user_id: str, user_name: str | None, vote_type: str
    ) -> VoteOut:
        data = await self._request(
            "POST",
            "/votes",
            json={
                "sessionId": session_id,
                "userId": user_id,
                "userName": user_name,
                "type": vote_type,
            },
        )
        return VoteOut.model_validate(data)

    async def get_stats(self) -> StatsOut:
        return StatsOut.model_validate(await self._request("GET", "/stats"))

    async def get_session_stats(self, session_id: str) -> StatsOut:
        data = await self._request("GET", f"/stats/session/{session_id}")
        return StatsOut.model_validate(data)

    async def list_pending_voters(self, session_id: str) -> list[UserOut]:
        data = await self._request("GET", f"/sessions/{session_id}/pending")
        return _USERS.validate_python(data)

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, object] | None = None,
        params: dict[str, str] | None = None,
    ) -> object:
        response = await self.http_client.request(
            method,
            f"{self.base_url}{path}",
            json=json,
            params=params,
            timeout=self.timeout,
        )
        if response.is_error:
            raise ApiError(response.status_code, _error_message(response))
        return response.json()


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or "API Error"
    if isinstance(body, dict) and isinstance(body.get("error"), str):
        return body["error"]
    return "API Error"
