"""Tests for the httpx voting API client."""

import asyncio
import json

import httpx
import pytest

from brewvote.client.api_client import ApiError, HttpxVoteApiClient

_SESSION = {
    "id": "s1",
    "startTime": "2024-05-01T09:00:00+00:00",
    "endTime": None,
    "isActive": True,
    "totalVotes": 0,
    "createdBy": "admin-1",
}


def _client(handler) -> HttpxVoteApiClient:  # type: ignore[no-untyped-def]
    transport = httpx.MockTransport(handler)
    return HttpxVoteApiClient(
        base_url="http://test/api", http_client=httpx.AsyncClient(transport=transport)
    )


def test_get_active_session_passes_user_id() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=_SESSION)

    session = asyncio.run(_client(handler).get_active_session(user_id="admin-1"))

    assert session is not None
    assert session.id == "s1"
    assert session.is_active is True
    assert seen[0].url.path == "/api/sessions/active"
    assert seen[0].url.params["userId"] == "admin-1"


def test_get_active_session_null_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=None)

    assert asyncio.run(_client(handler).get_active_session()) is None


def test_cast_vote_sends_camel_case_payload() -> None:
    payloads: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        payloads.append(json.loads(request.content))
        return httpx.Response(
            200,
            json={
                "id": "v1",
                "sessionId": "s1",
                "userId": "u1",
                "userName": "Ada",
                "type": "TEA",
                "timestamp": "2024-05-01T09:01:00+00:00",
            },
        )

    vote = asyncio.run(_client(handler).cast_vote("s1", "u1", "Ada", "TEA"))

    assert payloads == [
        {"sessionId": "s1", "userId": "u1", "userName": "Ada", "type": "TEA"}
    ]
    assert vote.session_id == "s1"
    assert vote.type == "TEA"


def test_error_body_becomes_api_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"error": "User already voted in this session"})

    with pytest.raises(ApiError) as excinfo:
        asyncio.run(_client(handler).cast_vote("s1", "u1", "Ada", "TEA"))

    assert excinfo.value.status_code == 400
    assert excinfo.value.message == "User already voted in this session"


def test_stats_and_lists() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/stats"):
            return httpx.Response(
                200, json={"coffeeTotal": 2, "teaTotal": 1, "totalVotes": 3}
            )
        if request.url.path.endswith("/users"):
            return httpx.Response(
                200,
                json=[{"id": "u1", "employeeId": "EMP001", "name": "Ada", "role": "EMPLOYEE"}],
            )
        return httpx.Response(200, json=[_SESSION])

    client = _client(handler)

    async def run() -> tuple:
        result = (
            await client.get_stats(),
            await client.list_users(),
            await client.list_sessions(),
        )
        await client.close()
        return result

    stats, users, sessions = asyncio.run(run())

    assert (stats.coffee_total, stats.tea_total, stats.total_votes) == (2, 1, 3)
    assert users[0].employee_id == "EMP001"
    assert sessions[0].id == "s1"


def test_session_tally_and_pending_paths() -> None:
    paths: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.path)
        if request.url.path.endswith("/pending"):
            return httpx.Response(
                200,
                json=[{"id": "u2", "employeeId": "EMP002", "name": "Bob", "role": "EMPLOYEE"}],
            )
        return httpx.Response(200, json={"coffeeTotal": 0, "teaTotal": 1, "totalVotes": 1})

    client = _client(handler)

    async def run() -> tuple:
        result = (
            await client.get_session_stats("s1"),
            await client.list_pending_voters("s1"),
        )
        await client.close()
        return result

    tally, pending = asyncio.run(run())

    assert paths == ["/api/stats/session/s1", "/api/sessions/s1/pending"]
    assert tally.tea_total == 1
    assert [user.name for user in pending] == ["Bob"]
