"""Tests for vote casting."""

import pytest

from brewvote.domain.errors import DuplicateVoteError, InvalidArgumentError, NotFoundError
from brewvote.domain.models import VoteType
from brewvote.services.sessions import SessionService
from brewvote.services.users import UserService
from brewvote.services.votes import VoteService
from tests.fakes import (
    InMemorySessionRepository,
    InMemoryUserRepository,
    InMemoryVoteRepository,
)


@pytest.fixture
def services() -> tuple[VoteService, SessionService, UserService, InMemoryVoteRepository]:
    sessions = InMemorySessionRepository()
    votes = InMemoryVoteRepository()
    return (
        VoteService(votes, sessions),
        SessionService(sessions, votes),
        UserService(InMemoryUserRepository()),
        votes,
    )


def test_cast_vote_records_vote_and_counter(services) -> None:
    vote_service, session_service, users, _ = services
    session = session_service.start_session(users.ensure_admin())
    ada = users.login("EMP001", name="Ada")

    vote = vote_service.cast_vote(session.id, ada.id, ada.name, "COFFEE")

    assert vote.type == VoteType.COFFEE
    assert vote.user_name == "Ada"
    assert session_service.get_session(session.id).total_votes == 1


def test_second_vote_is_rejected_without_side_effects(services) -> None:
    vote_service, session_service, users, votes = services
    session = session_service.start_session(users.ensure_admin())
    ada = users.login("EMP001", name="Ada")
    vote_service.cast_vote(session.id, ada.id, ada.name, "COFFEE")

    with pytest.raises(DuplicateVoteError):
        vote_service.cast_vote(session.id, ada.id, ada.name, "TEA")

    assert len(votes.votes) == 1
    assert session_service.get_session(session.id).total_votes == 1


@pytest.mark.parametrize(
    ("session_id", "user_id", "vote_type"),
    [
        (None, "u1", "COFFEE"),
        ("s1", "", "COFFEE"),
        ("s1", "u1", None),
    ],
)
def test_missing_fields_are_invalid(services, session_id, user_id, vote_type) -> None:
    vote_service, _, _, _ = services

    with pytest.raises(InvalidArgumentError):
        vote_service.cast_vote(session_id, user_id, "Ada", vote_type)


@pytest.mark.parametrize("vote_type", ["JUICE", "coffee", "Tea"])
def test_unknown_vote_type_is_invalid(services, vote_type) -> None:
    vote_service, session_service, users, votes = services
    session = session_service.start_session(users.ensure_admin())

    with pytest.raises(InvalidArgumentError):
        vote_service.cast_vote(session.id, "u1", "Ada", vote_type)
    assert votes.votes == []


def test_vote_for_unknown_session(services) -> None:
    vote_service, _, _, _ = services

    with pytest.raises(NotFoundError):
        vote_service.cast_vote("missing", "u1", "Ada", "TEA")


def test_vote_for_ended_session_is_rejected(services) -> None:
    vote_service, session_service, users, _ = services
    session = session_service.start_session(users.ensure_admin())
    session_service.end_session(session.id)

    with pytest.raises(InvalidArgumentError):
        vote_service.cast_vote(session.id, "u1", "Ada", "TEA")


def test_counter_matches_votes_after_many_voters(services) -> None:
    vote_service, session_service, users, votes = services
    session = session_service.start_session(users.ensure_admin())
    for index in range(5):
        vote_service.cast_vote(
            session.id, f"u{index}", f"User {index}", "TEA" if index % 2 else "COFFEE"
        )

    stored = session_service.get_session(session.id)
    assert stored.total_votes == votes.count_session_votes(session.id) == 5
    assert votes.get_vote(session.id, "u3").type == VoteType.TEA
