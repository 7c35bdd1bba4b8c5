"""Shared test fixtures."""

import pytest

from brewvote.config import Settings
from brewvote.containers import AppContainer, wire_container
from tests.fakes import (
    InMemorySessionRepository,
    InMemoryUserRepository,
    InMemoryVoteRepository,
)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        storage_backend="local",
        local_store_path="unused.json",
        admin_employee_id="ADM001",
        admin_name="Event Manager",
        environment="test",
    )


@pytest.fixture
def user_repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def session_repository() -> InMemorySessionRepository:
    return InMemorySessionRepository()


@pytest.fixture
def vote_repository() -> InMemoryVoteRepository:
    return InMemoryVoteRepository()


@pytest.fixture
def container(
    settings: Settings,
    user_repository: InMemoryUserRepository,
    session_repository: InMemorySessionRepository,
    vote_repository: InMemoryVoteRepository,
) -> AppContainer:
    return wire_container(settings, user_repository, session_repository, vote_repository)
