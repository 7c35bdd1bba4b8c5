"""Dependency container wiring for the application."""

from dataclasses import dataclass
from pathlib import Path

from supabase import create_client

from brewvote.adapters.local_store import (
    JsonFileStore,
    LocalSessionRepository,
    LocalUserRepository,
    LocalVoteRepository,
)
from brewvote.adapters.supabase_session_repository import SupabaseSessionRepository
from brewvote.adapters.supabase_user_repository import SupabaseUserRepository
from brewvote.adapters.supabase_vote_repository import SupabaseVoteRepository
from brewvote.config import Settings
from brewvote.services.sessions import SessionRepository, SessionService
from brewvote.services.stats import StatsService
from brewvote.services.users import UserRepository, UserService
from brewvote.services.votes import VoteRepository, VoteService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    user_service: UserService
    session_service: SessionService
    vote_service: VoteService
    stats_service: StatsService


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    user_repository, session_repository, vote_repository = _build_repositories(
        resolved_settings
    )
    return wire_container(
        resolved_settings, user_repository, session_repository, vote_repository
    )


def wire_container(
    settings: Settings,
    user_repository: UserRepository,
    session_repository: SessionRepository,
    vote_repository: VoteRepository,
) -> AppContainer:
    """Build services over the given repositories."""
    user_service = UserService(
        user_repository,
        admin_employee_id=settings.admin_employee_id,
        admin_name=settings.admin_name,
    )
    session_service = SessionService(
        session_repository=session_repository,
        vote_repository=vote_repository,
    )
    vote_service = VoteService(
        vote_repository=vote_repository,
        session_repository=session_repository,
    )
    stats_service = StatsService(
        vote_repository=vote_repository,
        session_repository=session_repository,
        user_service=user_service,
    )
    return AppContainer(
        settings=settings,
        user_service=user_service,
        session_service=session_service,
        vote_service=vote_service,
        stats_service=stats_service,
    )


def _build_repositories(
    settings: Settings,
) -> tuple[UserRepository, SessionRepository, VoteRepository]:
    if settings.storage_backend == "supabase":
        if not settings.supabase_url or not settings.supabase_service_key:
            raise ValueError(
                "SUPABASE_URL and SUPABASE_SERVICE_KEY are required "
                "for the supabase storage backend"
            )
        client = create_client(settings.supabase_url, settings.supabase_service_key)
        return (
            SupabaseUserRepository(client),
            SupabaseSessionRepository(client),
            SupabaseVoteRepository(client),
        )
    store = JsonFileStore(Path(settings.local_store_path))
    return (
        LocalUserRepository(store),
        LocalSessionRepository(store),
        LocalVoteRepository(store),
    )
