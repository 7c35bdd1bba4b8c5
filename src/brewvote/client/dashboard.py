"""Dashboard controllers that reconcile view state from API snapshots."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from pathlib import Path

from brewvote.adapters.local_store import JsonFileStore
from brewvote.api.models import UserOut, VoteOut
from brewvote.client.api_client import HttpxVoteApiClient, VoteApi
from brewvote.client.polling import PollTask
from brewvote.client.views import (
    AdminView,
    EmployeeView,
    EmployeeViewState,
    render_admin_view,
    render_employee_view,
)
from brewvote.config import ClientSettings
from brewvote.domain.models import Role, UserRecord
from brewvote.services.sessions import (
    DEFAULT_SESSION_DURATION,
    is_expired,
    remaining_time,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class ClientContext:
    """Per-login client state: identity, last observed session, poll handles."""

    user: UserOut | None = None
    last_session_id: str | None = None
    polls: list[PollTask] = field(default_factory=list)
    store: JsonFileStore | None = None

    def remember(self, user: UserOut) -> None:
        self.user = user
        self.last_session_id = None
        if self.store is not None:
            self.store.set_current_user(_to_record(user))

    def restore(self) -> UserOut | None:
        """Load the remembered user from the local store, if any."""
        if self.store is None:
            return None
        record = self.store.get_current_user()
        if record is not None:
            self.user = UserOut.from_record(record)
        return self.user

    async def stop_polling(self) -> None:
        for poll in self.polls:
            await poll.stop()
        self.polls.clear()

    async def clear(self) -> None:
        await self.stop_polling()
        self.user = None
        self.last_session_id = None
        if self.store is not None:
            self.store.set_current_user(None)


@dataclass
class EmployeeStatusPoller:
    """Derives the employee view: waiting, voting or voted."""

    api: VoteApi
    context: ClientContext
    on_session_started: Callable[[str], None] | None = None
    on_view: Callable[[EmployeeView], None] | None = None
    view: EmployeeView | None = None
    _has_ticked: bool = False

    async def tick(self) -> None:
        user = _require_user(self.context)
        session = await self.api.get_active_session()
        new_session_id = session.id if session else None
        if (
            new_session_id is not None
            and new_session_id != self.context.last_session_id
            and self._has_ticked
        ):
            logger.info("Voting started in session %s", new_session_id)
            if self.on_session_started is not None:
                self.on_session_started(new_session_id)
        self.context.last_session_id = new_session_id
        self._has_ticked = True

        if session is None:
            self._publish(EmployeeView(state=EmployeeViewState.WAITING))
            return
        votes = await self.api.list_session_votes(session.id)
        mine = _find_vote(votes, user.id)
        if mine is None:
            self._publish(
                EmployeeView(state=EmployeeViewState.VOTING, session_id=session.id)
            )
        else:
            self._publish(
                EmployeeView(
                    state=EmployeeViewState.VOTED,
                    session_id=session.id,
                    choice=mine.type,
                )
            )

    def _publish(self, view: EmployeeView) -> None:
        self.view = view
        if self.on_view is not None:
            self.on_view(view)


@dataclass
class AdminDashboardPoller:
    """Derives the admin live view and ends expired sessions."""

    api: VoteApi
    context: ClientContext
    session_duration: timedelta = DEFAULT_SESSION_DURATION
    clock: Clock = _utcnow
    on_view: Callable[[AdminView], None] | None = None
    view: AdminView | None = None

    async def tick(self) -> None:
        user = _require_user(self.context)
        session = await self.api.get_active_session(user_id=user.id)
        totals = await self.api.get_stats()
        if session is None:
            self._publish(AdminView(totals=totals))
            return

        now = self.clock()
        if is_expired(session, self.session_duration, now):
            logger.info("Session %s expired, ending it", session.id)
            await self.api.end_session(session.id, user_id=user.id)
            self._publish(AdminView(totals=totals, ended_session_id=session.id))
            return

        remaining = remaining_time(session, self.session_duration, now)
        session_totals = await self.api.get_session_stats(session.id)
        pending = await self.api.list_pending_voters(session.id)
        self._publish(
            AdminView(
                totals=totals,
                session=session,
                session_coffee=session_totals.coffee_total,
                session_tea=session_totals.tea_total,
                pending=pending,
                remaining=remaining,
            )
        )

    def _publish(self, view: AdminView) -> None:
        self.view = view
        if self.on_view is not None:
            self.on_view(view)


@dataclass
class DashboardController:
    """Wires login, dashboard navigation, voting and logout together."""

    api: VoteApi
    settings: ClientSettings
    context: ClientContext = field(default_factory=ClientContext)
    on_session_started: Callable[[str], None] | None = None
    employee_poller: EmployeeStatusPoller | None = None
    admin_poller: AdminDashboardPoller | None = None

    async def login(
        self, employee_id: str, name: str | None = None, role: str | None = None
    ) -> UserOut:
        await self.context.clear()
        user = await self.api.login(employee_id, name=name, role=role)
        self.context.remember(user)
        await self.navigate()
        return user

    async def navigate(self) -> None:
        """Start the poll task for the current user's dashboard."""
        await self.context.stop_polling()
        user = self.context.user
        if user is None:
            return
        if user.role == Role.ADMIN:
            self.admin_poller = AdminDashboardPoller(
                api=self.api,
                context=self.context,
                session_duration=timedelta(
                    minutes=self.settings.session_duration_minutes
                ),
                on_view=_log_admin_view,
            )
            poll = PollTask(
                "admin-dashboard",
                self.admin_poller.tick,
                self.settings.admin_poll_interval_seconds,
            )
        else:
            self.employee_poller = EmployeeStatusPoller(
                api=self.api,
                context=self.context,
                on_session_started=self.on_session_started,
                on_view=_log_employee_view,
            )
            poll = PollTask(
                "employee-status",
                self.employee_poller.tick,
                self.settings.employee_poll_interval_seconds,
            )
        self.context.polls.append(poll)
        poll.start()

    async def cast_vote(self, vote_type: str) -> VoteOut | None:
        """Vote in the active session; returns None when nothing is open."""
        user = _require_user(self.context)
        session = await self.api.get_active_session()
        if session is None:
            return None
        vote = await self.api.cast_vote(
            session_id=session.id,
            user_id=user.id,
            user_name=user.name,
            vote_type=vote_type,
        )
        if self.employee_poller is not None:
            await self.employee_poller.tick()
        return vote

    async def start_session(self) -> None:
        user = _require_user(self.context)
        await self.api.start_session(user.id)
        if self.admin_poller is not None:
            await self.admin_poller.tick()

    async def end_session(self) -> None:
        user = _require_user(self.context)
        session = await self.api.get_active_session(user_id=user.id)
        if session is not None:
            await self.api.end_session(session.id, user_id=user.id)
        if self.admin_poller is not None:
            await self.admin_poller.tick()

    async def logout(self) -> None:
        await self.context.clear()
        self.employee_poller = None
        self.admin_poller = None

    async def close(self) -> None:
        """Stop polling and release the API client; the stored user is kept."""
        await self.context.stop_polling()
        await self.api.close()


def build_client(
    settings: ClientSettings | None = None, api: VoteApi | None = None
) -> DashboardController:
    """Create a dashboard controller and restore the remembered user."""
    resolved_settings = settings or ClientSettings()
    store = None
    if resolved_settings.local_store_path:
        store = JsonFileStore(Path(resolved_settings.local_store_path))
    context = ClientContext(store=store)
    user = context.restore()
    if user is not None:
        logger.info("Restored session for %s", user.employee_id)
    return DashboardController(
        api=api
        or HttpxVoteApiClient.create(
            resolved_settings.api_base_url,
            timeout=resolved_settings.request_timeout_seconds,
        ),
        settings=resolved_settings,
        context=context,
    )


def _require_user(context: ClientContext) -> UserOut:
    if context.user is None:
        raise RuntimeError("No user is logged in")
    return context.user


def _find_vote(votes: list[VoteOut], user_id: str) -> VoteOut | None:
    for vote in votes:
        if vote.user_id == user_id:
            return vote
    return None


def _to_record(user: UserOut) -> UserRecord:
    return UserRecord(
        id=user.id,
        employee_id=user.employee_id,
        name=user.name,
        role=Role(user.role),
        created_at=user.created_at,
    )


def _log_admin_view(view: AdminView) -> None:
    logger.debug("Admin view:\n%s", render_admin_view(view))


def _log_employee_view(view: EmployeeView) -> None:
    logger.debug("Employee view: %s", render_employee_view(view))
