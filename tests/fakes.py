"""In-memory repositories and API fakes shared by the tests."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

from brewvote.api.models import SessionOut, StatsOut, UserOut, VoteOut
from brewvote.domain.errors import DuplicateVoteError
from brewvote.domain.models import Role, SessionRecord, UserRecord, VoteRecord, VoteType
from brewvote.services.sessions import SessionRepository
from brewvote.services.users import UserRepository
from brewvote.services.votes import VoteRepository


@dataclass
class InMemoryUserRepository(UserRepository):
    """In-memory user repository for tests."""

    users: dict[str, UserRecord] = field(default_factory=dict)

    def get_user(self, user_id: str) -> UserRecord | None:
        return self.users.get(user_id)

    def get_by_employee_id(
        self, employee_id: str, role: Role | None = None
    ) -> UserRecord | None:
        for user in self.users.values():
            if user.employee_id == employee_id and role in (None, user.role):
                return user
        return None

    def create_user(self, employee_id: str, name: str | None, role: Role) -> UserRecord:
        user = UserRecord(
            id=str(uuid4()),
            employee_id=employee_id,
            name=name,
            role=role,
            created_at=datetime.now(tz=UTC),
        )
        self.users[user.id] = user
        return user

    def list_users(self) -> list[UserRecord]:
        return list(self.users.values())


@dataclass
class InMemorySessionRepository(SessionRepository):
    """In-memory session repository for tests."""

    sessions: dict[str, SessionRecord] = field(default_factory=dict)

    def get_session(self, session_id: str) -> SessionRecord | None:
        return self.sessions.get(session_id)

    def get_active_session(self) -> SessionRecord | None:
        for session in self.sessions.values():
            if session.is_active:
                return session
        return None

    def list_sessions(self) -> list[SessionRecord]:
        newest_first = list(reversed(self.sessions.values()))
        return sorted(newest_first, key=lambda session: session.start_time, reverse=True)

    def create_session(
        self, start_time: datetime, created_by: str | None
    ) -> SessionRecord:
        session = SessionRecord(
            id=str(uuid4()),
            start_time=start_time,
            end_time=None,
            is_active=True,
            total_votes=0,
            created_by=created_by,
        )
        self.sessions[session.id] = session
        return session

    def deactivate_active_sessions(self, end_time: datetime) -> None:
        for session_id, session in list(self.sessions.items()):
            if session.is_active:
                self.sessions[session_id] = _replace(
                    session, is_active=False, end_time=end_time
                )

    def end_session(self, session_id: str, end_time: datetime) -> SessionRecord | None:
        session = self.sessions.get(session_id)
        if session is None:
            return None
        ended = _replace(session, is_active=False, end_time=end_time)
        self.sessions[session_id] = ended
        return ended

    def increment_total_votes(self, session_id: str) -> None:
        session = self.sessions[session_id]
        self.sessions[session_id] = _replace(
            session, total_votes=session.total_votes + 1
        )

    def set_total_votes(self, session_id: str, total_votes: int) -> None:
        self.sessions[session_id] = _replace(
            self.sessions[session_id], total_votes=total_votes
        )

    def delete_session(self, session_id: str) -> None:
        self.sessions.pop(session_id, None)


@dataclass
class InMemoryVoteRepository(VoteRepository):
    """In-memory vote repository enforcing the (session, user) uniqueness."""

    votes: list[VoteRecord] = field(default_factory=list)

    def get_vote(self, session_id: str, user_id: str) -> VoteRecord | None:
        for vote in self.votes:
            if vote.session_id == session_id and vote.user_id == user_id:
                return vote
        return None

    def create_vote(
        self,
        session_id: str,
        user_id: str,
        user_name: str | None,
        vote_type: VoteType,
        timestamp: datetime,
    ) -> VoteRecord:
        if self.get_vote(session_id, user_id) is not None:
            raise DuplicateVoteError(session_id, user_id)
        vote = VoteRecord(
            id=str(uuid4()),
            session_id=session_id,
            user_id=user_id,
            user_name=user_name,
            type=vote_type,
            timestamp=timestamp,
        )
        self.votes.append(vote)
        return vote

    def list_votes(self) -> list[VoteRecord]:
        return list(self.votes)

    def list_session_votes(self, session_id: str) -> list[VoteRecord]:
        return [vote for vote in self.votes if vote.session_id == session_id]

    def count_session_votes(self, session_id: str) -> int:
        return len(self.list_session_votes(session_id))

    def delete_session_votes(self, session_id: str) -> None:
        self.votes = [vote for vote in self.votes if vote.session_id != session_id]


@dataclass
class FakeVoteApi:
    """Fake voting API that serves canned snapshots and records calls."""

    active_session: SessionOut | None = None
    session_votes: list[VoteOut] = field(default_factory=list)
    users: list[UserOut] = field(default_factory=list)
    stats: StatsOut = field(
        default_factory=lambda: StatsOut(coffee_total=0, tea_total=0, total_votes=0)
    )
    ended: list[str] = field(default_factory=list)
    cast: list[tuple[str, str, str]] = field(default_factory=list)
    active_requests: list[str | None] = field(default_factory=list)
    fail_next: int = 0
    closed: bool = False

    async def get_active_session(self, user_id: str | None = None) -> SessionOut | None:
        self.active_requests.append(user_id)
        if self.fail_next:
            self.fail_next -= 1
            raise RuntimeError("network down")
        return self.active_session

    async def list_session_votes(self, session_id: str) -> list[VoteOut]:
        return [vote for vote in self.session_votes if vote.session_id == session_id]

    async def list_users(self) -> list[UserOut]:
        return self.users

    async def get_stats(self) -> StatsOut:
        return self.stats

    async def get_session_stats(self, session_id: str) -> StatsOut:
        votes = await self.list_session_votes(session_id)
        coffee = sum(1 for vote in votes if vote.type == "COFFEE")
        tea = sum(1 for vote in votes if vote.type == "TEA")
        return StatsOut(coffee_total=coffee, tea_total=tea, total_votes=coffee + tea)

    async def list_pending_voters(self, session_id: str) -> list[UserOut]:
        voted = {vote.user_id for vote in await self.list_session_votes(session_id)}
        return [
            user
            for user in self.users
            if user.role == "EMPLOYEE" and user.id not in voted
        ]

    async def close(self) -> None:
        self.closed = True

    async def end_session(self, session_id: str, user_id: str | None = None) -> SessionOut:
        self.ended.append(session_id)
        assert self.active_session is not None
        ended = self.active_session.model_copy(
            update={"is_active": False, "end_time": datetime.now(tz=UTC)}
        )
        self.active_session = None
        return ended

    async def start_session(self, user_id: str) -> SessionOut:
        self.active_session = make_session_out()
        return self.active_session

    async def cast_vote(
        self, session_id: str, user_id: str, user_name: str | None, vote_type: str
    ) -> VoteOut:
        self.cast.append((session_id, user_id, vote_type))
        vote = make_vote_out(session_id, user_id, vote_type)
        self.session_votes.append(vote)
        return vote

    async def login(
        self, employee_id: str, name: str | None = None, role: str | None = None
    ) -> UserOut:
        return make_user_out(employee_id, role or "EMPLOYEE", name=name)


def make_user_out(employee_id: str, role: str, name: str | None = None) -> UserOut:
    return UserOut(
        id=f"user-{employee_id}",
        employee_id=employee_id,
        name=name or employee_id,
        role=role,
    )


def make_session_out(
    session_id: str = "session-1", start_time: datetime | None = None
) -> SessionOut:
    return SessionOut(
        id=session_id,
        start_time=start_time or datetime.now(tz=UTC),
        is_active=True,
        total_votes=0,
    )


def make_vote_out(session_id: str, user_id: str, vote_type: str) -> VoteOut:
    return VoteOut(
        id=str(uuid4()),
        session_id=session_id,
        user_id=user_id,
        user_name=user_id,
        type=vote_type,
        timestamp=datetime.now(tz=UTC),
    )


def _replace(session: SessionRecord, **changes: object) -> SessionRecord:
    values = {
        "id": session.id,
        "start_time": session.start_time,
        "end_time": session.end_time,
        "is_active": session.is_active,
        "total_votes": session.total_votes,
        "created_by": session.created_by,
    }
    values.update(changes)
    return SessionRecord(**values)
