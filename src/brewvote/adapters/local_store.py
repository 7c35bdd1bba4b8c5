"""JSON file record store for the offline variant.

Collections live under stable keys in a single JSON document, mirroring the
browser-storage layout of the offline client.
"""

import copy
import json
import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from uuid import uuid4

from brewvote.domain.errors import DuplicateVoteError, StorageFailureError
from brewvote.domain.models import Role, SessionRecord, UserRecord, VoteRecord, VoteType
from brewvote.services.sessions import SessionRepository
from brewvote.services.users import UserRepository
from brewvote.services.votes import VoteRepository

logger = logging.getLogger(__name__)

USERS_KEY = "brewvote_users"
SESSIONS_KEY = "brewvote_sessions"
VOTES_KEY = "brewvote_votes"
CURRENT_USER_KEY = "brewvote_current_user"

Document = dict[str, object]


@dataclass
class JsonFileStore:
    """Thread-safe JSON document; ``path=None`` keeps it in memory only."""

    path: Path | None = None
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)
    _cache: Document | None = field(default=None, repr=False)

    @contextmanager
    def transaction(self) -> Iterator[Document]:
        """Yield a working copy under the lock; it replaces the cache once saved."""
        with self._lock:
            document = copy.deepcopy(self._load())
            yield document
            self._save(document)
            self._cache = document

    def snapshot(self) -> Document:
        with self._lock:
            return json.loads(json.dumps(self._load()))

    def _load(self) -> Document:
        if self._cache is not None:
            return self._cache
        document: Document = {}
        if self.path is not None and self.path.exists():
            try:
                document = json.loads(self.path.read_text(encoding="utf-8") or "{}")
            except (OSError, json.JSONDecodeError) as exc:
                logger.exception("Failed to read local store %s", self.path)
                raise StorageFailureError("Failed to read local store") from exc
        for key in (USERS_KEY, SESSIONS_KEY, VOTES_KEY):
            document.setdefault(key, [])
        document.setdefault(CURRENT_USER_KEY, None)
        self._cache = document
        return document

    def _save(self, document: Document) -> None:
        if self.path is None:
            return
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            tmp_path.write_text(json.dumps(document, indent=2), encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as exc:
            logger.exception("Failed to write local store %s", self.path)
            raise StorageFailureError("Failed to write local store") from exc

    def get_current_user(self) -> UserRecord | None:
        raw = self.snapshot().get(CURRENT_USER_KEY)
        return _user_from_row(raw) if isinstance(raw, dict) else None

    def set_current_user(self, user: UserRecord | None) -> None:
        with self.transaction() as document:
            document[CURRENT_USER_KEY] = _user_to_row(user) if user else None


@dataclass
class LocalUserRepository(UserRepository):
    """User repository over the JSON store."""

    store: JsonFileStore

    def get_user(self, user_id: str) -> UserRecord | None:
        for row in self.store.snapshot()[USERS_KEY]:
            if row["id"] == user_id:
                return _user_from_row(row)
        return None

    def get_by_employee_id(
        self, employee_id: str, role: Role | None = None
    ) -> UserRecord | None:
        for row in self.store.snapshot()[USERS_KEY]:
            if row["employeeId"] != employee_id:
                continue
            if role is not None and row["role"] != role.value:
                continue
            return _user_from_row(row)
        return None

    def create_user(self, employee_id: str, name: str | None, role: Role) -> UserRecord:
        user = UserRecord(
            id=str(uuid4()),
            employee_id=employee_id,
            name=name,
            role=role,
            created_at=datetime.now(tz=UTC),
        )
        with self.store.transaction() as document:
            users = document[USERS_KEY]
            if any(row["employeeId"] == employee_id for row in users):
                raise StorageFailureError(f"Employee id {employee_id} already exists")
            users.append(_user_to_row(user))
        return user

    def list_users(self) -> list[UserRecord]:
        return [_user_from_row(row) for row in self.store.snapshot()[USERS_KEY]]


@dataclass
class LocalSessionRepository(SessionRepository):
    """Session repository over the JSON store."""

    store: JsonFileStore

    def get_session(self, session_id: str) -> SessionRecord | None:
        for row in self.store.snapshot()[SESSIONS_KEY]:
            if row["id"] == session_id:
                return _session_from_row(row)
        return None

    def get_active_session(self) -> SessionRecord | None:
        for row in self.store.snapshot()[SESSIONS_KEY]:
            if row["isActive"]:
                return _session_from_row(row)
        return None

    def list_sessions(self) -> list[SessionRecord]:
        rows = reversed(self.store.snapshot()[SESSIONS_KEY])
        sessions = [_session_from_row(row) for row in rows]
        return sorted(sessions, key=lambda session: session.start_time, reverse=True)

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
        with self.store.transaction() as document:
            document[SESSIONS_KEY].append(_session_to_row(session))
        return session

    def deactivate_active_sessions(self, end_time: datetime) -> None:
        with self.store.transaction() as document:
            for row in document[SESSIONS_KEY]:
                if row["isActive"]:
                    row["isActive"] = False
                    row["endTime"] = end_time.isoformat()

    def end_session(self, session_id: str, end_time: datetime) -> SessionRecord | None:
        with self.store.transaction() as document:
            for row in document[SESSIONS_KEY]:
                if row["id"] == session_id:
                    row["isActive"] = False
                    row["endTime"] = end_time.isoformat()
                    return _session_from_row(row)
        return None

    def increment_total_votes(self, session_id: str) -> None:
        with self.store.transaction() as document:
            for row in document[SESSIONS_KEY]:
                if row["id"] == session_id:
                    row["totalVotes"] = int(row["totalVotes"]) + 1

    def set_total_votes(self, session_id: str, total_votes: int) -> None:
        with self.store.transaction() as document:
            for row in document[SESSIONS_KEY]:
                if row["id"] == session_id:
                    row["totalVotes"] = total_votes

    def delete_session(self, session_id: str) -> None:
        with self.store.transaction() as document:
            document[SESSIONS_KEY] = [
                row for row in document[SESSIONS_KEY] if row["id"] != session_id
            ]


@dataclass
class LocalVoteRepository(VoteRepository):
    """Vote repository over the JSON store."""

    store: JsonFileStore

    def get_vote(self, session_id: str, user_id: str) -> VoteRecord | None:
        for row in self.store.snapshot()[VOTES_KEY]:
            if row["sessionId"] == session_id and row["userId"] == user_id:
                return _vote_from_row(row)
        return None

    def create_vote(
        self,
        session_id: str,
        user_id: str,
        user_name: str | None,
        vote_type: VoteType,
        timestamp: datetime,
    ) -> VoteRecord:
        vote = VoteRecord(
            id=str(uuid4()),
            session_id=session_id,
            user_id=user_id,
            user_name=user_name,
            type=vote_type,
            timestamp=timestamp,
        )
        with self.store.transaction() as document:
            votes = document[VOTES_KEY]
            for row in votes:
                if row["sessionId"] == session_id and row["userId"] == user_id:
                    raise DuplicateVoteError(session_id, user_id)
            votes.append(_vote_to_row(vote))
        return vote

    def list_votes(self) -> list[VoteRecord]:
        return [_vote_from_row(row) for row in self.store.snapshot()[VOTES_KEY]]

    def list_session_votes(self, session_id: str) -> list[VoteRecord]:
        return [
            _vote_from_row(row)
            for row in self.store.snapshot()[VOTES_KEY]
            if row["sessionId"] == session_id
        ]

    def count_session_votes(self, session_id: str) -> int:
        return len(self.list_session_votes(session_id))

    def delete_session_votes(self, session_id: str) -> None:
        with self.store.transaction() as document:
            document[VOTES_KEY] = [
                row for row in document[VOTES_KEY] if row["sessionId"] != session_id
            ]


def _parse_datetime(raw: object) -> datetime | None:
    if isinstance(raw, str) and raw:
        return datetime.fromisoformat(raw)
    return None


def _user_to_row(user: UserRecord) -> dict[str, object]:
    return {
        "id": user.id,
        "employeeId": user.employee_id,
        "name": user.name,
        "role": user.role.value,
        "createdAt": user.created_at.isoformat() if user.created_at else None,
    }


def _user_from_row(row: dict[str, object]) -> UserRecord:
    return UserRecord(
        id=str(row["id"]),
        employee_id=str(row["employeeId"]),
        name=row.get("name"),
        role=Role(row["role"]),
        created_at=_parse_datetime(row.get("createdAt")),
    )


def _session_to_row(session: SessionRecord) -> dict[str, object]:
    return {
        "id": session.id,
        "startTime": session.start_time.isoformat(),
        "endTime": session.end_time.isoformat() if session.end_time else None,
        "isActive": session.is_active,
        "totalVotes": session.total_votes,
        "createdBy": session.created_by,
    }


def _session_from_row(row: dict[str, object]) -> SessionRecord:
    return SessionRecord(
        id=str(row["id"]),
        start_time=datetime.fromisoformat(str(row["startTime"])),
        end_time=_parse_datetime(row.get("endTime")),
        is_active=bool(row["isActive"]),
        total_votes=int(row["totalVotes"]),
        created_by=row.get("createdBy"),
    )


def _vote_to_row(vote: VoteRecord) -> dict[str, object]:
    return {
        "id": vote.id,
        "sessionId": vote.session_id,
        "userId": vote.user_id,
        "userName": vote.user_name,
        "type": vote.type.value,
        "timestamp": vote.timestamp.isoformat(),
    }


def _vote_from_row(row: dict[str, object]) -> VoteRecord:
    return VoteRecord(
        id=str(row["id"]),
        session_id=str(row["sessionId"]),
        user_id=str(row["userId"]),
        user_name=row.get("userName"),
        type=VoteType(row["type"]),
        timestamp=datetime.fromisoformat(str(row["timestamp"])),
    )
