"""Domain models for the voting tool."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


class Role(StrEnum):
    """User roles."""

    EMPLOYEE = "EMPLOYEE"
    ADMIN = "ADMIN"


class VoteType(StrEnum):
    """The closed set of choices a vote can carry."""

    COFFEE = "COFFEE"
    TEA = "TEA"


@dataclass(frozen=True)
class UserRecord:
    """Represents a user stored in the record store."""

    id: str
    employee_id: str
    name: str | None
    role: Role
    created_at: datetime | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


@dataclass(frozen=True)
class SessionRecord:
    """Represents a single timed voting window."""

    id: str
    start_time: datetime
    end_time: datetime | None
    is_active: bool
    total_votes: int
    created_by: str | None = None


@dataclass(frozen=True)
class VoteRecord:
    """One user's choice within a session."""

    id: str
    session_id: str
    user_id: str
    user_name: str | None
    type: VoteType
    timestamp: datetime
