"""Pydantic request and response models for the HTTP API."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from brewvote.domain.models import SessionRecord, UserRecord, VoteRecord
from brewvote.domain.stats import SessionHistoryEntry, TrendPoint, VoteTotals


class CamelModel(BaseModel):
    """Base model that speaks camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LoginRequest(CamelModel):
    """Login payload; missing fields are validated by the service."""

    employee_id: str | None = None
    name: str | None = None
    role: str | None = None


class VoteRequest(CamelModel):
    """Vote payload; missing fields are validated by the service."""

    session_id: str | None = None
    user_id: str | None = None
    user_name: str | None = None
    type: str | None = None


class UserOut(CamelModel):
    """User as returned by the API."""

    id: str
    employee_id: str
    name: str | None = None
    role: str
    created_at: datetime | None = None

    @classmethod
    def from_record(cls, user: UserRecord) -> "UserOut":
        return cls(
            id=user.id,
            employee_id=user.employee_id,
            name=user.name,
            role=user.role.value,
            created_at=user.created_at,
        )


class SessionOut(CamelModel):
    """Session as returned by the API."""

    id: str
    start_time: datetime
    end_time: datetime | None = None
    is_active: bool
    total_votes: int
    created_by: str | None = None

    @classmethod
    def from_record(cls, session: SessionRecord) -> "SessionOut":
        return cls(
            id=session.id,
            start_time=session.start_time,
            end_time=session.end_time,
            is_active=session.is_active,
            total_votes=session.total_votes,
            created_by=session.created_by,
        )


class VoteOut(CamelModel):
    """Vote as returned by the API."""

    id: str
    session_id: str
    user_id: str
    user_name: str | None = None
    type: str
    timestamp: datetime

    @classmethod
    def from_record(cls, vote: VoteRecord) -> "VoteOut":
        return cls(
            id=vote.id,
            session_id=vote.session_id,
            user_id=vote.user_id,
            user_name=vote.user_name,
            type=vote.type.value,
            timestamp=vote.timestamp,
        )


class StatsOut(CamelModel):
    """Aggregate counts across all votes."""

    coffee_total: int
    tea_total: int
    total_votes: int

    @classmethod
    def from_totals(cls, totals: VoteTotals) -> "StatsOut":
        return cls(
            coffee_total=totals.coffee_total,
            tea_total=totals.tea_total,
            total_votes=totals.total_votes,
        )


class HistoryEntryOut(CamelModel):
    """Ended session with its vote breakdown."""

    session_id: str
    start_time: datetime
    end_time: datetime | None = None
    total_votes: int
    coffee: int
    tea: int
    coffee_voters: list[str]
    tea_voters: list[str]

    @classmethod
    def from_entry(cls, entry: SessionHistoryEntry) -> "HistoryEntryOut":
        return cls(
            session_id=entry.session_id,
            start_time=entry.start_time,
            end_time=entry.end_time,
            total_votes=entry.total_votes,
            coffee=entry.coffee,
            tea=entry.tea,
            coffee_voters=entry.coffee_voters,
            tea_voters=entry.tea_voters,
        )


class TrendPointOut(CamelModel):
    """One bar group of the trends chart."""

    session_id: str
    start_time: datetime
    coffee: int
    tea: int

    @classmethod
    def from_point(cls, point: TrendPoint) -> "TrendPointOut":
        return cls(
            session_id=point.session_id,
            start_time=point.start_time,
            coffee=point.coffee,
            tea=point.tea,
        )
