"""Domain models for vote statistics."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class VoteTotals:
    """Vote counts by choice."""

    coffee_total: int
    tea_total: int
    total_votes: int


@dataclass(frozen=True)
class SessionHistoryEntry:
    """An ended session with its vote breakdown."""

    session_id: str
    start_time: datetime
    end_time: datetime | None
    total_votes: int
    coffee: int
    tea: int
    coffee_voters: list[str] = field(default_factory=list)
    tea_voters: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class TrendPoint:
    """Per-session counts used for the trends chart."""

    session_id: str
    start_time: datetime
    coffee: int
    tea: int
