"""Statistics over votes and sessions."""

from dataclasses import dataclass

from brewvote.domain.models import UserRecord, VoteRecord, VoteType
from brewvote.domain.stats import SessionHistoryEntry, TrendPoint, VoteTotals
from brewvote.services.sessions import SessionRepository
from brewvote.services.users import UserService
from brewvote.services.votes import VoteRepository

DEFAULT_TREND_SESSIONS = 7


@dataclass
class StatsService:
    """Service for tallies, pending voters, history and trends."""

    vote_repository: VoteRepository
    session_repository: SessionRepository
    user_service: UserService

    def get_totals(self) -> VoteTotals:
        """Return totals across every vote ever cast."""
        return tally(self.vote_repository.list_votes())

    def get_session_totals(self, session_id: str) -> VoteTotals:
        return tally(self.vote_repository.list_session_votes(session_id))

    def pending_voters(self, session_id: str) -> list[UserRecord]:
        """Return employees that have not voted in the session."""
        voted = {
            vote.user_id for vote in self.vote_repository.list_session_votes(session_id)
        }
        return [
            user for user in self.user_service.list_employees() if user.id not in voted
        ]

    def get_history(self) -> list[SessionHistoryEntry]:
        """Return ended sessions, newest first, with per-choice breakdown."""
        votes_by_session = _group_votes(self.vote_repository.list_votes())
        history = []
        for session in self.session_repository.list_sessions():
            if session.is_active:
                continue
            votes = votes_by_session.get(session.id, [])
            totals = tally(votes)
            history.append(
                SessionHistoryEntry(
                    session_id=session.id,
                    start_time=session.start_time,
                    end_time=session.end_time,
                    total_votes=session.total_votes,
                    coffee=totals.coffee_total,
                    tea=totals.tea_total,
                    coffee_voters=_voter_names(votes, VoteType.COFFEE),
                    tea_voters=_voter_names(votes, VoteType.TEA),
                )
            )
        return history

    def get_trends(self, limit: int = DEFAULT_TREND_SESSIONS) -> list[TrendPoint]:
        """Return the most recent sessions in chronological order."""
        votes_by_session = _group_votes(self.vote_repository.list_votes())
        recent = self.session_repository.list_sessions()[: max(limit, 0)]
        points = []
        for session in reversed(recent):
            totals = tally(votes_by_session.get(session.id, []))
            points.append(
                TrendPoint(
                    session_id=session.id,
                    start_time=session.start_time,
                    coffee=totals.coffee_total,
                    tea=totals.tea_total,
                )
            )
        return points


def tally(votes: list[VoteRecord]) -> VoteTotals:
    """Count votes by choice."""
    coffee = sum(1 for vote in votes if vote.type == VoteType.COFFEE)
    tea = sum(1 for vote in votes if vote.type == VoteType.TEA)
    return VoteTotals(coffee_total=coffee, tea_total=tea, total_votes=len(votes))


def _group_votes(votes: list[VoteRecord]) -> dict[str, list[VoteRecord]]:
    grouped: dict[str, list[VoteRecord]] = {}
    for vote in votes:
        grouped.setdefault(vote.session_id, []).append(vote)
    return grouped


def _voter_names(votes: list[VoteRecord], vote_type: VoteType) -> list[str]:
    return [vote.user_name or vote.user_id for vote in votes if vote.type == vote_type]
