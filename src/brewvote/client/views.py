"""View state derived on every poll tick."""

from dataclasses import dataclass, field
from datetime import timedelta
from enum import StrEnum

from brewvote.api.models import SessionOut, StatsOut, UserOut


class EmployeeViewState(StrEnum):
    """What the employee dashboard shows."""

    WAITING = "waiting"
    VOTING = "voting"
    VOTED = "voted"


@dataclass(frozen=True)
class EmployeeView:
    state: EmployeeViewState
    session_id: str | None = None
    choice: str | None = None


@dataclass(frozen=True)
class AdminView:
    """Live admin dashboard snapshot."""

    totals: StatsOut
    session: SessionOut | None = None
    session_coffee: int = 0
    session_tea: int = 0
    pending: list[UserOut] = field(default_factory=list)
    remaining: timedelta | None = None
    ended_session_id: str | None = None

    @property
    def session_total(self) -> int:
        return self.session_coffee + self.session_tea


def format_timer(remaining: timedelta) -> str:
    """Format remaining time as ``Xm Ys``."""
    seconds = max(int(remaining.total_seconds()), 0)
    minutes, seconds = divmod(seconds, 60)
    return f"{minutes}m {seconds}s"


def format_pending(pending: list[UserOut]) -> str:
    if not pending:
        return "All votes cast!"
    return ", ".join(user.name or user.employee_id for user in pending)


def format_share(count: int, total: int) -> str:
    """Format a bar height as a percentage of the session total."""
    if total <= 0:
        return "0%"
    return f"{count / total * 100:.0f}%"


def render_employee_view(view: EmployeeView) -> str:
    if view.state == EmployeeViewState.VOTED:
        return f"You voted: {view.choice}"
    if view.state == EmployeeViewState.VOTING:
        return "Voting is open! Coffee or Tea?"
    return "Waiting for the next session..."


def render_admin_view(view: AdminView) -> str:
    lines = [
        f"All time: {view.totals.coffee_total} coffee / {view.totals.tea_total} tea",
    ]
    if view.session is None:
        lines.append("No active session.")
        return "\n".join(lines)
    total = view.session_total
    lines.extend(
        [
            f"Time left: {format_timer(view.remaining or timedelta(0))}",
            f"Coffee: {view.session_coffee} ({format_share(view.session_coffee, total)})",
            f"Tea: {view.session_tea} ({format_share(view.session_tea, total)})",
            f"Pending ({len(view.pending)}): {format_pending(view.pending)}",
        ]
    )
    return "\n".join(lines)
