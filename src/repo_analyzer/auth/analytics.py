"""In-process usage analytics shown on the admin dashboard.

Counters reset when the process restarts. The activity log keeps the most
recent entries only.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from datetime import UTC, datetime

from repo_analyzer.observability.logging import get_logger


logger = get_logger(__name__)

ACTIVITY_LOG_LIMIT = 50


@dataclass(frozen=True, slots=True)
class ActivityEntry:
    """One line of the admin activity log."""

    username: str
    action: str
    time: datetime


@dataclass(frozen=True, slots=True)
class AnalyticsSnapshot:
    """Point-in-time copy of the counters, newest activity first."""

    total_logins: int
    total_repos_analyzed: int
    activity_log: tuple[ActivityEntry, ...]


class UsageAnalytics:
    """Login and repository analysis counters."""

    def __init__(self, limit: int = ACTIVITY_LOG_LIMIT) -> None:
        self._total_logins = 0
        self._total_repos_analyzed = 0
        self._activity: deque[ActivityEntry] = deque(maxlen=limit)

    def record_login(self, username: str, *, admin: bool = False) -> None:
        self._total_logins += 1
        self._log(username, "admin_login" if admin else "login")

    def record_analysis(self, username: str, owner: str, repo: str) -> None:
        self._total_repos_analyzed += 1
        self._log(username, f"analyzed {owner}/{repo}")

    def snapshot(self) -> AnalyticsSnapshot:
        return AnalyticsSnapshot(
            total_logins=self._total_logins,
            total_repos_analyzed=self._total_repos_analyzed,
            activity_log=tuple(reversed(self._activity)),
        )

    def _log(self, username: str, action: str) -> None:
        self._activity.append(
            ActivityEntry(username=username, action=action, time=datetime.now(UTC))
        )
        logger.debug("Activity recorded", username=username, action=action)
