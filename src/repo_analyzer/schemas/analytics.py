"""Admin analytics schemas."""

from __future__ import annotations

from datetime import datetime

from repo_analyzer.auth.analytics import AnalyticsSnapshot
from repo_analyzer.schemas.base import APIResponse


class ActivityEntryResponse(APIResponse):
    username: str
    action: str
    time: datetime


class AnalyticsResponse(APIResponse):
    """``GET /api/admin/analytics``."""

    total_logins: int
    total_repos_analyzed: int
    activity_log: list[ActivityEntryResponse]

    @classmethod
    def from_snapshot(cls, snapshot: AnalyticsSnapshot) -> AnalyticsResponse:
        return cls(
            total_logins=snapshot.total_logins,
            total_repos_analyzed=snapshot.total_repos_analyzed,
            activity_log=[
                ActivityEntryResponse(username=e.username, action=e.action, time=e.time)
                for e in snapshot.activity_log
            ],
        )
