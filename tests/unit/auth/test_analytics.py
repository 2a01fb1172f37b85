"""Unit tests for usage analytics."""

from __future__ import annotations

import pytest

from repo_analyzer.auth.analytics import ACTIVITY_LOG_LIMIT, UsageAnalytics


pytestmark = pytest.mark.unit


class TestUsageAnalytics:
    """Tests for UsageAnalytics."""

    def test_counts_logins_and_analyses(self) -> None:
        analytics = UsageAnalytics()

        analytics.record_login("octocat")
        analytics.record_login("admin", admin=True)
        analytics.record_analysis("octocat", "python", "cpython")

        snapshot = analytics.snapshot()
        assert snapshot.total_logins == 2
        assert snapshot.total_repos_analyzed == 1
        assert [e.action for e in snapshot.activity_log] == [
            "analyzed python/cpython",
            "admin_login",
            "login",
        ]

    def test_activity_log_is_capped(self) -> None:
        """Should keep only the most recent entries while counting all."""
        analytics = UsageAnalytics()

        for i in range(ACTIVITY_LOG_LIMIT + 10):
            analytics.record_login(f"user{i}")

        snapshot = analytics.snapshot()
        assert snapshot.total_logins == ACTIVITY_LOG_LIMIT + 10
        assert len(snapshot.activity_log) == ACTIVITY_LOG_LIMIT
        assert snapshot.activity_log[0].username == f"user{ACTIVITY_LOG_LIMIT + 9}"
        assert snapshot.activity_log[-1].username == "user10"
