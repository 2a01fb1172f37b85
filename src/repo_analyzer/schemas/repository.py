"""Repository metrics response consumed by the dashboard charts."""

from __future__ import annotations

from pydantic import Field

from repo_analyzer.schemas.base import APIResponse


class RepositorySummary(APIResponse):
    """Headline repository metadata."""

    owner: str
    name: str
    full_name: str
    description: str | None = None
    html_url: str | None = None
    stars: int = 0
    forks: int = 0
    open_issues: int = 0
    watchers: int = 0
    primary_language: str | None = None
    updated_at: str | None = None


class LanguageShare(APIResponse):
    """Bytes of one language and its rounded share of the total."""

    name: str
    bytes: int
    percentage: int = Field(..., ge=0, le=100)


class CommitSummary(APIResponse):
    """One of the most recent commits."""

    sha: str = Field(..., description="Abbreviated (7 character) SHA")
    message: str = Field(..., description="First line of the commit message")
    author: str | None = None
    date: str | None = None


class ContributorSummary(APIResponse):
    login: str
    contributions: int
    avatar_url: str | None = None
    html_url: str | None = None


class PullRequestCounts(APIResponse):
    open: int = 0
    closed: int = 0
    total: int = 0


class RepositoryMetrics(APIResponse):
    """Everything the analysis page renders for one repository."""

    repository: RepositorySummary
    languages: list[LanguageShare] = Field(default_factory=list)
    recent_commits: list[CommitSummary] = Field(default_factory=list)
    contributors: list[ContributorSummary] = Field(default_factory=list)
    pull_requests: PullRequestCounts = Field(default_factory=PullRequestCounts)
