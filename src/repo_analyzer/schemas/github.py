"""Shapes of the GitHub REST responses the repository client reads."""

from __future__ import annotations

from pydantic import Field

from repo_analyzer.schemas.base import DownstreamResponse


class GitHubOwner(DownstreamResponse):
    login: str
    avatar_url: str | None = None


class GitHubRepository(DownstreamResponse):
    """``GET /repos/{owner}/{repo}``."""

    full_name: str
    name: str
    owner: GitHubOwner
    description: str | None = None
    html_url: str | None = None
    stargazers_count: int = 0
    forks_count: int = 0
    open_issues_count: int = 0
    watchers_count: int = 0
    language: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


class GitHubContributor(DownstreamResponse):
    """Entry of ``GET /repos/{owner}/{repo}/contributors``."""

    login: str | None = None
    contributions: int = 0
    avatar_url: str | None = None
    html_url: str | None = None


class GitHubCommitAuthor(DownstreamResponse):
    name: str | None = None
    date: str | None = None


class GitHubCommitDetail(DownstreamResponse):
    message: str = ""
    author: GitHubCommitAuthor | None = None


class GitHubCommit(DownstreamResponse):
    """Entry of ``GET /repos/{owner}/{repo}/commits``."""

    sha: str
    commit: GitHubCommitDetail


class GitHubSearchResult(DownstreamResponse):
    """``GET /search/issues``; only the count is used."""

    total_count: int = Field(default=0, ge=0)
