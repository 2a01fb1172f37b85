"""Read-only GitHub repository metrics for the analysis page.

All reads for one repository run concurrently. Results are cached in Redis
for a few minutes when a cache client is available; a cache failure never
fails the request.
"""

from __future__ import annotations

import asyncio
import re
from typing import TYPE_CHECKING, Any, Final

import httpx
from pydantic import ValidationError

from repo_analyzer.auth.exceptions import UpstreamUnavailable
from repo_analyzer.clients.github.base import GitHubHTTPClient
from repo_analyzer.observability.logging import get_logger
from repo_analyzer.schemas.github import (
    GitHubCommit,
    GitHubContributor,
    GitHubRepository,
    GitHubSearchResult,
)
from repo_analyzer.schemas.repository import (
    CommitSummary,
    ContributorSummary,
    LanguageShare,
    PullRequestCounts,
    RepositoryMetrics,
    RepositorySummary,
)


if TYPE_CHECKING:
    from redis.asyncio import Redis

    from repo_analyzer.core.config.settings import GitHubSettings

logger = get_logger(__name__)

_OWNER = r"[A-Za-z0-9-]+"
_URL_PATTERN = re.compile(
    rf"^(?:https?://)?(?:www\.)?github\.com/(?P<owner>{_OWNER})/(?P<repo>[A-Za-z0-9._-]+?)(?:\.git)?(?:[/?#].*)?$"
)
_SHORT_PATTERN = re.compile(rf"^(?P<owner>{_OWNER})/(?P<repo>[A-Za-z0-9._-]+?)(?:\.git)?$")


class InvalidRepositoryURL(ValueError):
    """The input is neither a GitHub repository URL nor ``owner/repo``."""


class RepositoryNotFound(Exception):
    """GitHub answered 404 for the repository."""

    def __init__(self, owner: str, repo: str) -> None:
        self.owner = owner
        self.repo = repo
        super().__init__(f"Repository {owner}/{repo} not found")


def parse_repository_url(url: str) -> tuple[str, str]:
    """Split a repository reference into ``(owner, repo)``.

    Accepts ``https://github.com/<owner>/<repo>`` with an optional ``.git``
    suffix or trailing path, and the short ``owner/repo`` form.

    Raises:
        InvalidRepositoryURL: The input matches neither form.
    """
    candidate = url.strip()
    match = _URL_PATTERN.match(candidate) or _SHORT_PATTERN.match(candidate)
    if match is None:
        msg = f"Not a GitHub repository URL: {url!r}"
        raise InvalidRepositoryURL(msg)
    return match.group("owner"), match.group("repo")


def language_shares(languages: dict[str, int]) -> list[LanguageShare]:
    """Languages by bytes, largest first, with rounded percentages."""
    total = sum(languages.values())
    shares = [
        LanguageShare(
            name=name,
            bytes=count,
            percentage=round(count / total * 100) if total else 0,
        )
        for name, count in languages.items()
    ]
    return sorted(shares, key=lambda s: s.bytes, reverse=True)


def commit_summaries(commits: list[GitHubCommit], limit: int) -> list[CommitSummary]:
    summaries = []
    for commit in commits[:limit]:
        author = commit.commit.author
        summaries.append(
            CommitSummary(
                sha=commit.sha[:7],
                message=commit.commit.message.split("\n", 1)[0],
                author=author.name if author else None,
                date=author.date if author else None,
            )
        )
    return summaries


def contributor_summaries(contributors: list[GitHubContributor]) -> list[ContributorSummary]:
    summaries = [
        ContributorSummary(
            login=c.login,
            contributions=c.contributions,
            avatar_url=c.avatar_url,
            html_url=c.html_url,
        )
        for c in contributors
        if c.login
    ]
    return sorted(summaries, key=lambda c: c.contributions, reverse=True)


class RepositoryMetricsClient(GitHubHTTPClient):
    """Collect the metrics the dashboard charts need for one repository."""

    CACHE_PREFIX: Final[str] = "repo_metrics"
    EMPTY_REPOSITORY_STATUSES: Final[frozenset[int]] = frozenset({httpx.codes.CONFLICT})

    def __init__(
        self,
        settings: GitHubSettings,
        http_client: httpx.AsyncClient | None = None,
        cache_client: Redis[Any] | None = None,
    ) -> None:
        super().__init__(settings, http_client)
        self._cache = cache_client
        self._limits = settings.repositories

    async def fetch_metrics(
        self,
        owner: str,
        repo: str,
        access_token: str | None = None,
    ) -> RepositoryMetrics:
        """Read repository metadata, contributors, commits, languages and PR counts.

        Raises:
            RepositoryNotFound: GitHub does not know the repository.
            UpstreamUnavailable: Any other failure of the required reads.
        """
        cached = await self._get_from_cache(owner, repo)
        if cached is not None:
            logger.debug("Cache hit for repository metrics", repository=f"{owner}/{repo}")
            return cached

        client = await self._client()
        headers = self._api_headers(access_token)
        base = f"/repos/{owner}/{repo}"

        async def get(
            path: str,
            params: dict[str, Any] | None = None,
            *,
            empty_statuses: frozenset[int] = frozenset(),
        ) -> Any:
            response = await client.get(self._api_url(path), headers=headers, params=params)
            # An empty repository has no contributors (204) and no commits (409)
            if response.status_code == httpx.codes.NO_CONTENT or (
                response.status_code in empty_statuses
            ):
                return []
            response.raise_for_status()
            return response.json()

        try:
            repo_data, contributors, commits, languages, open_prs = await asyncio.gather(
                get(base),
                get(f"{base}/contributors", {"per_page": self._limits.contributors_limit}),
                get(
                    f"{base}/commits",
                    {"per_page": self._limits.commits_limit},
                    empty_statuses=self.EMPTY_REPOSITORY_STATUSES,
                ),
                get(f"{base}/languages"),
                get("/search/issues", self._pr_query(owner, repo, "open")),
            )
        except httpx.HTTPStatusError as e:
            if e.response.status_code == httpx.codes.NOT_FOUND:
                raise RepositoryNotFound(owner, repo) from e
            logger.warning(
                "GitHub repository read failed",
                repository=f"{owner}/{repo}",
                status_code=e.response.status_code,
            )
            msg = f"GitHub returned {e.response.status_code} for {owner}/{repo}"
            raise UpstreamUnavailable(msg) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(
                "GitHub repository read error",
                repository=f"{owner}/{repo}",
                error=str(e),
            )
            msg = f"Cannot read {owner}/{repo} from GitHub"
            raise UpstreamUnavailable(msg) from e

        closed_count = await self._closed_pull_count(get, owner, repo)

        try:
            metrics = self._build_metrics(
                repo_data, contributors, commits, languages, open_prs, closed_count
            )
        except ValidationError as e:
            msg = f"Unexpected GitHub response for {owner}/{repo}"
            raise UpstreamUnavailable(msg) from e

        await self._save_to_cache(owner, repo, metrics)
        return metrics

    @staticmethod
    def _pr_query(owner: str, repo: str, state: str) -> dict[str, Any]:
        return {"q": f"repo:{owner}/{repo} is:pr is:{state}", "per_page": 1}

    async def _closed_pull_count(self, get: Any, owner: str, repo: str) -> int:
        # Search API is rate limited separately; a failure only loses this count
        try:
            data = await get("/search/issues", self._pr_query(owner, repo, "closed"))
            return GitHubSearchResult.model_validate(data).total_count
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(
                "Closed pull request count unavailable",
                repository=f"{owner}/{repo}",
                error=str(e),
            )
            return 0

    def _build_metrics(
        self,
        repo_data: Any,
        contributors: Any,
        commits: Any,
        languages: Any,
        open_prs: Any,
        closed_count: int,
    ) -> RepositoryMetrics:
        repository = GitHubRepository.model_validate(repo_data)
        open_count = GitHubSearchResult.model_validate(open_prs).total_count
        language_bytes = {str(k): int(v) for k, v in (languages or {}).items()}

        return RepositoryMetrics(
            repository=RepositorySummary(
                owner=repository.owner.login,
                name=repository.name,
                full_name=repository.full_name,
                description=repository.description,
                html_url=repository.html_url,
                stars=repository.stargazers_count,
                forks=repository.forks_count,
                open_issues=repository.open_issues_count,
                watchers=repository.watchers_count,
                primary_language=repository.language,
                updated_at=repository.updated_at,
            ),
            languages=language_shares(language_bytes),
            recent_commits=commit_summaries(
                [GitHubCommit.model_validate(c) for c in commits or []],
                self._limits.recent_commits,
            ),
            contributors=contributor_summaries(
                [GitHubContributor.model_validate(c) for c in contributors or []]
            ),
            pull_requests=PullRequestCounts(
                open=open_count,
                closed=closed_count,
                total=open_count + closed_count,
            ),
        )

    def _cache_key(self, owner: str, repo: str) -> str:
        return f"{self.CACHE_PREFIX}:{owner.lower()}/{repo.lower()}"

    async def _get_from_cache(self, owner: str, repo: str) -> RepositoryMetrics | None:
        if self._cache is None:
            return None
        try:
            cached = await self._cache.get(self._cache_key(owner, repo))
            if cached:
                return RepositoryMetrics.model_validate_json(cached)
        except Exception as e:
            logger.warning("Failed to read repository metrics cache", error=str(e))
        return None

    async def _save_to_cache(self, owner: str, repo: str, metrics: RepositoryMetrics) -> None:
        if self._cache is None:
            return
        try:
            await self._cache.set(
                self._cache_key(owner, repo),
                metrics.model_dump_json(),
                ex=self._limits.cache_ttl,
            )
        except Exception as e:
            logger.warning("Failed to cache repository metrics", error=str(e))
