"""GitHub OAuth and REST API clients."""

from repo_analyzer.clients.github.oauth import (
    GitHubIdentityFetcher,
    GitHubTokenExchangeClient,
)
from repo_analyzer.clients.github.repositories import (
    InvalidRepositoryURL,
    RepositoryMetricsClient,
    RepositoryNotFound,
    parse_repository_url,
)


__all__ = [
    "GitHubIdentityFetcher",
    "GitHubTokenExchangeClient",
    "InvalidRepositoryURL",
    "RepositoryMetricsClient",
    "RepositoryNotFound",
    "parse_repository_url",
]
