"""
Bundle of GitHub collaborators handed to the cascade engine.

The cascade engine never builds HTTP requests itself; it receives a
GitHubServices instance. Tests pass fakes, production code uses
default_services(), which lives for the whole process so its TokenCache is
filled once per (owner, repository).
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from apps.github.auth import TokenCache, TokenProvider
from apps.github.check_runs import CheckRunRegistry
from apps.github.client import GitHubClient
from apps.github.issues import IssueAnnotator
from apps.github.repositories import RepositoryQueries
from apps.github.workflows import WorkflowDispatcher


@dataclass
class GitHubServices:
    tokens: TokenCache
    check_runs: CheckRunRegistry
    workflows: WorkflowDispatcher
    repositories: RepositoryQueries
    issues: IssueAnnotator

    @classmethod
    def build(
        cls,
        client: GitHubClient | None = None,
        token_provider: TokenProvider | None = None,
    ) -> "GitHubServices":
        client = client or GitHubClient()
        return cls(
            tokens=TokenCache(token_provider),
            check_runs=CheckRunRegistry(client),
            workflows=WorkflowDispatcher(client),
            repositories=RepositoryQueries(client),
            issues=IssueAnnotator(client),
        )


@lru_cache(maxsize=1)
def default_services() -> GitHubServices:
    """Process-wide collaborators configured from Django settings."""
    return GitHubServices.build()
