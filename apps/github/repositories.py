"""Repository-level queries: release existence and branch comparison."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote

from apps.github.client import GitHubApiError, GitHubClient


@dataclass
class Comparison:
    """Result of comparing `base...head`."""

    behind_by: int = 0
    ahead_by: int = 0
    status: str = ""


class RepositoryQueries:
    def __init__(self, client: GitHubClient | None = None):
        self.client = client or GitHubClient()

    def release_exists(self, token: str, owner: str, repo: str, tag: str) -> bool:
        """Probe for a release; a 404 means it does not exist, other errors propagate."""
        try:
            self.client.request(
                "GET", f"/repos/{owner}/{repo}/releases/tags/{quote(tag)}", token=token
            )
        except GitHubApiError as e:
            if e.is_not_found:
                return False
            raise
        return True

    def release_url(self, owner: str, repo: str, tag: str) -> str:
        return f"https://github.com/{owner}/{repo}/releases/tag/{tag}"

    def compare(self, token: str, owner: str, repo: str, base: str, head: str) -> Comparison:
        answer = self.client.request(
            "GET", f"/repos/{owner}/{repo}/compare/{base}...{head}", token=token
        ) or {}
        return Comparison(
            behind_by=int(answer.get("behind_by") or 0),
            ahead_by=int(answer.get("ahead_by") or 0),
            status=answer.get("status") or "",
        )
