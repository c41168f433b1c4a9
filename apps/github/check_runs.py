"""Check-run registry: list and queue check-runs on a commit.

Check-runs are the only durable state the cascade engine has, so CheckRun keeps
the free-text output fields verbatim.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote, urlencode

from apps.github.client import GitHubClient

logger = logging.getLogger(__name__)

PER_PAGE = 100


@dataclass
class CheckRunOutput:
    title: str = ""
    summary: str = ""
    text: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any] | None) -> "CheckRunOutput":
        data = data or {}
        return cls(
            title=data.get("title") or "",
            summary=data.get("summary") or "",
            text=data.get("text") or "",
        )


@dataclass
class CheckRun:
    """A check-run as returned by the GitHub API (or a webhook's check_run object)."""

    id: int
    name: str
    head_sha: str
    status: str  # "queued", "in_progress" or "completed"
    conclusion: str | None = None
    html_url: str = ""
    details_url: str = ""
    url: str = ""
    output: CheckRunOutput = field(default_factory=CheckRunOutput)

    @property
    def is_completed(self) -> bool:
        return self.status == "completed"

    @property
    def succeeded(self) -> bool:
        return self.is_completed and self.conclusion == "success"

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "CheckRun":
        return cls(
            id=int(data["id"]),
            name=data.get("name") or "",
            head_sha=data.get("head_sha") or "",
            status=data.get("status") or "",
            conclusion=data.get("conclusion"),
            html_url=data.get("html_url") or "",
            details_url=data.get("details_url") or "",
            url=data.get("url") or "",
            output=CheckRunOutput.from_api(data.get("output")),
        )


class CheckRunRegistry:
    """List and create check-runs through the REST API."""

    def __init__(self, client: GitHubClient | None = None):
        self.client = client or GitHubClient()

    def list_for_commit(
        self,
        token: str,
        owner: str,
        repo: str,
        commit_sha: str,
        workflow_name: str,
    ) -> list[CheckRun]:
        """Return every check-run named `workflow_name` on `commit_sha` (all attempts)."""
        runs: list[CheckRun] = []
        page = 1
        while True:
            query = urlencode(
                {
                    "check_name": workflow_name,
                    "filter": "all",
                    "per_page": PER_PAGE,
                    "page": page,
                }
            )
            answer = self.client.request(
                "GET",
                f"/repos/{owner}/{repo}/commits/{quote(commit_sha)}/check-runs?{query}",
                token=token,
            ) or {}
            batch = answer.get("check_runs") or []
            runs.extend(CheckRun.from_api(item) for item in batch)
            if len(batch) < PER_PAGE:
                return runs
            page += 1

    def queue(
        self,
        token: str,
        owner: str,
        repo: str,
        commit_sha: str,
        workflow_name: str,
        title: str,
        summary: str,
    ) -> CheckRun:
        """Create a check-run in the "queued" state."""
        answer = self.client.request(
            "POST",
            f"/repos/{owner}/{repo}/check-runs",
            token=token,
            body={
                "name": workflow_name,
                "head_sha": commit_sha,
                "status": "queued",
                "output": {"title": title, "summary": summary},
            },
        )
        run = CheckRun.from_api(answer)
        logger.info(f"Queued {workflow_name} check-run {run.id} on {owner}/{repo}@{commit_sha}")
        return run
