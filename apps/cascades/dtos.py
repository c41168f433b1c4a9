"""
Data Transfer Objects for the cascade engine.

The engine works on these typed values only; their text representation on
check-runs is the business of apps.cascades.codec.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from apps.cascades.exceptions import MalformedStageOutput
from apps.github.check_runs import CheckRun


@dataclass(frozen=True)
class WorkflowRunRef:
    """Identifies a workflow run: https://github.com/<owner>/<repo>/actions/runs/<run_id>."""

    owner: str
    repo: str
    run_id: int


@dataclass(frozen=True)
class ArtifactsTag:
    """Correlation data carried by the summary of a fanned-out check-run."""

    version: str
    commit_sha: str
    upstream_run_id: int


@dataclass(frozen=True)
class StageDescriptor:
    """
    What a completed check-run means for the cascade.

    partition_key is only set for fan-out members (the architecture).
    """

    workflow_name: str
    commit_sha: str
    upstream_run_id: int
    version: str
    origin: WorkflowRunRef | None = None
    partition_key: str | None = None


@dataclass
class CheckRunEvent:
    """A `check_run` webhook delivery."""

    action: str
    owner: str
    repo: str
    check_run: CheckRun

    @property
    def name(self) -> str:
        return self.check_run.name

    @property
    def repository(self) -> tuple[str, str]:
        return (self.owner, self.repo)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "CheckRunEvent":
        """
        Parse a webhook payload.

        Raises:
            MalformedStageOutput: The payload lacks the repository or check_run objects.
        """
        try:
            repository = payload["repository"]
            check_run = payload["check_run"]
            return cls(
                action=payload.get("action") or "",
                owner=repository["owner"]["login"],
                repo=repository["name"],
                check_run=CheckRun.from_api(check_run),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedStageOutput(f"Unhandled check_run payload: missing or invalid {e}") from e
