"""Workflow dispatcher: start a workflow_dispatch run and find its URL."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable
from urllib.parse import urlencode

from django.conf import settings
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from apps.github.client import GitHubClient

logger = logging.getLogger(__name__)

# Tolerated clock skew between this host and GitHub when matching new runs.
CLOCK_SKEW = timedelta(seconds=30)


@dataclass
class WorkflowRun:
    id: int
    html_url: str


class WorkflowDispatcher:
    """
    Request a workflow run with a set of inputs.

    GitHub's dispatch endpoint answers 204 without identifying the run it
    created. The workflow_dispatch runs on the ref are therefore listed before
    the request, and afterwards the newest run that was not in that listing
    (and was created after the request) is taken, retrying a bounded number
    of times.
    """

    def __init__(
        self,
        client: GitHubClient | None = None,
        lookup_attempts: int | None = None,
        lookup_interval: float | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.client = client or GitHubClient()
        self.lookup_attempts = (
            lookup_attempts
            if lookup_attempts is not None
            else int(getattr(settings, "GITHUB_DISPATCH_LOOKUP_ATTEMPTS", 5))
        )
        self.lookup_interval = (
            lookup_interval
            if lookup_interval is not None
            else float(getattr(settings, "GITHUB_DISPATCH_LOOKUP_INTERVAL", 2))
        )
        self.sleep = sleep

    def dispatch(
        self,
        token: str,
        owner: str,
        repo: str,
        workflow_file: str,
        ref: str,
        inputs: dict[str, str],
    ) -> WorkflowRun:
        known_ids = {
            int(run["id"]) for run in self._list_runs(token, owner, repo, workflow_file, ref)
        }
        requested_at = timezone.now()
        self.client.request(
            "POST",
            f"/repos/{owner}/{repo}/actions/workflows/{workflow_file}/dispatches",
            token=token,
            body={"ref": ref, "inputs": inputs},
        )
        logger.info(f"Dispatched {owner}/{repo} {workflow_file}@{ref} with inputs {inputs}")

        for attempt in range(1, self.lookup_attempts + 1):
            run = self._find_new_run(
                token, owner, repo, workflow_file, ref, requested_at, known_ids
            )
            if run:
                return run
            if attempt < self.lookup_attempts:
                self.sleep(self.lookup_interval)

        raise RuntimeError(
            f"Could not find the {workflow_file} run dispatched on {owner}/{repo}@{ref}"
        )

    def _list_runs(
        self, token: str, owner: str, repo: str, workflow_file: str, ref: str
    ) -> list[dict[str, Any]]:
        query = urlencode({"branch": ref, "event": "workflow_dispatch", "per_page": 20})
        answer: dict[str, Any] = self.client.request(
            "GET",
            f"/repos/{owner}/{repo}/actions/workflows/{workflow_file}/runs?{query}",
            token=token,
        ) or {}
        return answer.get("workflow_runs") or []

    def _find_new_run(
        self,
        token: str,
        owner: str,
        repo: str,
        workflow_file: str,
        ref: str,
        requested_at: datetime,
        known_ids: set[int],
    ) -> WorkflowRun | None:
        candidates = []
        for run in self._list_runs(token, owner, repo, workflow_file, ref):
            if int(run["id"]) in known_ids:
                continue
            created_at = parse_datetime(run.get("created_at") or "")
            if created_at and created_at >= requested_at - CLOCK_SKEW:
                candidates.append(run)
        if not candidates:
            return None

        newest = max(candidates, key=lambda run: int(run["id"]))
        return WorkflowRun(id=int(newest["id"]), html_url=newest.get("html_url") or "")
