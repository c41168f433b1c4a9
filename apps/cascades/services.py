"""
Cascade orchestration services.

This module contains the entry point for `check_run` webhook deliveries. It
decides which stage completed and advances the pipeline:

    tag-git ──▶ git-artifacts-x86_64 ─┐
            ├─▶ git-artifacts-i686 ───┼─▶ upload-snapshot
            └─▶ git-artifacts-aarch64 ┘

There is no state store: every decision is derived from the check-runs on the
commit, so re-delivering the same event is safe.
"""

from __future__ import annotations

import logging
from typing import Any

from apps.cascades.conf import FIRST_STAGE, CascadeSettings
from apps.cascades.dtos import CheckRunEvent, StageDescriptor
from apps.cascades.exceptions import UnexpectedProvenance
from apps.cascades.fanin import FanInJoin
from apps.cascades.fanout import FanOutDispatcher
from apps.cascades.resolver import StageResolver
from apps.github.services import GitHubServices, default_services

logger = logging.getLogger(__name__)


class CascadeOrchestrator:
    """
    Orchestrates the cascade for one inbound check_run event.

    Usage:
        orchestrator = CascadeOrchestrator()
        report = orchestrator.process_webhook(payload)
    """

    def __init__(
        self,
        github: GitHubServices | None = None,
        config: CascadeSettings | None = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            github: GitHub collaborators (default: process-wide instance).
            config: Cascade topology (default: from Django settings).
        """
        self.github = github or default_services()
        self.config = config or CascadeSettings.from_django()
        self.resolver = StageResolver(self.config)
        self.fan_out = FanOutDispatcher(self.github, self.config)
        self.fan_in = FanInJoin(self.github, self.config)

    def process_webhook(self, payload: dict[str, Any]) -> str:
        """
        Process a `check_run` webhook payload.

        Returns:
            Human-readable report of what was (or was not) done.

        Raises:
            CascadeError: Fatal problems with the event (see apps.cascades.exceptions).
            GitHubApiError: Unexpected answers from the GitHub API.
        """
        event = CheckRunEvent.from_payload(payload)
        return self.process_event(event)

    def process_event(self, event: CheckRunEvent) -> str:
        if event.action != "completed":
            return f"Unhandled action: {event.action}"

        if event.name == FIRST_STAGE:
            return self._handle_first_stage(event)

        if event.repository == self.config.check_run_repository and self.resolver.is_fan_out_member(
            event.name
        ):
            stage = self.resolver.resolve_fan_out_member(event)
            return self.fan_in.join(stage, event)

        return f"Not a cascading run: {event.name}; Doing nothing."

    def _handle_first_stage(self, event: CheckRunEvent) -> str:
        if event.repository != self.config.check_run_repository:
            raise UnexpectedProvenance(
                f"Refusing to handle cascading run in {event.owner}/{event.repo}"
            )

        stage = self.resolver.resolve_first_stage(event)
        report = self.fan_out.dispatch(stage)
        self._annotate(event, stage, report)
        return report

    def _annotate(self, event: CheckRunEvent, stage: StageDescriptor, report: str) -> None:
        """Append the report to the PR comment that requested the tag-git run."""
        token = self.github.tokens.get(event.owner, event.repo)
        comment_id = self.github.issues.find_artifacts_comment_id(
            token,
            event.owner,
            event.repo,
            stage.commit_sha,
            event.check_run.details_url,
        )
        if comment_id:
            self.github.issues.append_to_comment(token, event.owner, event.repo, comment_id, report)
        else:
            logger.info(f"No comment to annotate for {event.name} run {event.check_run.id}")
