"""
Fan-out dispatcher.

Once tag-git succeeded, one git-artifacts-<arch> run is needed per
architecture. Whether a partition already has one is decided purely from the
check-runs on the commit: a check-run whose summary carries this tag-git
run's marker and that is still in flight or succeeded means "already there".
"""

from __future__ import annotations

import concurrent.futures
import logging
from typing import Callable, Iterable

from apps.cascades import codec
from apps.cascades.conf import FAN_OUT_WORKFLOW_FILE, CascadeSettings
from apps.cascades.dtos import ArtifactsTag, StageDescriptor
from apps.github.check_runs import CheckRun
from apps.github.services import GitHubServices

logger = logging.getLogger(__name__)


def latest_matching(runs: Iterable[CheckRun], predicate: Callable[[CheckRun], bool]) -> CheckRun | None:
    """Return the matching run with the highest id.

    Check-run ids are assigned monotonically, so the highest id is the most
    recent attempt. Timestamps are never consulted.
    """
    matching = [run for run in runs if predicate(run)]
    if not matching:
        return None
    return max(matching, key=lambda run: run.id)


class FanOutDispatcher:
    """
    Trigger the missing git-artifacts runs for one tag-git run.

    Usage:
        dispatcher = FanOutDispatcher(github, CascadeSettings.from_django())
        report = dispatcher.dispatch(stage)
    """

    def __init__(self, github: GitHubServices, config: CascadeSettings):
        self.github = github
        self.config = config

    def dispatch(self, stage: StageDescriptor) -> str:
        owner, repo = self.config.check_run_repository
        token = self.github.tokens.get(owner, repo)
        marker = codec.upstream_run_marker(stage.upstream_run_id)
        partitions = self.config.partitions

        # Listing is read-only and independent per partition.
        with concurrent.futures.ThreadPoolExecutor(max_workers=max(len(partitions), 1)) as pool:
            listings = list(
                pool.map(
                    lambda partition: self.github.check_runs.list_for_commit(
                        token,
                        owner,
                        repo,
                        stage.commit_sha,
                        codec.partition_workflow_name(partition),
                    ),
                    partitions,
                )
            )

        report = ""
        to_trigger: list[str] = []
        for partition, runs in zip(partitions, listings):
            workflow_name = codec.partition_workflow_name(partition)
            latest = latest_matching(runs, lambda run: run.output.summary.endswith(marker))
            if latest is None:
                to_trigger.append(partition)
            elif not latest.is_completed or latest.succeeded:
                report += f"{workflow_name} run already exists at {latest.html_url}.\n"
            else:
                # Re-running a failed partition is left to an operator.
                report += f"{workflow_name} run at {latest.html_url} did not succeed; not re-triggering it.\n"

        if not to_trigger:
            return f"{report}No workflows need to be run!\n"

        # Writes stay sequential to keep the check-then-write window small.
        origin_owner, origin_repo = self.config.trusted_origin
        workflow_token = self.github.tokens.get(origin_owner, origin_repo)
        title = codec.artifacts_title(stage.version)
        summary = codec.encode_artifacts_summary(
            ArtifactsTag(
                version=stage.version,
                commit_sha=stage.commit_sha,
                upstream_run_id=stage.upstream_run_id,
            )
        )
        for partition in to_trigger:
            workflow_name = codec.partition_workflow_name(partition)
            self.github.check_runs.queue(
                token, owner, repo, stage.commit_sha, workflow_name, title, summary
            )
            run = self.github.workflows.dispatch(
                workflow_token,
                origin_owner,
                origin_repo,
                FAN_OUT_WORKFLOW_FILE,
                self.config.dispatch_ref,
                {
                    "architecture": partition,
                    "tag_git_workflow_run_id": str(stage.upstream_run_id),
                },
            )
            logger.info(f"Started {workflow_name} for tag-git run {stage.upstream_run_id}: {run.html_url}")
            report += f"The `{workflow_name}` workflow run [was started]({run.html_url}).\n"

        return report
