"""
Fan-in join.

upload-snapshot may only start once every git-artifacts-<arch> run that
belongs to the same tag-git run has succeeded. Each git-artifacts completion
re-evaluates the whole group; only the last one to finish gets to dispatch.
"""

from __future__ import annotations

import logging

from apps.cascades import codec
from apps.cascades.conf import FINAL_STAGE, FINAL_WORKFLOW_FILE, CascadeSettings
from apps.cascades.dtos import ArtifactsTag, CheckRunEvent, StageDescriptor
from apps.cascades.exceptions import DownstreamStageFailed
from apps.cascades.fanout import latest_matching
from apps.github.services import GitHubServices

logger = logging.getLogger(__name__)


class FanInJoin:
    """
    Join the git-artifacts partitions into a single upload-snapshot run.

    Usage:
        join = FanInJoin(github, CascadeSettings.from_django())
        report = join.join(stage, event)
    """

    def __init__(self, github: GitHubServices, config: CascadeSettings):
        self.github = github
        self.config = config

    def join(self, stage: StageDescriptor, event: CheckRunEvent) -> str:
        """
        Dispatch upload-snapshot if the whole fan-out group succeeded.

        Returns a report; waiting for other partitions is not an error.

        Raises:
            DownstreamStageFailed: A partition's run completed without success.
            MalformedCorrelationData: A successful run has no parseable run link.
            UnexpectedProvenance: A run links to an untrusted repository.
        """
        guard = self._guard(stage, event)
        if guard:
            logger.info(guard)
            return guard

        owner, repo = self.config.check_run_repository
        token = self.github.tokens.get(owner, repo)
        needle = codec.encode_artifacts_summary(
            ArtifactsTag(
                version=stage.version,
                commit_sha=stage.commit_sha,
                upstream_run_id=stage.upstream_run_id,
            )
        )

        workflow_run_ids: dict[str, str] = {}
        waiting: list[str] = []
        for partition in self.config.partitions:
            workflow_name = codec.partition_workflow_name(partition)
            if workflow_name == event.name:
                # The delivered payload is fresher than any listing.
                runs = [event.check_run]
            else:
                runs = self.github.check_runs.list_for_commit(
                    token, owner, repo, stage.commit_sha, workflow_name
                )
            latest = latest_matching(runs, lambda run: run.output.summary == needle)

            if latest is None:
                waiting.append(
                    f"Won't trigger '{FINAL_STAGE}' in reaction to {event.name} because"
                    f" the '{workflow_name}' run does not exist yet."
                )
                continue
            if not latest.is_completed:
                waiting.append(f"The '{workflow_name}' run at {latest.html_url} did not complete yet.")
                continue
            if not latest.succeeded:
                raise DownstreamStageFailed(
                    f"The '{workflow_name}' run at {latest.html_url} did not succeed.",
                    url=latest.html_url,
                )

            ref = codec.decode_workflow_run_link(
                latest.output.text,
                self.config.trusted_origin,
                context=f"{workflow_name} run {latest.id}: {latest.url or latest.html_url}",
            )
            workflow_run_ids[partition] = str(ref.run_id)

        if waiting:
            return "\n".join(waiting)

        return self._trigger_upload(stage, token, workflow_run_ids)

    def _guard(self, stage: StageDescriptor, event: CheckRunEvent) -> str | None:
        """Return an "ignoring" report when the event is stale or already handled."""
        owner, repo = self.config.check_run_repository
        snapshots_repo = self.config.snapshots_repo
        tag = codec.snapshot_tag(stage.version)

        snapshots_token = self.github.tokens.get(owner, snapshots_repo)
        if self.github.repositories.release_exists(snapshots_token, owner, snapshots_repo, tag):
            url = self.github.repositories.release_url(owner, snapshots_repo, tag)
            return (
                f"Ignoring {event.name} check-run because the snapshot for {stage.commit_sha}"
                f" was already uploaded to {url}"
            )

        token = self.github.tokens.get(owner, repo)
        comparison = self.github.repositories.compare(token, owner, repo, "HEAD", stage.commit_sha)
        if comparison.behind_by > 0:
            return (
                f"Ignoring {event.name} check-run because its corresponding commit"
                f" {stage.commit_sha} is not on the main branch"
            )

        title = codec.upload_title(stage.version)
        existing = latest_matching(
            self.github.check_runs.list_for_commit(token, owner, repo, stage.commit_sha, FINAL_STAGE),
            lambda run: run.output.title == title,
        )
        if existing and (not existing.is_completed or existing.succeeded):
            return f"The '{FINAL_STAGE}' run already exists at {existing.html_url}; nothing to do."

        return None

    def _trigger_upload(
        self, stage: StageDescriptor, token: str, workflow_run_ids: dict[str, str]
    ) -> str:
        owner, repo = self.config.check_run_repository
        title = codec.upload_title(stage.version)
        self.github.check_runs.queue(token, owner, repo, stage.commit_sha, FINAL_STAGE, title, title)

        origin_owner, origin_repo = self.config.trusted_origin
        run = self.github.workflows.dispatch(
            self.github.tokens.get(origin_owner, origin_repo),
            origin_owner,
            origin_repo,
            FINAL_WORKFLOW_FILE,
            self.config.dispatch_ref,
            {
                f"git_artifacts_{partition}_workflow_run_id": run_id
                for partition, run_id in workflow_run_ids.items()
            },
        )
        logger.info(f"Started {FINAL_STAGE} for {stage.commit_sha}: {run.html_url}")
        return f"The '{FINAL_STAGE}' workflow run was started at {run.html_url}"
