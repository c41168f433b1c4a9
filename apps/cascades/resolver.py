"""
Stage resolver.

Turns a completed check-run into a StageDescriptor. The CI workflows promise
machine-parseable output, so anything unexpected is raised loudly instead of
being guessed around.
"""

from __future__ import annotations

import logging

from apps.cascades import codec
from apps.cascades.conf import CascadeSettings
from apps.cascades.dtos import CheckRunEvent, StageDescriptor
from apps.cascades.exceptions import (
    MalformedStageOutput,
    ProvenanceMismatch,
    UpstreamStageFailed,
)

logger = logging.getLogger(__name__)


class StageResolver:
    def __init__(self, config: CascadeSettings):
        self.config = config

    def is_fan_out_member(self, name: str) -> bool:
        return codec.partition_from_workflow_name(name, self.config.partitions) is not None

    def resolve_first_stage(self, event: CheckRunEvent) -> StageDescriptor:
        """
        Resolve a completed tag-git check-run.

        Raises:
            UpstreamStageFailed: The run did not conclude with success.
            MalformedCorrelationData: The text or summary cannot be parsed.
            UnexpectedProvenance: The linked workflow run is not from the trusted origin.
            ProvenanceMismatch: The summary names another commit than the event.
        """
        run = event.check_run
        context = f"{run.name} run {run.id}: {run.html_url or run.url}"

        if run.conclusion != "success":
            raise UpstreamStageFailed(
                f"{run.name} run {run.id} completed with {run.conclusion}: {run.html_url}",
                url=run.html_url,
            )

        origin = codec.decode_workflow_run_link(
            run.output.text, self.config.trusted_origin, context=context
        )
        version, commit_sha = codec.decode_tag_summary(run.output.summary, context=context)
        if commit_sha != run.head_sha:
            raise ProvenanceMismatch(
                f"Expected {run.head_sha} in summary '{run.output.summary}' of {context}"
            )

        logger.info(f"Resolved {run.name} run {run.id}: Git {version} @{commit_sha}")
        return StageDescriptor(
            workflow_name=run.name,
            commit_sha=commit_sha,
            upstream_run_id=origin.run_id,
            version=version,
            origin=origin,
        )

    def resolve_fan_out_member(self, event: CheckRunEvent) -> StageDescriptor:
        """
        Resolve a completed git-artifacts-<arch> check-run.

        The conclusion is checked by the fan-in join, for every partition,
        after its guard checks.
        """
        run = event.check_run
        partition = codec.partition_from_workflow_name(run.name, self.config.partitions)
        if partition is None:
            raise MalformedStageOutput(f"{run.name} is not a fan-out stage")

        tag = codec.decode_artifacts_summary(run.output.summary, context=f"check-run {run.id}")
        if tag.commit_sha != run.head_sha:
            raise ProvenanceMismatch(
                f"Expected {run.head_sha} in summary '{run.output.summary}' of check-run {run.id}"
            )

        return StageDescriptor(
            workflow_name=run.name,
            commit_sha=tag.commit_sha,
            upstream_run_id=tag.upstream_run_id,
            version=tag.version,
            partition_key=partition,
        )
