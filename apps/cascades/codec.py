"""
Correlation codec.

The CI workflows and this service talk through the free-text fields of
check-runs (title, summary, text). Every pattern used to write or read those
fields is defined here, and each decode is the exact inverse of its encode.

Fragments:
    workflow-run link  For details, see [this run](https://github.com/<owner>/<repo>/actions/runs/<id>)
    tag summary        Tag Git <version> @<sha>
    artifacts title    Build Git <version> artifacts
    artifacts summary  Build Git <version> artifacts from commit <sha> (tag-git run #<id>)
    upload title       Upload snapshot prerelease-<version without leading "v">
"""

from __future__ import annotations

import re

from apps.cascades.conf import FAN_OUT_PREFIX
from apps.cascades.dtos import ArtifactsTag, WorkflowRunRef
from apps.cascades.exceptions import MalformedCorrelationData, UnexpectedProvenance

WORKFLOW_RUN_LINK_RE = re.compile(
    r"For details, see \[this run\]\(https://github\.com/([^/\s]+)/([^/\s]+)/actions/runs/(\d+)\)"
)
TAG_SUMMARY_RE = re.compile(r"Tag Git (\S+) @([0-9a-f]+)")
ARTIFACTS_SUMMARY_RE = re.compile(r"Build Git (\S+) artifacts from commit (\S+) \(tag-git run #(\d+)\)")


def workflow_run_url(ref: WorkflowRunRef) -> str:
    return f"https://github.com/{ref.owner}/{ref.repo}/actions/runs/{ref.run_id}"


def encode_workflow_run_link(ref: WorkflowRunRef) -> str:
    return f"For details, see [this run]({workflow_run_url(ref)})"


def decode_workflow_run_link(
    text: str,
    trusted_origin: tuple[str, str],
    context: str = "check-run",
) -> WorkflowRunRef:
    """
    Extract the workflow run a check-run's text links to.

    Args:
        text: The check-run's `output.text`.
        trusted_origin: The only (owner, repo) allowed to host the run.
        context: Describes the check-run in error messages.

    Raises:
        MalformedCorrelationData: No link in the text.
        UnexpectedProvenance: The link points outside the trusted origin.
    """
    match = WORKFLOW_RUN_LINK_RE.search(text or "")
    if not match:
        raise MalformedCorrelationData(f"Unhandled 'text' attribute of {context}")
    owner, repo, run_id = match.group(1), match.group(2), int(match.group(3))
    if (owner, repo) != tuple(trusted_origin):
        raise UnexpectedProvenance(f"Unexpected repository {owner}/{repo} for {context}")
    return WorkflowRunRef(owner=owner, repo=repo, run_id=run_id)


def encode_tag_summary(version: str, commit_sha: str) -> str:
    return f"Tag Git {version} @{commit_sha}"


def decode_tag_summary(summary: str, context: str = "tag-git run") -> tuple[str, str]:
    """Return (version, commit_sha) from a tag-git summary."""
    match = TAG_SUMMARY_RE.fullmatch(summary or "")
    if not match:
        raise MalformedCorrelationData(
            f"Could not parse Git version from summary '{summary}' of {context}"
        )
    return match.group(1), match.group(2)


def upstream_run_marker(upstream_run_id: int) -> str:
    """The suffix every fanned-out summary ends with."""
    return f"(tag-git run #{upstream_run_id})"


def artifacts_title(version: str) -> str:
    return f"Build Git {version} artifacts"


def encode_artifacts_summary(tag: ArtifactsTag) -> str:
    return (
        f"Build Git {tag.version} artifacts from commit {tag.commit_sha} "
        f"{upstream_run_marker(tag.upstream_run_id)}"
    )


def decode_artifacts_summary(summary: str, context: str = "check-run") -> ArtifactsTag:
    match = ARTIFACTS_SUMMARY_RE.fullmatch(summary or "")
    if not match:
        raise MalformedCorrelationData(f"Could not parse 'summary' attribute of {context}: {summary}")
    return ArtifactsTag(
        version=match.group(1),
        commit_sha=match.group(2),
        upstream_run_id=int(match.group(3)),
    )


def partition_workflow_name(partition: str) -> str:
    return f"{FAN_OUT_PREFIX}{partition}"


def partition_from_workflow_name(name: str, partitions: tuple[str, ...]) -> str | None:
    """Return the partition a fan-out workflow name belongs to, or None."""
    if not name.startswith(FAN_OUT_PREFIX):
        return None
    partition = name[len(FAN_OUT_PREFIX):]
    return partition if partition in partitions else None


def snapshot_tag(version: str) -> str:
    return f"prerelease-{version[1:] if version.startswith('v') else version}"


def upload_title(version: str) -> str:
    return f"Upload snapshot {snapshot_tag(version)}"
