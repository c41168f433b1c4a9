"""Cascade topology, read from Django settings."""

from __future__ import annotations

from dataclasses import dataclass

from django.conf import settings

FIRST_STAGE = "tag-git"
FAN_OUT_PREFIX = "git-artifacts-"
FAN_OUT_WORKFLOW_FILE = "git-artifacts.yml"
FINAL_STAGE = "upload-snapshot"
FINAL_WORKFLOW_FILE = "upload-snapshot.yml"


@dataclass(frozen=True)
class CascadeSettings:
    """
    Where check-runs live, where workflows run and how the fan-out is partitioned.

    check_run_owner/check_run_repo: repository whose commits carry the check-runs.
    workflow_owner/workflow_repo: the single trusted origin of workflow runs.
    snapshots_repo: repository (same owner) where finished snapshots are released.
    partitions: ordered fan-out partition keys (architectures).
    """

    check_run_owner: str = "git-for-windows"
    check_run_repo: str = "git"
    workflow_owner: str = "git-for-windows"
    workflow_repo: str = "git-for-windows-automation"
    snapshots_repo: str = "git-snapshots"
    dispatch_ref: str = "main"
    partitions: tuple[str, ...] = ("x86_64", "i686", "aarch64")

    @property
    def trusted_origin(self) -> tuple[str, str]:
        return (self.workflow_owner, self.workflow_repo)

    @property
    def check_run_repository(self) -> tuple[str, str]:
        return (self.check_run_owner, self.check_run_repo)

    @classmethod
    def from_django(cls) -> "CascadeSettings":
        defaults = cls()
        return cls(
            check_run_owner=getattr(settings, "CASCADE_CHECK_RUN_OWNER", defaults.check_run_owner),
            check_run_repo=getattr(settings, "CASCADE_CHECK_RUN_REPO", defaults.check_run_repo),
            workflow_owner=getattr(settings, "CASCADE_WORKFLOW_OWNER", defaults.workflow_owner),
            workflow_repo=getattr(settings, "CASCADE_WORKFLOW_REPO", defaults.workflow_repo),
            snapshots_repo=getattr(settings, "CASCADE_SNAPSHOTS_REPO", defaults.snapshots_repo),
            dispatch_ref=getattr(settings, "CASCADE_DISPATCH_REF", defaults.dispatch_ref),
            partitions=tuple(getattr(settings, "CASCADE_ARCHITECTURES", defaults.partitions)),
        )
