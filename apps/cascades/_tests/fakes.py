"""In-memory stand-ins for the GitHub collaborators, plus payload builders."""

from __future__ import annotations

import itertools
from typing import Any

from apps.github.auth import TokenCache
from apps.github.check_runs import CheckRun, CheckRunOutput
from apps.github.repositories import Comparison, RepositoryQueries
from apps.github.services import GitHubServices
from apps.github.workflows import WorkflowRun

OWNER = "git-for-windows"
REPO = "git"
AUTOMATION_REPO = "git-for-windows-automation"
SHA = "abc123"
VERSION = "v1.2.3"
TAG_GIT_RUN_ID = 4242


def run_link(run_id: int, owner: str = OWNER, repo: str = AUTOMATION_REPO) -> str:
    return f"For details, see [this run](https://github.com/{owner}/{repo}/actions/runs/{run_id})"


def artifacts_summary(
    version: str = VERSION, sha: str = SHA, tag_git_run_id: int = TAG_GIT_RUN_ID
) -> str:
    return f"Build Git {version} artifacts from commit {sha} (tag-git run #{tag_git_run_id})"


def make_check_run(
    run_id: int,
    name: str,
    status: str = "completed",
    conclusion: str | None = "success",
    summary: str = "",
    text: str = "",
    head_sha: str = SHA,
) -> CheckRun:
    return CheckRun(
        id=run_id,
        name=name,
        head_sha=head_sha,
        status=status,
        conclusion=conclusion if status == "completed" else None,
        html_url=f"https://github.com/{OWNER}/{REPO}/runs/{run_id}",
        details_url=f"https://github.com/{OWNER}/{AUTOMATION_REPO}/actions/runs/{run_id}",
        url=f"https://api.github.com/repos/{OWNER}/{REPO}/check-runs/{run_id}",
        output=CheckRunOutput(summary=summary, text=text),
    )


def check_run_payload(
    run: CheckRun,
    action: str = "completed",
    owner: str = OWNER,
    repo: str = REPO,
) -> dict[str, Any]:
    return {
        "action": action,
        "repository": {"name": repo, "owner": {"login": owner}},
        "check_run": {
            "id": run.id,
            "name": run.name,
            "head_sha": run.head_sha,
            "status": run.status,
            "conclusion": run.conclusion,
            "html_url": run.html_url,
            "details_url": run.details_url,
            "url": run.url,
            "output": {
                "title": run.output.title,
                "summary": run.output.summary,
                "text": run.output.text,
            },
        },
    }


def tag_git_payload(
    conclusion: str = "success",
    version: str = VERSION,
    sha: str = SHA,
    run_id: int = TAG_GIT_RUN_ID,
    **kwargs,
) -> dict[str, Any]:
    run = make_check_run(
        100,
        "tag-git",
        conclusion=conclusion,
        summary=f"Tag Git {version} @{sha}",
        text=run_link(run_id),
        head_sha=sha,
    )
    return check_run_payload(run, **kwargs)


class FakeCheckRunRegistry:
    def __init__(self):
        self.runs: list[CheckRun] = []
        self.queued: list[CheckRun] = []
        self.list_calls: list[tuple[str, str, str, str]] = []
        self._ids = itertools.count(1000)

    def add(self, run: CheckRun) -> CheckRun:
        self.runs.append(run)
        return run

    def list_for_commit(self, token, owner, repo, commit_sha, workflow_name):
        self.list_calls.append((owner, repo, commit_sha, workflow_name))
        return [run for run in self.runs if run.head_sha == commit_sha and run.name == workflow_name]

    def queue(self, token, owner, repo, commit_sha, workflow_name, title, summary):
        run = make_check_run(
            next(self._ids),
            workflow_name,
            status="queued",
            summary=summary,
            head_sha=commit_sha,
        )
        run.output.title = title
        self.runs.append(run)
        self.queued.append(run)
        return run


class FakeWorkflowDispatcher:
    def __init__(self):
        self.dispatched: list[dict[str, Any]] = []
        self._ids = itertools.count(9000)

    def dispatch(self, token, owner, repo, workflow_file, ref, inputs):
        run_id = next(self._ids)
        self.dispatched.append(
            {
                "owner": owner,
                "repo": repo,
                "workflow_file": workflow_file,
                "ref": ref,
                "inputs": dict(inputs),
            }
        )
        return WorkflowRun(id=run_id, html_url=f"https://github.com/{owner}/{repo}/actions/runs/{run_id}")


class FakeRepositoryQueries(RepositoryQueries):
    def __init__(self):
        self.releases: set[tuple[str, str, str]] = set()
        self.behind_by = 0
        self.compare_calls: list[tuple[str, str, str, str]] = []

    def release_exists(self, token, owner, repo, tag):
        return (owner, repo, tag) in self.releases

    def compare(self, token, owner, repo, base, head):
        self.compare_calls.append((owner, repo, base, head))
        return Comparison(behind_by=self.behind_by)


class FakeIssueAnnotator:
    def __init__(self, comment_id: int | None = None):
        self.comment_id = comment_id
        self.appended: list[tuple[int, str]] = []

    def find_artifacts_comment_id(self, token, owner, repo, commit_sha, details_url):
        return self.comment_id

    def append_to_comment(self, token, owner, repo, comment_id, text):
        self.appended.append((comment_id, text))


class StaticTokenProvider:
    def __init__(self):
        self.calls: list[tuple[str, str]] = []

    def get_token(self, owner: str, repo: str) -> str:
        self.calls.append((owner, repo))
        return f"token-{owner}-{repo}"


def make_services(comment_id: int | None = None) -> GitHubServices:
    return GitHubServices(
        tokens=TokenCache(StaticTokenProvider()),
        check_runs=FakeCheckRunRegistry(),
        workflows=FakeWorkflowDispatcher(),
        repositories=FakeRepositoryQueries(),
        issues=FakeIssueAnnotator(comment_id),
    )
