"""Issue annotator: append cascade reports to the release-tracking PR comment."""

from __future__ import annotations

import logging
from urllib.parse import quote

from apps.github.client import GitHubClient

logger = logging.getLogger(__name__)


class IssueAnnotator:
    """
    Find and extend the PR comment that announced a tag-git run.

    When `/git-artifacts` is requested on a pull request, the answer comment
    links the tag-git run. Cascade reports are appended to that comment so the
    whole history of a release candidate stays in one place.
    """

    def __init__(self, client: GitHubClient | None = None):
        self.client = client or GitHubClient()

    def find_artifacts_comment_id(
        self,
        token: str,
        owner: str,
        repo: str,
        commit_sha: str,
        details_url: str,
    ) -> int | None:
        """Return the id of the newest PR comment mentioning `details_url`, if any."""
        if not details_url:
            return None

        pulls = self.client.request(
            "GET", f"/repos/{owner}/{repo}/commits/{quote(commit_sha)}/pulls", token=token
        ) or []

        found: int | None = None
        for pull in pulls:
            comments = self.client.request(
                "GET",
                f"/repos/{owner}/{repo}/issues/{pull['number']}/comments?per_page=100",
                token=token,
            ) or []
            for comment in comments:
                if details_url in (comment.get("body") or ""):
                    comment_id = int(comment["id"])
                    if found is None or comment_id > found:
                        found = comment_id
        return found

    def append_to_comment(
        self, token: str, owner: str, repo: str, comment_id: int, text: str
    ) -> None:
        path = f"/repos/{owner}/{repo}/issues/comments/{comment_id}"
        comment = self.client.request("GET", path, token=token) or {}
        body = (comment.get("body") or "").rstrip("\n")
        self.client.request("PATCH", path, token=token, body={"body": f"{body}\n\n{text}"})
        logger.info(f"Appended cascade report to comment {comment_id} in {owner}/{repo}")
