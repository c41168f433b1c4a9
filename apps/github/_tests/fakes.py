"""A scripted stand-in for GitHubClient."""

from __future__ import annotations

from typing import Any

from apps.github.client import GitHubApiError


class ScriptedClient:
    """Answer requests from a list of canned responses, recording each call.

    A response that is an exception instance is raised instead of returned.
    """

    def __init__(self, *responses: Any):
        self.responses = list(responses)
        self.calls: list[dict[str, Any]] = []

    def request(self, method, path, token=None, body=None):
        self.calls.append({"method": method, "path": path, "token": token, "body": body})
        response = self.responses.pop(0) if self.responses else None
        if isinstance(response, Exception):
            raise response
        return response


def not_found(path: str = "/") -> GitHubApiError:
    return GitHubApiError(404, "GET", path, '{"message": "Not Found"}')
