"""Minimal GitHub REST API client.

Uses urllib (no third-party HTTP stack); every call is a blocking request
with a timeout from settings.
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request
from typing import Any

from django.conf import settings

logger = logging.getLogger(__name__)


class GitHubApiError(Exception):
    """Raised when the GitHub API answers with a non-2xx status."""

    def __init__(self, status_code: int, method: str, path: str, body: str = ""):
        self.status_code = status_code
        self.method = method
        self.path = path
        self.body = body
        super().__init__(f"GitHub API error ({status_code}) for {method} {path}: {body}")

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


class GitHubClient:
    """
    Issue authenticated requests against the GitHub REST API.

    Usage:
        client = GitHubClient()
        run = client.request("GET", "/repos/octo/repo/check-runs/1", token=token)
    """

    def __init__(self, base_url: str | None = None, timeout: float | None = None):
        self.base_url = (
            base_url or getattr(settings, "GITHUB_API_URL", "https://api.github.com")
        ).rstrip("/")
        self.timeout = (
            timeout
            if timeout is not None
            else float(getattr(settings, "GITHUB_REQUEST_TIMEOUT", 30))
        )

    def request(
        self,
        method: str,
        path: str,
        token: str | None = None,
        body: dict[str, Any] | None = None,
    ) -> Any:
        """
        Send a request and return the decoded JSON body.

        Args:
            method: HTTP method.
            path: API path starting with "/" (query string included).
            token: Bearer token; anonymous when None.
            body: JSON body for POST/PATCH/PUT requests.

        Returns:
            Decoded JSON, or None for empty responses (e.g. 204).

        Raises:
            GitHubApiError: The API returned an error status.
        """
        method = method.upper()
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "CascadeHelper/1.0",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"

        data = None
        if body is not None:
            data = json.dumps(body).encode("utf-8")
            headers["Content-Type"] = "application/json"

        request = urllib.request.Request(
            f"{self.base_url}{path}",
            data=data,
            headers=headers,
            method=method,
        )

        try:
            with urllib.request.urlopen(request, timeout=self.timeout) as response:
                raw = response.read().decode("utf-8")
        except urllib.error.HTTPError as e:
            error_body = e.read().decode("utf-8") if e.fp else str(e)
            if e.code != 404:
                logger.error(f"GitHub HTTP error {e.code} for {method} {path}: {error_body}")
            raise GitHubApiError(e.code, method, path, error_body) from e

        logger.debug(f"GitHub {method} {path} succeeded")
        if not raw.strip():
            return None
        return json.loads(raw)
