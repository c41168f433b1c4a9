"""Token acquisition and caching.

How a token is minted (GitHub App installation tokens, PATs, ...) is left to a
TokenProvider. TokenCache only remembers the answer per (owner, repository)
for the lifetime of the process.
"""

from __future__ import annotations

import logging
from typing import Protocol

from django.conf import settings

logger = logging.getLogger(__name__)


class TokenProvider(Protocol):
    def get_token(self, owner: str, repo: str) -> str: ...


class SettingsTokenProvider:
    """Hand out the single GITHUB_TOKEN from settings for every repository."""

    def __init__(self, token: str | None = None):
        self.token = token if token is not None else getattr(settings, "GITHUB_TOKEN", "")

    def get_token(self, owner: str, repo: str) -> str:
        if not self.token:
            raise ValueError(f"No GitHub token configured for {owner}/{repo} (set GITHUB_TOKEN)")
        return self.token


class TokenCache:
    """
    Process-scoped token cache keyed by (owner, repository).

    Populated on first use per key and never invalidated. Concurrent fills for
    the same key are harmless: last write wins and tokens are cheap to refetch.
    """

    def __init__(self, provider: TokenProvider | None = None):
        self.provider = provider or SettingsTokenProvider()
        self._tokens: dict[tuple[str, str], str] = {}

    def get(self, owner: str, repo: str) -> str:
        key = (owner, repo)
        token = self._tokens.get(key)
        if token is None:
            logger.debug(f"Fetching token for {owner}/{repo}")
            token = self.provider.get_token(owner, repo)
            self._tokens[key] = token
        return token

    def __contains__(self, key: tuple[str, str]) -> bool:
        return key in self._tokens
