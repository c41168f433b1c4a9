"""Shared test fixtures for the cascades app."""

import pytest

from apps.cascades._tests.fakes import make_services
from apps.cascades.conf import CascadeSettings
from apps.cascades.services import CascadeOrchestrator


@pytest.fixture
def github():
    """In-memory GitHub collaborators with an annotatable PR comment."""
    return make_services(comment_id=314)


@pytest.fixture
def orchestrator(github):
    return CascadeOrchestrator(github=github, config=CascadeSettings())
