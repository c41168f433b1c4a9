"""Load GITHUB_*, CASCADE_* and CELERY_* variables from a .env file next to manage.py."""

from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent


def load_env(base_dir: Path = PROJECT_ROOT) -> bool:
    """Read `<base_dir>/.env`; variables already in the environment win.

    Returns whether a .env file was found.
    """
    return load_dotenv(base_dir / ".env", override=False)
