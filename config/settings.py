"""Django settings for the cascade helper project.

Values come from environment variables (optionally loaded from .env files by
config.env.load_env). No database is configured: every cascading decision is
derived from the check-runs visible on GitHub.
"""

from __future__ import annotations

import os
from pathlib import Path

from config.env import load_env

BASE_DIR = Path(__file__).resolve().parent.parent

load_env(BASE_DIR)


def _env_bool(name: str, default: str = "0") -> bool:
    return os.environ.get(name, default).lower() in {"1", "true", "yes", "on"}


SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "insecure-dev-key-change-me")
DEBUG = _env_bool("DJANGO_DEBUG")
ALLOWED_HOSTS = [h for h in os.environ.get("DJANGO_ALLOWED_HOSTS", "*").split(",") if h]

INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "apps.github",
    "apps.cascades",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

ROOT_URLCONF = "config.urls"
WSGI_APPLICATION = "config.wsgi.application"

# Check-runs on GitHub are the only state this project reads or writes.
DATABASES: dict = {}

USE_TZ = True
TIME_ZONE = "UTC"

# --- GitHub -----------------------------------------------------------------

GITHUB_API_URL = os.environ.get("GITHUB_API_URL", "https://api.github.com")
GITHUB_TOKEN = os.environ.get("GITHUB_TOKEN", "")
GITHUB_WEBHOOK_SECRET = os.environ.get("GITHUB_WEBHOOK_SECRET", "")
GITHUB_REQUEST_TIMEOUT = float(os.environ.get("GITHUB_REQUEST_TIMEOUT", "30"))
GITHUB_DISPATCH_LOOKUP_ATTEMPTS = int(os.environ.get("GITHUB_DISPATCH_LOOKUP_ATTEMPTS", "5"))
GITHUB_DISPATCH_LOOKUP_INTERVAL = float(os.environ.get("GITHUB_DISPATCH_LOOKUP_INTERVAL", "2"))

# --- Cascading runs ---------------------------------------------------------

CASCADE_CHECK_RUN_OWNER = "git-for-windows"
CASCADE_CHECK_RUN_REPO = "git"
CASCADE_WORKFLOW_OWNER = "git-for-windows"
CASCADE_WORKFLOW_REPO = "git-for-windows-automation"
CASCADE_SNAPSHOTS_REPO = "git-snapshots"
CASCADE_DISPATCH_REF = os.environ.get("CASCADE_DISPATCH_REF", "main")
CASCADE_ARCHITECTURES = ("x86_64", "i686", "aarch64")

# --- Celery -----------------------------------------------------------------

ENABLE_CELERY_ORCHESTRATION = _env_bool("ENABLE_CELERY_ORCHESTRATION", "1")
CELERY_BROKER_URL = os.environ.get("CELERY_BROKER_URL", "redis://localhost:6379/0")
CELERY_RESULT_BACKEND = os.environ.get("CELERY_RESULT_BACKEND", CELERY_BROKER_URL)
CELERY_TASK_ALWAYS_EAGER = _env_bool("CELERY_TASK_ALWAYS_EAGER")
CELERY_TASK_SERIALIZER = "json"
CELERY_RESULT_SERIALIZER = "json"
CELERY_ACCEPT_CONTENT = ["json"]

# --- Logging ----------------------------------------------------------------

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
        },
    },
    "root": {"handlers": ["console"], "level": "WARNING"},
    "loggers": {
        "apps": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "django": {"handlers": ["console"], "level": "INFO", "propagate": False},
    },
}
