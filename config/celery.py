"""Celery worker entry point: `celery -A config worker -l info`.

The webhook view enqueues apps.cascades.tasks.process_check_run_event here
when ENABLE_CELERY_ORCHESTRATION is on.
"""

from __future__ import annotations

import os

from celery import Celery

from config.env import load_env

load_env()
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("cascade-helper")
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks(["apps.cascades"])
