"""Celery tasks for processing check_run deliveries in the background.

Failures are not retried here: a failed cascade is reported, and a retry means
redelivering the webhook from GitHub.
"""

from __future__ import annotations

import logging
from typing import Any

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task
def process_check_run_event(payload: dict[str, Any]) -> dict[str, Any]:
    """Run the cascade for one webhook payload and return its report."""
    from apps.cascades.services import CascadeOrchestrator

    check_run = payload.get("check_run") or {}
    report = CascadeOrchestrator().process_webhook(payload)
    logger.info(f"Processed {check_run.get('name')} check-run {check_run.get('id')}: {report}")
    return {"status": "processed", "message": report}
