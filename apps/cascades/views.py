"""
Webhook view receiving check_run deliveries from GitHub.
"""

import hashlib
import hmac
import json
import logging

from django.conf import settings
from django.http import JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from apps.cascades.exceptions import CascadeError
from apps.cascades.services import CascadeOrchestrator

logger = logging.getLogger(__name__)


def verify_signature(secret: str, body: bytes, signature: str) -> bool:
    """Check GitHub's X-Hub-Signature-256 header (HMAC-SHA256 of the raw body)."""
    if not signature.startswith("sha256="):
        return False
    expected = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(f"sha256={expected}", signature)


@method_decorator(csrf_exempt, name="dispatch")
class CheckRunWebhookView(View):
    """
    Webhook endpoint for GitHub check_run events.

    POST /cascades/webhook/

    Deliveries for other event types are acknowledged and ignored. When
    GITHUB_WEBHOOK_SECRET is set, the payload signature must match.
    """

    def post(self, request):
        """Handle an incoming check_run delivery."""
        secret = getattr(settings, "GITHUB_WEBHOOK_SECRET", "")
        if secret and not verify_signature(
            secret, request.body, request.headers.get("X-Hub-Signature-256", "")
        ):
            logger.warning("Rejected webhook delivery with invalid signature")
            return JsonResponse(
                {"status": "error", "message": "Invalid signature"},
                status=403,
            )

        event_type = request.headers.get("X-GitHub-Event", "check_run")
        if event_type != "check_run":
            return JsonResponse({"status": "ignored", "message": f"Ignoring {event_type} event"})

        try:
            payload = json.loads(request.body)
        except json.JSONDecodeError as e:
            logger.warning(f"Invalid JSON payload: {e}")
            return JsonResponse(
                {"status": "error", "message": "Invalid JSON payload"},
                status=400,
            )

        celery_eager = bool(getattr(settings, "CELERY_TASK_ALWAYS_EAGER", False))
        if getattr(settings, "ENABLE_CELERY_ORCHESTRATION", False) and not celery_eager:
            try:
                from apps.cascades.tasks import process_check_run_event

                async_res = process_check_run_event.delay(payload)
                return JsonResponse({"status": "queued", "task_id": async_res.id}, status=202)
            except Exception as enqueue_err:
                # A broker outage must not lose the delivery; fall back to inline processing.
                logger.warning(
                    "Celery enqueue failed; falling back to sync processing: %s",
                    enqueue_err,
                )

        try:
            report = CascadeOrchestrator().process_webhook(payload)
        except CascadeError as e:
            logger.error(f"Cascade failed: {e}")
            return JsonResponse({"status": "error", "message": str(e)}, status=422)
        except Exception as e:
            logger.exception("Unexpected error processing check_run webhook")
            return JsonResponse({"status": "error", "message": str(e)}, status=500)

        logger.info(f"Webhook processed: {report}")
        return JsonResponse({"status": "success", "message": report})

    def get(self, request):
        """Health check endpoint."""
        return JsonResponse(
            {
                "status": "ok",
                "message": "Check-run webhook endpoint is ready",
            }
        )
