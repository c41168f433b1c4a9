import hashlib
import hmac
import json
from unittest.mock import patch

from django.test import Client, SimpleTestCase, override_settings
from django.urls import reverse

from apps.cascades._tests.fakes import tag_git_payload
from apps.cascades.exceptions import UpstreamStageFailed
from apps.cascades.views import verify_signature


def _sign(secret: str, body: bytes) -> str:
    return "sha256=" + hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


@override_settings(ENABLE_CELERY_ORCHESTRATION=False, GITHUB_WEBHOOK_SECRET="")
class CheckRunWebhookViewTests(SimpleTestCase):
    """Tests for the check_run webhook view (synchronous processing)."""

    def setUp(self):
        self.client = Client()
        self.webhook_url = reverse("cascades:webhook")
        self.body = json.dumps(tag_git_payload())

    def _post(self, body=None, **headers):
        return self.client.post(
            self.webhook_url,
            data=self.body if body is None else body,
            content_type="application/json",
            **headers,
        )

    def test_get_health_check(self):
        response = self.client.get(self.webhook_url)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "ok")

    @patch("apps.cascades.views.CascadeOrchestrator")
    def test_post_processes_synchronously(self, mock_orchestrator):
        mock_orchestrator.return_value.process_webhook.return_value = "No workflows need to be run!\n"

        response = self._post()

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json(), {"status": "success", "message": "No workflows need to be run!\n"}
        )
        mock_orchestrator.return_value.process_webhook.assert_called_once_with(json.loads(self.body))

    def test_post_invalid_json(self):
        response = self._post(body="not json")

        self.assertEqual(response.status_code, 400)

    @patch("apps.cascades.views.CascadeOrchestrator")
    def test_other_event_types_are_ignored(self, mock_orchestrator):
        response = self._post(HTTP_X_GITHUB_EVENT="push")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "ignored")
        mock_orchestrator.assert_not_called()

    @patch("apps.cascades.views.CascadeOrchestrator")
    def test_cascade_error_is_unprocessable(self, mock_orchestrator):
        mock_orchestrator.return_value.process_webhook.side_effect = UpstreamStageFailed(
            "tag-git run 1 completed with failure", url="https://example.com/runs/1"
        )

        response = self._post()

        self.assertEqual(response.status_code, 422)
        self.assertIn("completed with failure", response.json()["message"])

    @patch("apps.cascades.views.CascadeOrchestrator")
    def test_unexpected_error_is_server_error(self, mock_orchestrator):
        mock_orchestrator.return_value.process_webhook.side_effect = RuntimeError("boom")

        response = self._post()

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["status"], "error")

    @override_settings(GITHUB_WEBHOOK_SECRET="s3cret")
    @patch("apps.cascades.views.CascadeOrchestrator")
    def test_bad_signature_is_rejected(self, mock_orchestrator):
        response = self._post(HTTP_X_HUB_SIGNATURE_256="sha256=deadbeef")

        self.assertEqual(response.status_code, 403)
        mock_orchestrator.assert_not_called()

    @override_settings(GITHUB_WEBHOOK_SECRET="s3cret")
    @patch("apps.cascades.views.CascadeOrchestrator")
    def test_good_signature_is_accepted(self, mock_orchestrator):
        mock_orchestrator.return_value.process_webhook.return_value = "ok"

        response = self._post(HTTP_X_HUB_SIGNATURE_256=_sign("s3cret", self.body.encode()))

        self.assertEqual(response.status_code, 200)


@override_settings(ENABLE_CELERY_ORCHESTRATION=True, CELERY_TASK_ALWAYS_EAGER=False, GITHUB_WEBHOOK_SECRET="")
class CheckRunWebhookQueueTests(SimpleTestCase):
    """Tests for the Celery hand-off."""

    def setUp(self):
        self.client = Client()
        self.webhook_url = reverse("cascades:webhook")
        self.payload = tag_git_payload()

    @patch("apps.cascades.tasks.process_check_run_event.delay")
    def test_post_is_queued(self, mock_delay):
        mock_delay.return_value.id = "task-123"

        response = self.client.post(
            self.webhook_url, data=json.dumps(self.payload), content_type="application/json"
        )

        self.assertEqual(response.status_code, 202)
        self.assertEqual(response.json(), {"status": "queued", "task_id": "task-123"})
        mock_delay.assert_called_once_with(self.payload)

    @patch("apps.cascades.views.CascadeOrchestrator")
    @patch("apps.cascades.tasks.process_check_run_event.delay", side_effect=ConnectionError("no broker"))
    def test_enqueue_failure_falls_back_to_sync(self, mock_delay, mock_orchestrator):
        mock_orchestrator.return_value.process_webhook.return_value = "done"

        response = self.client.post(
            self.webhook_url, data=json.dumps(self.payload), content_type="application/json"
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["message"], "done")


class VerifySignatureTests(SimpleTestCase):
    def test_valid(self):
        self.assertTrue(verify_signature("key", b"{}", _sign("key", b"{}")))

    def test_wrong_secret(self):
        self.assertFalse(verify_signature("key", b"{}", _sign("other", b"{}")))

    def test_missing_prefix(self):
        digest = hmac.new(b"key", b"{}", hashlib.sha256).hexdigest()

        self.assertFalse(verify_signature("key", b"{}", digest))
