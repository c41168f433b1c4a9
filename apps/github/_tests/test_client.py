"""Tests for GitHubClient."""

import io
import json
import urllib.error
from unittest.mock import MagicMock, patch

from django.test import SimpleTestCase

from apps.github.client import GitHubApiError, GitHubClient

API = "https://api.example.com"


def _mock_urlopen(response_body):
    """Create a mock context manager for urllib.request.urlopen."""
    mock_resp = MagicMock()
    mock_resp.read.return_value = response_body.encode("utf-8")
    mock_resp.__enter__ = MagicMock(return_value=mock_resp)
    mock_resp.__exit__ = MagicMock(return_value=False)
    return mock_resp


def _http_error(code, body=b""):
    return urllib.error.HTTPError(
        url=f"{API}/x", code=code, msg="error", hdrs=MagicMock(), fp=io.BytesIO(body)
    )


class GitHubClientTests(SimpleTestCase):
    def setUp(self):
        self.client = GitHubClient(base_url=f"{API}/", timeout=5)

    @patch("apps.github.client.urllib.request.urlopen")
    def test_get_decodes_json(self, mock_urlopen):
        mock_urlopen.return_value = _mock_urlopen('{"id": 7}')

        answer = self.client.request("get", "/repos/o/r/check-runs/7", token="t0k")

        self.assertEqual(answer, {"id": 7})
        request = mock_urlopen.call_args[0][0]
        self.assertEqual(request.full_url, f"{API}/repos/o/r/check-runs/7")
        self.assertEqual(request.get_method(), "GET")
        self.assertEqual(request.get_header("Authorization"), "Bearer t0k")
        self.assertIsNone(request.data)
        self.assertEqual(mock_urlopen.call_args[1]["timeout"], 5)

    @patch("apps.github.client.urllib.request.urlopen")
    def test_post_sends_json_body(self, mock_urlopen):
        mock_urlopen.return_value = _mock_urlopen("")

        answer = self.client.request("POST", "/dispatches", body={"ref": "main"})

        self.assertIsNone(answer)
        request = mock_urlopen.call_args[0][0]
        self.assertEqual(json.loads(request.data), {"ref": "main"})
        self.assertEqual(request.get_header("Content-type"), "application/json")
        self.assertIsNone(request.get_header("Authorization"))

    @patch("apps.github.client.urllib.request.urlopen")
    def test_not_found(self, mock_urlopen):
        mock_urlopen.side_effect = _http_error(404, b'{"message": "Not Found"}')

        with self.assertRaises(GitHubApiError) as ctx:
            self.client.request("GET", "/repos/o/r/releases/tags/v1")

        self.assertTrue(ctx.exception.is_not_found)
        self.assertIn("Not Found", ctx.exception.body)

    @patch("apps.github.client.urllib.request.urlopen")
    def test_server_error(self, mock_urlopen):
        mock_urlopen.side_effect = _http_error(502, b"Bad Gateway")

        with self.assertRaises(GitHubApiError) as ctx:
            self.client.request("GET", "/repos/o/r")

        self.assertEqual(ctx.exception.status_code, 502)
        self.assertFalse(ctx.exception.is_not_found)
        self.assertIn("(502) for GET /repos/o/r", str(ctx.exception))
