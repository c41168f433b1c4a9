from django.test import SimpleTestCase

from apps.github._tests.fakes import ScriptedClient, not_found
from apps.github.client import GitHubApiError
from apps.github.repositories import RepositoryQueries


class RepositoryQueriesTests(SimpleTestCase):
    def test_release_exists(self):
        client = ScriptedClient({"id": 1, "tag_name": "prerelease-1.2.3"})

        self.assertTrue(RepositoryQueries(client).release_exists("t", "o", "snaps", "prerelease-1.2.3"))
        self.assertEqual(client.calls[0]["path"], "/repos/o/snaps/releases/tags/prerelease-1.2.3")

    def test_release_missing(self):
        client = ScriptedClient(not_found())

        self.assertFalse(RepositoryQueries(client).release_exists("t", "o", "snaps", "prerelease-1.2.3"))

    def test_release_probe_errors_propagate(self):
        client = ScriptedClient(GitHubApiError(500, "GET", "/x", "oops"))

        with self.assertRaises(GitHubApiError):
            RepositoryQueries(client).release_exists("t", "o", "snaps", "prerelease-1.2.3")

    def test_release_url(self):
        self.assertEqual(
            RepositoryQueries(ScriptedClient()).release_url("o", "snaps", "prerelease-1.2.3"),
            "https://github.com/o/snaps/releases/tag/prerelease-1.2.3",
        )

    def test_compare(self):
        client = ScriptedClient({"status": "behind", "behind_by": 3, "ahead_by": 0})

        comparison = RepositoryQueries(client).compare("t", "o", "r", "HEAD", "abc123")

        self.assertEqual(comparison.behind_by, 3)
        self.assertEqual(comparison.status, "behind")
        self.assertEqual(client.calls[0]["path"], "/repos/o/r/compare/HEAD...abc123")
