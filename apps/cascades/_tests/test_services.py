"""Tests for the CascadeOrchestrator."""

from django.test import SimpleTestCase

from apps.cascades._tests.fakes import (
    artifacts_summary,
    check_run_payload,
    make_check_run,
    make_services,
    run_link,
    tag_git_payload,
)
from apps.cascades.conf import CascadeSettings
from apps.cascades.exceptions import (
    MalformedStageOutput,
    UnexpectedProvenance,
    UpstreamStageFailed,
)
from apps.cascades.services import CascadeOrchestrator


class CascadeOrchestratorTests(SimpleTestCase):
    def setUp(self):
        self.github = make_services(comment_id=314)
        self.orchestrator = CascadeOrchestrator(github=self.github, config=CascadeSettings())

    def _assert_no_side_effects(self):
        self.assertEqual(self.github.check_runs.queued, [])
        self.assertEqual(self.github.workflows.dispatched, [])
        self.assertEqual(self.github.issues.appended, [])

    def test_unhandled_action(self):
        report = self.orchestrator.process_webhook(tag_git_payload(action="created"))

        self.assertEqual(report, "Unhandled action: created")
        self._assert_no_side_effects()

    def test_not_a_cascading_run(self):
        run = make_check_run(1, "build", summary="whatever")

        report = self.orchestrator.process_webhook(check_run_payload(run))

        self.assertEqual(report, "Not a cascading run: build; Doing nothing.")
        self._assert_no_side_effects()

    def test_fan_out_member_in_other_repository_is_not_cascading(self):
        run = make_check_run(1, "git-artifacts-x86_64", summary=artifacts_summary())

        report = self.orchestrator.process_webhook(check_run_payload(run, owner="someone"))

        self.assertEqual(report, "Not a cascading run: git-artifacts-x86_64; Doing nothing.")
        self._assert_no_side_effects()

    def test_tag_git_in_other_repository_is_refused(self):
        with self.assertRaises(UnexpectedProvenance) as ctx:
            self.orchestrator.process_webhook(tag_git_payload(owner="someone", repo="git"))

        self.assertIn("Refusing to handle cascading run in someone/git", str(ctx.exception))
        self._assert_no_side_effects()

    def test_failed_tag_git_has_no_side_effects(self):
        with self.assertRaises(UpstreamStageFailed):
            self.orchestrator.process_webhook(tag_git_payload(conclusion="cancelled"))

        self._assert_no_side_effects()

    def test_tag_git_triggers_three_runs_and_annotates(self):
        report = self.orchestrator.process_webhook(tag_git_payload())

        self.assertEqual(len(self.github.workflows.dispatched), 3)
        for dispatched in self.github.workflows.dispatched:
            self.assertEqual(dispatched["inputs"]["tag_git_workflow_run_id"], "4242")
        self.assertEqual(self.github.issues.appended, [(314, report)])

    def test_tag_git_without_comment_is_not_annotated(self):
        self.github.issues.comment_id = None

        self.orchestrator.process_webhook(tag_git_payload())

        self.assertEqual(self.github.issues.appended, [])

    def test_malformed_payload(self):
        with self.assertRaises(MalformedStageOutput):
            self.orchestrator.process_webhook({"action": "completed"})

    def test_full_cascade(self):
        self.orchestrator.process_webhook(tag_git_payload())
        queued = {run.name: run for run in self.github.check_runs.queued}

        # Two of three architectures finish; the join waits.
        for index, partition in enumerate(("x86_64", "i686"), start=1):
            run = queued[f"git-artifacts-{partition}"]
            run.status, run.conclusion = "completed", "success"
            run.output.text = run_link(500 + index)
            report = self.orchestrator.process_webhook(check_run_payload(run))
            self.assertIn("did not complete yet", report)
        self.assertEqual(len(self.github.workflows.dispatched), 3)

        last = queued["git-artifacts-aarch64"]
        last.status, last.conclusion = "completed", "success"
        last.output.text = run_link(503)
        report = self.orchestrator.process_webhook(check_run_payload(last))

        self.assertIn("The 'upload-snapshot' workflow run was started at", report)
        upload = self.github.workflows.dispatched[-1]
        self.assertEqual(
            upload["inputs"],
            {
                "git_artifacts_x86_64_workflow_run_id": "501",
                "git_artifacts_i686_workflow_run_id": "502",
                "git_artifacts_aarch64_workflow_run_id": "503",
            },
        )

        # Replaying after the snapshot was published changes nothing.
        self.github.repositories.releases.add(("git-for-windows", "git-snapshots", "prerelease-1.2.3"))
        report = self.orchestrator.process_webhook(check_run_payload(last))

        self.assertIn("already uploaded", report)
        self.assertEqual(len(self.github.workflows.dispatched), 4)

    def test_replayed_tag_git_event_triggers_nothing(self):
        self.orchestrator.process_webhook(tag_git_payload())

        report = self.orchestrator.process_webhook(tag_git_payload())

        self.assertEqual(len(self.github.workflows.dispatched), 3)
        self.assertIn("No workflows need to be run!", report)
