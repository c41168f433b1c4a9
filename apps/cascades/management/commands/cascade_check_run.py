"""
Management command to replay a check_run webhook payload through the cascade.

Usage:
    # Replay a delivery saved from GitHub's webhook settings page
    python manage.py cascade_check_run --file delivery.json

    # Pass the payload inline
    python manage.py cascade_check_run --payload '{"action": "completed", ...}'

    # Output as JSON
    python manage.py cascade_check_run --file delivery.json --json
"""

import json

from django.core.management.base import BaseCommand, CommandError

from apps.cascades.exceptions import CascadeError
from apps.cascades.services import CascadeOrchestrator


class Command(BaseCommand):
    help = "Process a check_run webhook payload and advance the cascade"

    def add_arguments(self, parser):
        parser.add_argument(
            "--file",
            type=str,
            help="Path to JSON file containing the webhook payload",
        )
        parser.add_argument(
            "--payload",
            type=str,
            help="JSON payload string",
        )
        parser.add_argument(
            "--json",
            action="store_true",
            dest="json_output",
            help="Output result as JSON.",
        )

    def handle(self, *args, **options):
        payload = self._load_payload(options)

        try:
            report = CascadeOrchestrator().process_webhook(payload)
        except CascadeError as e:
            raise CommandError(str(e)) from e

        if options["json_output"]:
            self.stdout.write(json.dumps({"status": "success", "message": report}, indent=2))
        else:
            self.stdout.write(self.style.SUCCESS(report.rstrip("\n")))

    def _load_payload(self, options) -> dict:
        if options.get("file"):
            try:
                with open(options["file"]) as f:
                    raw = f.read()
            except OSError as e:
                raise CommandError(f"Could not read {options['file']}: {e}") from e
        elif options.get("payload"):
            raw = options["payload"]
        else:
            raise CommandError("Either --file or --payload is required")

        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CommandError(f"Invalid JSON payload: {e}") from e

        if not isinstance(payload, dict):
            raise CommandError("payload must be a JSON object")
        return payload
