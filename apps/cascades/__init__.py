"""
Cascading runs app.

Reacts to `check_run` webhook deliveries and advances the
tag-git → git-artifacts-<arch> → upload-snapshot cascade exactly once.

Key concepts:
- No state store: correlation data lives in the check-runs' text fields
- Fan-out: one git-artifacts run per architecture for each tag-git run
- Fan-in: upload-snapshot only once every architecture succeeded
- Idempotency through existence checks, so redelivered events are harmless
"""
