"""
GitHub collaborators app.

Thin capability surfaces over the GitHub REST API used by the cascade engine:
- check-run registry (list / queue check-runs on a commit)
- workflow dispatcher (start a workflow_dispatch run)
- repository queries (release existence, branch comparison)
- issue annotator (append reports to the release-tracking PR comment)
- installation token cache keyed by (owner, repository)
"""
