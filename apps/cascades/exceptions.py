"""
Errors raised by the cascade engine.

All of them are fatal for the event being processed and propagate to the
caller unchanged; nothing here is retried. Harmless, quiescent outcomes
(runs still pending, snapshot already uploaded, ...) are not errors and are
returned as report strings instead.
"""


class CascadeError(Exception):
    """Base class for cascade failures that an operator needs to look at."""


class UpstreamStageFailed(CascadeError):
    """The check-run that would trigger the next stage did not succeed."""

    def __init__(self, message: str, url: str = ""):
        self.url = url
        super().__init__(message)


class MalformedStageOutput(CascadeError):
    """A check-run's text fields do not carry the data its stage promises."""


class MalformedCorrelationData(MalformedStageOutput):
    """A correlation fragment did not match its pattern."""


class ProvenanceMismatch(CascadeError):
    """The event's commit differs from the commit recorded in its text payload."""


class UnexpectedProvenance(CascadeError):
    """A run or event originates from a repository that is not trusted."""


class DownstreamStageFailed(CascadeError):
    """A fanned-out run completed without success, so the join cannot proceed."""

    def __init__(self, message: str, url: str = ""):
        self.url = url
        super().__init__(message)
