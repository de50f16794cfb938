"""
Exception hierarchy for the node bootstrap pipeline.

Only the fatal stages raise; everything else logs and carries on.
"""


class NodeError(RuntimeError):
    """Base class for errors raised by argonode."""


class PollTimeoutError(NodeError):
    """A polled condition did not hold within its attempt budget."""

    def __init__(self, message: str, attempts: int):
        super().__init__(message)
        self.attempts = attempts


class DomainResolutionError(PollTimeoutError):
    """The tunnel hostname never appeared in the tunnel client log."""


class LinkGenerationError(NodeError):
    """Connection links could not be synthesized or persisted."""
