"""
errors.py

Reasons a completion attempt produces nothing. They are raised inside the
client and the orchestrator and absorbed there; the host only ever sees
"no completion".
"""


class CompletionError(Exception):
    """Base class for every way a trigger can end without a proposal."""


class NetworkFailure(CompletionError):
    """The HTTP request could not be completed (connection error, timeout)."""


class BadStatus(CompletionError):
    """The backend answered with a non-success HTTP status."""

    def __init__(self, status_code, reason=""):
        super().__init__(f"HTTP {status_code} {reason}".rstrip())
        self.status_code = status_code
        self.reason = reason


class MalformedResponse(CompletionError):
    """The body is not JSON or lacks ``choices[0].message.content``."""


class EmptyContent(CompletionError):
    """The message content is empty or whitespace only."""


class HeuristicRejected(CompletionError):
    """The content looks like leaked reasoning rather than code."""


class Cancelled(CompletionError):
    """The trigger was superseded or the user cancelled the request."""


class NoContext(CompletionError):
    """There is no text before the cursor to complete from."""
