"""
progress.py

The seam through which a host shows "generating..." while the LLM request runs
and lets the user abort it. Any object with a matching ``progress`` method works.
"""

import contextlib
import logging
from typing import AsyncIterator, Protocol

from .cancellation import CancellationToken, CancellationTokenSource

log = logging.getLogger(__name__)


class ProgressReporter(Protocol):
    def progress(self, title: str) -> "contextlib.AbstractAsyncContextManager[CancellationToken]":
        """Show progress for the duration of the block; yield a token the user can cancel."""
        ...


class NullProgress:
    """Shows nothing; the yielded token is never cancelled."""

    @contextlib.asynccontextmanager
    async def progress(self, title: str) -> AsyncIterator[CancellationToken]:
        log.debug("%s", title)
        yield CancellationTokenSource().token
