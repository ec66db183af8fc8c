"""
session.py

Host-side helper that keeps a single live trigger: every new trigger cancels the
token of the one before it, which is what AutocompleteCore relies on.
"""

import logging

from .cancellation import CancellationTokenSource

log = logging.getLogger(__name__)


class CompletionSession:

    def __init__(self, core):
        self.core = core
        self._source = None

    async def trigger(self, document, position):
        """Supersede any in-flight trigger and handle a new one."""
        self.cancel()
        source = CancellationTokenSource()
        self._source = source
        try:
            return await self.core.handle_trigger(document, position, source.token)
        finally:
            if self._source is source:
                self._source = None

    def cancel(self):
        """Cancel the in-flight trigger, if any."""
        if self._source is not None:
            log.debug("Cancelling superseded completion trigger")
            self._source.cancel()
            self._source = None
