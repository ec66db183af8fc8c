"""
cancellation.py

Cooperative cancellation for a single trigger. A token is a flag plus a list
of callbacks; whoever holds the matching source may flip it exactly once.
"""

import logging

log = logging.getLogger(__name__)


class CancellationToken:
    """Read-only view of a cancellation flag."""

    def __init__(self):
        self._cancelled = False
        self._callbacks = []

    @property
    def is_cancellation_requested(self):
        return self._cancelled

    def on_cancellation_requested(self, callback):
        """
        Register ``callback`` to run when the token is cancelled.

        If the token is already cancelled the callback runs immediately.
        Returns a function that removes the registration; calling it more
        than once is harmless.
        """
        if self._cancelled:
            callback()
            return lambda: None

        self._callbacks.append(callback)

        def unregister():
            try:
                self._callbacks.remove(callback)
            except ValueError:
                pass

        return unregister

    def _cancel(self):
        if self._cancelled:
            return
        self._cancelled = True
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            try:
                callback()
            except Exception:
                log.exception("Cancellation callback %r failed", callback)


class CancellationTokenSource:
    """Owns a token and the right to cancel it."""

    def __init__(self):
        self.token = CancellationToken()

    def cancel(self):
        self.token._cancel()

    @property
    def is_cancellation_requested(self):
        return self.token.is_cancellation_requested

