"""
debounce.py

Wait for the editor to go idle before asking the LLM for anything.
"""

import asyncio
import enum

from ..config import settings


class GateResult(enum.Enum):
    RESOLVED = "resolved"
    CANCELLED = "cancelled"


async def wait(delay=settings.DEBOUNCE_DELAY, token=None):
    """
    Suspend until ``delay`` seconds pass or ``token`` is cancelled, whichever
    comes first.

    :param delay: Idle window in seconds.
    :param token: A CancellationToken, or None for an uncancellable wait.
    :return: GateResult.RESOLVED after the delay, GateResult.CANCELLED otherwise.
    """
    if token is not None and token.is_cancellation_requested:
        return GateResult.CANCELLED

    loop = asyncio.get_running_loop()
    done = loop.create_future()

    def settle(result):
        if not done.done():
            done.set_result(result)

    timer = loop.call_later(delay, settle, GateResult.RESOLVED)

    def on_cancel():
        timer.cancel()
        settle(GateResult.CANCELLED)

    unregister = token.on_cancellation_requested(on_cancel) if token is not None else None
    try:
        return await done
    finally:
        timer.cancel()
        if unregister is not None:
            unregister()
