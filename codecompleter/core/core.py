import asyncio
import logging
from dataclasses import dataclass

from ..config import settings
from ..config.settings import CompletionConfig
from . import debounce
from .document import Position, extract_context
from .errors import Cancelled, CompletionError, EmptyContent, NoContext
from .progress import NullProgress

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompletionProposal:
    """Completion text to insert at ``insert_at``; it never replaces existing text."""

    text: str
    insert_at: Position

    @property
    def range(self):
        return self.insert_at, self.insert_at


class AutocompleteCore:
    """
    Turns an editor trigger (document snapshot, cursor, cancellation token) into
    at most one CompletionProposal.

    Every trigger is handled on its own: nothing is queued or deduplicated here.
    The host must cancel a trigger's token as soon as a newer trigger supersedes
    it (see session.CompletionSession); a cancelled trigger yields None even if
    the LLM has already answered.
    """

    def __init__(self, llm_client, config_provider=CompletionConfig, progress=None,
                 delay=settings.DEBOUNCE_DELAY, context_lines=settings.CONTEXT_LINES):
        """
        :param llm_client:      An LLMClient, or anything with an async
                                ``request_completion(prefix, suffix, config)``.
        :param config_provider: Called once per trigger; returns a CompletionConfig.
        :param progress:        A ProgressReporter shown while the request runs.
        :param delay:           Debounce window in seconds.
        :param context_lines:   Lines of context above and below the cursor.
        """
        self.llm_client = llm_client
        self.config_provider = config_provider
        self.progress = progress or NullProgress()
        self.delay = delay
        self.context_lines = context_lines

    async def handle_trigger(self, document, position, token):
        """
        :return: A CompletionProposal, or None when the trigger was cancelled,
                 there was nothing to complete from, or the LLM gave nothing usable.
        """
        try:
            return await self._run(document, position, token)
        except CompletionError as e:
            log.debug("No completion at %s: %s (%s)", position, type(e).__name__, e)
            return None

    async def _run(self, document, position, token):
        _check(token)

        if await debounce.wait(self.delay, token) is debounce.GateResult.CANCELLED:
            raise Cancelled("superseded while debouncing")
        _check(token)

        window = extract_context(document, position, self.context_lines)
        if not window.prefix.strip():
            raise NoContext("nothing before the cursor")

        config = self.config_provider()
        async with self.progress.progress(settings.PROGRESS_TITLE) as progress_token:
            _check(token, progress_token)
            completion = await _unless_cancelled(
                self.llm_client.request_completion(window.prefix, window.suffix, config),
                token, progress_token,
            )
            _check(token, progress_token)

        if not completion:
            raise EmptyContent("completion is null or empty")

        log.debug("completion text: %r", completion)
        return CompletionProposal(completion, position)


def _check(*tokens):
    if any(token.is_cancellation_requested for token in tokens):
        raise Cancelled("cancellation requested")


async def _unless_cancelled(awaitable, *tokens):
    """Await ``awaitable``, abandoning it as soon as any of ``tokens`` is cancelled."""
    task = asyncio.ensure_future(awaitable)
    unregister = [token.on_cancellation_requested(task.cancel) for token in tokens]
    try:
        return await task
    except asyncio.CancelledError:
        if any(token.is_cancellation_requested for token in tokens):
            raise Cancelled("cancelled while waiting for the LLM") from None
        raise
    finally:
        for remove in unregister:
            remove()
