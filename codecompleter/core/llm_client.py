"""
llm_client.py

A client that asks an OpenAI-compatible chat endpoint (Ollama by default) for the
code missing at the cursor, using a fill-in-the-middle prompt.
"""

import asyncio
import logging

import requests

from ..config import settings
from ..config.settings import CompletionConfig
from .errors import (
    BadStatus,
    CompletionError,
    EmptyContent,
    HeuristicRejected,
    MalformedResponse,
    NetworkFailure,
)
from .overlap import remove_overlap

log = logging.getLogger(__name__)


def build_prompt(prefix, suffix):
    """Frame prefix and suffix as a fill-in-the-middle task for a chat model."""
    return "\n".join([
        "Complete the code at the <FILL> position. "
        "Return ONLY the completion text that should be inserted at <FILL>.",
        "Do NOT repeat the prefix code. Do NOT include explanations, markdown, or backticks.",
        "Just return the exact code that continues from where the prefix ends.",
        "",
        "<PREFIX>",
        prefix,
        "<FILL>",
        "<SUFFIX>",
        suffix,
        "</SUFFIX>",
        "",
        "Return only the completion for <FILL>:",
    ])


class LLMClient:
    """Client for obtaining a single completion from a local language model server."""

    def __init__(self, config=None):
        """
        :param config: Optional CompletionConfig used when a call does not pass one.
        """
        self.config = config or CompletionConfig()

    def build_payload(self, prefix, suffix, config=None):
        config = config or self.config
        return {
            "model": config.model,
            "messages": [{"role": "user", "content": build_prompt(prefix, suffix)}],
            "max_tokens": config.max_tokens,
            "temperature": config.temperature,
            "stream": False,
        }

    def get_completion(self, prefix, suffix, config=None):
        """
        Request the text that belongs between ``prefix`` and ``suffix``.

        Blocks until the server answers or the configured timeout expires.

        :return: The trimmed completion with any echoed prefix removed (possibly
                 an empty string), or None if the request failed or the answer
                 was unusable. Never raises for network or response problems.
        """
        try:
            return self._complete(prefix, suffix, config or self.config)
        except BadStatus as e:
            log.error("LLM API error: %s", e)
        except NetworkFailure as e:
            log.error("LLM request failed: %s", e)
        except CompletionError as e:
            log.info("Discarding LLM response (%s): %s", type(e).__name__, e)
        return None

    async def request_completion(self, prefix, suffix, config=None):
        """Awaitable get_completion; the blocking HTTP call runs in a worker thread."""
        return await asyncio.to_thread(self.get_completion, prefix, suffix, config)

    def _complete(self, prefix, suffix, config):
        payload = self.build_payload(prefix, suffix, config)
        try:
            response = requests.post(
                config.endpoint,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=config.timeout,
            )
        except requests.RequestException as e:
            raise NetworkFailure(str(e)) from e

        if not response.ok:
            raise BadStatus(response.status_code, response.reason or "")

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedResponse(f"response is not JSON: {e}") from e
        log.debug("LLM API response: %s", data)

        completion = self.parse_content(data)
        return remove_overlap(prefix, completion)

    @staticmethod
    def parse_content(data):
        """
        Pull the completion text out of a chat-completions response body.

        :raises MalformedResponse: when ``choices[0].message.content`` is missing.
        :raises EmptyContent: when the content is blank.
        :raises HeuristicRejected: when the content looks like leaked reasoning.
        """
        try:
            message = data["choices"][0]["message"]
        except (KeyError, IndexError, TypeError) as e:
            raise MalformedResponse("no message in response") from e
        if not isinstance(message, dict):
            raise MalformedResponse("no message in response")

        content = message.get("content")
        if content is not None and not isinstance(content, str):
            raise MalformedResponse(f"unexpected content type {type(content).__name__}")
        if not content or not content.strip():
            raise EmptyContent("no completion in response")

        content = content.strip()
        if settings.THINKING_MARKER in content.lower():
            raise HeuristicRejected("response contains a reasoning marker")
        return content
