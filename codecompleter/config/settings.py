"""Configuration values for the code completer."""

import logging
from dataclasses import dataclass

log = logging.getLogger(__name__)

# Time in seconds the editor must be idle after a trigger before querying the LLM
DEBOUNCE_DELAY = 0.3

# Number of lines above and below the cursor sent as context
CONTEXT_LINES = 20

# Longest prefix tail checked when stripping an echoed prefix from a completion
MAX_OVERLAP = 100

# Default OpenAI-compatible chat endpoint (Ollama)
LLM_ENDPOINT = "http://localhost:11434/v1/chat/completions"
LLM_MODEL = "llama3.2:1b"
LLM_MAX_TOKENS = 96
LLM_TEMPERATURE = 0.2

# Seconds before the HTTP request is abandoned
LLM_TIMEOUT = 30.0

# Responses containing this marker (any case) are treated as leaked reasoning.
# Over-broad: it also rejects code that legitimately uses the word.
THINKING_MARKER = "thinking"

PROGRESS_TITLE = "Local LLM: generating completion..."


@dataclass(frozen=True)
class CompletionConfig:
    """Read-only settings for a single completion request."""

    endpoint: str = LLM_ENDPOINT
    model: str = LLM_MODEL
    max_tokens: int = LLM_MAX_TOKENS
    temperature: float = LLM_TEMPERATURE
    timeout: float = LLM_TIMEOUT

    def __post_init__(self):
        if not self.endpoint:
            raise ValueError("endpoint must not be empty")
        if not self.model:
            raise ValueError("model must not be empty")
        if isinstance(self.max_tokens, bool) or not isinstance(self.max_tokens, int) or self.max_tokens <= 0:
            raise ValueError(f"max_tokens must be a positive integer, got {self.max_tokens!r}")
        if isinstance(self.temperature, bool) or not isinstance(self.temperature, (int, float)) \
                or not 0 <= self.temperature <= 2:
            raise ValueError(f"temperature must be within [0, 2], got {self.temperature!r}")
        if isinstance(self.timeout, bool) or not isinstance(self.timeout, (int, float)) or self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout!r}")

    @classmethod
    def from_mapping(cls, mapping=None):
        """
        Build a config from a host settings mapping.

        Keys follow the editor setting names (``apiUrl``, ``model``, ``maxTokens``,
        ``temperature``, ``timeout``); the snake_case field names are accepted too.
        Missing or ``None`` values use the defaults. Invalid values are logged and
        replaced by the default, so this never raises.

        :param mapping: Any object with a ``get`` method, or None.
        """
        mapping = mapping or {}
        aliases = {
            "endpoint": ("apiUrl", "endpoint"),
            "model": ("model",),
            "max_tokens": ("maxTokens", "max_tokens"),
            "temperature": ("temperature",),
            "timeout": ("timeout",),
        }
        defaults = cls()
        values = {}
        for field, keys in aliases.items():
            value = None
            for key in keys:
                value = mapping.get(key)
                if value is not None:
                    break
            if value is None:
                continue
            try:
                # Validate each field on its own so one bad value does not discard the rest
                cls(**{field: value})
            except ValueError as e:
                log.warning("Ignoring invalid setting %s=%r (%s); using %r",
                            field, value, e, getattr(defaults, field))
                continue
            values[field] = value
        return cls(**values)
