"""
document.py

Plain-text document model and extraction of the bounded context around the
cursor that is sent to the LLM.
"""

import re
from dataclasses import dataclass
from typing import NamedTuple

from ..config import settings

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


class Position(NamedTuple):
    """Zero-based line and character offset."""

    line: int
    character: int


@dataclass(frozen=True)
class ContextWindow:
    prefix: str
    suffix: str


class TextDocument:
    """
    Immutable snapshot of an editor buffer.

    Line endings (``\\n``, ``\\r\\n``, ``\\r``) are preserved in the text returned
    by ``get_text``. A trailing newline opens a final empty line, like editors do.
    """

    def __init__(self, text):
        self.text = text
        self._starts = [0]
        self._lengths = []
        for match in _LINE_BREAK.finditer(text):
            self._lengths.append(match.start() - self._starts[-1])
            self._starts.append(match.end())
        self._lengths.append(len(text) - self._starts[-1])

    @property
    def line_count(self):
        return len(self._starts)

    def line_length(self, line):
        """Length of ``line`` without its line break."""
        return self._lengths[line]

    def validate_position(self, position):
        """Clamp ``position`` into the document."""
        line = min(max(position.line, 0), self.line_count - 1)
        character = min(max(position.character, 0), self._lengths[line])
        return Position(line, character)

    def offset_at(self, position):
        position = self.validate_position(position)
        return self._starts[position.line] + position.character

    def get_text(self, start, end):
        return self.text[self.offset_at(start):self.offset_at(end)]


def extract_context(document, position, lines=settings.CONTEXT_LINES):
    """
    Return the text within ``lines`` lines above and below ``position``.

    The window is clamped to the document: it starts at the beginning of its
    first line and stops at the end of its last line (line break excluded).

    :param document: A TextDocument, or any object with ``line_count``,
                     ``line_length(line)`` and ``get_text(start, end)``.
    :param position: The cursor Position.
    """
    last_line = document.line_count - 1
    cursor_line = min(max(position.line, 0), last_line)
    start_line = max(0, cursor_line - lines)
    end_line = min(last_line, cursor_line + lines)

    start = Position(start_line, 0)
    end = Position(end_line, document.line_length(end_line))

    return ContextWindow(
        prefix=document.get_text(start, position),
        suffix=document.get_text(position, end),
    )
