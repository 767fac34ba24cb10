"""
In-memory line buffer with 1-based addressing.

Line endings are normalized on load (CRLF and lone CR become LF) and the
text is split strictly on LF, so a trailing newline yields a final empty
line. ``serialize()`` joins with LF again, which gives the round-trip
property ``serialize(load(t)) == normalize_newlines(t)``.

Buffers are immutable: ``splice`` returns a new buffer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

from lineforge.core.errors import InvalidRangeError, OutOfBoundsError


def normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def split_lines(text: str) -> List[str]:
    return normalize_newlines(text).split("\n")


def detect_newline(text: str) -> str:
    """Return the separator the text consistently uses, defaulting to LF."""
    crlf = text.count("\r\n")
    lf = text.count("\n")
    cr = text.count("\r")
    if crlf and crlf == lf and crlf == cr:
        return "\r\n"
    if cr and not lf:
        return "\r"
    return "\n"


@dataclass(frozen=True)
class LineBuffer:
    lines: Tuple[str, ...]
    newline: str = "\n"

    @classmethod
    def load(cls, text: str) -> "LineBuffer":
        return cls(tuple(split_lines(text)), detect_newline(text))

    @classmethod
    def from_lines(cls, lines: Iterable[str], newline: str = "\n") -> "LineBuffer":
        return cls(tuple(lines), newline)

    @property
    def line_count(self) -> int:
        return len(self.lines)

    def __len__(self) -> int:
        return len(self.lines)

    def slice(self, start: int, end: int) -> List[str]:
        """Lines ``start..end`` inclusive, 1-based. Out-of-range parts are clipped."""
        if end < start:
            return []
        return list(self.lines[max(start, 1) - 1 : end])

    def splice(self, start: int, end: int, new_lines: Sequence[str]) -> "LineBuffer":
        """
        Replace lines ``start..end`` (inclusive, 1-based) with ``new_lines``.

        ``end == start - 1`` is an empty range: nothing is removed and
        ``new_lines`` are inserted before line ``start``.
        """
        count = len(self.lines)
        if start < 1 or end < start - 1:
            raise InvalidRangeError(0, start, end, f"invalid splice range {start}-{end}", kind="splice")
        if start > count + 1:
            raise OutOfBoundsError(0, start, count, kind="splice")
        if end > count:
            raise OutOfBoundsError(0, end, count, kind="splice")

        merged = self.lines[: start - 1] + tuple(new_lines) + self.lines[end:]
        return LineBuffer(merged, self.newline)

    def serialize(self, newline: str = "\n") -> str:
        return newline.join(self.lines)

    def render(self, preserve_newline: bool = True) -> str:
        """Text for writing back to disk."""
        return self.serialize(self.newline if preserve_newline else "\n")
