"""
Find-and-replace over a whole file's text (not line-addressed).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Pattern

from lineforge.core.errors import InvalidPatternError


@dataclass
class ReplaceOutcome:
    content: str
    count: int


class TextReplacer:
    """
    Literal or regex substitution with case and whole-word options.

    ``max_replacements <= 0`` means no limit. In literal mode the replacement
    is inserted verbatim; in regex mode group references (``\\1``, ``\\g<name>``)
    are expanded.
    """

    def compile(self, find: str, *, regex: bool = False, case_sensitive: bool = True,
                whole_word: bool = False) -> Pattern[str]:
        if not find:
            raise InvalidPatternError("find pattern cannot be empty")

        source = find if regex else re.escape(find)
        if whole_word:
            source = rf"\b(?:{source})\b"
        flags = 0 if case_sensitive else re.IGNORECASE
        try:
            return re.compile(source, flags)
        except re.error as e:
            raise InvalidPatternError(f"Invalid regex pattern: {e}") from e

    def replace(self, content: str, find: str, replace: str, *, regex: bool = False,
                case_sensitive: bool = True, whole_word: bool = False,
                max_replacements: int = -1) -> ReplaceOutcome:
        pattern = self.compile(find, regex=regex, case_sensitive=case_sensitive, whole_word=whole_word)
        limit = max_replacements if max_replacements and max_replacements > 0 else 0

        if regex:
            try:
                new_content, count = pattern.subn(replace, content, count=limit)
            except (re.error, IndexError) as e:
                raise InvalidPatternError(f"Invalid replacement template: {e}") from e
        else:
            new_content, count = pattern.subn(lambda _m: replace, content, count=limit)

        return ReplaceOutcome(content=new_content, count=count)

