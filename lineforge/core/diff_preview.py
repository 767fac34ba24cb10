"""
Read-only renderings of pending edits.
"""

from __future__ import annotations

from difflib import SequenceMatcher
from typing import List, Sequence

from lineforge.core.line_buffer import LineBuffer, split_lines
from lineforge.core.operations import EditOperation


class DiffPreview:
    """
    Text previews of operations against a buffer.

    Operations are rendered in the order given. Nothing is mutated.
    """

    def preview(self, buffer: LineBuffer, operations: Sequence[EditOperation]) -> str:
        out: List[str] = []
        for op in operations:
            out.append(f"Lines {op.start_line}-{op.end_line}:")
            out.append("- Original:")
            for offset, line in enumerate(buffer.slice(op.start_line, op.end_line)):
                out.append(f"  {op.start_line + offset}: {line}")
            out.append("+ Replacement:")
            for offset, line in enumerate(split_lines(op.replacement_text)):
                out.append(f"  {op.start_line + offset}: {line}")
            if op.description:
                out.append(f"  Description: {op.description}")
            out.append("")
        return "\n".join(out) + ("\n" if out else "")

    @staticmethod
    def character_diff(original: str, replacement: str) -> str:
        """
        Inline character diff: removed text as ``[-...-]``, added as ``{+...+}``.
        """
        if original == replacement:
            return "No changes"

        matcher = SequenceMatcher(None, original, replacement, autojunk=False)
        inline: List[str] = []
        for tag, i1, i2, j1, j2 in matcher.get_opcodes():
            if tag == "equal":
                inline.append(original[i1:i2])
            if tag in ("delete", "replace"):
                inline.append(f"[-{original[i1:i2]}-]")
            if tag in ("insert", "replace"):
                inline.append(f"{{+{replacement[j1:j2]}+}}")

        return (
            "- Original:\n" + original + "\n"
            "+ Replacement:\n" + replacement + "\n"
            "~ Changes:\n" + "".join(inline) + "\n"
        )
