"""
Applies operations to a LineBuffer without line-number drift.

Operations are applied bottom-up (highest start line first). Every splice
then happens strictly below the lines still waiting to be edited, so their
original line numbers stay valid. Operations must already be known not to
overlap; the scheduler does not re-check.

Tie-breaks:
  - edits with the same start line are applied in request order;
  - insertions are keyed by the gap they fill: "before line N" and
    "after line N-1" are the same gap. Gaps are filled bottom-up and each
    gap from the last request to the first, so blocks sharing a gap appear
    in the file in request order.
"""

from __future__ import annotations

from typing import Iterator, List, Sequence, Tuple

from lineforge.core.errors import InvalidRangeError, ValidationError
from lineforge.core.line_buffer import LineBuffer, split_lines
from lineforge.core.operations import EditOperation, TextInsertion
from lineforge.core.validator import OperationValidator


class OperationScheduler:

    @staticmethod
    def order(operations: Sequence[EditOperation]) -> List[Tuple[int, EditOperation]]:
        """(request index, operation) pairs in application order."""
        # sorted() stays stable with reverse=True, which keeps request order on ties.
        return sorted(enumerate(operations), key=lambda pair: pair[1].start_line, reverse=True)

    @staticmethod
    def apply_one(buffer: LineBuffer, op: EditOperation) -> LineBuffer:
        return buffer.splice(op.start_line, op.end_line, split_lines(op.replacement_text))

    def iter_apply(self, buffer: LineBuffer, operations: Sequence[EditOperation]) -> Iterator[Tuple[int, EditOperation, LineBuffer]]:
        """Yield (request index, operation, buffer after it) for each step."""
        current = buffer
        for index, op in self.order(operations):
            try:
                current = self.apply_one(current, op)
            except ValidationError as e:
                # Only reachable when the caller skipped validation.
                raise InvalidRangeError(
                    index + 1, op.start_line, op.end_line,
                    f"lines {op.start_line}-{op.end_line} cannot be applied to a {current.line_count}-line buffer",
                ) from e
            yield index, op, current

    def apply(self, buffer: LineBuffer, operations: Sequence[EditOperation]) -> LineBuffer:
        result = buffer
        for _, _, result in self.iter_apply(buffer, operations):
            pass
        return result

    # ------------------------------------------------------------------
    # Insertions
    # ------------------------------------------------------------------
    @staticmethod
    def gap(insertion: TextInsertion) -> int:
        """Number of the line the inserted block follows (0 for the top of the file)."""
        return insertion.line - 1 if insertion.before else insertion.line

    @staticmethod
    def order_insertions(insertions: Sequence[TextInsertion]) -> List[Tuple[int, TextInsertion]]:
        return sorted(
            enumerate(insertions),
            key=lambda pair: (OperationScheduler.gap(pair[1]), pair[0]),
            reverse=True,
        )

    @staticmethod
    def insert_one(buffer: LineBuffer, insertion: TextInsertion) -> LineBuffer:
        new_lines = split_lines(insertion.content)
        if insertion.before:
            return buffer.splice(insertion.line, insertion.line - 1, new_lines)
        return buffer.splice(insertion.line + 1, insertion.line, new_lines)

    def apply_insertions(self, buffer: LineBuffer, insertions: Sequence[TextInsertion]) -> LineBuffer:
        """All insertions address the buffer as given."""
        result = buffer
        for _, insertion in self.order_insertions(insertions):
            result = self.insert_one(result, insertion)
        return result

    def apply_insertions_sequential(self, buffer: LineBuffer, insertions: Sequence[TextInsertion]) -> LineBuffer:
        """Each insertion addresses the buffer left by the previous one."""
        result = buffer
        for i, insertion in enumerate(insertions, start=1):
            OperationValidator.check_insertion(result, insertion, i)
            result = self.insert_one(result, insertion)
        return result
