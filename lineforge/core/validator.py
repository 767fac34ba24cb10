"""
Checks line-range operations and insertions against a buffer.

Checks run in three passes over the whole operation list: range shape,
then bounds, then pairwise overlap. ``iter_errors`` yields every problem;
``validate`` raises the first one. Indices in messages are 1-based request
positions. No I/O happens here.
"""

from __future__ import annotations

import logging
from typing import Iterator, List, Sequence

from lineforge.core.errors import (
    InvalidRangeError,
    OutOfBoundsError,
    OverlappingOperationsError,
    ValidationError,
)
from lineforge.core.line_buffer import LineBuffer
from lineforge.core.operations import EditOperation, TextInsertion

logger = logging.getLogger(__name__)


def operations_overlap(a: EditOperation, b: EditOperation) -> bool:
    return not (a.end_line < b.start_line or b.end_line < a.start_line)


class OperationValidator:

    def iter_errors(self, buffer: LineBuffer, operations: Sequence[EditOperation]) -> Iterator[ValidationError]:
        line_count = buffer.line_count

        for i, op in enumerate(operations, start=1):
            if op.start_line < 1 or op.end_line < 1:
                yield InvalidRangeError(i, op.start_line, op.end_line, "line numbers must be positive")
            elif op.end_line < op.start_line:
                yield InvalidRangeError(
                    i, op.start_line, op.end_line,
                    f"start_line ({op.start_line}) > end_line ({op.end_line})",
                )

        for i, op in enumerate(operations, start=1):
            if op.start_line > line_count:
                yield OutOfBoundsError(i, op.start_line, line_count)
            elif op.end_line > line_count:
                yield OutOfBoundsError(i, op.end_line, line_count)

        yield from self._overlaps(operations)

    def _overlaps(self, operations: Sequence[EditOperation]) -> Iterator[OverlappingOperationsError]:
        # Sweep in start order; compare each op against the furthest-reaching one seen so far.
        order = sorted(range(len(operations)), key=lambda i: (operations[i].start_line, operations[i].end_line, i))
        reach = None
        for idx in order:
            op = operations[idx]
            if reach is not None and operations_overlap(operations[reach], op):
                first, second = sorted((reach, idx))
                yield OverlappingOperationsError(first + 1, second + 1)
            if reach is None or op.end_line > operations[reach].end_line:
                reach = idx

    def validate(self, buffer: LineBuffer, operations: Sequence[EditOperation]) -> None:
        for error in self.iter_errors(buffer, operations):
            logger.warning(f"Rejected edit operations: {error}")
            raise error

    def collect(self, buffer: LineBuffer, operations: Sequence[EditOperation]) -> List[ValidationError]:
        return list(self.iter_errors(buffer, operations))

    # ------------------------------------------------------------------
    # Insertions
    # ------------------------------------------------------------------
    @staticmethod
    def check_insertion(buffer: LineBuffer, insertion: TextInsertion, index: int) -> None:
        """An insertion must address an existing line."""
        if insertion.line < 1:
            raise InvalidRangeError(
                index, insertion.line, insertion.line,
                f"invalid line number: {insertion.line}", kind="insertion",
            )
        if insertion.line > buffer.line_count:
            raise OutOfBoundsError(index, insertion.line, buffer.line_count, kind="insertion")

    def validate_insertions(self, buffer: LineBuffer, insertions: Sequence[TextInsertion]) -> None:
        for i, insertion in enumerate(insertions, start=1):
            self.check_insertion(buffer, insertion, i)
