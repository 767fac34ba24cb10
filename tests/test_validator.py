import pytest

from lineforge.core.errors import (
    InvalidRangeError,
    OutOfBoundsError,
    OverlappingOperationsError,
)
from lineforge.core.line_buffer import LineBuffer
from lineforge.core.operations import EditOperation, TextInsertion
from lineforge.core.validator import OperationValidator, operations_overlap


def _buffer(n):
    return LineBuffer.from_lines(str(i) for i in range(1, n + 1))


def test_shared_line_is_an_overlap():
    ops = [EditOperation(2, 4, "A"), EditOperation(4, 6, "B")]
    with pytest.raises(OverlappingOperationsError) as exc:
        OperationValidator().validate(_buffer(10), ops)
    assert (exc.value.first, exc.value.second) == (1, 2)
    assert str(exc.value) == "operations 1 and 2 overlap"


def test_adjacent_ranges_do_not_overlap():
    ops = [EditOperation(2, 3, "A"), EditOperation(4, 6, "B")]
    OperationValidator().validate(_buffer(10), ops)


def test_overlap_reports_request_indices_regardless_of_order():
    ops = [EditOperation(5, 8, "B"), EditOperation(1, 2, "x"), EditOperation(3, 5, "A")]
    errors = OperationValidator().collect(_buffer(10), ops)
    assert [str(e) for e in errors] == ["operations 1 and 3 overlap"]


def test_nested_ranges_report_every_pair_with_the_outer_range():
    ops = [EditOperation(1, 10, "outer"), EditOperation(3, 4, "a"), EditOperation(6, 7, "b")]
    errors = OperationValidator().collect(_buffer(10), ops)
    assert sorted((e.first, e.second) for e in errors) == [(1, 2), (1, 3)]


def test_invalid_ranges_name_the_operation():
    validator = OperationValidator()
    with pytest.raises(InvalidRangeError) as exc:
        validator.validate(_buffer(5), [EditOperation(1, 1, "ok"), EditOperation(0, 1, "bad")])
    assert str(exc.value).startswith("operation 2:")

    with pytest.raises(InvalidRangeError) as exc:
        validator.validate(_buffer(5), [EditOperation(4, 3, "bad")])
    assert "start_line (4) > end_line (3)" in str(exc.value)


def test_out_of_bounds():
    with pytest.raises(OutOfBoundsError) as exc:
        OperationValidator().validate(_buffer(4), [EditOperation(3, 5, "x")])
    assert str(exc.value) == "operation 1: line 5 exceeds file length (4 lines)"


def test_checks_run_in_order_range_bounds_overlap():
    ops = [
        EditOperation(2, 3, "overlaps op 3"),
        EditOperation(9, 12, "out of bounds"),
        EditOperation(3, 3, "overlaps op 1"),
        EditOperation(0, 1, "invalid"),
    ]
    errors = OperationValidator().collect(_buffer(10), ops)
    assert [type(e) for e in errors] == [
        InvalidRangeError,
        OutOfBoundsError,
        OverlappingOperationsError,
    ]
    # the first error raised is the range error even though it is the last op
    with pytest.raises(InvalidRangeError):
        OperationValidator().validate(_buffer(10), ops)


def test_operations_overlap_predicate():
    assert operations_overlap(EditOperation(1, 3, ""), EditOperation(3, 5, ""))
    assert operations_overlap(EditOperation(2, 2, ""), EditOperation(1, 9, ""))
    assert not operations_overlap(EditOperation(1, 2, ""), EditOperation(3, 4, ""))


def test_insertions_must_address_existing_lines():
    validator = OperationValidator()
    buf = _buffer(3)
    validator.validate_insertions(buf, [TextInsertion(1, "x"), TextInsertion(3, "y", before=True)])

    with pytest.raises(InvalidRangeError) as exc:
        validator.validate_insertions(buf, [TextInsertion(1, "x"), TextInsertion(0, "y")])
    assert str(exc.value).startswith("insertion 2:")

    with pytest.raises(OutOfBoundsError) as exc:
        validator.validate_insertions(buf, [TextInsertion(4, "x")])
    assert "line 4 exceeds file length (3 lines)" in str(exc.value)
