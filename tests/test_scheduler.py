from itertools import permutations

import pytest

from lineforge.core.errors import InvalidRangeError, OutOfBoundsError
from lineforge.core.line_buffer import LineBuffer
from lineforge.core.operations import EditOperation, TextInsertion
from lineforge.core.scheduler import OperationScheduler


def _lines(*items):
    return LineBuffer.from_lines(items)


def test_single_edit_scenario():
    out = OperationScheduler().apply(_lines("a", "b", "c", "d"), [EditOperation(2, 3, "X\nY\nZ")])
    assert list(out.lines) == ["a", "X", "Y", "Z", "d"]


def test_multi_op_scenario_applies_bottom_up():
    scheduler = OperationScheduler()
    ops = [EditOperation(1, 1, "A"), EditOperation(4, 5, "B\nC")]
    out = scheduler.apply(_lines("1", "2", "3", "4", "5"), ops)
    assert list(out.lines) == ["A", "2", "3", "B", "C"]
    assert [index for index, _ in scheduler.order(ops)] == [1, 0]


def test_result_does_not_depend_on_request_order():
    buf = _lines(*[str(i) for i in range(1, 11)])
    ops = [
        EditOperation(1, 2, "first\nblock\ngrows"),
        EditOperation(5, 5, ""),
        EditOperation(8, 10, "tail"),
    ]
    results = {OperationScheduler().apply(buf, list(p)).lines for p in permutations(ops)}
    assert len(results) == 1
    assert list(results.pop()) == ["first", "block", "grows", "3", "4", "", "6", "7", "tail"]


def test_order_is_stable_for_equal_start_lines():
    ops = [EditOperation(3, 3, "a"), EditOperation(7, 7, "b"), EditOperation(3, 4, "c")]
    assert [index for index, _ in OperationScheduler.order(ops)] == [1, 0, 2]


def test_insertion_scenarios():
    scheduler = OperationScheduler()
    buf = _lines("a", "b")
    assert list(scheduler.apply_insertions(buf, [TextInsertion(1, "Z", before=True)]).lines) == ["Z", "a", "b"]
    assert list(scheduler.apply_insertions(buf, [TextInsertion(1, "Z", before=False)]).lines) == ["a", "Z", "b"]


def test_insertions_at_same_line_keep_request_order():
    scheduler = OperationScheduler()
    buf = _lines("a", "b", "c")
    insertions = [
        TextInsertion(2, "after-1"),
        TextInsertion(2, "before-1", before=True),
        TextInsertion(2, "after-2"),
        TextInsertion(2, "before-2", before=True),
    ]
    out = scheduler.apply_insertions(buf, insertions)
    assert list(out.lines) == ["a", "before-1", "before-2", "b", "after-1", "after-2", "c"]


def test_insertions_address_the_original_lines():
    scheduler = OperationScheduler()
    buf = _lines("1", "2", "3")
    out = scheduler.apply_insertions(buf, [TextInsertion(1, "x\ny"), TextInsertion(3, "z")])
    assert list(out.lines) == ["1", "x", "y", "2", "3", "z"]


def test_sequential_insertions_address_the_updated_buffer():
    scheduler = OperationScheduler()
    buf = _lines("1", "2", "3")
    out = scheduler.apply_insertions_sequential(buf, [TextInsertion(1, "x\ny"), TextInsertion(3, "z")])
    assert list(out.lines) == ["1", "x", "y", "z", "2", "3"]

    # line 5 only exists after the first insertion
    out = scheduler.apply_insertions_sequential(buf, [TextInsertion(3, "4\n5"), TextInsertion(5, "6")])
    assert list(out.lines) == ["1", "2", "3", "4", "5", "6"]

    with pytest.raises(OutOfBoundsError) as exc:
        scheduler.apply_insertions_sequential(buf, [TextInsertion(1, "x"), TextInsertion(9, "y")])
    assert str(exc.value).startswith("insertion 2:")


def test_unvalidated_out_of_range_operation_names_its_index():
    ops = [EditOperation(1, 1, "ok"), EditOperation(7, 8, "too far")]
    with pytest.raises(InvalidRangeError) as exc:
        OperationScheduler().apply(_lines("a", "b"), ops)
    assert str(exc.value).startswith("operation 2:")


def test_insertions_into_the_same_gap_keep_request_order():
    scheduler = OperationScheduler()
    buf = _lines("a", "b", "c")

    out = scheduler.apply_insertions(buf, [TextInsertion(3, "before-3", before=True), TextInsertion(2, "after-2")])
    assert list(out.lines) == ["a", "b", "before-3", "after-2", "c"]

    out = scheduler.apply_insertions(buf, [TextInsertion(2, "after-2"), TextInsertion(3, "before-3", before=True)])
    assert list(out.lines) == ["a", "b", "after-2", "before-3", "c"]
