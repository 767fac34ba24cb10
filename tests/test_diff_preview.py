from lineforge.core.diff_preview import DiffPreview
from lineforge.core.line_buffer import LineBuffer
from lineforge.core.operations import EditOperation


def test_preview_renders_original_and_renumbered_replacement():
    buf = LineBuffer.load("a\nb\nc\nd")
    text = DiffPreview().preview(buf, [EditOperation(2, 3, "X\nY\nZ", description="swap middle")])
    assert text == (
        "Lines 2-3:\n"
        "- Original:\n"
        "  2: b\n"
        "  3: c\n"
        "+ Replacement:\n"
        "  2: X\n"
        "  3: Y\n"
        "  4: Z\n"
        "  Description: swap middle\n"
        "\n"
    )


def test_preview_keeps_the_given_order_and_does_not_mutate():
    buf = LineBuffer.load("1\n2\n3\n4\n5")
    ops = [EditOperation(4, 4, "four"), EditOperation(1, 1, "one")]
    text = DiffPreview().preview(buf, ops)
    assert text.index("Lines 4-4:") < text.index("Lines 1-1:")
    assert "Description" not in text
    assert buf.lines == ("1", "2", "3", "4", "5")


def test_preview_of_no_operations_is_empty():
    assert DiffPreview().preview(LineBuffer.load("a"), []) == ""


def test_character_diff_marks_removed_and_added_text():
    diff = DiffPreview.character_diff("abc", "aXc")
    assert diff == "- Original:\nabc\n+ Replacement:\naXc\n~ Changes:\na[-b-]{+X+}c\n"


def test_character_diff_reports_no_changes():
    assert DiffPreview.character_diff("same", "same") == "No changes"


def test_character_diff_handles_pure_insertion_and_deletion():
    assert "{+ world+}" in DiffPreview.character_diff("hello", "hello world")
    assert "[- world-]" in DiffPreview.character_diff("hello world", "hello")
