import json

from lineforge.core.editing_engine import EditEngine
from lineforge.core.handlers import ToolRegistry, ToolResult, build_default_registry
from lineforge.core.handlers.base import BaseToolHandler
from lineforge.services.config_service import ConfigService


def _registry(tmp_path):
    service = ConfigService(tmp_path / "config.json")
    service.config.allowed_directories = [str(tmp_path)]
    return build_default_registry(EditEngine(service.config), service), service


def test_default_registry_exposes_every_tool(tmp_path):
    registry, _ = _registry(tmp_path)
    assert registry.names() == [
        "edit_file",
        "edit_block",
        "edit_multiple_files",
        "insert_text",
        "replace_text",
        "read_file",
        "write_file",
        "get_config",
        "set_config_value",
        "add_allowed_directory",
        "remove_allowed_directory",
        "validate_config",
        "reset_config",
    ]
    described = {tool["name"]: tool for tool in registry.describe()}
    required = [p["name"] for p in described["edit_file"]["parameters"] if p["required"]]
    assert required == ["path", "operations"]


def test_edit_file_accepts_operations_as_json_string(tmp_path):
    registry, _ = _registry(tmp_path)
    target = tmp_path / "f.txt"
    target.write_text("a\nb\nc")

    result = registry.call("edit_file", {
        "path": str(target),
        "operations": json.dumps([{"start_line": 2.0, "end_line": 2, "replacement": "B"}]),
        "create_backup": False,
    })

    assert result == ToolResult(f"Successfully applied 1 operations to {target}")
    assert target.read_text() == "a\nB\nc"


def test_engine_errors_become_error_results(tmp_path):
    registry, _ = _registry(tmp_path)
    target = tmp_path / "f.txt"
    target.write_text("a\nb")

    result = registry.call("edit_file", {
        "path": str(target),
        "operations": [{"start_line": 1, "end_line": 2, "replacement": "x"},
                       {"start_line": 2, "end_line": 2, "replacement": "y"}],
    })
    assert result.is_error
    assert result.text == f"{target}: operations 1 and 2 overlap"


def test_parameter_errors_become_error_results(tmp_path):
    registry, _ = _registry(tmp_path)

    missing = registry.call("read_file", {})
    assert missing.is_error
    assert "Missing required parameter: path" in missing.text

    bad_json = registry.call("edit_file", {"path": str(tmp_path / "f.txt"), "operations": "[{"})
    assert bad_json.is_error
    assert bad_json.text.startswith("Invalid JSON for edit_file")

    bad_type = registry.call("edit_block", {
        "path": str(tmp_path / "f.txt"), "start_line": "two", "end_line": 2, "replacement": "x",
    })
    assert bad_type.is_error
    assert "Invalid start_line" in bad_type.text

    assert registry.call("no_such_tool").text == "Unknown tool: no_such_tool"


def test_insert_text_accepts_position_strings(tmp_path):
    registry, _ = _registry(tmp_path)
    target = tmp_path / "f.txt"
    target.write_text("a\nb")

    result = registry.call("insert_text", {
        "path": str(target),
        "insertions": [{"line": 2, "text": "mid", "position": "before"}],
        "create_backup": "false",
    })
    assert not result.is_error
    assert target.read_text() == "a\nmid\nb"


def test_edit_multiple_files_dry_run(tmp_path):
    registry, _ = _registry(tmp_path)
    target = tmp_path / "f.txt"
    target.write_text("a")

    result = registry.call("edit_multiple_files", {
        "files": [{"path": str(target), "operations": [{"start_line": 1, "end_line": 1, "replacement": "b"}]}],
        "dry_run": True,
    })
    assert result.text.startswith("DRY RUN - Preview of changes:")
    assert target.read_text() == "a"


def test_config_tools_change_what_the_engine_may_touch(tmp_path):
    registry, service = _registry(tmp_path)
    other = tmp_path.parent / (tmp_path.name + "-other")
    other.mkdir()
    target = other / "f.txt"
    target.write_text("x")

    denied = registry.call("read_file", {"path": str(target)})
    assert denied.is_error
    assert "is not allowed" in denied.text

    added = registry.call("add_allowed_directory", {"directory": str(other)})
    assert added.text == f"Directory '{other}' added to allowed list"
    assert registry.call("read_file", {"path": str(target)}).text == "x"

    removed = registry.call("remove_allowed_directory", {"directory": str(other)})
    assert not removed.is_error
    assert registry.call("read_file", {"path": str(target)}).is_error

    again = registry.call("remove_allowed_directory", {"directory": str(other)})
    assert again.is_error
    assert again.text.startswith("Directory not in allowed list")


def test_set_and_get_config(tmp_path):
    registry, service = _registry(tmp_path)

    result = registry.call("set_config_value", {"key": "file_read_line_limit", "value": 3})
    assert result.text == "Configuration key 'file_read_line_limit' set to '3'"
    assert json.loads(registry.call("get_config").text)["file_read_line_limit"] == 3

    unknown = registry.call("set_config_value", {"key": "nope", "value": "1"})
    assert unknown.is_error
    assert unknown.text == "Unknown config key: nope"


def test_validate_and_reset_config(tmp_path):
    registry, service = _registry(tmp_path)
    assert registry.call("validate_config").text == "Configuration is valid"

    service.config.allowed_directories = [str(tmp_path / "missing")]
    invalid = registry.call("validate_config")
    assert invalid.is_error
    assert "does not exist" in invalid.text

    assert registry.call("reset_config").text == "Configuration reset to default values"
    assert service.config.file_read_line_limit == 1000


class _EchoHandler(BaseToolHandler):
    name = "echo"

    def execute(self, params):
        return params.get("text", "")


def test_custom_handlers_can_be_registered():
    registry = ToolRegistry()
    registry.register(_EchoHandler())
    assert registry.call("echo", {"text": "hi"}) == ToolResult("hi")
    assert registry.describe() == [{"name": "echo", "description": "", "parameters": []}]


def test_unwritable_config_file_becomes_error_result(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    service = ConfigService(blocker / "config.json")
    registry = build_default_registry(EditEngine(service.config), service)

    result = registry.call("add_allowed_directory", {"directory": str(tmp_path)})
    assert result.is_error
    assert result.text.startswith("add_allowed_directory failed:")


def test_edit_multiple_files_applies_every_file(tmp_path):
    registry, _ = _registry(tmp_path)
    first = tmp_path / "a.txt"
    second = tmp_path / "b.txt"
    first.write_text("1")
    second.write_text("2")

    result = registry.call("edit_multiple_files", {
        "files": json.dumps([
            {"path": str(first), "operations": [{"start_line": 1, "end_line": 1, "replacement": "one"}]},
            {"path": str(second), "operations": [{"start": 1, "end": 1, "text": "two"}], "create_backup": True},
        ]),
        "atomic": "false",
    })

    assert not result.is_error
    assert (first.read_text(), second.read_text()) == ("one", "two")
    assert len(list(tmp_path.glob("b.txt.backup.*"))) == 1
