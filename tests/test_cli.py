import json

import pytest

from lineforge.cli import main


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"allowed_directories": [str(tmp_path)]}))
    return path


def _run(config_file, *argv):
    return main(["--config", str(config_file), *argv])


def test_no_command_prints_help(capsys):
    assert main([]) == 1
    assert "usage: lineforge" in capsys.readouterr().out


def test_read_file_with_line_numbers(tmp_path, config_file, capsys):
    target = tmp_path / "notes.txt"
    target.write_text("alpha\nbeta\ngamma")

    assert _run(config_file, "read-file", str(target), "-n", "--offset", "2") == 0
    assert capsys.readouterr().out == "2: beta\n3: gamma\n"


def test_edit_file_reads_operations_from_file(tmp_path, config_file, capsys):
    target = tmp_path / "notes.txt"
    target.write_text("a\nb\nc")
    ops = tmp_path / "ops.json"
    ops.write_text(json.dumps([{"start_line": 3, "end_line": 3, "replacement": "C"}]))

    assert _run(config_file, "edit-file", str(target), f"@{ops}", "--no-backup") == 0
    assert capsys.readouterr().out == f"Successfully applied 1 operations to {target}\n"
    assert target.read_text() == "a\nb\nC"


def test_errors_go_to_stderr_with_exit_code_one(tmp_path, config_file, capsys):
    target = tmp_path / "notes.txt"
    target.write_text("a")

    assert _run(config_file, "edit-block", str(target), "4", "4", "x") == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err.startswith("Error: ")
    assert "exceeds file length" in captured.err
    assert target.read_text() == "a"


def test_paths_outside_the_allow_list_are_refused(tmp_path, config_file, capsys):
    outside = tmp_path.parent / (tmp_path.name + "-outside")
    outside.mkdir()
    target = outside / "f.txt"
    target.write_text("secret")

    assert _run(config_file, "read-file", str(target)) == 1
    assert "is not allowed" in capsys.readouterr().err

    assert _run(config_file, "--allow", str(outside), "read-file", str(target)) == 0
    assert capsys.readouterr().out == "secret\n"
    # --allow is not written back to the config file
    assert str(outside.resolve()) not in config_file.read_text()


def test_config_allow_is_persisted(tmp_path, config_file, capsys):
    extra = tmp_path / "extra"
    extra.mkdir()

    assert _run(config_file, "config", "allow", str(extra)) == 0
    assert "added to allowed list" in capsys.readouterr().out
    assert str(extra.resolve()) in json.loads(config_file.read_text())["allowed_directories"]

    assert _run(config_file, "config", "set", "file_read_line_limit", "2") == 0
    assert json.loads(config_file.read_text())["file_read_line_limit"] == 2


def test_config_show_and_validate(tmp_path, config_file, capsys):
    assert _run(config_file, "config", "show") == 0
    shown = json.loads(capsys.readouterr().out)
    assert shown["allowed_directories"] == [str(tmp_path)]

    assert _run(config_file, "config", "validate") == 0
    assert capsys.readouterr().out == "Configuration is valid\n"


def test_unreadable_config_file(tmp_path, capsys):
    broken = tmp_path / "config.json"
    broken.write_text("{")
    assert main(["--config", str(broken), "tools"]) == 1
    assert "Error parsing config file" in capsys.readouterr().err


def test_tools_lists_every_tool(config_file, capsys):
    assert _run(config_file, "tools") == 0
    names = [tool["name"] for tool in json.loads(capsys.readouterr().out)]
    assert "edit_multiple_files" in names
    assert len(names) == 13


def test_edit_multiple_dry_run(tmp_path, config_file, capsys):
    target = tmp_path / "notes.txt"
    target.write_text("a\nb")
    batch = json.dumps([{"path": str(target), "operations": [{"start_line": 2, "end_line": 2, "replacement": "B"}]}])

    assert _run(config_file, "edit-multiple", batch, "--dry-run") == 0
    out = capsys.readouterr().out
    assert out.startswith("DRY RUN - Preview of changes:\n\n")
    assert f"File: {target}" in out
    assert target.read_text() == "a\nb"


def test_write_file_and_append(tmp_path, config_file, capsys):
    target = tmp_path / "new" / "out.txt"

    assert _run(config_file, "write-file", str(target), "first\n") == 0
    assert _run(config_file, "write-file", str(target), "second\n", "--append") == 0
    out = capsys.readouterr().out
    assert f"Content successfully written to {target}" in out
    assert f"Content successfully appended to {target}" in out
    assert target.read_text() == "first\nsecond\n"


def test_relative_paths_use_dir_option(tmp_path, config_file, capsys):
    (tmp_path / "rel.txt").write_text("x\ny")

    assert _run(config_file, "--dir", str(tmp_path), "replace-text", "rel.txt", "y", "z", "--no-backup") == 0
    assert (tmp_path / "rel.txt").read_text() == "x\nz"
