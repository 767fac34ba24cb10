"""
Text Editing Tool Handlers

Thin adapters from tool parameters to EditEngine calls.
"""

from typing import Any, Dict

from lineforge.core.editing_engine import EditEngine
from lineforge.core.handlers.base import BaseToolHandler, param
from lineforge.core.operations import BatchEditRequest, EditOperation, TextInsertion


class TextToolHandler(BaseToolHandler):
    """Base for handlers that drive the editing engine."""

    def __init__(self, engine: EditEngine):
        self.engine = engine


class EditFileHandler(TextToolHandler):
    name = "edit_file"
    description = "Edit files with line-based replacements, supports multiple edits in one go"
    parameters = (
        param("path", "string", "File path to edit", required=True),
        param("operations", "json",
              'JSON array of edit operations: [{"start_line": 1, "end_line": 3, '
              '"replacement": "new text", "description": "optional"}]', required=True),
        param("create_backup", "boolean", "Create backup before editing (default: true)"),
        param("validate_operations", "boolean", "Validate operations before applying (default: true)"),
        param("show_preview", "boolean", "Show preview of changes without applying them (default: false)"),
        param("atomic", "boolean", "Write the file once after all operations (default: true)"),
    )

    def execute(self, params: Dict[str, Any]) -> str:
        operations = [EditOperation.from_dict(op) for op in self.get_json_list(params, "operations")]
        return self.engine.edit_file(
            self.get_str(params, "path"),
            operations,
            create_backup=self.get_bool(params, "create_backup", True),
            validate_operations=self.get_bool(params, "validate_operations", True),
            show_preview=self.get_bool(params, "show_preview", False),
            atomic=self.get_bool(params, "atomic", True),
        )


class EditBlockHandler(TextToolHandler):
    name = "edit_block"
    description = "Replace one line range, with character-level diff feedback"
    parameters = (
        param("path", "string", "File path to edit", required=True),
        param("start_line", "number", "Starting line number (1-based)", required=True),
        param("end_line", "number", "Ending line number (1-based)", required=True),
        param("replacement", "string", "Replacement text", required=True),
        param("show_diff", "boolean", "Show character-level diff feedback (default: true)"),
        param("create_backup", "boolean", "Create backup before editing (default: true)"),
        param("validate_syntax", "boolean", "Validate syntax for known file types (default: false)"),
    )

    def execute(self, params: Dict[str, Any]) -> str:
        return self.engine.edit_block(
            self.get_str(params, "path"),
            self.get_int(params, "start_line", 1),
            self.get_int(params, "end_line", 1),
            self.get_str(params, "replacement"),
            show_diff=self.get_bool(params, "show_diff", True),
            create_backup=self.get_bool(params, "create_backup", True),
            validate_syntax=self.get_bool(params, "validate_syntax", False),
        )


class EditMultipleFilesHandler(TextToolHandler):
    name = "edit_multiple_files"
    description = "Edit multiple files with line-based replacements in one request"
    parameters = (
        param("files", "json",
              'JSON array of file edit requests: [{"path": "file.txt", "operations": [...], '
              '"create_backup": true}]', required=True),
        param("atomic", "boolean", "All files are written or none are (default: true)"),
        param("dry_run", "boolean", "Preview changes without applying them (default: false)"),
        param("continue_on_error", "boolean", "Continue with the next file after a failure (ignored if atomic=true)"),
        param("validate_all", "boolean", "Validate all files before writing any (default: true)"),
    )

    def execute(self, params: Dict[str, Any]) -> str:
        batch = BatchEditRequest.from_files(
            self.get_json_list(params, "files"),
            atomic=self.get_bool(params, "atomic", True),
            dry_run=self.get_bool(params, "dry_run", False),
            continue_on_error=self.get_bool(params, "continue_on_error", False),
            validate_all=self.get_bool(params, "validate_all", True),
        )
        return self.engine.edit_multiple_files(batch)


class InsertTextHandler(TextToolHandler):
    name = "insert_text"
    description = "Insert text before or after specific lines of a file"
    parameters = (
        param("path", "string", "File path to edit", required=True),
        param("insertions", "json",
              'JSON array of insertions: [{"line": 5, "text": "new line", "position": "before|after"}]',
              required=True),
        param("create_backup", "boolean", "Create backup before editing (default: true)"),
        param("adjust_line_numbers", "boolean",
              "Line numbers refer to the original file rather than to the result "
              "of the previous insertion (default: true)"),
    )

    def execute(self, params: Dict[str, Any]) -> str:
        insertions = [TextInsertion.from_dict(i) for i in self.get_json_list(params, "insertions")]
        return self.engine.insert_text(
            self.get_str(params, "path"),
            insertions,
            create_backup=self.get_bool(params, "create_backup", True),
            adjust_line_numbers=self.get_bool(params, "adjust_line_numbers", True),
        )


class ReplaceTextHandler(TextToolHandler):
    name = "replace_text"
    description = "Find and replace text in a file with optional regex support"
    parameters = (
        param("path", "string", "File path to edit", required=True),
        param("find", "string", "Text to find", required=True),
        param("replace", "string", "Replacement text", required=True),
        param("regex", "boolean", "Use regular expressions (default: false)"),
        param("case_sensitive", "boolean", "Case sensitive search (default: true)"),
        param("whole_word", "boolean", "Match whole words only (default: false)"),
        param("max_replacements", "number", "Maximum number of replacements (default: unlimited)"),
        param("create_backup", "boolean", "Create backup before editing (default: true)"),
    )

    def execute(self, params: Dict[str, Any]) -> str:
        return self.engine.replace_text(
            self.get_str(params, "path"),
            self.get_str(params, "find"),
            self.get_str(params, "replace"),
            regex=self.get_bool(params, "regex", False),
            case_sensitive=self.get_bool(params, "case_sensitive", True),
            whole_word=self.get_bool(params, "whole_word", False),
            max_replacements=self.get_int(params, "max_replacements", -1),
            create_backup=self.get_bool(params, "create_backup", True),
        )


class ReadFileHandler(TextToolHandler):
    name = "read_file"
    description = "Read a text file, optionally a range of lines"
    parameters = (
        param("path", "string", "File path to read", required=True),
        param("offset", "number", "Line to start reading from (1-based)"),
        param("length", "number", "Number of lines to read (default: to end of file)"),
        param("show_line_numbers", "boolean", "Show line numbers (default: false)"),
    )

    def execute(self, params: Dict[str, Any]) -> str:
        return self.engine.read_file(
            self.get_str(params, "path"),
            offset=self.get_int(params, "offset", 1),
            length=self.get_int(params, "length", 0),
            show_line_numbers=self.get_bool(params, "show_line_numbers", False),
        )


class WriteFileHandler(TextToolHandler):
    name = "write_file"
    description = "Write or append content to a file"
    parameters = (
        param("path", "string", "File path to write", required=True),
        param("content", "string", "Content to write", required=True),
        param("append", "boolean", "Append to file instead of overwriting (default: false)"),
        param("create_backup", "boolean", "Create backup before writing (default: false)"),
    )

    def execute(self, params: Dict[str, Any]) -> str:
        return self.engine.write_file(
            self.get_str(params, "path"),
            self.get_str(params, "content"),
            append=self.get_bool(params, "append", False),
            create_backup=self.get_bool(params, "create_backup", False),
        )


TEXT_HANDLERS = (
    EditFileHandler,
    EditBlockHandler,
    EditMultipleFilesHandler,
    InsertTextHandler,
    ReplaceTextHandler,
    ReadFileHandler,
    WriteFileHandler,
)
