"""
lineforge: command line entry point.

Every editing command goes through the same tool registry the server layer
uses, so the CLI and remote callers get identical validation, messages and
error handling.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from lineforge.core.editing_engine import EditEngine
from lineforge.core.handlers import ToolResult, build_default_registry
from lineforge.services.config_service import ConfigService
from lineforge.utils.path_utils import resolve_base_dir

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)


def _read_json_arg(value: str) -> str:
    """Inline JSON, ``@path`` to read it from a file, or ``-`` for stdin."""
    if value == "-":
        return sys.stdin.read()
    if value.startswith("@"):
        return Path(value[1:]).expanduser().read_text(encoding="utf-8")
    return value


def _emit(result: ToolResult) -> int:
    if result.is_error:
        print(f"Error: {result.text}", file=sys.stderr)
        return 1
    text = result.text
    print(text, end="" if text.endswith("\n") else "\n")
    return 0


# =====================================================================
#  COMMANDS
# =====================================================================

def _tool_call(args: argparse.Namespace) -> Tuple[str, Dict[str, Any]]:
    """Map parsed arguments to ``(tool name, params)``."""
    command = args.command

    if command == "edit-file":
        return "edit_file", {
            "path": args.path,
            "operations": _read_json_arg(args.operations),
            "create_backup": not args.no_backup,
            "validate_operations": not args.no_validate,
            "show_preview": args.preview,
            "atomic": not args.non_atomic,
        }
    if command == "edit-block":
        return "edit_block", {
            "path": args.path,
            "start_line": args.start_line,
            "end_line": args.end_line,
            "replacement": args.replacement,
            "show_diff": not args.no_diff,
            "create_backup": not args.no_backup,
            "validate_syntax": args.validate_syntax,
        }
    if command == "edit-multiple":
        return "edit_multiple_files", {
            "files": _read_json_arg(args.files),
            "atomic": not args.non_atomic,
            "dry_run": args.dry_run,
            "continue_on_error": args.continue_on_error,
            "validate_all": not args.no_validate_all,
        }
    if command == "insert-text":
        return "insert_text", {
            "path": args.path,
            "insertions": _read_json_arg(args.insertions),
            "create_backup": not args.no_backup,
            "adjust_line_numbers": not args.no_adjust,
        }
    if command == "replace-text":
        return "replace_text", {
            "path": args.path,
            "find": args.find,
            "replace": args.replace,
            "regex": args.regex,
            "case_sensitive": not args.ignore_case,
            "whole_word": args.whole_word,
            "max_replacements": args.max_replacements,
            "create_backup": not args.no_backup,
        }
    if command == "read-file":
        return "read_file", {
            "path": args.path,
            "offset": args.offset,
            "length": args.length,
            "show_line_numbers": args.line_numbers,
        }
    if command == "write-file":
        content = sys.stdin.read() if args.content == "-" else args.content
        return "write_file", {
            "path": args.path,
            "content": content,
            "append": args.append,
            "create_backup": args.backup,
        }
    if command == "config":
        action = args.config_action
        if action == "show":
            return "get_config", {}
        if action == "set":
            return "set_config_value", {"key": args.key, "value": args.value}
        if action == "allow":
            return "add_allowed_directory", {"directory": args.directory}
        if action == "disallow":
            return "remove_allowed_directory", {"directory": args.directory}
        if action == "validate":
            return "validate_config", {}
        if action == "reset":
            return "reset_config", {}
    raise ValueError(f"Unknown command: {command}")


# =====================================================================
#  CLI ENTRY WITH SUBCOMMANDS
# =====================================================================

def _create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="lineforge",
        description="lineforge: sandboxed, line-addressed text editing tools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  lineforge read-file notes.txt -n
  lineforge edit-file notes.txt '[{"start_line": 2, "end_line": 3, "replacement": "X"}]'
  lineforge edit-multiple @batch.json --dry-run
  lineforge config allow ~/projects
        """
    )

    # Global options
    parser.add_argument(
        "--version",
        action="version",
        version="lineforge 1.0.0"
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Config file (default: $LINEFORGE_CONFIG or ~/.lineforge.json)"
    )
    parser.add_argument(
        "--allow",
        action="append",
        default=[],
        metavar="DIR",
        help="Allow a directory for this run only (repeatable)"
    )
    parser.add_argument(
        "--dir",
        type=str,
        help="Directory relative paths are resolved against"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Log progress to stderr (-vv for debug output)"
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands"
    )

    # edit-file
    p = subparsers.add_parser("edit-file", help="Apply several line-range replacements to a file")
    p.add_argument("path")
    p.add_argument("operations", help="JSON array of operations, @file or - for stdin")
    p.add_argument("--no-backup", action="store_true", help="Do not back up the file first")
    p.add_argument("--no-validate", action="store_true", help="Skip range and overlap validation")
    p.add_argument("--preview", action="store_true", help="Show the changes without applying them")
    p.add_argument("--non-atomic", action="store_true", help="Write after each operation")

    # edit-block
    p = subparsers.add_parser("edit-block", help="Replace a single line range")
    p.add_argument("path")
    p.add_argument("start_line", type=int)
    p.add_argument("end_line", type=int)
    p.add_argument("replacement")
    p.add_argument("--no-diff", action="store_true", help="Do not print the character diff")
    p.add_argument("--no-backup", action="store_true", help="Do not back up the file first")
    p.add_argument("--validate-syntax", action="store_true", help="Check the result parses before writing")

    # edit-multiple
    p = subparsers.add_parser("edit-multiple", help="Edit several files in one batch")
    p.add_argument("files", help="JSON array of file edit requests, @file or - for stdin")
    p.add_argument("--non-atomic", action="store_true", help="Write files one at a time")
    p.add_argument("--dry-run", action="store_true", help="Only show previews")
    p.add_argument("--continue-on-error", action="store_true", help="Keep going after a failed file (non-atomic)")
    p.add_argument("--no-validate-all", action="store_true", help="Skip the validation pre-pass (non-atomic)")

    # insert-text
    p = subparsers.add_parser("insert-text", help="Insert text before or after lines")
    p.add_argument("path")
    p.add_argument("insertions", help="JSON array of insertions, @file or - for stdin")
    p.add_argument("--no-backup", action="store_true", help="Do not back up the file first")
    p.add_argument("--no-adjust", action="store_true",
                   help="Each line number refers to the result of the previous insertion")

    # replace-text
    p = subparsers.add_parser("replace-text", help="Find and replace text")
    p.add_argument("path")
    p.add_argument("find")
    p.add_argument("replace")
    p.add_argument("--regex", action="store_true", help="Treat FIND as a regular expression")
    p.add_argument("-i", "--ignore-case", action="store_true", help="Case-insensitive matching")
    p.add_argument("-w", "--whole-word", action="store_true", help="Match whole words only")
    p.add_argument("--max", dest="max_replacements", type=int, default=-1, help="Maximum replacements")
    p.add_argument("--no-backup", action="store_true", help="Do not back up the file first")

    # read-file
    p = subparsers.add_parser("read-file", help="Print a file or a range of its lines")
    p.add_argument("path")
    p.add_argument("--offset", type=int, default=1, help="First line (1-based)")
    p.add_argument("--length", type=int, default=0, help="Number of lines (default: to end)")
    p.add_argument("-n", "--line-numbers", action="store_true", help="Prefix lines with their number")

    # write-file
    p = subparsers.add_parser("write-file", help="Write or append to a file")
    p.add_argument("path")
    p.add_argument("content", help="Content to write, or - for stdin")
    p.add_argument("--append", action="store_true", help="Append instead of overwriting")
    p.add_argument("--backup", action="store_true", help="Back up an existing file first")

    # config
    p = subparsers.add_parser("config", help="Show or change the configuration")
    config_sub = p.add_subparsers(dest="config_action")
    config_sub.add_parser("show", help="Print the configuration as JSON")
    p_set = config_sub.add_parser("set", help="Set a configuration value")
    p_set.add_argument("key")
    p_set.add_argument("value")
    p_allow = config_sub.add_parser("allow", help="Add an allowed directory")
    p_allow.add_argument("directory")
    p_disallow = config_sub.add_parser("disallow", help="Remove an allowed directory")
    p_disallow.add_argument("directory")
    config_sub.add_parser("validate", help="Check the configuration")
    config_sub.add_parser("reset", help="Reset to defaults")

    # tools
    subparsers.add_parser("tools", help="List the available tools as JSON")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point with subcommand routing."""
    parser = _create_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    if args.command is None or (args.command == "config" and args.config_action is None):
        parser.print_help()
        return 1

    try:
        config_service = ConfigService(args.config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    # Run-only: appended to the live config, never saved by config commands.
    for directory in (args.allow if args.command != "config" else []):
        config_service.config.allowed_directories.append(str(Path(directory).expanduser().resolve()))

    engine = EditEngine(config_service.config, base_dir=resolve_base_dir(cli_arg=args.dir))
    registry = build_default_registry(engine, config_service)

    if args.command == "tools":
        print(json.dumps(registry.describe(), indent=2))
        return 0

    try:
        tool_name, params = _tool_call(args)
    except OSError as e:
        print(f"Error: cannot read argument: {e}", file=sys.stderr)
        return 1

    logger.info(f"Running {tool_name}")
    return _emit(registry.call(tool_name, params))


if __name__ == "__main__":
    sys.exit(main())
