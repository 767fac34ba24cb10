"""
Line-addressed editing engine for lineforge.

This module ties the pieces together for every file-mutating tool:

  - paths are checked against the sandbox before anything is read;
  - operations are validated against the file as read (bounds, overlap);
  - backups are taken after validation and before the first write;
  - operations are applied bottom-up so line numbers never drift;
  - writes go through a temp file plus rename.

Multi-file batches either commit every file or none (``atomic``), or are
processed one file at a time with errors recorded or fatal according to
``continue_on_error``.

Methods return the plain success text shown to the caller and raise
``EditingError`` subclasses on failure. Nothing here retries.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

from lineforge.core import syntax
from lineforge.core.backup import BackupManager, RequestBackups
from lineforge.core.diff_preview import DiffPreview
from lineforge.core.errors import (
    BackupFailedError,
    BatchAbortedError,
    EditingError,
    ValidationError,
    WriteFailedError,
)
from lineforge.core.file_io import LoadedFile, read_text_file, write_text_safe
from lineforge.core.line_buffer import LineBuffer, normalize_newlines, split_lines
from lineforge.core.operations import BatchEditRequest, EditOperation, FileEditRequest, TextInsertion
from lineforge.core.sandbox import PathSandbox
from lineforge.core.scheduler import OperationScheduler
from lineforge.core.text_replace import TextReplacer
from lineforge.core.transaction import StagedTransaction
from lineforge.core.validator import OperationValidator
from lineforge.services.config_service import ServerConfig

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

TRUNCATION_MARKER = "... (truncated due to line limit)"


@dataclass
class _FilePlan:
    """One file of a batch, validated and applied in memory."""

    index: int
    request: FileEditRequest
    target: Path
    loaded: LoadedFile
    before: LineBuffer
    after: LineBuffer


class EditEngine:
    """
    Orchestrates sandbox checks, validation, backups, scheduling and writes.

    The engine holds a reference to a live ``ServerConfig``; its sandbox reads
    the allow-list from that same object, so configuration changes apply to
    the next call.
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        *,
        sandbox: Optional[PathSandbox] = None,
        backups: Optional[BackupManager] = None,
        base_dir: Optional[Path] = None,
    ):
        self.config = config or ServerConfig()
        self.sandbox = sandbox or PathSandbox(self.config, base_dir=base_dir)
        self.backups = backups or BackupManager()
        self.validator = OperationValidator()
        self.scheduler = OperationScheduler()
        self.previewer = DiffPreview()
        self.replacer = TextReplacer()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _read(self, target: Path) -> LoadedFile:
        return read_text_file(target, self.config.max_file_size_mb)

    def _load(self, path: PathLike) -> Tuple[Path, LoadedFile, LineBuffer]:
        target = self.sandbox.check(path)
        loaded = self._read(target)
        return target, loaded, LineBuffer.load(loaded.text)

    def _render(self, buffer: LineBuffer) -> str:
        return buffer.render(self.config.preserve_line_endings)

    def _write(self, target: Path, buffer: LineBuffer, encoding: str) -> None:
        write_text_safe(target, self._render(buffer), encoding)
        logger.info(f"Wrote {buffer.line_count} lines to {target}")

    def _validate(self, path: PathLike, buffer: LineBuffer, operations: Sequence[EditOperation]) -> None:
        try:
            self.validator.validate(buffer, operations)
        except ValidationError as e:
            raise e.at(path)

    # ------------------------------------------------------------------
    # Single file
    # ------------------------------------------------------------------
    def edit_file(
        self,
        path: PathLike,
        operations: Sequence[EditOperation],
        *,
        create_backup: bool = True,
        validate_operations: bool = True,
        show_preview: bool = False,
        atomic: bool = True,
    ) -> str:
        """
        Apply several line-range replacements to one file.

        In atomic mode the fully applied buffer is written once. Otherwise the
        file is written after each operation (bottom-up order); a failed write
        raises WriteFailedError naming that operation, and the writes before
        it stay on disk.
        """
        target, loaded, buffer = self._load(path)

        if validate_operations:
            self._validate(path, buffer, operations)

        if show_preview:
            return f"Preview of changes for {path}:\n{self.previewer.preview(buffer, operations)}"

        if create_backup:
            self.backups.backup(target)

        try:
            if atomic:
                self._write(target, self.scheduler.apply(buffer, operations), loaded.encoding)
            else:
                for index, _op, current in self.scheduler.iter_apply(buffer, operations):
                    try:
                        self._write(target, current, loaded.encoding)
                    except WriteFailedError as e:
                        logger.error(f"Non-atomic edit of {target} stopped at operation {index + 1}")
                        raise WriteFailedError(f"operation {index + 1}: {e}", path=str(path)) from e
        except ValidationError as e:
            raise e.at(path)

        logger.info(f"Applied {len(operations)} operations to {target}")
        return f"Successfully applied {len(operations)} operations to {path}"

    def edit_block(
        self,
        path: PathLike,
        start_line: int,
        end_line: int,
        replacement: str,
        *,
        show_diff: bool = True,
        create_backup: bool = True,
        validate_syntax: bool = False,
    ) -> str:
        """Replace one line range, optionally checking the result parses."""
        op = EditOperation(start_line, end_line, replacement)
        target, loaded, buffer = self._load(path)
        self._validate(path, buffer, [op])

        result = self.scheduler.apply(buffer, [op])
        if validate_syntax:
            syntax.validate_syntax(target, result.serialize())

        if create_backup:
            self.backups.backup(target)
        self._write(target, result, loaded.encoding)

        message = f"Successfully edited lines {start_line}-{end_line} in {path}"
        if show_diff:
            original_section = "\n".join(buffer.slice(start_line, end_line))
            diff = self.previewer.character_diff(original_section, normalize_newlines(replacement))
            message += "\n\nDiff:\n" + diff
        return message

    def insert_text(
        self,
        path: PathLike,
        insertions: Sequence[TextInsertion],
        *,
        create_backup: bool = True,
        adjust_line_numbers: bool = True,
    ) -> str:
        """
        Insert blocks before or after existing lines.

        With ``adjust_line_numbers`` every line number refers to the file as
        read. Without it, insertions run in request order and each line number
        refers to the result of the previous insertion.
        """
        target, loaded, buffer = self._load(path)

        try:
            if adjust_line_numbers:
                self.validator.validate_insertions(buffer, insertions)
                result = self.scheduler.apply_insertions(buffer, insertions)
            else:
                result = self.scheduler.apply_insertions_sequential(buffer, insertions)
        except ValidationError as e:
            logger.warning(f"Rejected insertions for {target}: {e}")
            raise e.at(path)

        if create_backup:
            self.backups.backup(target)
        self._write(target, result, loaded.encoding)
        return f"Applied {len(insertions)} insertions to {path}"

    def replace_text(
        self,
        path: PathLike,
        find: str,
        replace: str,
        *,
        regex: bool = False,
        case_sensitive: bool = True,
        whole_word: bool = False,
        max_replacements: int = -1,
        create_backup: bool = True,
    ) -> str:
        target, loaded, buffer = self._load(path)

        try:
            outcome = self.replacer.replace(
                buffer.serialize(), find, replace,
                regex=regex, case_sensitive=case_sensitive,
                whole_word=whole_word, max_replacements=max_replacements,
            )
        except ValidationError as e:
            raise e.at(path)

        if outcome.count > 0:
            if create_backup:
                self.backups.backup(target)
            result = LineBuffer.from_lines(split_lines(outcome.content), buffer.newline)
            self._write(target, result, loaded.encoding)

        return f"Replaced {outcome.count} occurrences in {path}"

    def read_file(self, path: PathLike, offset: int = 1, length: int = 0, show_line_numbers: bool = False) -> str:
        """
        Paginated read. ``offset`` is the first 1-based line, ``length <= 0``
        reads to the end. Output is capped at ``file_read_line_limit`` lines.
        """
        _target, _loaded, buffer = self._load(path)
        offset = max(offset, 1)

        end = buffer.line_count if length <= 0 else offset + length - 1
        lines = buffer.slice(offset, end)

        limit = self.config.file_read_line_limit
        truncated = len(lines) > limit
        lines = lines[:limit]

        if show_line_numbers:
            lines = [f"{offset + i}: {line}" for i, line in enumerate(lines)]
        if truncated:
            lines.append(TRUNCATION_MARKER)
        return "\n".join(lines)

    def write_file(self, path: PathLike, content: str, *, append: bool = False, create_backup: bool = False) -> str:
        limit = self.config.file_write_line_limit
        line_count = len(split_lines(content))
        if line_count > limit:
            raise ValidationError(
                f"Content has {line_count} lines, more than the write limit of {limit}; "
                "split it into several write_file calls with append=true",
                path=str(path),
            )

        target = self.sandbox.check(path)
        exists = target.exists()
        if create_backup and exists:
            self.backups.backup(target)

        encoding = "utf-8"
        if append and exists:
            existing = self._read(target)
            content = existing.text + content
            encoding = existing.encoding

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise WriteFailedError(f"Failed to create parent directory for {path}: {e}", path=str(path)) from e
        write_text_safe(target, content, encoding)

        operation = "appended" if append else "written"
        logger.info(f"Content {operation} to {target}")
        return f"Content successfully {operation} to {path}"

    # ------------------------------------------------------------------
    # Multi-file batches
    # ------------------------------------------------------------------
    def edit_multiple_files(self, batch: BatchEditRequest) -> str:
        logger.info(
            f"Batch of {len(batch.files)} files "
            f"(atomic={batch.atomic}, dry_run={batch.dry_run}, "
            f"continue_on_error={batch.continue_on_error}, validate_all={batch.validate_all})"
        )
        if batch.atomic:
            return self._edit_batch_atomic(batch)
        return self._edit_batch_sequential(batch)

    @staticmethod
    def _file_error(index: int, path: str, error: EditingError) -> str:
        return f"{path} (file {index}): {error}"

    @staticmethod
    def _format_batch(results: List[str], errors: List[str], *, dry_run: bool) -> str:
        out = []
        if dry_run:
            out.append("DRY RUN - Preview of changes:\n\n")
        for result in results:
            out.append(result + "\n")
        if errors:
            out.append("\nErrors encountered:\n")
            for error in errors:
                out.append(f"- {error}\n")
        return "".join(out)

    def _preview_entry(self, path: str, buffer: LineBuffer, operations: Sequence[EditOperation]) -> str:
        return f"File: {path}\n{self.previewer.preview(buffer, operations)}"

    def _plan(self, files: Sequence[FileEditRequest]) -> Tuple[List[_FilePlan], List[Tuple[int, str]]]:
        """
        Check and apply every file in memory, in request order.

        A path listed more than once is planned against the in-memory result
        of its previous entry. Returns the plans and ``(file index, message)``
        for every failure.
        """
        plans: List[_FilePlan] = []
        failures: List[Tuple[int, str]] = []
        current: Dict[Path, Tuple[LoadedFile, LineBuffer]] = {}

        for index, request in enumerate(files, start=1):
            try:
                target = self.sandbox.check(request.path)
                if target in current:
                    loaded, before = current[target]
                else:
                    loaded = self._read(target)
                    before = LineBuffer.load(loaded.text)
                self.validator.validate(before, request.operations)
                after = self.scheduler.apply(before, request.operations)
            except EditingError as e:
                failures.append((index, self._file_error(index, request.path, e)))
                continue

            current[target] = (loaded, after)
            plans.append(_FilePlan(index, request, target, loaded, before, after))

        return plans, failures

    def _edit_batch_atomic(self, batch: BatchEditRequest) -> str:
        plans, failures = self._plan(batch.files)
        if failures:
            logger.warning(f"Atomic batch rejected: {len(failures)} file(s) failed validation")
            raise BatchAbortedError([message for _, message in failures])

        if batch.dry_run:
            previews = [self._preview_entry(p.request.path, p.before, p.request.operations) for p in plans]
            return self._format_batch(previews, [], dry_run=True)

        backups = RequestBackups(self.backups)
        for plan in plans:
            if plan.request.create_backup:
                try:
                    backups.ensure(plan.target)
                except BackupFailedError as e:
                    raise BatchAbortedError([self._file_error(plan.index, plan.request.path, e)]) from e

        transaction = StagedTransaction()
        for plan in plans:
            transaction.stage(plan.target, plan.loaded.raw, self._render(plan.after), plan.loaded.encoding)
        try:
            transaction.commit()
        except WriteFailedError as e:
            # A path listed twice is named by its last entry, whose content was staged.
            failed = {p.target: p for p in plans}[transaction.failed.path]
            raise BatchAbortedError(
                [self._file_error(failed.index, failed.request.path, e)],
                rolled_back=not transaction.rollback_failures,
            ) from e

        return self._format_batch(
            [f"Successfully applied {len(p.request.operations)} operations to {p.request.path}" for p in plans],
            [],
            dry_run=False,
        )

    def _edit_batch_sequential(self, batch: BatchEditRequest) -> str:
        results: List[str] = []
        # (file index, message); reported sorted by file index
        errors: List[Tuple[int, str]] = []
        skip = set()

        if batch.validate_all:
            _plans, failures = self._plan(batch.files)
            if failures:
                errors.extend(failures)
                if not batch.continue_on_error:
                    logger.warning("Validation pre-pass failed, no files were modified")
                    return self._format_batch(results, [m for _, m in errors], dry_run=batch.dry_run)
                skip = {index for index, _ in failures}

        backups = RequestBackups(self.backups)
        dry_buffers: Dict[Path, LineBuffer] = {}

        for index, request in enumerate(batch.files, start=1):
            if index in skip:
                continue
            try:
                results.append(self._edit_one_of_batch(request, batch.dry_run, backups, dry_buffers))
            except EditingError as e:
                logger.warning(f"Batch file {index} failed: {e}")
                errors.append((index, self._file_error(index, request.path, e)))
                if not batch.continue_on_error:
                    break

        errors.sort(key=lambda pair: pair[0])
        return self._format_batch(results, [m for _, m in errors], dry_run=batch.dry_run)

    def _edit_one_of_batch(
        self,
        request: FileEditRequest,
        dry_run: bool,
        backups: RequestBackups,
        dry_buffers: Dict[Path, LineBuffer],
    ) -> str:
        target = self.sandbox.check(request.path)
        if dry_run and target in dry_buffers:
            buffer = dry_buffers[target]
            loaded = None
        else:
            loaded = self._read(target)
            buffer = LineBuffer.load(loaded.text)

        self.validator.validate(buffer, request.operations)

        if dry_run:
            dry_buffers[target] = self.scheduler.apply(buffer, request.operations)
            return self._preview_entry(request.path, buffer, request.operations)

        if request.create_backup:
            backups.ensure(target)
        self._write(target, self.scheduler.apply(buffer, request.operations), loaded.encoding)
        return f"Successfully applied {len(request.operations)} operations to {request.path}"
