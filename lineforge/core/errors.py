"""
Error taxonomy for the editing engine.

Three families, matching how a failure should be handled by the caller:

  - PolicyError      the path is outside the allow-list; never retried.
  - ValidationError  the request itself is wrong (bad ranges, overlaps,
                     bad patterns); the caller must correct the input.
  - FileIOError      reading, backing up or writing a file failed.

Every error's ``str()`` is a complete, human-readable message that names the
file and, where relevant, the 1-based operation index at fault.
"""

from __future__ import annotations

from typing import Optional, Sequence


class EditingError(Exception):
    """Base error for every failure raised by the editing engine."""

    def __init__(self, message: str, *, path: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.path = path

    def __str__(self) -> str:
        return self.message

    def at(self, path) -> "EditingError":
        """Attach the file this error refers to, unless one is already set."""
        if self.path is None:
            self.path = str(path)
            self.message = f"{path}: {self.message}"
            self.args = (self.message,)
        return self


# ----------------------------------------------------------------------
# Policy
# ----------------------------------------------------------------------
class PolicyError(EditingError):
    """Access denied by configuration."""


class PathNotAllowedError(PolicyError):
    def __init__(self, path: str, reason: Optional[str] = None):
        message = f"Access to path {path} is not allowed"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, path=path)


# ----------------------------------------------------------------------
# Validation
# ----------------------------------------------------------------------
class ValidationError(EditingError):
    """The request does not fit the file it targets."""


class InvalidRangeError(ValidationError):
    """start/end (or insertion line) is not a valid 1-based range."""

    def __init__(self, index: int, start_line: int, end_line: int, detail: str, *, kind: str = "operation"):
        super().__init__(f"{kind} {index}: {detail}")
        self.index = index
        self.start_line = start_line
        self.end_line = end_line


class OutOfBoundsError(ValidationError):
    """A line number lies past the end of the buffer."""

    def __init__(self, index: int, line: int, line_count: int, *, kind: str = "operation"):
        super().__init__(
            f"{kind} {index}: line {line} exceeds file length ({line_count} lines)"
        )
        self.index = index
        self.line = line
        self.line_count = line_count


class OverlappingOperationsError(ValidationError):
    """Two operations share at least one line."""

    def __init__(self, first: int, second: int):
        super().__init__(f"operations {first} and {second} overlap")
        self.first = first
        self.second = second


class InvalidPatternError(ValidationError):
    """Search text is empty or a regex does not compile."""


class SyntaxValidationError(ValidationError):
    """Edited content failed the syntax check for its file type."""


# ----------------------------------------------------------------------
# I/O
# ----------------------------------------------------------------------
class FileIOError(EditingError):
    """A filesystem step failed."""


class FileUnreadableError(FileIOError):
    pass


class BackupFailedError(FileIOError):
    pass


class WriteFailedError(FileIOError):
    pass


# ----------------------------------------------------------------------
# Batch
# ----------------------------------------------------------------------
class BatchAbortedError(EditingError):
    """
    An atomic multi-file batch was abandoned.

    ``errors`` lists every per-file failure that was found (in request
    order); ``rolled_back`` is False only when a commit-time restore of an
    already written file itself failed.
    """

    def __init__(self, errors: Sequence[str], *, rolled_back: bool = True):
        message = "Batch aborted, no files were modified: " + "; ".join(errors)
        if not rolled_back:
            message = "Batch aborted, rollback incomplete: " + "; ".join(errors)
        super().__init__(message)
        self.errors = list(errors)
        self.rolled_back = rolled_back
