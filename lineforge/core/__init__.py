# Core modules
from .editing_engine import EditEngine
from .errors import EditingError
from .line_buffer import LineBuffer
from .operations import BatchEditRequest, EditOperation, FileEditRequest, TextInsertion
from .sandbox import PathSandbox

__all__ = [
    "EditEngine",
    "EditingError",
    "LineBuffer",
    "BatchEditRequest",
    "EditOperation",
    "FileEditRequest",
    "TextInsertion",
    "PathSandbox",
]
