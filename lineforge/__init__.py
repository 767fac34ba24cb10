"""lineforge: sandboxed, line-addressed text editing engine and tools."""

__version__ = "1.0.0"
