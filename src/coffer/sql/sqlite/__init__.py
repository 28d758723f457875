from .executor import SQLiteExecutor
from .interface import SQLitePool

__all__ = ("SQLiteExecutor", "SQLitePool")
