from .executor import LedgerQueries, PostgresLedgerQueries, SQLiteLedgerQueries
from .hydrator import LedgerHydrator

__all__ = (
    "LedgerHydrator",
    "LedgerQueries",
    "PostgresLedgerQueries",
    "SQLiteLedgerQueries",
)
