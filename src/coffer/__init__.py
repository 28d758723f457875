from importlib.metadata import version

from .base.executor import Executor
from .base.hydrator import Hydrator
from .coffer import Coffer
from .decorator import query
from .ledger import (
    LedgerQueries,
    PostgresLedgerQueries,
    SQLiteLedgerQueries,
)
from .models import Account, Entry, Transfer, TransferParams, TransferResult
from .sql.postgres.executor import PostgresExecutor
from .sql.postgres.interface import PostgresPool
from .sql.sqlite.executor import SQLiteExecutor
from .sql.sqlite.interface import SQLitePool
from .store import Store, TransferState, TransferTx
from .transaction import IsolationLevel, TransactionCoordinator

__version__ = version("coffer")

__all__ = (
    "query",
    "Account",
    "Coffer",
    "Entry",
    "Executor",
    "Hydrator",
    "IsolationLevel",
    "LedgerQueries",
    "PostgresExecutor",
    "PostgresLedgerQueries",
    "PostgresPool",
    "SQLiteExecutor",
    "SQLiteLedgerQueries",
    "SQLitePool",
    "Store",
    "TransactionCoordinator",
    "Transfer",
    "TransferParams",
    "TransferResult",
    "TransferState",
    "TransferTx",
)
