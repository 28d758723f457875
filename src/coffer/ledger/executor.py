from typing import List, Optional

from coffer.ledger.hydrator import LedgerHydrator
from coffer.models import Account, Entry, Transfer
from coffer.sql.executor import SQLExecutor
from coffer.sql.postgres.executor import PostgresExecutor
from coffer.sql.sqlite.executor import SQLiteExecutor


class LedgerQueries(SQLExecutor):
    """Row-level accessors for accounts, entries and transfers

    The SQL lives in `queries/<method>.sql`. This class is dialect neutral;
    use `PostgresLedgerQueries` or `SQLiteLedgerQueries`.
    """

    HYDRATOR_CLASS = LedgerHydrator
    verb_prefixes = [
        "get_",
        "list_",
        "create_",
        "update_",
        "add_",
        "delete_",
    ]

    async def create_account(
        self, owner: str, balance: int, currency: str
    ) -> Account: ...

    async def get_account(self, id: int) -> Account: ...

    async def list_accounts(
        self, limit: int = 10, offset: int = 0
    ) -> List[Account]: ...

    async def update_account(self, id: int, balance: int) -> Account: ...

    async def delete_account(self, id: int) -> None: ...

    async def add_account_balance(self, id: int, amount: int) -> Account:
        """Shift a balance by `amount` and return the updated account.

        Relies on the row lock taken by the UPDATE itself.
        """

    async def create_entry(self, account_id: int, amount: int) -> Entry: ...

    async def get_entry(self, id: int) -> Optional[Entry]: ...

    async def list_entries(
        self, account_id: int, limit: int = 10, offset: int = 0
    ) -> List[Entry]: ...

    async def create_transfer(
        self, from_account_id: int, to_account_id: int, amount: int
    ) -> Transfer: ...

    async def get_transfer(self, id: int) -> Optional[Transfer]: ...

    async def list_transfers(
        self,
        from_account_id: int,
        to_account_id: int,
        limit: int = 10,
        offset: int = 0,
    ) -> List[Transfer]: ...


class PostgresLedgerQueries(LedgerQueries, PostgresExecutor):
    """Ledger accessors for Postgres"""


class SQLiteLedgerQueries(LedgerQueries, SQLiteExecutor):
    """Ledger accessors for SQLite"""
