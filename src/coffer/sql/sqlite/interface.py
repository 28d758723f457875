from __future__ import annotations

import asyncio
from contextlib import AsyncExitStack, asynccontextmanager
from typing import TYPE_CHECKING, AsyncIterator, Optional

import aiosqlite

from coffer.base.interface import BaseInterface
from coffer.exception import CofferError

if TYPE_CHECKING:
    from coffer.transaction.interfaces import IsolationLevel


class SQLitePool(BaseInterface):
    """Interface for connecting to a SQLite database

    Every checkout opens its own connection to the database file, so
    concurrent transactions never share one. Transactions are started with
    `BEGIN IMMEDIATE`, which serializes writers on the database lock and
    waits up to `busy_timeout` seconds for it. An in-memory database is
    private to a single connection and therefore not usable here.
    """

    scheme = "sqlite"
    schemes = {"sqlite"}

    def __init__(
        self,
        db_path: str,
        busy_timeout: float = 5.0,
        max_size: Optional[int] = None,
    ):
        self._db_path = db_path
        self._busy_timeout = busy_timeout
        self._closed = False
        super().__init__(max_size=max_size)

    def _populate_dsn(self):
        self._dsn = self._full_dsn = f"{self.scheme}:///{self._db_path}"

    def _setup_pool(self):
        self._slots = (
            asyncio.Semaphore(self.max_size) if self.max_size else None
        )

    @property
    def db_path(self) -> str:
        return self._db_path

    async def open(self):
        """Allow connections to be checked out"""
        self._closed = False

    async def close(self):
        """Refuse any further checkouts"""
        self._closed = True

    @asynccontextmanager
    async def connection(
        self, timeout: Optional[float] = None
    ) -> AsyncIterator[aiosqlite.Connection]:
        """Obtain a connection to the database

        Args:
            timeout (float, optional): Time to wait for a free slot when
                `max_size` connections are already checked out. Defaults
                to `None`.

        Yields:
            aiosqlite.Connection: A database connection
        """
        if self._closed:
            raise CofferError(f"{self} is closed")

        async with AsyncExitStack() as stack:
            if self._slots is not None:
                await asyncio.wait_for(self._slots.acquire(), timeout)
                stack.callback(self._slots.release)
            conn = await aiosqlite.connect(
                self._db_path,
                timeout=self._busy_timeout,
                isolation_level=None,
            )
            stack.push_async_callback(conn.close)
            await conn.execute("PRAGMA foreign_keys = ON")
            yield conn

    async def begin(
        self,
        connection: aiosqlite.Connection,
        isolation_level: Optional[IsolationLevel],
    ) -> None:
        # SQLite transactions are always serializable
        await connection.execute("BEGIN IMMEDIATE")
