from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncIterator, Optional

from psycopg import AsyncConnection
from psycopg import IsolationLevel as PostgresIsolationLevel
from psycopg_pool import AsyncConnectionPool

from coffer.base.interface import BaseInterface

if TYPE_CHECKING:
    from coffer.transaction.interfaces import IsolationLevel


async def reset_isolation_level(connection: AsyncConnection) -> None:
    # a connection goes back to the pool at the server default level
    await connection.set_isolation_level(None)


class PostgresPool(BaseInterface):
    """Interface for connecting to a Postgres database"""

    scheme = "postgres"
    schemes = {"postgres", "postgresql"}
    default_port = 5432

    def _setup_pool(self):
        self._pool = AsyncConnectionPool(
            self.full_dsn,
            min_size=self.min_size,
            max_size=self.max_size,
            reset=reset_isolation_level,
            open=False,
        )

    async def open(self):
        """Open connections to the pool"""
        await self._pool.open()

    async def close(self):
        """Close connections to the pool"""
        await self._pool.close()

    @asynccontextmanager
    async def connection(
        self, timeout: Optional[float] = None
    ) -> AsyncIterator[AsyncConnection]:
        """Obtain a connection to the database

        Args:
            timeout (float, optional): Time before an error is raised on
                failure to obtain a connection. Defaults to `None`.

        Yields:
            AsyncConnection: A database connection
        """
        async with self._pool.connection(timeout=timeout) as conn:
            yield conn

    async def begin(
        self,
        connection: AsyncConnection,
        isolation_level: Optional[IsolationLevel],
    ) -> None:
        # psycopg opens the transaction itself on the first statement
        await connection.set_isolation_level(
            PostgresIsolationLevel[isolation_level.name]
            if isolation_level
            else None
        )
