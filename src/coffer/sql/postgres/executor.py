from __future__ import annotations

from typing import Any, Optional

from psycopg import AsyncConnection
from psycopg.rows import dict_row

from coffer.sql.executor import SQLExecutor
from coffer.sql.postgres.query import PostgresQuery


class PostgresExecutor(SQLExecutor):
    """Executor for interfacing with a Postgres database"""

    QUERY_CLASS = PostgresQuery

    async def _fetch(
        self,
        conn: AsyncConnection,
        query: str,
        values: Any,
        method_name: Optional[str],
    ) -> Any:
        cursor = await conn.execute(query, values)
        if method_name is None:
            return None
        cursor.row_factory = dict_row
        return await getattr(cursor, method_name)()
