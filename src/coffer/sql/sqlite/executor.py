from __future__ import annotations

from sqlite3 import Cursor
from typing import Any, Dict, Optional, Tuple

import aiosqlite

from coffer.sql.executor import SQLExecutor
from coffer.sql.sqlite.query import SQLiteQuery


def dict_factory(cursor: Cursor, row: Tuple[Any, ...]) -> Dict[str, Any]:
    return {
        column[0]: row[idx] for idx, column in enumerate(cursor.description)
    }


class SQLiteExecutor(SQLExecutor):
    """Executor for interfacing with a SQLite database"""

    QUERY_CLASS = SQLiteQuery
    POSITIONAL_SUB = r"?"
    KEYWORD_SUB = r":\2"

    async def _fetch(
        self,
        conn: aiosqlite.Connection,
        query: str,
        values: Any,
        method_name: Optional[str],
    ) -> Any:
        conn.row_factory = dict_factory
        async with conn.execute(query, values) as cursor:
            if method_name is None:
                return None
            return await getattr(cursor, method_name)()
