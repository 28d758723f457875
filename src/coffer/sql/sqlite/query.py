import re

from coffer.sql.query import SQLQuery


class SQLiteQuery(SQLQuery):
    __slots__ = ()
    POSITIONAL_PLACEHOLDER = re.compile(r"\?")
    KEYWORD_PLACEHOLDER = re.compile(r":[a-z_][a-z0-9_]*")
