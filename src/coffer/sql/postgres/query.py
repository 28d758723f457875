from coffer.sql.query import SQLQuery


class PostgresQuery(SQLQuery):
    __slots__ = ()
