from coffer import PostgresLedgerQueries, SQLiteLedgerQueries, query
from coffer.sql.postgres.query import PostgresQuery
from coffer.sql.query import ParamType
from coffer.sql.sqlite.query import SQLiteQuery

LEDGER_QUERIES = {
    "create_account",
    "get_account",
    "list_accounts",
    "update_account",
    "delete_account",
    "add_account_balance",
    "create_entry",
    "get_entry",
    "list_entries",
    "create_transfer",
    "get_transfer",
    "list_transfers",
}


def test_loads_ledger_sql_for_postgres(postgres_pool):
    PostgresLedgerQueries(pool=postgres_pool)

    assert set(PostgresLedgerQueries._queries) == LEDGER_QUERIES
    assert PostgresLedgerQueries._queries["add_account_balance"] == (
        PostgresQuery(
            "add_account_balance",
            "UPDATE accounts\n"
            "SET balance = balance + %(amount)s\n"
            "WHERE id = %(id)s\n"
            "RETURNING *;\n",
        )
    )
    assert all(
        q.param_type is ParamType.KEYWORD
        for q in PostgresLedgerQueries._queries.values()
    )


def test_loads_ledger_sql_for_sqlite(fake_connection):
    SQLiteLedgerQueries(connection=fake_connection)

    assert set(SQLiteLedgerQueries._queries) == LEDGER_QUERIES
    assert SQLiteLedgerQueries._queries["get_account"] == SQLiteQuery(
        "get_account", "SELECT *\nFROM accounts\nWHERE id = :id\nLIMIT 1;\n"
    )
    assert SQLiteLedgerQueries._queries["get_account"].param_type is (
        ParamType.KEYWORD
    )


def test_helpers_are_not_queries(postgres_pool):
    PostgresLedgerQueries(pool=postgres_pool)

    assert "get_query" not in PostgresLedgerQueries._queries
    assert "get_base_path" not in PostgresLedgerQueries._queries


def test_subclass_overrides_sql(fake_connection):
    class ArchiveQueries(SQLiteLedgerQueries):
        @query(
            """
            SELECT *
            FROM archived_accounts
            WHERE id = $id;
            """
        )
        async def get_account(self, id: int) -> dict: ...

    ArchiveQueries(connection=fake_connection)

    assert ArchiveQueries._queries["get_account"].text == (
        "SELECT *\nFROM archived_accounts\nWHERE id = :id;"
    )
    assert ArchiveQueries._queries["create_account"].text.startswith(
        "INSERT INTO accounts"
    )
