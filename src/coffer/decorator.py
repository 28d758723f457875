from inspect import cleandoc

QUERY_ATTRIBUTE = "__coffer_query__"


def query(query: str):
    """Attach SQL to an executor method instead of keeping it in a `.sql`
    file. Subclasses that override the method without `@query` inherit the
    SQL.

    Example:

    ```python
    from coffer import PostgresExecutor, query

    class AccountExecutor(PostgresExecutor):
        @query(
            '''
            SELECT *
            FROM accounts
            WHERE id = $id;
            '''
        )
        async def select_account(self, id: int) -> Account:
            ...
    ```

    Args:
        query (str): The query, using `$name` or `$1` placeholders
    """

    def decorator(f):
        setattr(f, QUERY_ATTRIBUTE, cleandoc(query))
        return f

    return decorator
