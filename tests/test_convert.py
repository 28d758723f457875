import pytest

from coffer.convert import convert_sql_params
from coffer.exception import CofferError


def test_converts_sql_params():
    sql = """
        SELECT *
        FROM entries
        WHERE account_id = $account_id
        LIMIT $limit
        OFFSET $offset
    """
    expected = """
        SELECT *
        FROM entries
        WHERE account_id = %(account_id)s
        LIMIT %(limit)s
        OFFSET %(offset)s
    """
    converted = convert_sql_params(sql)

    assert converted == expected


def test_converts_sql_params_for_sqlite():
    sql = "UPDATE accounts SET balance = balance + $amount WHERE id = $id"
    converted = convert_sql_params(sql, r"?", r":\2")

    assert converted == (
        "UPDATE accounts SET balance = balance + :amount WHERE id = :id"
    )


def test_converts_positional_params():
    assert convert_sql_params("SELECT $1, $2", r"?") == "SELECT ?, ?"


def test_refuses_mixed_params():
    with pytest.raises(CofferError):
        convert_sql_params("SELECT $1 WHERE id = $id")
