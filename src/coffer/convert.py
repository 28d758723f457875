import re

from coffer.exception import CofferError

DOLLAR_KEYWORD = re.compile(r"(\$([a-z][a-z0-9_]*))")
DOLLAR_POSITIONAL = re.compile(r"(\$(\d+))")


def convert_sql_params(
    query: str, positional_sub: str = r"%s", keyword_sub: str = r"%(\2)s"
) -> str:
    """Rewrite `$name` or `$1` placeholders into a driver paramstyle

    Mixing keyword and positional placeholders in one query is an error.
    """
    has_keyword = bool(DOLLAR_KEYWORD.search(query))
    has_positional = bool(DOLLAR_POSITIONAL.search(query))
    if has_keyword and has_positional:
        raise CofferError(
            "Cannot mix $keyword and $positional parameters in one query"
        )
    if has_keyword:
        return DOLLAR_KEYWORD.sub(keyword_sub, query)
    if has_positional:
        return DOLLAR_POSITIONAL.sub(positional_sub, query)
    return query
