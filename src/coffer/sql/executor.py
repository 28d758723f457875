from __future__ import annotations

from contextlib import AsyncExitStack, asynccontextmanager
from functools import wraps
from inspect import (
    Signature,
    getmembers,
    isawaitable,
    isfunction,
    signature,
    unwrap,
)
from pathlib import Path
from types import NoneType, UnionType
from typing import (
    Any,
    AsyncIterator,
    Dict,
    List,
    Optional,
    Sequence,
    Tuple,
    Type,
    Union,
    get_args,
    get_origin,
)

from coffer.base.executor import Executor, is_auto_exec
from coffer.base.query import Query
from coffer.convert import convert_sql_params
from coffer.decorator import QUERY_ATTRIBUTE
from coffer.exception import (
    AccessorError,
    CofferError,
    ConnectionError,
    MissingSQL,
    RecordNotFound,
    TransactionError,
)
from coffer.sql.query import ParamType, SQLQuery


class SQLExecutor(Executor[SQLQuery]):
    """Executor for SQL databases

    Every method whose name starts with one of the `verb_prefixes` is a
    query method. Its SQL comes from `@query`, or else from
    `queries/<method name>.sql` next to the module of the class that
    declared it.
    """

    QUERY_CLASS = SQLQuery
    POSITIONAL_SUB: str = r"%s"
    KEYWORD_SUB: str = r"%(\2)s"
    verb_prefixes: List[str] = [
        "select_",
        "insert_",
        "update_",
        "delete_",
    ]
    """Prefixes used to identify class methods and `.sql` files to load

    Example:

        ```python
        class LedgerQueries(SQLExecutor):
            verb_prefixes = ["create_", "get_", "update_", "delete_"]
        ```
    """

    def execute(
        self,
        query: Union[str, Query],
        name: str = "",
        model: Optional[Type[object]] = None,
        as_list: bool = False,
        allow_none: bool = False,
        posargs: Optional[Sequence[Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ):
        """Low-level API to execute a query and hydrate the results

        Args:
            query (Union[str, Query]): The query to be executed
            name (str, optional): The name of the query. Defaults to `""`.
            model (Type[object], optional): The model to be used
                for hydration. No rows are fetched when it is `None`.
                Defaults to `None`.
            as_list (bool, optional): Whether to return the results as a
                list of hydrated objects. Defaults to `False`.
            allow_none (bool, optional): Whether `None` is an acceptable
                return value. Defaults to `False`.
            posargs (Sequence[Any], optional): Positional arguments.
                Defaults to `None`.
            params (Dict[str, Any], optional): Keyword arguments.
                Defaults to `None`.

        Raises:
            AccessorError: If the database rejected the statement
            RecordNotFound: If a single row was expected and none came back
        """
        text = query.text if isinstance(query, Query) else query
        return self._execute(
            convert_sql_params(text, self.POSITIONAL_SUB, self.KEYWORD_SUB),
            name=name,
            model=model,
            as_list=as_list,
            allow_none=allow_none,
            posargs=posargs,
            params=params,
        )

    async def _execute(
        self,
        query: str,
        name: str = "",
        model: Optional[Type[object]] = None,
        as_list: bool = False,
        allow_none: bool = False,
        posargs: Optional[Sequence[Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ):
        label = f"<{name}> " if name else ""
        try:
            raw = await self._run_sql(
                query=query,
                name=name,
                as_list=as_list,
                no_result=model is None,
                posargs=posargs,
                params=params,
            )
        except CofferError:
            raise
        except Exception as e:
            raise AccessorError(f"Query {label}failed: {e}") from e

        if model is None:
            return None
        if not raw:
            if allow_none:
                return None
            if as_list:
                return []
            raise RecordNotFound(
                f"Query {label}did not find any record using "
                f"{posargs or ()} and {params or {}}"
            )

        results = self.hydrator._make(model)(raw)
        if isawaitable(results):
            results = await results
        return results

    def run_sql(
        self,
        query: str = "",
        name: str = "",
        as_list: bool = False,
        no_result: bool = False,
        posargs: Optional[Sequence[Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ):
        """Low-level API to execute a query and return the raw rows

        Either `query` or the `name` of a loaded query must be given.
        """
        if query:
            query = convert_sql_params(
                query, self.POSITIONAL_SUB, self.KEYWORD_SUB
            )
        elif name:
            query = self.get_query(name).text
        else:
            raise CofferError("Either a query or a query name is required")
        return self._run_sql(
            query=query,
            name=name,
            as_list=as_list,
            no_result=no_result,
            posargs=posargs,
            params=params,
        )

    async def _run_sql(
        self,
        query: str,
        name: str = "",
        as_list: bool = False,
        no_result: bool = False,
        posargs: Optional[Sequence[Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ):
        values = list(posargs) if posargs else params
        method_name = None if no_result else self._get_method(as_list)
        async with self.connection() as conn:
            return await self._fetch(conn, query, values, method_name)

    async def _fetch(
        self,
        conn: Any,
        query: str,
        values: Any,
        method_name: Optional[str],
    ) -> Any:
        """Run one statement on `conn`

        Rows are returned as dicts using the cursor method `method_name`.
        Nothing is fetched when it is `None`.
        """
        raise NotImplementedError

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[Any]:
        """Connection the next statement should run on

        A bound executor always yields its own connection and leaves the
        transaction alone. Otherwise a connection is checked out of the
        pool for this one statement and committed, or rolled back when the
        statement fails.
        """
        if self._connection is not None:
            yield self._connection
            return

        if self.pool is None:
            raise CofferError(f"{self.__class__.__name__} has no pool")

        async with AsyncExitStack() as stack:
            try:
                conn = await stack.enter_async_context(self.pool.connection())
            except Exception as e:
                raise ConnectionError(
                    f"Could not obtain a connection from {self.pool}: {e}"
                ) from e
            try:
                yield conn
            except BaseException as e:
                try:
                    await self.pool.rollback(conn)
                except Exception as rollback_error:
                    raise TransactionError(
                        f"Statement failed with {e!r} and could not be "
                        f"rolled back: {rollback_error}",
                        cause=e,
                        rollback_error=rollback_error,
                    ) from rollback_error
                raise
            await self.pool.commit(conn)

    def _get_method(self, as_list: bool) -> str:
        return "fetchall" if as_list else "fetchone"

    @classmethod
    def _load(cls, strict: bool) -> None:
        cls._queries = {}

        for name, func in getmembers(cls, isfunction):
            if not cls.is_query_name(name) or hasattr(SQLExecutor, name):
                continue

            func = unwrap(func)
            path = cls._get_owner(name).get_base_path("queries")
            path = path / f"{name}.sql"
            try:
                text = cls._load_sql(cls._find_lazy_query(name), path)
            except FileNotFoundError:
                if strict and is_auto_exec(func):
                    raise MissingSQL(
                        f"Could not find SQL for {cls.__name__}.{name}. "
                        f"Looked for file named: {path}"
                    )
            else:
                cls._queries[name] = cls.QUERY_CLASS(name, text)
            setattr(cls, name, cls._setup(func))

        cls._loaded = True

    @classmethod
    def _get_owner(cls, method_name: str) -> Type[SQLExecutor]:
        # SQL files sit beside the class that declared the method
        for klass in cls.__mro__:
            if method_name in vars(klass) and issubclass(klass, SQLExecutor):
                return klass
        return cls

    @classmethod
    def _find_lazy_query(cls, method_name: str) -> Optional[str]:
        for klass in cls.__mro__:
            query = getattr(
                vars(klass).get(method_name), QUERY_ATTRIBUTE, None
            )
            if query:
                return query
        return None

    @classmethod
    def _load_sql(cls, query: Optional[str], path: Path) -> str:
        if not query:
            query = path.read_text()
        return convert_sql_params(query, cls.POSITIONAL_SUB, cls.KEYWORD_SUB)

    @classmethod
    def is_query_name(cls, name: str) -> bool:
        return any(name.startswith(prefix) for prefix in cls.verb_prefixes)

    @staticmethod
    def _setup(func):
        """
        Methods with a body of their own are left alone. An empty method
        is replaced with one that runs its loaded SQL with the call
        arguments and hands the rows to the hydrator, as directed by the
        return annotation.
        """
        if not is_auto_exec(func):
            return func

        sig = signature(func, eval_str=True)
        model, as_list, allow_none = unpack_return(
            func, sig.return_annotation
        )
        name = func.__name__

        @wraps(func)
        async def auto_executed(self: SQLExecutor, *args, **kwargs):
            query = self.get_query(name)
            bound = sig.bind(self, *args, **kwargs)
            bound.apply_defaults()
            arguments = dict(bound.arguments)
            arguments.pop("self", None)

            posargs = params = None
            if query.param_type is ParamType.KEYWORD:
                params = arguments
            elif query.param_type is ParamType.POSITIONAL:
                posargs = list(arguments.values())
            return await self._execute(
                query.text,
                name=name,
                model=model,
                as_list=as_list,
                allow_none=allow_none,
                posargs=posargs,
                params=params,
            )

        return auto_executed


def unpack_return(
    func, annotation: Any
) -> Tuple[Optional[Type[object]], bool, bool]:
    """Model, `as_list` and `allow_none` for a return annotation

    `-> None` and a missing annotation mean the statement returns nothing.
    """
    if annotation is Signature.empty or annotation is None:
        return None, False, False

    allow_none = False
    origin = get_origin(annotation)
    if origin is Union or origin is UnionType:
        args = get_args(annotation)
        if len(args) != 2 or NoneType not in args:
            raise CofferError(
                f"{func} may only return one model or Optional[model]"
            )
        (annotation,) = (arg for arg in args if arg is not NoneType)
        allow_none = True
        origin = get_origin(annotation)

    if origin is None:
        return annotation, False, allow_none
    if origin is list:
        return get_args(annotation)[0], True, allow_none
    if origin is dict:
        return dict, False, allow_none
    raise CofferError(
        f"{func} must return either a model or a list of models. "
        "eg. -> Foo or List[Foo]"
    )
