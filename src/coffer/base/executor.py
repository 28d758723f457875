from __future__ import annotations

from ast import AsyncFunctionDef, Constant, Expr, FunctionDef, Pass, parse
from inspect import getmodule, getsource
from pathlib import Path
from textwrap import dedent
from typing import Any, Dict, Generic, Optional, Type, TypeVar, Union

from coffer.base.hydrator import Hydrator
from coffer.base.interface import BaseInterface
from coffer.base.query import Query
from coffer.exception import CofferError

T = TypeVar("T", bound=Query)
E = TypeVar("E", bound="Executor")


class Executor(Generic[T]):
    """
    Base class of the accessors that read and write rows. Subclass one of
    the dialect executors rather than this class.

    An executor is either pool-scoped, where every statement checks out
    its own connection, or bound to one connection with `bind()`, where
    every statement runs inside whatever transaction that connection has
    open. Queries are loaded once per class, on first instantiation.
    """

    _queries: Dict[str, T]
    _loaded: bool = False
    path: Optional[Union[str, Path]] = None
    """`Optional[Union[str, Path]]`: Where to load `.sql` files from,
        either absolute or relative to the module. Defaults to `None`,
        meaning a `queries` directory next to the module"""
    QUERY_CLASS: Type[T]
    HYDRATOR_CLASS: Type[Hydrator] = Hydrator

    def __init__(
        self,
        pool: Optional[BaseInterface] = None,
        hydrator: Optional[Hydrator] = None,
        *,
        connection: Any = None,
        strict: bool = True,
    ) -> None:
        """
        Args:
            pool (BaseInterface, optional): The pool that connections are
                checked out from. Defaults to `None`.
            hydrator (Hydrator, optional): Casts rows into models. An
                instance of `HYDRATOR_CLASS` is used if none is passed.
                Defaults to `None`.
            connection (Any, optional): A connection with an open
                transaction. When passed, all statements run on it.
                Defaults to `None`.
            strict (bool, optional): Whether to raise an error if there is
                an empty method but no loaded query. Defaults to `True`.

        Raises:
            CofferError: If there is neither a pool nor a connection
            MissingSQL: If `strict` and an empty method has no SQL
        """
        if pool is None and connection is None:
            raise CofferError(
                f"Cannot instantiate {self.__class__.__name__} "
                "without a pool or a connection"
            )
        self._pool = pool
        self._connection = connection
        self._hydrator = hydrator or self.HYDRATOR_CLASS()
        if "_loaded" not in vars(self.__class__):
            self.__class__._load(strict)

    @property
    def hydrator(self) -> Hydrator:
        return self._hydrator

    @property
    def pool(self) -> Optional[BaseInterface]:
        return self._pool

    @property
    def bound_connection(self) -> Any:
        """The connection this executor is bound to, if any"""
        return self._connection

    @property
    def in_transaction(self) -> bool:
        return self._connection is not None

    def bind(self: E, connection: Any) -> E:
        """Copy of this executor whose statements all run on `connection`

        Args:
            connection (Any): A connection with an open transaction

        Returns:
            Executor: Same class, pool and hydrator
        """
        return self.__class__(
            pool=self._pool, hydrator=self._hydrator, connection=connection
        )

    def get_query(self, name: str) -> T:
        """Loaded query by method name

        Raises:
            CofferError: When there is no query by that name
        """
        try:
            return self._queries[name]
        except KeyError as e:
            raise CofferError(
                f"{self.__class__.__name__} has no query named {name}"
            ) from e

    @classmethod
    def _load(cls, strict: bool) -> None:
        cls._loaded = True

    @classmethod
    def get_base_path(cls, directory_name: Optional[str]) -> Path:
        """Directory the `.sql` files of this class are read from

        The first class in the MRO that declares query methods or its own
        `path` decides, so a dialect subclass defined elsewhere still finds
        the files of its parent.

        Args:
            directory_name (str, optional): Subdirectory of the module
                directory, unless `path` says otherwise

        Raises:
            CofferError: When the module cannot be located
        """
        owner = next(
            (
                klass
                for klass in cls.__mro__
                if vars(klass).get("path") is not None
                or any(
                    cls.is_query_name(name) and not hasattr(Executor, name)
                    for name in vars(klass)
                )
            ),
            cls,
        )

        module = getmodule(owner)
        if not module or not module.__file__:
            raise CofferError(f"Could not locate module for {cls}")

        base = Path(module.__file__).parent
        path = vars(owner).get("path")
        if path is not None:
            if Path(path).is_absolute():
                return Path(path)
            directory_name = str(path)
        return base / directory_name if directory_name else base

    @classmethod
    def is_query_name(cls, name: str) -> bool:
        return False

    @staticmethod
    def _setup(func):
        return func


def is_auto_exec(func) -> bool:
    """Whether a method has no body and should run its SQL instead

    A body made only of a docstring, `...` or `pass` counts as empty:

    ```python
    async def get_account(self, id: int) -> Account:
        '''Fetch one account'''
    ```
    """
    node = parse(dedent(getsource(func))).body[0]
    if not isinstance(node, (FunctionDef, AsyncFunctionDef)):
        raise CofferError(f"Cannot inspect the body of {func}")

    body = node.body
    if _is_constant(body[0], str):
        body = body[1:]
    return all(
        isinstance(stmt, Pass) or _is_constant(stmt, type(Ellipsis))
        for stmt in body
    )


def _is_constant(stmt, kind: type) -> bool:
    return (
        isinstance(stmt, Expr)
        and isinstance(stmt.value, Constant)
        and isinstance(stmt.value.value, kind)
    )
