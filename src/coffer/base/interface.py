from __future__ import annotations

from abc import ABC, abstractmethod
from typing import (
    TYPE_CHECKING,
    Any,
    AsyncContextManager,
    Optional,
    Set,
    Type,
)
from urllib.parse import urlparse

from coffer.exception import CofferError

if TYPE_CHECKING:
    from coffer.transaction.interfaces import IsolationLevel


class BaseInterface(ABC):
    """Connection pool for one database

    Subclasses hand out connections with `connection()` and know how to
    demarcate a transaction on them. A connection handed out by the pool
    is owned by one caller until the context manager exits.
    """

    scheme = "dummy"
    schemes: Set[str] = set()
    default_port: Optional[int] = None
    registered_interfaces: Set[Type[BaseInterface]] = set()

    def __init_subclass__(cls) -> None:
        BaseInterface.registered_interfaces.add(cls)

    @abstractmethod
    def _setup_pool(self): ...

    @abstractmethod
    async def open(self): ...

    @abstractmethod
    async def close(self): ...

    @abstractmethod
    def connection(
        self, timeout: Optional[float] = None
    ) -> AsyncContextManager[Any]: ...

    def __init__(
        self,
        dsn: Optional[str] = None,
        host: Optional[str] = None,
        port: Optional[int] = None,
        user: Optional[str] = None,
        password: Optional[str] = None,
        db: Optional[str] = None,
        query: Optional[str] = None,
        min_size: int = 1,
        max_size: Optional[int] = None,
    ) -> None:
        """
        Connection settings come either from `dsn` or from the individual
        arguments. Arguments that are passed win over the DSN.

        Args:
            dsn (str, optional): DB data source name
            host (str, optional): DB address URL or IP
            port (int, optional): DB port. Defaults to `default_port`
            user (str, optional): DB user
            password (str, optional): DB password
            db (str, optional): DB name
            query (str, optional): DB query parameters. Defaults to None
            min_size (int, optional): Minimum number of connections in
                pool. Defaults to 1
            max_size (int, optional): Maximum number of connections in
                pool. Defaults to None

        Raises:
            CofferError: On conflicting or malformed settings
        """
        self._validate(dsn, host, port, password, min_size, max_size)

        self._dsn = dsn
        self._full_dsn: Optional[str] = None
        self._host = host
        self._port = port
        self._user = user
        self._password = password
        self._db = db
        self._query = query
        self._min_size = min_size
        self._max_size = max_size

        self._populate_connection_args()
        self._populate_dsn()
        self._setup_pool()

    def __str__(self) -> str:
        return f"<{self.__class__.__name__} {self.dsn}>"

    @staticmethod
    def _validate(dsn, host, port, password, min_size, max_size) -> None:
        if dsn and host:
            raise CofferError("Cannot connect to DB using host and dsn")
        if port is not None and (
            not isinstance(port, int) or not 0 <= port <= 65535
        ):
            raise CofferError("port: must be an integer between 0 and 65535")
        if host is not None and (not isinstance(host, str) or not host):
            raise CofferError(
                "host: must be a string at least 1 character long"
            )
        if password is not None and (
            not isinstance(password, str) or not password
        ):
            raise CofferError(
                "password: must be a string at least 1 character long"
            )
        if max_size is not None and max_size < min_size:
            raise CofferError("max_size: must not be smaller than min_size")

    def _populate_connection_args(self):
        if not self._dsn:
            return
        parts = urlparse(self._dsn)
        try:
            port = parts.port
        except ValueError as e:
            raise CofferError(
                "port: must be an integer between 0 and 65535"
            ) from e
        self._host = self._host or parts.hostname or "localhost"
        self._port = self._port or port or self.default_port
        self._user = self._user or parts.username
        self._password = self._password or parts.password
        self._db = self._db or parts.path.strip("/")
        self._query = self._query or parts.query

    def _populate_dsn(self):
        user = self.user or ""
        location = f"{self.host}:{self.port}/{self.db}"
        if self.password:
            self._dsn = f"{self.scheme}://{user}:...@{location}"
            self._full_dsn = (
                f"{self.scheme}://{user}:{self.password}@{location}"
            )
        else:
            auth = f"{user}@" if user else ""
            self._dsn = self._full_dsn = f"{self.scheme}://{auth}{location}"
        if self._query:
            self._full_dsn += f"?{self._query}"

    async def begin(
        self, connection: Any, isolation_level: Optional[IsolationLevel]
    ) -> None:
        """Start a transaction on a connection handed out by this pool"""

    async def commit(self, connection: Any) -> None:
        await connection.commit()

    async def rollback(self, connection: Any) -> None:
        await connection.rollback()

    @property
    def dsn(self) -> Optional[str]:
        """DSN with the password masked, safe to log"""
        return self._dsn

    @property
    def full_dsn(self) -> Optional[str]:
        return self._full_dsn

    @property
    def host(self) -> Optional[str]:
        return self._host

    @property
    def port(self) -> Optional[int]:
        return self._port

    @property
    def user(self) -> Optional[str]:
        return self._user

    @property
    def password(self) -> Optional[str]:
        return self._password

    @property
    def db(self) -> Optional[str]:
        return self._db

    @property
    def min_size(self) -> int:
        return self._min_size

    @property
    def max_size(self) -> Optional[int]:
        return self._max_size
