from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Awaitable, Callable, Protocol, TypeVar, Union

if TYPE_CHECKING:
    from coffer.sql.executor import SQLExecutor

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


class IsolationLevel(Enum):
    """SQL transaction isolation levels"""

    READ_UNCOMMITTED = "READ UNCOMMITTED"
    READ_COMMITTED = "READ COMMITTED"
    REPEATABLE_READ = "REPEATABLE READ"
    SERIALIZABLE = "SERIALIZABLE"


class TransactionState(Enum):
    """Transaction state machine states"""

    ACTIVE = "active"  # Transaction has begun
    COMMITTED = "committed"  # Transaction committed successfully
    ROLLED_BACK = "rolled_back"  # Transaction was rolled back


class UnitOfWork(Protocol[T_co]):
    """Work that must either fully commit or fully roll back.

    `run` receives an executor bound to the open transaction. Raising
    anything from it rolls the transaction back.
    """

    async def run(self, executor: SQLExecutor) -> T_co: ...


Work = Union[UnitOfWork[T], Callable[["SQLExecutor"], Awaitable[T]]]
