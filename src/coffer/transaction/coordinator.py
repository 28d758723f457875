from __future__ import annotations

import asyncio
import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import TYPE_CHECKING, Any, AsyncIterator, Optional, TypeVar
from uuid import uuid4

from coffer.exception import (
    CofferError,
    CommitError,
    ConnectionError,
    TransactionError,
    TransactionTimeoutError,
)

from .interfaces import IsolationLevel, TransactionState, Work

if TYPE_CHECKING:
    from coffer.base.interface import BaseInterface
    from coffer.sql.executor import SQLExecutor

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Transaction:
    """One open transaction on one pooled connection"""

    def __init__(
        self,
        transaction_id: str,
        pool: BaseInterface,
        connection: Any,
        executor: SQLExecutor,
    ) -> None:
        self.transaction_id = transaction_id
        self.pool = pool
        self.connection = connection
        self.executor = executor
        self.state = TransactionState.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.state is TransactionState.ACTIVE

    @property
    def is_committed(self) -> bool:
        return self.state is TransactionState.COMMITTED

    @property
    def is_rolled_back(self) -> bool:
        return self.state is TransactionState.ROLLED_BACK

    async def commit(self) -> None:
        """Commit the transaction

        A rejected or interrupted commit is followed by a rollback so the
        connection goes back to the pool without an open transaction.

        Raises:
            CommitError: If the database rejected the commit
        """
        self._ensure_active()
        try:
            await self.pool.commit(self.connection)
        except Exception as e:
            logger.warning(
                "Transaction %s commit failed: %s", self.transaction_id, e
            )
            rollback_error = await self._discard()
            raise CommitError(
                f"Transaction {self.transaction_id} could not be "
                f"committed: {e}",
                rollback_error=rollback_error,
            ) from e
        except BaseException:
            logger.warning(
                "Transaction %s interrupted during commit", self.transaction_id
            )
            await self._discard()
            raise
        self.state = TransactionState.COMMITTED
        logger.debug("Transaction %s committed", self.transaction_id)

    async def rollback(self, cause: Optional[BaseException] = None) -> None:
        """Roll back the transaction

        Args:
            cause (BaseException, optional): The failure that made the
                rollback necessary. Defaults to `None`.

        Raises:
            TransactionError: If the rollback itself failed. Both `cause`
                and the rollback failure are attached.
        """
        self._ensure_active()
        try:
            await self.pool.rollback(self.connection)
        except Exception as e:
            logger.error(
                "Transaction %s rollback failed: %s (after %r)",
                self.transaction_id,
                e,
                cause,
            )
            raise TransactionError(
                f"Transaction {self.transaction_id} failed with {cause!r} "
                f"and could not be rolled back: {e}",
                cause=cause,
                rollback_error=e,
            ) from e
        finally:
            self.state = TransactionState.ROLLED_BACK
        logger.debug(
            "Transaction %s rolled back after %r", self.transaction_id, cause
        )

    async def _discard(self) -> Optional[BaseException]:
        try:
            await self.pool.rollback(self.connection)
        except Exception as e:
            logger.error(
                "Transaction %s rollback after failed commit failed: %s",
                self.transaction_id,
                e,
            )
            return e
        finally:
            self.state = TransactionState.ROLLED_BACK
        return None

    def _ensure_active(self) -> None:
        if not self.is_active:
            raise TransactionError(
                f"Transaction {self.transaction_id} already "
                f"{self.state.value}"
            )

    def __str__(self) -> str:
        return f"<Transaction {self.transaction_id} ({self.state.value})>"


class TransactionCoordinator:
    """Runs units of work inside a database transaction.

    Every call checks out its own connection from the pool of `executor`,
    so one coordinator can serve any number of concurrent callers. A
    transaction always ends in exactly one commit or one rollback,
    including when the unit of work is cancelled.

    Example:

    ```python
    coordinator = TransactionCoordinator(LedgerQueries(pool))

    async def open_account(queries):
        return await queries.create_account(
            owner="ana", balance=0, currency="EUR"
        )

    account = await coordinator.execute(open_account)
    ```
    """

    def __init__(
        self,
        executor: SQLExecutor,
        isolation_level: Optional[IsolationLevel] = None,
        timeout: Optional[float] = None,
        connect_timeout: Optional[float] = None,
    ) -> None:
        """
        Args:
            executor: Pool-scoped executor. Each transaction runs with a
                copy of it bound to the transaction's connection.
            isolation_level: Isolation level requested from the database.
                The database default is used when `None`.
            timeout: Seconds a unit of work may take before it is
                rolled back.
            connect_timeout: Seconds to wait for a pooled connection.
        """
        if executor.in_transaction or executor.pool is None:
            raise CofferError(
                "TransactionCoordinator needs a pool-scoped executor"
            )
        self._executor = executor
        self._isolation_level = isolation_level
        self._timeout = timeout
        self._connect_timeout = connect_timeout

    @property
    def executor(self) -> SQLExecutor:
        return self._executor

    @property
    def pool(self) -> BaseInterface:
        return self._executor.pool  # type: ignore[return-value]

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[Transaction]:
        """Open a transaction for the duration of the block

        Leaving the block normally commits, leaving it with any exception
        rolls back and re-raises that exception.

        Raises:
            ConnectionError: If no connection could be obtained or the
                transaction could not be started
            CommitError: If the commit was rejected
            TransactionError: If the rollback failed
        """
        transaction_id = f"txn_{uuid4().hex[:8]}"
        pool = self.pool
        async with AsyncExitStack() as stack:
            try:
                connection = await stack.enter_async_context(
                    pool.connection(timeout=self._connect_timeout)
                )
                await pool.begin(connection, self._isolation_level)
            except Exception as e:
                logger.warning(
                    "Transaction %s could not begin on %s: %s",
                    transaction_id,
                    pool,
                    e,
                )
                raise ConnectionError(
                    f"Transaction {transaction_id} could not begin: {e}"
                ) from e

            txn = Transaction(
                transaction_id,
                pool,
                connection,
                self._executor.bind(connection),
            )
            logger.debug("Transaction %s begun on %s", transaction_id, pool)
            try:
                yield txn
            except BaseException as e:
                if txn.is_active:
                    await txn.rollback(e)
                raise
            if txn.is_active:
                await txn.commit()

    async def execute(self, work: Work[T]) -> T:
        """Run a unit of work in its own transaction

        Args:
            work: Either an object with an `async run(executor)` method or
                an async callable taking the executor. It receives an
                executor bound to the open transaction.

        Returns:
            Whatever the unit of work returned, once committed

        Raises:
            TransactionTimeoutError: If the unit of work ran past `timeout`
        """
        run = getattr(work, "run", work)
        async with self.transaction() as txn:
            if self._timeout is None:
                return await run(txn.executor)
            try:
                return await asyncio.wait_for(
                    run(txn.executor), self._timeout
                )
            except asyncio.TimeoutError as e:
                raise TransactionTimeoutError(
                    f"Transaction {txn.transaction_id} timed out after "
                    f"{self._timeout}s",
                    cause=e,
                ) from e
