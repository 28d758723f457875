from __future__ import annotations

import logging
from enum import Enum
from typing import Optional, Tuple

from coffer.ledger.executor import LedgerQueries
from coffer.models import Account, TransferParams, TransferResult
from coffer.transaction import IsolationLevel, TransactionCoordinator

logger = logging.getLogger(__name__)


class TransferState(Enum):
    STARTED = "started"
    WRITING_TRANSFER = "writing_transfer"
    WRITING_ENTRIES = "writing_entries"
    UPDATING_BALANCES = "updating_balances"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class TransferTx:
    """Unit of work that moves `amount` between two accounts.

    Writes the transfer, a debit entry, a credit entry and both balance
    updates. The balances are always updated lower account id first, so
    two transfers running in opposite directions over the same pair of
    accounts acquire the row locks in the same order and cannot deadlock.
    """

    def __init__(self, params: TransferParams) -> None:
        self.params = params
        self.state = TransferState.STARTED

    async def run(self, queries: LedgerQueries) -> TransferResult:
        params = self.params

        self.state = TransferState.WRITING_TRANSFER
        transfer = await queries.create_transfer(
            from_account_id=params.from_account_id,
            to_account_id=params.to_account_id,
            amount=params.amount,
        )

        self.state = TransferState.WRITING_ENTRIES
        from_entry = await queries.create_entry(
            account_id=params.from_account_id, amount=-params.amount
        )
        to_entry = await queries.create_entry(
            account_id=params.to_account_id, amount=params.amount
        )

        self.state = TransferState.UPDATING_BALANCES
        if params.from_account_id < params.to_account_id:
            from_account, to_account = await add_money(
                queries,
                params.from_account_id,
                -params.amount,
                params.to_account_id,
                params.amount,
            )
        else:
            to_account, from_account = await add_money(
                queries,
                params.to_account_id,
                params.amount,
                params.from_account_id,
                -params.amount,
            )

        return TransferResult(
            transfer=transfer,
            from_account=from_account,
            to_account=to_account,
            from_entry=from_entry,
            to_entry=to_entry,
        )


async def add_money(
    queries: LedgerQueries,
    account_id1: int,
    amount1: int,
    account_id2: int,
    amount2: int,
) -> Tuple[Account, Account]:
    account1 = await queries.add_account_balance(
        id=account_id1, amount=amount1
    )
    account2 = await queries.add_account_balance(
        id=account_id2, amount=amount2
    )
    return account1, account2


class Store:
    """Ledger accessors plus the transactional transfer operation

    `queries` is pool-scoped and can be used directly for single
    statements. `transfer` runs in its own transaction and is safe to call
    concurrently.
    """

    def __init__(
        self,
        queries: LedgerQueries,
        isolation_level: Optional[IsolationLevel] = None,
        timeout: Optional[float] = None,
        connect_timeout: Optional[float] = None,
    ) -> None:
        self.queries = queries
        self.coordinator = TransactionCoordinator(
            queries,
            isolation_level=isolation_level,
            timeout=timeout,
            connect_timeout=connect_timeout,
        )

    async def transfer(
        self, from_account_id: int, to_account_id: int, amount: int
    ) -> TransferResult:
        return await self.transfer_tx(
            TransferParams(
                from_account_id=from_account_id,
                to_account_id=to_account_id,
                amount=amount,
            )
        )

    async def transfer_tx(self, params: TransferParams) -> TransferResult:
        """Record a transfer and move the funds, all or nothing

        Args:
            params (TransferParams): Source, destination and amount. The
                amount is not validated here.

        Raises:
            ConnectionError: If no transaction could be started
            AccessorError: If any of the writes failed
            CommitError: If the commit was rejected
            TransactionError: If a failed transfer could not be rolled back

        Returns:
            TransferResult: The transfer, both entries and both accounts
        """
        work = TransferTx(params)
        try:
            result = await self.coordinator.execute(work)
        except BaseException as e:
            logger.debug(
                "Transfer %s -> %s of %s rolled back in state %s: %r",
                params.from_account_id,
                params.to_account_id,
                params.amount,
                work.state.value,
                e,
            )
            work.state = TransferState.ROLLED_BACK
            raise
        work.state = TransferState.COMMITTED
        logger.debug(
            "Transfer %s committed: %s -> %s of %s",
            result.transfer.id,
            params.from_account_id,
            params.to_account_id,
            params.amount,
        )
        return result
