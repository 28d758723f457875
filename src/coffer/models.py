from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict


@dataclass
class Account:
    id: int
    owner: str
    balance: int
    currency: str
    created_at: datetime


@dataclass
class Entry:
    id: int
    account_id: int
    amount: int
    created_at: datetime


@dataclass
class Transfer:
    id: int
    from_account_id: int
    to_account_id: int
    amount: int
    created_at: datetime


@dataclass(frozen=True)
class TransferParams:
    from_account_id: int
    to_account_id: int
    amount: int


@dataclass
class TransferResult:
    """Everything written by one transfer, as seen at commit time.

    `from_account` and `to_account` follow the direction of the request,
    not the order in which the balances were updated.
    """

    transfer: Transfer
    from_account: Account
    to_account: Account
    from_entry: Entry
    to_entry: Entry

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
