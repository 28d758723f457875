"""
Transaction demarcation for coffer.
Every unit of work ends in exactly one commit or one rollback.
"""

from .coordinator import Transaction, TransactionCoordinator
from .interfaces import IsolationLevel, TransactionState, UnitOfWork

__all__ = [
    "IsolationLevel",
    "Transaction",
    "TransactionCoordinator",
    "TransactionState",
    "UnitOfWork",
]
