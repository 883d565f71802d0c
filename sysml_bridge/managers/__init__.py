"""
Manager components for sysml-bridge.
"""

from .history_service import ChangeKind, HistoryEntry, LocalExchangeHistoryService
from .session_service import SessionHook, SessionService
from .transaction_service import (
    TransactionService,
    Transaction,
    TransactionStatus,
    CommitResult,
    # Exceptions
    TransactionError,
    TransactionAlreadyActive,
    TransactionNotActive,
)

__all__ = [
    'TransactionService',
    'Transaction',
    'TransactionStatus',
    'CommitResult',
    'SessionService',
    'SessionHook',
    'LocalExchangeHistoryService',
    'HistoryEntry',
    'ChangeKind',
    # Exceptions
    'TransactionError',
    'TransactionAlreadyActive',
    'TransactionNotActive',
]
