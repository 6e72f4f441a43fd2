"""
Transaction Ledger Module

Append-only store of posted transactions. Performs no validation: all
business rules are enforced by the ledger engine before `add` is called.

Transactions for an account are always returned in (date, transaction_id)
order. Transaction IDs sort lexicographically in same-day posting order, so
this ordering is deterministic.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import date
from typing import List
import threading

from .models import Transaction, as_day
from .logging_config import get_logger


class TransactionRepository(ABC):
    """Abstract interface for transaction ledgers"""

    @abstractmethod
    def add(self, transaction: Transaction) -> None:
        """Append a transaction"""
        pass

    @abstractmethod
    def transactions_for_account(self, account_id: str) -> List[Transaction]:
        """All transactions of an account ordered by (date, transaction_id)"""
        pass

    @abstractmethod
    def transactions_on_date(self, account_id: str, day: date) -> List[Transaction]:
        """Transactions of an account on exactly `day`"""
        pass

    @contextmanager
    def atomic(self):
        """Context manager for atomic operations (default no-op)"""
        yield


class InMemoryTransactionLedger(TransactionRepository):
    """In-memory transaction ledger"""

    def __init__(self):
        self._transactions: List[Transaction] = []
        self._lock = threading.RLock()
        self.logger = get_logger("bank_ledger.ledger")

    def add(self, transaction: Transaction) -> None:
        with self._lock:
            self._transactions.append(transaction)
        self.logger.debug(
            "Stored transaction %s for account %s",
            transaction.transaction_id, transaction.account_id
        )

    def transactions_for_account(self, account_id: str) -> List[Transaction]:
        with self._lock:
            matching = [t for t in self._transactions if t.belongs_to(account_id)]
        matching.sort(key=lambda t: t.sort_key)
        return matching

    def transactions_on_date(self, account_id: str, day: date) -> List[Transaction]:
        day = as_day(day)
        with self._lock:
            return [
                t for t in self._transactions
                if t.belongs_to(account_id) and t.date == day
            ]

    @contextmanager
    def atomic(self):
        with self._lock:
            yield

    def __len__(self) -> int:
        with self._lock:
            return len(self._transactions)
