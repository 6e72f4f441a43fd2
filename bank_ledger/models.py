"""
Ledger Entities

Transactions, interest rules and statement rows. Entities are immutable;
dates are calendar days with no time component.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Tuple

from .money import ZERO, to_decimal


class TransactionType(Enum):
    """Types of ledger transactions"""
    DEPOSIT = "D"
    WITHDRAWAL = "W"
    INTEREST = "I"  # Synthesized by statements, never stored

    @classmethod
    def from_code(cls, code: str) -> "TransactionType":
        """Resolve a one-letter code (case-insensitive)"""
        return cls(code.strip().upper())

    @property
    def sign(self) -> int:
        return -1 if self is TransactionType.WITHDRAWAL else 1


def as_day(value) -> date:
    """Normalize a date or datetime to a calendar day"""
    if isinstance(value, datetime):
        return value.date()
    return value


@dataclass(frozen=True)
class Transaction:
    """
    Posted ledger transaction.
    The transaction ID is assigned by the engine, never by the caller.
    """
    date: date
    transaction_id: str
    account_id: str
    type: TransactionType
    amount: Decimal

    def __post_init__(self):
        object.__setattr__(self, 'date', as_day(self.date))
        object.__setattr__(self, 'amount', to_decimal(self.amount))

    @property
    def signed_amount(self) -> Decimal:
        """Effect of this transaction on the account balance"""
        return self.amount * self.type.sign

    @property
    def sort_key(self) -> Tuple[date, str]:
        return (self.date, self.transaction_id)

    def belongs_to(self, account_id: str) -> bool:
        """Case-insensitive account match"""
        return self.account_id.lower() == account_id.strip().lower()


@dataclass(frozen=True)
class InterestRule:
    """Annual interest rate in percent, effective from `date` inclusive"""
    date: date
    rule_id: str
    rate: Decimal

    def __post_init__(self):
        object.__setattr__(self, 'date', as_day(self.date))
        object.__setattr__(self, 'rate', to_decimal(self.rate))


@dataclass(frozen=True)
class StatementRow:
    """One statement line with the balance right after it"""
    date: date
    transaction_id: str
    type: TransactionType
    amount: Decimal
    balance: Decimal

    @classmethod
    def for_transaction(cls, txn: Transaction, balance: Decimal) -> "StatementRow":
        return cls(
            date=txn.date,
            transaction_id=txn.transaction_id,
            type=txn.type,
            amount=txn.amount,
            balance=balance
        )


@dataclass(frozen=True)
class Statement:
    """Monthly account statement"""
    account_id: str
    year: int
    month: int
    opening_balance: Decimal
    rows: Tuple[StatementRow, ...] = field(default_factory=tuple)
    interest: Decimal = ZERO

    @property
    def closing_balance(self) -> Decimal:
        if self.rows:
            return self.rows[-1].balance
        return self.opening_balance

    @property
    def is_empty(self) -> bool:
        return not self.rows
