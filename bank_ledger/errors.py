"""
Ledger Errors and Operation Results

Typed exception hierarchy for the ledger and the Result wrapper that the
engine returns at its boundary instead of raising for expected conditions.

    LedgerError
    +-- ValidationError
    +-- BusinessRuleViolation
    |   +-- FirstTransactionWithdrawalError
    |   +-- NegativeBalanceError
    +-- AccountNotFoundError
    +-- UnexpectedLedgerError
"""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar


T = TypeVar("T")


class LedgerError(Exception):
    """Base exception for all ledger errors"""

    code: str = "LEDGER_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LedgerError):
    """Malformed or out-of-range request field"""

    code = "VALIDATION_ERROR"


class BusinessRuleViolation(LedgerError):
    """Transaction rejected by an account solvency rule"""

    code = "BUSINESS_RULE_VIOLATION"


class FirstTransactionWithdrawalError(BusinessRuleViolation):
    """The chronologically first transaction of an account is a withdrawal"""

    def __init__(self):
        super().__init__("First transaction cannot be a withdrawal.")


class NegativeBalanceError(BusinessRuleViolation):
    """Replaying the account history would go below zero"""

    def __init__(self, account_id: str):
        super().__init__("Transaction would cause account balance to go negative.")
        self.account_id = account_id


class AccountNotFoundError(LedgerError):
    """Statement requested for an account with no transactions"""

    code = "NOT_FOUND"

    def __init__(self, account_id: str):
        super().__init__(f"Account {account_id} not found.")
        self.account_id = account_id


class UnexpectedLedgerError(LedgerError):
    """Unexpected internal fault caught at the engine boundary"""

    code = "INTERNAL_ERROR"

    def __init__(self, cause: BaseException):
        super().__init__(f"Unexpected error: {cause}")
        self.__cause__ = cause


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Outcome of an engine operation.

    Exactly one of `value` (on success) or `error` (on failure) is meaningful.
    `message` is always human readable.
    """
    ok: bool
    message: str
    value: Optional[T] = None
    error: Optional[LedgerError] = None

    @classmethod
    def success(cls, value: T, message: str = "") -> "Result[T]":
        return cls(ok=True, message=message, value=value)

    @classmethod
    def failure(cls, error: LedgerError) -> "Result[T]":
        return cls(ok=False, message=error.message, error=error)

    @property
    def code(self) -> Optional[str]:
        """Machine-readable error code, None on success"""
        return self.error.code if self.error else None

    def unwrap(self) -> T:
        """Return the value or raise the carried error"""
        if not self.ok:
            raise self.error
        return self.value
