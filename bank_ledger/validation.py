"""
Request Validation Module

Pydantic request models for the three write/read requests and parsers for
the console's space-separated input lines. Field-level checks only; the
cross-entity business rules belong to the ledger engine.
"""

import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Type, TypeVar

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError
from .models import TransactionType
from .money import ZERO, has_at_most_places


M = TypeVar("M", bound=BaseModel)

HUNDRED = Decimal('100')
MIN_YEAR = 1900
INVALID_FORMAT = "Invalid input format."


def parse_day(value: Any) -> datetime.date:
    """Accept a date, "YYYYMMdd" or ISO "YYYY-MM-DD" """
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if value is None or not str(value).strip():
        raise ValueError("Date is required.")
    text = str(value).strip()
    fmt = "%Y%m%d" if len(text) == 8 and text.isdigit() else "%Y-%m-%d"
    try:
        return datetime.datetime.strptime(text, fmt).date()
    except ValueError:
        raise ValueError("Invalid date. Expected format YYYYMMdd.")


def check_year(year: int, message: str) -> int:
    """Year must lie between 1900 and the current year"""
    if not MIN_YEAR <= year <= datetime.date.today().year:
        raise ValueError(message)
    return year


def parse_decimal(value: Any, message: str) -> Decimal:
    if isinstance(value, float):
        value = str(value)
    try:
        return Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValueError(message)


def _required_text(value: Any, message: str) -> str:
    if value is None or not str(value).strip():
        raise ValueError(message)
    return str(value).strip()


class TransactionRequest(BaseModel):
    """Deposit or withdrawal request"""
    model_config = ConfigDict(frozen=True)

    date: datetime.date
    account_id: str
    type: TransactionType
    amount: Decimal

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, value):
        return parse_day(value)

    @field_validator("date")
    @classmethod
    def _check_year(cls, value: datetime.date):
        check_year(value.year, "Invalid Year. Year must be greater than 1900.")
        return value

    @field_validator("account_id", mode="before")
    @classmethod
    def _check_account(cls, value):
        return _required_text(value, "AccountId cannot be empty.")

    @field_validator("type", mode="before")
    @classmethod
    def _parse_type(cls, value):
        message = "Transaction type must be D (deposit) or W (withdrawal)."
        if isinstance(value, TransactionType):
            txn_type = value
        else:
            try:
                txn_type = TransactionType.from_code(_required_text(value, message))
            except ValueError:
                raise ValueError(message)
        if txn_type is TransactionType.INTEREST:
            raise ValueError(message)
        return txn_type

    @field_validator("amount", mode="before")
    @classmethod
    def _check_amount(cls, value):
        amount = parse_decimal(value, "Amount must be a number.")
        if not amount.is_finite() or amount <= ZERO:
            raise ValueError("Amount must be greater than zero.")
        if not has_at_most_places(amount):
            raise ValueError("Amount cannot have more than two decimal places.")
        return amount


class InterestRuleRequest(BaseModel):
    """Interest rule definition request"""
    model_config = ConfigDict(frozen=True)

    date: datetime.date
    rule_id: str
    rate: Decimal

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, value):
        return parse_day(value)

    @field_validator("date")
    @classmethod
    def _check_year(cls, value: datetime.date):
        check_year(value.year, "Invalid Year. Year must be greater than 1900.")
        return value

    @field_validator("rule_id", mode="before")
    @classmethod
    def _check_rule_id(cls, value):
        return _required_text(value, "RuleId cannot be empty.")

    @field_validator("rate", mode="before")
    @classmethod
    def _check_rate(cls, value):
        rate = parse_decimal(value, "Interest rate must be a number.")
        if not rate.is_finite() or not ZERO < rate < HUNDRED:
            raise ValueError("Interest rate must be greater than 0 and less than 100.")
        return rate


class StatementRequest(BaseModel):
    """Monthly statement request"""
    model_config = ConfigDict(frozen=True)

    account_id: str
    year: int
    month: int

    @field_validator("account_id", mode="before")
    @classmethod
    def _check_account(cls, value):
        return _required_text(value, "AccountId cannot be empty.")

    @field_validator("year")
    @classmethod
    def _check_year(cls, value: int):
        return check_year(value, "Invalid Year")

    @field_validator("month")
    @classmethod
    def _check_month(cls, value: int):
        if not 1 <= value <= 12:
            raise ValueError("Invalid Month")
        return value


def _first_message(exc: PydanticValidationError) -> str:
    """Human readable message of the first failing field"""
    error = exc.errors()[0]
    if error["type"] == "value_error":
        return str(error["ctx"]["error"])
    field = ".".join(str(part) for part in error["loc"]) or "request"
    if error["type"] == "missing":
        return f"{field} is required."
    return f"Invalid {field}: {error['msg']}"


def validate(model_cls: Type[M], data: Mapping[str, Any]) -> M:
    """
    Validate raw request data against a request model.

    Raises:
        ValidationError: With the message of the first failing field
    """
    try:
        return model_cls.model_validate(dict(data))
    except PydanticValidationError as e:
        raise ValidationError(_first_message(e))


def _split(line: str, expected: int) -> list:
    parts = (line or "").split()
    if len(parts) != expected:
        raise ValidationError(INVALID_FORMAT)
    return parts


def parse_transaction_input(line: str) -> TransactionRequest:
    """Parse "<Date YYYYMMdd> <Account> <Type> <Amount>" """
    txn_date, account_id, txn_type, amount = _split(line, 4)
    return validate(TransactionRequest, {
        "date": txn_date,
        "account_id": account_id,
        "type": txn_type,
        "amount": amount
    })


def parse_interest_rule_input(line: str) -> InterestRuleRequest:
    """Parse "<Date YYYYMMdd> <RuleId> <Rate in %>" """
    rule_date, rule_id, rate = _split(line, 3)
    return validate(InterestRuleRequest, {
        "date": rule_date,
        "rule_id": rule_id,
        "rate": rate
    })


def parse_statement_input(line: str) -> StatementRequest:
    """Parse "<Account> <YYYYMM>" """
    account_id, period = _split(line, 2)
    if len(period) != 6 or not period.isdigit():
        raise ValidationError("Invalid period. Expected format YYYYMM.")
    return validate(StatementRequest, {
        "account_id": account_id,
        "year": int(period[:4]),
        "month": int(period[4:])
    })
