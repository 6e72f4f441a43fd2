"""
Ledger Engine Module

Orchestrates the transaction ledger and the interest rule store:

- admits deposits and withdrawals, assigning transaction IDs and re-walking
  the account's full history so that no prefix ever goes negative
- admits and replaces interest rules
- generates monthly statements, applying the rule in effect on each day to
  that day's closing balance and crediting simple interest at month end

The engine holds no state of its own. Expected business conditions never
raise out of the public operations; they come back as a failed Result.
"""

from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Optional, TypeVar, Union
import calendar

from .errors import (
    LedgerError, ValidationError, BusinessRuleViolation,
    FirstTransactionWithdrawalError, NegativeBalanceError,
    AccountNotFoundError, UnexpectedLedgerError, Result
)
from .interest import InterestRuleRepository
from .ledger import TransactionRepository
from .logging_config import get_logger, log_action
from .models import (
    Transaction, TransactionType, InterestRule, Statement, StatementRow, as_day
)
from .money import ZERO, Number, to_decimal, has_at_most_places, round_money, format_amount


T = TypeVar("T")

HUNDRED = Decimal('100')
ONE_DAY = timedelta(days=1)
# Simple interest always divides by 365, leap years included
DAY_COUNT_BASIS = Decimal('365')
MAX_DAILY_SEQUENCE = 99


class LedgerEngine:
    """
    Computation core of the ledger. Borrows its two collaborators and
    never stores anything itself.
    """

    def __init__(
        self,
        transactions: TransactionRepository,
        rules: InterestRuleRepository
    ):
        self.transactions = transactions
        self.rules = rules
        self.logger = get_logger("bank_ledger.engine")

    # Public operations

    def post_transaction(
        self,
        txn_date: date,
        account_id: str,
        txn_type: Union[TransactionType, str],
        amount: Number
    ) -> Result[Transaction]:
        """
        Admit a deposit or withdrawal.

        Args:
            txn_date: Calendar day the transaction is effective
            account_id: Owning account (case-insensitive)
            txn_type: TransactionType or its code ("D" / "W")
            amount: Positive amount with at most two fractional digits

        Returns:
            Result carrying the posted Transaction, or the rejection
        """
        result = self._at_boundary(
            "post_transaction",
            f"account:{account_id}",
            lambda: self._admit_transaction(txn_date, account_id, txn_type, amount)
        )
        if result.ok:
            txn = result.value
            log_action(
                self.logger, "info", f"Transaction posted: {txn.transaction_id}",
                action="post_transaction", resource=f"account:{txn.account_id}",
                extra={
                    "transaction_id": txn.transaction_id,
                    "type": txn.type.name.lower(),
                    "amount": format_amount(txn.amount),
                    "date": txn.date.isoformat()
                }
            )
            return Result.success(txn, f"Transaction added successfully: {txn.transaction_id}")
        return result

    def post_interest_rule(
        self,
        rule_date: date,
        rule_id: str,
        rate: Number
    ) -> Result[InterestRule]:
        """
        Admit an interest rule, replacing any rule with the same date.

        Args:
            rule_date: Day the rule becomes effective (inclusive)
            rule_id: Label for the rule
            rate: Annual rate in percent, strictly between 0 and 100
        """
        result = self._at_boundary(
            "post_interest_rule",
            f"interest_rule:{rule_id}",
            lambda: self._admit_interest_rule(rule_date, rule_id, rate)
        )
        if result.ok:
            rule = result.value
            log_action(
                self.logger, "info", f"Interest rule stored: {rule.rule_id}",
                action="post_interest_rule", resource=f"interest_rule:{rule.rule_id}",
                extra={"date": rule.date.isoformat(), "rate": str(rule.rate)}
            )
            return Result.success(rule, "Interest rule added/updated successfully.")
        return result

    def list_interest_rules(self) -> List[InterestRule]:
        """All interest rules ascending by date"""
        return self.rules.all_rules()

    def get_statement(self, account_id: str, year: int, month: int) -> Result[Statement]:
        """
        Generate the statement of an account for one calendar month.

        A failed result with AccountNotFoundError means the account has no
        transactions at all; an account with history only outside the month
        gets a successful result with no rows.
        """
        result = self._at_boundary(
            "get_statement",
            f"account:{account_id}",
            lambda: self._build_statement(account_id, year, month)
        )
        if result.ok:
            statement = result.value
            log_action(
                self.logger, "info", f"Statement generated for {statement.account_id}",
                action="get_statement", resource=f"account:{statement.account_id}",
                extra={
                    "period": f"{year:04d}{month:02d}",
                    "rows": len(statement.rows),
                    "interest": format_amount(statement.interest)
                }
            )
            return Result.success(statement)
        return result

    # Transaction admission

    def _admit_transaction(
        self,
        txn_date: date,
        account_id: str,
        txn_type: Union[TransactionType, str],
        amount: Number
    ) -> Transaction:
        txn_date = self._require_day(txn_date)
        account_id = self._require_text(account_id, "AccountId cannot be empty.")
        txn_type = self._require_posting_type(txn_type)
        amount = self._require_amount(amount)

        with self.transactions.atomic():
            candidate = Transaction(
                date=txn_date,
                transaction_id=self._next_transaction_id(account_id, txn_date),
                account_id=account_id,
                type=txn_type,
                amount=amount
            )

            timeline = self.transactions.transactions_for_account(account_id)
            timeline.append(candidate)
            timeline.sort(key=lambda t: t.sort_key)
            self._check_solvency(account_id, timeline)

            self.transactions.add(candidate)

        return candidate

    def _next_transaction_id(self, account_id: str, txn_date: date) -> str:
        """"<YYYYMMDD>-<NN>" where NN is the 1-based posting order on that day"""
        sequence = len(self.transactions.transactions_on_date(account_id, txn_date)) + 1
        if sequence > MAX_DAILY_SEQUENCE:
            raise BusinessRuleViolation(
                f"Account {account_id} already has {MAX_DAILY_SEQUENCE} transactions "
                f"on {txn_date:%Y%m%d}."
            )
        return f"{txn_date:%Y%m%d}-{sequence:02d}"

    def _check_solvency(self, account_id: str, timeline: Iterable[Transaction]) -> None:
        """
        Replay the whole account in chronological order.

        A backdated transaction can change every later balance, so checking
        only against the latest balance is not enough.

        Raises:
            FirstTransactionWithdrawalError: The earliest transaction is a withdrawal
            NegativeBalanceError: Any running balance drops below zero
        """
        balance = ZERO
        for index, txn in enumerate(timeline):
            if index == 0 and txn.type is TransactionType.WITHDRAWAL:
                raise FirstTransactionWithdrawalError()
            balance += txn.signed_amount
            if balance < ZERO:
                raise NegativeBalanceError(account_id)

    # Interest rule admission

    def _admit_interest_rule(self, rule_date: date, rule_id: str, rate: Number) -> InterestRule:
        rule_date = self._require_day(rule_date)
        rule_id = self._require_text(rule_id, "RuleId cannot be empty.")
        try:
            rate = to_decimal(rate)
        except ValueError:
            raise ValidationError("Interest rate must be a number.")
        if not ZERO < rate < HUNDRED:
            raise ValidationError("Interest rate must be greater than 0 and less than 100.")

        rule = InterestRule(date=rule_date, rule_id=rule_id, rate=rate)
        with self.rules.atomic():
            self.rules.upsert(rule)
        return rule

    # Statement generation

    def _build_statement(self, account_id: str, year: int, month: int) -> Statement:
        account_id = self._require_text(account_id, "AccountId cannot be empty.")
        if not 1 <= month <= 12:
            raise ValidationError("Invalid Month")
        try:
            period_start = date(year, month, 1)
            period_end = date(year, month, calendar.monthrange(year, month)[1])
        except (ValueError, TypeError, OverflowError):
            raise ValidationError("Invalid Year")

        history = self.transactions.transactions_for_account(account_id)
        if not history:
            raise AccountNotFoundError(account_id)

        opening_balance = sum(
            (t.signed_amount for t in history if t.date < period_start), ZERO
        )

        daily: Dict[date, List[Transaction]] = defaultdict(list)
        for txn in sorted(history, key=lambda t: t.sort_key):
            if period_start <= txn.date <= period_end:
                daily[txn.date].append(txn)

        rows: List[StatementRow] = []
        balance = opening_balance
        accrued = ZERO

        day = period_start
        while day <= period_end:
            for txn in daily.get(day, ()):
                balance += txn.signed_amount
                rows.append(StatementRow.for_transaction(txn, balance))

            # Interest for the day is on the end-of-day balance
            rule = self.rules.effective_rule(day)
            if rule is not None:
                accrued += balance * rule.rate / HUNDRED
            day += ONE_DAY

        interest = round_money(accrued / DAY_COUNT_BASIS)
        if interest > ZERO:
            rows.append(StatementRow(
                date=period_end,
                transaction_id="",
                type=TransactionType.INTEREST,
                amount=interest,
                balance=balance + interest
            ))
        else:
            interest = ZERO

        return Statement(
            account_id=history[0].account_id,
            year=year,
            month=month,
            opening_balance=opening_balance,
            rows=tuple(rows),
            interest=interest
        )

    # Re-asserted request checks

    def _require_day(self, value) -> date:
        if not isinstance(value, date):
            raise ValidationError("Date is required.")
        return as_day(value)

    def _require_text(self, value: Optional[str], message: str) -> str:
        if value is None or not str(value).strip():
            raise ValidationError(message)
        return str(value).strip()

    def _require_posting_type(self, txn_type: Union[TransactionType, str]) -> TransactionType:
        message = "Transaction type must be D (deposit) or W (withdrawal)."
        if not isinstance(txn_type, TransactionType):
            try:
                txn_type = TransactionType.from_code(str(txn_type))
            except ValueError:
                raise ValidationError(message)
        if txn_type is TransactionType.INTEREST:
            raise ValidationError(message)
        return txn_type

    def _require_amount(self, amount: Number) -> Decimal:
        try:
            amount = to_decimal(amount)
        except ValueError:
            raise ValidationError("Amount must be a number.")
        if amount <= ZERO:
            raise ValidationError("Amount must be greater than zero.")
        if not has_at_most_places(amount):
            raise ValidationError("Amount cannot have more than two decimal places.")
        return amount

    # Error boundary

    def _at_boundary(self, action: str, resource: str, operation: Callable[[], T]) -> Result[T]:
        """Run an operation, turning every failure into a failed Result"""
        try:
            return Result.success(operation())
        except LedgerError as e:
            log_action(
                self.logger, "warning", f"{action} rejected: {e.message}",
                action=action, resource=resource,
                extra={"code": e.code, "reason": e.message}
            )
            return Result.failure(e)
        except Exception as e:
            self.logger.exception("Unexpected failure in %s for %s", action, resource)
            return Result.failure(UnexpectedLedgerError(e))
