"""
Text Console Module

Menu-driven console over the ledger engine. Reads space-separated request
lines, validates them and renders engine results as text tables.
"""

from typing import Callable, Iterable, Optional

from .config import get_config
from .engine import LedgerEngine
from .errors import ValidationError
from .logging_config import get_logger
from .models import InterestRule, Statement
from .money import format_amount
from .validation import (
    parse_transaction_input, parse_interest_rule_input, parse_statement_input
)


TRANSACTION_PROMPT = (
    "Please enter transaction details in <Date(YYYYMMdd)> <Account> <Type> <Amount> format "
    "(or enter blank to go back to main menu):"
)
INTEREST_RULE_PROMPT = (
    "Please enter interest rules details in <Date(YYYYMMdd)> <RuleId> <Rate in %> format "
    "(or enter blank to go back to main menu):"
)
STATEMENT_PROMPT = (
    "Please enter account and month to generate the statement <Account> <Year><Month>(YYYYMM) "
    "(or enter blank to go back to main menu):"
)


def render_statement(statement: Statement) -> str:
    """Statement as a text table"""
    lines = [
        f"Account: {statement.account_id}",
        "| Date     | Txn Id      | Type | Amount | Balance |"
    ]
    for row in statement.rows:
        lines.append(
            f"| {row.date:%Y%m%d} | {row.transaction_id:<11} | {row.type.value:<4} "
            f"| {format_amount(row.amount):>6} | {format_amount(row.balance):>7} |"
        )
    return "\n".join(lines)


def render_interest_rules(rules: Iterable[InterestRule]) -> str:
    """Interest rules as a text table"""
    lines = ["Interest rules:", "| Date     | RuleId | Rate (%) |"]
    for rule in rules:
        lines.append(f"| {rule.date:%Y%m%d} | {rule.rule_id:<6} | {format_amount(rule.rate):>8} |")
    return "\n".join(lines)


class BankConsole:
    """Interactive menu loop"""

    def __init__(
        self,
        engine: LedgerEngine,
        input_func: Callable[[str], str] = input,
        output: Callable[[str], None] = print,
        bank_name: Optional[str] = None
    ):
        self.engine = engine
        self.input_func = input_func
        self.output = output
        self.bank_name = bank_name or get_config().bank_name
        self.logger = get_logger("bank_ledger.console")

    def run(self) -> None:
        """Show the main menu until the user quits or input ends"""
        actions = {
            "T": self.input_transactions,
            "I": self.define_interest_rules,
            "P": self.print_statement,
        }
        while True:
            self.output(f"Welcome to {self.bank_name}! What would you like to do?")
            self.output("[T] Input transactions")
            self.output("[I] Define interest rules")
            self.output("[P] Print statement")
            self.output("[Q] Quit")
            choice = self._read()
            if choice is None:
                return
            choice = choice.strip().upper()

            if choice == "Q":
                self.output(f"Thank you for banking with {self.bank_name}.\nHave a nice day!")
                return
            action = actions.get(choice)
            if action is None:
                self.output("Invalid option. Please choose again.")
                continue
            action()

    def input_transactions(self) -> None:
        for line in self._lines(TRANSACTION_PROMPT):
            try:
                request = parse_transaction_input(line)
            except ValidationError as e:
                self.output(e.message)
                continue

            result = self.engine.post_transaction(
                request.date, request.account_id, request.type, request.amount
            )
            self.output(result.message)
            if result.ok:
                txn = result.value
                self._show_statement(txn.account_id, txn.date.year, txn.date.month)

    def define_interest_rules(self) -> None:
        for line in self._lines(INTEREST_RULE_PROMPT):
            try:
                request = parse_interest_rule_input(line)
            except ValidationError as e:
                self.output(e.message)
                continue

            result = self.engine.post_interest_rule(request.date, request.rule_id, request.rate)
            self.output(result.message)
            self.output(render_interest_rules(self.engine.list_interest_rules()))

    def print_statement(self) -> None:
        self.output(STATEMENT_PROMPT)
        line = self._read()
        if not line or not line.strip():
            return
        try:
            request = parse_statement_input(line)
        except ValidationError as e:
            self.output(e.message)
            return
        self._show_statement(request.account_id, request.year, request.month)

    def _show_statement(self, account_id: str, year: int, month: int) -> None:
        result = self.engine.get_statement(account_id, year, month)
        if not result.ok:
            self.output(result.message)
        elif result.value.is_empty:
            self.output(f"No transactions for account {account_id} in {year:04d}{month:02d}.")
        else:
            self.output(render_statement(result.value))

    def _lines(self, prompt: str):
        """Yield request lines until a blank line or end of input"""
        while True:
            self.output(prompt)
            line = self._read()
            if not line or not line.strip():
                return
            yield line

    def _read(self) -> Optional[str]:
        try:
            return self.input_func(">")
        except EOFError:
            self.logger.debug("Console input closed")
            return None
