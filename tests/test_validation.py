"""
Test suite for request validation

Tests field-level checks and parsing of console input lines.
"""

import pytest
from decimal import Decimal
from datetime import date

from bank_ledger.config import reload_config
from bank_ledger.errors import ValidationError
from bank_ledger.models import TransactionType
from bank_ledger.validation import (
    TransactionRequest, InterestRuleRequest, StatementRequest, validate,
    parse_transaction_input, parse_interest_rule_input, parse_statement_input, parse_day
)


class TestParseDay:
    """Test date parsing"""

    def test_compact_and_iso_formats(self):
        """Test both accepted formats"""
        assert parse_day("20241101") == date(2024, 11, 1)
        assert parse_day("2024-11-01") == date(2024, 11, 1)

    @pytest.mark.parametrize("value", ["20241301", "2024111", "yesterday"])
    def test_invalid_dates(self, value):
        """Test rejection of malformed dates"""
        with pytest.raises(ValueError, match="Invalid date"):
            parse_day(value)

    def test_missing_date(self):
        """Test rejection of an empty date"""
        with pytest.raises(ValueError, match="Date is required"):
            parse_day("  ")


class TestTransactionRequest:
    """Test transaction request validation"""

    def test_valid_request(self):
        """Test a complete valid request"""
        request = validate(TransactionRequest, {
            "date": "20241101", "account_id": " AC001 ", "type": "w", "amount": "100.50"
        })

        assert request.date == date(2024, 11, 1)
        assert request.account_id == "AC001"
        assert request.type is TransactionType.WITHDRAWAL
        assert request.amount == Decimal('100.50')

    @pytest.mark.parametrize("field, value, message", [
        ("type", "Y", "Transaction type must be D (deposit) or W (withdrawal)."),
        ("type", "I", "Transaction type must be D (deposit) or W (withdrawal)."),
        ("amount", "0", "Amount must be greater than zero."),
        ("amount", "-1", "Amount must be greater than zero."),
        ("amount", "1.001", "Amount cannot have more than two decimal places."),
        ("amount", "ten", "Amount must be a number."),
        ("account_id", "", "AccountId cannot be empty."),
        ("date", "18991231", "Invalid Year. Year must be greater than 1900."),
    ])
    def test_invalid_fields(self, field, value, message):
        """Test each field-level rule and its message"""
        data = {"date": "20241101", "account_id": "AC001", "type": "D", "amount": "100"}
        data[field] = value

        with pytest.raises(ValidationError) as exc_info:
            validate(TransactionRequest, data)

        assert exc_info.value.message == message
        assert exc_info.value.code == "VALIDATION_ERROR"

    def test_future_year_rejected(self):
        """Test that years after the current one are rejected"""
        next_year = date.today().year + 1

        with pytest.raises(ValidationError, match="Invalid Year"):
            validate(TransactionRequest, {
                "date": f"{next_year}0101", "account_id": "AC001", "type": "D", "amount": "1"
            })

    def test_limits_ignore_environment(self, monkeypatch):
        """Test that the year floor and precision do not follow environment settings"""
        monkeypatch.setenv("BANK_LEDGER_MIN_YEAR", "1800")
        monkeypatch.setenv("BANK_LEDGER_AMOUNT_DECIMAL_PLACES", "3")
        reload_config()
        try:
            with pytest.raises(ValidationError, match="Invalid Year"):
                parse_transaction_input("18991231 AC001 D 10.00")
            with pytest.raises(ValidationError, match="more than two decimal places"):
                parse_transaction_input("20240101 AC001 D 1.001")
        finally:
            monkeypatch.delenv("BANK_LEDGER_MIN_YEAR")
            monkeypatch.delenv("BANK_LEDGER_AMOUNT_DECIMAL_PLACES")
            reload_config()

    def test_missing_field(self):
        """Test a missing field"""
        with pytest.raises(ValidationError, match="amount is required"):
            validate(TransactionRequest, {"date": "20241101", "account_id": "AC001", "type": "D"})


class TestInterestRuleRequest:
    """Test interest rule request validation"""

    def test_valid_request(self):
        """Test a valid rule"""
        request = validate(InterestRuleRequest, {"date": "20240615", "rule_id": "RULE03", "rate": "2.20"})

        assert request.rate == Decimal('2.20')
        assert request.rule_id == "RULE03"

    @pytest.mark.parametrize("rate", ["0", "100", "-3", "100.5"])
    def test_rate_bounds(self, rate):
        """Test that the rate must be strictly between 0 and 100"""
        with pytest.raises(ValidationError) as exc_info:
            validate(InterestRuleRequest, {"date": "20240615", "rule_id": "RULE03", "rate": rate})

        assert exc_info.value.message == "Interest rate must be greater than 0 and less than 100."

    def test_empty_rule_id(self):
        """Test that a rule id is required"""
        with pytest.raises(ValidationError, match="RuleId cannot be empty."):
            validate(InterestRuleRequest, {"date": "20240615", "rule_id": " ", "rate": "1"})


class TestStatementRequest:
    """Test statement request validation"""

    def test_valid_request(self):
        """Test a valid statement request"""
        request = validate(StatementRequest, {"account_id": "AC001", "year": 2024, "month": 11})

        assert (request.account_id, request.year, request.month) == ("AC001", 2024, 11)

    @pytest.mark.parametrize("year, month, message", [
        (2024, 13, "Invalid Month"),
        (2024, 0, "Invalid Month"),
        (1800, 1, "Invalid Year"),
    ])
    def test_invalid_period(self, year, month, message):
        """Test period range checks"""
        with pytest.raises(ValidationError) as exc_info:
            validate(StatementRequest, {"account_id": "AC001", "year": year, "month": month})

        assert exc_info.value.message == message


class TestInputLines:
    """Test console line parsing"""

    def test_transaction_line(self):
        """Test a transaction input line"""
        request = parse_transaction_input("20230626 AC001 W 20.00")

        assert request.date == date(2023, 6, 26)
        assert request.type is TransactionType.WITHDRAWAL
        assert request.amount == Decimal('20.00')

    def test_interest_rule_line(self):
        """Test an interest rule input line"""
        request = parse_interest_rule_input("20230615 RULE03 2.20")

        assert request.rule_id == "RULE03"
        assert request.rate == Decimal('2.20')

    def test_statement_line(self):
        """Test a statement input line"""
        request = parse_statement_input("AC001 202306")

        assert (request.account_id, request.year, request.month) == ("AC001", 2023, 6)

    @pytest.mark.parametrize("parser, line", [
        (parse_transaction_input, "20230626 AC001 W"),
        (parse_transaction_input, "20230626 AC001 W 20.00 extra"),
        (parse_interest_rule_input, "20230615 RULE03"),
        (parse_statement_input, "AC001"),
    ])
    def test_wrong_field_count(self, parser, line):
        """Test that lines with the wrong number of fields are rejected"""
        with pytest.raises(ValidationError, match="Invalid input format."):
            parser(line)

    def test_statement_period_format(self):
        """Test that the period must be YYYYMM"""
        with pytest.raises(ValidationError, match="Expected format YYYYMM"):
            parse_statement_input("AC001 2023-6")
