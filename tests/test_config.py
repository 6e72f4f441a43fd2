"""
Tests for configuration and structured logging
"""

import json
import logging
from datetime import date
from decimal import Decimal

import pytest

from bank_ledger.config import LedgerConfig, get_config, reload_config
from bank_ledger.logging_config import JSONFormatter, TextFormatter, setup_logging, log_action
from bank_ledger.system import LedgerSystem


class TestLedgerConfig:
    """Test environment-based configuration"""

    def test_defaults(self):
        """Test default settings"""
        config = LedgerConfig()

        assert config.bank_name == "AwesomeGIC Bank"
        assert config.api_port == 8090
        assert config.log_format == "json"

    def test_business_rules_not_configurable(self, monkeypatch):
        """Test that precision and the 365-day divisor ignore the environment"""
        monkeypatch.setenv("BANK_LEDGER_INTEREST_DAY_COUNT_BASIS", "0")
        monkeypatch.setenv("BANK_LEDGER_AMOUNT_DECIMAL_PLACES", "3")
        engine = LedgerSystem(config=LedgerConfig()).engine

        rejected = engine.post_transaction(date(2024, 2, 1), "AC001", "D", Decimal('1.001'))
        engine.post_transaction(date(2024, 2, 1), "AC001", "D", Decimal('365.00'))
        engine.post_interest_rule(date(2024, 1, 1), "RULE01", Decimal('10'))
        statement = engine.get_statement("AC001", 2024, 2)

        assert rejected.message == "Amount cannot have more than two decimal places."
        assert statement.ok
        # 365 * 10% * 29 / 365
        assert statement.value.interest == Decimal('2.90')

    def test_environment_override(self, monkeypatch):
        """Test BANK_LEDGER_ prefixed environment variables"""
        monkeypatch.setenv("BANK_LEDGER_API_PORT", "9000")
        monkeypatch.setenv("BANK_LEDGER_LOG_LEVEL", "DEBUG")

        config = LedgerConfig()

        assert config.api_port == 9000
        assert config.log_level == "DEBUG"

    def test_global_instance(self):
        """Test that the global configuration is shared"""
        assert get_config() is get_config()

    def test_reload_picks_up_environment(self, monkeypatch):
        """Test that reload_config re-reads the environment"""
        monkeypatch.setenv("BANK_LEDGER_BANK_NAME", "Test Bank")
        try:
            assert reload_config().bank_name == "Test Bank"
            assert get_config().bank_name == "Test Bank"
        finally:
            monkeypatch.delenv("BANK_LEDGER_BANK_NAME")
            reload_config()


class ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


class TestStructuredLogging:
    """Test JSON log formatting"""

    def test_json_formatter(self):
        """Test that structured fields are emitted and empty ones dropped"""
        record = logging.LogRecord("bank_ledger.engine", logging.INFO, __file__, 1, "posted", (), None)
        record.action = "post_transaction"
        record.extra = {"transaction_id": "20241101-01"}

        entry = json.loads(JSONFormatter().format(record))

        assert entry["level"] == "INFO"
        assert entry["message"] == "posted"
        assert entry["action"] == "post_transaction"
        assert entry["extra"] == {"transaction_id": "20241101-01"}
        assert "resource" not in entry

    def test_setup_logging_replaces_handlers(self):
        """Test that repeated setup does not duplicate handlers"""
        setup_logging("INFO", logger_name="bank_ledger.test_setup")
        logger = setup_logging("DEBUG", logger_name="bank_ledger.test_setup", fmt="text")

        assert len(logger.handlers) == 1
        assert logger.level == logging.DEBUG
        assert isinstance(logger.handlers[0].formatter, TextFormatter)

    def test_text_formatter_appends_fields(self):
        """Test key=value rendering of structured fields"""
        record = logging.LogRecord("bank_ledger.engine", logging.WARNING, __file__, 1, "rejected", (), None)
        record.action = "post_transaction"
        record.resource = "account:AC001"
        record.extra = {"code": "BUSINESS_RULE_VIOLATION"}

        line = TextFormatter().format(record)

        assert line.endswith(
            "WARNING bank_ledger.engine: rejected "
            "[action=post_transaction resource=account:AC001 code=BUSINESS_RULE_VIOLATION]"
        )

    def test_log_action_attaches_fields(self):
        """Test that log_action sets structured attributes on the record"""
        logger = logging.getLogger("bank_ledger.test_action")
        logger.setLevel(logging.INFO)
        handler = ListHandler()
        logger.addHandler(handler)
        try:
            log_action(logger, "warning", "rejected", action="post_transaction",
                       resource="account:AC001", extra={"code": "NOT_FOUND"})
            log_action(logger, "debug", "ignored")
        finally:
            logger.removeHandler(handler)

        assert len(handler.records) == 1
        record = handler.records[0]
        assert record.levelname == "WARNING"
        assert record.resource == "account:AC001"
        assert record.extra == {"code": "NOT_FOUND"}
        assert record.funcName == "test_log_action_attaches_fields"
