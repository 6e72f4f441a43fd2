"""
Ledger System Wiring

Builds the repositories and the engine in one place so that the console,
the HTTP API and tests share the same construction path.
"""

from typing import Optional

from .config import LedgerConfig, get_config
from .engine import LedgerEngine
from .interest import InterestRuleRepository, InMemoryInterestRuleRepository
from .ledger import TransactionRepository, InMemoryTransactionLedger


class LedgerSystem:
    """Ledger components wired together"""

    def __init__(
        self,
        transactions: Optional[TransactionRepository] = None,
        rules: Optional[InterestRuleRepository] = None,
        config: Optional[LedgerConfig] = None
    ):
        self.config = config if config is not None else get_config()
        self.transactions = transactions if transactions is not None else InMemoryTransactionLedger()
        self.rules = rules if rules is not None else InMemoryInterestRuleRepository()
        self.engine = LedgerEngine(self.transactions, self.rules)
