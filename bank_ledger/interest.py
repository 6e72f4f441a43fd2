"""
Interest Rule Store Module

Holds time-stamped interest-rate rules keyed by effective date and resolves
the rule in effect on a given day. A rule submitted for an already used date
replaces the earlier rule for that date.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import date
from typing import Dict, List, Optional
import threading

from .models import InterestRule, as_day
from .logging_config import get_logger


class InterestRuleRepository(ABC):
    """Abstract interface for interest rule stores"""

    @abstractmethod
    def upsert(self, rule: InterestRule) -> None:
        """Insert a rule or replace the rule sharing its date"""
        pass

    @abstractmethod
    def all_rules(self) -> List[InterestRule]:
        """All rules ordered ascending by date"""
        pass

    @abstractmethod
    def effective_rule(self, day: date) -> Optional[InterestRule]:
        """Rule with the latest date not after `day`, or None"""
        pass

    @contextmanager
    def atomic(self):
        """Context manager for atomic operations (default no-op)"""
        yield


class InMemoryInterestRuleRepository(InterestRuleRepository):
    """In-memory rule store keyed by effective date"""

    def __init__(self):
        self._rules: Dict[date, InterestRule] = {}
        self._lock = threading.RLock()
        self.logger = get_logger("bank_ledger.interest")

    def upsert(self, rule: InterestRule) -> None:
        with self._lock:
            replaced = self._rules.get(rule.date)
            self._rules[rule.date] = rule
        if replaced:
            self.logger.debug(
                "Replaced interest rule %s on %s with %s",
                replaced.rule_id, rule.date.isoformat(), rule.rule_id
            )

    def all_rules(self) -> List[InterestRule]:
        with self._lock:
            return [self._rules[day] for day in sorted(self._rules)]

    def effective_rule(self, day: date) -> Optional[InterestRule]:
        day = as_day(day)
        with self._lock:
            candidates = [rule_date for rule_date in self._rules if rule_date <= day]
            if not candidates:
                return None
            return self._rules[max(candidates)]

    @contextmanager
    def atomic(self):
        with self._lock:
            yield

    def __len__(self) -> int:
        with self._lock:
            return len(self._rules)
