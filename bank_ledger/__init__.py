"""
Bank Ledger

A small banking ledger that records deposits and withdrawals per account,
keeps time-varying interest rules and produces monthly statements with
running balances and a month-end interest credit. All money is Decimal.
"""

__version__ = "1.0.0"
