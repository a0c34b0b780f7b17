"""
Ledger Service

A minimal financial ledger: deposits, withdrawals, a running balance and
paginated transaction history behind a JSON-over-HTTP API.
"""

__version__ = "1.0.0"
