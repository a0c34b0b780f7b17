"""
Ledger Engine

Core bookkeeping for a single balance: deposits and withdrawals are recorded
as immutable transactions in an append-only history. The running balance is
adjusted by each recording, and a withdrawal that would overdraw it is
rejected before any state changes.
"""

import math
import re
import threading
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from .logging_config import get_logger, log_action


DEFAULT_CURRENCY = "USD"
DEFAULT_PAGE_LIMIT = 50

# Plain decimal with optional exponent; no underscores, hex or inf/nan words
AMOUNT_PATTERN = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?", re.ASCII)


class LedgerError(ValueError):
    """Base class for ledger validation failures"""


class InvalidAmountError(LedgerError):
    """Amount missing, non-numeric, zero, negative or not finite"""

    def __init__(self, message: str = "Valid amount is required (must be a positive number)"):
        super().__init__(message)


class InsufficientFundsError(LedgerError):
    """Withdrawal amount exceeds the current balance"""

    def __init__(self, requested: float, available: float):
        super().__init__("Insufficient funds")
        self.requested = requested
        self.available = available


class InvalidArgumentError(LedgerError):
    """Required argument missing or malformed"""


class TransactionNotFoundError(LedgerError):
    """No transaction with the given ID"""

    def __init__(self, transaction_id: str):
        super().__init__("Transaction not found")
        self.transaction_id = transaction_id


class TransactionType(Enum):
    """Kinds of ledger transactions"""
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"

    @property
    def default_description(self) -> str:
        return "Deposit" if self is TransactionType.DEPOSIT else "Withdrawal"


@dataclass(frozen=True)
class Transaction:
    """
    Immutable record of a single deposit or withdrawal
    """
    id: str
    transaction_type: TransactionType
    amount: float
    description: str
    timestamp: datetime

    @property
    def is_deposit(self) -> bool:
        return self.transaction_type is TransactionType.DEPOSIT

    def to_dict(self) -> Dict[str, Any]:
        """Wire representation used by the HTTP API"""
        return {
            "id": self.id,
            "type": self.transaction_type.value,
            "amount": self.amount,
            "description": self.description,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class TransactionPage:
    """A pagination window over the transaction history"""
    transactions: List[Transaction]
    total: int
    limit: int
    offset: int


@dataclass(frozen=True)
class LedgerStats:
    """Aggregates derived from the full transaction history"""
    total_deposits: float
    total_withdrawals: float
    deposit_count: int
    withdrawal_count: int
    average_deposit: float
    average_withdrawal: float
    net_flow: float
    total_transactions: int
    current_balance: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "currentBalance": self.current_balance,
            "totalTransactions": self.total_transactions,
            "totalDeposits": self.total_deposits,
            "totalWithdrawals": self.total_withdrawals,
            "depositCount": self.deposit_count,
            "withdrawalCount": self.withdrawal_count,
            "averageDeposit": self.average_deposit,
            "averageWithdrawal": self.average_withdrawal,
            "netFlow": self.net_flow,
        }


def parse_amount(value: Any) -> float:
    """
    Parse and validate a transaction amount.

    Accepts ints, floats and plain decimal strings (optional exponent).
    Booleans, empty values, other string forms such as "1_000" or "0x10",
    NaN, infinities, zero and negatives are rejected.

    Raises:
        InvalidAmountError: If the value is not a finite positive number
    """
    if value is None or isinstance(value, bool):
        raise InvalidAmountError()

    if isinstance(value, str):
        value = value.strip()
        if not AMOUNT_PATTERN.fullmatch(value):
            raise InvalidAmountError()

    if not isinstance(value, (int, float, str)):
        raise InvalidAmountError()

    try:
        amount = float(value)
    except (TypeError, ValueError, OverflowError):
        raise InvalidAmountError()

    if not math.isfinite(amount) or amount <= 0:
        raise InvalidAmountError()

    return amount


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Ledger:
    """
    In-process ledger owning a balance and an append-only transaction history.

    All public operations are serialized through a single re-entrant lock, so
    the withdrawal balance check and its mutation form one atomic step and
    readers never observe a half-applied recording.
    """

    def __init__(
        self,
        currency: str = DEFAULT_CURRENCY,
        default_page_limit: int = DEFAULT_PAGE_LIMIT,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.currency = currency
        self.default_page_limit = default_page_limit
        self._clock = clock or _utc_now
        self._lock = threading.RLock()
        self._transactions: List[Transaction] = []
        self._index: Dict[str, Transaction] = {}
        self._balance = 0.0
        self.logger = get_logger("ledger.core")

    @property
    def balance(self) -> float:
        with self._lock:
            return self._balance

    def record_deposit(
        self,
        amount: Any,
        description: Optional[str] = None
    ) -> Tuple[Transaction, float]:
        """
        Record a deposit.

        Args:
            amount: Amount to deposit (must be a finite positive number)
            description: Optional free text, defaults to "Deposit"

        Returns:
            Tuple of (created Transaction, resulting balance)

        Raises:
            InvalidAmountError: If the amount is invalid
        """
        value = parse_amount(amount)

        with self._lock:
            transaction = self._append(TransactionType.DEPOSIT, value, description)
            self._balance += value
            new_balance = self._balance

        log_action(
            self.logger, "info", "Deposit recorded",
            action="deposit", resource=transaction.id,
            extra={"amount": value, "balance": new_balance}
        )
        return transaction, new_balance

    def record_withdrawal(
        self,
        amount: Any,
        description: Optional[str] = None
    ) -> Tuple[Transaction, float]:
        """
        Record a withdrawal.

        Args:
            amount: Amount to withdraw (must be a finite positive number)
            description: Optional free text, defaults to "Withdrawal"

        Returns:
            Tuple of (created Transaction, resulting balance)

        Raises:
            InvalidAmountError: If the amount is invalid
            InsufficientFundsError: If the amount exceeds the current balance
        """
        value = parse_amount(amount)

        with self._lock:
            available = self._balance
            if value > available:
                log_action(
                    self.logger, "warning", "Withdrawal rejected: insufficient funds",
                    action="withdrawal_rejected",
                    extra={"amount": value, "balance": available}
                )
                raise InsufficientFundsError(value, available)

            transaction = self._append(TransactionType.WITHDRAWAL, value, description)
            # value <= balance, so the float difference cannot go below zero
            self._balance -= value
            new_balance = self._balance

        log_action(
            self.logger, "info", "Withdrawal recorded",
            action="withdrawal", resource=transaction.id,
            extra={"amount": value, "balance": new_balance}
        )
        return transaction, new_balance

    def get_balance(self) -> Tuple[float, str]:
        """Return (balance, currency)"""
        return self.balance, self.currency

    def list_transactions(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None
    ) -> TransactionPage:
        """
        Return a window of the history in insertion order (oldest first).

        An offset past the end yields an empty page. Negative values are
        rejected rather than clamped.

        Raises:
            InvalidArgumentError: If limit or offset is negative or not an integer
        """
        if limit is None:
            limit = self.default_page_limit
        if offset is None:
            offset = 0

        for name, value in (("limit", limit), ("offset", offset)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidArgumentError(f"{name} must be an integer")
            if value < 0:
                raise InvalidArgumentError(f"{name} must be non-negative")

        with self._lock:
            window = self._transactions[offset:offset + limit]
            total = len(self._transactions)

        return TransactionPage(transactions=window, total=total, limit=limit, offset=offset)

    def get_transaction(self, transaction_id: Optional[str]) -> Transaction:
        """
        Look up a transaction by ID.

        Raises:
            InvalidArgumentError: If the ID is empty
            TransactionNotFoundError: If no transaction has that ID
        """
        if not transaction_id:
            raise InvalidArgumentError("Transaction ID is required")

        with self._lock:
            transaction = self._index.get(transaction_id)

        if transaction is None:
            raise TransactionNotFoundError(transaction_id)
        return transaction

    def get_stats(self) -> LedgerStats:
        """Compute aggregates over the full history; nothing is cached"""
        with self._lock:
            transactions = list(self._transactions)
            balance = self._balance

        total_deposits = 0.0
        total_withdrawals = 0.0
        deposit_count = 0
        withdrawal_count = 0

        # Plain left fold in insertion order
        for transaction in transactions:
            if transaction.is_deposit:
                total_deposits += transaction.amount
                deposit_count += 1
            else:
                total_withdrawals += transaction.amount
                withdrawal_count += 1

        return LedgerStats(
            total_deposits=total_deposits,
            total_withdrawals=total_withdrawals,
            deposit_count=deposit_count,
            withdrawal_count=withdrawal_count,
            average_deposit=total_deposits / deposit_count if deposit_count else 0.0,
            average_withdrawal=total_withdrawals / withdrawal_count if withdrawal_count else 0.0,
            net_flow=total_deposits - total_withdrawals,
            total_transactions=len(transactions),
            current_balance=balance
        )

    def __len__(self) -> int:
        with self._lock:
            return len(self._transactions)

    def _append(
        self,
        transaction_type: TransactionType,
        amount: float,
        description: Optional[str]
    ) -> Transaction:
        """Create and append a transaction; caller must hold the lock"""
        timestamp = self._clock()
        if self._transactions and timestamp < self._transactions[-1].timestamp:
            timestamp = self._transactions[-1].timestamp

        transaction = Transaction(
            id=str(uuid.uuid4()),
            transaction_type=transaction_type,
            amount=amount,
            description=description if description is not None else transaction_type.default_description,
            timestamp=timestamp
        )

        self._transactions.append(transaction)
        self._index[transaction.id] = transaction
        return transaction
