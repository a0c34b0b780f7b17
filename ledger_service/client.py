"""
Ledger API Client Module

REST client for the ledger HTTP API, with convenience helpers for account
summaries, transfers and transaction statistics.
"""

from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from .config import get_config
from .logging_config import get_logger


logger = get_logger("ledger.client")

STATS_PAGE_SIZE = 1000


class LedgerAPIError(Exception):
    """Raised when the API answers with an error or cannot be reached"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class LedgerClient:
    """REST client for the ledger API"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.Client] = None
    ):
        config = get_config()
        self.base_url = (base_url if base_url is not None else config.client_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else config.client_timeout
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(timeout=self.timeout)

    def __enter__(self) -> "LedgerClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def request(self, method: str, endpoint: str, **kwargs) -> Dict[str, Any]:
        """
        Make an HTTP request to the API.

        Returns:
            Decoded JSON body of a successful response

        Raises:
            LedgerAPIError: On transport failure or a non-2xx response
        """
        url = f"{self.base_url}{endpoint}"
        try:
            response = self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Ledger API request {method} {endpoint} failed: {e}")
            raise LedgerAPIError(f"API request failed: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = {}

        if response.is_error:
            message = data.get("error") or f"HTTP {response.status_code}: {response.reason_phrase}"
            logger.warning(f"Ledger API returned {response.status_code} for {method} {endpoint}: {message}")
            raise LedgerAPIError(f"API request failed: {message}", status_code=response.status_code)

        return data

    def check_health(self) -> Dict[str, Any]:
        """Check if the API is running"""
        return self.request("GET", "/health")

    def get_balance(self) -> Dict[str, Any]:
        return self.request("GET", "/balance")

    def get_transactions(self, limit: int = 50, offset: int = 0) -> Dict[str, Any]:
        """Get a page of transaction history"""
        return self.request("GET", "/transactions", params={"limit": limit, "offset": offset})

    def get_transaction(self, transaction_id: str) -> Dict[str, Any]:
        if not transaction_id:
            raise ValueError("Transaction ID is required")
        return self.request("GET", f"/transactions/{quote(transaction_id, safe='')}")

    def deposit(self, amount: float, description: str = "Deposit") -> Dict[str, Any]:
        """Record a deposit; amount must be positive"""
        self._check_amount(amount)
        return self.request("POST", "/deposit", json={"amount": amount, "description": description})

    def withdraw(self, amount: float, description: str = "Withdrawal") -> Dict[str, Any]:
        """Record a withdrawal; amount must be positive"""
        self._check_amount(amount)
        return self.request("POST", "/withdraw", json={"amount": amount, "description": description})

    def get_account_summary(self, transaction_limit: int = 5) -> Dict[str, Any]:
        """Balance plus the first transaction_limit entries of the history"""
        try:
            balance = self.get_balance()
            transactions = self.get_transactions(limit=transaction_limit)
        except LedgerAPIError as e:
            raise LedgerAPIError(f"Failed to get account summary: {e}", e.status_code) from e

        return {
            "success": True,
            "balance": balance["balance"],
            "currency": balance["currency"],
            "recentTransactions": transactions["transactions"],
            "totalTransactions": transactions["total"]
        }

    def transfer(self, amount: float, description: str = "Transfer") -> Dict[str, Any]:
        """
        Simulate a transfer as a withdrawal followed by a deposit of the
        same amount. The two calls are not atomic across the API.
        """
        self._check_amount(amount)

        try:
            withdrawal = self.withdraw(amount, f"Transfer out: {description}")
            deposit = self.deposit(amount, f"Transfer in: {description}")
        except LedgerAPIError as e:
            raise LedgerAPIError(f"Transfer failed: {e}", e.status_code) from e

        return {
            "success": True,
            "transferAmount": amount,
            "description": description,
            "withdrawal": withdrawal["transaction"],
            "deposit": deposit["transaction"],
            "finalBalance": deposit["newBalance"]
        }

    def get_transaction_stats(self) -> Dict[str, Any]:
        """Aggregate statistics over the full history, paging through it"""
        try:
            transactions = self._fetch_all_transactions()
            balance = self.get_balance()
        except LedgerAPIError as e:
            raise LedgerAPIError(f"Failed to get transaction stats: {e}", e.status_code) from e

        deposits = [t for t in transactions if t["type"] == "deposit"]
        withdrawals = [t for t in transactions if t["type"] == "withdrawal"]

        total_deposits = 0.0
        for t in deposits:
            total_deposits += t["amount"]
        total_withdrawals = 0.0
        for t in withdrawals:
            total_withdrawals += t["amount"]

        return {
            "success": True,
            "currentBalance": balance["balance"],
            "totalTransactions": len(transactions),
            "totalDeposits": total_deposits,
            "totalWithdrawals": total_withdrawals,
            "depositCount": len(deposits),
            "withdrawalCount": len(withdrawals),
            "averageDeposit": total_deposits / len(deposits) if deposits else 0,
            "averageWithdrawal": total_withdrawals / len(withdrawals) if withdrawals else 0,
            "netFlow": total_deposits - total_withdrawals
        }

    def close(self):
        """Close the HTTP client if this instance created it"""
        if self._owns_client:
            self._client.close()

    def _fetch_all_transactions(self) -> List[Dict[str, Any]]:
        collected: List[Dict[str, Any]] = []
        offset = 0
        while True:
            page = self.get_transactions(limit=STATS_PAGE_SIZE, offset=offset)
            collected.extend(page["transactions"])
            offset += len(page["transactions"])
            if not page["transactions"] or offset >= page["total"]:
                return collected

    @staticmethod
    def _check_amount(amount: Any) -> None:
        if isinstance(amount, bool) or not isinstance(amount, (int, float)) or amount <= 0:
            raise ValueError("Amount must be a positive number")
