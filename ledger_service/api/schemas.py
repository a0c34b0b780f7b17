"""
Pydantic schemas for API requests
"""

from typing import Any, Optional

from pydantic import BaseModel, Field


class DepositRequest(BaseModel):
    # Validated by the ledger so that every rejection carries the same message
    amount: Any = Field(None, description="Amount to deposit (must be positive)")
    description: Optional[str] = Field(None, description="Defaults to 'Deposit'")


class WithdrawRequest(BaseModel):
    amount: Any = Field(None, description="Amount to withdraw (must be positive)")
    description: Optional[str] = Field(None, description="Defaults to 'Withdrawal'")
