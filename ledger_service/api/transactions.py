"""
Balance and transaction endpoints
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from .dependencies import get_ledger
from .schemas import DepositRequest, WithdrawRequest
from ..ledger import Ledger


router = APIRouter()


@router.get("/balance")
async def get_balance(ledger: Ledger = Depends(get_ledger)):
    """Get the current balance"""
    balance, currency = ledger.get_balance()
    return {"success": True, "balance": balance, "currency": currency}


@router.get("/transactions")
async def list_transactions(
    limit: Optional[int] = Query(None, ge=0),
    offset: Optional[int] = Query(None, ge=0),
    ledger: Ledger = Depends(get_ledger)
):
    """Get transaction history, oldest first"""
    page = ledger.list_transactions(limit=limit, offset=offset)
    return {
        "success": True,
        "transactions": [txn.to_dict() for txn in page.transactions],
        "total": page.total,
        "limit": page.limit,
        "offset": page.offset
    }


@router.get("/transactions/{transaction_id:path}")
async def get_transaction(
    transaction_id: str,
    ledger: Ledger = Depends(get_ledger)
):
    """Get a transaction by ID"""
    transaction = ledger.get_transaction(transaction_id)
    return {"success": True, "transaction": transaction.to_dict()}


@router.post("/deposit", status_code=status.HTTP_201_CREATED)
async def deposit(
    request: Optional[DepositRequest] = None,
    ledger: Ledger = Depends(get_ledger)
):
    """Record a deposit"""
    request = request or DepositRequest()
    transaction, new_balance = ledger.record_deposit(request.amount, request.description)
    return {
        "success": True,
        "transaction": transaction.to_dict(),
        "newBalance": new_balance
    }


@router.post("/withdraw", status_code=status.HTTP_201_CREATED)
async def withdraw(
    request: Optional[WithdrawRequest] = None,
    ledger: Ledger = Depends(get_ledger)
):
    """Record a withdrawal"""
    request = request or WithdrawRequest()
    transaction, new_balance = ledger.record_withdrawal(request.amount, request.description)
    return {
        "success": True,
        "transaction": transaction.to_dict(),
        "newBalance": new_balance
    }
