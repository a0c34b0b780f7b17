#!/usr/bin/env python3
"""
Example: Using the LedgerClient against a running ledger API

Start the server first (python run.py), then run this script. It walks
through basic operations, summaries and statistics, a simulated transfer and
the error responses the API produces.
"""

import os
import sys
from datetime import datetime

# Add the ledger service module to the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from ledger_service.client import LedgerClient, LedgerAPIError


def basic_operations(client: LedgerClient):
    print("\n1. 🚀 Basic Operations")

    health = client.check_health()
    print(f"   ✅ Health check: {health['message']} ({health['timestamp']})")

    balance = client.get_balance()
    print(f"   💰 Current balance: ${balance['balance']} {balance['currency']}")

    deposit = client.deposit(500, "Salary payment")
    print(f"   📥 Deposit successful: ${deposit['transaction']['amount']}")
    print(f"   📊 New balance: ${deposit['newBalance']}")

    withdrawal = client.withdraw(100, "Grocery shopping")
    print(f"   📤 Withdrawal successful: ${withdrawal['transaction']['amount']}")
    print(f"   📊 New balance: ${withdrawal['newBalance']}")

    transactions = client.get_transactions(limit=5)
    print(f"   📝 Found {transactions['total']} total transactions")
    for index, txn in enumerate(transactions["transactions"], start=1):
        icon = "📥" if txn["type"] == "deposit" else "📤"
        when = datetime.fromisoformat(txn["timestamp"]).strftime("%Y-%m-%d %H:%M:%S")
        print(f"      {index}. {icon} ${txn['amount']} - {txn['description']} ({when})")


def advanced_operations(client: LedgerClient):
    print("\n2. 🔧 Advanced Operations")

    summary = client.get_account_summary(3)
    print(f"   💰 Balance: ${summary['balance']} {summary['currency']}")
    print(f"   📊 Total transactions: {summary['totalTransactions']}")
    print(f"   📝 Recent transactions: {len(summary['recentTransactions'])}")

    stats = client.get_transaction_stats()
    print("   📈 Transaction Statistics:")
    print(f"      Deposits: {stats['depositCount']} (${stats['totalDeposits']:.2f})")
    print(f"      Withdrawals: {stats['withdrawalCount']} (${stats['totalWithdrawals']:.2f})")
    print(f"      Average deposit: ${stats['averageDeposit']:.2f}")
    print(f"      Average withdrawal: ${stats['averageWithdrawal']:.2f}")
    print(f"      Net flow: ${stats['netFlow']:.2f}")

    transfer = client.transfer(50, "Savings")
    print(f"   🔁 Transfer of ${transfer['transferAmount']} done, balance ${transfer['finalBalance']}")

    first = client.get_transactions(limit=1)["transactions"]
    if first:
        details = client.get_transaction(first[0]["id"])["transaction"]
        print(f"   📋 First transaction: {details['type']} ${details['amount']} - {details['description']}")


def error_handling(client: LedgerClient):
    print("\n3. ⚠️ Error Handling")

    try:
        client.deposit(-100, "Invalid deposit")
    except ValueError as e:
        print(f"   ✅ Rejected locally: {e}")

    try:
        client.withdraw(10_000_000, "Large withdrawal")
    except LedgerAPIError as e:
        print(f"   ✅ Rejected by API ({e.status_code}): {e}")

    try:
        client.get_transaction("non-existent-id")
    except LedgerAPIError as e:
        print(f"   ✅ Rejected by API ({e.status_code}): {e}")


def main():
    print("🎯 Ledger Client Examples")
    print("=" * 60)

    with LedgerClient() as client:
        try:
            basic_operations(client)
            advanced_operations(client)
            error_handling(client)
        except LedgerAPIError as e:
            print(f"❌ Error talking to the ledger API: {e}")
            sys.exit(1)

    print("\n🎉 All examples completed!")


if __name__ == "__main__":
    main()
