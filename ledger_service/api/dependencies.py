"""
Request-scoped dependencies
"""

from fastapi import Request

from ..ledger import Ledger


def get_ledger(request: Request) -> Ledger:
    """Ledger instance owned by the application that received the request"""
    return request.app.state.ledger
