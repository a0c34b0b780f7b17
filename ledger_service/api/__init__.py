"""
Ledger API Application Factory

The application is the composition root: it owns exactly one Ledger and
hands it to request handlers through the get_ledger dependency.
"""

from datetime import datetime, timezone
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config import LedgerConfig, get_config
from ..ledger import Ledger
from ..logging_config import setup_logging
from .errors import register_error_handlers
from .transactions import router as transactions_router


def create_app(
    ledger: Optional[Ledger] = None,
    config: Optional[LedgerConfig] = None
) -> FastAPI:
    """Create and configure the FastAPI application"""
    config = config or get_config()
    setup_logging(config.log_level, "ledger", config.log_format)

    app = FastAPI(
        title="Ledger API",
        description="Deposits, withdrawals, balance and transaction history",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc"
    )
    app.state.ledger = ledger or Ledger(
        currency=config.currency,
        default_page_limit=config.default_page_limit
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(transactions_router, tags=["Ledger"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "success": True,
            "message": "Ledger API is running",
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

    return app


app = create_app()


def run_server(host: str = "0.0.0.0", port: int = 3000, debug: bool = False):
    """Run the FastAPI server"""
    uvicorn.run(
        "ledger_service.api:app",
        host=host,
        port=port,
        reload=debug,
        log_level="info"
    )
