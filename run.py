#!/usr/bin/env python3
"""
Ledger Service Entry Point

Starts the FastAPI server on the configured port (default 3000, PORT overrides).
"""

import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from ledger_service.api import run_server
from ledger_service.config import get_config


if __name__ == "__main__":
    config = get_config()
    port = config.api_port

    print(f"🚀 Ledger API server running on port {port}")
    print(f"📊 Health check: http://localhost:{port}/health")
    print(f"💰 Balance: http://localhost:{port}/balance")
    print(f"📝 Transactions: http://localhost:{port}/transactions")
    print(f"📚 Documentation at: http://localhost:{port}/docs")
    print()

    try:
        run_server(
            host=config.api_host,
            port=port,
            debug=False
        )
    except KeyboardInterrupt:
        print("\n👋 Shutting down Ledger API...")
    except Exception as e:
        print(f"❌ Error starting server: {e}")
        sys.exit(1)
