#!/usr/bin/env python3
"""Main entry point for the Toolgate FastAPI backend server."""

import argparse
import logging
import signal
import sys
from typing import Any

import uvicorn

from api.server import app  # noqa: F401 - Used by uvicorn
from config import SERVER_CONFIG

# Configure logging
logging.basicConfig(
    level=logging.DEBUG, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

# Provider SDK transport logs are noisy at DEBUG
logging.getLogger("httpx").setLevel(logging.INFO)
logging.getLogger("httpcore").setLevel(logging.INFO)

logger = logging.getLogger(__name__)


def signal_handler(sig: Any, frame: Any) -> None:
    """Handle shutdown signals gracefully."""
    logger.info("\nShutdown signal received. Cleaning up...")
    sys.exit(0)


def main() -> None:
    """Run the FastAPI server."""
    parser = argparse.ArgumentParser(description="Toolgate Backend Server")
    parser.add_argument(
        "--host",
        type=str,
        default=SERVER_CONFIG["host"],
        help=f"Host to bind to (default: {SERVER_CONFIG['host']})",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=SERVER_CONFIG["port"],
        help=f"Port to run the server on (default: {SERVER_CONFIG['port']})",
    )
    args = parser.parse_args()

    # Register signal handlers
    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    logger.info("Starting Toolgate Backend Server...")
    logger.info(f"Listening on {args.host}:{args.port}")

    uvicorn.run(
        "main:app",
        host=args.host,
        port=args.port,
        reload=False,  # Disable auto-reload for better signal handling
        log_level=SERVER_CONFIG["log_level"],
    )


if __name__ == "__main__":
    main()
