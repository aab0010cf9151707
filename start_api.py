"""
Start TradeSense API Server

Run the TradeSense REST API. Risk defaults are read from TRADESENSE_*
environment variables, optionally loaded from a .env file.
"""

import logging
import os
import sys
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

load_dotenv()

# Ensure logs directory exists
Path("logs").mkdir(exist_ok=True)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout),
        logging.FileHandler('logs/tradesense_api.log')
    ]
)

logger = logging.getLogger(__name__)


def main():
    """Start TradeSense API server"""
    host = os.environ.get("TRADESENSE_API_HOST", "127.0.0.1")
    port = int(os.environ.get("TRADESENSE_API_PORT", "8010"))

    logger.info("=" * 80)
    logger.info("TRADESENSE DECISION API")
    logger.info("=" * 80)
    logger.info(f"Starting server on http://{host}:{port}")
    logger.info(f"Swagger UI: http://{host}:{port}/docs")
    logger.info("=" * 80)

    try:
        uvicorn.run(
            "tradesense.api:app",
            host=host,
            port=port,
            log_level="info",
            reload=False
        )
    except KeyboardInterrupt:
        logger.info("\nShutting down TradeSense API...")
    except Exception as e:
        logger.error(f"Failed to start server: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
