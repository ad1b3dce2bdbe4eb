"""
MW_MGR Runner

Entry point for running the API server.
"""
import logging

import uvicorn

from .config import Config

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("mwmgr")


def run():
    """Run the API server"""
    logger.info(f"Starting {Config.APP_NAME} on {Config.API_HOST}:{Config.API_PORT}")

    uvicorn.run(
        "mwmgr.app:app",
        host=Config.API_HOST,
        port=Config.API_PORT,
        reload=Config.DEBUG,
    )


if __name__ == "__main__":
    run()
