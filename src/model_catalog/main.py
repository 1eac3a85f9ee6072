"""
Entry point: configure logging, load .env, and serve the catalog API.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler

import uvicorn

from . import __version__
from .api import create_app
from .config import Settings, load_env_file

logger = logging.getLogger(__name__)


def setup_logging(debug: bool = False) -> str:
    """Log to stderr and a rotating file. Returns the log file path."""
    log_dir = os.path.expanduser("~/.model-catalog/logs")
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, "model-catalog.log")

    handlers: list[logging.Handler] = [
        logging.StreamHandler(sys.stderr),
        RotatingFileHandler(
            log_file,
            mode="a",
            encoding="utf-8",
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
        ),
    ]

    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
        force=True,
    )
    return log_file


def main():
    """Main entry point."""
    # .env must be loaded before settings are read
    load_env_file()
    settings = Settings.from_env()

    log_file = setup_logging(settings.debug)
    logger.info(f"Logging to file: {log_file}")
    logger.info(f"Starting model catalog {__version__} on {settings.host}:{settings.port}")

    try:
        uvicorn.run(
            create_app(settings=settings),
            host=settings.host,
            port=settings.port,
            log_level="debug" if settings.debug else "info",
        )
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
